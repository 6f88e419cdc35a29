"""Protean Engine runner for the canteen domain.

Only needed when ``event_processing`` is ``async`` (the ``production``
overlay): the Engine drains the outbox and drives the Order event handlers,
including the change feed, from the broker.

Usage:
    PROTEAN_ENV=production python src/server.py
    PROTEAN_ENV=production python src/server.py --test-mode
"""

import argparse
import asyncio

from protean.server.engine import Engine

from canteen.domain import canteen
from canteen.utils.logging import configure_logging


async def run(test_mode=False):
    canteen.init()
    engine = Engine(canteen, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Canteen Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    configure_logging()
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
