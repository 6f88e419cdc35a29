"""Canteen database management CLI.

Creates and drops the tables backing orders and venue sequences. Only SQL
providers are touched; with the default in-memory configuration both
commands are no-ops.

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db
    PROTEAN_ENV=production python src/manage.py drop-db
"""

import argparse
import sys


def setup_database():
    from canteen.domain import canteen
    from canteen.utils.db import setup_db

    print("Initializing canteen domain...")
    canteen.init()
    created = setup_db(canteen)
    if created:
        print(f"  schema ready on: {', '.join(created)}")
    else:
        print("  no SQL provider configured, nothing to create.")
    print("Done.")


def drop_database():
    from canteen.domain import canteen
    from canteen.utils.db import drop_db

    print("Initializing canteen domain...")
    canteen.init()
    dropped = drop_db(canteen)
    if dropped:
        print(f"  schema dropped on: {', '.join(dropped)}")
    else:
        print("  no SQL provider configured, nothing to drop.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Canteen database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
