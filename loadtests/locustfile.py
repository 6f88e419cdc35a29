"""Canteen load testing entry point.

Usage:
    # Web UI against a local server:
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Headless, clients only:
    locust -f loadtests/locustfile.py ClientUser --headless -u 50 -r 5 -t 120s
"""

import logging
import time

from locust import events

from loadtests.helpers import error_detail
from loadtests.scenarios.canteen import ClientUser, KitchenStaffUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log the API's error message for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, error_detail(response))


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
