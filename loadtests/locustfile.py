"""Stockflow Load Testing: Locust entry point.

Discovers all user classes from the scenarios package.
Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Checkout journeys only:
    locust -f loadtests/locustfile.py OrderingUser

    # Buyers racing for scarce stock, headless:
    locust -f loadtests/locustfile.py ScarceStockUser --headless \
           -u 50 -r 10 -t 120s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.contention import ScarceStockUser  # noqa: F401
from loadtests.scenarios.ordering import OrderingUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the low stock report so oversold products stand out."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/reports/low-stock", timeout=5)
        rows = resp.json().get("products", [])
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch low stock report: {e}\n")
        return
    print(f"\n[LOADTEST] {len(rows)} products at or below their reorder threshold")
    for row in rows[:20]:
        print(f"  {row['name']}: {row['quantity']} (threshold {row['reorder_threshold']})")
    print()
