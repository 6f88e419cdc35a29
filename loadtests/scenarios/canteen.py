"""Canteen load test scenarios.

``ClientJourney`` fills a cart, checks out and polls its active orders the
way a client dashboard does. ``KitchenStaffUser`` enters walk-in orders and
walks queued orders through the status machine.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import VENUES, cart_data, direct_order_data, user_id
from loadtests.helpers import error_detail

# Staff move orders one step at a time along the happy path
_NEXT_STATUS = {"pending": "preparing", "preparing": "ready", "ready": "completed"}


class ClientJourney(SequentialTaskSet):
    """Fill Cart -> Refill Cart -> Checkout -> Poll Active Orders -> History."""

    def on_start(self):
        self.user_id = user_id()
        self.venue = random.choice(VENUES)
        self.cart_id = None
        self.headers = {"X-User-Id": self.user_id}

    @task
    def fill_cart(self):
        with self.client.put(
            "/cart",
            json=cart_data(self.venue),
            headers=self.headers,
            catch_response=True,
            name="PUT /cart",
        ) as resp:
            if resp.status_code == 200:
                self.cart_id = resp.json()["id"]
            else:
                resp.failure(f"Fill cart failed: {resp.status_code} - {error_detail(resp)}")
                self.interrupt()

    @task
    def refill_cart(self):
        with self.client.put(
            "/cart",
            json=cart_data(self.venue),
            headers=self.headers,
            catch_response=True,
            name="PUT /cart",
        ) as resp:
            if resp.status_code != 200 or resp.json()["id"] != self.cart_id:
                resp.failure(f"Refill cart failed: {resp.status_code} - {error_detail(resp)}")

    @task
    def checkout(self):
        with self.client.post(
            f"/cart/{self.cart_id}/checkout",
            json={"venue": self.venue},
            headers=self.headers,
            catch_response=True,
            name="POST /cart/{id}/checkout",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Checkout failed: {resp.status_code} - {error_detail(resp)}")
                self.interrupt()

    @task(3)
    def poll_active_orders(self):
        self.client.get("/orders/active", headers=self.headers, name="GET /orders/active")

    @task
    def history(self):
        self.client.get("/orders/history", headers=self.headers, name="GET /orders/history")

    @task
    def done(self):
        self.interrupt()


class ClientUser(HttpUser):
    wait_time = between(1, 3)
    tasks = [ClientJourney]


class KitchenStaffUser(HttpUser):
    wait_time = between(0.5, 2)

    def on_start(self):
        self.venue = random.choice(VENUES)

    @task(1)
    def enter_walk_in_order(self):
        with self.client.post(
            "/orders",
            json=direct_order_data(self.venue),
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Walk-in order failed: {resp.status_code} - {error_detail(resp)}")

    @task(3)
    def advance_queue(self):
        resp = self.client.get(f"/venues/{self.venue}/queue", name="GET /venues/{venue}/queue")
        if resp.status_code != 200:
            return
        movable = [o for o in resp.json() if o["status"] in _NEXT_STATUS]
        if not movable:
            return
        order = random.choice(movable)
        with self.client.put(
            f"/orders/{order['id']}/status",
            json={"status": _NEXT_STATUS[order["status"]]},
            catch_response=True,
            name="PUT /orders/{id}/status",
        ) as resp:
            # Another staff user may have moved it first
            if resp.status_code == 400:
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"Status change failed: {resp.status_code} - {error_detail(resp)}")
