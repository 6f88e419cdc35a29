"""Faker-based payloads for the canteen load test scenarios.

Payloads match the API's Pydantic request schemas and keep every cart to
a single venue so checkout does not fail on mixed items.
"""

import random
import uuid

from faker import Faker

fake = Faker()

VENUES = ("medical", "bitbites")

MENU = {
    "medical": [
        ("med-chai", "Masala Chai", 20.0),
        ("med-samosa", "Samosa", 15.0),
        ("med-thali", "Veg Thali", 90.0),
        ("med-coffee", "Filter Coffee", 25.0),
    ],
    "bitbites": [
        ("bit-wrap", "Paneer Wrap", 70.0),
        ("bit-fries", "Peri Peri Fries", 60.0),
        ("bit-shake", "Cold Coffee", 55.0),
        ("bit-burger", "Veg Burger", 80.0),
    ],
}


def user_id() -> str:
    return f"user-lt-{uuid.uuid4().hex[:8]}"


def client_name() -> str:
    return fake.first_name()[:255]


def line_items(venue: str, count: int | None = None) -> list[dict]:
    """Pick ``count`` distinct menu entries from one venue."""
    count = count or random.randint(1, 3)
    picks = random.sample(MENU[venue], k=min(count, len(MENU[venue])))
    return [
        {
            "product_id": product_id,
            "name": name,
            "price": price,
            "quantity": random.randint(1, 3),
            "venue": venue,
        }
        for product_id, name, price in picks
    ]


def cart_data(venue: str) -> dict:
    return {"items": line_items(venue), "client_name": client_name()}


def direct_order_data(venue: str | None = None) -> dict:
    venue = venue or random.choice(VENUES)
    return {
        "items": line_items(venue),
        "venue": venue,
        "client_name": client_name(),
        "client_phone": fake.msisdn()[:12],
        "table_number": str(random.randint(1, 40)),
    }
