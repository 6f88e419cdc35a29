"""Integration tests for the Canteen API endpoints via TestClient."""

import pytest
from canteen.api import cart_router, order_router, register_error_handlers, venue_router
from canteen.order.order import OrderStatus
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain

MEDICAL_ITEMS = [
    {"product_id": "med-chai", "name": "Masala Chai", "price": 20.0, "quantity": 2, "venue": "medical"},
]
BITBITES_ITEMS = [
    {"product_id": "bit-wrap", "name": "Paneer Wrap", "price": 70.0, "quantity": 1, "venue": "bitbites"},
]


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(venue_router)
    register_error_handlers(app)
    return TestClient(app)


def _headers(user="user-api-001"):
    return {"X-User-Id": user}


def _fill_cart(client, items=None, user="user-api-001"):
    response = client.put(
        "/cart",
        json={"items": items or MEDICAL_ITEMS, "client_name": "Asha"},
        headers=_headers(user),
    )
    assert response.status_code == 200
    return response.json()


def _place(client, venue="medical", items=None, user="user-api-001"):
    cart = _fill_cart(client, items or (MEDICAL_ITEMS if venue == "medical" else BITBITES_ITEMS), user)
    response = client.post(f"/cart/{cart['id']}/checkout", json={"venue": venue}, headers=_headers(user))
    assert response.status_code == 200
    return response.json()


class TestAuthentication:
    @pytest.mark.parametrize(
        "method,path",
        [("get", "/cart"), ("get", "/orders/active"), ("get", "/orders/history")],
    )
    def test_missing_user_header_is_401(self, client, method, path):
        response = getattr(client, method)(path)
        assert response.status_code == 401
        assert "owner" in response.json()["error"]

    def test_put_cart_without_user_is_401(self, client):
        response = client.put("/cart", json={"items": MEDICAL_ITEMS})
        assert response.status_code == 401


class TestCartEndpoints:
    def test_empty_cart(self, client):
        response = client.get("/cart", headers=_headers())
        assert response.status_code == 200
        assert response.json() == {"cart": None}

    def test_put_then_get(self, client):
        written = _fill_cart(client)
        assert written["status"] == OrderStatus.CART.value
        assert written["total"] == 40.0
        assert written["token"] is None

        read = client.get("/cart", headers=_headers()).json()["cart"]
        assert read["id"] == written["id"]
        assert read["items"][0]["product_id"] == "med-chai"

    def test_put_twice_keeps_one_cart(self, client):
        first = _fill_cart(client)
        second = _fill_cart(client, BITBITES_ITEMS)
        assert first["id"] == second["id"]
        assert second["total"] == 70.0

    def test_invalid_item_is_422(self, client):
        response = client.put(
            "/cart",
            json={"items": [{"product_id": "x", "name": "X", "price": 1.0, "quantity": 0}]},
            headers=_headers(),
        )
        assert response.status_code == 422

    def test_clear_cart(self, client):
        cart = _fill_cart(client)
        response = client.delete(f"/cart/{cart['id']}/items", headers=_headers())
        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["total"] == 0.0

    def test_clear_someone_elses_cart_is_403(self, client):
        cart = _fill_cart(client)
        response = client.delete(f"/cart/{cart['id']}/items", headers=_headers("intruder"))
        assert response.status_code == 403


class TestCheckoutEndpoint:
    def test_checkout(self, client):
        order = _place(client)
        assert order["status"] == "pending"
        assert order["token"].startswith("MED-")
        assert order["display_id"] == "MED-1001"

    def test_checkout_resolves_venue_from_items(self, client):
        cart = _fill_cart(client, BITBITES_ITEMS)
        response = client.post(f"/cart/{cart['id']}/checkout", json={}, headers=_headers())
        assert response.status_code == 200
        assert response.json()["venue"] == "bitbites"

    def test_empty_cart_is_400(self, client):
        cart = client.put("/cart", json={"items": []}, headers=_headers()).json()
        response = client.post(f"/cart/{cart['id']}/checkout", json={"venue": "medical"}, headers=_headers())
        assert response.status_code == 400

    def test_mixed_venues_is_400(self, client):
        cart = _fill_cart(client, MEDICAL_ITEMS + BITBITES_ITEMS)
        response = client.post(f"/cart/{cart['id']}/checkout", json={"venue": "medical"}, headers=_headers())
        assert response.status_code == 400

    def test_second_checkout_is_400(self, client):
        order = _place(client)
        response = client.post(f"/cart/{order['id']}/checkout", json={"venue": "medical"}, headers=_headers())
        assert response.status_code == 400


class TestOrderEndpoints:
    def test_direct_order(self, client):
        response = client.post(
            "/orders",
            json={"items": BITBITES_ITEMS, "venue": "bitbites", "client_name": "Walk-in", "table_number": "9"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["owner"] is None
        assert body["table_number"] == "9"

    def test_direct_order_with_unknown_venue_is_400(self, client):
        response = client.post("/orders", json={"items": MEDICAL_ITEMS, "venue": "rooftop", "client_name": "X"})
        assert response.status_code == 400

    def test_active_and_history(self, client):
        active = _place(client)
        finished = _place(client)
        client.put(f"/orders/{finished['id']}/status", json={"status": "cancelled"})

        active_ids = [o["id"] for o in client.get("/orders/active", headers=_headers()).json()]
        history_ids = [o["id"] for o in client.get("/orders/history", headers=_headers()).json()]
        assert active_ids == [active["id"]]
        assert history_ids == [finished["id"]]

    def test_status_change(self, client):
        order = _place(client)
        response = client.put(f"/orders/{order['id']}/status", json={"status": "preparing"})
        assert response.status_code == 200
        assert response.json()["status"] == "preparing"

    def test_illegal_status_change_is_400(self, client):
        order = _place(client)
        response = client.put(f"/orders/{order['id']}/status", json={"status": "completed"})
        assert response.status_code == 400

    def test_status_change_on_missing_order_is_404(self, client):
        response = client.put("/orders/missing/status", json={"status": "preparing"})
        assert response.status_code == 404


class TestVenueQueueEndpoint:
    def test_queue_filters_by_venue(self, client):
        _place(client, "medical", user="user-a")
        bit = _place(client, "bitbites", user="user-b")
        _fill_cart(client, BITBITES_ITEMS, user="user-c")

        response = client.get("/venues/bitbites/queue")
        assert response.status_code == 200
        assert [o["id"] for o in response.json()] == [bit["id"]]

    def test_unknown_venue_is_400(self, client):
        assert client.get("/venues/rooftop/queue").status_code == 400


class TestStoreFailures:
    def test_store_failure_is_503(self, client, monkeypatch):
        from canteen.errors import StoreFailure

        def _down(*args, **kwargs):
            raise StoreFailure({"store": ["Order store select failed: connection refused"]})

        monkeypatch.setattr("canteen.api.routes.list_venue_queue", _down)
        response = client.get("/venues/medical/queue")
        assert response.status_code == 503
        assert "store" in response.json()["error"]

    def test_failed_checkout_commit_is_503(self, client):
        from unittest.mock import patch

        cart = _fill_cart(client)
        with patch("protean.adapters.repository.memory.MemorySession.commit", side_effect=RuntimeError("disk gone")):
            response = client.post(f"/cart/{cart['id']}/checkout", json={"venue": "medical"}, headers=_headers())
        assert response.status_code == 503
        assert "store" in response.json()["error"]

    def test_domain_is_active(self):
        assert current_domain.name == "canteen"
