import pytest
from fastapi.testclient import TestClient

from elysian_cafe.main import create_app
from elysian_cafe.seed_data import DEFAULT_MENU
from elysian_cafe.store import MemoryDocumentStore


@pytest.fixture()
def client():
    with TestClient(create_app(store=MemoryDocumentStore())) as client:
        yield client


def _cart(client, *names):
    menu = {item["name"]: item for item in client.get("/menu/").json()}
    return [menu[name] for name in names]


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["store"] == "MemoryDocumentStore"


def test_seed_and_menu(client):
    seeded = client.post("/menu/seed").json()
    assert seeded == {"added": len(DEFAULT_MENU), "updated": 0}
    assert client.post("/menu/seed").json() == {"added": 0, "updated": len(DEFAULT_MENU)}

    menu = client.get("/menu/").json()
    assert len(menu) == len(DEFAULT_MENU)
    assert menu[0]["category"] == "Specials"
    assert "vegType" in menu[0]


def test_menu_crud(client):
    created = client.post("/menu/", json={"name": " Masala Chai ", "price": 25, "category": "Specials"})
    assert created.status_code == 201
    item = created.json()
    assert item["name"] == "Masala Chai"

    hidden = client.post(f"/menu/{item['id']}/toggle").json()
    assert hidden["available"] is False
    assert client.get("/menu/").json() == []
    assert len(client.get("/menu/all", params={"available": False}).json()) == 1

    patched = client.patch(f"/menu/{item['id']}", json={"price": 30})
    assert patched.json()["price"] == "30"

    assert client.delete(f"/menu/{item['id']}").status_code == 204
    assert client.get(f"/menu/{item['id']}").status_code == 404


def test_order_flow(client):
    client.post("/menu/seed")
    items = _cart(client, "Veg Burger", "Veg Burger", "Strawberry Dip")

    response = client.post("/orders/", json={"items": items, "paymentMode": "cash"})
    assert response.status_code == 201
    result = response.json()
    assert result["orderNumber"] == 1
    assert result["paymentStatus"] == "cash"
    assert result["message"] == "Order Placed! Your number: #1. Please proceed to the counter."

    orders = client.get("/orders/", params={"status": "pending"}).json()
    assert len(orders) == 1
    assert orders[0]["displayNumber"] == "#1"
    assert [(line["name"], line["quantity"]) for line in orders[0]["groupedItems"]] == [
        ("Veg Burger", 2),
        ("Strawberry Dip", 1),
    ]

    served = client.post(f"/orders/{result['orderId']}/serve")
    assert served.json()["status"] == "served"

    rejected = client.post(f"/orders/{result['orderId']}/cancel")
    assert rejected.status_code == 409
    assert client.get(f"/orders/{result['orderId']}").json()["status"] == "served"

    assert client.get("/orders/counts").json() == {"pending": 0, "served": 1, "cancelled": 0}
    assert client.get("/stats/summary").json()["count_orders"] == 1
    assert client.get("/stats/payment-modes").json() == {"Cash": 1, "UPI": 0, "Other": 0}


def test_empty_cart_rejected(client):
    response = client.post("/orders/", json={"items": []})

    assert response.status_code == 400
    assert response.json()["detail"] == "Your cart is empty!"


def test_accepting_orders_toggle(client):
    client.post("/menu/seed")
    items = _cart(client, "Veg Burger")

    assert client.get("/system/config").json()["acceptingOrders"] is True
    assert client.post("/system/config/accepting", json={}).json()["acceptingOrders"] is False

    response = client.post("/orders/", json={"items": items})
    assert response.status_code == 409

    assert client.post("/system/config/accepting", json={"acceptingOrders": True}).json()["acceptingOrders"] is True
    assert client.post("/orders/", json={"items": items}).status_code == 201


def test_upi_payment_link(client):
    client.post("/menu/seed")
    client.put("/system/config", json={"upiId": "cafe@upi"})

    result = client.post("/orders/", json={"items": _cart(client, "Veg Burger"), "paymentMode": "upi"}).json()

    assert result["paymentStatus"] == "awaiting_verification"
    assert result["paymentLink"].startswith("upi://pay?pa=cafe%40upi")


def test_counter_reset(client):
    client.post("/menu/seed")
    client.post("/orders/", json={"items": _cart(client, "Veg Burger")})
    assert client.get("/system/counter").json() == {"orderNumber": 1}

    client.post("/system/counter/reset", json={"orderNumber": 0})

    result = client.post("/orders/", json={"items": _cart(client, "Veg Burger")}).json()
    assert result["orderNumber"] == 1


def test_unknown_order(client):
    assert client.get("/orders/missing").status_code == 404
    assert client.post("/orders/missing/serve").status_code == 404


def test_live_orders_feed_pushes_new_snapshot(client):
    client.post("/menu/seed")
    items = _cart(client, "Veg Burger")

    with client.websocket_connect("/live/orders") as websocket:
        assert websocket.receive_json() == []

        client.post("/orders/", json={"items": items})

        orders = websocket.receive_json()
        assert len(orders) == 1
        assert orders[0]["displayNumber"] == "#1"
        assert orders[0]["status"] == "pending"


def test_live_config_feed_follows_toggle(client):
    with client.websocket_connect("/live/config") as websocket:
        assert websocket.receive_json() == {
            "acceptingOrders": None,
            "upiId": "",
            "payeeName": "",
            "isOpen": True,
        }

        client.post("/system/config/accepting", json={"acceptingOrders": False})

        config = websocket.receive_json()
        assert config["acceptingOrders"] is False
        assert config["isOpen"] is False


def test_delete_all_menu_items(client):
    client.post("/menu/seed")

    response = client.delete("/menu/")

    assert response.json() == {"deleted": len(DEFAULT_MENU)}
    assert client.get("/menu/all").json() == []
    assert client.delete("/menu/").json() == {"deleted": 0}


def test_stats_series_endpoints(client):
    client.post("/menu/seed")
    result = client.post("/orders/", json={"items": _cart(client, "Veg Burger")}).json()
    client.post(f"/orders/{result['orderId']}/serve")

    over_time = client.get("/stats/over-time").json()
    assert len(over_time) == 7
    assert over_time[-1]["orders"] == 1

    time_of_day = client.get("/stats/time-of-day").json()
    assert sum(row["orders"] for row in time_of_day) == 1


def test_limit_must_be_positive(client):
    assert client.get("/orders/", params={"limit": -1}).status_code == 422
    assert client.get("/orders/", params={"limit": 0}).status_code == 422
    assert client.get("/stats/by-item", params={"limit": -3}).status_code == 422
    assert client.get("/orders/", params={"limit": 1}).status_code == 200
