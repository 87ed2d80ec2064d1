"""End-to-end tests for the REST surface via TestClient."""

from bson import ObjectId

from pricing import calculate_totals, group_lines

DOSA = {
    "name": "Masala Dosa",
    "cuisine": "South Indian",
    "section": "Breakfast",
    "price": 90,
    "image": "dosa.jpg",
    "info": "Crisp rice crepe",
}


def _add_to_cart(client, session_id="s1", name="Pizza", price=200, quantity=1):
    response = client.post(
        "/order",
        json={"sessionId": session_id, "name": name, "price": price, "quantity": quantity, "section": "Mains"},
    )
    assert response.status_code == 201
    return response.json()["cartItem"]


def _place_order(client, session_id="s1"):
    lines = client.get("/orders", params={"sessionId": session_id}).json()
    items = group_lines(lines)
    response = client.post(
        "/place-order",
        json={
            "sessionId": session_id,
            "name": "Asha",
            "contact": "9876543210",
            "address": "12 MG Road",
            "paymentMethod": "Cash on Counter or UPI or Credit/Debit Card",
            "items": items,
            **calculate_totals(items),
        },
    )
    assert response.status_code == 201
    return response.json()


class TestMenuEndpoints:
    def test_add_list_delete(self, client):
        response = client.post("/", json=DOSA)
        assert response.status_code == 201
        item_id = response.json()["newItem"]["_id"]

        assert [i["name"] for i in client.get("/").json()] == ["Masala Dosa"]

        response = client.request("DELETE", "/", json={"_id": item_id})
        assert response.status_code == 200
        assert client.get("/").json() == []

    def test_add_missing_field(self, client):
        response = client.post("/", json={k: v for k, v in DOSA.items() if k != "info"})
        assert response.status_code == 400
        assert "message" in response.json()

    def test_delete_invalid_id(self, client):
        response = client.request("DELETE", "/", json={"_id": "nope"})
        assert response.status_code == 400

    def test_delete_unknown_id(self, client):
        response = client.request("DELETE", "/", json={"_id": str(ObjectId())})
        assert response.status_code == 404

    def test_check_and_sections(self, client):
        client.post("/", json=DOSA)
        client.post("/", json=dict(DOSA, name="Idli", section=" breakfast "))

        assert client.post("/check", json={"name": "Idli"}).json() == {"exists": True}
        assert client.post("/check", json={"name": "Vada"}).json() == {"exists": False}
        assert client.get("/menu/sections").json() == ["All", "Breakfast"]

    def test_browse_by_term_and_section(self, client):
        client.post("/", json=DOSA)
        client.post("/", json=dict(DOSA, name="Rava Dosa", section="breakfast"))
        client.post("/", json=dict(DOSA, name="Paneer Tikka", section="Starters"))

        grouped = client.get("/menu").json()
        assert list(grouped) == ["Breakfast", "Starters"]
        assert [i["name"] for i in grouped["Breakfast"]] == ["Masala Dosa", "Rava Dosa"]

        grouped = client.get("/menu", params={"q": "dosa", "section": "BREAKFAST"}).json()
        assert list(grouped) == ["Breakfast"]
        assert len(grouped["Breakfast"]) == 2

        assert client.get("/menu", params={"q": "dosa", "section": "Starters"}).json() == {}


class TestCartEndpoints:
    def test_add_and_list(self, client):
        _add_to_cart(client, quantity=2)
        lines = client.get("/orders", params={"sessionId": "s1"}).json()
        assert len(lines) == 1
        assert lines[0]["quantity"] == 2

    def test_add_requires_quantity(self, client):
        response = client.post("/order", json={"sessionId": "s1", "name": "Pizza", "price": 200})
        assert response.status_code == 400

    def test_list_requires_session(self, client):
        assert client.get("/orders").status_code == 400

    def test_remove(self, client):
        line = _add_to_cart(client)
        response = client.request("DELETE", "/orders", json={"sessionId": "s1", "_id": line["_id"]})
        assert response.status_code == 200

        response = client.request("DELETE", "/orders", json={"sessionId": "s1", "_id": line["_id"]})
        assert response.status_code == 404

    def test_remove_invalid_id(self, client):
        response = client.request("DELETE", "/orders", json={"sessionId": "s1", "_id": "xyz"})
        assert response.status_code == 400

    def test_clear_empty_cart_succeeds(self, client):
        response = client.request("DELETE", "/orders/clear", json={"sessionId": "s1"})
        assert response.status_code == 200

    def test_clear_requires_session(self, client):
        response = client.request("DELETE", "/orders/clear", json={})
        assert response.status_code == 400

    def test_summary(self, client):
        _add_to_cart(client, quantity=1)
        _add_to_cart(client, quantity=2)
        _add_to_cart(client, name="Coke", price=50)

        summary = client.get("/orders/summary", params={"sessionId": "s1"}).json()
        assert summary["totalItems"] == 4
        assert summary["subtotal"] == 650.0
        assert summary["gstAmount"] == 32.5
        assert summary["grandTotal"] == 682.5
        assert [i["name"] for i in summary["items"]] == ["Pizza", "Coke"]


class TestOrderLifecycle:
    def test_cart_to_order_to_history(self, client):
        _add_to_cart(client, quantity=1)
        _add_to_cart(client, quantity=2)

        placed = _place_order(client)
        assert placed["serialNumber"] == 1
        client.request("DELETE", "/orders/clear", json={"sessionId": "s1"})
        assert client.get("/orders", params={"sessionId": "s1"}).json() == []

        [order] = client.get("/place-order", params={"sessionId": "s1"}).json()
        assert order["_id"] == placed["orderId"]
        assert order["items"][0]["quantity"] == 3
        assert order["items"][0]["totalPrice"] == 600.0

        assert client.post("/order-history", json=order).status_code == 201
        assert client.delete(f"/place-order/{order['_id']}").status_code == 200

        assert client.get("/place-order").json() == []
        assert client.get("/order-history", params={"sessionId": "s1"}).json() == [order]

    def test_serial_numbers_increment(self, client):
        _add_to_cart(client)
        assert _place_order(client)["serialNumber"] == 1
        assert _place_order(client)["serialNumber"] == 2

    def test_list_all_orders(self, client):
        _add_to_cart(client, session_id="s1")
        _add_to_cart(client, session_id="s2")
        _place_order(client, "s1")
        _place_order(client, "s2")
        assert len(client.get("/place-order").json()) == 2

    def test_missing_totals(self, client):
        response = client.post(
            "/place-order",
            json={
                "sessionId": "s1",
                "name": "Asha",
                "contact": "1",
                "address": "x",
                "paymentMethod": "Cash",
                "items": [{"name": "Pizza", "price": 200, "quantity": 1}],
                "subtotal": 200,
                "grandTotal": 210,
            },
        )
        assert response.status_code == 400
        assert response.json() == {"message": "Invalid order data"}

    def test_complete_invalid_and_unknown(self, client):
        assert client.delete("/place-order/not-an-id").status_code == 400
        assert client.delete(f"/place-order/{ObjectId()}").status_code == 404

    def test_fulfil(self, client):
        _add_to_cart(client)
        placed = _place_order(client)

        response = client.post(f"/place-order/{placed['orderId']}/fulfil")
        assert response.status_code == 200
        assert response.json()["serialNumber"] == 1
        assert client.get("/place-order").json() == []
        assert len(client.get("/order-history", params={"sessionId": "s1"}).json()) == 1


class TestHistoryEndpoints:
    def test_archive_requires_id(self, client):
        assert client.post("/order-history", json={"sessionId": "s1"}).status_code == 400

    def test_list_requires_session(self, client):
        assert client.get("/order-history").status_code == 400

    def test_clear(self, client):
        client.post("/order-history", json={"_id": "a1", "sessionId": "s1"})
        assert client.delete("/order-history", params={"sessionId": "s1"}).status_code == 200
        assert client.delete("/order-history", params={"sessionId": "s1"}).status_code == 404


class TestAdminEndpoints:
    def test_credentials_flow(self, client):
        assert client.get("/admin").status_code == 404
        assert client.post("/admin/verify", json={"username": "admin", "password": "x"}).status_code == 404

        assert client.put("/admin", json={"username": "admin", "password": "secret"}).status_code == 200
        assert client.get("/admin").json()["username"] == "admin"

        assert client.post("/admin/verify", json={"username": "admin", "password": "secret"}).status_code == 200
        assert client.post("/admin/verify", json={"username": "admin", "password": "nope"}).status_code == 401

    def test_missing_fields(self, client):
        assert client.put("/admin", json={"username": "admin"}).status_code == 400
        assert client.post("/admin/verify", json={"password": "x"}).status_code == 400


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["connection_status"] == "Connected"
