from datetime import datetime, timezone
from decimal import Decimal

import pytest

ADMIN = {"X-User-Id": "1", "X-User-Role": "admin"}
SHIPPING = {
    "name": "Ravi Kumar",
    "phone": "+91 98765 43210",
    "address": "12 MG Road",
    "city": "Pune",
    "pincode": "411001",
}


def user(user_id):
    return {"X-User-Id": str(user_id)}


def money(value):
    return Decimal(str(value))


@pytest.fixture()
def product(client):
    resp = client.post(
        "/products/",
        json={"name": "Brake Pads", "price": "100.00", "cost_price": "60.00", "stock": 5},
        headers=ADMIN,
    )
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture()
def placed_order(client, product):
    client.post("/cart/", json={"product_id": product["id"], "quantity": 2}, headers=user(7))
    resp = client.post("/orders/", json={"shipping_info": SHIPPING}, headers=user(7))
    assert resp.status_code == 201
    return resp.json()


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": "ok"}


class TestProducts:
    def test_create_sets_selling_price(self, product):
        assert money(product["selling_price"]) == Decimal("100")
        assert product["stock"] == 5

    def test_create_requires_admin(self, client):
        resp = client.post("/products/", json={"name": "Fuse", "price": "5"}, headers=user(7))
        assert resp.status_code == 403

    def test_missing_identity(self, client):
        resp = client.post("/products/", json={"name": "Fuse", "price": "5"})
        assert resp.status_code == 422

    def test_unknown_role(self, client):
        resp = client.get("/orders/", headers={"X-User-Id": "7", "X-User-Role": "root"})
        assert resp.status_code == 401

    def test_update_stock_broadcasts(self, client, product, broadcaster):
        resp = client.put(f"/products/{product['id']}", json={"stock": 12}, headers=ADMIN)

        assert resp.status_code == 200
        assert resp.json()["stock"] == 12
        assert broadcaster.named("stock_update") == [{"product_id": product["id"], "stock": 12}]

    def test_update_without_stock_does_not_broadcast(self, client, product, broadcaster):
        resp = client.put(f"/products/{product['id']}", json={"name": "Ceramic Brake Pads"}, headers=ADMIN)

        assert resp.json()["name"] == "Ceramic Brake Pads"
        assert broadcaster.named("stock_update") == []

    def test_get_unknown(self, client):
        assert client.get("/products/999").status_code == 404


class TestCart:
    def test_add_update_remove(self, client, product):
        resp = client.post("/cart/", json={"product_id": product["id"], "quantity": 2}, headers=user(7))
        assert resp.status_code == 200
        assert resp.json()["items"][0]["quantity"] == 2
        assert money(resp.json()["total"]) == Decimal("200")

        resp = client.patch("/cart/", json={"product_id": product["id"], "quantity": 3}, headers=user(7))
        assert resp.json()["items"][0]["quantity"] == 3

        resp = client.delete(f"/cart/{product['id']}", headers=user(7))
        assert resp.json()["items"] == []

    def test_add_more_than_stock(self, client, product):
        resp = client.post("/cart/", json={"product_id": product["id"], "quantity": 6}, headers=user(7))

        assert resp.status_code == 400
        assert resp.json()["detail"]["available"] == 5
        assert resp.json()["detail"]["requested"] == 6

    def test_add_unknown_product(self, client):
        resp = client.post("/cart/", json={"product_id": 999, "quantity": 1}, headers=user(7))
        assert resp.status_code == 404

    def test_clear(self, client, product):
        client.post("/cart/", json={"product_id": product["id"], "quantity": 1}, headers=user(7))

        assert client.post("/cart/clear", headers=user(7)).status_code == 200
        assert client.get("/cart/", headers=user(7)).json()["items"] == []


class TestOrders:
    def test_place_order(self, client, product, placed_order, broadcaster, dispatcher):
        assert placed_order["status"] == "pending"
        assert money(placed_order["total"]) == Decimal("200")
        assert placed_order["shipping_address"] == "12 MG Road, Pune, 411001"
        assert placed_order["items"][0]["product_name"] == "Brake Pads"

        assert client.get(f"/products/{product['id']}").json()["stock"] == 3
        assert client.get("/cart/", headers=user(7)).json()["items"] == []

        assert broadcaster.named("stock_update")[-1] == {"product_id": product["id"], "stock": 3}
        assert broadcaster.named("new_order")[0]["order_id"] == placed_order["id"]
        assert dispatcher.calls[0]["customer_name"] == "Ravi Kumar"

    def test_empty_cart(self, client):
        resp = client.post("/orders/", json={}, headers=user(7))
        assert resp.status_code == 400

    def test_insufficient_stock(self, client, product, fill_cart):
        fill_cart(7, (product["id"], 9))

        resp = client.post("/orders/", json={"shipping_info": SHIPPING}, headers=user(7))

        assert resp.status_code == 400
        assert resp.json()["detail"] == {
            "message": "Insufficient stock for Brake Pads. Available: 5, Requested: 9",
            "product_id": product["id"],
            "product": "Brake Pads",
            "available": 5,
            "requested": 9,
        }
        assert client.get(f"/products/{product['id']}").json()["stock"] == 5

    def test_owner_and_admin_visibility(self, client, placed_order):
        order_id = placed_order["id"]

        assert client.get(f"/orders/{order_id}", headers=user(7)).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=user(8)).status_code == 403
        assert client.get(f"/orders/{order_id}", headers=ADMIN).status_code == 200
        assert client.get("/orders/999", headers=ADMIN).status_code == 404

        assert len(client.get("/orders/", headers=user(7)).json()) == 1
        assert client.get("/orders/", headers=user(8)).json() == []
        assert [o["id"] for o in client.get("/orders/all", headers=ADMIN).json()] == [order_id]

    def test_status_changes(self, client, placed_order, broadcaster):
        order_id = placed_order["id"]

        assert client.patch(f"/orders/{order_id}", json={"status": "cancelled"}, headers=user(8)).status_code == 403
        assert client.patch(f"/orders/{order_id}", json={"status": "shipped"}, headers=user(7)).status_code == 400

        resp = client.patch(f"/orders/{order_id}", json={"status": "cancelled"}, headers=user(7))

        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"
        assert broadcaster.named("order_status") == [{"order_id": order_id, "user_id": 7, "status": "cancelled"}]

    def test_deleted_product_keeps_line_snapshot(self, client, product, placed_order):
        assert client.delete(f"/products/{product['id']}", headers=ADMIN).status_code == 200

        line = client.get(f"/orders/{placed_order['id']}", headers=user(7)).json()["items"][0]

        assert line["product_id"] is None
        assert line["product_name"] == "Brake Pads"
        assert money(line["price"]) == Decimal("100")


class TestAdmin:
    def test_requires_admin(self, client):
        assert client.get("/admin/stats", headers=user(7)).status_code == 403

    def test_stats_count_completed_orders_only(self, client, product, placed_order, make_user):
        make_user(7)
        make_user(8, email="other@example.com")

        stats = client.get("/admin/stats", headers=ADMIN).json()
        assert stats["pending_orders"] == 1
        assert money(stats["total_revenue"]) == Decimal("0")

        client.put(f"/admin/orders/{placed_order['id']}/status", json={"status": "completed"}, headers=ADMIN)
        # a later cost change must not move the figures of a completed order
        client.put(f"/products/{product['id']}", json={"cost_price": "90"}, headers=ADMIN)

        stats = client.get("/admin/stats", headers=ADMIN).json()
        assert stats["total_users"] == 2
        assert stats["active_users"] == 1
        assert stats["inactive_users"] == 1
        assert stats["completed_orders"] == 1
        assert money(stats["total_revenue"]) == Decimal("200")
        assert money(stats["total_cost"]) == Decimal("120")
        assert money(stats["total_profit"]) == Decimal("80")
        assert money(stats["profit_margin"]) == Decimal("40")
        assert stats["low_stock_count"] == 1
        assert stats["low_stock_products"][0]["stock"] == 3

    def test_bulk_stock(self, client, product, broadcaster):
        resp = client.put(
            "/admin/products/bulk-stock",
            json={"updates": [{"product_id": product["id"], "stock": 40}]},
            headers=ADMIN,
        )

        assert resp.status_code == 200
        assert resp.json()[0]["stock"] == 40
        assert broadcaster.named("stock_update") == [{"product_id": product["id"], "stock": 40}]

    def test_bulk_stock_unknown_product(self, client, product):
        resp = client.put(
            "/admin/products/bulk-stock",
            json={"updates": [{"product_id": product["id"], "stock": 40}, {"product_id": 999, "stock": 1}]},
            headers=ADMIN,
        )

        assert resp.status_code == 404
        assert client.get(f"/products/{product['id']}").json()["stock"] == 5

    def test_recent_orders(self, client, placed_order):
        resp = client.get("/admin/recent-orders", headers=ADMIN)
        assert [o["id"] for o in resp.json()] == [placed_order["id"]]

    def test_restock(self, client, product, broadcaster):
        resp = client.patch(f"/admin/products/{product['id']}/restock", json={"quantity": 4}, headers=ADMIN)

        assert resp.status_code == 200
        assert resp.json()["stock"] == 9
        assert broadcaster.named("stock_update") == [{"product_id": product["id"], "stock": 9}]

    def test_restock_rejects_bad_quantity_and_unknown_product(self, client, product):
        assert client.patch(f"/admin/products/{product['id']}/restock", json={"quantity": 0}, headers=ADMIN).status_code == 400
        assert client.patch("/admin/products/999/restock", json={"quantity": 1}, headers=ADMIN).status_code == 404
        assert client.get(f"/products/{product['id']}").json()["stock"] == 5

    def test_bulk_delete(self, client, product):
        other = client.post("/products/", json={"name": "Fuse", "price": "5"}, headers=ADMIN).json()

        resp = client.post(
            "/admin/products/bulk-delete",
            json={"product_ids": [product["id"], other["id"], 999]},
            headers=ADMIN,
        )

        assert resp.json() == {"deleted_count": 2}
        assert client.get("/products/").json() == []

    def test_revenue_chart_counts_completed_orders(self, client, placed_order):
        assert client.get("/admin/revenue-chart", headers=ADMIN).json() == []

        client.put(f"/admin/orders/{placed_order['id']}/status", json={"status": "completed"}, headers=ADMIN)

        chart = client.get("/admin/revenue-chart?days=7", headers=ADMIN).json()
        assert len(chart) == 1
        assert chart[0]["date"] == datetime.now(timezone.utc).date().isoformat()
        assert money(chart[0]["revenue"]) == Decimal("200")

    def test_list_users_paginated(self, client, make_user):
        for user_id in (7, 8, 9):
            make_user(user_id, email=f"user{user_id}@example.com")

        first = client.get("/admin/users?page=1&limit=2", headers=ADMIN).json()
        second = client.get("/admin/users?page=2&limit=2", headers=ADMIN).json()

        assert [u["id"] for u in first["users"]] == [9, 8]
        assert [u["id"] for u in second["users"]] == [7]
        assert first["total_users"] == 3
        assert first["total_pages"] == 2
        assert second["current_page"] == 2

    def test_update_user_role(self, client, make_user):
        make_user(8)

        resp = client.put("/admin/users/8/role", json={"role": "admin"}, headers=ADMIN)

        assert resp.status_code == 200
        assert resp.json()["role"] == "admin"
        assert client.put("/admin/users/8/role", json={"role": "root"}, headers=ADMIN).status_code == 400
        assert client.put("/admin/users/999/role", json={"role": "user"}, headers=ADMIN).status_code == 404

    def test_delete_user(self, client, make_user):
        make_user(1, role="admin")
        make_user(8)

        # the calling admin is user 1
        assert client.delete("/admin/users/1", headers=ADMIN).status_code == 400
        assert client.delete("/admin/users/8", headers=ADMIN).status_code == 200
        assert client.get("/users/8").status_code == 404
        assert client.delete("/admin/users/8", headers=ADMIN).status_code == 404
        assert client.get("/users/1").status_code == 200


class TestUsers:
    def test_create_and_get(self, client):
        payload = {"id": 7, "name": "Ravi", "email": "ravi@example.com"}

        assert client.post("/users/", json=payload).status_code == 200
        # registering twice returns the existing user
        assert client.post("/users/", json={**payload, "name": "Other"}).json()["name"] == "Ravi"
        assert client.get("/users/7").json()["email"] == "ravi@example.com"

    def test_unknown_user(self, client):
        assert client.get("/users/404").status_code == 404
