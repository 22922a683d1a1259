from bson import ObjectId

import database
from conftest import SHIPPING


def test_list_and_count_users(client, admin, register):
    _, admin_headers = admin
    register("ada")
    register("bob")

    res = client.get("/api/users", headers=admin_headers)
    assert res.status_code == 200
    assert sorted(u["username"] for u in res.json()) == ["ada", "bob", "root"]
    assert all("password_hash" not in u for u in res.json())

    assert client.get("/api/users/count", headers=admin_headers).json() == {"count": 3}


def test_user_admin_routes_refuse_customers(client, customer):
    user, headers = customer
    assert client.get("/api/users", headers=headers).status_code == 403
    assert client.put(f"/api/users/{user['id']}/role", headers=headers, json={"role": "admin"}).status_code == 403


def test_update_role(client, admin, register):
    _, admin_headers = admin
    bob, bob_headers = register("bob")

    res = client.put(f"/api/users/{bob['id']}/role", headers=admin_headers, json={"role": "admin"})
    assert res.status_code == 200
    assert res.json()["user"]["role"] == "admin"
    assert client.get("/api/users/count", headers=bob_headers).status_code == 200


def test_update_role_validation(client, admin, customer):
    _, admin_headers = admin
    user, _ = customer
    res = client.put(f"/api/users/{user['id']}/role", headers=admin_headers, json={"role": "superuser"})
    assert res.status_code == 400
    assert "role" in res.json()["errors"]

    res = client.put(f"/api/users/{ObjectId()}/role", headers=admin_headers, json={"role": "user"})
    assert res.status_code == 404


def test_delete_user_removes_cart_and_keeps_orders(client, db, admin, customer, make_product):
    _, admin_headers = admin
    user, headers = customer
    client.post("/api/cart/add", headers=headers, json={"product_id": make_product(), "quantity": 1})
    client.post("/api/orders", headers=headers, json={"shipping_address": SHIPPING})

    res = client.delete(f"/api/users/{user['id']}", headers=admin_headers)
    assert res.status_code == 200
    assert db["user"].find_one({"_id": database.oid(user["id"])}) is None
    assert db["cart"].find_one({"user_id": user["id"]}) is None
    assert db["order"].count_documents({"user_id": user["id"]}) == 1

    assert client.delete(f"/api/users/{user['id']}", headers=admin_headers).status_code == 404


def test_orders_for_user(client, admin, customer, make_product):
    _, admin_headers = admin
    user, headers = customer
    client.post("/api/cart/add", headers=headers, json={"product_id": make_product(), "quantity": 3})
    client.post("/api/orders", headers=headers, json={"shipping_address": SHIPPING})

    res = client.get(f"/api/users/{user['id']}/orders", headers=admin_headers)
    assert res.status_code == 200
    orders = res.json()
    assert len(orders) == 1
    assert orders[0]["items"][0]["quantity"] == 3
    assert orders[0]["user"]["first_name"] == "Ada"
