from bson import ObjectId


def test_pagination_second_page(client, make_product):
    for i in range(1, 26):
        make_product(name=f"Item {i:02d}", price=float(i))

    res = client.get("/api/products", params={"limit": 10, "page": 2, "sort": "asc"})
    assert res.status_code == 200
    body = res.json()
    assert [p["price"] for p in body["products"]] == [float(i) for i in range(11, 21)]
    assert body["pagination"] == {"total": 25, "page": 2, "limit": 10, "pages": 3}


def test_category_filter_and_price_sort(client, make_product):
    make_product(name="Laptop", price=999.0, category="Computers")
    make_product(name="Mouse", price=25.0, category="Computers")
    make_product(name="Chair", price=150.0, category="Furniture")

    res = client.get("/api/products", params={"category": "Computers", "sort": "desc"})
    names = [p["name"] for p in res.json()["products"]]
    assert names == ["Laptop", "Mouse"]


def test_bad_sort_value_rejected(client):
    res = client.get("/api/products", params={"sort": "sideways"})
    assert res.status_code == 400
    assert "sort" in res.json()["errors"]


def test_get_product(client, make_product):
    pid = make_product(name="Lamp")
    res = client.get(f"/api/products/{pid}")
    assert res.status_code == 200
    assert res.json()["id"] == pid
    assert res.json()["rating"] == 0

    assert client.get(f"/api/products/{ObjectId()}").status_code == 404
    assert client.get("/api/products/not-an-id").status_code == 400


def test_search_is_case_insensitive_across_fields(client, make_product):
    make_product(name="Desk Lamp", category="Lighting")
    make_product(name="Chair", description="Ergonomic seat with LAMP-black finish", category="Furniture")
    make_product(name="Rug", category="Home")

    res = client.get("/api/products/search", params={"q": "lamp"})
    assert res.status_code == 200
    assert sorted(p["name"] for p in res.json()) == ["Chair", "Desk Lamp"]

    res = client.get("/api/products/search", params={"q": "light"})
    assert [p["name"] for p in res.json()] == ["Desk Lamp"]


def test_search_treats_query_literally(client, make_product):
    make_product(name="Widget")
    res = client.get("/api/products/search", params={"q": ".*"})
    assert res.json() == []


def test_search_requires_query(client):
    res = client.get("/api/products/search")
    assert res.status_code == 400
    assert res.json()["message"] == "Search query required"


def test_admin_crud(client, admin):
    _, headers = admin
    res = client.post("/api/admin/products", headers=headers, json={
        "name": "Kettle",
        "description": "1.7L electric kettle",
        "price": 39.5,
        "category": "Kitchen",
        "image": "https://img.shop.io/kettle.jpg",
        "stock": 7,
    })
    assert res.status_code == 201
    product = res.json()["product"]
    assert product["stock"] == 7

    res = client.put(f"/api/admin/products/{product['id']}", headers=headers, json={"price": 35.0})
    assert res.status_code == 200
    assert res.json()["product"]["price"] == 35.0
    assert res.json()["product"]["name"] == "Kettle"

    res = client.delete(f"/api/admin/products/{product['id']}", headers=headers)
    assert res.status_code == 200
    assert client.get(f"/api/products/{product['id']}").status_code == 404


def test_admin_update_and_delete_missing_product(client, admin):
    _, headers = admin
    missing = str(ObjectId())
    assert client.put(f"/api/admin/products/{missing}", headers=headers, json={"price": 1}).status_code == 404
    assert client.delete(f"/api/admin/products/{missing}", headers=headers).status_code == 404


def test_admin_create_validates_fields(client, admin):
    _, headers = admin
    res = client.post("/api/admin/products", headers=headers, json={"name": "Free lunch", "price": -1})
    assert res.status_code == 400
    assert "price" in res.json()["errors"]


def test_admin_routes_refuse_customers(client, customer, make_product):
    _, headers = customer
    pid = make_product()
    assert client.get("/api/admin/products", headers=headers).status_code == 403
    assert client.delete(f"/api/admin/products/{pid}", headers=headers).status_code == 403
