import mongomock
import pytest
from fastapi.testclient import TestClient

import database
import security
from main import app
from schemas import Product as ProductSchema

SHIPPING = {
    "full_name": "Ada Lovelace",
    "address": "12 Analytical Row",
    "city": "London",
    "state": "Greater London",
    "zip_code": "NW1 6XE",
    "country": "UK",
}


@pytest.fixture(autouse=True, scope="session")
def fast_hashing():
    # Minimum bcrypt cost keeps the suite quick
    security.pwd_context.update(bcrypt__rounds=4)


@pytest.fixture
def db():
    test_db = mongomock.MongoClient()["storefront_test"]
    database.ensure_indexes(test_db)
    return test_db


@pytest.fixture
def client(db):
    app.dependency_overrides[database.get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    def _register(username="ada", email=None, password="secret123", first_name="Ada", last_name="Lovelace"):
        res = client.post("/api/auth/register", json={
            "username": username,
            "email": email or f"{username}@shop.io",
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
        })
        assert res.status_code == 201, res.text
        body = res.json()
        return body["user"], auth(body["token"])
    return _register


@pytest.fixture
def customer(register):
    return register("ada")


@pytest.fixture
def admin(register, db):
    user, headers = register("root", first_name="Store", last_name="Admin")
    db["user"].update_one({"_id": database.oid(user["id"])}, {"$set": {"role": "admin"}})
    return user, headers


@pytest.fixture
def make_product(db):
    def _make(name="Widget", price=10.0, category="Gadgets", description=None, stock=5):
        product = ProductSchema(
            name=name,
            description=description or f"A very good {name.lower()}",
            price=price,
            category=category,
            image=f"https://img.shop.io/{name.lower().replace(' ', '-')}.jpg",
            stock=stock,
        )
        return database.create_document(db, "product", product)
    return _make
