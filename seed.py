"""Load a demo catalog (and optionally an admin account) into an empty database.

    DATABASE_URL=mongodb://localhost:27017 python seed.py

Set ADMIN_EMAIL and ADMIN_PASSWORD to also create an admin user.
"""
import logging
import os
import sys

from pymongo.database import Database

import database
from schemas import Product as ProductSchema, Role, User as UserSchema
from security import hash_password

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    {
        "name": "Premium Wireless Headphones",
        "description": "High-quality wireless headphones with noise cancellation and 30-hour battery life.",
        "price": 299.99,
        "category": "Electronics",
        "image": "https://images.unsplash.com/photo-1674658556545-f18d4080ab6c?w=1200&q=80",
        "stock": 15,
        "rating": 4.8,
        "reviews": 127,
    },
    {
        "name": "Smartwatch Pro",
        "description": "Advanced smartwatch with health tracking, GPS, and 7-day battery life.",
        "price": 199.99,
        "category": "Electronics",
        "image": "https://images.unsplash.com/photo-1660844817855-3ecc7ef21f12?w=1200&q=80",
        "stock": 22,
        "rating": 4.6,
        "reviews": 98,
    },
    {
        "name": "Ultra HD Camera",
        "description": "4K digital camera with 20MP sensor and professional-grade lens.",
        "price": 599.99,
        "category": "Electronics",
        "image": "https://images.unsplash.com/photo-1502920917128-1aa500764cbd?w=1200&q=80",
        "stock": 8,
        "rating": 4.9,
        "reviews": 156,
    },
    {
        "name": "Portable Bluetooth Speaker",
        "description": "Waterproof portable speaker with 360-degree sound and 12-hour battery.",
        "price": 79.99,
        "category": "Electronics",
        "image": "https://images.unsplash.com/photo-1589256469067-ea99122bbdc4?w=1200&q=80",
        "stock": 45,
        "rating": 4.5,
        "reviews": 203,
    },
    {
        "name": "Gaming Laptop",
        "description": "High-performance laptop with RTX 3080, 32GB RAM, and 1TB SSD for gaming and work.",
        "price": 1299.99,
        "category": "Computers",
        "image": "https://images.unsplash.com/photo-1684127987312-43455fd95925?w=1200&q=80",
        "stock": 5,
        "rating": 4.7,
        "reviews": 87,
    },
    {
        "name": "Ergonomic Office Chair",
        "description": "Comfortable ergonomic chair with lumbar support, perfect for long work sessions.",
        "price": 349.99,
        "category": "Furniture",
        "image": "https://images.unsplash.com/photo-1580480055273-228ff5388ef8?w=1200&q=80",
        "stock": 12,
        "rating": 4.4,
        "reviews": 64,
    },
]


def seed_products(db: Database) -> int:
    if db["product"].count_documents({}) > 0:
        logger.info("Products already exist, skipping catalog seed")
        return 0
    for p in DEMO_PRODUCTS:
        database.create_document(db, "product", ProductSchema(**p))
    logger.info("Seeded %d products", len(DEMO_PRODUCTS))
    return len(DEMO_PRODUCTS)


def seed_admin(db: Database, email: str, password: str, username: str = "admin") -> bool:
    email = email.lower()
    if db["user"].find_one({"$or": [{"email": email}, {"username": username}]}):
        logger.info("User %s already exists, skipping admin seed", email)
        return False
    admin = UserSchema(
        username=username,
        email=email,
        password_hash=hash_password(password),
        first_name="Store",
        last_name="Admin",
        role=Role.admin,
    )
    database.create_document(db, "user", admin)
    logger.info("Created admin user %s", email)
    return True


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    if database.db is None:
        logger.error("DATABASE_URL is not set")
        return 1
    database.ensure_indexes(database.db)
    seed_products(database.db)
    email, password = os.getenv("ADMIN_EMAIL"), os.getenv("ADMIN_PASSWORD")
    if email and password:
        seed_admin(database.db, email, password)
    return 0


if __name__ == "__main__":
    sys.exit(main())
