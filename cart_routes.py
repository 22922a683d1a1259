import logging
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from pymongo import ReturnDocument
from pymongo.database import Database

from database import get_db, now, serialize_doc
from product_routes import find_product
from schemas import Cart as CartSchema
from security import AuthUser, get_current_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


class CartItemRequest(BaseModel):
    product_id: str = Field(min_length=1)
    quantity: int = Field(ge=1)


class CartRemoveRequest(BaseModel):
    product_id: str = Field(min_length=1)


def find_cart(db: Database, user_id: str) -> Optional[dict]:
    return db["cart"].find_one({"user_id": user_id})


def get_or_create_cart(db: Database, user_id: str) -> dict:
    stamp = now()
    empty = CartSchema(user_id=user_id).model_dump(exclude={"user_id"})
    return db["cart"].find_one_and_update(
        {"user_id": user_id},
        {"$setOnInsert": {**empty, "created_at": stamp, "updated_at": stamp}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )


def save_items(db: Database, cart: dict, items: list) -> dict:
    cart["items"] = items
    cart["updated_at"] = now()
    db["cart"].update_one({"_id": cart["_id"]}, {"$set": {"items": items, "updated_at": cart["updated_at"]}})
    return cart


def populate_cart(db: Database, cart: dict) -> dict:
    """Cart document with each line's product document attached."""
    ids = []
    for item in cart.get("items", []):
        if ObjectId.is_valid(item["product_id"]):
            ids.append(ObjectId(item["product_id"]))
    products = {str(p["_id"]): serialize_doc(p) for p in db["product"].find({"_id": {"$in": ids}})}

    out = serialize_doc(cart)
    out["items"] = [
        {
            "product_id": item["product_id"],
            "quantity": item["quantity"],
            "product": products.get(item["product_id"]),
        }
        for item in cart.get("items", [])
    ]
    return out


def require_cart(db: Database, user_id: str) -> dict:
    cart = find_cart(db, user_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return cart


@router.get("")
def get_cart(user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    cart = get_or_create_cart(db, user.id)
    return populate_cart(db, cart)


@router.post("/add")
def add_to_cart(body: CartItemRequest, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    if not find_product(db, body.product_id):
        raise HTTPException(status_code=404, detail="Product not found")

    cart = get_or_create_cart(db, user.id)
    items = list(cart.get("items", []))
    for item in items:
        if item["product_id"] == body.product_id:
            item["quantity"] += body.quantity
            break
    else:
        items.append({"product_id": body.product_id, "quantity": body.quantity})

    cart = save_items(db, cart, items)
    return {"message": "Item added to cart", "cart": populate_cart(db, cart)}


@router.post("/remove")
def remove_from_cart(body: CartRemoveRequest, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    cart = require_cart(db, user.id)
    items = [item for item in cart.get("items", []) if item["product_id"] != body.product_id]
    cart = save_items(db, cart, items)
    return {"message": "Item removed from cart", "cart": populate_cart(db, cart)}


@router.post("/update")
def update_cart_item(body: CartItemRequest, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    cart = require_cart(db, user.id)
    items = list(cart.get("items", []))
    for item in items:
        if item["product_id"] == body.product_id:
            item["quantity"] = body.quantity
            break
    else:
        raise HTTPException(status_code=404, detail="Item not in cart")

    cart = save_items(db, cart, items)
    return {"message": "Item updated", "cart": populate_cart(db, cart)}


@router.post("/clear")
def clear_cart(user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    cart = require_cart(db, user.id)
    cart = save_items(db, cart, [])
    logger.info("Cleared cart for user %s", user.id)
    return {"message": "Cart cleared", "cart": populate_cart(db, cart)}
