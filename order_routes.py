"""
Orders and checkout.

Checkout is three calls from the client:

1. POST /api/orders turns the cart into a pending order. The cart is kept so
   an abandoned checkout can be retried.
2. POST /api/orders/payment-intent creates a Stripe payment intent for the
   order total and hands the client secret back to the browser.
3. POST /api/orders/confirm-payment marks the order as processing and deletes
   the cart, once the browser has completed the payment with Stripe.

Each call is a separate write; nothing spans them and nothing is retried. An
order whose client never reaches step 3 stays pending.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database
from pymongo.errors import PyMongoError

import payments
import settings
from cart_routes import find_cart
from database import create_document, get_db, get_documents, now, oid, serialize_doc
from schemas import Order as OrderSchema, OrderItem, OrderStatus, ShippingAddress
from security import AuthUser, get_current_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])

NEWEST_FIRST = [("created_at", DESCENDING)]


class OrderCreate(BaseModel):
    shipping_address: ShippingAddress


class PaymentIntentRequest(BaseModel):
    order_id: str = Field(min_length=1)


class ConfirmPaymentRequest(BaseModel):
    order_id: str = Field(min_length=1)
    payment_intent_id: str = Field(min_length=1)


class StatusUpdate(BaseModel):
    status: OrderStatus


def snapshot_items(db: Database, cart: dict) -> List[OrderItem]:
    """Copy name, price and image of every cart line from the live product."""
    items = []
    for line in cart["items"]:
        product = db["product"].find_one({"_id": oid(line["product_id"])})
        if not product:
            raise HTTPException(status_code=400, detail=f"Product {line['product_id']} is no longer available")
        items.append(OrderItem(
            product_id=line["product_id"],
            name=product["name"],
            price=product["price"],
            quantity=line["quantity"],
            image=product.get("image"),
        ))
    return items


def order_total(items: List[OrderItem]) -> float:
    return round(sum(item.price * item.quantity for item in items), 2)


def get_owned_order(db: Database, order_id: str, user: AuthUser) -> dict:
    order = db["order"].find_one({"_id": oid(order_id)})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order["user_id"] != user.id:
        logger.warning("User %s tried to access order %s owned by %s", user.id, order_id, order["user_id"])
        raise HTTPException(status_code=403, detail="Unauthorized")
    return order


def record_payment(db: Database, order_id: str, payment_intent_id: str) -> Optional[dict]:
    return db["order"].find_one_and_update(
        {"_id": oid(order_id)},
        {"$set": {
            "status": OrderStatus.processing.value,
            "payment_id": payment_intent_id,
            "updated_at": now(),
        }},
        return_document=ReturnDocument.AFTER,
    )


def with_owners(db: Database, orders: List[dict]) -> List[dict]:
    """Serialize orders and attach the owner's name and email."""
    ids = {o["user_id"] for o in orders}
    keys = [oid(i) for i in ids]
    owners = {
        str(u["_id"]): {
            "id": str(u["_id"]),
            "first_name": u.get("first_name"),
            "last_name": u.get("last_name"),
            "email": u.get("email"),
        }
        for u in db["user"].find({"_id": {"$in": keys}})
    }
    out = []
    for o in orders:
        doc = serialize_doc(o)
        doc["user"] = owners.get(o["user_id"])
        out.append(doc)
    return out


# Checkout
@router.post("", status_code=201)
def create_order(body: OrderCreate, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    cart = find_cart(db, user.id)
    if not cart or not cart.get("items"):
        raise HTTPException(status_code=400, detail="Cart is empty")

    items = snapshot_items(db, cart)
    order = OrderSchema(
        user_id=user.id,
        items=items,
        total_amount=order_total(items),
        shipping_address=body.shipping_address,
        status=OrderStatus.pending,
    )
    try:
        order_id = create_document(db, "order", order)
    except PyMongoError:
        logger.exception("Failed to save order for user %s", user.id)
        raise HTTPException(status_code=500, detail="Failed to create order")

    logger.info("Created order %s for user %s, total %.2f", order_id, user.id, order.total_amount)
    return {"message": "Order created successfully", "order": serialize_doc(db["order"].find_one({"_id": oid(order_id)}))}


@router.post("/payment-intent")
def create_payment_intent(body: PaymentIntentRequest, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    order = get_owned_order(db, body.order_id, user)
    intent = payments.create_payment_intent(body.order_id, order["total_amount"])
    return {"clientSecret": intent.client_secret}


@router.post("/confirm-payment")
def confirm_payment(body: ConfirmPaymentRequest, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    get_owned_order(db, body.order_id, user)
    if settings.verify_payments():
        payments.verify_payment_intent(body.payment_intent_id, body.order_id)

    try:
        order = record_payment(db, body.order_id, body.payment_intent_id)
    except PyMongoError:
        logger.exception("Failed to record payment %s on order %s", body.payment_intent_id, body.order_id)
        raise HTTPException(status_code=500, detail="Failed to confirm payment")
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    # Only drop the cart once the order write has gone through
    db["cart"].delete_one({"user_id": user.id})
    logger.info("Order %s paid with %s; cart cleared for user %s", body.order_id, body.payment_intent_id, user.id)
    return {"message": "Payment confirmed and order processing", "order": serialize_doc(order)}


# Reads
@router.get("")
def get_orders(user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    orders = get_documents(db, "order", {"user_id": user.id}, sort=NEWEST_FIRST)
    return [serialize_doc(o) for o in orders]


@router.get("/all")
def get_all_orders(status: Optional[OrderStatus] = None, user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    query = {}
    if status:
        query["status"] = status.value
    return with_owners(db, get_documents(db, "order", query, sort=NEWEST_FIRST))


@router.get("/{order_id}")
def get_order(order_id: str, user: AuthUser = Depends(get_current_user), db: Database = Depends(get_db)):
    return serialize_doc(get_owned_order(db, order_id, user))


# Admin
@router.put("/{order_id}")
def update_order_status(
    order_id: str,
    body: StatusUpdate,
    user: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
):
    # Any known status may follow any other; there is no transition graph
    order = db["order"].find_one_and_update(
        {"_id": oid(order_id)},
        {"$set": {"status": body.status.value, "updated_at": now()}},
        return_document=ReturnDocument.AFTER,
    )
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    logger.info("Admin %s set order %s to %s", user.id, order_id, body.status.value)
    return {"message": "Order status updated", "order": serialize_doc(order)}
