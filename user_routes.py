import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from pymongo import DESCENDING, ReturnDocument
from pymongo.database import Database

from database import get_db, get_documents, now, oid
from order_routes import NEWEST_FIRST, with_owners
from schemas import Role
from security import AuthUser, public_user, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["admin"])


class RoleUpdate(BaseModel):
    role: Role


@router.get("")
def get_all_users(user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    users = get_documents(db, "user", sort=[("created_at", DESCENDING)])
    return [public_user(u) for u in users]


@router.get("/count")
def get_user_count(user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    return {"count": db["user"].count_documents({})}


@router.get("/{user_id}/orders")
def get_user_orders(user_id: str, user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    orders = get_documents(db, "order", {"user_id": user_id}, sort=NEWEST_FIRST)
    logger.info("Admin %s fetched %d orders for user %s", user.id, len(orders), user_id)
    return with_owners(db, orders)


@router.put("/{user_id}/role")
def update_user_role(user_id: str, body: RoleUpdate, user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    doc = db["user"].find_one_and_update(
        {"_id": oid(user_id)},
        {"$set": {"role": body.role.value, "updated_at": now()}},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise HTTPException(status_code=404, detail="User not found")
    logger.info("Admin %s set role of user %s to %s", user.id, user_id, body.role.value)
    return {"message": "User role updated successfully", "user": public_user(doc)}


@router.delete("/{user_id}")
def delete_user(user_id: str, user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    res = db["user"].delete_one({"_id": oid(user_id)})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="User not found")
    # Orders stay as the sales record; the cart has no other owner
    db["cart"].delete_one({"user_id": user_id})
    logger.info("Admin %s deleted user %s", user.id, user_id)
    return {"message": "User deleted successfully"}
