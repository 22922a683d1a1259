import logging
import math
import re
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.database import Database

from database import create_document, get_db, get_documents, now, oid, serialize_doc
from schemas import Product as ProductSchema
from security import AuthUser, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])
admin_router = APIRouter(prefix="/api/admin/products", tags=["admin"])


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, min_length=1)
    stock: Optional[int] = Field(None, ge=0)
    rating: Optional[float] = Field(None, ge=0, le=5)
    reviews: Optional[int] = Field(None, ge=0)


def find_product(db: Database, product_id: str) -> Optional[dict]:
    return db["product"].find_one({"_id": oid(product_id)})


def list_products(
    db: Database,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = 1,
    limit: int = 10,
) -> dict:
    query = {}
    if category:
        query["category"] = category
    if sort:
        order = [("price", ASCENDING if sort == "asc" else DESCENDING)]
    else:
        order = [("created_at", DESCENDING)]

    total = db["product"].count_documents(query)
    docs = db["product"].find(query).sort(order).skip((page - 1) * limit).limit(limit)
    return {
        "products": [serialize_doc(d) for d in docs],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }


# Products
@router.get("")
def get_products(
    category: Optional[str] = None,
    sort: Optional[Literal["asc", "desc"]] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Database = Depends(get_db),
):
    return list_products(db, category, sort, page, limit)


@router.get("/search")
def search_products(q: Optional[str] = None, db: Database = Depends(get_db)):
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Search query required")
    pattern = re.escape(q.strip())
    query = {
        "$or": [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
            {"category": {"$regex": pattern, "$options": "i"}},
        ]
    }
    return [serialize_doc(d) for d in get_documents(db, "product", query)]


@router.get("/{product_id}")
def get_product(product_id: str, db: Database = Depends(get_db)):
    doc = find_product(db, product_id)
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_doc(doc)


# Admin CRUD
@admin_router.get("")
def admin_list_products(
    category: Optional[str] = None,
    sort: Optional[Literal["asc", "desc"]] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    user: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
):
    return list_products(db, category, sort, page, limit)


@admin_router.post("", status_code=201)
def create_product(body: ProductSchema, user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    product_id = create_document(db, "product", body)
    logger.info("Admin %s created product %s", user.id, product_id)
    return {"message": "Product created", "product": serialize_doc(find_product(db, product_id))}


@admin_router.put("/{product_id}")
def update_product(
    product_id: str,
    body: ProductUpdate,
    user: AuthUser = Depends(require_admin),
    db: Database = Depends(get_db),
):
    update = body.model_dump(exclude_none=True)
    update["updated_at"] = now()
    doc = db["product"].find_one_and_update(
        {"_id": oid(product_id)},
        {"$set": update},
        return_document=ReturnDocument.AFTER,
    )
    if not doc:
        raise HTTPException(status_code=404, detail="Product not found")
    return {"message": "Product updated", "product": serialize_doc(doc)}


@admin_router.delete("/{product_id}")
def delete_product(product_id: str, user: AuthUser = Depends(require_admin), db: Database = Depends(get_db)):
    res = db["product"].delete_one({"_id": oid(product_id)})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Admin %s deleted product %s", user.id, product_id)
    return {"message": "Product deleted"}
