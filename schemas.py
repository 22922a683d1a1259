"""
Database Schemas

MongoDB collection schemas for the storefront, defined as Pydantic models.
These schemas are used for data validation before documents are written.

Model name is converted to lowercase for the collection name:
- User -> "user" collection
- Product -> "product" collection
- Cart -> "cart" collection
- Order -> "order" collection
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


class Role(str, Enum):
    user = "user"
    admin = "admin"


class OrderStatus(str, Enum):
    pending = "pending"
    processing = "processing"
    shipped = "shipped"
    delivered = "delivered"
    cancelled = "cancelled"


class User(BaseModel):
    """
    Users collection schema
    Collection name: "user"
    """
    username: str = Field(..., description="Unique login handle")
    email: EmailStr = Field(..., description="Email address, stored lowercased")
    password_hash: str = Field(..., description="bcrypt hash (server-side)")
    first_name: str
    last_name: str
    address: Optional[str] = Field(None, description="Primary shipping address")
    phone: Optional[str] = None
    profile_image: Optional[str] = Field(None, description="Avatar URL")
    role: Role = Field(Role.user, description="Role: user | admin")


class Product(BaseModel):
    """
    Products collection schema
    Collection name: "product"
    """
    name: str = Field(..., min_length=1, description="Product name")
    description: str = Field(..., min_length=1, description="Product description")
    price: float = Field(..., ge=0, description="Price in dollars")
    category: str = Field(..., min_length=1, description="Free-text category label")
    image: str = Field(..., min_length=1, description="Image URL")
    stock: int = Field(0, ge=0, description="Units in stock")
    rating: float = Field(0, ge=0, le=5, description="Average rating 0-5")
    reviews: int = Field(0, ge=0, description="Number of reviews")


class CartItem(BaseModel):
    product_id: str = Field(..., description="Product ObjectId as string")
    quantity: int = Field(..., ge=1)


class Cart(BaseModel):
    """
    Carts collection schema, one per user
    Collection name: "cart"
    """
    user_id: str = Field(..., description="User ObjectId as string")
    items: List[CartItem] = Field(default_factory=list)


class OrderItem(BaseModel):
    """Line item copied from the product when the order is created."""
    product_id: str = Field(..., description="Product ObjectId as string")
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None


class ShippingAddress(BaseModel):
    full_name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1)
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)


class Order(BaseModel):
    """
    Orders collection schema
    Collection name: "order"
    """
    user_id: str = Field(..., description="User ObjectId as string")
    items: List[OrderItem]
    total_amount: float = Field(..., ge=0, description="Fixed at creation")
    shipping_address: ShippingAddress
    status: OrderStatus = Field(OrderStatus.pending, description="pending | processing | shipped | delivered | cancelled")
    payment_id: Optional[str] = Field(None, description="Stripe payment intent id")
