# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal, Optional
from decimal import Decimal
from datetime import datetime


class Principal(BaseModel):
    """Authenticated caller as supplied by the identity layer."""

    user_id: int
    role: Literal["user", "admin"] = "user"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# ---------- products ----------

class ProductIn(BaseModel):
    """Schema for creating a product."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    category: str = Field("Accessories", max_length=100)
    price: Decimal = Field(..., ge=0, description="Selling price")
    cost_price: Decimal = Field(Decimal("0"), ge=0, description="Purchase price, used for profit")
    stock: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    """Schema for a partial product update."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    price: Optional[Decimal] = Field(None, ge=0)
    selling_price: Optional[Decimal] = Field(None, ge=0)
    cost_price: Optional[Decimal] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)


class ProductOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    category: str
    price: Decimal
    selling_price: Optional[Decimal] = None
    cost_price: Decimal
    stock: int

    model_config = ConfigDict(from_attributes=True)


class StockLevelIn(BaseModel):
    product_id: int = Field(..., gt=0)
    stock: int = Field(..., ge=0)


class BulkStockIn(BaseModel):
    updates: List[StockLevelIn] = Field(..., min_length=1)


class RestockIn(BaseModel):
    # validated by the ledger
    quantity: int


class BulkDeleteIn(BaseModel):
    product_ids: List[int] = Field(..., min_length=1)


class BulkDeleteOut(BaseModel):
    deleted_count: int


# ---------- cart ----------

class ItemIn(BaseModel):
    """Schema for adding a product to the cart or changing its quantity."""

    product_id: int = Field(..., gt=0, description="Product id (> 0)")
    quantity: int = Field(..., gt=0, description="Quantity (> 0)")


class CartItemOut(BaseModel):
    product_id: int
    name: Optional[str] = None
    quantity: int
    price: Optional[Decimal] = None
    stock: Optional[int] = None


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]
    total: Decimal


# ---------- users ----------

class UserCreate(BaseModel):
    """Schema for registering a user."""

    id: int = Field(..., gt=0, description="User id (> 0)")
    name: str = Field(..., min_length=1, max_length=100, description="User name")
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    role: Literal["user", "admin"] = "user"


class UserRead(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: str

    model_config = ConfigDict(from_attributes=True)


class UserRoleIn(BaseModel):
    role: str


class UserPageOut(BaseModel):
    users: List[UserRead]
    current_page: int
    total_pages: int
    total_users: int


# ---------- orders ----------

class ShippingInfo(BaseModel):
    """Shipping contact, copied into the order as is."""

    name: Optional[str] = Field(None, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=32)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., min_length=1, max_length=20)


class OrderCreate(BaseModel):
    """Schema for placing an order from the caller's cart."""

    shipping_info: Optional[ShippingInfo] = None


class OrderStatusIn(BaseModel):
    # validated by the service so the error carries the allowed values
    status: str


class OrderItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    price: Decimal
    cost_price: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    total: Decimal
    shipping_address: str
    shipping_info: dict
    created_at: datetime
    items: List[OrderItemOut] = []

    model_config = ConfigDict(from_attributes=True)


# ---------- admin ----------

class LowStockProductOut(BaseModel):
    id: int
    name: str
    category: str
    stock: int


class RevenuePointOut(BaseModel):
    date: str
    revenue: Decimal


class AdminStatsOut(BaseModel):
    total_users: int
    active_users: int
    inactive_users: int

    total_orders: int
    pending_orders: int
    completed_orders: int
    cancelled_orders: int

    total_revenue: Decimal
    total_cost: Decimal
    total_profit: Decimal
    profit_margin: Decimal

    low_stock_products: List[LowStockProductOut]
    low_stock_count: int
