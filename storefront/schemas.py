from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import MAX_ID


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: int
    stock: int
    category: str
    image_url: str
    description: str
    created_at: datetime


# Buyer fields are deliberately loose: sanitation and required-field checks
# happen in checkout.validate_order so they fail with specific messages.
class CustomerIn(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    postal_code: Optional[str] = None


class CartLineIn(BaseModel):
    product_id: int = Field(ge=1, le=MAX_ID)
    qty: int


class OrderCreate(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    customer: CustomerIn = Field(default_factory=CustomerIn)
    shipping_method: Optional[str] = None
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    items: List[CartLineIn] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def _non_list_items_are_empty(cls, v):
        return v if isinstance(v, list) else []


class OrderCreated(BaseModel):
    ok: bool = True
    order_id: int
    order_code: str
    total: int


class AdminOrder(BaseModel):
    id: int
    order_code: str
    customer_id: int
    shipping_method: str
    shipping_cost: int
    payment_method: str
    notes: Optional[str]
    subtotal: int
    total: int
    status: str
    created_at: datetime
    customer_name: str
    phone: str
    email: Optional[str]
    address: str
    city: str
    postal_code: str


class AdminOrderItem(BaseModel):
    product_id: int
    name_snapshot: str
    price_snapshot: int
    qty: int
    line_total: int


class AdminOrderOut(BaseModel):
    order: AdminOrder
    items: List[AdminOrderItem]
