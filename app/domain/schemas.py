# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1, alias="productId")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")

    model_config = ConfigDict(populate_by_name=True)


class ItemUpdateIn(BaseModel):
    """Schema dla zmiany ilości, 0 usuwa pozycję."""

    product_id: str = Field(..., min_length=1, alias="productId")
    quantity: int = Field(..., ge=0)

    model_config = ConfigDict(populate_by_name=True)


class ItemRemoveIn(BaseModel):
    product_id: str = Field(..., min_length=1, alias="productId")

    model_config = ConfigDict(populate_by_name=True)


class ProductOut(BaseModel):
    id: str
    name: str
    price: Decimal

    model_config = ConfigDict(from_attributes=True)


class CartItemOut(BaseModel):
    """Schema dla produktu w koszyku (response)."""

    product_id: str
    quantity: int
    price: Decimal
    total: Decimal
    product: Optional[ProductOut] = None

    model_config = ConfigDict(from_attributes=True)


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    session_id: str
    items: List[CartItemOut]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    item_count: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AddressIn(BaseModel):
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    company: Optional[str] = None
    address1: str
    address2: Optional[str] = None
    city: str
    state: str
    postal_code: str = Field(..., alias="postalCode")
    country: str
    phone: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("first_name", "last_name", "address1", "city", "state", "postal_code", "country")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field is required")
        return v


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia."""

    session_id: str = Field(..., min_length=1, alias="sessionId")
    shipping_address: AddressIn = Field(..., alias="shippingAddress")
    billing_address: AddressIn = Field(..., alias="billingAddress")
    payment_intent_id: str = Field(..., min_length=1, alias="paymentIntentId")
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class UserOut(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str

    model_config = ConfigDict(from_attributes=True)


class OrderItemOut(BaseModel):
    id: str
    product_id: str
    quantity: int
    price: Decimal
    total: Decimal
    product: Optional[ProductOut] = None

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: str
    user_id: str
    status: str
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    shipping_address: dict
    billing_address: dict
    payment_intent_id: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut] = []
    user: Optional[UserOut] = None

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class OrderListOut(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class StatusUpdateIn(BaseModel):
    status: str = Field(..., min_length=1)


class CustomerOut(UserOut):
    role: str
    created_at: datetime
    order_count: int = 0


class CustomerListOut(BaseModel):
    customers: List[CustomerOut]
    pagination: Pagination


class PaymentCreateIn(BaseModel):
    order_id: str = Field(..., min_length=1, alias="orderId")
    amount: Decimal = Field(..., gt=0)
    currency: str = ""
    description: str = ""

    model_config = ConfigDict(populate_by_name=True)


class PaymentVerifyIn(BaseModel):
    razorpay_order_id: str = Field(..., min_length=1)
    razorpay_payment_id: str = Field(..., min_length=1)
    razorpay_signature: str = Field(..., min_length=1)


class PaymentOut(BaseModel):
    id: str
    order_id: str
    gateway_order_id: str
    gateway_payment_id: Optional[str] = None
    amount: int
    currency: str
    status: str
    method: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
