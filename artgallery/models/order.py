from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, computed_field

OrderStatus = Literal["new", "pending", "completed", "rejected"]
PaymentMethod = Literal["cash_on_delivery", "bank_transfer", "online_payment"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]


class Address(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = "India"


class Customer(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=1)
    address: Address = Address()


class PaintingDetails(BaseModel):
    title: str = ""
    artist: str = ""
    price: float = 0
    image: str = ""
    category: str = ""
    medium: str = ""
    dimensions: str = ""


class Order(BaseModel):
    id: str
    customer: Customer
    painting_id: str
    painting_details: PaintingDetails = PaintingDetails()
    status: OrderStatus = "new"
    total_amount: float = Field(..., ge=0)
    payment_method: PaymentMethod = "cash_on_delivery"
    payment_status: PaymentStatus = "pending"
    message: str = ""
    notes: str | None = Field(default=None, max_length=500)
    admin_notes: str | None = None
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field  # type: ignore[misc]
    @property
    def order_number(self) -> str:
        return f"KA{self.id[-6:].upper()}"


class OrderCreate(BaseModel):
    """Body of a public purchase inquiry."""

    customer: Customer
    painting_id: str = Field(..., min_length=1)
    painting_details: PaintingDetails | None = None
    message: str = ""
    total_amount: float | None = Field(default=None, ge=0)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderUpdate(BaseModel):
    status: OrderStatus | None = None
    payment_status: PaymentStatus | None = None
    payment_method: PaymentMethod | None = None
    notes: str | None = Field(default=None, max_length=500)
    admin_notes: str | None = None
    tracking_number: str | None = None
    estimated_delivery: datetime | None = None
