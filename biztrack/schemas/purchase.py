# schemas/purchase.py

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import List, Literal
from decimal import Decimal

from biztrack.schemas.sale import PaymentMethod

PurchaseStatus = Literal["pending", "received", "cancelled"]


class PurchaseItemCreate(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    cost: Decimal = Field(..., ge=0)
    selling_price: Decimal | None = Field(None, ge=0)

class PurchaseCreate(BaseModel):
    supplier_name: str = Field(..., min_length=1)
    supplier_email: str = ""
    supplier_phone: str = ""
    items: List[PurchaseItemCreate]
    tax: Decimal = Field(Decimal("0.00"), ge=0)
    shipping: Decimal = Field(Decimal("0.00"), ge=0)
    payment_method: PaymentMethod = "cash"
    paid_amount: Decimal = Field(Decimal("0.00"), ge=0)
    status: Literal["pending", "received"] = "received"
    expected_delivery_date: date | None = None
    notes: str = ""

class PurchaseStatusUpdate(BaseModel):
    status: PurchaseStatus

class PurchaseItemResponse(BaseModel):
    product_id: int | None
    name: str
    quantity: int
    cost: Decimal
    total: Decimal

    class Config:
        from_attributes = True

class PurchaseResponse(BaseModel):
    id: int
    purchase_number: str
    supplier_name: str
    supplier_email: str | None
    supplier_phone: str | None
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    payment_method: str
    payment_status: str
    paid_amount: Decimal
    status: str
    expected_delivery_date: date | None
    notes: str
    created_at: datetime
    items: List[PurchaseItemResponse]

    class Config:
        from_attributes = True
