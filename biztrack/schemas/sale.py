# schemas/sale.py

from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Literal
from decimal import Decimal

PaymentMethod = Literal["cash", "card", "bank_transfer", "other"]


class BillCustomer(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = ""
    phone: str = ""

class BillItemCreate(BaseModel):
    id: int
    name: str | None = None
    quantity: int = Field(..., gt=0)
    price: Decimal | None = None
    total: Decimal | None = None

class BillCreate(BaseModel):
    customer_id: int | None = None
    customer: BillCustomer | None = None
    items: List[BillItemCreate]
    subtotal: Decimal | None = None
    tax: Decimal | None = None
    discount: Decimal = Decimal("0.00")
    total: Decimal | None = None
    payment_method: PaymentMethod = "cash"
    paid_amount: Decimal = Field(Decimal("0.00"), ge=0)
    notes: str = ""
    request_id: str | None = None

class PaymentCreate(BaseModel):
    amount: Decimal = Field(..., gt=0)
    method: PaymentMethod = "cash"
    notes: str = ""

class InventoryRef(BaseModel):
    id: int
    product_id: int
    quantity_available: int
    low_stock_threshold: int

    class Config:
        from_attributes = True

class SaleItemResponse(BaseModel):
    product_id: int | None
    name: str
    quantity: int
    price: Decimal
    total: Decimal
    inventory: InventoryRef | None = None

    class Config:
        from_attributes = True

class SalePaymentResponse(BaseModel):
    amount: Decimal
    method: str
    notes: str
    paid_at: datetime

    class Config:
        from_attributes = True

class SaleResponse(BaseModel):
    id: int
    invoice_number: str
    customer_id: int | None
    customer_name: str
    customer_email: str | None
    customer_phone: str | None
    subtotal: Decimal
    tax: Decimal
    discount: Decimal
    total: Decimal
    payment_method: str
    payment_status: str
    paid_amount: Decimal
    status: str
    notes: str
    created_at: datetime
    items: List[SaleItemResponse]
    payments: List[SalePaymentResponse]

    class Config:
        from_attributes = True
