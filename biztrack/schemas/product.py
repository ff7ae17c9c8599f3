from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime


class ProductCreate(BaseModel):
    name: str
    barcode: str | None = None
    category: str = "Uncategorized"

    cost_price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Cost price must be below 100 million"
    )

    selling_price: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Selling price must be below 100 million"
    )


class ProductUpdate(BaseModel):
    name: str | None = None
    barcode: str | None = None
    category: str | None = None
    cost_price: Decimal | None = None
    selling_price: Decimal | None = None


class ProductResponse(BaseModel):
    id: int
    name: str
    barcode: str | None
    category: str
    cost_price: Decimal
    selling_price: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class BillingProductResponse(BaseModel):
    id: int
    name: str
    barcode: str
    price: Decimal
    category: str
    stock: int
