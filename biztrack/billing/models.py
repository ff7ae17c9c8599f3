# =========================================================
# BILLING ENGINE MODELS
# Local shapes for the objects the engine works with, plus
# one normalizer per backend entity. Normalizers accept the
# loose server shapes (``_id`` or ``id``) and fail loudly on
# missing required fields.
# =========================================================

from datetime import datetime
from decimal import Decimal
from typing import List

from pydantic import AliasChoices, BaseModel, Field, ValidationError

from biztrack.billing.exceptions import MalformedResponse
from biztrack.core.pricing import to_money

ItemId = int | str


class Product(BaseModel):
    id: ItemId
    name: str
    barcode: str = ""
    price: Decimal = Field(..., ge=0)
    category: str = "Uncategorized"
    stock: int = Field(..., ge=0)


class Customer(BaseModel):
    id: ItemId = Field(..., validation_alias=AliasChoices("_id", "id"))
    name: str
    email: str
    phone: str


class NewCustomer(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""


class CartItem(BaseModel):
    id: ItemId
    name: str
    price: Decimal
    quantity: int = Field(1, ge=1)
    stock: int = 0

    @property
    def total(self) -> Decimal:
        return to_money(self.price * self.quantity)


class SoldItem(BaseModel):
    """A line of a created bill as returned by the backend."""

    product_id: ItemId | None = None
    name: str
    quantity: int
    price: Decimal
    total: Decimal
    stock_remaining: int | None = None


class Receipt(BaseModel):
    invoice_number: str
    date: datetime
    customer: Customer
    items: List[CartItem]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    paid_amount: Decimal
    payment_status: str
    notes: str = ""


def _normalize(model, raw: dict, entity: str):
    if not isinstance(raw, dict):
        raise MalformedResponse(f"Expected a {entity} object, got {type(raw).__name__}")
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise MalformedResponse(f"Invalid {entity} from server: {e}") from e


def normalize_customer(raw: dict) -> Customer:
    return _normalize(Customer, raw, "customer")


def normalize_product(raw: dict) -> Product:
    return _normalize(Product, raw, "product")


def normalize_sold_item(raw: dict) -> SoldItem:
    if isinstance(raw, dict) and raw.get("inventory"):
        inventory = raw["inventory"]
        raw = {**raw, "stock_remaining": inventory.get("quantity_available", inventory.get("stock"))}
    return _normalize(SoldItem, raw, "sale item")
