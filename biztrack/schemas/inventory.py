# schemas/inventory.py

from pydantic import BaseModel
from datetime import date


class InventoryCreate(BaseModel):
    quantity_available: int
    low_stock_threshold: int = 5
    expiry_date: date | None = None

class InventoryUpdate(BaseModel):
    # Omitted fields keep their stored values
    quantity_available: int | None = None
    low_stock_threshold: int | None = None
    expiry_date: date | None = None

class InventoryResponse(BaseModel):
    id: int
    product_id: int
    product_name: str | None = None
    quantity_available: int
    low_stock_threshold: int
    is_low_stock: bool
    expiry_date: date | None

    class Config:
        from_attributes = True
