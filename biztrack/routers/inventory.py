# biztrack/routers/inventory.py

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from biztrack.database import get_db
from biztrack.core.notifications import check_stock_notification
from biztrack.models.inventory import Inventory
from biztrack.models.products import Product
from biztrack.schemas.inventory import (
    InventoryCreate,
    InventoryUpdate,
    InventoryResponse,
)

router = APIRouter(
    prefix="/inventory",
    tags=["Inventory"],
)


def _check_levels(quantity: int | None, threshold: int | None) -> None:
    if quantity is not None and quantity < 0:
        raise HTTPException(status_code=400, detail="Quantity cannot be negative")

    if threshold is not None and threshold < 0:
        raise HTTPException(status_code=400, detail="Low stock threshold cannot be negative")


@router.post("/{product_id}", response_model=InventoryResponse, status_code=status.HTTP_201_CREATED)
def add_inventory(
    product_id: int,
    inventory_data: InventoryCreate,
    db: Session = Depends(get_db),
):
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    if product.inventory:
        raise HTTPException(status_code=400, detail="Inventory already exists")

    _check_levels(inventory_data.quantity_available, inventory_data.low_stock_threshold)

    inventory = Inventory(
        product=product,
        quantity_available=inventory_data.quantity_available,
        low_stock_threshold=inventory_data.low_stock_threshold,
        expiry_date=inventory_data.expiry_date,
    )
    db.add(inventory)
    db.flush()

    # Stocking an item at or under its threshold alerts straight away
    check_stock_notification(db, inventory)

    db.commit()
    db.refresh(inventory)

    return inventory


@router.put("/{product_id}", response_model=InventoryResponse)
def update_inventory(
    product_id: int,
    inventory_data: InventoryUpdate,
    db: Session = Depends(get_db),
):
    inventory = (
        db.query(Inventory)
        .filter(Inventory.product_id == product_id)
        .first()
    )

    if not inventory:
        raise HTTPException(status_code=404, detail="Inventory not found")

    _check_levels(inventory_data.quantity_available, inventory_data.low_stock_threshold)

    for field, value in inventory_data.model_dump(exclude_none=True).items():
        setattr(inventory, field, value)

    check_stock_notification(db, inventory)

    db.commit()
    db.refresh(inventory)

    return inventory


@router.get("", response_model=list[InventoryResponse])
def list_inventory(
    db: Session = Depends(get_db),
):
    return db.query(Inventory).order_by(Inventory.product_id.asc()).all()


@router.get("/low-stock", response_model=list[InventoryResponse])
def list_low_stock(
    db: Session = Depends(get_db),
):
    return (
        db.query(Inventory)
        .filter(Inventory.quantity_available <= Inventory.low_stock_threshold)
        .order_by(Inventory.quantity_available.asc())
        .all()
    )
