# =========================================================
# PURCHASES ROUTER
#
# - Purchase orders from suppliers
# - Received orders add their quantities to inventory;
#   cancelling or deleting a received order takes them back
# - Payment status follows the same rule as bills
# =========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from biztrack.database import get_db
from biztrack.core.config import settings
from biztrack.core.notifications import check_stock_notification, create_notification
from biztrack.core.pricing import derive_payment_status, format_money, to_money
from biztrack.models.inventory import Inventory
from biztrack.models.products import Product
from biztrack.models.purchases import Purchase
from biztrack.models.purchase_items import PurchaseItem
from biztrack.schemas.purchase import (
    PurchaseCreate,
    PurchaseResponse,
    PurchaseStatus,
    PurchaseStatusUpdate,
)
from biztrack.schemas.sale import PaymentCreate

router = APIRouter(prefix="/purchases", tags=["Purchases"])

logger = logging.getLogger("biztrack")

# Allowed status moves; cancelled orders are final
STATUS_TRANSITIONS = {
    "pending": {"received", "cancelled"},
    "received": {"cancelled"},
    "cancelled": set(),
}


def _get_purchase_or_404(db: Session, purchase_id: int) -> Purchase:
    purchase = (
        db.query(Purchase)
        .options(joinedload(Purchase.items))
        .filter(Purchase.id == purchase_id)
        .first()
    )

    if not purchase:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Purchase not found",
        )

    return purchase


def _locked_inventory(db: Session, product_id: int) -> Inventory | None:
    return (
        db.query(Inventory)
        .filter(Inventory.product_id == product_id)
        .with_for_update()
        .first()
    )


def _receive_stock(db: Session, purchase: Purchase) -> None:
    for item in purchase.items:
        if item.product_id is None:
            continue

        inventory = _locked_inventory(db, item.product_id)

        if inventory is None:
            inventory = Inventory(
                product_id=item.product_id,
                quantity_available=0,
                low_stock_threshold=settings.LOW_STOCK_THRESHOLD,
            )
            db.add(inventory)

        inventory.quantity_available += item.quantity


def _return_stock(db: Session, purchase: Purchase) -> None:
    shortages = []
    rows = []

    for item in purchase.items:
        if item.product_id is None:
            continue

        inventory = _locked_inventory(db, item.product_id)
        available = inventory.quantity_available if inventory else 0

        if available < item.quantity:
            shortages.append(
                f"Cannot return {item.quantity} of {item.name}. Available: {available}"
            )
            continue

        rows.append((inventory, item.quantity))

    if shortages:
        raise HTTPException(status_code=400, detail="; ".join(shortages))

    for inventory, quantity in rows:
        inventory.quantity_available -= quantity
        check_stock_notification(db, inventory)


# =========================================================
# LIST / GET
# =========================================================
@router.get("", response_model=list[PurchaseResponse])
def list_purchases(
    status_filter: PurchaseStatus | None = Query(None, alias="status"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    query = db.query(Purchase).options(joinedload(Purchase.items))

    if status_filter:
        query = query.filter(Purchase.status == status_filter)

    return (
        query.order_by(Purchase.created_at.desc(), Purchase.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


@router.get("/{purchase_id}", response_model=PurchaseResponse)
def get_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
):
    return _get_purchase_or_404(db, purchase_id)


# =========================================================
# CREATE PURCHASE
# =========================================================
@router.post("", response_model=PurchaseResponse, status_code=status.HTTP_201_CREATED)
def create_purchase(
    purchase_data: PurchaseCreate,
    db: Session = Depends(get_db),
):
    if not purchase_data.items:
        raise HTTPException(status_code=400, detail="Items are required")

    product_ids = [item.product_id for item in purchase_data.items]
    if len(product_ids) != len(set(product_ids)):
        raise HTTPException(status_code=400, detail="Duplicate products in purchase are not allowed")

    products = {
        product.id: product
        for product in db.query(Product).filter(Product.id.in_(product_ids)).all()
    }

    missing = [str(product_id) for product_id in product_ids if product_id not in products]
    if missing:
        raise HTTPException(
            status_code=404,
            detail=f"Products not found: {', '.join(missing)}",
        )

    subtotal = to_money(
        sum((to_money(item.cost * item.quantity) for item in purchase_data.items), to_money(0))
    )
    tax = to_money(purchase_data.tax)
    shipping = to_money(purchase_data.shipping)
    total = subtotal + tax + shipping

    if total <= 0:
        raise HTTPException(status_code=400, detail="Total must be greater than 0")

    paid_amount = to_money(purchase_data.paid_amount)

    if paid_amount > total:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Payment amount ({format_money(paid_amount)}) cannot exceed "
                f"total amount ({format_money(total)})"
            ),
        )

    try:
        purchase = Purchase(
            supplier_name=purchase_data.supplier_name,
            supplier_email=purchase_data.supplier_email or None,
            supplier_phone=purchase_data.supplier_phone or None,
            subtotal=subtotal,
            tax=tax,
            shipping=shipping,
            total=total,
            payment_method=purchase_data.payment_method,
            payment_status=derive_payment_status(paid_amount, total),
            paid_amount=paid_amount,
            status=purchase_data.status,
            expected_delivery_date=purchase_data.expected_delivery_date,
            notes=purchase_data.notes,
        )
        db.add(purchase)
        db.flush()

        purchase.purchase_number = f"PO-{purchase.id:06d}"

        for item in purchase_data.items:
            product = products[item.product_id]

            # Latest supplier cost becomes the product's cost price
            product.cost_price = to_money(item.cost)
            if item.selling_price:
                product.selling_price = to_money(item.selling_price)

            purchase.items.append(
                PurchaseItem(
                    product_id=product.id,
                    name=product.name,
                    quantity=item.quantity,
                    cost=to_money(item.cost),
                    total=to_money(item.cost * item.quantity),
                )
            )

        if purchase.status == "received":
            _receive_stock(db, purchase)

        create_notification(
            db,
            type="purchase",
            title="New Purchase Order",
            message=(
                f"Purchase {purchase.purchase_number} from {purchase.supplier_name} "
                f"for {format_money(total)} is {purchase.status}."
            ),
            related_id=purchase.id,
            related_model="Purchase",
        )

        db.commit()
        db.refresh(purchase)

        logger.info(f"Purchase {purchase.purchase_number} created. Total: {total}")

        return purchase

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Purchase creation failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to create purchase")


# =========================================================
# STATUS
# =========================================================
@router.put("/{purchase_id}/status", response_model=PurchaseResponse)
def update_purchase_status(
    purchase_id: int,
    status_data: PurchaseStatusUpdate,
    db: Session = Depends(get_db),
):
    purchase = _get_purchase_or_404(db, purchase_id)

    current = purchase.status
    target = status_data.status

    if target == current:
        return purchase

    if target not in STATUS_TRANSITIONS[current]:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot change purchase from {current} to {target}",
        )

    try:
        if target == "received":
            _receive_stock(db, purchase)
        elif current == "received":
            _return_stock(db, purchase)

        purchase.status = target

        db.commit()
        db.refresh(purchase)

    except HTTPException:
        db.rollback()
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Purchase status update failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to update purchase")

    logger.info(f"Purchase {purchase.purchase_number} moved from {current} to {target}")

    return purchase


# =========================================================
# PAYMENTS
# =========================================================
@router.post("/{purchase_id}/payments", response_model=PurchaseResponse)
def record_purchase_payment(
    purchase_id: int,
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
):
    purchase = _get_purchase_or_404(db, purchase_id)

    amount = to_money(payment_data.amount)
    balance = to_money(purchase.total) - to_money(purchase.paid_amount)

    if balance <= 0:
        raise HTTPException(status_code=400, detail="Purchase is already fully paid")

    if amount > balance:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Payment amount ({format_money(amount)}) cannot exceed "
                f"balance due ({format_money(balance)})"
            ),
        )

    try:
        purchase.paid_amount = to_money(purchase.paid_amount) + amount
        purchase.payment_status = derive_payment_status(purchase.paid_amount, purchase.total)

        db.commit()
        db.refresh(purchase)

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Purchase payment failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to record payment")

    return purchase


# =========================================================
# DELETE
# =========================================================
@router.delete("/{purchase_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_purchase(
    purchase_id: int,
    db: Session = Depends(get_db),
):
    purchase = _get_purchase_or_404(db, purchase_id)

    try:
        if purchase.status == "received":
            _return_stock(db, purchase)

        db.delete(purchase)
        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Purchase deletion failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to delete purchase")

    logger.info(f"Purchase {purchase_id} deleted")

    return None
