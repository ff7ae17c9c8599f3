# =========================================================
# BILLING ROUTER
#
# - Product lookup for the point of sale (products + stock)
# - Bill creation: server-side stock check, authoritative
#   totals, payment status, stock deduction, alerts
# - Bill history and follow-up payments
#
# Bills are idempotent by request_id (double-submit safe)
# =========================================================

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload
from sqlalchemy.exc import SQLAlchemyError

from biztrack.database import get_db
from biztrack.core.notifications import check_stock_notification, create_notification
from biztrack.core.pricing import (
    calculate_totals,
    derive_payment_status,
    format_money,
    to_money,
)
from biztrack.core.rate_limiter import limiter
from biztrack.models.customers import Customer
from biztrack.models.inventory import Inventory
from biztrack.models.products import Product
from biztrack.models.sales import Sale
from biztrack.models.sale_items import SaleItem
from biztrack.models.sale_payments import SalePayment
from biztrack.schemas.product import BillingProductResponse
from biztrack.schemas.sale import BillCreate, PaymentCreate, SaleResponse

router = APIRouter(prefix="/billing", tags=["Billing"])

logger = logging.getLogger("biztrack")


def _to_billing_product(product: Product) -> BillingProductResponse:
    return BillingProductResponse(
        id=product.id,
        name=product.name,
        barcode=product.barcode or "",
        price=product.selling_price,
        category=product.category or "Uncategorized",
        stock=product.stock,
    )


def _get_sale_or_404(db: Session, sale_id: int) -> Sale:
    sale = (
        db.query(Sale)
        .options(joinedload(Sale.items))
        .filter(Sale.id == sale_id)
        .first()
    )

    if not sale:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bill not found",
        )

    return sale


# =========================================================
# BILLING PRODUCTS
# =========================================================
@router.get("/products", response_model=list[BillingProductResponse])
def list_billing_products(
    search: str | None = Query(None),
    db: Session = Depends(get_db),
):
    query = db.query(Product).options(joinedload(Product.inventory))

    if search:
        pattern = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(pattern),
                Product.barcode.ilike(pattern),
                Product.category.ilike(pattern),
            )
        )

    products = query.order_by(Product.name.asc()).all()

    return [_to_billing_product(product) for product in products]


@router.get("/products/{product_id}", response_model=BillingProductResponse)
def get_billing_product(
    product_id: int,
    db: Session = Depends(get_db),
):
    product = db.query(Product).filter(Product.id == product_id).first()

    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    return _to_billing_product(product)


# =========================================================
# CREATE BILL
# =========================================================
@router.post("/bills", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_bill(
    request: Request,
    bill_data: BillCreate,
    db: Session = Depends(get_db),
):
    if not bill_data.items:
        raise HTTPException(status_code=400, detail="Items are required")

    product_ids = [item.id for item in bill_data.items]
    if len(product_ids) != len(set(product_ids)):
        raise HTTPException(status_code=400, detail="Duplicate products in bill are not allowed")

    # ===============================
    # IDEMPOTENCY CHECK (DOUBLE CLICK PROTECTION)
    # ===============================
    if bill_data.request_id:
        existing_sale = (
            db.query(Sale)
            .filter(Sale.request_id == bill_data.request_id)
            .first()
        )

        if existing_sale:
            return existing_sale

    if bill_data.customer_id is not None:
        customer = db.query(Customer).filter(Customer.id == bill_data.customer_id).first()
        if not customer:
            raise HTTPException(status_code=404, detail="Customer not found")

        customer_info = {
            "customer_id": customer.id,
            "customer_name": customer.name,
            "customer_email": customer.email,
            "customer_phone": customer.phone,
        }
    elif bill_data.customer is not None:
        customer_info = {
            "customer_id": None,
            "customer_name": bill_data.customer.name,
            "customer_email": bill_data.customer.email,
            "customer_phone": bill_data.customer.phone,
        }
    else:
        raise HTTPException(status_code=400, detail="Customer information is required")

    try:
        stock_errors = []
        lines = []

        for item in bill_data.items:
            product = db.query(Product).filter(Product.id == item.id).first()

            if not product:
                stock_errors.append(f"Product {item.name or item.id} not found in inventory")
                continue

            inventory = (
                db.query(Inventory)
                .filter(Inventory.product_id == product.id)
                .with_for_update()
                .first()
            )

            available = inventory.quantity_available if inventory else 0

            if available < item.quantity:
                stock_errors.append(
                    f"Insufficient stock for {product.name}. "
                    f"Available: {available}, Requested: {item.quantity}"
                )
                continue

            lines.append((product, inventory, item.quantity))

        # Every shortage is reported, not just the first
        if stock_errors:
            raise HTTPException(status_code=400, detail="; ".join(stock_errors))

        totals = calculate_totals(
            to_money(product.selling_price * quantity) for product, _, quantity in lines
        )
        discount = to_money(bill_data.discount)
        total = totals.total - discount

        if total <= 0:
            raise HTTPException(status_code=400, detail="Total must be greater than 0")

        if bill_data.total is not None and to_money(bill_data.total) != total:
            logger.warning(
                f"Bill total mismatch. Client: {bill_data.total}, Server: {total}"
            )

        paid_amount = to_money(bill_data.paid_amount)

        if paid_amount > total:
            raise HTTPException(
                status_code=400,
                detail=(
                    f"Payment amount ({format_money(paid_amount)}) cannot exceed "
                    f"total amount ({format_money(total)})"
                ),
            )

        sale = Sale(
            **customer_info,
            subtotal=totals.subtotal,
            tax=totals.tax,
            discount=discount,
            total=total,
            payment_method=bill_data.payment_method,
            payment_status=derive_payment_status(paid_amount, total),
            paid_amount=paid_amount,
            status="completed",
            notes=bill_data.notes or "",
            request_id=bill_data.request_id,
        )
        db.add(sale)
        db.flush()

        sale.invoice_number = f"SALE-{sale.id:06d}"

        for product, inventory, quantity in lines:
            inventory.quantity_available -= quantity

            db.add(
                SaleItem(
                    sale_id=sale.id,
                    product_id=product.id,
                    name=product.name,
                    quantity=quantity,
                    price=product.selling_price,
                    total=to_money(product.selling_price * quantity),
                )
            )

        if paid_amount > 0:
            db.add(
                SalePayment(
                    sale_id=sale.id,
                    amount=paid_amount,
                    method=bill_data.payment_method,
                    notes=bill_data.notes or "",
                )
            )

        for _, inventory, _ in lines:
            check_stock_notification(db, inventory)

        total_items = sum(quantity for _, _, quantity in lines)
        create_notification(
            db,
            type="sale",
            title="New Sale Completed",
            message=(
                f"Sale {sale.invoice_number} has been completed with {total_items} item(s) "
                f"for {customer_info['customer_name']}. Total: {format_money(total)}."
            ),
            related_id=sale.id,
            related_model="Sale",
        )

        db.commit()
        db.refresh(sale)

        logger.info(f"Bill {sale.invoice_number} created. Total: {total}")

        return sale

    except HTTPException:
        db.rollback()
        raise

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Bill creation failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to complete sale")


# =========================================================
# BILL HISTORY
# =========================================================
@router.get("/bills", response_model=list[SaleResponse])
def list_bills(
    db: Session = Depends(get_db),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
):
    return (
        db.query(Sale)
        .options(joinedload(Sale.items))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )


@router.get("/bills/{sale_id}", response_model=SaleResponse)
def get_bill(
    sale_id: int,
    db: Session = Depends(get_db),
):
    return _get_sale_or_404(db, sale_id)


# =========================================================
# RECORD PAYMENT AGAINST A BILL
# =========================================================
@router.post("/bills/{sale_id}/payments", response_model=SaleResponse)
def record_payment(
    sale_id: int,
    payment_data: PaymentCreate,
    db: Session = Depends(get_db),
):
    sale = _get_sale_or_404(db, sale_id)

    amount = to_money(payment_data.amount)
    balance = to_money(sale.total) - to_money(sale.paid_amount)

    if balance <= 0:
        raise HTTPException(status_code=400, detail="Bill is already fully paid")

    if amount > balance:
        raise HTTPException(
            status_code=400,
            detail=(
                f"Payment amount ({format_money(amount)}) cannot exceed "
                f"balance due ({format_money(balance)})"
            ),
        )

    try:
        sale.paid_amount = to_money(sale.paid_amount) + amount
        sale.payment_status = derive_payment_status(sale.paid_amount, sale.total)

        db.add(
            SalePayment(
                sale_id=sale.id,
                amount=amount,
                method=payment_data.method,
                notes=payment_data.notes,
            )
        )

        create_notification(
            db,
            type="payment_received",
            title="Payment Received",
            message=f"Received {format_money(amount)} for {sale.invoice_number}.",
            related_id=sale.id,
            related_model="Sale",
        )

        db.commit()
        db.refresh(sale)

    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Payment recording failed: {str(e)}")
        raise HTTPException(status_code=500, detail="Unable to record payment")

    return sale
