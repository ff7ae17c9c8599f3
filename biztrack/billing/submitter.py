# biztrack/billing/submitter.py

import logging
from datetime import datetime, timezone
from decimal import Decimal

from biztrack.billing.exceptions import MalformedResponse
from biztrack.billing.models import (
    CartItem,
    Customer,
    Receipt,
    SoldItem,
    normalize_sold_item,
)
from biztrack.billing.notifier import Notifier
from biztrack.core.config import settings
from biztrack.core.pricing import Totals, derive_payment_status, to_money

logger = logging.getLogger("biztrack")


def build_payload(
    customer: Customer,
    items: list[CartItem],
    totals: Totals,
    payment_method: str,
    paid_amount: Decimal,
    notes: str,
    request_id: str,
) -> dict:
    """JSON body for bill creation. Money goes out as strings."""
    return {
        "customer_id": customer.id if isinstance(customer.id, int) else None,
        "customer": {
            "name": customer.name,
            "email": customer.email,
            "phone": customer.phone,
        },
        "items": [
            {
                "id": item.id,
                "name": item.name,
                "quantity": item.quantity,
                "price": str(to_money(item.price)),
                "total": str(item.total),
            }
            for item in items
        ],
        "subtotal": str(totals.subtotal),
        "tax": str(totals.tax),
        "discount": "0.00",
        "total": str(totals.total),
        "payment_method": payment_method,
        "paid_amount": str(to_money(paid_amount)),
        "notes": notes,
        "request_id": request_id,
    }


def build_receipt(
    created: dict,
    customer: Customer,
    items: list[CartItem],
    payment_method: str,
    paid_amount: Decimal,
    notes: str,
) -> Receipt:
    """Receipt for a created bill. Server figures win over local ones.

    Raises MalformedResponse when the created bill cannot be read.
    """
    if not isinstance(created, dict):
        raise MalformedResponse(f"Expected a bill object, got {type(created).__name__}")

    invoice_number = created.get("invoice_number")
    if not invoice_number:
        raise MalformedResponse("Created bill has no invoice number")

    try:
        subtotal = to_money(created["subtotal"])
        tax = to_money(created["tax"])
        total = to_money(created["total"])

        paid = created.get("paid_amount")
        paid = to_money(paid) if paid is not None else to_money(paid_amount)

        return Receipt(
            invoice_number=invoice_number,
            date=created.get("created_at") or datetime.now(timezone.utc),
            customer=customer,
            items=[item.model_copy() for item in items],
            subtotal=subtotal,
            tax=tax,
            total=total,
            payment_method=created.get("payment_method") or payment_method,
            paid_amount=paid,
            payment_status=created.get("payment_status") or derive_payment_status(paid, total),
            notes=created.get("notes") or notes,
        )
    except KeyError as e:
        raise MalformedResponse(f"Created bill is missing {e.args[0]}") from e
    except (ArithmeticError, TypeError, ValueError) as e:
        # pydantic's ValidationError is a ValueError
        raise MalformedResponse(f"Invalid bill from server: {e}") from e


def sold_items(created: dict) -> list[SoldItem]:
    return [normalize_sold_item(raw) for raw in created.get("items") or []]


def notify_low_stock(
    items: list[SoldItem],
    notifier: Notifier,
    threshold: int | None = None,
) -> list[SoldItem]:
    """Warn about items the sale left below the low-stock threshold."""
    threshold = settings.LOW_STOCK_THRESHOLD if threshold is None else threshold

    low = [
        item for item in items
        if item.stock_remaining is not None and item.stock_remaining < threshold
    ]

    for item in low:
        if item.stock_remaining == 0:
            notifier.error(
                f"{item.name} is now out of stock!",
                "Please reorder immediately",
            )
        else:
            notifier.warning(
                f"{item.name} is running low!",
                f"Only {item.stock_remaining} units remaining",
            )

    if low:
        logger.info(f"{len(low)} item(s) below low stock threshold after sale")

    return low
