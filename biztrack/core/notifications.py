# =========================================================
# NOTIFICATION HELPERS
# Stored notifications for the dashboard bell. Rows are added
# to the caller's session and committed with its transaction.
# =========================================================

import logging

from sqlalchemy.orm import Session

from biztrack.models.inventory import Inventory
from biztrack.models.notifications import Notification

logger = logging.getLogger("biztrack")


def create_notification(
    db: Session,
    type: str,
    title: str,
    message: str,
    related_id: int | None = None,
    related_model: str | None = None,
) -> Notification:
    notification = Notification(
        type=type,
        title=title,
        message=message,
        related_id=related_id,
        related_model=related_model,
    )
    db.add(notification)

    logger.info(f"Notification created: {type} - {title}")

    return notification


def _has_unread(db: Session, type: str, related_id: int) -> bool:
    return (
        db.query(Notification)
        .filter(
            Notification.type == type,
            Notification.related_id == related_id,
            Notification.read == False,  # noqa: E712
        )
        .first()
        is not None
    )


def check_stock_notification(db: Session, inventory: Inventory) -> Notification | None:
    """Raise an out-of-stock or low-stock alert for an inventory row.

    Nothing is created while an unread alert of the same kind already
    exists for the item.
    """
    product = inventory.product
    name = product.name if product else f"Product {inventory.product_id}"

    if inventory.quantity_available <= 0:
        if _has_unread(db, "out_of_stock", inventory.id):
            return None
        return create_notification(
            db,
            type="out_of_stock",
            title="Item Out of Stock",
            message=f"{name} is out of stock. Please restock immediately.",
            related_id=inventory.id,
            related_model="Inventory",
        )

    if inventory.quantity_available <= inventory.low_stock_threshold:
        if _has_unread(db, "low_stock", inventory.id):
            return None
        return create_notification(
            db,
            type="low_stock",
            title="Low Stock Alert",
            message=(
                f"{name} is running low. Current stock: {inventory.quantity_available}, "
                f"Reorder level: {inventory.low_stock_threshold}."
            ),
            related_id=inventory.id,
            related_model="Inventory",
        )

    return None
