# models/purchases.py

from sqlalchemy import CheckConstraint, Column, Date, DateTime, Integer, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from biztrack.database import Base


class Purchase(Base):
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)

    purchase_number = Column(String, unique=True, nullable=True, index=True)

    supplier_name = Column(String, nullable=False, index=True)
    supplier_email = Column(String, nullable=True)
    supplier_phone = Column(String, nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    shipping = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    payment_method = Column(String, nullable=False, default="cash")
    payment_status = Column(String, nullable=False, default="unpaid")
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)

    status = Column(String, nullable=False, default="pending")
    expected_delivery_date = Column(Date, nullable=True)
    notes = Column(String, nullable=False, default="")

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship(
        "PurchaseItem",
        back_populates="purchase",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "payment_status IN ('unpaid', 'partial', 'paid')",
            name="ck_purchases_payment_status_valid",
        ),
        CheckConstraint(
            "status IN ('pending', 'received', 'cancelled')",
            name="ck_purchases_status_valid",
        ),
        CheckConstraint("paid_amount >= 0", name="ck_purchases_paid_amount_non_negative"),
    )
