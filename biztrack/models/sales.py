# models/sales.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, DateTime, ForeignKey, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from biztrack.database import Base


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    invoice_number = Column(String, unique=True, nullable=True, index=True)

    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True, index=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    payment_method = Column(String, nullable=False, default="cash")
    payment_status = Column(String, nullable=False, default="unpaid")
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)

    status = Column(String, nullable=False, default="completed")
    notes = Column(String, nullable=False, default="")

    request_id = Column(String, unique=True, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer")

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
    )

    payments = relationship(
        "SalePayment",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SalePayment.id",
    )

    __table_args__ = (
        Index("ix_sales_customer_created", "customer_id", "created_at"),
        CheckConstraint(
            "payment_status IN ('unpaid', 'partial', 'paid')",
            name="ck_sales_payment_status_valid",
        ),
        CheckConstraint("paid_amount >= 0", name="ck_sales_paid_amount_non_negative"),
    )
