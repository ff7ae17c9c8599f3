# models/sale_payments.py

from sqlalchemy import CheckConstraint, Column, Integer, ForeignKey, Numeric, String, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from biztrack.database import Base


class SalePayment(Base):
    __tablename__ = "sale_payments"

    id = Column(Integer, primary_key=True, index=True)

    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)

    amount = Column(Numeric(10, 2), nullable=False)
    method = Column(String, nullable=False)
    notes = Column(String, nullable=False, default="")

    paid_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    sale = relationship("Sale", back_populates="payments")

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_sale_payment_amount_positive"),
    )
