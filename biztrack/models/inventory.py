# biztrack/models/inventory.py

from sqlalchemy import CheckConstraint, Column, Integer, Date, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from biztrack.database import Base


class Inventory(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    quantity_available = Column(Integer, nullable=False)
    low_stock_threshold = Column(Integer, nullable=False, default=5)
    expiry_date = Column(Date, nullable=True)

    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    product = relationship("Product", back_populates="inventory")

    __table_args__ = (
        CheckConstraint("quantity_available >= 0", name="ck_inventory_quantity_non_negative"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_low_stock_non_negative"),
    )

    @property
    def product_name(self) -> str | None:
        return self.product.name if self.product else None

    @property
    def is_low_stock(self) -> bool:
        return self.quantity_available <= self.low_stock_threshold
