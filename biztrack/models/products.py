# biztrack/models/products.py

from sqlalchemy import CheckConstraint, Column, Integer, String, Numeric, DateTime
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from biztrack.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    barcode = Column(String, unique=True, nullable=True, index=True)
    category = Column(String, nullable=False, default="Uncategorized")
    cost_price = Column(Numeric(10, 2), nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    inventory = relationship("Inventory", back_populates="product", uselist=False, cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("cost_price >= 0", name="ck_cost_price_positive"),
        CheckConstraint("selling_price >= 0", name="ck_selling_price_positive"),
    )

    @property
    def stock(self) -> int:
        return self.inventory.quantity_available if self.inventory else 0
