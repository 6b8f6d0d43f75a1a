import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class InventoryItem(Base):
    __tablename__ = "inventory_items"
    __table_args__ = (CheckConstraint("stock >= 0", name="ck_inventory_items_stock_non_negative"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False, unique=True, index=True)
    unit = Column(Text, nullable=True)
    stock = Column(Numeric(12, 3), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    movements = relationship("InventoryMovement", back_populates="inventory_item", cascade="all, delete-orphan")

    def stock_status(self, threshold) -> str:
        stock = self.stock or 0
        if stock <= 0:
            return "out of stock"
        if stock <= threshold:
            return "low stock"
        return "in stock"

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "name": self.name,
            "unit": self.unit,
            "stock": float(self.stock or 0),
            "created_at": self.created_at,
        }
