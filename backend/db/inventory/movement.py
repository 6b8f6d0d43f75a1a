import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..database import Base, utcnow


class InventoryMovement(Base):
    __tablename__ = "inventory_movements"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    inventory_item_id = Column(
        Uuid,
        ForeignKey("inventory_items.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    change = Column(Numeric(12, 3), nullable=False)
    balance_after = Column(Numeric(12, 3), nullable=True)
    reason = Column(Text, nullable=True)
    source_type = Column(Text, nullable=True, index=True)  # 'sale' | 'adjustment' | 'initial'
    source_ref = Column(String, nullable=True, index=True)  # order code for sales

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    inventory_item = relationship("InventoryItem", back_populates="movements", lazy="joined")

    @property
    def to_schema(self):
        item = self.inventory_item
        return {
            "id": self.id,
            "inventory_item_id": self.inventory_item_id,
            "inventory_item_name": item.name if item is not None else None,
            "change": float(self.change),
            "balance_after": float(self.balance_after) if self.balance_after is not None else None,
            "reason": self.reason,
            "source_type": self.source_type,
            "source_ref": self.source_ref,
            "created_at": self.created_at,
        }
