import uuid
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import relationship
from .database import Base, utcnow


class Sale(Base):
    """One checkout line: a menu item sold with its add-ons and removals.

    Prices and names are snapshots taken at checkout; later menu edits do not touch them.
    """
    __tablename__ = "sales"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_code = Column(String, nullable=False, index=True)

    menu_item_id = Column(Uuid, ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True, index=True)
    menu_item_name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    payment_method = Column(Text, nullable=False)  # cash|gcash|paymaya
    service_type = Column(Text, nullable=False, index=True)  # pickup|dine-in|takeout
    total_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(Text, nullable=False, default="pending", index=True)  # pending|preparing|ready
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    add_ons = relationship(
        "SaleAddOn",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleAddOn.position",
        lazy="selectin",
    )
    removed_ingredients = relationship(
        "SaleRemovedIngredient",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleRemovedIngredient.position",
        lazy="selectin",
    )

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "order_code": self.order_code,
            "menu_item": self.menu_item_id,
            "menu_item_name": self.menu_item_name,
            "quantity": int(self.quantity),
            "price": float(self.price),
            "add_ons": [
                {
                    "menu_item": a.menu_item_id,
                    "name": a.name,
                    "quantity": int(a.quantity),
                    "price": float(a.price),
                }
                for a in self.add_ons
            ],
            "removed_ingredients": [
                {
                    "inventory_item": r.inventory_item,
                    "name": r.name,
                    "quantity": float(r.quantity),
                }
                for r in self.removed_ingredients
            ],
            "payment_method": self.payment_method,
            "service_type": self.service_type,
            "total_amount": float(self.total_amount),
            "status": self.status,
            "created_at": self.created_at,
        }


class SaleAddOn(Base):
    __tablename__ = "sale_add_ons"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sale_id = Column(Uuid, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(Uuid, ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True)
    name = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    sale = relationship("Sale", back_populates="add_ons")


class SaleRemovedIngredient(Base):
    __tablename__ = "sale_removed_ingredients"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sale_id = Column(Uuid, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_item = Column(String, nullable=False)
    name = Column(String, nullable=True)
    quantity = Column(Numeric(10, 3), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    sale = relationship("Sale", back_populates="removed_ingredients")
