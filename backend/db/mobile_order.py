import uuid
from sqlalchemy import JSON, Column, DateTime, String, Text, Uuid
from .database import Base, utcnow


class MobileOrder(Base):
    """Order placed through the customer mobile app.

    Written by the mobile ordering service; this backend only reads it and moves its status.
    `items` is a list of {name, price, quantity, add_ons: [{name, price}]}.
    """
    __tablename__ = "mobile_orders"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(String, nullable=False, unique=True, index=True)
    customer_name = Column(String, nullable=True)
    items = Column(JSON, nullable=False, default=list)
    status = Column(Text, nullable=False, default="pending", index=True)
    delivery_method = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    @property
    def to_schema(self):
        return {
            "id": self.id,
            "order_id": self.order_id,
            "customer_name": self.customer_name,
            "items": list(self.items or []),
            "status": self.status,
            "delivery_method": self.delivery_method,
            "notes": self.notes,
            "created_at": self.created_at,
        }
