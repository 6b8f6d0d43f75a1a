from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import field_validator

from .base import ApiModel
from .sales import RemovedIngredientRead

KITCHEN_STATUSES = ("pending", "preparing", "ready", "completed", "cancelled")
ACTIVE_STATUSES = ("pending", "preparing")


class OrderViewAddOn(ApiModel):
    name: str
    price: float


class OrderViewItem(ApiModel):
    name: str
    price: float
    quantity: int
    add_ons: List[OrderViewAddOn] = []
    removed_ingredients: List[RemovedIngredientRead] = []


class OrderView(ApiModel):
    id: UUID
    order_code: str
    source_type: Literal["pos", "mobile"]
    status: str
    items: List[OrderViewItem]
    customer_name: str
    order_time: datetime
    service_type: Optional[str] = None
    delivery_method: Optional[str] = None
    notes: Optional[str] = None


class KitchenStatusUpdate(ApiModel):
    status: str

    @field_validator("status")
    @classmethod
    def _status(cls, v: str) -> str:
        v = (v or "").strip().lower()
        if v not in KITCHEN_STATUSES:
            raise ValueError(f"status must be one of {', '.join(KITCHEN_STATUSES)}")
        return v


class KitchenStatusResponse(ApiModel):
    success: bool
    order: OrderView
