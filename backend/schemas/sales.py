from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from .base import ApiModel

PAYMENT_METHODS = ("cash", "gcash", "paymaya")
SERVICE_TYPES = ("pickup", "dine-in", "takeout")


def _reject_bool_quantity(v):
    # JSON true/false would otherwise coerce to 1/0.
    if isinstance(v, bool):
        raise ValueError("Valid quantity is required (minimum 1)")
    return v


class AddOnInput(ApiModel):
    menu_item: Optional[str] = None
    quantity: int = 1

    check_quantity = field_validator("quantity", mode="before")(_reject_bool_quantity)


class RemovedIngredientInput(ApiModel):
    inventory_item: str
    name: Optional[str] = None
    quantity: Decimal = Field(default=Decimal("1"), gt=0)

    @field_validator("inventory_item")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("inventoryItem is required")
        return v


class SaleCreate(ApiModel):
    # Field checks happen in the sale builder so they run in a fixed order.
    menu_item: Optional[str] = None
    quantity: Optional[int] = None
    add_ons: List[AddOnInput] = []
    removed_ingredients: List[RemovedIngredientInput] = []
    payment_method: Optional[str] = None
    service_type: Optional[str] = None

    check_quantity = field_validator("quantity", mode="before")(_reject_bool_quantity)

    @field_validator("add_ons", "removed_ingredients", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return [] if v is None else v


class SaleUpdate(ApiModel):
    status: Optional[str] = None
    payment_method: Optional[str] = None
    service_type: Optional[str] = None

    @field_validator("payment_method")
    @classmethod
    def _payment_method(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in PAYMENT_METHODS:
            raise ValueError(f"paymentMethod must be one of {', '.join(PAYMENT_METHODS)}")
        return v

    @field_validator("service_type")
    @classmethod
    def _service_type(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in SERVICE_TYPES:
            raise ValueError(f"serviceType must be one of {', '.join(SERVICE_TYPES)}")
        return v

    @field_validator("status")
    @classmethod
    def _status(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("status cannot be empty")
        return v


class AddOnRead(ApiModel):
    menu_item: Optional[UUID] = None
    name: str
    quantity: int
    price: float


class RemovedIngredientRead(ApiModel):
    inventory_item: str
    name: Optional[str] = None
    quantity: float


class SaleRead(ApiModel):
    id: UUID
    order_code: str
    menu_item: Optional[UUID] = None
    menu_item_name: str
    quantity: int
    price: float
    add_ons: List[AddOnRead]
    removed_ingredients: List[RemovedIngredientRead]
    payment_method: str
    service_type: str
    total_amount: float
    status: str
    created_at: datetime


class DemandLineRead(ApiModel):
    ingredient_name: str
    required: float
    available: Optional[float] = None
    sufficient: bool
    source: str


class SaleQuote(ApiModel):
    menu_item: UUID
    menu_item_name: str
    quantity: int
    price: float
    add_ons: List[AddOnRead]
    removed_ingredients: List[RemovedIngredientRead]
    demand: List[DemandLineRead]
    total_amount: float
    can_fulfil: bool


class SalesSummary(ApiModel):
    period: str
    since: datetime
    count: int
    total_revenue: float
    by_service_type: Dict[str, int]
    by_payment_method: Dict[str, float]
    sales: List[SaleRead]


class ProductSalesRow(ApiModel):
    menu_item_id: Optional[UUID] = None
    name: str
    total_quantity: int
    total_revenue: float


class MessageResponse(ApiModel):
    message: str
