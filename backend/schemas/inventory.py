from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from .base import ApiModel


class InventoryItemCreate(ApiModel):
    name: str
    unit: Optional[str] = None
    stock: Decimal = Field(default=Decimal("0"), ge=0)

    @field_validator("name")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v

    @field_validator("unit")
    @classmethod
    def _strip_nullable(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        return v or None


class InventoryItemRead(ApiModel):
    id: UUID
    name: str
    unit: Optional[str] = None
    stock: float
    status: Optional[str] = None
    created_at: Optional[datetime] = None


class InventoryMovementRead(ApiModel):
    id: UUID
    inventory_item_id: UUID
    inventory_item_name: Optional[str] = None
    change: float
    balance_after: Optional[float] = None
    reason: Optional[str] = None
    source_type: Optional[str] = None
    source_ref: Optional[str] = None
    created_at: datetime


class LowStockThreshold(ApiModel):
    value: float = Field(ge=0)
