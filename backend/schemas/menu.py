from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from .base import ApiModel


class RecipeIngredientInput(ApiModel):
    # The admin UI sends `name`; stored recipes use `inventoryItem`.
    inventory_item: Optional[str] = None
    name: Optional[str] = None
    quantity: Decimal

    @model_validator(mode="after")
    def _resolve_name(self):
        ref = (self.inventory_item or self.name or "").strip()
        if not ref:
            raise ValueError("ingredient requires inventoryItem or name")
        self.inventory_item = ref
        return self


class MenuItemCreate(ApiModel):
    name: str
    price: Decimal = Field(ge=0)
    category: str
    image: Optional[str] = None
    ingredients: List[RecipeIngredientInput] = []

    @field_validator("name", "category")
    @classmethod
    def _strip_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("field is required")
        return v


class MenuItemUpdate(ApiModel):
    name: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0)
    category: Optional[str] = None
    image: Optional[str] = None
    ingredients: Optional[List[RecipeIngredientInput]] = None

    @field_validator("name", "category")
    @classmethod
    def _strip_optional(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("cannot be empty")
        return v


class RecipeIngredientRead(ApiModel):
    inventory_item: str
    quantity: float


class MenuItemRead(ApiModel):
    id: UUID
    name: str
    price: float
    category: str
    image: Optional[str] = None
    created_at: Optional[datetime] = None
    ingredients: List[RecipeIngredientRead]


class IngredientStockRead(ApiModel):
    inventory_item: str
    required_quantity: float
    current_stock: float
    is_out_of_stock: bool
    is_low_stock: bool
    status: str  # in stock | low stock | out of stock | not found


class MenuItemWithStockRead(MenuItemRead):
    ingredients_with_stock: List[IngredientStockRead]
    can_be_ordered: bool
    has_out_of_stock: bool
    has_low_stock: bool


class MenuListResponse(ApiModel):
    success: bool = True
    count: int
    data: List[MenuItemRead]


class MenuWithStockResponse(ApiModel):
    success: bool = True
    count: int
    low_stock_threshold: float
    data: List[MenuItemWithStockRead]


class MenuItemResponse(ApiModel):
    success: bool = True
    message: Optional[str] = None
    data: MenuItemRead
