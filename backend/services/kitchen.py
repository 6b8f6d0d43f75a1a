"""
Kitchen queue: POS sales and mobile orders behind one ActiveOrder interface.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError
from core.notifications import KitchenBroadcaster
from db.database import MobileOrder as MobileOrderModel, Sale as SaleModel
from schemas.kitchen import ACTIVE_STATUSES, OrderView, OrderViewAddOn, OrderViewItem
from schemas.sales import RemovedIngredientRead

logger = logging.getLogger(__name__)

KITCHEN_SERVICE_TYPES = ("dine-in", "takeout")


class ActiveOrder(ABC):
    source_type: str

    @property
    @abstractmethod
    def order_code(self) -> str: ...

    @property
    @abstractmethod
    def order_time(self) -> datetime: ...

    @abstractmethod
    def set_status(self, status: str) -> None: ...

    @abstractmethod
    def to_view(self) -> OrderView: ...


class PosOrder(ActiveOrder):
    source_type = "pos"

    def __init__(self, sale: SaleModel):
        self.sale = sale

    @property
    def order_code(self) -> str:
        return self.sale.order_code

    @property
    def order_time(self) -> datetime:
        return self.sale.created_at

    def set_status(self, status: str) -> None:
        self.sale.status = status

    def to_view(self) -> OrderView:
        s = self.sale
        item = OrderViewItem(
            name=s.menu_item_name,
            price=float(s.price),
            quantity=int(s.quantity),
            add_ons=[OrderViewAddOn(name=a.name, price=float(a.price)) for a in s.add_ons],
            removed_ingredients=[
                RemovedIngredientRead(inventory_item=r.inventory_item, name=r.name, quantity=float(r.quantity))
                for r in s.removed_ingredients
            ],
        )
        return OrderView(
            id=s.id,
            order_code=s.order_code,
            source_type=self.source_type,
            status=s.status,
            items=[item],
            customer_name="POS Customer",
            order_time=s.created_at,
            service_type=s.service_type,
        )


def _mobile_item_view(raw: Dict[str, Any]) -> OrderViewItem:
    # Mobile payloads nest the product under `menuItem` or flatten it.
    # A bare id in `menuItem` (unpopulated reference) carries no name or price.
    menu_item = raw.get("menuItem") or raw.get("menu_item")
    if not isinstance(menu_item, dict):
        menu_item = {}
    add_ons = raw.get("addOns") or raw.get("add_ons") or raw.get("selectedAddOns") or []
    if not isinstance(add_ons, list):
        add_ons = []
    return OrderViewItem(
        name=str(raw.get("name") or menu_item.get("name") or "Unknown item"),
        price=_as_float(raw.get("price", menu_item.get("price"))),
        quantity=_as_int(raw.get("quantity"), default=1),
        add_ons=[
            OrderViewAddOn(name=str(a.get("name") or ""), price=_as_float(a.get("price")))
            for a in add_ons
            if isinstance(a, dict)
        ],
    )


def _as_float(value, default: float = 0.0) -> float:
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _as_int(value, default: int = 0) -> int:
    try:
        return int(value) if value else default
    except (TypeError, ValueError):
        return default


class MobileActiveOrder(ActiveOrder):
    source_type = "mobile"

    def __init__(self, order: MobileOrderModel):
        self.order = order

    @property
    def order_code(self) -> str:
        return self.order.order_id

    @property
    def order_time(self) -> datetime:
        return self.order.created_at

    def set_status(self, status: str) -> None:
        self.order.status = status

    def to_view(self) -> OrderView:
        o = self.order
        return OrderView(
            id=o.id,
            order_code=o.order_id,
            source_type=self.source_type,
            status=o.status,
            items=[_mobile_item_view(it) for it in (o.items or []) if isinstance(it, dict)],
            customer_name=o.customer_name or "Mobile Customer",
            order_time=o.created_at,
            delivery_method=o.delivery_method,
            notes=o.notes,
        )


async def _active_pos_orders(db: AsyncSession) -> List[ActiveOrder]:
    res = await db.execute(
        select(SaleModel)
        .where(SaleModel.status.in_(ACTIVE_STATUSES))
        .where(SaleModel.service_type.in_(KITCHEN_SERVICE_TYPES))
        .order_by(SaleModel.created_at.asc())
    )
    return [PosOrder(s) for s in res.scalars().all()]


async def _active_mobile_orders(db: AsyncSession) -> List[ActiveOrder]:
    res = await db.execute(
        select(MobileOrderModel)
        .where(MobileOrderModel.status.in_(ACTIVE_STATUSES))
        .order_by(MobileOrderModel.created_at.asc())
    )
    return [MobileActiveOrder(o) for o in res.scalars().all()]


async def list_active(db: AsyncSession) -> List[OrderView]:
    orders = await _active_pos_orders(db) + await _active_mobile_orders(db)
    orders.sort(key=lambda o: o.order_time)
    return [o.to_view() for o in orders]


async def find_order(db: AsyncSession, order_code: str) -> Optional[ActiveOrder]:
    """Look up an order code among POS sales first, then mobile orders."""
    res = await db.execute(
        select(SaleModel)
        .where(SaleModel.order_code == order_code)
        .order_by(SaleModel.created_at.desc())
        .limit(1)
    )
    sale = res.scalar_one_or_none()
    if sale is not None:
        return PosOrder(sale)

    res = await db.execute(select(MobileOrderModel).where(MobileOrderModel.order_id == order_code))
    mobile = res.scalar_one_or_none()
    if mobile is not None:
        return MobileActiveOrder(mobile)
    return None


async def update_status(
    db: AsyncSession,
    order_code: str,
    status: str,
    broadcaster: KitchenBroadcaster,
) -> OrderView:
    order = await find_order(db, order_code)
    if order is None:
        raise NotFoundError("Order not found")

    order.set_status(status)
    await db.commit()
    logger.info("kitchen: %s order %s -> %s", order.source_type, order_code, status)

    await broadcaster.publish(
        {
            "type": "kitchenUpdate",
            "orderCode": order_code,
            "status": status,
            "sourceType": order.source_type,
        }
    )
    return order.to_view()
