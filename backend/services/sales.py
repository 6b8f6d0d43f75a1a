"""
Sale builder: validates a checkout line, deducts its ingredients and records the sale.

create_sale runs, in this order:
  1. field checks (menu item, quantity, payment method, service type)
  2. load the menu item
  3. load add-ons (each must be categorized 'add-ons')
  4. check removed ingredients against the base recipe
  5. resolve the ingredient demand
  6. deduct every demand line (main item first, then add-ons)
  7. draw the order code
  8. compute the total
  9. persist the sale as 'pending'

Steps 6-9 share the request's transaction; any failure rolls it back, so a
sale either lands with all its deductions or leaves stock untouched.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError, ValidationError
from db.database import (
    MenuItem as MenuItemModel,
    Sale as SaleModel,
    SaleAddOn as SaleAddOnModel,
    SaleRemovedIngredient as SaleRemovedIngredientModel,
    utcnow,
)
from schemas.sales import PAYMENT_METHODS, SERVICE_TYPES, SaleCreate, SaleUpdate
from services import inventory_ledger
from services.order_codes import next_order_code
from services.recipe_resolver import (
    DemandLine,
    RemovedIngredient,
    resolve,
    total_amount,
    validate_removed_ingredients,
)

logger = logging.getLogger(__name__)

SUMMARY_PERIODS = {"day": 1, "week": 7, "month": 30}


@dataclass
class Checkout:
    menu_item: MenuItemModel
    quantity: int
    payment_method: str
    service_type: str
    add_ons: List[Tuple[MenuItemModel, int]] = field(default_factory=list)
    removed: List[RemovedIngredient] = field(default_factory=list)
    demand: List[DemandLine] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return total_amount(self.menu_item.price, self.quantity, self.add_ons)


def _parse_id(raw) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(raw))
    except (TypeError, ValueError):
        return None


async def _load_menu_item(db: AsyncSession, raw_id) -> Optional[MenuItemModel]:
    menu_id = _parse_id(raw_id)
    if menu_id is None:
        return None
    return await db.get(MenuItemModel, menu_id)


def _validate_fields(payload: SaleCreate) -> None:
    if not (payload.menu_item or "").strip():
        raise ValidationError("Menu item is required")
    if payload.quantity is None or payload.quantity < 1:
        raise ValidationError("Valid quantity is required (minimum 1)")
    if payload.payment_method not in PAYMENT_METHODS:
        raise ValidationError("Valid payment method is required (cash, paymaya, gcash)")
    if payload.service_type not in SERVICE_TYPES:
        raise ValidationError("Valid service type is required (pickup, dine-in, takeout)")


async def prepare_checkout(db: AsyncSession, payload: SaleCreate) -> Checkout:
    """Steps 1-5: everything that can reject a checkout before stock is touched."""
    _validate_fields(payload)

    menu_item = await _load_menu_item(db, payload.menu_item)
    if menu_item is None:
        raise ValidationError(f"Menu item with ID {payload.menu_item} not found")

    add_ons: List[Tuple[MenuItemModel, int]] = []
    for a in payload.add_ons:
        if not (a.menu_item or "").strip():
            raise ValidationError("Add-on menu item is required")
        add_on = await _load_menu_item(db, a.menu_item)
        if add_on is None:
            raise ValidationError(f"Add-on menu item with ID {a.menu_item} not found")
        if not add_on.is_add_on:
            raise ValidationError(f"Menu item {add_on.name} is not an add-on")
        if a.quantity is None or a.quantity < 1:
            raise ValidationError(f"Valid quantity is required for add-on {add_on.name} (minimum 1)")
        add_ons.append((add_on, int(a.quantity)))

    removed = [
        RemovedIngredient(inventory_item=r.inventory_item, quantity=r.quantity, name=r.name or r.inventory_item)
        for r in payload.removed_ingredients
    ]
    validate_removed_ingredients(menu_item, removed)

    checkout = Checkout(
        menu_item=menu_item,
        quantity=int(payload.quantity),
        payment_method=payload.payment_method,
        service_type=payload.service_type,
        add_ons=add_ons,
        removed=removed,
    )
    checkout.demand = resolve(menu_item, checkout.quantity, add_ons, removed)
    return checkout


def _build_sale(checkout: Checkout, order_code: str) -> SaleModel:
    return SaleModel(
        order_code=order_code,
        menu_item_id=checkout.menu_item.id,
        menu_item_name=checkout.menu_item.name,
        quantity=checkout.quantity,
        price=checkout.menu_item.price,
        payment_method=checkout.payment_method,
        service_type=checkout.service_type,
        total_amount=checkout.total,
        status="pending",
        add_ons=[
            SaleAddOnModel(
                menu_item_id=add_on.id,
                name=add_on.name,
                quantity=qty,
                price=add_on.price,
                position=i,
            )
            for i, (add_on, qty) in enumerate(checkout.add_ons)
        ],
        removed_ingredients=[
            SaleRemovedIngredientModel(
                inventory_item=r.inventory_item,
                name=r.name,
                quantity=r.quantity,
                position=i,
            )
            for i, r in enumerate(checkout.removed)
        ],
    )


async def create_sale(db: AsyncSession, payload: SaleCreate) -> SaleModel:
    try:
        checkout = await prepare_checkout(db, payload)

        changes = await inventory_ledger.deduct_all(db, checkout.demand)
        order_code = await next_order_code(db)
        for change in changes:
            change.movement.source_ref = order_code

        sale = _build_sale(checkout, order_code)
        db.add(sale)
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    logger.info(
        "sale %s: %s x%d (%d add-ons, %d removals) total=%s via %s/%s",
        sale.order_code,
        checkout.menu_item.name,
        checkout.quantity,
        len(checkout.add_ons),
        len(checkout.removed),
        sale.total_amount,
        sale.payment_method,
        sale.service_type,
    )
    return sale


async def quote_sale(db: AsyncSession, payload: SaleCreate) -> Dict:
    """Dry run of a checkout: validation, demand and total, with no deduction or sale."""
    checkout = await prepare_checkout(db, payload)
    stock = await inventory_ledger.get_stock_map(db, [d.ingredient_name for d in checkout.demand])

    running: Dict[str, Decimal] = {}
    demand_out = []
    for d in checkout.demand:
        running[d.ingredient_name] = running.get(d.ingredient_name, Decimal("0")) + d.quantity
        available = stock.get(d.ingredient_name)
        demand_out.append(
            {
                "ingredient_name": d.ingredient_name,
                "required": float(d.quantity),
                "available": float(available) if available is not None else None,
                "sufficient": available is not None and running[d.ingredient_name] <= available,
                "source": d.source,
            }
        )

    return {
        "menu_item": checkout.menu_item.id,
        "menu_item_name": checkout.menu_item.name,
        "quantity": checkout.quantity,
        "price": float(checkout.menu_item.price),
        "add_ons": [
            {"menu_item": a.id, "name": a.name, "quantity": qty, "price": float(a.price)}
            for a, qty in checkout.add_ons
        ],
        "removed_ingredients": [
            {"inventory_item": r.inventory_item, "name": r.name, "quantity": float(r.quantity)}
            for r in checkout.removed
        ],
        "demand": demand_out,
        "total_amount": float(checkout.total),
        "can_fulfil": all(d["sufficient"] for d in demand_out),
    }


async def list_sales(db: AsyncSession) -> List[SaleModel]:
    res = await db.execute(select(SaleModel).order_by(SaleModel.created_at.desc()))
    return list(res.scalars().all())


async def get_sale(db: AsyncSession, sale_id) -> SaleModel:
    parsed = _parse_id(sale_id)
    sale = await db.get(SaleModel, parsed) if parsed is not None else None
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


async def get_sale_by_order_code(db: AsyncSession, order_code: str) -> SaleModel:
    # Codes from the 'count' strategy can repeat; the newest sale wins.
    res = await db.execute(
        select(SaleModel)
        .where(SaleModel.order_code == order_code)
        .order_by(SaleModel.created_at.desc())
        .limit(1)
    )
    sale = res.scalar_one_or_none()
    if sale is None:
        raise NotFoundError("Sale not found")
    return sale


async def update_sale(db: AsyncSession, sale_id, payload: SaleUpdate) -> SaleModel:
    sale = await get_sale(db, sale_id)
    data = payload.model_dump(exclude_unset=True)
    for key in ("status", "payment_method", "service_type"):
        if data.get(key) is not None:
            setattr(sale, key, data[key])
    await db.commit()
    logger.info("sale %s updated: %s", sale.order_code, data)
    return sale


async def delete_sale(db: AsyncSession, sale_id) -> None:
    sale = await get_sale(db, sale_id)
    await db.delete(sale)
    await db.commit()
    logger.info("sale %s deleted", sale.order_code)


async def sales_summary(db: AsyncSession, period: str = "week") -> Dict:
    days = SUMMARY_PERIODS.get((period or "").lower())
    if days is None:
        raise ValidationError(f"Invalid period '{period}' (expected one of {', '.join(SUMMARY_PERIODS)})")
    since = utcnow() - timedelta(days=days)

    res = await db.execute(
        select(SaleModel).where(SaleModel.created_at >= since).order_by(SaleModel.created_at.asc())
    )
    sales = list(res.scalars().all())

    by_service_type: Dict[str, int] = {}
    by_payment_method: Dict[str, float] = {}
    revenue = Decimal("0")
    for s in sales:
        amount = Decimal(str(s.total_amount))
        revenue += amount
        by_service_type[s.service_type] = by_service_type.get(s.service_type, 0) + 1
        by_payment_method[s.payment_method] = by_payment_method.get(s.payment_method, 0.0) + float(amount)

    return {
        "period": period.lower(),
        "since": since,
        "count": len(sales),
        "total_revenue": float(revenue),
        "by_service_type": by_service_type,
        "by_payment_method": by_payment_method,
        "sales": [s.to_schema for s in sales],
    }


async def product_sales(db: AsyncSession, limit: int = 10) -> List[Dict]:
    total_qty = func.sum(SaleModel.quantity).label("total_quantity")
    stmt = (
        select(
            SaleModel.menu_item_id,
            SaleModel.menu_item_name,
            total_qty,
            func.sum(SaleModel.total_amount).label("total_revenue"),
        )
        .group_by(SaleModel.menu_item_id, SaleModel.menu_item_name)
        .order_by(total_qty.desc(), SaleModel.menu_item_name.asc())
        .limit(limit)
    )
    rows = (await db.execute(stmt)).all()
    return [
        {
            "menu_item_id": r.menu_item_id,
            "name": r.menu_item_name,
            "total_quantity": int(r.total_quantity or 0),
            "total_revenue": float(r.total_revenue or 0),
        }
        for r in rows
    ]
