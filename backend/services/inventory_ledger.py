"""
Inventory ledger: named stock quantities with conditional decrements.

Every stock change is one UPDATE statement guarded by `stock >= amount`, so
two requests racing for the same scarce ingredient cannot both win. Each
change also appends an InventoryMovement row. Nothing here commits: callers
own the transaction, which is what makes a multi-ingredient deduction
all-or-nothing.

deduct_all first locks every distinct ingredient row it will touch, in name
order (SELECT ... ORDER BY name FOR UPDATE), and only then deducts in demand
order. Concurrent checkouts therefore queue on the same lock sequence instead
of deadlocking when their carts list shared ingredients in different orders.
SQLite has no row locks and ignores FOR UPDATE.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import IngredientNotFoundError, InsufficientStockError
from db.database import InventoryItem as InventoryItemModel, InventoryMovement as InventoryMovementModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockChange:
    inventory_item_id: object
    ingredient_name: str
    change: Decimal
    balance_after: Decimal
    movement: object = None


def _dec(x) -> Decimal:
    if x is None:
        return Decimal("0")
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


async def get_stock(db: AsyncSession, ingredient_name: str) -> Optional[Decimal]:
    """Current stock for an ingredient name, or None when it is not in inventory."""
    tbl = InventoryItemModel.__table__
    row = (await db.execute(select(tbl.c.stock).where(tbl.c.name == ingredient_name))).first()
    if row is None:
        return None
    return _dec(row.stock)


async def get_stock_map(db: AsyncSession, names: Iterable[str]) -> Dict[str, Decimal]:
    names = sorted(set(names))
    if not names:
        return {}
    tbl = InventoryItemModel.__table__
    res = await db.execute(select(tbl.c.name, tbl.c.stock).where(tbl.c.name.in_(names)))
    return {r.name: _dec(r.stock) for r in res.all()}


def _add_movement(
    db: AsyncSession,
    *,
    inventory_item_id,
    change: Decimal,
    balance_after: Decimal,
    reason: Optional[str],
    source_type: Optional[str],
    source_ref: Optional[str],
) -> InventoryMovementModel:
    movement = InventoryMovementModel(
        inventory_item_id=inventory_item_id,
        change=change,
        balance_after=balance_after,
        reason=reason,
        source_type=source_type,
        source_ref=source_ref,
    )
    db.add(movement)
    return movement


async def deduct(
    db: AsyncSession,
    ingredient_name: str,
    amount,
    *,
    reason: Optional[str] = None,
    source_type: Optional[str] = "sale",
    source_ref: Optional[str] = None,
) -> StockChange:
    """
    Decrement `ingredient_name` by `amount` if, and only if, stock >= amount.

    Raises IngredientNotFoundError when the name is not in inventory and
    InsufficientStockError (with available/required) when stock is short.
    A stock exactly equal to the amount is deducted down to zero.
    """
    amount = _dec(amount)
    tbl = InventoryItemModel.__table__
    stmt = (
        update(tbl)
        .where(tbl.c.name == ingredient_name, tbl.c.stock >= amount)
        .values(stock=tbl.c.stock - amount)
        .returning(tbl.c.id, tbl.c.stock)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        available = await get_stock(db, ingredient_name)
        if available is None:
            logger.info("deduct %s x%s rejected: not in inventory", ingredient_name, amount)
            raise IngredientNotFoundError(ingredient_name)
        logger.info("deduct %s x%s rejected: only %s available", ingredient_name, amount, available)
        raise InsufficientStockError(ingredient_name, available=available, required=amount)

    balance = _dec(row.stock)
    movement = _add_movement(
        db,
        inventory_item_id=row.id,
        change=-amount,
        balance_after=balance,
        reason=reason,
        source_type=source_type,
        source_ref=source_ref,
    )
    logger.debug("deducted %s %s (balance %s)", amount, ingredient_name, balance)
    return StockChange(row.id, ingredient_name, -amount, balance, movement)


async def credit(
    db: AsyncSession,
    ingredient_name: str,
    amount,
    *,
    reason: Optional[str] = None,
    source_type: Optional[str] = "adjustment",
    source_ref: Optional[str] = None,
) -> StockChange:
    """Add `amount` back to an ingredient's stock."""
    amount = _dec(amount)
    tbl = InventoryItemModel.__table__
    stmt = (
        update(tbl)
        .where(tbl.c.name == ingredient_name)
        .values(stock=tbl.c.stock + amount)
        .returning(tbl.c.id, tbl.c.stock)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        raise IngredientNotFoundError(ingredient_name)

    balance = _dec(row.stock)
    movement = _add_movement(
        db,
        inventory_item_id=row.id,
        change=amount,
        balance_after=balance,
        reason=reason,
        source_type=source_type,
        source_ref=source_ref,
    )
    return StockChange(row.id, ingredient_name, amount, balance, movement)


def lock_statement(names: Iterable[str]):
    tbl = InventoryItemModel.__table__
    return (
        select(tbl.c.name)
        .where(tbl.c.name.in_(sorted(set(names))))
        .order_by(tbl.c.name.asc())
        .with_for_update()
    )


async def lock_ingredients(db: AsyncSession, names: Iterable[str]) -> List[str]:
    """Row-lock the named inventory items in name order; returns the names that exist."""
    names = sorted(set(names))
    if not names:
        return []
    res = await db.execute(lock_statement(names))
    return [r.name for r in res.all()]


async def deduct_all(
    db: AsyncSession,
    lines,
    *,
    reason: Optional[str] = None,
    source_ref: Optional[str] = None,
) -> List[StockChange]:
    """Deduct each demand line in order; the first failure propagates.

    Earlier deductions are only undone by rolling back the caller's transaction.
    """
    lines = list(lines)
    await lock_ingredients(db, [line.ingredient_name for line in lines])

    changes: List[StockChange] = []
    for line in lines:
        changes.append(
            await deduct(
                db,
                line.ingredient_name,
                line.quantity,
                reason=reason or f"Sold: {line.source}",
                source_type="sale",
                source_ref=source_ref,
            )
        )
    return changes
