"""
Human-facing order codes: zero-padded numbers ("0001", "0002", ...).

Two strategies, picked with ORDER_CODE_STRATEGY:

- sequence (default): atomically increments the `sales` row of order_counters.
  Safe under concurrent checkouts; codes are never reused, even after a sale
  is deleted.
- count: count(sales) + 1. Two simultaneous checkouts can get the same code
  and codes are reused after deletions. Kept for installations that depend on
  that numbering.
"""

import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from db.database import OrderCounter as OrderCounterModel, Sale as SaleModel

logger = logging.getLogger(__name__)

SALES_COUNTER = "sales"
STRATEGIES = ("sequence", "count")


def format_order_code(n: int, width: Optional[int] = None) -> str:
    return str(int(n)).zfill(width or settings.order_code_width)


async def _count_sales(db: AsyncSession) -> int:
    return int((await db.execute(select(func.count()).select_from(SaleModel))).scalar() or 0)


async def ensure_order_counter(db: AsyncSession) -> int:
    """Create the counter row if missing, seeded so the next code follows the existing sales."""
    res = await db.execute(select(OrderCounterModel).where(OrderCounterModel.name == SALES_COUNTER))
    counter = res.scalar_one_or_none()
    if counter is not None:
        return int(counter.value)
    seed = await _count_sales(db)
    db.add(OrderCounterModel(name=SALES_COUNTER, value=seed))
    await db.flush()
    logger.info("order counter seeded at %s", seed)
    return seed


async def _next_from_sequence(db: AsyncSession) -> int:
    tbl = OrderCounterModel.__table__
    stmt = (
        update(tbl)
        .where(tbl.c.name == SALES_COUNTER)
        .values(value=tbl.c.value + 1)
        .returning(tbl.c.value)
    )
    row = (await db.execute(stmt)).first()
    if row is None:
        await ensure_order_counter(db)
        row = (await db.execute(stmt)).first()
    return int(row.value)


async def next_order_code(db: AsyncSession, strategy: Optional[str] = None, width: Optional[int] = None) -> str:
    strategy = (strategy or settings.order_code_strategy or "sequence").lower()
    if strategy == "count":
        n = await _count_sales(db) + 1
    elif strategy == "sequence":
        n = await _next_from_sequence(db)
    else:
        raise ValueError(f"Unknown order code strategy '{strategy}' (expected one of {', '.join(STRATEGIES)})")
    return format_order_code(n, width)
