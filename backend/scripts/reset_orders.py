"""
Delete ALL sales (with their add-on/removal rows) and restart order codes at 0001.

Inventory is left as-is; stock consumed by the deleted sales is not returned.

Run from the repo root:
  PYTHONPATH=backend python backend/scripts/reset_orders.py
"""

from __future__ import annotations

import asyncio

from sqlalchemy import delete, update

from db.database import async_session_maker, OrderCounter, Sale, SaleAddOn, SaleRemovedIngredient
from services.order_codes import SALES_COUNTER


async def main() -> None:
    async with async_session_maker() as db:
        # Delete children first (FK)
        res_add_ons = await db.execute(delete(SaleAddOn))
        res_removed = await db.execute(delete(SaleRemovedIngredient))
        res_sales = await db.execute(delete(Sale))
        await db.execute(update(OrderCounter).where(OrderCounter.name == SALES_COUNTER).values(value=0))
        await db.commit()

        add_ons_n = int(getattr(res_add_ons, "rowcount", 0) or 0)
        removed_n = int(getattr(res_removed, "rowcount", 0) or 0)
        sales_n = int(getattr(res_sales, "rowcount", 0) or 0)
        print(f"Deleted sale_add_ons: {add_ons_n}, sale_removed_ingredients: {removed_n}, sales: {sales_n}")


if __name__ == "__main__":
    asyncio.run(main())
