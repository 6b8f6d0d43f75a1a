import asyncio
import sys
from pathlib import Path
from decimal import Decimal

"""
Seed a demo ramen menu (inventory items, menu items with recipes, add-ons).

This script can be run from either:
- backend/: `python scripts/seed_demo_data.py`
- repo root: `python backend/scripts/seed_demo_data.py`

Re-running updates prices/recipes in place; stock is only set for new items.
"""

# Allow running from repo root by ensuring `backend/` is on sys.path
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import func, select

from db.database import (
    async_session_maker,
    create_db_and_tables,
    InventoryItem,
    InventoryMovement,
    MenuItem,
    RecipeIngredient,
)
from db.menu_item import ADD_ONS_CATEGORY
from services.order_codes import ensure_order_counter


INVENTORY = [
    # name, unit, opening stock
    ("Noodles", "portion", Decimal("120")),
    ("Tonkotsu Broth", "ladle", Decimal("80")),
    ("Shoyu Tare", "shot", Decimal("60")),
    ("Miso Paste", "spoon", Decimal("40")),
    ("Chashu", "slice", Decimal("150")),
    ("Ajitama", "egg", Decimal("48")),
    ("Nori", "sheet", Decimal("200")),
    ("Menma", "portion", Decimal("8")),
    ("Scallions", "handful", Decimal("30")),
    ("Gyoza", "piece", Decimal("90")),
    ("Rice", "cup", Decimal("50")),
]

MENU = [
    # name, category, price, [(ingredient, qty)]
    ("Tonkotsu Ramen", "ramen", Decimal("250"), [
        ("Noodles", 1), ("Tonkotsu Broth", 1), ("Chashu", 2), ("Nori", 1), ("Scallions", 1),
    ]),
    ("Shoyu Ramen", "ramen", Decimal("230"), [
        ("Noodles", 1), ("Shoyu Tare", 1), ("Chashu", 1), ("Menma", 1), ("Nori", 1),
    ]),
    ("Miso Ramen", "ramen", Decimal("240"), [
        ("Noodles", 1), ("Miso Paste", 1), ("Chashu", 1), ("Scallions", 1),
    ]),
    ("Pork Gyoza", "sides", Decimal("120"), [("Gyoza", 5)]),
    ("Chashu Rice Bowl", "rice", Decimal("180"), [("Rice", 1), ("Chashu", 3), ("Scallions", 1)]),
    # Add-ons
    ("Extra Chashu", ADD_ONS_CATEGORY, Decimal("80"), [("Chashu", 2)]),
    ("Ajitama Egg", ADD_ONS_CATEGORY, Decimal("40"), [("Ajitama", 1)]),
    ("Extra Noodles", ADD_ONS_CATEGORY, Decimal("50"), [("Noodles", 1)]),
    ("Extra Nori", ADD_ONS_CATEGORY, Decimal("15"), [("Nori", 3)]),
]


async def get_or_create_inventory_item(session, name: str, unit: str, stock: Decimal) -> InventoryItem:
    result = await session.execute(select(InventoryItem).where(InventoryItem.name == name))
    item = result.scalar_one_or_none()
    if item:
        item.unit = unit
        return item

    item = InventoryItem(name=name, unit=unit, stock=stock)
    session.add(item)
    await session.flush()
    session.add(
        InventoryMovement(
            inventory_item_id=item.id,
            change=stock,
            balance_after=stock,
            reason="Demo seed",
            source_type="initial",
        )
    )
    return item


async def upsert_menu_item(session, name: str, category: str, price: Decimal, recipe) -> MenuItem:
    result = await session.execute(
        select(MenuItem).where(func.lower(MenuItem.name) == name.strip().lower())
    )
    item = result.scalar_one_or_none()
    if not item:
        item = MenuItem(name=name.strip(), category=category, price=price)
        session.add(item)
    else:
        item.category = category
        item.price = price

    # Replace recipe rows
    item.ingredients = [
        RecipeIngredient(inventory_item=ingredient, quantity=Decimal(str(qty)), sort_order=pos)
        for pos, (ingredient, qty) in enumerate(recipe)
    ]
    await session.flush()
    return item


async def seed():
    await create_db_and_tables()
    async with async_session_maker() as session:
        async with session.begin():
            for name, unit, stock in INVENTORY:
                await get_or_create_inventory_item(session, name, unit, stock)

            for name, category, price, recipe in MENU:
                await upsert_menu_item(session, name, category, price, recipe)

            await ensure_order_counter(session)

    print(f"Seeded {len(INVENTORY)} inventory items and {len(MENU)} menu items")


if __name__ == "__main__":
    asyncio.run(seed())
