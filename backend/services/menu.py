import logging
import uuid
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import NotFoundError, ValidationError
from db.database import MenuItem as MenuItemModel, RecipeIngredient as RecipeIngredientModel
from db.menu_item import ADD_ONS_CATEGORY
from schemas.menu import MenuItemCreate, MenuItemUpdate, RecipeIngredientInput
from services.inventory_ledger import get_stock_map

logger = logging.getLogger(__name__)


async def validate_recipe_ingredients(db: AsyncSession, ingredients: Sequence[RecipeIngredientInput]) -> None:
    """Recipe names must exist in inventory and quantities must be positive."""
    if not ingredients:
        return

    # One line per ingredient: removals and stock checks are keyed by name.
    seen = set()
    duplicates = []
    for i in ingredients:
        if i.inventory_item in seen and i.inventory_item not in duplicates:
            duplicates.append(i.inventory_item)
        seen.add(i.inventory_item)
    if duplicates:
        raise ValidationError("Duplicate ingredients in recipe", duplicateIngredients=duplicates)

    stock = await get_stock_map(db, [i.inventory_item for i in ingredients])

    missing = [i.inventory_item for i in ingredients if i.inventory_item not in stock]
    if missing:
        raise ValidationError("Some ingredients are not found in inventory", missingIngredients=missing)

    invalid = [f"{i.inventory_item}: quantity must be greater than 0" for i in ingredients if i.quantity <= 0]
    if invalid:
        raise ValidationError("Invalid ingredient quantities", invalidIngredients=invalid)


def _recipe_rows(ingredients: Sequence[RecipeIngredientInput]) -> List[RecipeIngredientModel]:
    return [
        RecipeIngredientModel(inventory_item=i.inventory_item, quantity=i.quantity, sort_order=pos)
        for pos, i in enumerate(ingredients)
    ]


async def list_menu(db: AsyncSession, category: Optional[str] = None) -> List[MenuItemModel]:
    stmt = select(MenuItemModel).order_by(func.lower(MenuItemModel.name).asc())
    if category is not None:
        stmt = stmt.where(MenuItemModel.category == category)
    res = await db.execute(stmt)
    return list(res.scalars().all())


async def list_add_ons(db: AsyncSession) -> List[MenuItemModel]:
    return await list_menu(db, category=ADD_ONS_CATEGORY)


async def get_menu_item(db: AsyncSession, menu_id) -> MenuItemModel:
    try:
        parsed = uuid.UUID(str(menu_id))
    except ValueError:
        raise NotFoundError("Menu item not found")
    item = await db.get(MenuItemModel, parsed)
    if item is None:
        raise NotFoundError("Menu item not found")
    return item


async def create_menu_item(db: AsyncSession, payload: MenuItemCreate) -> MenuItemModel:
    await validate_recipe_ingredients(db, payload.ingredients)
    item = MenuItemModel(
        name=payload.name,
        price=payload.price,
        category=payload.category,
        image=payload.image,
        ingredients=_recipe_rows(payload.ingredients),
    )
    db.add(item)
    await db.commit()
    logger.info("menu item created: %s (%s, %d ingredients)", item.name, item.category, len(item.ingredients))
    return item


async def update_menu_item(db: AsyncSession, menu_id, payload: MenuItemUpdate) -> MenuItemModel:
    if payload.ingredients:
        await validate_recipe_ingredients(db, payload.ingredients)
    item = await get_menu_item(db, menu_id)

    data = payload.model_dump(exclude_unset=True, exclude={"ingredients"})
    for key in ("name", "price", "category"):
        if data.get(key) is not None:
            setattr(item, key, data[key])
    if "image" in data:
        item.image = data["image"]
    if payload.ingredients is not None:
        item.ingredients = _recipe_rows(payload.ingredients)

    await db.commit()
    logger.info("menu item updated: %s", item.name)
    return item


async def delete_menu_item(db: AsyncSession, menu_id) -> MenuItemModel:
    item = await get_menu_item(db, menu_id)
    await db.delete(item)
    await db.commit()
    logger.info("menu item deleted: %s", item.name)
    return item


def _ingredient_stock(ri: RecipeIngredientModel, stock: Dict, threshold: float) -> Dict:
    current = stock.get(ri.inventory_item)
    if current is None:
        return {
            "inventory_item": ri.inventory_item,
            "required_quantity": float(ri.quantity),
            "current_stock": 0.0,
            "is_out_of_stock": True,
            "is_low_stock": False,
            "status": "not found",
        }
    current = float(current)
    out = current <= 0
    low = not out and current <= threshold
    return {
        "inventory_item": ri.inventory_item,
        "required_quantity": float(ri.quantity),
        "current_stock": current,
        "is_out_of_stock": out,
        "is_low_stock": low,
        "status": "out of stock" if out else ("low stock" if low else "in stock"),
    }


async def menu_with_stock(db: AsyncSession, threshold: float) -> List[Dict]:
    items = await list_menu(db)
    stock = await get_stock_map(db, [ri.inventory_item for it in items for ri in it.ingredients])

    out = []
    for it in items:
        lines = [_ingredient_stock(ri, stock, threshold) for ri in it.ingredients]
        has_out = any(line["is_out_of_stock"] for line in lines)
        out.append(
            {
                **it.to_schema,
                "ingredients_with_stock": lines,
                "can_be_ordered": not has_out,
                "has_out_of_stock": has_out,
                "has_low_stock": any(line["is_low_stock"] for line in lines),
            }
        )
    return out
