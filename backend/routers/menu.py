from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.database import get_async_session
from schemas.menu import (
    MenuItemCreate,
    MenuItemRead,
    MenuItemResponse,
    MenuItemUpdate,
    MenuListResponse,
    MenuWithStockResponse,
)
from services import menu as menu_service
from services.settings_store import low_stock_threshold

router = APIRouter()


def _list_response(items) -> MenuListResponse:
    data = [MenuItemRead(**it.to_schema) for it in items]
    return MenuListResponse(count=len(data), data=data)


@router.get("", response_model=MenuListResponse)
async def get_all_menu(db: AsyncSession = Depends(get_async_session)):
    return _list_response(await menu_service.list_menu(db))


@router.get("/add-ons", response_model=MenuListResponse)
async def get_add_ons(db: AsyncSession = Depends(get_async_session)):
    """Menu items in the 'add-ons' category"""
    return _list_response(await menu_service.list_add_ons(db))


@router.get("/with-stock", response_model=MenuWithStockResponse)
async def get_menu_with_stock(
    db: AsyncSession = Depends(get_async_session),
    threshold: float = Depends(low_stock_threshold),
):
    """
    Every menu item annotated with the stock status of each recipe ingredient.

    An ingredient is 'out of stock' at zero, 'low stock' at or below the
    threshold, and 'not found' when the recipe name has no inventory row.
    """
    data = await menu_service.menu_with_stock(db, threshold)
    return MenuWithStockResponse(count=len(data), low_stock_threshold=threshold, data=data)


@router.get("/category/{category}", response_model=MenuListResponse)
async def get_menu_by_category(category: str, db: AsyncSession = Depends(get_async_session)):
    return _list_response(await menu_service.list_menu(db, category=category))


@router.get("/{menu_id}", response_model=MenuItemResponse)
async def get_menu_by_id(menu_id: str, db: AsyncSession = Depends(get_async_session)):
    item = await menu_service.get_menu_item(db, menu_id)
    return MenuItemResponse(data=MenuItemRead(**item.to_schema))


@router.post("", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
async def create_menu(payload: MenuItemCreate, db: AsyncSession = Depends(get_async_session)):
    item = await menu_service.create_menu_item(db, payload)
    return MenuItemResponse(message="Menu item created successfully", data=MenuItemRead(**item.to_schema))


@router.put("/{menu_id}", response_model=MenuItemResponse)
async def update_menu(menu_id: str, payload: MenuItemUpdate, db: AsyncSession = Depends(get_async_session)):
    item = await menu_service.update_menu_item(db, menu_id, payload)
    return MenuItemResponse(message="Menu item updated successfully", data=MenuItemRead(**item.to_schema))


@router.delete("/{menu_id}", response_model=MenuItemResponse)
async def delete_menu(menu_id: str, db: AsyncSession = Depends(get_async_session)):
    item = await menu_service.delete_menu_item(db, menu_id)
    return MenuItemResponse(message="Menu item deleted successfully", data=MenuItemRead(**item.to_schema))
