from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.errors import ConflictError, NotFoundError
from db.database import (
    get_async_session,
    InventoryItem as InventoryItemModel,
    InventoryMovement as InventoryMovementModel,
)
from schemas.inventory import (
    InventoryItemCreate,
    InventoryItemRead,
    InventoryMovementRead,
    LowStockThreshold,
)
from services.settings_store import low_stock_threshold, set_low_stock_threshold

router = APIRouter()


def _item_out(it: InventoryItemModel, threshold: float) -> InventoryItemRead:
    return InventoryItemRead(**it.to_schema, status=it.stock_status(Decimal(str(threshold))))


@router.get("/items", response_model=List[InventoryItemRead])
async def list_inventory_items(
    q: Optional[str] = None,
    db: AsyncSession = Depends(get_async_session),
    threshold: float = Depends(low_stock_threshold),
):
    stmt = select(InventoryItemModel).order_by(func.lower(InventoryItemModel.name).asc())
    if q:
        stmt = stmt.where(func.lower(InventoryItemModel.name).contains(q.strip().lower()))
    res = await db.execute(stmt)
    return [_item_out(it, threshold) for it in res.scalars().all()]


@router.get("/items/{item_id}", response_model=InventoryItemRead)
async def get_inventory_item(
    item_id: str,
    db: AsyncSession = Depends(get_async_session),
    threshold: float = Depends(low_stock_threshold),
):
    try:
        parsed = UUID(item_id)
    except ValueError:
        raise NotFoundError("Inventory item not found")
    it = await db.get(InventoryItemModel, parsed)
    if not it:
        raise NotFoundError("Inventory item not found")
    return _item_out(it, threshold)


@router.post("/items", response_model=InventoryItemRead, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    db: AsyncSession = Depends(get_async_session),
    threshold: float = Depends(low_stock_threshold),
):
    """Register an ingredient; its name is what recipes refer to."""
    existing = await db.execute(select(InventoryItemModel).where(InventoryItemModel.name == payload.name))
    if existing.scalar_one_or_none():
        raise ConflictError(f"Inventory item {payload.name} already exists")

    it = InventoryItemModel(name=payload.name, unit=payload.unit, stock=payload.stock)
    db.add(it)
    await db.flush()
    db.add(
        InventoryMovementModel(
            inventory_item_id=it.id,
            change=payload.stock,
            balance_after=payload.stock,
            reason="Initial stock",
            source_type="initial",
        )
    )
    await db.commit()
    return _item_out(it, threshold)


@router.get("/low-stock", response_model=List[InventoryItemRead])
async def list_low_stock(
    db: AsyncSession = Depends(get_async_session),
    threshold: float = Depends(low_stock_threshold),
):
    """Items at or below the low-stock threshold (including empty ones)."""
    res = await db.execute(
        select(InventoryItemModel)
        .where(InventoryItemModel.stock <= Decimal(str(threshold)))
        .order_by(InventoryItemModel.stock.asc(), InventoryItemModel.name.asc())
    )
    return [_item_out(it, threshold) for it in res.scalars().all()]


@router.get("/movements", response_model=List[InventoryMovementRead])
async def list_movements(
    inventory_item_id: Optional[UUID] = None,
    source_ref: Optional[str] = None,
    limit: int = Query(200, ge=1, le=1000),
    db: AsyncSession = Depends(get_async_session),
):
    """Ledger log, newest first."""
    stmt = select(InventoryMovementModel).order_by(InventoryMovementModel.created_at.desc()).limit(limit)
    if inventory_item_id:
        stmt = stmt.where(InventoryMovementModel.inventory_item_id == inventory_item_id)
    if source_ref:
        stmt = stmt.where(InventoryMovementModel.source_ref == source_ref)
    res = await db.execute(stmt)
    return [InventoryMovementRead(**m.to_schema) for m in res.scalars().all()]


@router.get("/settings/low-stock-threshold", response_model=LowStockThreshold)
async def get_threshold(threshold: float = Depends(low_stock_threshold)):
    return LowStockThreshold(value=threshold)


@router.put("/settings/low-stock-threshold", response_model=LowStockThreshold)
async def update_threshold(payload: LowStockThreshold, db: AsyncSession = Depends(get_async_session)):
    value = await set_low_stock_threshold(db, payload.value)
    return LowStockThreshold(value=value)
