from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import settings
from db.database import Setting as SettingModel, get_async_session
from db.setting import LOW_STOCK_THRESHOLD_KEY


async def get_low_stock_threshold(db: AsyncSession) -> float:
    """Stored override if present and numeric, else the configured default."""
    res = await db.execute(select(SettingModel.value).where(SettingModel.key == LOW_STOCK_THRESHOLD_KEY))
    raw = res.scalar_one_or_none()
    if raw is None:
        return float(settings.low_stock_threshold)
    try:
        return float(raw)
    except ValueError:
        return float(settings.low_stock_threshold)


async def set_low_stock_threshold(db: AsyncSession, value: float) -> float:
    row = await db.get(SettingModel, LOW_STOCK_THRESHOLD_KEY)
    if row is None:
        db.add(SettingModel(key=LOW_STOCK_THRESHOLD_KEY, value=str(value)))
    else:
        row.value = str(value)
    await db.commit()
    return float(value)


async def low_stock_threshold(db: AsyncSession = Depends(get_async_session)) -> float:
    """Request dependency: the threshold is read once per request."""
    return await get_low_stock_threshold(db)
