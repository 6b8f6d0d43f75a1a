from collections.abc import AsyncGenerator
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from core.config import settings

DATABASE_URL = settings.database_url


class Base(DeclarativeBase):
    pass


def utcnow() -> datetime:
    """Naive UTC timestamp (columns are TIMESTAMP WITHOUT TIME ZONE)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _engine_kwargs(url: str) -> dict:
    kwargs = {"echo": settings.database_echo}
    if url.startswith("sqlite"):
        # aiosqlite connections are bound to the loop that opened them
        kwargs["poolclass"] = NullPool
    return kwargs


engine = create_async_engine(DATABASE_URL, **_engine_kwargs(DATABASE_URL))
async_session_maker = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        yield session


# Register every model on Base.metadata and expose them from one place.
from .menu_item import MenuItem, RecipeIngredient  # noqa: E402,F401
from .inventory import InventoryItem, InventoryMovement  # noqa: E402,F401
from .sale import Sale, SaleAddOn, SaleRemovedIngredient  # noqa: E402,F401
from .mobile_order import MobileOrder  # noqa: E402,F401
from .order_counter import OrderCounter  # noqa: E402,F401
from .setting import Setting  # noqa: E402,F401
