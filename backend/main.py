import logging

from fastapi import FastAPI
import uvicorn
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from core.config import settings
from core.errors import register_exception_handlers
from core.logging import setup_logging
from db.database import async_session_maker, create_db_and_tables
from routers.inventory import router as inventory_router
from routers.kitchen import router as kitchen_router
from routers.menu import router as menu_router
from routers.sales import router as sales_router
from services.order_codes import ensure_order_counter

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_db_and_tables()
    async with async_session_maker() as session:
        await ensure_order_counter(session)
        await session.commit()
    logger.info("POS backend ready (order codes: %s)", settings.order_code_strategy)
    yield


app = FastAPI(
    title="Restaurant POS API",
    description="Point of sale, kitchen queue and ingredient inventory",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(sales_router, prefix="/sales", tags=["sales"])
app.include_router(kitchen_router, prefix="/kitchen", tags=["kitchen"])
app.include_router(menu_router, prefix="/menu", tags=["menu"])
app.include_router(inventory_router, prefix="/inventory", tags=["inventory"])


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
