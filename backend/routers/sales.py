from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from db.database import get_async_session
from schemas.sales import (
    MessageResponse,
    ProductSalesRow,
    SaleCreate,
    SaleQuote,
    SaleRead,
    SalesSummary,
    SaleUpdate,
)
from services import sales as sales_service

router = APIRouter()


@router.post("", response_model=SaleRead, status_code=status.HTTP_201_CREATED)
@router.post("/new-sale", response_model=SaleRead, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_sale(payload: SaleCreate, db: AsyncSession = Depends(get_async_session)):
    """
    Ring up one checkout line.

    Validates the request, deducts every ingredient (main item, then add-ons)
    and stores the sale as `pending`. Any validation or stock failure returns
    400 and leaves inventory untouched.
    """
    sale = await sales_service.create_sale(db, payload)
    return SaleRead(**sale.to_schema)


@router.post("/test-order", response_model=SaleQuote)
async def quote_sale(payload: SaleCreate, db: AsyncSession = Depends(get_async_session)):
    """Validate a checkout line and price it without touching stock."""
    return SaleQuote(**await sales_service.quote_sale(db, payload))


@router.get("", response_model=List[SaleRead])
async def list_sales(db: AsyncSession = Depends(get_async_session)):
    sales = await sales_service.list_sales(db)
    return [SaleRead(**s.to_schema) for s in sales]


@router.get("/sales-summary", response_model=SalesSummary)
async def sales_summary(
    period: str = Query("week", description="day | week | month"),
    db: AsyncSession = Depends(get_async_session),
):
    return SalesSummary(**await sales_service.sales_summary(db, period))


@router.get("/product-sales", response_model=List[ProductSalesRow])
async def product_sales(
    limit: int = Query(10, ge=1, le=100),
    db: AsyncSession = Depends(get_async_session),
):
    return [ProductSalesRow(**r) for r in await sales_service.product_sales(db, limit)]


@router.get("/by-order-code/{order_code}", response_model=SaleRead)
async def get_sale_by_order_code(order_code: str, db: AsyncSession = Depends(get_async_session)):
    sale = await sales_service.get_sale_by_order_code(db, order_code)
    return SaleRead(**sale.to_schema)


@router.get("/{sale_id}", response_model=SaleRead)
async def get_sale(sale_id: str, db: AsyncSession = Depends(get_async_session)):
    sale = await sales_service.get_sale(db, sale_id)
    return SaleRead(**sale.to_schema)


@router.put("/{sale_id}", response_model=SaleRead)
async def update_sale(sale_id: str, payload: SaleUpdate, db: AsyncSession = Depends(get_async_session)):
    """Administrative edit: status, payment method or service type."""
    sale = await sales_service.update_sale(db, sale_id, payload)
    return SaleRead(**sale.to_schema)


@router.delete("/{sale_id}", response_model=MessageResponse)
async def delete_sale(sale_id: str, db: AsyncSession = Depends(get_async_session)):
    """Hard delete. Stock consumed by the sale is not returned."""
    await sales_service.delete_sale(db, sale_id)
    return MessageResponse(message="Sale deleted")
