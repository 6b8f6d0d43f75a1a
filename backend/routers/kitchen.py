import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from core.notifications import KitchenBroadcaster, get_broadcaster
from db.database import async_session_maker, get_async_session
from schemas.kitchen import KitchenStatusResponse, KitchenStatusUpdate, OrderView
from services import kitchen as kitchen_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/orders", response_model=List[OrderView])
async def list_kitchen_orders(db: AsyncSession = Depends(get_async_session)):
    """Active (pending/preparing) POS dine-in/takeout sales and mobile orders, oldest first."""
    return await kitchen_service.list_active(db)


@router.patch("/orders/{order_code}/status", response_model=KitchenStatusResponse)
async def update_kitchen_order_status(
    order_code: str,
    payload: KitchenStatusUpdate,
    db: AsyncSession = Depends(get_async_session),
    broadcaster: KitchenBroadcaster = Depends(get_broadcaster),
):
    view = await kitchen_service.update_status(db, order_code, payload.status, broadcaster)
    return KitchenStatusResponse(success=True, order=view)


@router.websocket("/ws")
async def kitchen_ws(ws: WebSocket):
    broadcaster = get_broadcaster()
    await broadcaster.connect(ws)
    try:
        async with async_session_maker() as db:
            orders = await kitchen_service.list_active(db)
        await ws.send_json(
            {"type": "snapshot", "orders": [o.model_dump(mode="json", by_alias=True) for o in orders]}
        )
        while True:
            await ws.receive_text()  # keep-alive only
    except WebSocketDisconnect:
        pass
    finally:
        broadcaster.disconnect(ws)
