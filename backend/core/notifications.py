import logging
from typing import Any, Dict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class KitchenBroadcaster:
    """In-memory fan-out of kitchen events to connected WebSocket clients."""

    def __init__(self):
        self.active_sockets: Set[WebSocket] = set()

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.active_sockets.add(ws)

    def disconnect(self, ws: WebSocket) -> None:
        self.active_sockets.discard(ws)

    async def publish(self, msg: Dict[str, Any]) -> int:
        delivered = 0
        for ws in list(self.active_sockets):
            try:
                await ws.send_json(msg)
                delivered += 1
            except Exception as e:
                logger.debug("dropping kitchen socket: %r", e)
                self.disconnect(ws)
        return delivered


broadcaster = KitchenBroadcaster()


def get_broadcaster() -> KitchenBroadcaster:
    return broadcaster
