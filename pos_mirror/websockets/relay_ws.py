import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..logs import reset_connection_id, set_connection_id
from ..relay import BroadcastRelay

logger = logging.getLogger(__name__)


async def ws_relay(ws: WebSocket):
    relay: BroadcastRelay = ws.app.state.relay

    await ws.accept()
    conn = relay.open(ws)
    token = set_connection_id(conn.id)

    try:
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes")
            await relay.handle_message(conn, raw)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("relay connection failed")
    finally:
        relay.close(conn)
        reset_connection_id(token)


def make_router(path: str) -> APIRouter:
    router = APIRouter()
    router.add_api_websocket_route(path, ws_relay)
    return router
