# storefront/api/routers/events.py
from fastapi import APIRouter, WebSocket, WebSocketDisconnect
import redis.asyncio as aioredis

from storefront.utils.settings import REDIS_URL, BROADCAST_CHANNEL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["events"])


@router.websocket("/ws/events")
async def events(websocket: WebSocket):
    """
    Relays the broadcast channel to one websocket client.
    Only events published while the client is connected are delivered.
    """
    await websocket.accept()
    client = aioredis.from_url(REDIS_URL, decode_responses=True)
    pubsub = client.pubsub()
    await pubsub.subscribe(BROADCAST_CHANNEL)
    logger.info(f"Listener connected to {BROADCAST_CHANNEL}")

    try:
        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            await websocket.send_text(message["data"])
    except WebSocketDisconnect:
        logger.info("Listener disconnected")
    finally:
        await pubsub.unsubscribe(BROADCAST_CHANNEL)
        await pubsub.aclose()
        await client.aclose()
