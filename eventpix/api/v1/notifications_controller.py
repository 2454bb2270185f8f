"""Notifications API endpoint for live photo/person updates via WebSocket"""

import logging
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ...di.container import get_container
from ...infrastructure.notifications import WebSocketManager
from ...infrastructure.notifications.websocket_manager import DEFAULT_CHANNEL

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])


@router.websocket("/ws")
async def websocket_notifications(
    websocket: WebSocket,
    channel: str = Query(DEFAULT_CHANNEL, max_length=50, description="Viewer channel, e.g. photographer or guest"),
):
    """
    WebSocket endpoint for live UI updates.
    
    Viewers receive photo_ready, photo_deleted and person_renamed messages.
    Delivery is at-most-once; nothing is replayed for late subscribers.
    
    Example connection:
        ws://host/api/v1/notifications/ws?channel=photographer
    """
    manager = get_container().get(WebSocketManager)
    
    await websocket.accept()
    logger.info(f"WebSocket connection accepted on channel '{channel}'")
    
    try:
        await manager.add_connection(websocket, channel)
        
        await websocket.send_json({
            "type": "connection_established",
            "message": "Connected to notifications service",
            "channel": channel,
        })
        
        # Keep connection alive and answer pings
        while True:
            try:
                message = await websocket.receive_text()
                if message == "ping":
                    await websocket.send_text("pong")
                elif message != "pong":
                    logger.debug(f"Received message on channel '{channel}': {message}")
            except WebSocketDisconnect:
                logger.info(f"WebSocket disconnected on channel '{channel}'")
                break
            except Exception as e:
                logger.error(f"Error handling WebSocket message on channel '{channel}': {e}", exc_info=True)
                break
    
    except Exception as e:
        logger.error(f"Error in WebSocket connection on channel '{channel}': {e}", exc_info=True)
    finally:
        try:
            await manager.remove_connection(websocket, channel)
        except Exception as e:
            logger.error(f"Error cleaning up WebSocket connection: {e}", exc_info=True)
