"""WebSocket Manager for live UI subscriptions and broadcast of photo/person updates"""

import logging
from typing import Dict, List, Set
from threading import Lock
import json

from fastapi import WebSocket

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "viewer"


class WebSocketManager:
    """
    Manages WebSocket subscriptions of UI viewers and broadcasts updates to them.
    
    Connections are grouped by channel (e.g. "photographer", "guest"); a
    broadcast reaches every channel. A failing connection is dropped and never
    prevents delivery to the others.
    """
    
    def __init__(self):
        # Map channel -> Set of WebSocket connections
        self._connections: Dict[str, Set[WebSocket]] = {}
        self._lock = Lock()
        logger.info("WebSocketManager initialized")
    
    async def add_connection(self, websocket: WebSocket, channel: str = DEFAULT_CHANNEL) -> None:
        """Register an accepted WebSocket under a channel."""
        with self._lock:
            self._connections.setdefault(channel, set()).add(websocket)
        
        logger.info(f"Added WebSocket connection on channel '{channel}'. Total connections: {self.get_total_connections()}")
    
    async def remove_connection(self, websocket: WebSocket, channel: str = DEFAULT_CHANNEL) -> None:
        """Forget a WebSocket; unknown connections are ignored."""
        with self._lock:
            if channel in self._connections:
                self._connections[channel].discard(websocket)
                if not self._connections[channel]:
                    del self._connections[channel]
        
        logger.info(f"Removed WebSocket connection on channel '{channel}'. Total connections: {self.get_total_connections()}")
    
    async def send_to_channel(self, channel: str, message: dict) -> int:
        """
        Send a message to every connection of one channel.
        
        Args:
            channel: Channel name
            message: Message dictionary (will be JSON serialized)
            
        Returns:
            Number of connections the message was successfully sent to
        """
        with self._lock:
            connections = self._connections.get(channel, set()).copy()
        
        if not connections:
            return 0
        
        try:
            message_json = json.dumps(message)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize message to JSON: {e}")
            return 0
        
        sent_count = 0
        disconnected: List[WebSocket] = []
        for websocket in connections:
            try:
                await websocket.send_text(message_json)
                sent_count += 1
            except Exception as e:
                logger.warning(f"Failed to send message on channel '{channel}': {e}")
                disconnected.append(websocket)
        
        if disconnected:
            with self._lock:
                if channel in self._connections:
                    for websocket in disconnected:
                        self._connections[channel].discard(websocket)
                    if not self._connections[channel]:
                        del self._connections[channel]
        
        logger.debug(f"Sent {message.get('type')} to {sent_count}/{len(connections)} connections on channel '{channel}'")
        return sent_count
    
    async def broadcast_to_all(self, message: dict) -> int:
        """
        Broadcast a message to every connected viewer.
        
        Returns:
            Total number of connections the message was successfully sent to
        """
        with self._lock:
            channels = list(self._connections.keys())
        
        total_sent = 0
        for channel in channels:
            total_sent += await self.send_to_channel(channel, message)
        
        logger.debug(f"Broadcast {message.get('type')} sent to {total_sent} total connections")
        return total_sent
    
    def get_channels(self) -> List[str]:
        with self._lock:
            return list(self._connections.keys())
    
    def get_total_connections(self) -> int:
        with self._lock:
            return sum(len(connections) for connections in self._connections.values())
