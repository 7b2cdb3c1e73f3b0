"""Outbound event channel to connected control clients."""

import logging
from typing import Any, Dict, Protocol

from fastapi import WebSocket

logger = logging.getLogger(__name__)

QUEUE_UPDATE = "queue:update"
AUDIO_PLAY = "audio:play"
HISTORY_UPDATE = "history:update"


class EventPublisher(Protocol):
    async def publish(self, event: str, payload: Dict[str, Any]) -> None: ...


class EventHub:
    """Manages control WebSocket connections and broadcasts events to them."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, client_id: str):
        """Accept a new WebSocket connection."""
        await websocket.accept()
        self.active_connections[client_id] = websocket
        logger.info(f"Control client connected: {client_id}")

    def disconnect(self, client_id: str):
        """Remove a client connection."""
        if client_id in self.active_connections:
            del self.active_connections[client_id]
            logger.info(f"Control client disconnected: {client_id}")

    async def send_message(self, client_id: str, message: dict):
        """Send a JSON message to a specific client."""
        websocket = self.active_connections.get(client_id)
        if websocket:
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.warning(f"Error sending to {client_id}: {e}")
                self.disconnect(client_id)

    async def publish(self, event: str, payload: Dict[str, Any]) -> None:
        """Broadcast an event to all connected clients."""
        clients = list(self.active_connections.keys())
        logger.debug(f"Broadcasting {event} to {len(clients)} clients")
        for client_id in clients:
            await self.send_message(client_id, {"type": event, **payload})


__all__ = ["AUDIO_PLAY", "EventHub", "EventPublisher", "HISTORY_UPDATE", "QUEUE_UPDATE"]
