# wallet_api/utils/events.py
"""
"Data changed" signal sent after every balance-affecting operation.

Delivery is fire-and-forget: WebSocket clients that fail are dropped and
subscriber errors are logged, never raised to the caller.
"""
from typing import Callable, Dict, List
import uuid
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)

WALLET_DATA_CHANGED = "wallet_data_changed"

# Store active WebSocket connections by user_id
active_connections: Dict[uuid.UUID, List[WebSocket]] = {}

# In-process listeners, called with (user_id, event_name)
subscribers: List[Callable[[uuid.UUID, str], None]] = []


def subscribe(callback: Callable[[uuid.UUID, str], None]) -> None:
    if callback not in subscribers:
        subscribers.append(callback)


def unsubscribe(callback: Callable[[uuid.UUID, str], None]) -> None:
    if callback in subscribers:
        subscribers.remove(callback)


# WebSocket connection management
def connect_user(websocket: WebSocket, user_id: uuid.UUID):
    """Register a new WebSocket connection for a user"""
    if user_id not in active_connections:
        active_connections[user_id] = []
    active_connections[user_id].append(websocket)
    logger.info(f"User {user_id} connected. Total connections: {len(active_connections[user_id])}")


def disconnect_user(websocket: WebSocket, user_id: uuid.UUID):
    """Remove a WebSocket connection for a user"""
    if user_id in active_connections:
        if websocket in active_connections[user_id]:
            active_connections[user_id].remove(websocket)

        # Clean up if no connections left
        if not active_connections[user_id]:
            del active_connections[user_id]

    logger.info(f"User {user_id} disconnected. Remaining connections: {len(active_connections.get(user_id, []))}")


async def publish_change(user_id: uuid.UUID, event: str = WALLET_DATA_CHANGED) -> None:
    """Broadcast a payload-less change event to the user's listeners"""
    for callback in list(subscribers):
        try:
            callback(user_id, event)
        except Exception as e:
            logger.error(f"Change subscriber {callback!r} failed: {str(e)}")

    if user_id not in active_connections:
        return

    dead_connections = []
    for websocket in active_connections[user_id]:
        try:
            await websocket.send_json({"type": event})
        except Exception as e:
            logger.warning(f"Failed to send to websocket: {str(e)}")
            dead_connections.append(websocket)

    for dead in dead_connections:
        disconnect_user(dead, user_id)
