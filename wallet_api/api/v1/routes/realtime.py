# wallet_api/api/v1/routes/realtime.py
from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, Query
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from wallet_api.api import deps
from wallet_api.core.database import get_async_session
from wallet_api.utils.events import connect_user, disconnect_user

router = APIRouter(prefix="/realtime", tags=["realtime"])
logger = logging.getLogger(__name__)

@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str = Query(...),
    db: AsyncSession = Depends(get_async_session)
):
    """
    Pushes `{"type": "wallet_data_changed"}` whenever the user's wallets,
    entries or settings change. Clients refetch on receipt.
    """
    try:
        user = await deps.get_user_from_token(token, db)
    except HTTPException as e:
        await websocket.close(code=4001, reason=str(e.detail))
        return

    await websocket.accept()
    connect_user(websocket, user.id)

    try:
        # Incoming messages are ignored; reading keeps the socket alive
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    except Exception as e:
        logger.error(f"WebSocket error: {str(e)}")
    finally:
        disconnect_user(websocket, user.id)
