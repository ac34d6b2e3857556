"""Subscriber channel endpoint.

Clients connect to ``/ws?owner=<id>`` and exchange JSON messages shaped
``{"event": <name>, "data": <payload>}``.
"""

import json
import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from app.core.config import get_settings
from app.price_alerts.presentation.realtime.broadcaster import Broadcaster

router = APIRouter()
logger = logging.getLogger(__name__)


@router.websocket("/ws")
async def subscribe(
    websocket: WebSocket,
    owner: Annotated[Optional[str], Query(description="Rule owner key")] = None,
) -> None:
    """Stream snapshots and triggers; accept ``submit_rule`` messages."""
    broadcaster: Broadcaster = websocket.app.state.broadcaster
    owner_id = (owner or "").strip() or get_settings().default_owner_id

    subscriber = await broadcaster.connect(websocket, owner_id)
    try:
        while True:
            text = await websocket.receive_text()
            try:
                message = json.loads(text)
            except ValueError:
                logger.warning(f"Ignoring malformed JSON from subscriber {subscriber.id}")
                continue
            await broadcaster.handle_message(subscriber, message)
    except WebSocketDisconnect:
        logger.debug(f"Subscriber {subscriber.id} closed the connection")
    finally:
        await broadcaster.disconnect(subscriber)
