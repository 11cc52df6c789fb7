# src/postline/api/v1/endpoints/live.py
"""WebSocket channel pushing post mutation events to connected clients."""

from __future__ import annotations

import logging
from contextlib import suppress

import anyio
from fastapi import APIRouter, WebSocket
from starlette.websockets import WebSocketState

from postline.services.broadcast import MutationBroadcaster, Subscription

logger = logging.getLogger(__name__)

router = APIRouter(tags=["live"])


async def _pump_events(websocket: WebSocket, subscription: Subscription) -> None:
    while True:
        event = await subscription.receive()
        if websocket.client_state == WebSocketState.DISCONNECTED:
            return
        await websocket.send_json(event.to_message())


@router.websocket("/live")
async def live_updates(websocket: WebSocket) -> None:
    """Subscribe for the lifetime of the connection; inbound frames are ignored."""
    broadcaster: MutationBroadcaster = websocket.app.state.broadcaster
    subscription = broadcaster.subscribe()
    try:
        await websocket.accept()
        logger.debug("Live subscriber connected (%d total)", broadcaster.subscriber_count)
        async with anyio.create_task_group() as task_group:

            async def pump() -> None:
                try:
                    await _pump_events(websocket, subscription)
                finally:
                    task_group.cancel_scope.cancel()

            task_group.start_soon(pump)
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
            task_group.cancel_scope.cancel()
    finally:
        broadcaster.unsubscribe(subscription)
        logger.debug("Live subscriber disconnected")
        with suppress(Exception):
            if websocket.application_state != WebSocketState.DISCONNECTED:
                await websocket.close()
