"""WebSocket endpoints that stream change-feed deltas to browsers.

The actor arrives in the same ``X-Actor-Id`` / ``X-Actor-Role`` headers as on
the HTTP routes. The unfiltered order stream is for admins; filtered order
streams and notification streams are for their owner or an admin. Stock levels
are public.
"""

import asyncio

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status

from marketplace.domain import logger
from marketplace.identity.actor import Actor
from marketplace.realtime.streaming import DeltaStream, iterate_stream
from marketplace.realtime.subscriptions import (
    subscribe_to_notifications,
    subscribe_to_order_changes,
    subscribe_to_seller_orders,
    subscribe_to_stock_changes,
)

realtime_router = APIRouter(prefix="/realtime", tags=["realtime"])


def _websocket_actor(websocket: WebSocket) -> Actor | None:
    user_id = websocket.headers.get("x-actor-id")
    if not user_id:
        return None
    try:
        return Actor(user_id=user_id, role=websocket.headers.get("x-actor-role", "customer"))
    except ValueError:
        return None


def _is_self_or_admin(actor: Actor | None, user_id: str) -> bool:
    return actor is not None and (actor.is_admin or str(actor.user_id) == str(user_id))


async def _refuse(websocket: WebSocket) -> None:
    logger.warning(
        "Realtime subscription refused",
        path=websocket.url.path,
        actor_id=websocket.headers.get("x-actor-id"),
    )
    await websocket.close(code=status.WS_1008_POLICY_VIOLATION)


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


async def _send_deltas(websocket: WebSocket, stream: DeltaStream) -> None:
    async for delta in stream:
        await websocket.send_json(delta.model_dump(mode="json"))


async def _pump(websocket: WebSocket, subscribe) -> None:
    stream = iterate_stream(subscribe)
    tasks = []
    try:
        await websocket.accept()
        tasks = [
            asyncio.create_task(_wait_for_disconnect(websocket)),
            asyncio.create_task(_send_deltas(websocket, stream)),
        ]
        await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    finally:
        stream.close()
        for task in tasks:
            task.cancel()
        results = await asyncio.gather(*tasks, return_exceptions=True)
        failures = [r for r in results if isinstance(r, Exception) and not isinstance(r, WebSocketDisconnect)]
        if failures:
            logger.error("Realtime stream failed", path=websocket.url.path, error=str(failures[0]))
        logger.info("Realtime client disconnected", path=websocket.url.path)


@realtime_router.websocket("/orders")
async def order_changes(websocket: WebSocket, customer_id: str | None = None, seller_id: str | None = None):
    actor = _websocket_actor(websocket)
    if seller_id is not None:
        if not _is_self_or_admin(actor, seller_id):
            return await _refuse(websocket)
        await _pump(websocket, lambda cb: subscribe_to_seller_orders(cb, seller_id))
    elif customer_id is not None:
        if not _is_self_or_admin(actor, customer_id):
            return await _refuse(websocket)
        await _pump(websocket, lambda cb: subscribe_to_order_changes(cb, customer_id=customer_id))
    else:
        if actor is None or not actor.is_admin:
            return await _refuse(websocket)
        await _pump(websocket, subscribe_to_order_changes)


@realtime_router.websocket("/stock")
async def stock_changes(websocket: WebSocket):
    await _pump(websocket, subscribe_to_stock_changes)


@realtime_router.websocket("/notifications/{user_id}")
async def notification_changes(websocket: WebSocket, user_id: str):
    if not _is_self_or_admin(_websocket_actor(websocket), user_id):
        return await _refuse(websocket)
    await _pump(websocket, lambda cb: subscribe_to_notifications(cb, user_id))
