"""Global Socket.IO server for the frontend.

Clients connect on ``/socket.io`` with an access token in ``auth.token``,
an ``Authorization: Bearer`` header or the ``token`` query parameter.
Handlers are thin wrappers around :class:`~school_notify.realtime.hub.RealtimeHub`.
"""

from __future__ import annotations

from typing import Any

import socketio
from django.conf import settings

from school_notify.realtime.hub import RealtimeHub
from school_notify.realtime.store import DjangoRealtimeStore


def _client_manager() -> socketio.AsyncManager | None:
    # Rooms are shared between workers only when Redis is configured.
    if settings.REDIS_URL:
        return socketio.AsyncRedisManager(settings.REDIS_URL)
    return None


sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.SOCKETIO_CORS_ALLOWED_ORIGINS,
    client_manager=_client_manager(),
    logger=False,
    engineio_logger=False,
)

hub = RealtimeHub(
    sio,
    DjangoRealtimeStore(),
    admins_observe_direct=settings.REALTIME_ADMINS_OBSERVE_DIRECT_MESSAGES,
)


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: Any | None = None):
    await hub.on_connect(sid, environ, auth)


@sio.event
async def disconnect(sid: str, reason: Any | None = None):
    await hub.on_disconnect(sid, reason)


@sio.event
async def send_message(sid: str, data: Any = None):
    await hub.on_send_message(sid, data)


@sio.event
async def typing(sid: str, data: Any = None):
    await hub.on_typing(sid, data, typing=True)


@sio.event
async def stop_typing(sid: str, data: Any = None):
    await hub.on_typing(sid, data, typing=False)
