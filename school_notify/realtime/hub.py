"""Connection lifecycle and chat event handling.

:class:`RealtimeHub` holds the behaviour of the socket server: the session
authenticator, the presence tracker, the room router and the typing relay.
It talks to the python-socketio server through a handful of coroutines
(``save_session``, ``get_session``, ``enter_room``, ``leave_room``,
``emit``) and to the database through a store, so both can be replaced in
tests.
"""

from __future__ import annotations

import logging
from typing import Any

from school_notify.realtime.auth import extract_token
from school_notify.realtime.events.messages import NEW_MESSAGE
from school_notify.realtime.exceptions import AuthenticationFailure
from school_notify.realtime.exceptions import PersistenceFailure
from school_notify.realtime.exceptions import RealtimeError
from school_notify.realtime.exceptions import ValidationFailure
from school_notify.realtime.presence import OFFLINE
from school_notify.realtime.presence import ONLINE
from school_notify.realtime.presence import PresenceTracker
from school_notify.realtime.rooms import FanoutPlan
from school_notify.realtime.rooms import plan_fanout
from school_notify.realtime.rooms import room_for_user
from school_notify.realtime.rooms import rooms_for_connection

logger = logging.getLogger(__name__)

USER_STATUS_CHANGE = "user_status_change"
USER_TYPING = "user_typing"
ERROR = "error"


def _optional_user_id(value: Any) -> int | None:
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        raise ValidationFailure
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationFailure from exc


class RealtimeHub:
    def __init__(
        self,
        server,
        store,
        *,
        tracker: PresenceTracker | None = None,
        admins_observe_direct: bool = True,
    ):
        self.server = server
        self.store = store
        self.tracker = tracker if tracker is not None else PresenceTracker()
        self.admins_observe_direct = admins_observe_direct

    # Connection lifecycle
    # ------------------------------------------------------------------

    async def on_connect(self, sid: str, environ: Any, auth: Any | None = None) -> None:
        token = extract_token(environ, auth)
        if not token:
            raise AuthenticationFailure

        self.tracker.begin(sid)
        try:
            ctx = await self._authenticate(token)
            rooms = rooms_for_connection(ctx.user_id, ctx.role)
            await self.server.save_session(sid, ctx.as_session())
            for room in rooms:
                await self.server.enter_room(sid, room)
        finally:
            still_connected = self.tracker.settle(sid)

        if not still_connected:
            # The transport closed mid-handshake, no disconnect will follow.
            for room in rooms:
                await self.server.leave_room(sid, room)
            logger.info("User %s left during connect sid=%s", ctx.user_id, sid)
            return

        first = self.tracker.attach(sid, ctx.user_id)
        logger.info("User %s connected sid=%s", ctx.user_id, sid)
        if first:
            await self._announce(ctx.user_id, online=True)

    async def _authenticate(self, token: str):
        try:
            return await self.store.authenticate(token)
        except AuthenticationFailure:
            raise
        except Exception as exc:
            logger.exception("Socket.IO connect error")
            raise AuthenticationFailure(AuthenticationFailure.SERVER_ERROR) from exc

    async def on_disconnect(self, sid: str, reason: Any | None = None) -> None:
        user_id, last = self.tracker.detach(sid)
        if user_id is None:
            return
        logger.info("User %s disconnected sid=%s reason=%s", user_id, sid, reason)
        if last:
            await self._announce(user_id, online=False)

    async def _announce(self, user_id: int, *, online: bool) -> None:
        try:
            await self.store.set_presence(user_id, online=online)
        except Exception:
            logger.exception("Could not store presence of user %s", user_id)
            return
        await self.server.emit(
            USER_STATUS_CHANGE,
            {"userId": user_id, "status": ONLINE if online else OFFLINE},
        )

    # Chat
    # ------------------------------------------------------------------

    async def _session(self, sid: str) -> dict[str, Any]:
        try:
            session = await self.server.get_session(sid)
        except KeyError:
            session = None
        if not isinstance(session, dict) or not session.get("user_id"):
            raise ValidationFailure
        return session

    async def on_send_message(self, sid: str, data: Any) -> None:
        try:
            await self._send_message(sid, data)
        except RealtimeError as exc:
            await self.server.emit(ERROR, {"message": exc.message}, to=sid)
        except Exception:
            logger.exception("Send message error sid=%s", sid)
            await self.server.emit(
                ERROR,
                {"message": PersistenceFailure.default_message},
                to=sid,
            )

    async def _send_message(self, sid: str, data: Any) -> None:
        session = await self._session(sid)
        if not isinstance(data, dict):
            raise ValidationFailure
        content = data.get("content")
        if not isinstance(content, str) or not content.strip():
            raise ValidationFailure
        is_broadcast = bool(data.get("isBroadcast"))
        recipient_id = None
        if not is_broadcast:
            recipient_id = _optional_user_id(data.get("recipientId"))

        payload = await self.store.create_message(
            sender_id=session["user_id"],
            content=content.strip(),
            recipient_id=recipient_id,
            is_broadcast=is_broadcast,
        )
        plan = plan_fanout(
            sender_id=session["user_id"],
            sender_role=session.get("role", ""),
            is_broadcast=is_broadcast,
            recipient_id=recipient_id,
            sender_sid=sid,
            admins_observe_direct=self.admins_observe_direct,
        )
        if plan.is_empty:
            logger.info(
                "Broadcast %s from role %s stored without fan-out",
                payload.get("id"),
                session.get("role"),
            )
        await self.fan_out(plan, NEW_MESSAGE, payload)

    async def fan_out(self, plan: FanoutPlan, event: str, payload: Any) -> None:
        """Emit once per plan; a connection in several target rooms gets one copy."""

        if plan.everyone:
            await self.server.emit(event, payload)
        elif plan.rooms:
            await self.server.emit(event, payload, to=sorted(plan.rooms))

    # Typing indicators
    # ------------------------------------------------------------------

    async def on_typing(self, sid: str, data: Any, *, typing: bool) -> None:
        if not isinstance(data, dict):
            return
        try:
            recipient_id = _optional_user_id(data.get("recipientId"))
            session = await self._session(sid)
        except ValidationFailure:
            return
        if recipient_id is None:
            return
        await self.server.emit(
            USER_TYPING,
            {
                "userId": session["user_id"],
                "username": session.get("username"),
                "typing": typing,
            },
            to=room_for_user(recipient_id),
        )
