"""Failure categories of the realtime layer.

None of them is retried by the server; clients reconnect or resend.
"""

from __future__ import annotations

from socketio import exceptions as socketio_exceptions


class AuthenticationFailure(socketio_exceptions.ConnectionRefusedError):
    """Handshake rejected; no session, room or presence state exists."""

    UNAUTHORIZED = "unauthorized"
    EXPIRED = "jwt_expired"
    SERVER_ERROR = "server_error"

    def __init__(self, reason: str = UNAUTHORIZED):
        self.reason = reason
        super().__init__(reason)


class RealtimeError(Exception):
    """Base for failures reported to the sender as an ``error`` event."""

    default_message = "Realtime error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(RealtimeError):
    """Bad event payload or unauthenticated actor. Nothing was persisted."""

    default_message = "Invalid message data"


class PersistenceFailure(RealtimeError):
    """Storage failed mid-handler. The connection stays open."""

    default_message = "Failed to send message"
