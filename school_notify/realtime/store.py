"""Database access for the socket handlers.

Every method is a coroutine wrapping the ORM with
``database_sync_to_async`` so handlers never block the event loop.
"""

from __future__ import annotations

import logging
from typing import Any

from channels.db import database_sync_to_async
from django.utils import timezone

from school_notify.chat import services as chat_services
from school_notify.realtime.auth import UserRealtimeContext
from school_notify.realtime.auth import verify_token
from school_notify.realtime.events.messages import build_message_payload
from school_notify.realtime.exceptions import AuthenticationFailure
from school_notify.realtime.exceptions import PersistenceFailure
from school_notify.realtime.exceptions import ValidationFailure
from school_notify.users.models import User

logger = logging.getLogger(__name__)


class DjangoRealtimeStore:
    @database_sync_to_async
    def authenticate(self, token: str) -> UserRealtimeContext:
        user_id = verify_token(token)
        user = (
            User.objects.filter(pk=user_id, is_active=True)
            .only("id", "role", "username")
            .first()
        )
        if user is None:
            raise AuthenticationFailure
        return UserRealtimeContext(
            user_id=user.pk,
            role=user.role,
            username=user.username,
        )

    @database_sync_to_async
    def set_presence(self, user_id: int, *, online: bool) -> None:
        User.objects.filter(pk=user_id).update(
            online_status=online,
            last_active=timezone.now(),
        )

    @database_sync_to_async
    def create_message(
        self,
        *,
        sender_id: int,
        content: str,
        recipient_id: int | None,
        is_broadcast: bool,
    ) -> dict[str, Any]:
        """Persist then re-read a message, returning the ``new_message`` payload."""

        try:
            message = chat_services.create_message(
                sender_id=sender_id,
                content=content,
                recipient_id=recipient_id,
                is_broadcast=is_broadcast,
            )
        except chat_services.RecipientNotFound as exc:
            msg = "Recipient not found"
            raise ValidationFailure(msg) from exc

        hydrated = chat_services.hydrate(message.pk)
        if hydrated is None:
            logger.warning("Message %s vanished before it could be sent", message.pk)
            raise PersistenceFailure
        return build_message_payload(hydrated)
