"""Message persistence shared by the REST API and the socket handlers."""

from __future__ import annotations

import logging

from school_notify.chat.models import Message
from school_notify.users.models import User

logger = logging.getLogger(__name__)


class RecipientNotFound(Exception):
    pass


def create_message(
    *,
    sender_id: int,
    content: str,
    recipient_id: int | None = None,
    is_broadcast: bool = False,
) -> Message:
    """Store a message. Broadcasts never keep a recipient."""

    if is_broadcast:
        recipient_id = None
    elif recipient_id is not None and not User.objects.filter(pk=recipient_id).exists():
        raise RecipientNotFound(recipient_id)

    message = Message.objects.create(
        sender_id=sender_id,
        content=content,
        recipient_id=recipient_id,
        is_broadcast=is_broadcast,
    )
    logger.debug(
        "Stored message id=%s sender=%s recipient=%s broadcast=%s",
        message.pk,
        sender_id,
        recipient_id,
        is_broadcast,
    )
    return message


def hydrate(message_id: int) -> Message | None:
    """Re-read a message joined with sender and recipient."""

    return Message.objects.hydrated().filter(pk=message_id).first()
