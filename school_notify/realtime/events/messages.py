from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from asgiref.sync import async_to_sync
from django.conf import settings

from school_notify.realtime.rooms import plan_fanout

if TYPE_CHECKING:  # import for type checking only
    from school_notify.chat.models import Message
    from school_notify.realtime.rooms import FanoutPlan
    from school_notify.users.models import User

NEW_MESSAGE = "new_message"
MESSAGE_DELETED = "message_deleted"


def build_participant(user: User | None) -> dict[str, Any] | None:
    if user is None:
        return None
    return {
        "id": user.pk,
        "username": user.username,
        "role": user.role,
        "profilePicture": user.profile_picture_path,
        "onlineStatus": user.online_status,
    }


def build_message_payload(message: Message) -> dict[str, Any]:
    """Hydrated message as clients receive it in ``new_message``."""

    return {
        "id": message.pk,
        "content": message.content,
        "senderId": message.sender_id,
        "recipientId": message.recipient_id,
        "isBroadcast": message.is_broadcast,
        "isRead": message.is_read,
        "createdAt": message.created_at.isoformat() if message.created_at else None,
        "sender": build_participant(message.sender),
        "recipient": build_participant(message.recipient),
    }


def plan_for_message(message: Message, *, sender_sid: str | None = None) -> FanoutPlan:
    return plan_fanout(
        sender_id=message.sender_id,
        sender_role=message.sender.role,
        is_broadcast=message.is_broadcast,
        recipient_id=message.recipient_id,
        sender_sid=sender_sid,
        admins_observe_direct=settings.REALTIME_ADMINS_OBSERVE_DIRECT_MESSAGES,
    )


def _hub():
    from school_notify.realtime.socketio import hub

    return hub


def publish_message_created(message: Message) -> None:
    """Fan out a message stored outside a socket handler (REST create)."""

    async_to_sync(_hub().fan_out)(
        plan_for_message(message),
        NEW_MESSAGE,
        build_message_payload(message),
    )


def publish_message_deleted(message: Message) -> None:
    """Tell everyone who received a message that it is gone.

    Call with the instance as it was before deletion so the primary key and
    the original audience are still known.
    """

    async_to_sync(_hub().fan_out)(
        plan_for_message(message),
        MESSAGE_DELETED,
        {"id": message.pk},
    )
