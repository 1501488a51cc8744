from __future__ import annotations

from typing import TYPE_CHECKING
from typing import Any

from asgiref.sync import async_to_sync

from school_notify.notifications.api.serializers import NotificationSerializer
from school_notify.realtime.socketio import sio

if TYPE_CHECKING:  # import for type checking only
    from school_notify.notifications.models import Notification

NOTIFICATION = "notification"


def build_notification_payload(notification: Notification) -> dict[str, Any]:
    return dict(NotificationSerializer(notification).data)


def publish_notification_created(notification: Notification) -> None:
    """Push a new announcement to every connected client."""

    async_to_sync(sio.emit)(NOTIFICATION, build_notification_payload(notification))
