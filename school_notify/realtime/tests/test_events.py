from unittest import mock

import pytest

from school_notify.realtime.events import messages as message_events
from school_notify.realtime.events import notifications as notification_events
from school_notify.realtime.rooms import FanoutPlan
from school_notify.realtime.socketio import hub
from school_notify.realtime.socketio import sio
from school_notify.users.models import User
from tests.factories import create_message
from tests.factories import create_user

pytestmark = pytest.mark.django_db


def test_build_message_payload_shape():
    sender = create_user("juan")
    recipient = create_user("maria")
    message = create_message(sender, content="hi", recipient=recipient)

    payload = message_events.build_message_payload(message)

    assert payload["id"] == message.pk
    assert payload["content"] == "hi"
    assert payload["senderId"] == sender.pk
    assert payload["recipientId"] == recipient.pk
    assert payload["isBroadcast"] is False
    assert payload["isRead"] is False
    assert payload["createdAt"] == message.created_at.isoformat()
    assert payload["sender"]["role"] == "student"
    assert payload["recipient"]["username"] == "maria"


def test_publish_message_created_uses_role_fan_out():
    teacher = create_user("mrs_cruz", role=User.Role.TEACHER)
    message = create_message(teacher, content="Quiz", is_broadcast=True)

    with mock.patch.object(hub, "fan_out", new=mock.AsyncMock()) as fan_out:
        message_events.publish_message_created(message)

    plan, event, payload = fan_out.await_args.args
    assert plan == FanoutPlan(rooms=frozenset({"role_admin", "role_teacher", "role_student"}))
    assert event == "new_message"
    assert payload["id"] == message.pk


def test_publish_message_deleted_targets_original_audience():
    sender = create_user("juan")
    recipient = create_user("maria")
    message = create_message(sender, recipient=recipient)

    with mock.patch.object(hub, "fan_out", new=mock.AsyncMock()) as fan_out:
        message_events.publish_message_deleted(message)

    plan, event, payload = fan_out.await_args.args
    assert plan.rooms == {f"user_{sender.pk}", f"user_{recipient.pk}", "role_admin"}
    assert event == "message_deleted"
    assert payload == {"id": message.pk}


def test_publish_notification_created_emits_to_everyone():
    notification = mock.Mock()
    with (
        mock.patch.object(
            notification_events,
            "build_notification_payload",
            return_value={"id": 1, "title": "Foundation Day"},
        ),
        mock.patch.object(sio, "emit", new=mock.AsyncMock()) as emit,
    ):
        notification_events.publish_notification_created(notification)

    emit.assert_awaited_once_with("notification", {"id": 1, "title": "Foundation Day"})


def test_socket_handlers_are_registered():
    handlers = sio.handlers["/"]
    for event in ("connect", "disconnect", "send_message", "typing", "stop_typing"):
        assert event in handlers
