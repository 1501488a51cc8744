import pytest
from asgiref.sync import async_to_sync

from school_notify.chat.models import Message
from school_notify.realtime.exceptions import AuthenticationFailure
from school_notify.realtime.exceptions import ValidationFailure
from school_notify.realtime.store import DjangoRealtimeStore
from school_notify.users.models import User
from tests.factories import access_token_for
from tests.factories import create_user

pytestmark = pytest.mark.django_db(transaction=True)


@pytest.fixture
def store():
    return DjangoRealtimeStore()


def test_authenticate_returns_context(store):
    user = create_user("juan", role=User.Role.STUDENT)
    ctx = async_to_sync(store.authenticate)(access_token_for(user))
    assert ctx.user_id == user.pk
    assert ctx.role == "student"
    assert ctx.username == "juan"


def test_authenticate_rejects_inactive_user(store):
    user = create_user("juan", is_active=False)
    with pytest.raises(AuthenticationFailure):
        async_to_sync(store.authenticate)(access_token_for(user))


def test_authenticate_rejects_deleted_user(store):
    user = create_user("juan")
    token = access_token_for(user)
    user.delete()
    with pytest.raises(AuthenticationFailure) as exc_info:
        async_to_sync(store.authenticate)(token)
    assert exc_info.value.reason == "unauthorized"


def test_set_presence(store):
    user = create_user("juan")
    async_to_sync(store.set_presence)(user.pk, online=True)
    user.refresh_from_db()
    assert user.online_status is True
    first_seen = user.last_active
    assert first_seen is not None

    async_to_sync(store.set_presence)(user.pk, online=False)
    user.refresh_from_db()
    assert user.online_status is False
    assert user.last_active >= first_seen


def test_create_direct_message_returns_hydrated_payload(store):
    sender = create_user("juan")
    recipient = create_user("mrs_cruz", role=User.Role.TEACHER)
    payload = async_to_sync(store.create_message)(
        sender_id=sender.pk,
        content="Good morning",
        recipient_id=recipient.pk,
        is_broadcast=False,
    )
    message = Message.objects.get(pk=payload["id"])
    assert message.content == "Good morning"
    assert payload["senderId"] == sender.pk
    assert payload["recipientId"] == recipient.pk
    assert payload["sender"]["username"] == "juan"
    assert payload["recipient"] == {
        "id": recipient.pk,
        "username": "mrs_cruz",
        "role": "teacher",
        "profilePicture": None,
        "onlineStatus": False,
    }


def test_broadcast_drops_recipient(store):
    sender = create_user("principal", role=User.Role.ADMIN)
    other = create_user("juan")
    payload = async_to_sync(store.create_message)(
        sender_id=sender.pk,
        content="No classes today",
        recipient_id=other.pk,
        is_broadcast=True,
    )
    assert payload["recipientId"] is None
    assert payload["recipient"] is None
    assert Message.objects.get(pk=payload["id"]).recipient_id is None


def test_unknown_recipient_is_a_validation_failure(store):
    sender = create_user("juan")
    with pytest.raises(ValidationFailure):
        async_to_sync(store.create_message)(
            sender_id=sender.pk,
            content="hi",
            recipient_id=sender.pk + 100,
            is_broadcast=False,
        )
    assert not Message.objects.exists()
