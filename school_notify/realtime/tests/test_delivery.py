"""Per-connection delivery through a real python-socketio server and manager.

Only the Engine.IO transport is replaced: sessions are kept in a dict and
outgoing packets are recorded per connection instead of being written to a
socket. Rooms and recipient resolution are python-socketio's own.
"""

import json
from collections import Counter

import pytest
import socketio
from asgiref.sync import async_to_sync

from school_notify.realtime.hub import RealtimeHub

from .fakes import FakeStore

ADMIN_ID, TEACHER_ID, STUDENT_ID, OTHER_ID = 1, 2, 5, 7

CONNECTIONS = {
    "admin": "admin-token",
    "teacher": "teacher-token",
    "juan-phone": "student-token",
    "juan-laptop": "student-token",
    "maria": "other-token",
}


def _event_name(encoded) -> str:
    if isinstance(encoded, bytes):
        encoded = encoded.decode()
    return json.loads(encoded[encoded.index("[") :])[0]


class Deliveries:
    def __init__(self, sio: socketio.AsyncServer, monkeypatch):
        self.received: list[tuple[str, str]] = []
        self._sessions: dict[str, dict] = {}

        async def get_session(eio_sid):
            return self._sessions.setdefault(eio_sid, {})

        async def send(eio_sid, data):
            self.received.append((eio_sid, _event_name(data)))

        async def send_packet(eio_sid, pkt):
            self.received.append((eio_sid, _event_name(pkt.data)))

        monkeypatch.setattr(sio.eio, "get_session", get_session)
        monkeypatch.setattr(sio.eio, "send", send)
        monkeypatch.setattr(sio.eio, "send_packet", send_packet, raising=False)

    def counts(self, event: str) -> Counter:
        return Counter(eio_sid for eio_sid, name in self.received if name == event)

    def clear(self):
        self.received.clear()


@pytest.fixture
def sio():
    return socketio.AsyncServer(async_mode="asgi")


@pytest.fixture
def deliveries(sio, monkeypatch):
    return Deliveries(sio, monkeypatch)


@pytest.fixture
def store():
    store = FakeStore()
    store.add_user("admin-token", ADMIN_ID, "admin", "principal")
    store.add_user("teacher-token", TEACHER_ID, "teacher", "mrs_cruz")
    store.add_user("student-token", STUDENT_ID, "student", "juan")
    store.add_user("other-token", OTHER_ID, "student", "maria")
    return store


@pytest.fixture
def connected(sio, store, deliveries):
    """Hub plus a mapping of connection name to socket sid."""

    hub = RealtimeHub(sio, store)
    sids: dict[str, str] = {}

    async def connect_all():
        for name, token in CONNECTIONS.items():
            sid = await sio.manager.connect(name, "/")
            await hub.on_connect(sid, {}, {"token": token})
            sids[name] = sid

    async_to_sync(connect_all)()
    deliveries.clear()
    return hub, sids


def send(hub, sid, data):
    async_to_sync(hub.on_send_message)(sid, data)


def test_status_changes_reach_every_connection(sio, store, deliveries):
    hub = RealtimeHub(sio, store)

    async def connect_two():
        first = await sio.manager.connect("teacher", "/")
        await hub.on_connect(first, {}, {"token": "teacher-token"})
        second = await sio.manager.connect("maria", "/")
        await hub.on_connect(second, {}, {"token": "other-token"})

    async_to_sync(connect_two)()
    assert deliveries.counts("user_status_change") == {"teacher": 2, "maria": 1}


def test_admin_broadcast_reaches_every_connection_once(connected, deliveries):
    hub, sids = connected
    send(hub, sids["admin"], {"content": "No classes on Friday", "isBroadcast": True})
    assert deliveries.counts("new_message") == {name: 1 for name in CONNECTIONS}


def test_teacher_broadcast_reaches_every_role_room_once(connected, deliveries):
    hub, sids = connected
    send(hub, sids["teacher"], {"content": "Quiz tomorrow", "isBroadcast": True})
    assert deliveries.counts("new_message") == {name: 1 for name in CONNECTIONS}


def test_student_broadcast_reaches_nobody(connected, deliveries):
    hub, sids = connected
    send(hub, sids["juan-phone"], {"content": "hello all", "isBroadcast": True})
    assert deliveries.counts("new_message") == {}


def test_student_direct_message_skips_other_students(connected, deliveries):
    hub, sids = connected
    send(hub, sids["juan-phone"], {"content": "Question", "recipientId": TEACHER_ID})
    assert deliveries.counts("new_message") == {
        "juan-phone": 1,
        "teacher": 1,
        "admin": 1,
    }


def test_direct_message_to_admin_is_delivered_once(connected, deliveries):
    hub, sids = connected
    # the admin is both the recipient and a member of role_admin
    send(hub, sids["maria"], {"content": "Lost my ID", "recipientId": ADMIN_ID})
    assert deliveries.counts("new_message") == {"maria": 1, "admin": 1}


def test_direct_message_reaches_all_recipient_connections(connected, deliveries):
    hub, sids = connected
    send(hub, sids["teacher"], {"content": "See me", "recipientId": STUDENT_ID})
    assert deliveries.counts("new_message") == {
        "teacher": 1,
        "juan-phone": 1,
        "juan-laptop": 1,
        "admin": 1,
    }


def test_typing_reaches_only_the_recipient(connected, deliveries):
    hub, sids = connected
    async_to_sync(hub.on_typing)(sids["maria"], {"recipientId": STUDENT_ID}, typing=True)
    assert deliveries.counts("user_typing") == {"juan-phone": 1, "juan-laptop": 1}
