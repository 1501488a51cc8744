"""Room naming and the role based fan-out table."""

from __future__ import annotations

from dataclasses import dataclass

from school_notify.users.models import User

ROLE_ADMIN = User.Role.ADMIN.value
ROLE_TEACHER = User.Role.TEACHER.value
ROLE_STUDENT = User.Role.STUDENT.value


def room_for_user(user_id: int) -> str:
    return f"user_{int(user_id)}"


def room_for_role(role: str) -> str:
    return f"role_{role}"


def rooms_for_connection(user_id: int, role: str) -> tuple[str, str]:
    """The only two rooms a connection ever joins."""

    return room_for_user(user_id), room_for_role(role)


# Broadcast reach per sender role. ``None`` means every connected client.
# Roles missing from the table reach nobody, so a new role starts excluded.
EVERYONE = None
ROLE_FANOUT_TARGETS: dict[str, frozenset[str] | None] = {
    ROLE_ADMIN: EVERYONE,
    ROLE_TEACHER: frozenset(
        room_for_role(role) for role in (ROLE_ADMIN, ROLE_TEACHER, ROLE_STUDENT)
    ),
}


@dataclass(frozen=True)
class FanoutPlan:
    """Where one ``new_message`` goes.

    ``everyone`` wins over ``rooms``. ``rooms`` may include a connection id,
    since every Socket.IO connection is also a room of its own.
    """

    everyone: bool = False
    rooms: frozenset[str] = frozenset()

    @property
    def is_empty(self) -> bool:
        return not self.everyone and not self.rooms


def plan_fanout(
    *,
    sender_id: int,
    sender_role: str,
    is_broadcast: bool,
    recipient_id: int | None = None,
    sender_sid: str | None = None,
    admins_observe_direct: bool = True,
) -> FanoutPlan:
    """Resolve the targets for a freshly stored message.

    Direct messages go back to the sender (its connection when known,
    otherwise all of its connections), to the recipient, and to
    ``role_admin`` when admins observe direct traffic.
    """

    if is_broadcast:
        if sender_role not in ROLE_FANOUT_TARGETS:
            return FanoutPlan()
        targets = ROLE_FANOUT_TARGETS[sender_role]
        if targets is EVERYONE:
            return FanoutPlan(everyone=True)
        return FanoutPlan(rooms=targets)

    rooms = {sender_sid or room_for_user(sender_id)}
    if recipient_id is not None:
        rooms.add(room_for_user(recipient_id))
    if admins_observe_direct:
        rooms.add(room_for_role(ROLE_ADMIN))
    return FanoutPlan(rooms=frozenset(rooms))
