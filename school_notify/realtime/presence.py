"""Presence Tracker bookkeeping.

Counts live connections per user so the stored online flag only flips when
a user goes from zero connections to one, or from one to zero. State is
per process; all mutations are synchronous so a handler decides its
transition before it awaits anything.

A connection is registered with :meth:`begin` while its handshake is still
being processed. A disconnect that arrives in that window marks it dropped,
and :meth:`settle` then reports it so the handshake is abandoned instead of
attaching a connection that will never disconnect again.
"""

from __future__ import annotations

from collections import defaultdict

ONLINE = "online"
OFFLINE = "offline"


class PresenceTracker:
    def __init__(self) -> None:
        self._by_user: defaultdict[int, set[str]] = defaultdict(set)
        self._owner: dict[str, int] = {}
        self._pending: set[str] = set()
        self._dropped: set[str] = set()

    def begin(self, sid: str) -> None:
        self._pending.add(sid)

    def settle(self, sid: str) -> bool:
        """End the handshake of ``sid``. False when it disconnected meanwhile."""

        self._pending.discard(sid)
        if sid in self._dropped:
            self._dropped.discard(sid)
            return False
        return True

    def attach(self, sid: str, user_id: int) -> bool:
        """Register a connection. True when it is the user's first."""

        if sid in self._owner:
            return False
        self._owner[sid] = user_id
        sids = self._by_user[user_id]
        sids.add(sid)
        return len(sids) == 1

    def detach(self, sid: str) -> tuple[int | None, bool]:
        """Forget a connection.

        Returns the owning user id (None for an unknown or already detached
        connection) and whether it was that user's last connection.
        """

        if sid in self._pending:
            self._pending.discard(sid)
            self._dropped.add(sid)
            return None, False
        user_id = self._owner.pop(sid, None)
        if user_id is None:
            return None, False
        sids = self._by_user.get(user_id, set())
        sids.discard(sid)
        if sids:
            return user_id, False
        self._by_user.pop(user_id, None)
        return user_id, True

    def is_online(self, user_id: int) -> bool:
        return bool(self._by_user.get(user_id))

    def connection_count(self, user_id: int) -> int:
        return len(self._by_user.get(user_id, ()))

    def online_user_ids(self) -> set[int]:
        return set(self._by_user)
