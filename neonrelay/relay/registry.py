from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator

from neonrelay.relay.protocol import MAX_NAME_LEN, Identity, coerce_text


def default_name(session_id: int) -> str:
    return f"user-{session_id}"


@dataclass
class Session:
    id: int
    name: str

    def snapshot(self) -> Identity:
        return Identity(id=self.id, name=self.name)


class SessionRegistry:
    """Live connections keyed by their transport handle.

    Ids start at 1 and are never reused for the lifetime of the registry;
    id 0 belongs to the bot and is never handed out here.
    """

    def __init__(self) -> None:
        self._sessions: dict[Any, Session] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, conn: Any) -> bool:
        return conn in self._sessions

    def connections(self) -> Iterator[Any]:
        return iter(list(self._sessions.keys()))

    def get(self, conn: Any) -> Session | None:
        return self._sessions.get(conn)

    def register(self, conn: Any) -> Session:
        session_id = self._next_id
        self._next_id += 1
        session = Session(id=session_id, name=default_name(session_id))
        self._sessions[conn] = session
        return session

    def rename(self, session: Session, desired: Any) -> Session:
        clean = coerce_text(desired).strip()[:MAX_NAME_LEN]
        session.name = clean or default_name(session.id)
        return session

    def unregister(self, conn: Any) -> Session | None:
        return self._sessions.pop(conn, None)

    def list(self) -> list[Identity]:
        return [s.snapshot() for s in self._sessions.values()]

    def real_count(self) -> int:
        return sum(1 for s in self._sessions.values() if s.id > 0)
