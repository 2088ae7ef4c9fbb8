"""Outbound fan-out to live connections."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from neonrelay.relay.protocol import Event
from neonrelay.relay.registry import SessionRegistry


@runtime_checkable
class Connection(Protocol):
    """What the core needs from a transport binding."""

    def is_open(self) -> bool: ...

    def send_text(self, payload: str) -> None: ...


class BroadcastHub:
    """Serialize once, write to every ready connection, never wait.

    Connections that are not open simply miss the event: no error, no retry,
    no queueing.
    """

    def __init__(self, registry: SessionRegistry) -> None:
        self.registry = registry

    def broadcast_all(self, event: Event) -> None:
        self._fan_out(event, skip=None)

    def broadcast_except(self, origin: Any, event: Event) -> None:
        self._fan_out(event, skip=origin)

    def unicast(self, conn: Connection, event: Event) -> None:
        self._deliver(conn, event.to_json())

    def _fan_out(self, event: Event, skip: Any) -> None:
        payload = event.to_json()
        for conn in self.registry.connections():
            if conn is skip:
                continue
            self._deliver(conn, payload)

    @staticmethod
    def _deliver(conn: Connection, payload: str) -> None:
        if conn.is_open():
            conn.send_text(payload)
