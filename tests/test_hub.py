from __future__ import annotations

from conftest import FakeConnection

from neonrelay.relay.hub import BroadcastHub, Connection
from neonrelay.relay.protocol import ChatEvent, Identity
from neonrelay.relay.registry import SessionRegistry


def _event(body: str = "x") -> ChatEvent:
    return ChatEvent(sender=Identity(id=1, name="a"), body=body)


def _hub(*conns: FakeConnection) -> BroadcastHub:
    registry = SessionRegistry()
    for c in conns:
        registry.register(c)
    return BroadcastHub(registry)


def test_fake_connection_satisfies_protocol() -> None:
    assert isinstance(FakeConnection(), Connection)


def test_broadcast_all_reaches_every_open_connection() -> None:
    a, b = FakeConnection("a"), FakeConnection("b")
    _hub(a, b).broadcast_all(_event())
    assert len(a.sent) == 1
    assert len(b.sent) == 1


def test_closed_connections_are_skipped_silently() -> None:
    a, b = FakeConnection("a"), FakeConnection("b")
    b.open = False
    _hub(a, b).broadcast_all(_event())
    assert len(a.sent) == 1
    assert b.sent == []


def test_broadcast_except_skips_origin() -> None:
    a, b, c = FakeConnection("a"), FakeConnection("b"), FakeConnection("c")
    _hub(a, b, c).broadcast_except(b, _event())
    assert [len(x.sent) for x in (a, b, c)] == [1, 0, 1]


def test_unicast_checks_readiness() -> None:
    a = FakeConnection("a")
    hub = _hub(a)
    hub.unicast(a, _event("one"))
    a.open = False
    hub.unicast(a, _event("two"))
    assert [m["body"] for m in a.sent] == ["one"]
