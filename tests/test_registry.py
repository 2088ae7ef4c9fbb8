"""Unit tests for SessionRegistry."""

from __future__ import annotations

import pytest

from neonrelay.relay.registry import SessionRegistry


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


class TestRegister:
    def test_ids_start_at_one_with_default_names(self, registry: SessionRegistry) -> None:
        a = registry.register(object())
        b = registry.register(object())
        assert (a.id, a.name) == (1, "user-1")
        assert (b.id, b.name) == (2, "user-2")

    def test_ids_are_never_reused(self, registry: SessionRegistry) -> None:
        first = object()
        registry.register(first)
        registry.unregister(first)
        again = registry.register(object())
        assert again.id == 2

    def test_unregister_is_idempotent(self, registry: SessionRegistry) -> None:
        conn = object()
        registry.register(conn)
        assert registry.unregister(conn) is not None
        assert registry.unregister(conn) is None
        assert len(registry) == 0


class TestRename:
    def test_trims_whitespace(self, registry: SessionRegistry) -> None:
        s = registry.register(object())
        registry.rename(s, "   Alice   ")
        assert s.name == "Alice"

    @pytest.mark.parametrize("desired", ["", "    ", None])
    def test_empty_falls_back_to_default(self, registry: SessionRegistry, desired) -> None:
        s = registry.register(object())
        registry.rename(s, "Bob")
        registry.rename(s, desired)
        assert s.name == f"user-{s.id}"

    def test_truncates_to_24_chars(self, registry: SessionRegistry) -> None:
        s = registry.register(object())
        registry.rename(s, "x" * 40)
        assert s.name == "x" * 24

    def test_rename_mutates_in_place(self, registry: SessionRegistry) -> None:
        conn = object()
        s = registry.register(conn)
        registry.rename(s, "Carol")
        assert registry.get(conn) is s
        assert s.id == 1

    def test_non_string_is_coerced(self, registry: SessionRegistry) -> None:
        s = registry.register(object())
        registry.rename(s, 42)
        assert s.name == "42"


class TestList:
    def test_list_returns_snapshots(self, registry: SessionRegistry) -> None:
        s = registry.register(object())
        snapshot = registry.list()
        registry.rename(s, "Dave")
        assert snapshot[0].name == "user-1"
        assert registry.list()[0].name == "Dave"

    def test_real_count_excludes_nothing_but_real_sessions(self, registry: SessionRegistry) -> None:
        for _ in range(3):
            registry.register(object())
        assert registry.real_count() == 3
