from __future__ import annotations

import json
from typing import Any, Callable

import pytest

from neonrelay.relay.bot import BotConfig
from neonrelay.relay.core import ChatRelay


class FakeConnection:
    def __init__(self, label: str = "") -> None:
        self.label = label
        self.open = True
        self.sent: list[dict[str, Any]] = []

    def is_open(self) -> bool:
        return self.open

    def send_text(self, payload: str) -> None:
        self.sent.append(json.loads(payload))

    def of_type(self, msg_type: str, action: str | None = None) -> list[dict[str, Any]]:
        return [m for m in self.sent if m["type"] == msg_type and (action is None or m.get("action") == action)]

    def clear(self) -> None:
        self.sent.clear()


class ManualTimer:
    def __init__(self, interval_s: float, callback: Callable[[], None]) -> None:
        self.interval_s = interval_s
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def fire(self) -> None:
        if not self._cancelled:
            self.callback()


class ManualScheduler:
    """Records every timer the bot creates; tests fire them by hand."""

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, interval_s: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval_s, callback)
        self.timers.append(timer)
        return timer

    def live(self) -> list[ManualTimer]:
        return [t for t in self.timers if not t.cancelled()]


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def relay(scheduler: ManualScheduler) -> ChatRelay:
    return ChatRelay(bot_cfg=BotConfig(interval_s=25.0, seed=7), scheduler=scheduler)


def send(relay: ChatRelay, conn: FakeConnection, **msg: Any) -> None:
    relay.on_message(conn, json.dumps(msg))


def bot_chats(conn: FakeConnection) -> list[str]:
    return [m["body"] for m in conn.of_type("chat") if m["from"]["id"] == 0]
