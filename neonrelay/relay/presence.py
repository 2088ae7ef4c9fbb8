"""Presence protocol: registry state -> outbound events.

Every roster-bearing event carries a full snapshot rather than a diff, so a
client can resynchronise from any single message. Callers mutate the registry
first and compose the event afterwards; the snapshot therefore always reflects
post-mutation state.
"""

from __future__ import annotations

from typing import Callable

from neonrelay.relay.protocol import (
    MAX_BODY_LEN,
    ChatEvent,
    Identity,
    NameSetEvent,
    PresenceEvent,
    WelcomeEvent,
)
from neonrelay.relay.registry import Session, SessionRegistry

BOT_IDENTITY = Identity(id=0, name="BOT-NEON")


class PresenceProtocol:
    def __init__(self, registry: SessionRegistry, bot_active: Callable[[], bool]) -> None:
        self.registry = registry
        self._bot_active = bot_active

    def roster(self, *, with_bot: bool | None = None) -> list[Identity]:
        include_bot = self._bot_active() if with_bot is None else with_bot
        online = self.registry.list()
        if include_bot:
            return [BOT_IDENTITY.model_copy(), *online]
        return online

    def welcome(self, session: Session) -> WelcomeEvent:
        return WelcomeEvent(you=session.snapshot(), online=self.roster())

    def joined(self, session: Session) -> PresenceEvent:
        return PresenceEvent(action="join", user=session.snapshot(), online=self.roster())

    def renamed(self, session: Session) -> PresenceEvent:
        return PresenceEvent(action="rename", user=session.snapshot(), online=self.roster())

    def name_set(self, session: Session) -> NameSetEvent:
        return NameSetEvent(you=session.snapshot(), online=self.roster())

    def left(self, session: Session) -> PresenceEvent:
        return PresenceEvent(action="leave", user=session.snapshot(), online=self.roster())

    def bot_joined(self) -> PresenceEvent:
        return PresenceEvent(action="join", user=BOT_IDENTITY.model_copy(), online=self.roster(with_bot=True))

    def bot_left(self) -> PresenceEvent:
        return PresenceEvent(action="leave", user=BOT_IDENTITY.model_copy(), online=self.roster(with_bot=False))

    @staticmethod
    def chat(sender: Identity, body: str) -> ChatEvent:
        return ChatEvent(sender=sender, body=body[:MAX_BODY_LEN])
