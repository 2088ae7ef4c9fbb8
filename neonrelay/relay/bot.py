"""BOT-NEON: keeps a lone user company.

The bot is active exactly while one real session is online. It never lives in
the registry; the presence layer splices its identity into rosters while it is
active.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

from loguru import logger

from neonrelay.relay.hub import BroadcastHub
from neonrelay.relay.presence import BOT_IDENTITY, PresenceProtocol
from neonrelay.relay.registry import SessionRegistry
from neonrelay.relay.timers import Scheduler, TimerHandle, asyncio_scheduler

INTRO_LINE = "Signal acquired. You're solo. Type /help for commands, or send any message and I'll respond."

IDLE_PROMPTS = (
    "Open a second tab to simulate another user joining.",
    "Try: /idea for a next feature suggestion.",
    "Try: /ping",
    "Want rooms next? (e.g., /join general)",
)

COMMANDS = {
    "/help": "Commands: /help, /ping, /about, /idea",
    "/ping": "pong",
    "/about": (
        "I'm a lightweight in-memory bot (no external API). "
        "I activate only when you're the only real user online."
    ),
    "/idea": "Next upgrades: rooms + message history (Redis) + typing indicators + basic moderation/rate limiting.",
}

KEYWORD_RULES = (
    (
        ("deploy", "render"),
        "Deploy tip: bind the server to $PORT and have the client use wss:// when the page is served over https://.",
    ),
    (("bug", "error"), "Paste the exact error text + where it occurs and I'll pinpoint the fix."),
    (
        ("hello", "hi"),
        "Hello. Your terminal UI is strong. Want me to help write a recruiter-grade README and resume bullet?",
    ),
)

QUESTION_REPLY = "Good question. Give me one more detail (context or constraint) and I'll answer precisely."

ECHO_CLIP = 140


def pick_reply(text: str) -> str | None:
    """Return the single reply for ``text``; first matching rule wins."""
    t = (text or "").strip()
    if not t:
        return None

    if t in COMMANDS:
        return COMMANDS[t]

    lower = t.lower()
    for keywords, reply in KEYWORD_RULES:
        if any(k in lower for k in keywords):
            return reply

    if t.endswith("?"):
        return QUESTION_REPLY

    clip = f"{t[:ECHO_CLIP]}…" if len(t) > ECHO_CLIP else t
    return f'Acknowledged: "{clip}" — do you want to iterate on UI, add rooms, or add persistence next?'


@dataclass
class BotConfig:
    interval_s: float = 25.0
    seed: int | None = None


class SoloBot:
    """Two-state machine (inactive/active) with one owned idle timer."""

    def __init__(
        self,
        registry: SessionRegistry,
        hub: BroadcastHub,
        presence: PresenceProtocol,
        cfg: BotConfig | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.registry = registry
        self.hub = hub
        self.presence = presence
        self.cfg = cfg or BotConfig()
        self._schedule: Scheduler = scheduler or asyncio_scheduler
        self._rng = random.Random(self.cfg.seed)
        self.active = False
        self.timer: TimerHandle | None = None

    def is_solo(self) -> bool:
        return self.registry.real_count() == 1

    def reevaluate(self) -> None:
        self.deactivate()
        self.activate_if_solo()

    def deactivate(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None
        if self.active:
            self.active = False
            logger.info("bot deactivated")
            self.hub.broadcast_all(self.presence.bot_left())

    def activate_if_solo(self) -> None:
        if not self.is_solo() or self.active:
            return

        self.active = True
        logger.info("bot activated (solo session)")
        self.hub.broadcast_all(self.presence.bot_joined())
        self.say(INTRO_LINE)
        self.timer = self._schedule(self.cfg.interval_s, self.on_idle)

    def on_idle(self) -> None:
        if not self.active:
            return
        if not self.is_solo():
            self.deactivate()
            return
        self.say(self._rng.choice(IDLE_PROMPTS))

    def reply(self, text: str) -> None:
        if not (self.active and self.is_solo()):
            return
        answer = pick_reply(text)
        if answer is not None:
            self.say(answer)

    def say(self, body: str) -> None:
        self.hub.broadcast_all(self.presence.chat(BOT_IDENTITY.model_copy(), body))

