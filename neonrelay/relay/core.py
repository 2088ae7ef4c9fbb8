"""Transport-independent chat relay.

``ChatRelay`` owns the session registry, the broadcast hub and the solo bot.
A transport binding calls ``on_connect`` / ``on_message`` / ``on_disconnect``
for each connection; none of these suspend, so on a single event loop they
never interleave and the state needs no locks.
"""

from __future__ import annotations

from typing import Any

from loguru import logger

from neonrelay.relay.bot import BotConfig, SoloBot
from neonrelay.relay.hub import BroadcastHub, Connection
from neonrelay.relay.presence import PresenceProtocol
from neonrelay.relay.protocol import ChatRequest, SetNameRequest, parse_inbound
from neonrelay.relay.registry import Session, SessionRegistry
from neonrelay.relay.timers import Scheduler


class ChatRelay:
    def __init__(self, bot_cfg: BotConfig | None = None, scheduler: Scheduler | None = None) -> None:
        self.registry = SessionRegistry()
        self.hub = BroadcastHub(self.registry)
        self.presence = PresenceProtocol(self.registry, bot_active=lambda: self.bot.active)
        self.bot = SoloBot(self.registry, self.hub, self.presence, cfg=bot_cfg, scheduler=scheduler)

    @property
    def client_count(self) -> int:
        return len(self.registry)

    def on_connect(self, conn: Connection) -> Session:
        session = self.registry.register(conn)
        logger.debug(f"connect: {session.name} (id={session.id})")

        self.hub.unicast(conn, self.presence.welcome(session))
        self.hub.broadcast_except(conn, self.presence.joined(session))

        self.bot.reevaluate()
        return session

    def on_message(self, conn: Connection, raw: str | bytes) -> None:
        session = self.registry.get(conn)
        if session is None:
            return
        msg = parse_inbound(raw)
        if msg is None:
            logger.debug(f"dropped frame from id={session.id}")
            return

        if isinstance(msg, SetNameRequest):
            self._set_name(conn, session, msg.name)
        elif isinstance(msg, ChatRequest):
            self._chat(session, msg.body)

    def on_disconnect(self, conn: Connection) -> None:
        session = self.registry.unregister(conn)
        if session is None:
            return
        logger.debug(f"disconnect: {session.name} (id={session.id})")

        self.hub.broadcast_all(self.presence.left(session))

        self.bot.reevaluate()

    def on_error(self, conn: Connection, exc: BaseException | None = None) -> None:
        # The close that follows does the cleanup.
        return None

    def shutdown(self) -> None:
        self.bot.deactivate()

    def _set_name(self, conn: Connection, session: Session, desired: Any) -> None:
        self.registry.rename(session, desired)
        self.hub.unicast(conn, self.presence.name_set(session))
        self.hub.broadcast_all(self.presence.renamed(session))

    def _chat(self, session: Session, body: str) -> None:
        text = body.strip()
        if not text:
            return
        self.hub.broadcast_all(self.presence.chat(session.snapshot(), text))
        self.bot.reply(text)
