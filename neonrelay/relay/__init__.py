"""Chat relay: session registry, broadcast hub, presence protocol and solo bot.

The core (``ChatRelay``) is transport independent; ``RelayServer`` binds it to
WebSocket connections.
"""

from .core import ChatRelay
from .presence import BOT_IDENTITY
from .server import RelayServer, RelayServerConfig

__all__ = ["BOT_IDENTITY", "ChatRelay", "RelayServer", "RelayServerConfig"]
