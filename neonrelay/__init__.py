"""neon-relay - real-time presence and chat relay."""

__version__ = "0.1.0"
