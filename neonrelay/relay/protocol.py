"""Relay wire protocol helpers (JSON text frames over WebSocket)."""

from __future__ import annotations

import json
import math
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MAX_NAME_LEN = 24
MAX_BODY_LEN = 2000


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def coerce_text(value: Any) -> str:
    """Loose string coercion for client-supplied fields.

    Strings, integers, finite floats and ``true`` are rendered; falsy values
    and anything structured (lists, objects) become "".
    """
    if not value:
        return ""
    if isinstance(value, str):
        return value
    if value is True:
        return "true"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float) and math.isfinite(value):
        return str(int(value)) if value.is_integer() else repr(value)
    return ""


class Identity(BaseModel):
    id: int
    name: str


class Event(BaseModel):
    """Base for every outbound event; all of them carry a timestamp."""

    model_config = ConfigDict(populate_by_name=True)

    type: str
    ts: str = Field(default_factory=utc_now_iso)

    def to_json(self) -> str:
        return json.dumps(self.model_dump(by_alias=True), ensure_ascii=False, separators=(",", ":"))


class WelcomeEvent(Event):
    type: Literal["welcome"] = "welcome"
    you: Identity
    online: list[Identity]


class NameSetEvent(Event):
    type: Literal["name_set"] = "name_set"
    you: Identity
    online: list[Identity]


class PresenceEvent(Event):
    type: Literal["presence"] = "presence"
    action: Literal["join", "leave", "rename"]
    user: Identity
    online: list[Identity]


class ChatEvent(Event):
    type: Literal["chat"] = "chat"
    sender: Identity = Field(alias="from")
    body: str


class SetNameRequest(BaseModel):
    type: Literal["set_name"] = "set_name"
    name: str = ""


class ChatRequest(BaseModel):
    type: Literal["chat"] = "chat"
    body: str = ""


InboundMessage = SetNameRequest | ChatRequest


def parse_inbound(raw: str | bytes) -> InboundMessage | None:
    """Decode one client frame; returns None for anything unrecognised."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    msg_type = data.get("type")
    if msg_type == "set_name":
        return SetNameRequest(name=coerce_text(data.get("name")))
    if msg_type == "chat":
        return ChatRequest(body=coerce_text(data.get("body")))
    return None
