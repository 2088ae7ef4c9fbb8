"""WebSocket binding for the chat relay, plus the GET /health endpoint."""

from __future__ import annotations

import asyncio
import contextlib
import json
import time
from dataclasses import dataclass
from http import HTTPStatus

from loguru import logger

import websockets
from websockets.asyncio.server import Server, ServerConnection, serve
from websockets.http11 import Request, Response
from websockets.protocol import State

from neonrelay.relay.bot import BotConfig
from neonrelay.relay.core import ChatRelay
from neonrelay.relay.heartbeat import heartbeat_loop
from neonrelay.relay.protocol import utc_now_iso


def is_health_path(path: str) -> bool:
    return path.split("?", 1)[0] == "/health"


@dataclass
class RelayServerConfig:
    host: str = "0.0.0.0"
    port: int = 3000
    health_host: str = "0.0.0.0"
    health_port: int | None = None  # extra plain-HTTP listener; /health is always on the main port
    idle_prompt_interval_s: float = 25.0
    external_url: str = ""  # public base URL pinged by the heartbeat
    heartbeat_interval_s: float = 600.0


class WebSocketConnection:
    """Adapts a websockets connection to the relay's ``Connection`` protocol.

    Writes go through a bounded outbound queue drained by one task per
    connection so ``send_text`` never blocks and frames keep their order. When
    a peer stops reading and the queue fills up, further frames are dropped.
    """

    def __init__(self, ws: ServerConnection, max_pending: int = 256) -> None:
        self.ws = ws
        self._outbox: asyncio.Queue[str] = asyncio.Queue(maxsize=max_pending)
        self.dropped = 0
        self._writer = asyncio.create_task(self._drain())

    def is_open(self) -> bool:
        return self.ws.state is State.OPEN and not self._writer.done()

    def send_text(self, payload: str) -> None:
        try:
            self._outbox.put_nowait(payload)
        except asyncio.QueueFull:
            self.dropped += 1
            logger.debug(f"outbound queue full; dropped frame ({self.dropped} so far)")

    async def _drain(self) -> None:
        while True:
            payload = await self._outbox.get()
            try:
                await self.ws.send(payload)
            except websockets.ConnectionClosed:
                return

    async def close(self) -> None:
        self._writer.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await self._writer


class RelayServer:
    def __init__(self, relay: ChatRelay | None = None, cfg: RelayServerConfig | None = None) -> None:
        self.cfg = cfg or RelayServerConfig()
        self.relay = relay or ChatRelay(bot_cfg=BotConfig(interval_s=self.cfg.idle_prompt_interval_s))
        self.bound_port: int = self.cfg.port
        self.health_bound_port: int | None = None
        self._server: Server | None = None
        self._health_server: asyncio.AbstractServer | None = None
        self._heartbeat_task: asyncio.Task[None] | None = None
        self._start_ts = time.time()

    async def start(self) -> None:
        self._start_ts = time.time()
        self._server = await serve(
            self._handler,
            self.cfg.host,
            self.cfg.port,
            process_request=self._process_request,
            ping_interval=20,
            ping_timeout=20,
        )
        # If port=0 was used, capture the actual bound port for tests/clients.
        try:
            if self._server.sockets:
                self.bound_port = int(list(self._server.sockets)[0].getsockname()[1])
        except Exception:
            self.bound_port = self.cfg.port
        logger.info(f"Chat relay listening on ws://{self.cfg.host}:{self.bound_port} (health at /health)")

        if self.cfg.health_port is not None:
            self._health_server = await asyncio.start_server(
                self._handle_health_request,
                host=self.cfg.health_host,
                port=int(self.cfg.health_port),
            )
            if self._health_server.sockets:
                self.health_bound_port = int(self._health_server.sockets[0].getsockname()[1])
            logger.info(f"Health check available at http://{self.cfg.health_host}:{self.health_bound_port}/health")

        if self.cfg.external_url:
            self._heartbeat_task = asyncio.create_task(
                heartbeat_loop(self.cfg.external_url, self.cfg.heartbeat_interval_s)
            )
        else:
            logger.info("External URL not set; heartbeat disabled (fine for local dev)")

    async def stop(self) -> None:
        if not self._server:
            return
        if self._heartbeat_task:
            self._heartbeat_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._heartbeat_task
            self._heartbeat_task = None
        if self._health_server:
            self._health_server.close()
            await self._health_server.wait_closed()
            self._health_server = None
        self.relay.shutdown()
        self._server.close()
        await self._server.wait_closed()
        self._server = None

    async def _handler(self, ws: ServerConnection) -> None:
        conn = WebSocketConnection(ws)
        self.relay.on_connect(conn)
        try:
            async for raw in ws:
                self.relay.on_message(conn, raw)
        except websockets.ConnectionClosedError as e:
            self.relay.on_error(conn, e)
        except Exception as e:
            logger.exception(f"relay handler error: {e}")
        finally:
            self.relay.on_disconnect(conn)
            await conn.close()

    def _process_request(self, connection: ServerConnection, request: Request) -> Response | None:
        # Plain GET /health on the public port; everything else goes on to the handshake.
        if not is_health_path(request.path):
            return None
        response = connection.respond(HTTPStatus.OK, self._health_body())
        del response.headers["Content-Type"]
        response.headers["Content-Type"] = "application/json"
        return response

    async def _handle_health_request(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            data = await reader.read(1024)
            line = data.splitlines()[0].decode("utf-8", errors="ignore") if data else ""
            path = "/"
            if line.startswith("GET "):
                parts = line.split()
                if len(parts) >= 2:
                    path = parts[1]
            if is_health_path(path):
                self._write_http(writer, 200, self._health_body())
            else:
                self._write_http(writer, 404, json.dumps({"status": "not_found"}))
            await writer.drain()
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()

    def _health_body(self) -> str:
        return json.dumps(
            {
                "status": "ok",
                "uptime": f"{int(time.time() - self._start_ts)}s",
                "clients": self.relay.client_count,
                "timestamp": utc_now_iso(),
            }
        )

    @staticmethod
    def _write_http(writer: asyncio.StreamWriter, status: int, body: str) -> None:
        reason = "OK" if status == 200 else "Not Found"
        raw = body.encode("utf-8")
        head = (
            f"HTTP/1.1 {status} {reason}\r\n"
            "Content-Type: application/json\r\n"
            f"Content-Length: {len(raw)}\r\n"
            "Connection: close\r\n\r\n"
        )
        writer.write(head.encode("ascii") + raw)
