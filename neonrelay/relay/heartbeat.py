"""Keep-alive pinger for hosts that spin idle services down.

Purely external: it hits our own public ``/health`` URL and never touches relay
state.
"""

from __future__ import annotations

import asyncio

import httpx
from loguru import logger


def health_url(external_url: str) -> str:
    return f"{external_url.rstrip('/')}/health"


async def ping_once(client: httpx.AsyncClient, url: str) -> bool:
    try:
        r = await client.get(url)
    except httpx.HTTPError as e:
        logger.error(f"Heartbeat failed: {e}")
        return False
    if r.status_code == 200:
        logger.info("Heartbeat OK")
        return True
    logger.warning(f"Heartbeat received {r.status_code}")
    return False


async def heartbeat_loop(external_url: str, interval_s: float = 600.0) -> None:
    url = health_url(external_url)
    logger.info(f"Heartbeat enabled: pinging {url} every {interval_s:.0f}s")
    async with httpx.AsyncClient(timeout=10.0) as client:
        while True:
            await asyncio.sleep(interval_s)
            await ping_once(client, url)
