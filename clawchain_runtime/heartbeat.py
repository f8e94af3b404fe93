"""
Chain heartbeat probe.

Meant to be called from a periodic job; it never raises and keeps no
state, so concurrent probes are fine.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from clawchain_runtime.types import HeartbeatResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def _latest_block_height(data: Any) -> int | None:
    try:
        raw = data["result"]["sync_info"]["latest_block_height"]
    except (KeyError, TypeError):
        return None
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


async def check_chain_heartbeat(
    node_url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> HeartbeatResult:
    """Probe ``{node_url}/status`` once and report liveness.

    Args:
        node_url: Base URL of the node's RPC (or REST) server.
        timeout: Request timeout in seconds.
        client: Optional caller-owned client; otherwise a short-lived one
            is created for this probe.

    Returns:
        :class:`HeartbeatResult` — failures are reported in ``error``.
    """
    url = f"{node_url.rstrip('/')}/status"
    try:
        if client is not None:
            response = await client.get(url, timeout=timeout)
        else:
            async with httpx.AsyncClient(timeout=timeout) as owned:
                response = await owned.get(url)

        if not response.is_success:
            return HeartbeatResult(alive=False, error=f"HTTP {response.status_code}")

        height = _latest_block_height(response.json())
        return HeartbeatResult(alive=True, height=height)
    except Exception as e:
        logger.debug("Heartbeat to %s failed: %s", url, e)
        return HeartbeatResult(alive=False, error=str(e) or type(e).__name__)
