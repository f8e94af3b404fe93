"""
ClawChain node query client.

Direct HTTP client for the read-only queries the tools need, using
``httpx`` against the node's CometBFT RPC server and Cosmos REST API.
Used when the SDK agent does not expose a client of its own.

Usage::

    from clawchain_runtime import NodeClient

    client = NodeClient("http://localhost:26657", "http://localhost:1317")
    status = await client.get_status()
    balance = await client.get_balance("cosmos1...", "uclaw")
    await client.close()
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote as url_quote

import httpx

from clawchain_runtime.types import DEFAULT_REST_URL, DEFAULT_RPC_URL


class _HttpClient:
    """Thin wrapper around httpx for node requests."""

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a request and return the decoded JSON body."""
        response = await self._client.request(method=method, url=path, params=params)

        # Don't use raise_for_status() directly: keep the message short and
        # take it from the node's error body when there is one.
        if response.status_code >= 400:
            try:
                err_data = response.json()
                err_msg = err_data.get("message", err_data.get("error", "Request failed"))
            except Exception:
                err_msg = "Request failed"
            raise httpx.HTTPStatusError(
                f"Node request failed ({response.status_code}): {err_msg}",
                request=response.request,
                response=response,
            )

        return response.json()

    async def close(self) -> None:
        await self._client.aclose()


class NodeClient:
    """Read-only queries against a ClawChain node."""

    def __init__(
        self,
        rpc_url: str = DEFAULT_RPC_URL,
        rest_url: str = DEFAULT_REST_URL,
        timeout: float = 30.0,
    ) -> None:
        self._rpc = _HttpClient(rpc_url, timeout=timeout)
        self._rest = _HttpClient(rest_url, timeout=timeout)

    async def get_status(self) -> dict[str, Any]:
        """Node info, sync info and validator info from ``/status``."""
        data = await self._rpc.request("GET", "/status")
        return data.get("result", {})

    async def get_balance(self, address: str, denom: str) -> str:
        """Transparent balance of ``address`` in ``denom`` (integer string)."""
        data = await self._rest.request(
            "GET",
            f"/cosmos/bank/v1beta1/balances/{url_quote(address, safe='')}/by_denom",
            params={"denom": denom},
        )
        balance = data.get("balance") or {}
        return balance.get("amount", "0")

    async def get_merkle_root(self) -> str:
        """Current root of the shielded commitment tree."""
        data = await self._rest.request("GET", "/clawchain/shielded/v1/merkle_root")
        return data.get("root", "")

    async def get_agent(self, address: str) -> dict[str, Any]:
        """Registry entry for ``address``."""
        data = await self._rest.request(
            "GET", f"/clawchain/agent/v1/agents/{url_quote(address, safe='')}"
        )
        return data.get("agent", data)

    async def close(self) -> None:
        await self._rpc.close()
        await self._rest.close()
