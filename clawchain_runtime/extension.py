"""
ClawChain extension for the agent gateway.

Registers the blockchain tools, bootstraps the agent's on-chain identity
and starts the chain event listener when the gateway boots.

Usage::

    from clawchain_runtime import ClawChainExtension, BlockchainConfig

    extension = ClawChainExtension(
        BlockchainConfig(**settings["blockchain"]),
        agent_factory="clawchain_sdk:ClawChainAgent",
    )
    extension.register(api)

    info = await extension.initialize()
    print(f"Agent address: {info.get('address')}")
    ...
    await extension.shutdown()
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from clawchain_runtime.client import NodeClient
from clawchain_runtime.events import ChainEventHandlers, ChainEventListener
from clawchain_runtime.identity import initialize_agent_identity
from clawchain_runtime.sdk import AgentFactory, ChainAgent, ChainClient
from clawchain_runtime.tools import ChainTool, ToolDeps, create_all_tools
from clawchain_runtime.types import (
    AgentRegistered,
    BlockchainConfig,
    CommitmentObserved,
)

logger = logging.getLogger(__name__)


class PluginApi(Protocol):
    """The part of the gateway plugin API this extension uses."""

    def register_tool(self, tool: ChainTool, *, optional: bool = False) -> None: ...


def _log_commitment(event: CommitmentObserved) -> None:
    logger.info(
        "New commitment detected: %s... (leaf %d)",
        event.commitment_id[:16],
        event.leaf_index,
    )


def _log_agent_registered(event: AgentRegistered) -> None:
    logger.info("New agent registered: %s (%s)", event.name, event.address)


def _log_listener_error(message: str) -> None:
    logger.warning("Chain event listener error: %s", message)


class ClawChainExtension:
    """
    Owns the chain agent, the query client and the event listener for
    the lifetime of the gateway process.

    The handles are written once by :meth:`initialize` and only read
    afterwards, by the tools and the accessors.
    """

    def __init__(
        self,
        config: BlockchainConfig,
        agent_factory: AgentFactory | str | None = None,
        handlers: ChainEventHandlers | None = None,
    ) -> None:
        self._config = config
        self._agent_factory = agent_factory
        self._handlers = handlers or ChainEventHandlers(
            on_commitment=_log_commitment,
            on_agent_registered=_log_agent_registered,
            on_error=_log_listener_error,
        )

        self._agent: ChainAgent | None = None
        self._client: ChainClient | None = None
        self._owned_client: NodeClient | None = None
        self._listener: ChainEventListener | None = None
        self._startup_info: dict[str, Any] = {}
        self._init_lock = asyncio.Lock()

    @property
    def config(self) -> BlockchainConfig:
        return self._config

    @property
    def agent(self) -> ChainAgent | None:
        """SDK agent (set after a successful :meth:`initialize`)."""
        return self._agent

    @property
    def client(self) -> ChainClient | None:
        """Query client (set after a successful :meth:`initialize`)."""
        return self._client

    @property
    def listener(self) -> ChainEventListener | None:
        return self._listener

    def tools(self) -> list[ChainTool]:
        """Create the tool set bound to this extension's handles."""
        deps = ToolDeps(
            get_client=lambda: self._client,
            get_agent=lambda: self._agent,
            denom=self._config.denom,
        )
        return create_all_tools(deps)

    def register(self, api: PluginApi) -> None:
        """Register all blockchain tools with the gateway."""
        for tool in self.tools():
            api.register_tool(tool, optional=True)

    async def initialize(self) -> dict[str, Any]:
        """
        Bootstrap the agent identity and start the chain event listener.

        Returns:
            ``{"address": ..., "registered": ...}`` on success, or ``{}``
            when the extension is disabled or the identity could not be
            initialized. Never raises for chain connectivity problems.
        """
        if not self._config.enabled:
            return {}
        async with self._init_lock:
            return await self._initialize_once()

    async def _initialize_once(self) -> dict[str, Any]:
        if self._agent is not None:
            logger.debug("ClawChain extension already initialized")
            return dict(self._startup_info)

        identity = await initialize_agent_identity(self._config, self._agent_factory)
        if identity is None:
            return {}

        self._agent = identity.agent
        sdk_client = getattr(identity.agent, "client", None)
        if sdk_client is not None:
            self._client = sdk_client
        else:
            self._owned_client = NodeClient(self._config.rpc_url, self._config.rest_url)
            self._client = self._owned_client

        self._listener = ChainEventListener(self._config.rpc_url, self._handlers)
        self._listener.start()
        logger.info("Chain event listener started")

        self._startup_info = {"address": identity.address, "registered": identity.registered}
        return dict(self._startup_info)

    async def shutdown(self) -> None:
        """Stop the event listener and release the agent. Idempotent."""
        if self._listener is not None:
            listener, self._listener = self._listener, None
            await listener.stop()

        if self._agent is not None:
            agent, self._agent = self._agent, None
            self._client = None
            self._startup_info = {}
            try:
                await agent.shutdown()
            except Exception as e:
                logger.warning("Blockchain agent shutdown failed: %s", e)

        if self._owned_client is not None:
            owned, self._owned_client = self._owned_client, None
            await owned.close()

    # ---- Accessors ----

    def current_address(self) -> str | None:
        """Agent's bech32 address, or ``None`` if not initialized."""
        return self._agent.get_address() if self._agent is not None else None

    def current_shielded_balance_display(self) -> str:
        """Shielded balance as a display string (``"0"`` if not initialized)."""
        if self._agent is None:
            return "0"
        return str(self._agent.get_shielded_balance())
