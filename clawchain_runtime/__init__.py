"""
ClawChain runtime for agent gateways.

Keeps an agent connected to a ClawChain node: derives and registers its
on-chain identity, listens for shield commitments and agent
registrations over the node's WebSocket, and exposes chain queries and
transactions as agent tools.

Example::

    from clawchain_runtime import BlockchainConfig, ClawChainExtension

    extension = ClawChainExtension(
        BlockchainConfig(enabled=True, mnemonic="..."),
        agent_factory="clawchain_sdk:ClawChainAgent",
    )
    extension.register(api)

    info = await extension.initialize()
    print(f"Connected as {info.get('address')}")

    # Periodic liveness check
    result = await check_chain_heartbeat("http://localhost:26657")

    # Clean up
    await extension.shutdown()
"""

from clawchain_runtime.client import NodeClient
from clawchain_runtime.events import (
    ChainEventHandlers,
    ChainEventListener,
    parse_event_frame,
    RECONNECT_DELAY_SECONDS,
)
from clawchain_runtime.extension import ClawChainExtension
from clawchain_runtime.heartbeat import check_chain_heartbeat
from clawchain_runtime.identity import initialize_agent_identity
from clawchain_runtime.sdk import ChainAgent, ChainClient, resolve_agent_factory
from clawchain_runtime.tools import ChainTool, ToolDeps, ToolParameterError, create_all_tools
from clawchain_runtime.types import (
    AgentIdentity,
    AgentRegistered,
    BlockchainConfig,
    CommitmentObserved,
    ConnectionState,
    HeartbeatResult,
    TxResult,
    UNKNOWN_LEAF_INDEX,
)

__all__ = [
    "ClawChainExtension",
    "ChainEventListener",
    "ChainEventHandlers",
    "NodeClient",
    "ChainAgent",
    "ChainClient",
    "ChainTool",
    "ToolDeps",
    "ToolParameterError",
    "AgentIdentity",
    "AgentRegistered",
    "BlockchainConfig",
    "CommitmentObserved",
    "ConnectionState",
    "HeartbeatResult",
    "TxResult",
    "UNKNOWN_LEAF_INDEX",
    "RECONNECT_DELAY_SECONDS",
    "check_chain_heartbeat",
    "initialize_agent_identity",
    "parse_event_frame",
    "resolve_agent_factory",
    "create_all_tools",
]

__version__ = "0.1.0"
