"""
Pydantic models for the ClawChain runtime.

Field aliases accept the camelCase keys used by the gateway's
configuration file alongside Pythonic snake_case names.
"""

from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, Field


# ============================================================
#  Configuration
# ============================================================


DEFAULT_RPC_URL = "http://localhost:26657"
DEFAULT_REST_URL = "http://localhost:1317"
DEFAULT_DENOM = "uclaw"


class BlockchainConfig(BaseModel):
    """Configuration for the ClawChain extension (``blockchain`` section)."""

    enabled: bool = False
    rpc_url: str = Field(DEFAULT_RPC_URL, alias="rpcUrl")
    rest_url: str = Field(DEFAULT_REST_URL, alias="restUrl")
    mnemonic: str | None = None
    denom: str = DEFAULT_DENOM
    prefix: str = "cosmos"
    gas_price: str = Field("0.025uclaw", alias="gasPrice")
    proof_binary_path: str = Field("clawproof", alias="proofBinaryPath")
    keys_dir: str | None = Field(None, alias="keysDir")
    auto_register: bool = Field(True, alias="autoRegister")
    agent_name: str = Field("openclaw-agent", alias="agentName")
    sdk_factory: str | None = Field(None, alias="sdkFactory")

    model_config = {"populate_by_name": True}


# ============================================================
#  Heartbeat
# ============================================================


class HeartbeatResult(BaseModel):
    """Point-in-time liveness snapshot of a chain node."""

    alive: bool
    height: int | None = None
    error: str | None = None


# ============================================================
#  Chain events
# ============================================================


UNKNOWN_LEAF_INDEX = -1


class ConnectionState(str, enum.Enum):
    """Lifecycle state of a :class:`ChainEventListener` connection."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"


class CommitmentObserved(BaseModel):
    """A new shield commitment was appended to the commitment tree."""

    commitment_id: str
    leaf_index: int = UNKNOWN_LEAF_INDEX

    model_config = {"frozen": True}


class AgentRegistered(BaseModel):
    """An agent registered itself in the on-chain agent registry."""

    address: str
    name: str = "unknown"

    model_config = {"frozen": True}


class _FrameEvents(BaseModel):
    """The event attributes we consume; other keys are ignored."""

    commitments: list[str] = Field(default_factory=list, alias="shield.commitment")
    leaf_indices: list[str] = Field(default_factory=list, alias="shield.leaf_index")
    addresses: list[str] = Field(default_factory=list, alias="agent_register.address")
    names: list[str] = Field(default_factory=list, alias="agent_register.name")


class _FrameResult(BaseModel):
    events: _FrameEvents | None = None


class EventFrame(BaseModel):
    """Inbound CometBFT JSON-RPC frame (only the parts we consume)."""

    result: _FrameResult | None = None


# ============================================================
#  Identity & transactions
# ============================================================


class TxResult(BaseModel):
    """Transaction acknowledgment returned by the chain SDK."""

    code: int
    transaction_hash: str | None = Field(None, alias="transactionHash")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_sdk(cls, result: Any) -> TxResult:
        """Normalise an SDK result (dict or attribute object)."""
        if isinstance(result, TxResult):
            return result
        if isinstance(result, dict):
            return cls(**result)
        tx_hash = getattr(result, "transaction_hash", None)
        if tx_hash is None:
            tx_hash = getattr(result, "transactionHash", None)
        return cls(code=getattr(result, "code"), transaction_hash=tx_hash)


class AgentIdentity(BaseModel):
    """The agent's on-chain identity after bootstrap."""

    agent: Any
    address: str
    registered: bool = False
    auto_registered: bool = False

    model_config = {"arbitrary_types_allowed": True}
