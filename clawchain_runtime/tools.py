"""
ClawChain blockchain tools for gateway agents.

Each tool returns a ``{"type": "json", "data": ...}`` payload and never
raises across the tool boundary. Query tools are safe to auto-approve;
transaction tools set ``requires_approval`` and the host must obtain
approval before calling ``execute``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from clawchain_runtime.sdk import ChainAgent, ChainClient, is_spent
from clawchain_runtime.types import DEFAULT_DENOM, TxResult


# ============================================================
#  Shared helpers
# ============================================================


class ToolParameterError(ValueError):
    """A required tool parameter is missing or empty."""


def json_result(data: Any) -> dict[str, Any]:
    return {"type": "json", "data": data}


def error_result(message: str) -> dict[str, Any]:
    return {"type": "json", "data": {"error": message}}


def read_string_param(params: Any, name: str, required: bool = True) -> str:
    """Trimmed string parameter, or ``""`` when optional and absent."""
    value = params.get(name) if isinstance(params, dict) else None
    if isinstance(value, str) and value.strip():
        return value.strip()
    if required:
        raise ToolParameterError(f"Missing required parameter: {name}")
    return ""


def read_number_param(params: Any, name: str) -> float | None:
    """Numeric parameter; numeric strings are accepted."""
    value = params.get(name) if isinstance(params, dict) else None
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _positive_amount(params: Any) -> int | None:
    amount = read_number_param(params, "amount")
    if amount is None or amount <= 0:
        return None
    return int(amount) if float(amount).is_integer() else None


# ============================================================
#  Tool definitions
# ============================================================


ToolExecute = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]


@dataclass
class ToolDeps:
    """Handles the tools read at call time."""

    get_client: Callable[[], ChainClient | None]
    get_agent: Callable[[], ChainAgent | None]
    denom: str = DEFAULT_DENOM


@dataclass
class ChainTool:
    """A callable tool exposed to the agent."""

    name: str
    description: str
    execute: ToolExecute
    input_schema: dict[str, Any] = field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )
    requires_approval: bool = False

    def to_definition(self) -> dict[str, Any]:
        """Tool definition in the host's registration format."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
            "requiresApproval": self.requires_approval,
        }


_NOT_INITIALIZED = "Blockchain agent not initialized."
_CLIENT_NOT_INITIALIZED = "Blockchain client not initialized."


def create_status_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        client = deps.get_client()
        if client is None:
            return error_result(
                "Blockchain client not initialized. Is blockchain.enabled set to true?"
            )
        try:
            return json_result(await client.get_status())
        except Exception as e:
            return error_result(f"Failed to get chain status: {e}")

    return ChainTool(
        name="clawchain_status",
        description=(
            "Get the current ClawChain blockchain status including block height, "
            "sync status, and network info."
        ),
        execute=execute,
    )


def create_balance_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        agent = deps.get_agent()
        client = deps.get_client()
        if agent is None:
            return error_result(_NOT_INITIALIZED)
        if client is None:
            return error_result(_CLIENT_NOT_INITIALIZED)
        try:
            address = read_string_param(params, "address", False) or agent.get_address()
            denom = read_string_param(params, "denom", False) or deps.denom
            balance = await client.get_balance(address, denom)
            return json_result({"address": address, "denom": denom, "balance": balance})
        except Exception as e:
            return error_result(f"Failed to get balance: {e}")

    return ChainTool(
        name="clawchain_balance",
        description=(
            "Check the transparent (on-chain) balance of a ClawChain address. "
            f"Returns balance in {deps.denom}."
        ),
        execute=execute,
        input_schema={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": "Bech32 address to check. Defaults to the agent's own address.",
                },
                "denom": {
                    "type": "string",
                    "description": f'Token denomination. Defaults to "{deps.denom}".',
                },
            },
        },
    )


def create_shielded_balance_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        agent = deps.get_agent()
        if agent is None:
            return error_result(_NOT_INITIALIZED)
        try:
            unspent = [c for c in agent.get_commitments() if not is_spent(c)]
            return json_result(
                {
                    "shieldedBalance": str(agent.get_shielded_balance()),
                    "unit": deps.denom,
                    "commitmentCount": len(unspent),
                }
            )
        except Exception as e:
            return error_result(f"Failed to get shielded balance: {e}")

    return ChainTool(
        name="clawchain_shielded_balance",
        description=(
            "Check the agent's shielded (private) balance calculated from locally "
            "tracked commitments."
        ),
        execute=execute,
    )


def create_shield_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        agent = deps.get_agent()
        if agent is None:
            return error_result(_NOT_INITIALIZED)
        try:
            amount = _positive_amount(params)
            if amount is None:
                return error_result("Amount must be a positive integer.")
            denom = read_string_param(params, "denom", False) or deps.denom
            result = TxResult.from_sdk(await agent.shield_tokens(amount, denom))
            return json_result(
                {
                    "success": result.code == 0,
                    "txHash": result.transaction_hash,
                    "amount": amount,
                    "denom": denom,
                    "shieldedBalance": str(agent.get_shielded_balance()),
                }
            )
        except Exception as e:
            return error_result(f"Shield failed: {e}")

    return ChainTool(
        name="clawchain_shield",
        description=(
            "Shield (deposit) tokens from transparent balance into the private shielded "
            f"pool. This creates a ZK commitment. Amount is in {deps.denom} "
            "(1 CLAW = 1,000,000 uclaw)."
        ),
        execute=execute,
        input_schema={
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": f"Amount to shield in {deps.denom}."},
                "denom": {
                    "type": "string",
                    "description": f'Token denomination. Defaults to "{deps.denom}".',
                },
            },
            "required": ["amount"],
        },
        requires_approval=True,
    )


def create_unshield_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        agent = deps.get_agent()
        if agent is None:
            return error_result(_NOT_INITIALIZED)
        try:
            amount = _positive_amount(params)
            if amount is None:
                return error_result("Amount must be a positive integer.")
            recipient = read_string_param(params, "recipient", False) or None
            result = TxResult.from_sdk(await agent.unshield_tokens(amount, recipient))
            return json_result(
                {
                    "success": result.code == 0,
                    "txHash": result.transaction_hash,
                    "amount": amount,
                    "recipient": recipient or agent.get_address(),
                }
            )
        except Exception as e:
            return error_result(f"Unshield failed: {e}")

    return ChainTool(
        name="clawchain_unshield",
        description=(
            "Unshield (withdraw) tokens from the private shielded pool back to a "
            "transparent address. Requires a valid unspent commitment with sufficient "
            "balance."
        ),
        execute=execute,
        input_schema={
            "type": "object",
            "properties": {
                "amount": {"type": "number", "description": f"Amount to unshield in {deps.denom}."},
                "recipient": {
                    "type": "string",
                    "description": "Bech32 address to receive tokens. Defaults to agent's own address.",
                },
            },
            "required": ["amount"],
        },
        requires_approval=True,
    )


def create_private_transfer_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        agent = deps.get_agent()
        if agent is None:
            return error_result(_NOT_INITIALIZED)
        try:
            recipient = read_string_param(params, "recipientAddress")
            amount = _positive_amount(params)
            if amount is None:
                return error_result("Amount must be a positive integer.")
            return error_result(
                f"Private transfer of {amount} {deps.denom} to {recipient} requires "
                "the recipient's agent instance for commitment exchange. "
                "Use the agent registry to coordinate multi-agent private transfers."
            )
        except Exception as e:
            return error_result(f"Private transfer failed: {e}")

    return ChainTool(
        name="clawchain_private_transfer",
        description=(
            "Perform a private transfer of shielded tokens using a zero-knowledge proof. "
            "The transfer is fully private - neither amount nor participants are "
            "revealed on-chain."
        ),
        execute=execute,
        input_schema={
            "type": "object",
            "properties": {
                "recipientAddress": {
                    "type": "string",
                    "description": "Bech32 address of the recipient.",
                },
                "amount": {"type": "number", "description": f"Amount to transfer in {deps.denom}."},
            },
            "required": ["recipientAddress", "amount"],
        },
        requires_approval=True,
    )


def create_register_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        agent = deps.get_agent()
        if agent is None:
            return error_result(_NOT_INITIALIZED)
        try:
            if await agent.is_registered():
                return json_result(
                    {
                        "success": True,
                        "alreadyRegistered": True,
                        "address": agent.get_address(),
                        "message": "Agent is already registered on-chain.",
                    }
                )
            result = TxResult.from_sdk(await agent.register())
            return json_result(
                {
                    "success": result.code == 0,
                    "txHash": result.transaction_hash,
                    "address": agent.get_address(),
                }
            )
        except Exception as e:
            return error_result(f"Registration failed: {e}")

    return ChainTool(
        name="clawchain_register",
        description="Register this AI agent on the ClawChain blockchain agent registry.",
        execute=execute,
        requires_approval=True,
    )


def create_merkle_root_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        client = deps.get_client()
        if client is None:
            return error_result(_CLIENT_NOT_INITIALIZED)
        try:
            return json_result({"merkleRoot": await client.get_merkle_root()})
        except Exception as e:
            return error_result(f"Failed to get Merkle root: {e}")

    return ChainTool(
        name="clawchain_merkle_root",
        description="Get the current Merkle tree root of the shielded commitment pool.",
        execute=execute,
    )


def create_agent_info_tool(deps: ToolDeps) -> ChainTool:
    async def execute(params: dict[str, Any]) -> dict[str, Any]:
        client = deps.get_client()
        agent = deps.get_agent()
        if client is None:
            return error_result(_CLIENT_NOT_INITIALIZED)
        try:
            address = read_string_param(params, "address", False)
            if not address and agent is not None:
                address = agent.get_address()
            if not address:
                return error_result("No address provided and agent not initialized.")
            return json_result(await client.get_agent(address))
        except Exception as e:
            return error_result(f"Failed to get agent info: {e}")

    return ChainTool(
        name="clawchain_agent_info",
        description="Query agent registration info from the on-chain agent registry.",
        execute=execute,
        input_schema={
            "type": "object",
            "properties": {
                "address": {
                    "type": "string",
                    "description": (
                        "Bech32 address of the agent to query. Defaults to this agent's address."
                    ),
                },
            },
        },
    )


def create_all_tools(deps: ToolDeps) -> list[ChainTool]:
    """All ClawChain tools in registration order."""
    return [
        create_status_tool(deps),
        create_balance_tool(deps),
        create_shielded_balance_tool(deps),
        create_shield_tool(deps),
        create_unshield_tool(deps),
        create_private_transfer_tool(deps),
        create_register_tool(deps),
        create_merkle_root_tool(deps),
        create_agent_info_tool(deps),
    ]
