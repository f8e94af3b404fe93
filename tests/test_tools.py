"""
Unit tests for the ClawChain agent tools.

Every tool must return a ``{"type": "json", "data": ...}`` payload,
including on failure.
"""

from __future__ import annotations

from typing import Any

import pytest

from clawchain_runtime.tools import (
    ToolDeps,
    ToolParameterError,
    create_all_tools,
    read_number_param,
    read_string_param,
)

from fakes import ADDRESS, FakeAgent, FakeClient


def tools_by_name(agent: Any = None, client: Any = None) -> dict[str, Any]:
    deps = ToolDeps(get_client=lambda: client, get_agent=lambda: agent)
    return {tool.name: tool for tool in create_all_tools(deps)}


def data(payload: dict[str, Any]) -> Any:
    assert payload["type"] == "json"
    return payload["data"]


# ============================================================
#  Parameter helpers
# ============================================================


def test_read_string_param() -> None:
    assert read_string_param({"address": "  cosmos1x  "}, "address") == "cosmos1x"
    assert read_string_param({"address": "   "}, "address", required=False) == ""
    assert read_string_param(None, "address", required=False) == ""
    with pytest.raises(ToolParameterError, match="Missing required parameter: address"):
        read_string_param({}, "address")


def test_read_number_param() -> None:
    assert read_number_param({"amount": 5}, "amount") == 5
    assert read_number_param({"amount": " 2.5 "}, "amount") == 2.5
    assert read_number_param({"amount": "lots"}, "amount") is None
    assert read_number_param({"amount": True}, "amount") is None
    assert read_number_param({}, "amount") is None


# ============================================================
#  Registry
# ============================================================


def test_all_tools_and_approval_flags() -> None:
    tools = tools_by_name()

    assert list(tools) == [
        "clawchain_status",
        "clawchain_balance",
        "clawchain_shielded_balance",
        "clawchain_shield",
        "clawchain_unshield",
        "clawchain_private_transfer",
        "clawchain_register",
        "clawchain_merkle_root",
        "clawchain_agent_info",
    ]
    needs_approval = {name for name, tool in tools.items() if tool.requires_approval}
    assert needs_approval == {
        "clawchain_shield",
        "clawchain_unshield",
        "clawchain_private_transfer",
        "clawchain_register",
    }
    definition = tools["clawchain_shield"].to_definition()
    assert definition["inputSchema"]["required"] == ["amount"]


@pytest.mark.asyncio
async def test_uninitialized_handles_return_errors() -> None:
    """With no agent or client every tool returns an error payload."""
    for tool in tools_by_name().values():
        result = data(await tool.execute({"amount": 1, "recipientAddress": "cosmos1x"}))
        assert "not initialized" in result["error"]


# ============================================================
#  Query tools
# ============================================================


@pytest.mark.asyncio
async def test_status() -> None:
    client = FakeClient()
    result = data(await tools_by_name(client=client)["clawchain_status"].execute({}))

    assert result == {"sync_info": {"latest_block_height": "42"}}


@pytest.mark.asyncio
async def test_balance_defaults_to_own_address() -> None:
    client = FakeClient()
    tools = tools_by_name(FakeAgent(), client)

    result = data(await tools["clawchain_balance"].execute({}))

    assert result == {"address": ADDRESS, "denom": "uclaw", "balance": "1000000"}
    assert client.calls == [("get_balance", (ADDRESS, "uclaw"))]


@pytest.mark.asyncio
async def test_balance_client_failure() -> None:
    class BrokenClient(FakeClient):
        async def get_balance(self, address: str, denom: str) -> str:
            raise ConnectionError("rest unreachable")

    tools = tools_by_name(FakeAgent(), BrokenClient())
    result = data(await tools["clawchain_balance"].execute({"address": "cosmos1other"}))

    assert result["error"] == "Failed to get balance: rest unreachable"


@pytest.mark.asyncio
async def test_shielded_balance_counts_unspent() -> None:
    agent = FakeAgent()
    agent.shielded_balance = 750
    agent.commitments = [{"spent": False}, {"spent": True}, {"spent": False}]

    result = data(await tools_by_name(agent)["clawchain_shielded_balance"].execute({}))

    assert result == {"shieldedBalance": "750", "unit": "uclaw", "commitmentCount": 2}


@pytest.mark.asyncio
async def test_merkle_root() -> None:
    result = data(await tools_by_name(client=FakeClient())["clawchain_merkle_root"].execute({}))
    assert result == {"merkleRoot": "0xroot"}


@pytest.mark.asyncio
async def test_agent_info_uses_own_address() -> None:
    client = FakeClient()
    tool = tools_by_name(FakeAgent(), client)["clawchain_agent_info"]

    result = data(await tool.execute({}))

    assert result["address"] == ADDRESS
    assert client.calls == [("get_agent", (ADDRESS,))]


@pytest.mark.asyncio
async def test_agent_info_without_address_or_agent() -> None:
    tool = tools_by_name(client=FakeClient())["clawchain_agent_info"]
    result = data(await tool.execute({}))
    assert result["error"] == "No address provided and agent not initialized."


# ============================================================
#  Transaction tools
# ============================================================


@pytest.mark.asyncio
async def test_shield() -> None:
    agent = FakeAgent()
    result = data(await tools_by_name(agent)["clawchain_shield"].execute({"amount": "250"}))

    assert result == {
        "success": True,
        "txHash": "SHIELDTX",
        "amount": 250,
        "denom": "uclaw",
        "shieldedBalance": "250",
    }
    assert agent.shield_calls == [(250, "uclaw")]


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -5, "abc", None, 1.5])
async def test_shield_rejects_bad_amount(amount: Any) -> None:
    agent = FakeAgent()
    result = data(await tools_by_name(agent)["clawchain_shield"].execute({"amount": amount}))

    assert "Amount must be" in result["error"]
    assert agent.shield_calls == []


@pytest.mark.asyncio
async def test_unshield_defaults_recipient() -> None:
    agent = FakeAgent()
    result = data(await tools_by_name(agent)["clawchain_unshield"].execute({"amount": 100}))

    assert result["success"] is True
    assert result["recipient"] == ADDRESS
    assert agent.unshield_calls == [(100, None)]


@pytest.mark.asyncio
async def test_private_transfer_requires_recipient() -> None:
    tool = tools_by_name(FakeAgent())["clawchain_private_transfer"]

    missing = data(await tool.execute({"amount": 10}))
    assert "Missing required parameter: recipientAddress" in missing["error"]

    explained = data(await tool.execute({"amount": 10, "recipientAddress": "cosmos1peer"}))
    assert "requires the recipient's agent instance" in explained["error"]


@pytest.mark.asyncio
async def test_register_when_already_registered() -> None:
    agent = FakeAgent(registered=True)
    result = data(await tools_by_name(agent)["clawchain_register"].execute({}))

    assert result["alreadyRegistered"] is True
    assert agent.register_calls == 0


@pytest.mark.asyncio
async def test_register_submits_transaction() -> None:
    agent = FakeAgent(register_result={"code": 0, "transactionHash": "REGTX"})
    result = data(await tools_by_name(agent)["clawchain_register"].execute({}))

    assert result == {"success": True, "txHash": "REGTX", "address": ADDRESS}


@pytest.mark.asyncio
async def test_register_error_is_payload() -> None:
    agent = FakeAgent(registered=ConnectionError("offline"))
    result = data(await tools_by_name(agent)["clawchain_register"].execute({}))

    assert result["error"] == "Registration failed: offline"
