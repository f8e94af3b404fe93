"""Unit tests for config parsing and SDK result normalisation."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from clawchain_runtime.sdk import resolve_agent_factory
from clawchain_runtime.types import BlockchainConfig, TxResult


def test_config_defaults() -> None:
    config = BlockchainConfig()

    assert config.enabled is False
    assert config.rpc_url == "http://localhost:26657"
    assert config.denom == "uclaw"
    assert config.prefix == "cosmos"
    assert config.proof_binary_path == "clawproof"
    assert config.auto_register is True
    assert config.mnemonic is None


def test_config_parses_camel_case() -> None:
    """The gateway's camelCase config keys map to snake_case fields."""
    config = BlockchainConfig(
        **{
            "enabled": True,
            "rpcUrl": "https://rpc.clawchain.io",
            "restUrl": "https://rest.clawchain.io",
            "proofBinaryPath": "/usr/local/bin/clawproof",
            "autoRegister": False,
            "gasPrice": "0.1uclaw",
        }
    )

    assert config.rpc_url == "https://rpc.clawchain.io"
    assert config.rest_url == "https://rest.clawchain.io"
    assert config.proof_binary_path == "/usr/local/bin/clawproof"
    assert config.auto_register is False
    assert config.gas_price == "0.1uclaw"


def test_tx_result_from_sdk_shapes() -> None:
    assert TxResult.from_sdk({"code": 0, "transactionHash": "H1"}).transaction_hash == "H1"
    assert TxResult.from_sdk(SimpleNamespace(code=3, transaction_hash="H2")).code == 3
    assert TxResult.from_sdk(SimpleNamespace(code=0, transactionHash="H3")).transaction_hash == "H3"


def test_resolve_agent_factory() -> None:
    factory = resolve_agent_factory("types:SimpleNamespace")
    assert factory is SimpleNamespace
    assert resolve_agent_factory(dict) is dict

    with pytest.raises(ValueError, match="module:attr"):
        resolve_agent_factory("types.SimpleNamespace")
