"""
Interfaces of the ClawChain SDK objects this package drives.

Key derivation, commitments, proofs and transaction signing all live
inside the SDK agent. The runtime only sequences calls into it, so the
agent is obtained from a factory supplied by the host: either a
callable or a ``"package.module:Attribute"`` import path.
"""

from __future__ import annotations

import importlib
from typing import Any, Callable, Protocol, runtime_checkable


@runtime_checkable
class ChainClient(Protocol):
    """Read-only queries against a ClawChain node."""

    async def get_status(self) -> Any: ...

    async def get_balance(self, address: str, denom: str) -> Any: ...

    async def get_merkle_root(self) -> Any: ...

    async def get_agent(self, address: str) -> Any: ...


@runtime_checkable
class ChainAgent(Protocol):
    """A signing agent identity backed by the SDK."""

    async def initialize(self) -> None: ...

    def get_address(self) -> str: ...

    async def is_registered(self) -> bool: ...

    async def register(self) -> Any: ...

    async def shield_tokens(self, amount: int, denom: str) -> Any: ...

    async def unshield_tokens(self, amount: int, recipient: str | None = None) -> Any: ...

    def get_shielded_balance(self) -> int: ...

    def get_commitments(self) -> list[Any]: ...

    async def shutdown(self) -> None: ...


AgentFactory = Callable[..., ChainAgent]


def resolve_agent_factory(factory: AgentFactory | str) -> AgentFactory:
    """Return ``factory`` itself, or import it from a ``module:attr`` path.

    Raises:
        ValueError: If the path is not of the form ``module:attr``.
        ImportError / AttributeError: If the target cannot be imported.
    """
    if callable(factory):
        return factory

    module_name, sep, attr_path = factory.partition(":")
    if not sep or not module_name or not attr_path:
        raise ValueError(
            f"Invalid SDK factory path {factory!r} — expected 'module:attr'"
        )
    target: Any = importlib.import_module(module_name)
    for attr in attr_path.split("."):
        target = getattr(target, attr)
    if not callable(target):
        raise ValueError(f"SDK factory {factory!r} is not callable")
    return target


def is_spent(commitment: Any) -> bool:
    """Whether an SDK commitment record has been spent."""
    if isinstance(commitment, dict):
        return bool(commitment.get("spent", False))
    return bool(getattr(commitment, "spent", False))
