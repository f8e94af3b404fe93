"""
Agent auto-registration on ClawChain.

On gateway startup:
  1. Read the agent mnemonic from config (``blockchain.mnemonic``)
  2. Build the SDK agent (derives keypair and bech32 address)
  3. Check whether it is already registered on-chain
  4. If not, auto-register via a single ``MsgRegisterAgent`` attempt
  5. Return the initialized identity

A slow or unreachable chain never aborts startup of the host: only a
failure to build the agent itself does, and that is reported as ``None``.
"""

from __future__ import annotations

import logging

from clawchain_runtime.sdk import AgentFactory, resolve_agent_factory
from clawchain_runtime.types import AgentIdentity, BlockchainConfig, TxResult

logger = logging.getLogger(__name__)


async def initialize_agent_identity(
    config: BlockchainConfig,
    agent_factory: AgentFactory | str | None = None,
) -> AgentIdentity | None:
    """Derive the agent identity and make sure it is registered.

    Args:
        config: Blockchain configuration.
        agent_factory: SDK agent constructor, or a ``module:attr`` path to
            one. Falls back to ``config.sdk_factory``.

    Returns:
        :class:`AgentIdentity`, or ``None`` when no mnemonic is configured
        or the agent could not be initialized.
    """
    if not config.mnemonic:
        logger.warning("blockchain.mnemonic not configured — skipping agent identity setup")
        return None

    factory = agent_factory or config.sdk_factory
    if factory is None:
        logger.error("No ClawChain SDK factory configured — set blockchain.sdkFactory")
        return None

    try:
        agent = resolve_agent_factory(factory)(
            name=config.agent_name,
            mnemonic=config.mnemonic,
            rpc_url=config.rpc_url,
            prefix=config.prefix,
            proof_binary_path=config.proof_binary_path,
        )
        await agent.initialize()
        address = agent.get_address()
    except Exception as e:
        logger.error("Failed to initialize blockchain agent: %s", e)
        return None

    logger.info("Blockchain agent address: %s", address)

    registered = False
    auto_registered = False

    try:
        registered = bool(await agent.is_registered())
    except Exception as e:
        logger.warning(
            "Could not check agent registration status (chain may be unreachable): %s", e
        )

    if registered:
        logger.info("Agent is already registered on-chain")
    elif config.auto_register:
        try:
            logger.info("Auto-registering agent on-chain...")
            result = TxResult.from_sdk(await agent.register())
            if result.code == 0:
                registered = True
                auto_registered = True
                logger.info("Agent registered on-chain (tx: %s)", result.transaction_hash)
            else:
                logger.warning("Agent registration tx failed with code %d", result.code)
        except Exception as e:
            logger.warning("Auto-registration failed: %s (will retry later)", e)

    return AgentIdentity(
        agent=agent,
        address=address,
        registered=registered,
        auto_registered=auto_registered,
    )
