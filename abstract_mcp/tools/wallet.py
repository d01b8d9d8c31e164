"""Wallet balance tool."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from abstract_mcp.chain_api import ChainApiError, ChainRpcClient, open_handle
from abstract_mcp.config import AbstractMcpConfig, default_config
from abstract_mcp.fanout import gather_all
from abstract_mcp.metrics import default_metrics
from abstract_mcp.tools.common import ToolError, describe, tool_failure
from abstract_mcp.tools.formatting import format_units, iso_timestamp
from abstract_mcp.tools.tokens import TokenDescriptor, TokenReadError, read_token
from abstract_mcp.tools.validators import is_valid_evm_address

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Failed to get wallet balances"


async def _read_token_balance(
    token_address: str,
    owner: str,
    handle: ChainRpcClient,
    config: AbstractMcpConfig,
) -> Optional[TokenDescriptor]:
    # One unreadable token must not fail the whole wallet query.
    try:
        return await read_token(token_address, handle, balance_of=owner, timeout=config.fanout_timeout)
    except TokenReadError as exc:
        logger.error("Error fetching details for token %s: %s", token_address, describe(exc.cause))
        default_metrics.incr_skipped_token()
        return None


def _token_entry(descriptor: TokenDescriptor) -> Dict[str, Any]:
    return {
        "tokenAddress": descriptor.address,
        "symbol": descriptor.symbol,
        "name": descriptor.name,
        "decimals": descriptor.decimals,
        "balance": descriptor.formatted_amount,
        "rawBalance": str(descriptor.raw_amount),
        "hasBalance": descriptor.non_zero,
    }


async def get_wallet_balance(
    address: str,
    token_addresses: Optional[List[str]] = None,
    include_zero_balances: bool = False,
    *,
    handle: Optional[ChainRpcClient] = None,
    config: AbstractMcpConfig = default_config,
) -> Dict[str, Any]:
    """
    Native balance plus the balances of the requested ERC-20 tokens.

    Tokens whose metadata cannot be read are logged and left out. Tokens with a
    zero balance are left out unless ``include_zero_balances`` is set.
    """
    if not is_valid_evm_address(address):
        raise ToolError(f"{FAILURE_PREFIX}: invalid address {address!r}")

    chain = config.chain
    try:
        async with open_handle(handle, config=config) as chain_handle:
            native_raw = await chain_handle.get_balance(address)
            descriptors = await gather_all(
                *(
                    _read_token_balance(token_address, address, chain_handle, config)
                    for token_address in token_addresses or []
                )
            )
    except ChainApiError as exc:
        raise tool_failure(FAILURE_PREFIX, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected error fetching wallet balances for %s", address)
        raise tool_failure(FAILURE_PREFIX, exc) from exc

    tokens = [
        _token_entry(descriptor)
        for descriptor in descriptors
        if descriptor is not None and (include_zero_balances or descriptor.non_zero)
    ]

    return {
        "address": address,
        "nativeToken": {
            "symbol": chain.native_token.symbol,
            "balance": format_units(native_raw, chain.native_token.decimals),
            "rawBalance": str(native_raw),
        },
        "tokens": tokens,
        "tokenCount": len(tokens),
        "network": chain.name,
        "chainId": chain.chain_id,
        "timestamp": iso_timestamp(),
    }
