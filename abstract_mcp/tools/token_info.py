"""ERC-20 supply and metadata tools."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from abstract_mcp.chain_api import ChainApiError, ChainRpcClient, open_handle
from abstract_mcp.config import ERC20_TOKEN_TYPE, AbstractMcpConfig, default_config
from abstract_mcp.tools.common import tool_failure
from abstract_mcp.tools.formatting import format_locale, iso_timestamp
from abstract_mcp.tools.tokens import TokenDescriptor, read_token

logger = logging.getLogger(__name__)


async def _read_supply(
    token_address: str, handle: Optional[ChainRpcClient], config: AbstractMcpConfig, prefix: str
) -> TokenDescriptor:
    try:
        async with open_handle(handle, config=config) as chain_handle:
            return await read_token(
                token_address, chain_handle, total_supply=True, timeout=config.fanout_timeout
            )
    except ChainApiError as exc:
        raise tool_failure(prefix, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected error reading supply for token %s", token_address)
        raise tool_failure(prefix, exc) from exc


def _supply_fields(descriptor: TokenDescriptor) -> Dict[str, Any]:
    return {
        "tokenAddress": descriptor.address,
        "tokenName": descriptor.name,
        "symbol": descriptor.symbol,
        "decimals": descriptor.decimals,
        "totalSupply": descriptor.formatted_amount,
        "rawTotalSupply": str(descriptor.raw_amount),
    }


async def get_token_supply(
    token_address: str,
    *,
    handle: Optional[ChainRpcClient] = None,
    config: AbstractMcpConfig = default_config,
) -> Dict[str, Any]:
    """Total supply of an ERC-20 token, formatted and raw."""
    descriptor = await _read_supply(token_address, handle, config, "Failed to get token supply")
    return _supply_fields(descriptor)


async def get_token_info(
    token_address: str,
    *,
    handle: Optional[ChainRpcClient] = None,
    config: AbstractMcpConfig = default_config,
) -> Dict[str, Any]:
    """Token supply fields plus network and display metadata."""
    descriptor = await _read_supply(token_address, handle, config, "Failed to get token information")
    info = _supply_fields(descriptor)
    info["network"] = {"name": config.chain.name, "chainId": config.chain.chain_id}
    info["metadata"] = {
        "formattedSupply": format_locale(descriptor.formatted_amount, descriptor.symbol),
        "tokenType": ERC20_TOKEN_TYPE,
        "timestamp": iso_timestamp(),
    }
    return info
