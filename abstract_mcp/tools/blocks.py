"""Block lookup tool."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from eth_utils import to_checksum_address

from abstract_mcp.chain_api import ChainApiError, ChainRpcClient, open_handle, parse_quantity
from abstract_mcp.config import AbstractMcpConfig, default_config
from abstract_mcp.tools.common import tool_failure
from abstract_mcp.tools.formatting import iso_timestamp
from abstract_mcp.tools.validators import has_hex_prefix

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Failed to get block information"


def _project_block(block: Dict[str, Any]) -> Dict[str, Any]:
    transactions = [tx if isinstance(tx, str) else tx.get("hash") for tx in block.get("transactions") or []]
    miner = block.get("miner")
    return {
        "blockNumber": parse_quantity(block.get("number")),
        "blockHash": block.get("hash"),
        "timestamp": iso_timestamp(parse_quantity(block.get("timestamp"))),
        "parentHash": block.get("parentHash"),
        "miner": to_checksum_address(miner) if miner else None,
        "gasUsed": str(parse_quantity(block.get("gasUsed"))),
        "gasLimit": str(parse_quantity(block.get("gasLimit"))),
        "transactions": transactions,
        "transactionCount": len(transactions),
    }


async def get_block_info(
    block_hash: str,
    *,
    handle: Optional[ChainRpcClient] = None,
    config: AbstractMcpConfig = default_config,
) -> Dict[str, Any]:
    """
    Header summary for the block with hash ``block_hash``.

    The hash format is checked before any handle is built, so a malformed hash
    never reaches the node.
    """
    if not has_hex_prefix(block_hash):
        return {
            "status": "error",
            "message": "Invalid block hash format. Block hash must start with 0x.",
            "requestedBlockHash": block_hash,
        }

    try:
        async with open_handle(handle, config=config) as chain_handle:
            block = await chain_handle.get_block_by_hash(block_hash)
        if block is None:
            return {"status": "not found", "message": "Block not found on the blockchain"}
        return _project_block(block)
    except ChainApiError as exc:
        raise tool_failure(FAILURE_PREFIX, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected error fetching block %s", block_hash)
        raise tool_failure(FAILURE_PREFIX, exc) from exc
