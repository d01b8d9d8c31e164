"""Transaction receipt tool."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from eth_utils import to_checksum_address

from abstract_mcp.chain_api import ChainApiError, ChainRpcClient, open_handle, parse_quantity
from abstract_mcp.config import AbstractMcpConfig, default_config
from abstract_mcp.tools.common import tool_failure

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Failed to get transaction receipt"
PENDING_PAYLOAD = {
    "status": "pending",
    "message": "Transaction is pending or not found on the blockchain",
}


def _checksum(address: Optional[str]) -> Optional[str]:
    return to_checksum_address(address) if address else None


def _project_logs(raw_logs: Any) -> List[Dict[str, Any]]:
    logs: List[Dict[str, Any]] = []
    for entry in raw_logs or []:
        logs.append(
            {
                "address": _checksum(entry.get("address")),
                "topics": list(entry.get("topics") or []),
                "data": entry.get("data"),
            }
        )
    return logs


def _project_receipt(tx_hash: str, receipt: Dict[str, Any]) -> Dict[str, Any]:
    status = receipt.get("status")
    succeeded = status is not None and parse_quantity(status) == 1
    return {
        "txHash": tx_hash,
        "blockNumber": parse_quantity(receipt.get("blockNumber")),
        "blockHash": receipt.get("blockHash"),
        "status": "success" if succeeded else "failed",
        "gasUsed": str(parse_quantity(receipt.get("gasUsed"))),
        "from": _checksum(receipt.get("from")),
        "to": _checksum(receipt.get("to")),
        "contractAddress": _checksum(receipt.get("contractAddress")),
        "logs": _project_logs(receipt.get("logs")),
    }


async def get_transaction_data(
    tx_hash: str,
    *,
    handle: Optional[ChainRpcClient] = None,
    config: AbstractMcpConfig = default_config,
) -> Dict[str, Any]:
    """
    Receipt summary for ``tx_hash``.

    A missing receipt is a normal outcome and yields the ``pending`` payload.
    """
    try:
        async with open_handle(handle, config=config) as chain_handle:
            receipt = await chain_handle.get_transaction_receipt(tx_hash)
        if receipt is None:
            return dict(PENDING_PAYLOAD)
        return _project_receipt(tx_hash, receipt)
    except ChainApiError as exc:
        raise tool_failure(FAILURE_PREFIX, exc) from exc
    except Exception as exc:
        logger.exception("Unexpected error fetching receipt for %s", tx_hash)
        raise tool_failure(FAILURE_PREFIX, exc) from exc
