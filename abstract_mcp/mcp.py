"""
Tool registry for the MCP surface.

Maps the public camelCase tool names to their handlers. Arguments are checked
against a pydantic model per tool; the same model publishes the tool's JSON
input schema.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from abstract_mcp.config import default_config
from abstract_mcp.metrics import default_metrics
from abstract_mcp.tools import (
    ToolError,
    get_block_info,
    get_token_info,
    get_token_supply,
    get_transaction_data,
    get_wallet_balance,
)

logger = logging.getLogger(__name__)

CHAIN_NAME = default_config.chain.name


class ToolArguments(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class WalletBalanceArguments(ToolArguments):
    address: str = Field(description="Wallet address to check balances for")
    token_addresses: Optional[List[str]] = Field(
        default=None,
        alias="tokenAddresses",
        description="Optional list of token addresses to check balances for",
    )
    include_zero_balances: bool = Field(
        default=False,
        alias="includeZeroBalances",
        description="Whether to include tokens with zero balance",
    )


class TokenSupplyArguments(ToolArguments):
    token_address: str = Field(alias="tokenAddress", description="ERC20 token contract address")


class TokenInfoArguments(ToolArguments):
    token_address: str = Field(
        alias="tokenAddress", description=f"ERC20 token contract address on {CHAIN_NAME}"
    )


class TransactionDataArguments(ToolArguments):
    tx_hash: str = Field(alias="txHash", description="Transaction hash to check")


class BlockInfoArguments(ToolArguments):
    block_hash: str = Field(alias="blockHash", description="Block hash")


ToolCallable = Callable[..., Awaitable[Dict[str, Any]]]


@dataclass(slots=True)
class ToolDefinition:
    name: str
    description: str
    arguments: Type[ToolArguments]
    callable: ToolCallable

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.arguments.model_json_schema(by_alias=True)


TOOL_REGISTRY: Dict[str, ToolDefinition] = {
    "getWalletBalance": ToolDefinition(
        name="getWalletBalance",
        description="Get balance of native token and specified token addresses for a wallet",
        arguments=WalletBalanceArguments,
        callable=get_wallet_balance,
    ),
    "getTokenSupply": ToolDefinition(
        name="getTokenSupply",
        description=f"Get total supply for an ERC20 token on {CHAIN_NAME}",
        arguments=TokenSupplyArguments,
        callable=get_token_supply,
    ),
    "getTokenInfo": ToolDefinition(
        name="getTokenInfo",
        description=f"Get information about an ERC20 token on {CHAIN_NAME}",
        arguments=TokenInfoArguments,
        callable=get_token_info,
    ),
    "getTransactionData": ToolDefinition(
        name="getTransactionData",
        description=f"Get transaction information on {CHAIN_NAME}",
        arguments=TransactionDataArguments,
        callable=get_transaction_data,
    ),
    "getBlockInfo": ToolDefinition(
        name="getBlockInfo",
        description=f"Get information about a block on {CHAIN_NAME}",
        arguments=BlockInfoArguments,
        callable=get_block_info,
    ),
}


def list_tools() -> List[Dict[str, Any]]:
    """Return the tool catalogue in MCP ``tools/list`` shape."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


async def call_tool(tool_name: str, params: Optional[Dict[str, Any]] = None) -> Any:
    """Validate ``params`` and dispatch to a tool by name."""
    tool = TOOL_REGISTRY.get(tool_name)
    if tool is None:
        return {"error": f"Unknown tool: {tool_name}"}

    try:
        arguments = tool.arguments.model_validate(params or {})
    except ValidationError as exc:
        logger.debug("tool=%s invalid parameters: %s", tool_name, exc.errors())
        return {"error": "Invalid parameters."}

    try:
        return await tool.callable(**arguments.model_dump())
    except ToolError as exc:
        return {"error": str(exc)}
    except Exception:
        logger.exception("Unexpected error while calling tool %s", tool_name)
        return {"error": "Unexpected error while calling tool."}


def tool_failed(result: Any) -> bool:
    return isinstance(result, dict) and "error" in result


def result_text(result: Any) -> str:
    """Text block for a tool result: the error message, or indented JSON."""
    if tool_failed(result):
        return str(result.get("error") or "Error")
    return json.dumps(result, indent=2)


def render_result(result: Any) -> Dict[str, Any]:
    """Build an MCP ``tools/call`` result body around a tool's return value."""
    rendered: Dict[str, Any] = {
        "content": [{"type": "text", "text": result_text(result)}],
        "structuredContent": result,
    }
    if tool_failed(result):
        rendered["isError"] = True
    return rendered


def record_outcome(
    tool_name: str,
    result: Any,
    *,
    request_id: Optional[str] = None,
    transport: str = "http",
) -> None:
    """Log a finished tool call and count it as a success or an error."""
    failed = tool_failed(result)
    extra = {"tool": tool_name, "request_id": request_id, "transport": transport}
    if failed:
        extra["error"] = result.get("error")
        logger.warning("tool=%s outcome=error error=%s", tool_name, extra["error"], extra=extra)
    else:
        logger.info("tool=%s outcome=success", tool_name, extra=extra)
    default_metrics.record_tool(tool_name, success=not failed)
