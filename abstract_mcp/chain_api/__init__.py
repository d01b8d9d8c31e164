"""JSON-RPC client wrappers for the configured EVM chain."""

from .client import (
    ChainApiError,
    ChainConnectionError,
    ChainRpcClient,
    NodeTimeoutError,
    NodeUnreachableError,
    RpcError,
    get_handle,
    open_handle,
    parse_quantity,
)

__all__ = [
    "ChainRpcClient",
    "ChainApiError",
    "ChainConnectionError",
    "NodeUnreachableError",
    "NodeTimeoutError",
    "RpcError",
    "get_handle",
    "open_handle",
    "parse_quantity",
]
