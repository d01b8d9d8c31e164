"""
Thin JSON-RPC client for the configured EVM chain.

Only read-only methods are exposed. Transport and node errors are mapped to
internal exceptions that the tool layer turns into caller-facing failures.
"""

from __future__ import annotations

import itertools
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from abstract_mcp.config import AbstractMcpConfig, ChainConfig, default_config

logger = logging.getLogger(__name__)


class ChainApiError(Exception):
    """Base exception for chain access errors."""

    def __init__(
        self,
        message: str,
        *,
        code: Optional[int | str] = None,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class ChainConnectionError(ChainApiError):
    """Raised when a chain handle cannot be constructed."""


class NodeUnreachableError(ChainApiError):
    """Raised when the RPC endpoint cannot be reached."""


class NodeTimeoutError(ChainApiError):
    """Raised when the RPC endpoint or a group of reads exceeds its deadline."""


class RpcError(ChainApiError):
    """Raised when the node answers with an error or a malformed envelope."""


def parse_quantity(value: Any) -> int:
    """Decode a JSON-RPC quantity (``0x``-prefixed hex) into an int."""
    if isinstance(value, bool):
        raise RpcError(f"Invalid quantity in node response: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 16) if value.lower().startswith("0x") else int(value)
        except ValueError:
            pass
    raise RpcError(f"Invalid quantity in node response: {value!r}")


class ChainRpcClient:
    """Async JSON-RPC client bound to a single endpoint."""

    def __init__(
        self,
        chain: ChainConfig | None = None,
        *,
        timeout: float = default_config.timeout,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.chain = chain or default_config.chain
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "ChainRpcClient":
        return self

    async def __aexit__(self, *_exc_info: Any) -> None:
        await self.aclose()

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _process_response(self, response: httpx.Response, method: str) -> Any:
        try:
            data = response.json()
        except ValueError:
            data = None

        error = data.get("error") if isinstance(data, dict) else None
        # Providers often pair a 4xx/5xx status with a JSON-RPC error body.
        if response.status_code >= 400 and not error:
            raise RpcError(
                f"RPC endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if not isinstance(data, dict):
            raise RpcError("Malformed response from node.", status_code=response.status_code)

        if error:
            code: Optional[int | str] = None
            message = "RPC error"
            if isinstance(error, dict):
                code = error.get("code")
                message = str(error.get("message") or message)
            elif isinstance(error, str):
                message = error
            logger.debug("rpc method=%s error_code=%s message=%s", method, code, message)
            raise RpcError(message, code=code, status_code=response.status_code)

        if "result" not in data:
            raise RpcError("Malformed response from node.", status_code=response.status_code)
        return data["result"]

    async def _request(self, method: str, params: List[Any]) -> Any:
        client = await self._get_client()
        payload: Dict[str, Any] = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        try:
            response = await client.post(self.chain.rpc_url, json=payload)
        except httpx.TimeoutException as exc:
            logger.warning("RPC request timed out for method %s", method)
            raise NodeTimeoutError(f"RPC request timed out: {method}") from exc
        except httpx.RequestError as exc:
            logger.warning("RPC endpoint unreachable for method %s", method)
            raise NodeUnreachableError("Node unreachable") from exc
        return self._process_response(response, method)

    async def chain_id(self) -> int:
        """Return the chain id reported by the node."""
        return parse_quantity(await self._request("eth_chainId", []))

    async def get_balance(self, address: str) -> int:
        """Native balance of ``address`` at the latest block, in base units."""
        return parse_quantity(await self._request("eth_getBalance", [address, "latest"]))

    async def call(self, to: str, data: str) -> str:
        """Execute a read-only contract call and return the raw hex result."""
        result = await self._request("eth_call", [{"to": to, "data": data}, "latest"])
        if not isinstance(result, str):
            raise RpcError("Unexpected eth_call result from node.")
        return result

    async def get_transaction_receipt(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        """Receipt for ``tx_hash``, or None while it is pending or unknown."""
        result = await self._request("eth_getTransactionReceipt", [tx_hash])
        if result is not None and not isinstance(result, dict):
            raise RpcError("Unexpected receipt payload from node.")
        return result

    async def get_block_by_hash(self, block_hash: str) -> Optional[Dict[str, Any]]:
        """Block header with transaction hashes, or None if the node has no such block."""
        result = await self._request("eth_getBlockByHash", [block_hash, False])
        if result is not None and not isinstance(result, dict):
            raise RpcError("Unexpected block payload from node.")
        return result


def get_handle(config: AbstractMcpConfig = default_config) -> ChainRpcClient:
    """
    Build a fresh read-only handle for the configured chain.

    Only the endpoint URL is checked here; reachability problems surface from
    whichever call first performs network I/O.
    """
    chain = config.chain
    try:
        url = httpx.URL(chain.rpc_url)
    except (httpx.InvalidURL, TypeError) as exc:
        raise ChainConnectionError(f"Failed to connect to {chain.name} RPC: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ChainConnectionError(
            f"Failed to connect to {chain.name} RPC: invalid endpoint URL {chain.rpc_url!r}"
        )
    return ChainRpcClient(chain, timeout=config.timeout)


@asynccontextmanager
async def open_handle(
    handle: Optional[ChainRpcClient] = None,
    *,
    config: AbstractMcpConfig = default_config,
) -> AsyncIterator[ChainRpcClient]:
    """
    Yield ``handle`` unchanged when one is injected, otherwise a new handle that
    is closed once the caller is done with it.
    """
    if handle is not None:
        yield handle
        return
    owned = get_handle(config)
    try:
        yield owned
    finally:
        await owned.aclose()
