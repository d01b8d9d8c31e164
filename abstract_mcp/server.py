"""FastAPI application wiring the Abstract Chain tools to HTTP routes."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Awaitable, Callable, Dict, List, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from abstract_mcp import mcp
from abstract_mcp.config import default_config
from abstract_mcp.logging_config import configure_logging
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

configure_logging()

HEALTH_STATUS = {"status": "ok"}
APP_VERSION = "1.0.0"
MCP_SERVER_NAME = "abstract-chain-mcp"
MCP_SERVER_VERSION = APP_VERSION

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logger.info("%s MCP server started successfully", default_config.chain.name)
    yield
    logger.info("%s MCP server stopped", default_config.chain.name)


app = FastAPI(
    title="Abstract Chain MCP",
    description="An MCP server for AI agents to interact with Abstract Chain",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    started = time.perf_counter()
    default_metrics.incr_request()
    response = await call_next(request)
    default_metrics.record_duration(request_id, (time.perf_counter() - started) * 1000)
    response.headers["X-Request-ID"] = request_id
    return response


async def _run_tool(
    tool_name: str, request: Request, call: Callable[[], Awaitable[Dict[str, Any]]]
) -> JSONResponse:
    try:
        result = await call()
    except ToolError as exc:
        result = {"error": str(exc)}
    mcp.record_outcome(tool_name, result, request_id=getattr(request.state, "request_id", None))
    return JSONResponse(content=result)


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for monitoring."""
    return JSONResponse(content=HEALTH_STATUS)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Return in-process metrics snapshot."""
    return JSONResponse(content=default_metrics.snapshot())


@app.get("/tools/wallet_balance/{address}")
async def wallet_balance(
    address: str,
    request: Request,
    tokenAddresses: List[str] | None = Query(None),
    includeZeroBalances: bool = Query(False),
) -> JSONResponse:
    """Proxy for getWalletBalance."""
    return await _run_tool(
        "getWalletBalance",
        request,
        lambda: get_wallet_balance(
            address, token_addresses=tokenAddresses, include_zero_balances=includeZeroBalances
        ),
    )


@app.get("/tools/token_supply/{token_address}")
async def token_supply(token_address: str, request: Request) -> JSONResponse:
    """Proxy for getTokenSupply."""
    return await _run_tool("getTokenSupply", request, lambda: get_token_supply(token_address))


@app.get("/tools/token_info/{token_address}")
async def token_info(token_address: str, request: Request) -> JSONResponse:
    """Proxy for getTokenInfo."""
    return await _run_tool("getTokenInfo", request, lambda: get_token_info(token_address))


@app.get("/tools/transaction/{tx_hash}")
async def transaction_data(tx_hash: str, request: Request) -> JSONResponse:
    """Proxy for getTransactionData."""
    return await _run_tool("getTransactionData", request, lambda: get_transaction_data(tx_hash))


@app.get("/tools/block/{block_hash}")
async def block_info(block_hash: str, request: Request) -> JSONResponse:
    """Proxy for getBlockInfo."""
    return await _run_tool("getBlockInfo", request, lambda: get_block_info(block_hash))


class GatewayError(Exception):
    """A JSON-RPC level failure; tool failures travel inside a normal result instead."""

    def __init__(self, code: int, message: str, status_code: int = 200) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


async def _initialize(params: Dict[str, Any], _request_id: Optional[str]) -> Dict[str, Any]:
    protocol_version = params.get("protocolVersion")
    if not isinstance(protocol_version, str) or not protocol_version:
        raise GatewayError(INVALID_PARAMS, "Invalid params")
    return {
        "protocolVersion": protocol_version,
        "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
        "capabilities": {"tools": {"listChanged": False}},
    }


async def _list_tools(_params: Dict[str, Any], _request_id: Optional[str]) -> Dict[str, Any]:
    return {"tools": mcp.list_tools()}


async def _call_tool(params: Dict[str, Any], request_id: Optional[str]) -> Dict[str, Any]:
    tool_name = params.get("name") or params.get("tool")
    arguments = params.get("arguments")
    if arguments is None:
        arguments = params.get("params") or {}
    if not isinstance(tool_name, str) or not tool_name.strip() or not isinstance(arguments, dict):
        raise GatewayError(INVALID_PARAMS, "Invalid params")
    result = await mcp.call_tool(tool_name, arguments)
    mcp.record_outcome(tool_name, result, request_id=request_id)
    return mcp.render_result(result)


METHODS: Dict[str, Callable[[Dict[str, Any], Optional[str]], Awaitable[Dict[str, Any]]]] = {
    "initialize": _initialize,
    "tools/list": _list_tools,
    "list_tools": _list_tools,
    "tools/call": _call_tool,
    "call_tool": _call_tool,
}

NOTIFICATIONS = frozenset({"notifications/initialized", "initialized"})


async def _read_envelope(request: Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except ValueError:
        raise GatewayError(PARSE_ERROR, "Parse error", status_code=400) from None
    if not isinstance(body, dict):
        raise GatewayError(INVALID_REQUEST, "Invalid request", status_code=400)
    return body


@app.post("/mcp")
async def mcp_gateway(request: Request) -> Response:
    """
    JSON-RPC gateway for MCP clients over HTTP.

    Handles ``initialize``, ``tools/list`` and ``tools/call`` (plus the legacy
    ``list_tools``/``call_tool`` spellings). Notifications get an empty 204.
    """
    request_id = getattr(request.state, "request_id", None)
    rpc_id: Any = None
    method: Any = None
    try:
        body = await _read_envelope(request)
        rpc_id = body.get("id")
        method = body.get("method")
        params = body.get("params")
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise GatewayError(INVALID_PARAMS, "Invalid params")
        if not method:
            raise GatewayError(INVALID_REQUEST, "Invalid request")
        if method in NOTIFICATIONS:
            return Response(status_code=204)
        handler = METHODS.get(method)
        if handler is None:
            raise GatewayError(METHOD_NOT_FOUND, "Method not found")
        result = await handler(params, request_id)
    except GatewayError as exc:
        logger.debug(
            "mcp method=%s id=%s error_code=%s", method, rpc_id, exc.code, extra={"request_id": request_id}
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"jsonrpc": "2.0", "id": rpc_id, "error": {"code": exc.code, "message": str(exc)}},
        )
    logger.debug("mcp method=%s id=%s outcome=success", method, rpc_id, extra={"request_id": request_id})
    return JSONResponse(content={"jsonrpc": "2.0", "id": rpc_id, "result": result})


# Run with: uvicorn abstract_mcp.server:app
