"""
MCP server over stdio.

This is the transport MCP clients use when they launch the server as a
subprocess. Tools come from the same registry the HTTP gateway serves. Each
result is a single text block holding indented JSON, and a failed call
comes back flagged ``isError``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from abstract_mcp.config import default_config
from abstract_mcp.logging_config import configure_logging
from abstract_mcp.mcp import TOOL_REGISTRY, call_tool, record_outcome, result_text, tool_failed

logger = logging.getLogger(__name__)

SERVER_NAME = "abstract-chain-mcp"

app = Server(SERVER_NAME)


class ToolCallFailed(Exception):
    """Raised from the call handler so the SDK marks the result ``isError``."""


@app.list_tools()
async def handle_list_tools() -> List[Tool]:
    return [
        Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
        for tool in TOOL_REGISTRY.values()
    ]


@app.call_tool()
async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> List[TextContent]:
    result = await call_tool(name, arguments or {})
    record_outcome(name, result, transport="stdio")
    if tool_failed(result):
        raise ToolCallFailed(result_text(result))
    return [TextContent(type="text", text=result_text(result))]


async def serve() -> None:
    async with stdio_server() as (read_stream, write_stream):
        logger.info("%s MCP server running on stdio", default_config.chain.name)
        await app.run(read_stream, write_stream, app.create_initialization_options())


def main() -> None:
    configure_logging()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("%s MCP server stopped", default_config.chain.name)


if __name__ == "__main__":
    main()
