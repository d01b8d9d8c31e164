"""Minimal live sanity checks for the Abstract Chain MCP tools."""

from __future__ import annotations

import asyncio
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from abstract_mcp.chain_api import get_handle  # noqa: E402
from abstract_mcp.tools import (  # noqa: E402
    ToolError,
    get_block_info,
    get_token_info,
    get_transaction_data,
    get_wallet_balance,
)

# Override any of these via env to point at known on-chain objects.
SAMPLE_ADDRESS = os.getenv("ABSTRACT_SAMPLE_ADDRESS", "0x0000000000000000000000000000000000000000")
SAMPLE_TOKEN = os.getenv("ABSTRACT_SAMPLE_TOKEN")
SAMPLE_TX = os.getenv("ABSTRACT_SAMPLE_TX")
SAMPLE_BLOCK = os.getenv("ABSTRACT_SAMPLE_BLOCK")


async def main() -> None:
    async with get_handle() as handle:
        print("Chain id:", await handle.chain_id())

    tokens = [SAMPLE_TOKEN] if SAMPLE_TOKEN else None
    try:
        print("Wallet balance:", await get_wallet_balance(SAMPLE_ADDRESS, tokens, True))
        if SAMPLE_TOKEN:
            print("Token info:", await get_token_info(SAMPLE_TOKEN))
        if SAMPLE_TX:
            print("Transaction:", await get_transaction_data(SAMPLE_TX))
        if SAMPLE_BLOCK:
            print("Block:", await get_block_info(SAMPLE_BLOCK))
    except ToolError as exc:
        print("Tool failed:", exc)


if __name__ == "__main__":
    asyncio.run(main())
