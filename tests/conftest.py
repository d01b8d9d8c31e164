import os
import sys

import pytest
from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex

# Ensure repository root is on sys.path before importing project modules.
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from abstract_mcp.chain_api import RpcError  # noqa: E402
from abstract_mcp.metrics import default_metrics  # noqa: E402
from abstract_mcp.tools.tokens import encode_call  # noqa: E402

WALLET = "0x" + "11" * 20
TOKEN_A = "0x" + "aa" * 20
TOKEN_B = "0x" + "bb" * 20
BAD_TOKEN = "0x" + "cc" * 20

SELECTORS = {
    encode_call("symbol()")[:10]: "symbol",
    encode_call("name()")[:10]: "name",
    encode_call("decimals()")[:10]: "decimals",
    encode_call("totalSupply()")[:10]: "totalSupply",
    encode_call("balanceOf(address)", ["address"], [WALLET])[:10]: "balanceOf",
}


class StubChain:
    """Call-counting stand-in for a chain handle."""

    def __init__(self, *, native=None, tokens=None, receipts=None, blocks=None):
        self.native = {k.lower(): v for k, v in (native or {}).items()}
        self.tokens = {k.lower(): v for k, v in (tokens or {}).items()}
        self.receipts = receipts or {}
        self.blocks = blocks or {}
        self.calls = []

    async def get_balance(self, address):
        self.calls.append(("eth_getBalance", address))
        return self.native.get(address.lower(), 0)

    async def call(self, to, data):
        self.calls.append(("eth_call", to, data))
        token = self.tokens.get(to.lower())
        if token is None:
            # No contract at this address.
            return "0x"
        if token.get("revert"):
            raise RpcError("execution reverted", code=3)
        function = SELECTORS[data[:10]]
        if function == "symbol":
            return encode_hex(encode(["string"], [token["symbol"]]))
        if function == "name":
            return encode_hex(encode(["string"], [token["name"]]))
        if function == "decimals":
            return encode_hex(encode(["uint8"], [token["decimals"]]))
        if function == "totalSupply":
            return encode_hex(encode(["uint256"], [token["total_supply"]]))
        (account,) = decode(["address"], decode_hex("0x" + data[10:]))
        balances = {k.lower(): v for k, v in token.get("balances", {}).items()}
        return encode_hex(encode(["uint256"], [balances.get(account.lower(), 0)]))

    async def get_transaction_receipt(self, tx_hash):
        self.calls.append(("eth_getTransactionReceipt", tx_hash))
        return self.receipts.get(tx_hash)

    async def get_block_by_hash(self, block_hash):
        self.calls.append(("eth_getBlockByHash", block_hash))
        return self.blocks.get(block_hash)


@pytest.fixture(autouse=True)
def reset_metrics():
    default_metrics.reset()
    yield
    default_metrics.reset()


@pytest.fixture
def token_chain():
    return StubChain(
        native={WALLET: 1_500_000_000_000_000_000},
        tokens={
            TOKEN_A: {
                "symbol": "AAA",
                "name": "Token A",
                "decimals": 6,
                "total_supply": 1_234_567_891_234,
                "balances": {WALLET: 2_500_000},
            },
            TOKEN_B: {
                "symbol": "BBB",
                "name": "Token B",
                "decimals": 18,
                "total_supply": 10**27,
                "balances": {},
            },
            BAD_TOKEN: {"revert": True},
        },
    )
