"""LLM-facing tool implementations."""

from .wallet import get_wallet_balance
from .token_info import get_token_info, get_token_supply
from .transactions import get_transaction_data
from .blocks import get_block_info
from .common import ToolError
from .tokens import TokenDescriptor, TokenReadError, read_token
from . import formatting, validators

__all__ = [
    "get_wallet_balance",
    "get_token_supply",
    "get_token_info",
    "get_transaction_data",
    "get_block_info",
    "ToolError",
    "TokenDescriptor",
    "TokenReadError",
    "read_token",
    "formatting",
    "validators",
]
