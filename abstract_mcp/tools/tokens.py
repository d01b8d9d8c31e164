"""ERC-20 metadata reads shared by the balance and supply tools."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from abstract_mcp.chain_api import ChainApiError, ChainRpcClient
from abstract_mcp.fanout import gather_all
from abstract_mcp.tools.common import describe
from abstract_mcp.tools.formatting import format_units
from abstract_mcp.tools.validators import is_valid_evm_address

logger = logging.getLogger(__name__)


class TokenReadError(ChainApiError):
    """One or more of a token's fields could not be read."""

    def __init__(self, address: str, cause: BaseException) -> None:
        super().__init__(f"Failed to read token {address}: {describe(cause)}")
        self.address = address
        self.cause = cause


@dataclass(frozen=True, slots=True)
class TokenDescriptor:
    address: str
    symbol: str
    name: str
    decimals: int
    raw_amount: int
    formatted_amount: str

    @property
    def non_zero(self) -> bool:
        return self.raw_amount != 0


def encode_call(signature: str, arg_types: Sequence[str] = (), args: Sequence[Any] = ()) -> str:
    """Calldata for ``signature`` as a hex string."""
    selector = function_signature_to_4byte_selector(signature)
    return encode_hex(selector + encode(list(arg_types), list(args)))


async def _call_view(
    handle: ChainRpcClient,
    token: str,
    signature: str,
    output_type: str,
    arg_types: Sequence[str] = (),
    args: Sequence[Any] = (),
) -> Any:
    raw = await handle.call(token, encode_call(signature, arg_types, args))
    (value,) = decode([output_type], decode_hex(raw))
    return value


async def read_token(
    address: str,
    handle: ChainRpcClient,
    *,
    balance_of: Optional[str] = None,
    total_supply: bool = False,
    timeout: Optional[float] = None,
) -> TokenDescriptor:
    """
    Read symbol, name, decimals and one amount for the ERC-20 token at ``address``.

    The amount is ``balanceOf(balance_of)`` or ``totalSupply()``; exactly one
    must be requested. All reads run concurrently and the descriptor is only
    built once every read succeeded; any failure raises TokenReadError.
    """
    if (balance_of is not None) == bool(total_supply):
        raise ValueError("Request exactly one of balance_of or total_supply.")
    if not is_valid_evm_address(address):
        raise TokenReadError(address, ValueError("invalid token address"))
    if balance_of is not None and not is_valid_evm_address(balance_of):
        raise TokenReadError(address, ValueError(f"invalid account address {balance_of}"))

    if balance_of is not None:
        amount_read = _call_view(handle, address, "balanceOf(address)", "uint256", ["address"], [balance_of])
    else:
        amount_read = _call_view(handle, address, "totalSupply()", "uint256")

    try:
        symbol, name, decimals, raw_amount = await gather_all(
            _call_view(handle, address, "symbol()", "string"),
            _call_view(handle, address, "name()", "string"),
            _call_view(handle, address, "decimals()", "uint8"),
            amount_read,
            timeout=timeout,
        )
    except Exception as exc:
        logger.debug("token read failed address=%s cause=%s", address, describe(exc))
        raise TokenReadError(address, exc) from exc

    return TokenDescriptor(
        address=address,
        symbol=symbol,
        name=name,
        decimals=decimals,
        raw_amount=raw_amount,
        formatted_amount=format_units(raw_amount, decimals),
    )
