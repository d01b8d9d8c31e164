"""Shared validation helpers for the chain tools."""

from __future__ import annotations

from typing import Any, Optional

from eth_utils import is_address

HEX_PREFIX = "0x"


def has_hex_prefix(value: Optional[str]) -> bool:
    """Hashes are accepted only as ``0x``-prefixed hex literals."""
    return isinstance(value, str) and value.startswith(HEX_PREFIX)


def is_valid_evm_address(address: Any) -> bool:
    """Hex address check; mixed-case input must carry a valid EIP-55 checksum."""
    if not isinstance(address, str):
        return False
    return bool(is_address(address.strip()))
