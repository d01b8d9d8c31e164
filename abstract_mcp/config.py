"""
Configuration helpers for the Abstract Chain MCP server.

The chain itself (RPC endpoint, chain id, native token) is a fixed constant for
the lifetime of the process. Only runtime knobs such as HTTP timeouts and log
output can be tuned from the environment.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class NativeToken:
    symbol: str
    name: str
    decimals: int


@dataclass(frozen=True, slots=True)
class ChainConfig:
    """Static description of the chain every tool talks to."""

    rpc_url: str
    name: str
    chain_id: int
    native_token: NativeToken


ABSTRACT_CHAIN = ChainConfig(
    rpc_url="https://api.mainnet.abs.xyz",
    name="Abstract Chain",
    chain_id=2741,
    native_token=NativeToken(symbol="ETH", name="Ether", decimals=18),
)


def _load_float(env_var: str, default: float) -> float:
    raw_value = os.getenv(env_var)
    if raw_value:
        try:
            parsed = float(raw_value)
        except ValueError:
            return default
        return parsed if parsed > 0 else default
    return default


def _load_timeout() -> float:
    return _load_float("ABSTRACT_MCP_HTTP_TIMEOUT", 10.0)


def _load_fanout_timeout() -> float:
    return _load_float("ABSTRACT_MCP_FANOUT_TIMEOUT", 30.0)


DEFAULT_TIMEOUT = _load_timeout()
DEFAULT_FANOUT_TIMEOUT = _load_fanout_timeout()
LOG_LEVEL = os.getenv("ABSTRACT_MCP_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("ABSTRACT_MCP_LOG_FORMAT", "json")  # json or plain
ERC20_TOKEN_TYPE = "ERC20"


@dataclass(slots=True)
class AbstractMcpConfig:
    """Runtime configuration for chain access and server behavior."""

    chain: ChainConfig = field(default=ABSTRACT_CHAIN)
    timeout: float = DEFAULT_TIMEOUT
    fanout_timeout: float = DEFAULT_FANOUT_TIMEOUT
    log_level: str = LOG_LEVEL
    log_format: str = LOG_FORMAT


default_config = AbstractMcpConfig()
