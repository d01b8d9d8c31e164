"""Amount and timestamp formatting shared by the tools."""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional

LOCALE_FRACTION_DIGITS = 3


def format_units(raw: int, decimals: int) -> str:
    """
    Render an integer base-unit amount as a decimal string.

    ``format_units(10**18, 18) == "1.0"`` and ``format_units(1234500, 6) ==
    "1.2345"``. Trailing zeros are trimmed, but at least one fractional digit is
    kept unless ``decimals`` is 0. Integer arithmetic only, so 256-bit values
    keep every digit.
    """
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise ValueError(f"decimals must be a non-negative integer, got {decimals!r}")
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValueError(f"raw amount must be an integer, got {raw!r}")

    whole, fraction = divmod(abs(raw), 10**decimals)
    if decimals == 0:
        text = str(whole)
    else:
        fraction_text = str(fraction).rjust(decimals, "0").rstrip("0") or "0"
        text = f"{whole}.{fraction_text}"
    return f"-{text}" if raw < 0 else text


def format_locale(formatted: str, symbol: str) -> str:
    """Group thousands and round to three fraction digits, e.g. ``"1,234.568 TKN"``."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(formatted) + LOCALE_FRACTION_DIGITS + 1)
        amount = Decimal(formatted).quantize(
            Decimal(1).scaleb(-LOCALE_FRACTION_DIGITS), rounding=ROUND_HALF_UP
        )
        text = f"{amount:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        text = "0"
    return f"{text} {symbol}"


def iso_timestamp(epoch_seconds: Optional[int] = None) -> str:
    """UTC ISO-8601 string with millisecond precision and a ``Z`` suffix."""
    if epoch_seconds is None:
        moment = datetime.now(timezone.utc)
    else:
        moment = datetime.fromtimestamp(epoch_seconds, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
