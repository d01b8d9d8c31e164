"""Failure type and helpers shared by the tool handlers."""

from __future__ import annotations


class ToolError(Exception):
    """A tool invocation failed; the message is what the caller sees."""


def describe(exc: BaseException) -> str:
    """Readable cause for ``exc``, falling back to its type name when the message is empty."""
    return str(exc) or type(exc).__name__


def tool_failure(prefix: str, exc: BaseException) -> ToolError:
    return ToolError(f"{prefix}: {describe(exc)}")
