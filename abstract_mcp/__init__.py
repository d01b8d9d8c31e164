"""
Read-only Abstract Chain MCP server package.

This package exposes LLM-friendly tools backed by the chain's JSON-RPC
endpoint. See DESIGN.md for full details.
"""

__all__ = ["config"]
