"""Join-all-or-fail helper for independent concurrent reads."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, List, Optional

from abstract_mcp.chain_api import NodeTimeoutError


async def gather_all(*aws: Awaitable[Any], timeout: Optional[float] = None) -> List[Any]:
    """
    Run ``aws`` concurrently and return their results in order.

    Every awaitable is allowed to settle before anything is raised. If one or
    more failed, the first failure in argument order is raised. If ``timeout``
    expires, the stragglers are cancelled and awaited, then NodeTimeoutError is
    raised. Nothing is left running when this returns or raises.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []

    try:
        _done, pending = await asyncio.wait(tasks, timeout=timeout)
    finally:
        leftovers = [task for task in tasks if not task.done()]
        for task in leftovers:
            task.cancel()
        if leftovers:
            await asyncio.gather(*leftovers, return_exceptions=True)

    failures = [
        task.exception()
        for task in tasks
        if not task.cancelled() and task.exception() is not None
    ]
    if pending:
        raise NodeTimeoutError(
            f"Timed out after {timeout}s waiting for {len(pending)} of {len(tasks)} reads"
        )
    if failures:
        raise failures[0]
    return [task.result() for task in tasks]
