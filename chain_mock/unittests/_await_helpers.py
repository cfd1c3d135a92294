"""Helpers for awaiting chain mocks from synchronous tests."""

from __future__ import annotations

import asyncio
import typing as t


def resolve(awaitable: t.Awaitable[t.Any]) -> t.Any:  # noqa: ANN401 - test helper
    """Await *awaitable* on a fresh event loop and return its result."""

    async def _await() -> t.Any:  # noqa: ANN401
        return await awaitable

    return asyncio.run(_await())


__all__ = ["resolve"]
