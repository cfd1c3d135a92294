"""Process-wide registry of chain mocks for bulk clear and reset."""

from __future__ import annotations

import logging
import typing as t

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .node import ChainMock

logger = logging.getLogger(__name__)

_registry: set[ChainMock] = set()


def register(root: ChainMock) -> None:
    """Track *root* so bulk operations reach it."""
    _registry.add(root)


def unregister(root: ChainMock) -> None:
    """Stop tracking *root*; unknown roots are ignored."""
    _registry.discard(root)


def registered_mocks() -> list[ChainMock]:
    """Return a snapshot of the registered root mocks."""
    return list(_registry)


def clear_all_mocks() -> None:
    """Clear call history of every chain mock, keeping configured values.

    Typically called from a teardown hook::

        @pytest.fixture(autouse=True)
        def _clear_chain_mocks():
            yield
            clear_all_mocks()
    """
    roots = registered_mocks()
    logger.debug("Clearing %d chain mock(s)", len(roots))
    for root in roots:
        root.mock_clear()


def reset_all_mocks() -> None:
    """Reset every chain mock to its initial state and empty the registry.

    Both call history and configured values (``mock_resolved_value``,
    ``mock_implementation`` and friends) are discarded.
    """
    roots = registered_mocks()
    logger.debug("Resetting %d chain mock(s)", len(roots))
    for root in roots:
        root.mock_reset()
    _registry.difference_update(roots)


__all__ = [
    "clear_all_mocks",
    "register",
    "registered_mocks",
    "reset_all_mocks",
    "unregister",
]
