"""Shared validation helpers."""

from __future__ import annotations

from .errors import ChainMockUsageError


def validate_call_count(count: int, *, name: str = "n", minimum: int = 1) -> None:
    """Ensure *count* is an integer no smaller than *minimum*."""
    if isinstance(count, bool) or not isinstance(count, int):
        msg = f"{name} must be an integer, got {type(count).__name__}"
        raise ChainMockUsageError(msg)

    if count < minimum:
        msg = f"Expected {name} to be >= {minimum}, but got {count}"
        raise ChainMockUsageError(msg)
