"""Exception hierarchy for chain mocks."""

from __future__ import annotations

import typing as t


class ChainMockError(Exception):
    """Base class for all chain mock errors."""


class ChainMockUsageError(ChainMockError):
    """Raised when the chain mock API is used incorrectly."""


class MockRejection(ChainMockError):
    """Raised from ``await`` when a configured rejection is not an exception.

    The configured value is available as :attr:`value`.
    """

    def __init__(self, value: t.Any) -> None:  # noqa: ANN401 - arbitrary payload
        super().__init__(f"chain mock rejected with {value!r}")
        self.value = value


__all__ = ["ChainMockError", "ChainMockUsageError", "MockRejection"]
