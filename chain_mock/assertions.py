"""Assertion helpers turning chain matcher results into ``AssertionError``.

``expect(node)`` wraps a chain mock node; each ``to_have_been_*`` method runs
the matching predicate from :mod:`chain_mock.matchers` and raises
:class:`AssertionError` with the predicate's message when it does not hold.
``expect(node).not_`` negates every assertion::

    expect(db.select.from_.where).to_have_been_chain_called_once()
    expect(db.insert.values).not_.to_have_been_chain_called()

Usage errors such as asserting on the root mock propagate as
:class:`~chain_mock.errors.ChainMockUsageError`.
"""

from __future__ import annotations

import logging
import typing as t

from . import matchers

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .matchers import MatchResult
    from .node import ChainMock

logger = logging.getLogger(__name__)

ChainMatcher = t.Callable[..., "MatchResult"]

chain_matchers: dict[str, ChainMatcher] = {
    "to_have_been_chain_called": matchers.chain_called,
    "to_have_been_chain_called_times": matchers.chain_called_times,
    "to_have_been_chain_called_once": matchers.chain_called_exactly_once,
    "to_have_been_chain_called_with": matchers.chain_called_with,
    "to_have_been_chain_called_once_with": matchers.chain_called_exactly_once_with,
    "to_have_been_nth_chain_called_with": matchers.nth_chain_called_with,
    "to_have_been_last_chain_called_with": matchers.last_chain_called_with,
}


class ChainExpectation:
    """Assertions about the calls recorded along one chain."""

    __slots__ = ("_negated", "_received")

    def __init__(self, received: ChainMock, *, negated: bool = False) -> None:
        self._received = received
        self._negated = negated

    @property
    def not_(self) -> ChainExpectation:
        """Return the negated form of this expectation."""
        return ChainExpectation(self._received, negated=not self._negated)

    def satisfies(self, name: str, *args: t.Any) -> None:  # noqa: ANN401
        """Run the registered matcher *name* and assert on its result."""
        try:
            matcher = chain_matchers[name]
        except KeyError:
            msg = f"Unknown chain matcher {name!r}"
            raise AttributeError(msg) from None
        result = matcher(self._received, *args)
        if result.passed is self._negated:
            logger.debug("Chain assertion %s failed for %r", name, self._received)
            raise AssertionError(result.message)

    def to_have_been_chain_called(self) -> None:
        """Assert every segment was called at least once."""
        self.satisfies("to_have_been_chain_called")

    def to_have_been_chain_called_times(self, times: int) -> None:
        """Assert every segment was called exactly *times* times."""
        self.satisfies("to_have_been_chain_called_times", times)

    def to_have_been_chain_called_once(self) -> None:
        """Assert every segment was called exactly once."""
        self.satisfies("to_have_been_chain_called_once")

    def to_have_been_chain_called_with(self, *args_per_segment: object) -> None:
        """Assert one call index matches *args_per_segment* on every segment."""
        self.satisfies("to_have_been_chain_called_with", *args_per_segment)

    def to_have_been_chain_called_once_with(self, *args_per_segment: object) -> None:
        """Assert every segment was called once with its expected arguments."""
        self.satisfies("to_have_been_chain_called_once_with", *args_per_segment)

    def to_have_been_nth_chain_called_with(
        self, n: int, *args_per_segment: object
    ) -> None:
        """Assert call *n* of every segment matches *args_per_segment*."""
        self.satisfies("to_have_been_nth_chain_called_with", n, *args_per_segment)

    def to_have_been_last_chain_called_with(self, *args_per_segment: object) -> None:
        """Assert the latest full-chain call matches *args_per_segment*."""
        self.satisfies("to_have_been_last_chain_called_with", *args_per_segment)


def expect(received: ChainMock) -> ChainExpectation:
    """Return assertions about the chain ending at *received*."""
    return ChainExpectation(received)


def register_matcher(name: str, matcher: ChainMatcher) -> None:
    """Make *matcher* available through :meth:`ChainExpectation.satisfies`."""
    chain_matchers[name] = matcher


__all__ = [
    "ChainExpectation",
    "ChainMatcher",
    "chain_matchers",
    "expect",
    "register_matcher",
]
