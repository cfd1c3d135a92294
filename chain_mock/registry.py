"""Per-path call registry recording invocations and their outcomes."""

from __future__ import annotations

import dataclasses as dc
import enum
import itertools
import typing as t

_invocation_counter = itertools.count(1)


def next_invocation_order() -> int:
    """Return the next process-wide invocation order number."""
    return next(_invocation_counter)


class ResultType(enum.StrEnum):
    """Synchronous outcome of a recorded call."""

    RETURN = "return"
    THROW = "throw"
    INCOMPLETE = "incomplete"


class SettledType(enum.StrEnum):
    """Settlement outcome of a recorded call."""

    FULFILLED = "fulfilled"
    REJECTED = "rejected"
    INCOMPLETE = "incomplete"


@dc.dataclass(slots=True, frozen=True)
class MockResult:
    """Result descriptor for a single call."""

    type: ResultType
    value: t.Any = None

    @classmethod
    def incomplete(cls) -> MockResult:
        """Return a descriptor for a call whose value is not known yet."""
        return cls(ResultType.INCOMPLETE)


@dc.dataclass(slots=True, frozen=True)
class MockSettledResult:
    """Settlement descriptor for a single call."""

    type: SettledType
    value: t.Any = None

    @classmethod
    def incomplete(cls) -> MockSettledResult:
        """Return a descriptor for a call that has not settled yet."""
        return cls(SettledType.INCOMPLETE)


class MockContext:
    """Ordered record of the calls made to one path.

    The lists are parallel: index ``i`` of every list describes the ``i``-th
    call. ``calls`` holds positional arguments and ``call_kwargs`` the keyword
    arguments of the same call.
    """

    __slots__ = (
        "call_kwargs",
        "calls",
        "contexts",
        "invocation_call_order",
        "results",
        "settled_results",
    )

    def __init__(self) -> None:
        self.calls: list[tuple[t.Any, ...]] = []
        self.call_kwargs: list[dict[str, t.Any]] = []
        self.results: list[MockResult] = []
        self.settled_results: list[MockSettledResult] = []
        self.contexts: list[t.Any] = []
        self.invocation_call_order: list[int] = []

    @property
    def last_call(self) -> tuple[t.Any, ...] | None:
        """Return the positional arguments of the most recent call."""
        return self.calls[-1] if self.calls else None

    def __len__(self) -> int:
        """Return the number of recorded calls."""
        return len(self.calls)

    def record(
        self,
        args: tuple[t.Any, ...],
        kwargs: dict[str, t.Any],
        context: t.Any,  # noqa: ANN401 - receiver may be any node
    ) -> int:
        """Append a call and return its index.

        The result and settlement slots are filled in later with
        :meth:`set_outcome`.
        """
        self.calls.append(args)
        self.call_kwargs.append(kwargs)
        self.contexts.append(context)
        self.invocation_call_order.append(next_invocation_order())
        self.results.append(MockResult.incomplete())
        self.settled_results.append(MockSettledResult.incomplete())
        return len(self.calls) - 1

    def set_outcome(
        self,
        index: int,
        result: MockResult | None = None,
        settled: MockSettledResult | None = None,
    ) -> None:
        """Replace the result and/or settlement descriptors of call *index*."""
        if result is not None:
            self.results[index] = result
        if settled is not None:
            self.settled_results[index] = settled

    def holds_call(self, index: int, order: int) -> bool:
        """Return ``True`` while call *index* is still the call numbered *order*.

        A clear removes the call, after which late outcomes for it no longer
        have a slot.
        """
        return (
            index < len(self.invocation_call_order)
            and self.invocation_call_order[index] == order
        )

    def clear(self) -> None:
        """Forget every recorded call."""
        self.calls.clear()
        self.call_kwargs.clear()
        self.contexts.clear()
        self.invocation_call_order.clear()
        self.results.clear()
        self.settled_results.clear()

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"MockContext(calls={self.calls!r})"


def returned(value: t.Any) -> tuple[MockResult, MockSettledResult]:  # noqa: ANN401
    """Return the descriptor pair for a call that produced *value*."""
    return (
        MockResult(ResultType.RETURN, value),
        MockSettledResult(SettledType.FULFILLED, value),
    )


def raised(error: t.Any) -> tuple[MockResult, MockSettledResult]:  # noqa: ANN401
    """Return the descriptor pair for a call that failed with *error*."""
    return (
        MockResult(ResultType.THROW, error),
        MockSettledResult(SettledType.REJECTED, error),
    )


__all__ = [
    "MockContext",
    "MockResult",
    "MockSettledResult",
    "ResultType",
    "SettledType",
    "next_invocation_order",
    "raised",
    "returned",
]
