"""Matchers that verify calls across every segment of a chain.

A chain such as ``db.select.from_.where`` has the segments ``select``,
``select.from_`` and ``select.from_.where``. Each matcher evaluates its
predicate against the call registry of every segment and returns a
:class:`MatchResult`; turning a failed result into an assertion error is left
to the caller (see :mod:`chain_mock.assertions`).

Calling a matcher on the root mock, passing the wrong number of argument
lists, or asking for call ``n < 1`` are usage errors and raise
:class:`~chain_mock.errors.ChainMockUsageError`.
"""

from __future__ import annotations

import dataclasses as dc
import typing as t
from textwrap import indent

from ._validators import validate_call_count
from .errors import ChainMockUsageError
from .node import is_chain_mock, segment_registries

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .node import ChainMock

_ROOT_MESSAGE = "Cannot check chain calls on root mock"


@dc.dataclass(slots=True, frozen=True)
class MatchResult:
    """Outcome of a chain matcher.

    ``message`` explains the result for whoever asserted the opposite: when
    ``passed`` is ``False`` it describes why the positive assertion failed,
    when ``True`` it describes why a negated assertion fails.
    """

    passed: bool
    message: str

    def __bool__(self) -> bool:
        """Return :attr:`passed`."""
        return self.passed


class Args:
    """Expected positional and keyword arguments of one segment call.

    Plain lists and tuples only describe positional arguments and require the
    call to have had no keyword arguments.
    """

    __slots__ = ("args", "kwargs")

    def __init__(self, *args: t.Any, **kwargs: t.Any) -> None:
        self.args = args
        self.kwargs = kwargs

    def matches(self, args: tuple[t.Any, ...], kwargs: dict[str, t.Any]) -> bool:
        """Return ``True`` when the call arguments equal the expected ones."""
        return list(self.args) == list(args) and self.kwargs == kwargs

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Args{_format_call_args(self.args, self.kwargs)}"


@dc.dataclass(slots=True, frozen=True)
class _Segment:
    name: str
    calls: list[tuple[t.Any, ...]]
    call_kwargs: list[dict[str, t.Any]]

    @property
    def count(self) -> int:
        return len(self.calls)

    def call_matches(self, index: int, expected: object) -> bool:
        args = self.calls[index]
        kwargs = self.call_kwargs[index]
        if isinstance(expected, Args):
            return expected.matches(args, kwargs)
        if isinstance(expected, (list, tuple)):
            return not kwargs and list(expected) == list(args)
        return bool(expected == args)

    def any_call_matches(self, expected: object) -> bool:
        return any(self.call_matches(i, expected) for i in range(self.count))

    def describe_call(self, index: int) -> str:
        return _format_call_args(self.calls[index], self.call_kwargs[index])

    def describe_calls(self) -> str:
        return _numbered([self.describe_call(i) for i in range(self.count)])


# ----------------------------------------------------------------------
# Formatting helpers
# ----------------------------------------------------------------------
def _format_call_args(args: t.Sequence[t.Any], kwargs: t.Mapping[str, t.Any]) -> str:
    parts = [repr(arg) for arg in args]
    parts.extend(f"{key}={value!r}" for key, value in kwargs.items())
    return f"({', '.join(parts)})"


def _describe_expected(expected: object) -> str:
    if isinstance(expected, (list, tuple)):
        return _format_call_args(expected, {})
    if isinstance(expected, Args):
        return _format_call_args(expected.args, expected.kwargs)
    return repr(expected)


def _numbered(entries: t.Sequence[str], *, start: int = 1) -> str:
    if not entries:
        return "(none)"
    return "\n".join(
        f"{index}. {entry}" for index, entry in enumerate(entries, start=start)
    )


def _format_sections(title: str, sections: list[tuple[str, str]]) -> str:
    parts = [title]
    for label, body in sections:
        if not body:
            continue
        parts.append("")
        parts.append(f"{label}:")
        parts.append(indent(body, "  "))
    return "\n".join(parts)


def _times(count: int) -> str:
    return "1 time" if count == 1 else f"{count} times"


def _call_count(seg: _Segment) -> str:
    if seg.count == 0:
        return f"{seg.name}: never called"
    return f"{seg.name}: called {_times(seg.count)}"


def _call_counts(segments: t.Sequence[_Segment]) -> str:
    return "\n".join(_call_count(seg) for seg in segments)


def _expected_vs_recorded(
    segments: t.Sequence[_Segment], argsets: t.Sequence[object]
) -> str:
    blocks = []
    for seg, expected in zip(segments, argsets, strict=True):
        blocks.append(
            "\n".join(
                [
                    seg.name,
                    f"  expected: {_describe_expected(expected)}",
                    "  recorded:",
                    indent(seg.describe_calls(), "    "),
                ]
            )
        )
    return "\n".join(blocks)


# ----------------------------------------------------------------------
# Segment extraction and usage checks
# ----------------------------------------------------------------------
def chain_segments(received: ChainMock) -> list[str]:
    """Return the dotted names of every segment of *received*."""
    return [seg.name for seg in _segments(received)]


def _segments(received: object) -> list[_Segment]:
    if not is_chain_mock(received):
        msg = f"Expected a chain mock, got {type(received).__name__}"
        raise ChainMockUsageError(msg)
    segments = [
        _Segment(name, [], [])
        if registry is None
        else _Segment(name, list(registry.calls), list(registry.call_kwargs))
        for name, registry in segment_registries(t.cast("ChainMock", received))
    ]
    if not segments:
        raise ChainMockUsageError(_ROOT_MESSAGE)
    return segments


def _check_arity(segments: t.Sequence[_Segment], argsets: t.Sequence[object]) -> None:
    if len(argsets) != len(segments):
        msg = (
            f"Expected {len(segments)} argument array(s) (one per segment), "
            f"but got {len(argsets)}"
        )
        raise ChainMockUsageError(msg)


# ----------------------------------------------------------------------
# Predicates
# ----------------------------------------------------------------------
def chain_called(received: ChainMock) -> MatchResult:
    """Check that every segment was called at least once."""
    segments = _segments(received)
    uncalled = [seg.name for seg in segments if seg.count == 0]
    passed = not uncalled
    if passed:
        message = _format_sections(
            "Expected chain not to have been called, but every segment was called.",
            [("Segments", _call_counts(segments))],
        )
    else:
        message = _format_sections(
            "Expected every segment to be called at least once.",
            [
                ("Segments", _call_counts(segments)),
                ("Never called", ", ".join(uncalled)),
            ],
        )
    return MatchResult(passed, message)


def chain_called_times(received: ChainMock, expected: int) -> MatchResult:
    """Check that every segment was called exactly *expected* times."""
    segments = _segments(received)
    validate_call_count(expected, name="times", minimum=0)
    mismatches = [
        f"{seg.name}: expected {expected}, got {seg.count}"
        for seg in segments
        if seg.count != expected
    ]
    passed = not mismatches
    if passed:
        message = _format_sections(
            f"Expected chain not to have been called {_times(expected)}, "
            f"but every segment was called {_times(expected)}.",
            [("Segments", _call_counts(segments))],
        )
    else:
        message = _format_sections(
            f"Expected every segment to be called {_times(expected)}.",
            [
                ("Segments", _call_counts(segments)),
                ("Mismatches", "\n".join(mismatches)),
            ],
        )
    return MatchResult(passed, message)


def chain_called_exactly_once(received: ChainMock) -> MatchResult:
    """Check that every segment was called exactly once."""
    return chain_called_times(received, 1)


def chain_called_with(received: ChainMock, *args_per_segment: object) -> MatchResult:
    """Check that one call index matches the expected arguments on every segment.

    Matching is positional by call index: the ``i``-th call of every segment
    must match at the same ``i``. Two unrelated chains that reuse a segment
    therefore do not combine into a false match.
    """
    segments = _segments(received)
    _check_arity(segments, args_per_segment)
    report = _expected_vs_recorded(segments, args_per_segment)

    uncalled = [seg.name for seg in segments if seg.count == 0]
    if uncalled:
        return MatchResult(
            False,
            _format_sections(
                "Expected chain to have been called with the given arguments, "
                f"but {', '.join(uncalled)} was never called.",
                [("Segments", report)],
            ),
        )

    for index in range(min(seg.count for seg in segments)):
        if all(
            seg.call_matches(index, expected)
            for seg, expected in zip(segments, args_per_segment, strict=True)
        ):
            return MatchResult(
                True,
                _format_sections(
                    "Expected chain not to have been called with the given "
                    f"arguments, but call {index + 1} matched.",
                    [("Segments", report)],
                ),
            )

    unmatched = [
        seg.name
        for seg, expected in zip(segments, args_per_segment, strict=True)
        if not seg.any_call_matches(expected)
    ]
    sections = [("Segments", report)]
    if unmatched:
        sections.append(("No matching call", ", ".join(unmatched)))
    else:
        sections.append(
            ("Reason", "every segment matched, but never on the same call")
        )
    return MatchResult(
        False,
        _format_sections(
            "Expected chain to have been called with the given arguments, "
            "but no call matched on every segment.",
            sections,
        ),
    )


def chain_called_exactly_once_with(
    received: ChainMock, *args_per_segment: object
) -> MatchResult:
    """Check that every segment was called once, with the expected arguments."""
    segments = _segments(received)
    _check_arity(segments, args_per_segment)

    mismatches: list[str] = []
    for seg, expected in zip(segments, args_per_segment, strict=True):
        if seg.count == 0:
            mismatches.append(f"{seg.name}: was never called")
        elif seg.count != 1:
            mismatches.append(
                f"{seg.name}: expected to be called exactly once, "
                f"but was called {_times(seg.count)}"
            )
        elif not seg.call_matches(0, expected):
            mismatches.append(
                f"{seg.name}: expected call with {_describe_expected(expected)}, "
                f"got {seg.describe_call(0)}"
            )

    passed = not mismatches
    report = _expected_vs_recorded(segments, args_per_segment)
    if passed:
        message = _format_sections(
            "Expected chain not to have been called exactly once with the given "
            "arguments, but every segment matched.",
            [("Segments", report)],
        )
    else:
        message = _format_sections(
            "Expected every segment to be called exactly once with the given "
            "arguments.",
            [("Segments", report), ("Mismatches", "\n".join(mismatches))],
        )
    return MatchResult(passed, message)


def nth_chain_called_with(
    received: ChainMock, n: int, *args_per_segment: object
) -> MatchResult:
    """Check that the *n*-th call (1-indexed) of every segment matches."""
    segments = _segments(received)
    validate_call_count(n)
    _check_arity(segments, args_per_segment)

    mismatches: list[str] = []
    for seg, expected in zip(segments, args_per_segment, strict=True):
        if seg.count < n:
            mismatches.append(
                f"{seg.name}: expected at least {_times(n)}, "
                f"but was called {_times(seg.count)}"
            )
        elif not seg.call_matches(n - 1, expected):
            mismatches.append(
                f"{seg.name}: expected call {n} with "
                f"{_describe_expected(expected)}, got {seg.describe_call(n - 1)}"
            )

    passed = not mismatches
    report = _expected_vs_recorded(segments, args_per_segment)
    if passed:
        message = _format_sections(
            f"Expected call {n} of the chain not to have the given arguments, "
            "but every segment matched.",
            [("Segments", report)],
        )
    else:
        message = _format_sections(
            f"Expected call {n} of every segment to have the given arguments.",
            [("Segments", report), ("Mismatches", "\n".join(mismatches))],
        )
    return MatchResult(passed, message)


def last_chain_called_with(
    received: ChainMock, *args_per_segment: object
) -> MatchResult:
    """Check the latest full-chain call against the expected arguments.

    The call index is the largest call count across all segments, so a
    segment shared with other chains is checked at the position of the
    deepest segment's latest call rather than at its own last call.
    """
    segments = _segments(received)
    _check_arity(segments, args_per_segment)
    last = max(seg.count for seg in segments)
    if last == 0:
        return MatchResult(
            False,
            _format_sections(
                "Expected chain to have been called, but no segment was called.",
                [("Segments", _call_counts(segments))],
            ),
        )
    return nth_chain_called_with(received, last, *args_per_segment)


__all__ = [
    "Args",
    "MatchResult",
    "chain_called",
    "chain_called_exactly_once",
    "chain_called_exactly_once_with",
    "chain_called_times",
    "chain_called_with",
    "chain_segments",
    "last_chain_called_with",
    "nth_chain_called_with",
]
