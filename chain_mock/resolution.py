"""Value resolution for chain mock calls and awaits.

Two lookups decide what a path produces:

* :func:`find_sync_state` runs when a node is *called*. A state keyed by the
  bare method name (``("digest",)``) wins over the path's own lineage, so a
  terminal method configured once applies wherever it is reached.
* :func:`find_async_state` runs when a node is *awaited* and walks from the
  awaited path up to the root.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import functools
import inspect
import logging
import typing as t

from .errors import MockRejection
from .registry import (
    MockContext,
    MockResult,
    MockSettledResult,
    ResultType,
    SettledType,
    raised,
    returned,
)

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .state import Path, PathState, PathStateStore

logger = logging.getLogger(__name__)


def find_sync_state(store: PathStateStore, path: Path) -> PathState | None:
    """Return the state whose synchronous behaviour applies to a call on *path*."""
    if path:
        by_name = store.get(path[-1:])
        if by_name is not None and by_name.has_sync_behavior:
            return by_name
    return next(
        (state for state in store.lineage(path) if state.has_sync_behavior), None
    )


def find_async_state(store: PathStateStore, path: Path) -> PathState | None:
    """Return the nearest state (self included) with a configured await outcome."""
    return next(
        (state for state in store.lineage(path) if state.has_async_outcome), None
    )


def _is_chain_node(value: object) -> bool:
    return bool(getattr(type(value), "_chain_mock_node", False))


def _store_outcome(
    mock: MockContext,
    index: int,
    order: int,
    result: MockResult | None = None,
    settled: MockSettledResult | None = None,
) -> None:
    if mock.holds_call(index, order):
        mock.set_outcome(index, result, settled)
    else:
        logger.debug("Dropped outcome of cleared call %d", order)


def _record_future_outcome(
    mock: MockContext, index: int, order: int, fut: asyncio.Future
) -> None:
    if fut.cancelled():
        settled = MockSettledResult(SettledType.REJECTED, asyncio.CancelledError())
    elif (error := fut.exception()) is not None:
        settled = MockSettledResult(SettledType.REJECTED, error)
    else:
        settled = MockSettledResult(SettledType.FULFILLED, fut.result())
    _store_outcome(mock, index, order, settled=settled)


async def _track_settlement(
    mock: MockContext, index: int, order: int, awaitable: t.Awaitable[t.Any]
) -> t.Any:  # noqa: ANN401 - mirrors the wrapped awaitable
    try:
        value = await awaitable
    except BaseException as err:
        rejected = MockSettledResult(SettledType.REJECTED, err)
        _store_outcome(mock, index, order, settled=rejected)
        raise
    fulfilled = MockSettledResult(SettledType.FULFILLED, value)
    _store_outcome(mock, index, order, settled=fulfilled)
    return value


def _run_implementation(
    impl: t.Callable[..., t.Any],
    mock: MockContext,
    index: int,
    args: tuple[t.Any, ...],
    kwargs: dict[str, t.Any],
) -> t.Any:  # noqa: ANN401 - whatever the implementation returns
    order = mock.invocation_call_order[index]
    try:
        value = impl(*args, **kwargs)
    except Exception as err:
        _store_outcome(mock, index, order, *raised(err))
        raise

    if asyncio.isfuture(value):
        value.add_done_callback(
            functools.partial(_record_future_outcome, mock, index, order)
        )
    elif inspect.iscoroutine(value):
        # Coroutines have no completion hook; the caller gets the tracked
        # wrapper and the registry records that same object.
        value = _track_settlement(mock, index, order, value)
    elif not inspect.isawaitable(value) or _is_chain_node(value):
        _store_outcome(mock, index, order, *returned(value))
        return value

    # Awaitables stay ``incomplete`` until a tracked settlement arrives.
    _store_outcome(mock, index, order, returned(value)[0])
    return value


def invoke(
    store: PathStateStore,
    path: Path,
    node: t.Any,  # noqa: ANN401 - the node returned for chaining
    args: tuple[t.Any, ...],
    kwargs: dict[str, t.Any],
    context: t.Any = None,  # noqa: ANN401 - receiver may be any node
) -> t.Any:  # noqa: ANN401 - configured payload or *node*
    """Record a call on *path* and return what the caller should receive.

    Returns the configured implementation's result, the configured return
    value, or *node* itself when nothing synchronous is configured.
    """
    mock = store.get_or_create(path).mock
    index = mock.record(args, kwargs, context)

    source = find_sync_state(store, path)
    if source is None:
        return node

    impl = source.next_implementation()
    if impl is not None:
        return _run_implementation(impl, mock, index, args, kwargs)

    value = source.next_return_value()
    mock.set_outcome(index, *returned(value))
    return value


def as_exception(value: t.Any) -> BaseException | type[BaseException]:  # noqa: ANN401
    """Return *value* in a form that can be raised."""
    if isinstance(value, BaseException):
        return value
    if isinstance(value, type) and issubclass(value, BaseException):
        return value
    return MockRejection(value)


@dc.dataclass(slots=True, frozen=True)
class Settlement:
    """Outcome of awaiting a node."""

    rejected: bool
    value: t.Any = None

    def unwrap(self) -> t.Any:  # noqa: ANN401 - configured payload
        """Return the fulfilled value or raise the rejection."""
        if self.rejected:
            raise as_exception(self.value)
        return self.value


def _mark_last_call(mock: MockContext, rejected: bool, value: t.Any) -> None:  # noqa: ANN401, FBT001
    if not mock.results or mock.results[-1].type is not ResultType.INCOMPLETE:
        return
    result, settled = raised(value) if rejected else returned(value)
    mock.set_outcome(len(mock.results) - 1, result, settled)


def settle(store: PathStateStore, path: Path) -> Settlement:
    """Resolve an await on *path* and record the outcome on its last call."""
    own = store.get_or_create(path)
    source = find_async_state(store, path) or own

    if source.has_rejection:
        outcome = Settlement(rejected=True, value=source.next_rejected_value())
    else:
        outcome = Settlement(rejected=False, value=source.next_resolved_value())

    _mark_last_call(own.mock, outcome.rejected, outcome.value)
    logger.debug(
        "Settled await on %r: %s %r",
        ".".join(path),
        "rejected" if outcome.rejected else "fulfilled",
        outcome.value,
    )
    return outcome


__all__ = [
    "Settlement",
    "as_exception",
    "find_async_state",
    "find_sync_state",
    "invoke",
    "settle",
]
