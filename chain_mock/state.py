"""Configuration and call history bound to a single chain path."""

from __future__ import annotations

import dataclasses as dc
import typing as t
from collections import deque

from .registry import MockContext

Path = tuple[str, ...]

DEFAULT_MOCK_NAME = "chain_mock()"


class _Unset:
    """Marker for a value that has not been configured."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: t.Final = _Unset()


@dc.dataclass(slots=True)
class PathState:
    """Mutable state for one path in the chain."""

    mock: MockContext = dc.field(default_factory=MockContext)
    resolved_value: t.Any = UNSET
    resolved_value_queue: deque[t.Any] = dc.field(default_factory=deque)
    rejected_value: t.Any = UNSET
    rejected_value_queue: deque[t.Any] = dc.field(default_factory=deque)
    return_value: t.Any = UNSET
    return_value_queue: deque[t.Any] = dc.field(default_factory=deque)
    implementation: t.Callable[..., t.Any] | None = None
    implementation_queue: deque[t.Callable[..., t.Any]] = dc.field(
        default_factory=deque
    )
    name: str = DEFAULT_MOCK_NAME

    @property
    def has_sync_behavior(self) -> bool:
        """Return ``True`` when a call on this path should not keep chaining."""
        return bool(
            self.implementation_queue
            or self.implementation is not None
            or self.return_value_queue
            or self.return_value is not UNSET
        )

    @property
    def has_rejection(self) -> bool:
        """Return ``True`` when awaiting should reject."""
        return bool(self.rejected_value_queue) or self.rejected_value is not UNSET

    @property
    def has_resolution(self) -> bool:
        """Return ``True`` when awaiting should fulfil with a configured value."""
        return bool(self.resolved_value_queue) or self.resolved_value is not UNSET

    @property
    def has_async_outcome(self) -> bool:
        """Return ``True`` when awaiting this path has a configured outcome."""
        return self.has_rejection or self.has_resolution

    def next_implementation(self) -> t.Callable[..., t.Any] | None:
        """Pop the next one-shot implementation or return the persistent one."""
        if self.implementation_queue:
            return self.implementation_queue.popleft()
        return self.implementation

    def next_return_value(self) -> t.Any:  # noqa: ANN401 - configured payload
        """Pop the next one-shot return value or return the persistent one."""
        if self.return_value_queue:
            return self.return_value_queue.popleft()
        return self.return_value

    def next_rejected_value(self) -> t.Any:  # noqa: ANN401 - configured payload
        """Pop the next one-shot rejection or return the persistent one."""
        if self.rejected_value_queue:
            return self.rejected_value_queue.popleft()
        return self.rejected_value

    def next_resolved_value(self) -> t.Any:  # noqa: ANN401 - configured payload
        """Pop the next one-shot resolution, else the persistent one, else ``None``."""
        if self.resolved_value_queue:
            return self.resolved_value_queue.popleft()
        if self.resolved_value is not UNSET:
            return self.resolved_value
        return None


class PathStateStore:
    """Lazily created mapping from :data:`Path` to :class:`PathState`."""

    __slots__ = ("_states",)

    def __init__(self) -> None:
        self._states: dict[Path, PathState] = {}

    def get(self, path: Path) -> PathState | None:
        """Return the state for *path* without creating it."""
        return self._states.get(path)

    def get_or_create(self, path: Path) -> PathState:
        """Return the state for *path*, creating it on first access."""
        state = self._states.get(path)
        if state is None:
            state = PathState()
            self._states[path] = state
        return state

    def lineage(self, path: Path) -> t.Iterator[PathState]:
        """Yield existing states from *path* up to and including the root."""
        for end in range(len(path), -1, -1):
            state = self._states.get(path[:end])
            if state is not None:
                yield state

    def clear_history(self) -> None:
        """Erase the call registry of every path, keeping configuration."""
        for state in self._states.values():
            state.mock.clear()

    def reset(self) -> None:
        """Forget every path."""
        self._states.clear()

    def __len__(self) -> int:
        """Return the number of known paths."""
        return len(self._states)

    def __contains__(self, path: object) -> bool:
        """Return ``True`` when *path* has state."""
        return path in self._states


__all__ = ["DEFAULT_MOCK_NAME", "UNSET", "Path", "PathState", "PathStateStore"]
