"""The chain mock node and its factory.

Every attribute access on a :class:`ChainMock` returns the node for the
extended path, so arbitrarily deep fluent APIs can be mocked without nesting
mock objects by hand::

    db = create()
    db.select.from_.where.mock_resolved_value([{"id": 42}])

    rows = await db.select("id").from_("users").where("id = 42")

    expect(db.select.from_.where).to_have_been_chain_called_with(
        ["id"], ["users"], ["id = 42"]
    )
"""

from __future__ import annotations

import logging
import typing as t

from . import lifecycle
from .errors import ChainMockUsageError
from .resolution import as_exception, invoke, settle
from .state import PathStateStore

if t.TYPE_CHECKING:  # pragma: no cover - used only for typing
    from .registry import MockContext
    from .state import Path

logger = logging.getLogger(__name__)

_T = t.TypeVar("_T")


class _MockTree:
    """Path states and node cache shared by every node of one mock."""

    __slots__ = ("nodes", "root", "states")

    def __init__(self) -> None:
        self.states = PathStateStore()
        self.nodes: dict[Path, ChainMock] = {}
        self.root = self.node(())

    def node(self, path: Path) -> ChainMock:
        node = self.nodes.get(path)
        if node is None:
            self.states.get_or_create(path)
            node = ChainMock(self, path)
            self.nodes[path] = node
        return node

    def parent(self, path: Path) -> ChainMock | None:
        """Return the current node one level above *path*, ``None`` for the root."""
        return self.node(path[:-1]) if path else None

    def reset(self) -> None:
        self.states.reset()
        self.nodes.clear()
        self.nodes[()] = self.root
        self.states.get_or_create(())


class ChainMock:
    """Callable, awaitable mock standing in for every path of a fluent API.

    Attribute access descends to the child path and is cached, so
    ``mock.a.b is mock.a.b``. Names starting with an underscore and names
    shadowed by the ``mock_*`` configuration API can still be reached with
    indexing: ``mock["_private"]``, ``mock["mock"]``.
    """

    __slots__ = ("_path", "_tree")

    _chain_mock_node: t.ClassVar[bool] = True

    # ``__getitem__`` descends, so iteration must not fall back to it.
    __iter__ = None

    def __init__(self, tree: _MockTree, path: Path) -> None:
        self._tree = tree
        self._path = path

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------
    def __getattr__(self, name: str) -> ChainMock:
        """Return the node for ``path + (name,)``."""
        if name.startswith("_"):
            raise AttributeError(name)
        return self._tree.node((*self._path, name))

    def __getitem__(self, name: str) -> ChainMock:
        """Return the child node called *name*, including reserved names."""
        if not isinstance(name, str):
            msg = f"chain mock paths are strings, got {type(name).__name__}"
            raise TypeError(msg)
        return self._tree.node((*self._path, name))

    @property
    def mock(self) -> MockContext:
        """Return the call registry for this path."""
        return self._tree.states.get_or_create(self._path).mock

    # ------------------------------------------------------------------
    # Invocation and awaiting
    # ------------------------------------------------------------------
    def __call__(self, *args: t.Any, **kwargs: t.Any) -> t.Any:  # noqa: ANN401
        """Record the call and return a configured value or this node."""
        parent = self._tree.parent(self._path)
        return invoke(self._tree.states, self._path, self, args, kwargs, context=parent)

    def __await__(self) -> t.Generator[t.Any, None, t.Any]:
        """Resolve to the nearest configured value, or raise its rejection."""
        return settle(self._tree.states, self._path).unwrap()
        yield  # pragma: no cover - makes ``__await__`` a generator

    def then(
        self,
        on_fulfilled: t.Callable[[t.Any], t.Any] | None = None,
        on_rejected: t.Callable[[t.Any], t.Any] | None = None,
    ) -> t.Any:  # noqa: ANN401 - whatever the callback returns
        """Settle now and pass the outcome to the matching callback.

        Without a matching callback the fulfilled value is returned and a
        rejection is raised.
        """
        outcome = settle(self._tree.states, self._path)
        if outcome.rejected:
            if on_rejected is None:
                raise as_exception(outcome.value)
            return on_rejected(outcome.value)
        if on_fulfilled is None:
            return outcome.value
        return on_fulfilled(outcome.value)

    def catch(self, on_rejected: t.Callable[[t.Any], t.Any]) -> ChainMock:
        """Return this node unchanged."""
        del on_rejected
        return self

    def finally_(self, on_finally: t.Callable[[], t.Any]) -> ChainMock:
        """Run *on_finally* immediately and return this node."""
        on_finally()
        return self

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def _configure(self, field: str, value: t.Any) -> ChainMock:  # noqa: ANN401
        state = self._tree.states.get_or_create(self._path)
        setattr(state, field, value)
        logger.debug("Configured %s on %r", field, self)
        return self

    def _enqueue(self, field: str, value: t.Any) -> ChainMock:  # noqa: ANN401
        state = self._tree.states.get_or_create(self._path)
        getattr(state, field).append(value)
        logger.debug("Queued %s on %r", field, self)
        return self

    def mock_resolved_value(self, value: t.Any) -> ChainMock:  # noqa: ANN401
        """Resolve every await reaching this path with *value*."""
        return self._configure("resolved_value", value)

    def mock_resolved_value_once(self, value: t.Any) -> ChainMock:  # noqa: ANN401
        """Resolve the next await reaching this path with *value*."""
        return self._enqueue("resolved_value_queue", value)

    def mock_rejected_value(self, error: t.Any) -> ChainMock:  # noqa: ANN401
        """Reject every await reaching this path with *error*."""
        return self._configure("rejected_value", error)

    def mock_rejected_value_once(self, error: t.Any) -> ChainMock:  # noqa: ANN401
        """Reject the next await reaching this path with *error*."""
        return self._enqueue("rejected_value_queue", error)

    def mock_return_value(self, value: t.Any) -> ChainMock:  # noqa: ANN401
        """Return *value* synchronously from every call, ending the chain."""
        return self._configure("return_value", value)

    def mock_return_value_once(self, value: t.Any) -> ChainMock:  # noqa: ANN401
        """Return *value* synchronously from the next call."""
        return self._enqueue("return_value_queue", value)

    def mock_implementation(self, fn: t.Callable[..., t.Any]) -> ChainMock:
        """Run *fn* with the call arguments on every call."""
        return self._configure("implementation", fn)

    def mock_implementation_once(self, fn: t.Callable[..., t.Any]) -> ChainMock:
        """Run *fn* with the call arguments on the next call."""
        return self._enqueue("implementation_queue", fn)

    def mock_name(self, name: str) -> ChainMock:
        """Set the display name of this path."""
        return self._configure("name", name)

    def get_mock_name(self) -> str:
        """Return the display name of this path."""
        return self._tree.states.get_or_create(self._path).name

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def _require_root(self, operation: str) -> None:
        if self._path:
            msg = (
                f"{operation}() is only supported on the root chain mock, "
                f"not on {'.'.join(self._path)!r}; clearing part of a chain "
                "would desynchronise call counts between segments"
            )
            raise ChainMockUsageError(msg)

    def mock_clear(self) -> ChainMock:
        """Erase recorded calls on every path, keeping configured values."""
        self._require_root("mock_clear")
        self._tree.states.clear_history()
        logger.debug("Cleared call history of %r", self)
        return self

    def mock_reset(self) -> ChainMock:
        """Erase recorded calls, configured values and child nodes."""
        self._require_root("mock_reset")
        self._tree.reset()
        logger.debug("Reset %r", self)
        return self

    def __repr__(self) -> str:
        """Return a debug representation."""
        name = self._tree.states.get_or_create(self._path).name
        if not self._path:
            return f"<ChainMock name={name!r}>"
        return f"<ChainMock name={name!r} path={'.'.join(self._path)!r}>"


# ``finally`` is a keyword, so the alias is only reachable with ``getattr``.
setattr(ChainMock, "finally", ChainMock.finally_)  # noqa: B010


def create() -> ChainMock:
    """Create a root chain mock and register it for bulk operations."""
    root = _MockTree().root
    lifecycle.register(root)
    return root


def chain_path(node: ChainMock) -> Path:
    """Return the names accessed from the root to reach *node*."""
    return node._path  # noqa: SLF001 - module-private accessor


def segment_registries(node: ChainMock) -> list[tuple[str, MockContext | None]]:
    """Return ``(dotted_name, registry)`` for every non-empty prefix of *node*.

    The registry is ``None`` for a prefix that has no state yet.
    """
    path = node._path  # noqa: SLF001
    states = node._tree.states  # noqa: SLF001
    segments: list[tuple[str, MockContext | None]] = []
    for end in range(1, len(path) + 1):
        state = states.get(path[:end])
        registry = None if state is None else state.mock
        segments.append((".".join(path[:end]), registry))
    return segments


def is_chain_mock(value: object) -> bool:
    """Return ``True`` when *value* is a chain mock node."""
    return isinstance(value, ChainMock)


def chain_mocked(value: _T) -> ChainMock:
    """Return *value* typed as a :class:`ChainMock`.

    Use on a module attribute that was replaced with :func:`create` through
    ``monkeypatch`` or :func:`unittest.mock.patch` to get the mock API back
    under a static type checker.
    """
    return t.cast("ChainMock", value)


__all__ = [
    "ChainMock",
    "chain_mocked",
    "chain_path",
    "create",
    "is_chain_mock",
    "segment_registries",
]
