"""Unit tests for :mod:`chain_mock.node` - traversal, identity and call recording."""

from __future__ import annotations

import inspect

import pytest

from chain_mock import ChainMock, chain_mocked, chain_path, create, is_chain_mock
from chain_mock.registry import MockContext, ResultType, SettledType


def test_root_is_callable_and_chainable() -> None:
    """Calling any path without configuration returns the same node."""
    m = create()
    assert m() is m
    assert m.select("id") is m.select
    assert m.select("id").from_("users").where("active") is m.select.from_.where


def test_attribute_access_is_cached_per_path() -> None:
    """Equal paths always yield the same node."""
    m = create()
    assert m.x.y is m.x.y
    assert m.x is not m.y
    assert m.x.y is not m.y.x


def test_configure_before_and_after_traversal_hits_same_state() -> None:
    """Nodes obtained before configuration see the configured behaviour."""
    m = create()
    where = m.select.where
    m.select.where.mock_return_value("rows")
    assert where() == "rows"


def test_indexing_descends_including_reserved_and_keyword_names() -> None:
    """Indexing reaches children that attribute access cannot."""
    m = create()
    assert m["from"] is m["from"]
    assert m["from"] is not m.from_
    assert isinstance(m["mock"], ChainMock)
    assert isinstance(m.mock, MockContext)
    m["mock"]("x")
    assert m["mock"].mock.calls == [("x",)]
    assert chain_path(m.select["_id"]) == ("select", "_id")


def test_indexing_rejects_non_string_keys() -> None:
    """Paths are made of names only."""
    m = create()
    with pytest.raises(TypeError, match="paths are strings"):
        m[0]  # type: ignore[index]


@pytest.mark.parametrize("name", ["_private", "__wrapped__", "__deepcopy__"])
def test_underscore_attributes_are_not_descended(name: str) -> None:
    """Private and dunder lookups raise ``AttributeError``."""
    m = create()
    with pytest.raises(AttributeError):
        getattr(m, name)
    assert not hasattr(m.select, name)


def test_nodes_refuse_attribute_assignment() -> None:
    """Nodes cannot grow ad-hoc attributes."""
    m = create()
    with pytest.raises(AttributeError):
        m.select = 1  # type: ignore[method-assign]


def test_nodes_are_not_iterable() -> None:
    """Iteration does not fall back to child lookup."""
    m = create()
    with pytest.raises(TypeError):
        iter(m)


def test_nodes_are_awaitable() -> None:
    """Every node honours the await protocol."""
    m = create()
    assert inspect.isawaitable(m)
    assert inspect.isawaitable(m.a.b)


def test_calls_recorded_positionally_in_order() -> None:
    """Registry length equals invocation count; arguments keep call order."""
    m = create()
    m.select("id", "name")
    m.select("email")
    m.select()
    assert m.select.mock.calls == [("id", "name"), ("email",), ()]
    assert len(m.select.mock) == 3
    assert m.select.mock.last_call == ()


def test_keyword_arguments_recorded_separately() -> None:
    """Keyword arguments land in ``call_kwargs`` beside ``calls``."""
    m = create()
    m.find("users", limit=10)
    assert m.find.mock.calls == [("users",)]
    assert m.find.mock.call_kwargs == [{"limit": 10}]


def test_each_path_has_its_own_registry() -> None:
    """Calls on a child do not show up on the parent."""
    m = create()
    m.select("id").from_("users")
    assert m.mock.calls == []
    assert m.select.mock.calls == [("id",)]
    assert m.select.from_.mock.calls == [("users",)]
    assert m.from_.mock.calls == []


def test_root_calls_are_tracked() -> None:
    """The root itself is callable and recorded."""
    m = create()
    m("a")
    m("b")
    assert m.mock.calls == [("a",), ("b",)]
    assert m.mock.contexts == [None, None]


def test_last_call_is_none_before_any_call() -> None:
    """``last_call`` is ``None`` on an untouched path."""
    assert create().anything.mock.last_call is None


def test_contexts_record_the_receiver_node() -> None:
    """The receiver of a call is the node the method was reached from."""
    m = create()
    m.select("id").from_("users")
    assert m.select.mock.contexts == [m]
    assert m.select.from_.mock.contexts == [m.select]


def test_unresolved_calls_are_incomplete() -> None:
    """Chaining calls have no result until awaited."""
    m = create()
    m.select("id")
    assert m.select.mock.results[0].type is ResultType.INCOMPLETE
    assert m.select.mock.settled_results[0].type is SettledType.INCOMPLETE


def test_invocation_order_is_global_and_monotonic() -> None:
    """Invocation order numbers increase across independent mocks."""
    first = create()
    second = create()
    first.a()
    second.b()
    first.a()
    (a1, a2) = first.a.mock.invocation_call_order
    (b1,) = second.b.mock.invocation_call_order
    assert a1 < b1 < a2


def test_identity_helpers() -> None:
    """``is_chain_mock`` recognises nodes and ``chain_mocked`` is the identity."""
    m = create()
    assert is_chain_mock(m)
    assert is_chain_mock(m.a.b)
    assert not is_chain_mock(object())
    assert not is_chain_mock(m.mock)
    assert chain_mocked(m.a) is m.a
    assert chain_path(m) == ()
    assert chain_path(m.a.b) == ("a", "b")


def test_mock_name_is_per_path() -> None:
    """Names are stored per path and show up in ``repr``."""
    m = create()
    assert m.get_mock_name() == "chain_mock()"
    assert m.mock_name("db") is m
    m.select.mock_name("select")
    assert m.get_mock_name() == "db"
    assert m.select.get_mock_name() == "select"
    assert m.where.get_mock_name() == "chain_mock()"
    assert repr(m) == "<ChainMock name='db'>"
    assert repr(m.select) == "<ChainMock name='select' path='select'>"
    assert repr(m.where.limit) == "<ChainMock name='chain_mock()' path='where.limit'>"
