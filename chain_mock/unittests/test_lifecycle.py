"""Unit tests for clear/reset semantics and the bulk registry."""

from __future__ import annotations

import pytest

from chain_mock import (
    ChainMockUsageError,
    clear_all_mocks,
    create,
    expect,
    reset_all_mocks,
)
from chain_mock.lifecycle import registered_mocks, unregister
from chain_mock.unittests._await_helpers import resolve


def test_clear_keeps_configured_values() -> None:
    """``mock_clear`` erases calls but the configured value still applies."""
    m = create()
    m.digest.mock_return_value("abc")
    assert m.digest() == "abc"
    assert m.mock_clear() is m
    assert m.digest.mock.calls == []
    assert m.digest.mock.results == []
    assert m.digest.mock.invocation_call_order == []
    assert m.digest() == "abc"


def test_clear_keeps_node_identity() -> None:
    """Clearing does not discard cached nodes."""
    m = create()
    where = m.select.where
    m.mock_clear()
    assert m.select.where is where


def test_reset_erases_configuration_and_calls() -> None:
    """After ``mock_reset`` calls chain again and awaits resolve to ``None``."""
    m = create()
    m.digest.mock_return_value("abc")
    m.mock_resolved_value("rows")
    m.digest()
    assert m.mock_reset() is m
    assert m.digest.mock.calls == []
    assert m.digest() is m.digest
    assert resolve(m.query()) is None


def test_reset_discards_child_identity_but_keeps_root() -> None:
    """Only a full reset clears path identity; the root survives it."""
    m = create()
    child = m.a.b
    m.mock_name("db")
    m.mock_reset()
    assert m.a.b is not child
    assert m.a.b is m.a.b
    assert m.get_mock_name() == "chain_mock()"


def test_stale_nodes_see_fresh_state_after_reset() -> None:
    """Nodes kept across a reset still address their path's current state."""
    m = create()
    stale = m.select
    stale("id")
    m.mock_reset()
    assert stale.mock.calls == []
    stale("name")
    assert m.select.mock.calls == [("name",)]


def test_descending_from_a_stale_node_records_the_current_parent() -> None:
    """Children reached through a pre-reset node belong to the current tree."""
    m = create()
    stale = m.a
    m.mock_reset()
    stale.b("x")
    assert stale.b is m.a.b
    assert m.a.b.mock.contexts == [m.a]
    assert m.a.b.mock.contexts[0] is not stale


@pytest.mark.parametrize("operation", ["mock_clear", "mock_reset"])
def test_clear_and_reset_are_root_only(operation: str) -> None:
    """Scoped clear/reset would desynchronise segment call counts."""
    m = create()
    m.select("id").where("x")
    with pytest.raises(ChainMockUsageError, match="only supported on the root"):
        getattr(m.select.where, operation)()
    assert m.select.where.mock.calls == [("x",)]


def test_clear_from_root_restarts_chain_counts() -> None:
    """Chain assertions see a clean slate after clearing the root."""
    m = create()
    m.mock_resolved_value([{"id": 42}])
    expect(m.select.from_.where).not_.to_have_been_chain_called()

    assert resolve(m.select("id").from_("users").where("id = 42")) == [{"id": 42}]
    expect(m.select.from_.where).to_have_been_chain_called_once()

    m.mock_clear()
    assert resolve(m.select("id").from_("users").where("id = 42")) == [{"id": 42}]
    expect(m.select.from_.where).to_have_been_chain_called_once()


def test_create_registers_roots() -> None:
    """Every created root is tracked for bulk operations."""
    first = create()
    second = create()
    assert set(registered_mocks()) == {first, second}


def test_clear_all_mocks_keeps_registry_and_configuration() -> None:
    """Bulk clear erases calls of every mock without forgetting them."""
    first = create()
    second = create()
    first.a.mock_return_value(1)
    first.a()
    second.b()
    clear_all_mocks()
    assert first.a.mock.calls == []
    assert second.b.mock.calls == []
    assert first.a() == 1
    assert set(registered_mocks()) == {first, second}


def test_reset_all_mocks_resets_and_evicts() -> None:
    """Bulk reset erases everything and empties the registry."""
    first = create()
    second = create()
    first.a.mock_return_value(1)
    second.b()
    reset_all_mocks()
    assert registered_mocks() == []
    assert first.a() is first.a
    assert second.b.mock.calls == []


def test_unregister_excludes_from_bulk_operations() -> None:
    """Unregistered roots are left alone by bulk operations."""
    kept = create()
    kept.a()
    unregister(kept)
    unregister(kept)
    clear_all_mocks()
    assert kept.a.mock.calls == [()]
