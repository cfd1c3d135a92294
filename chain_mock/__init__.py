"""Mocks for fluent and chainable APIs with chain-wide call assertions.

A single :func:`create` call stands in for an entire fluent API: every
attribute access returns a cached node for the extended path, calls are
recorded per path, and awaiting any node resolves to the nearest configured
value up the chain.
"""

from __future__ import annotations

from .assertions import ChainExpectation, chain_matchers, expect, register_matcher
from .comparators import Any, Contains, IsA, Predicate, Regex, StartsWith
from .errors import ChainMockError, ChainMockUsageError, MockRejection
from .lifecycle import clear_all_mocks, reset_all_mocks
from .matchers import (
    Args,
    MatchResult,
    chain_called,
    chain_called_exactly_once,
    chain_called_exactly_once_with,
    chain_called_times,
    chain_called_with,
    last_chain_called_with,
    nth_chain_called_with,
)
from .node import ChainMock, chain_mocked, chain_path, create, is_chain_mock
from .pytest_plugin import chain_mock as chain_mock_fixture
from .registry import (
    MockContext,
    MockResult,
    MockSettledResult,
    ResultType,
    SettledType,
)

__all__ = [
    "Any",
    "Args",
    "ChainExpectation",
    "ChainMock",
    "ChainMockError",
    "ChainMockUsageError",
    "Contains",
    "IsA",
    "MatchResult",
    "MockContext",
    "MockRejection",
    "MockResult",
    "MockSettledResult",
    "Predicate",
    "Regex",
    "ResultType",
    "SettledType",
    "StartsWith",
    "chain_called",
    "chain_called_exactly_once",
    "chain_called_exactly_once_with",
    "chain_called_times",
    "chain_called_with",
    "chain_matchers",
    "chain_mock_fixture",
    "chain_mocked",
    "chain_path",
    "clear_all_mocks",
    "create",
    "expect",
    "is_chain_mock",
    "last_chain_called_with",
    "nth_chain_called_with",
    "register_matcher",
    "reset_all_mocks",
]
