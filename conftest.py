"""Global test configuration and shared fixtures."""

from __future__ import annotations

import typing as t

import pytest

import chain_mock.lifecycle

pytest_plugins = ("pytester", "chain_mock.pytest_plugin")


@pytest.fixture(autouse=True)
def reset_chain_mock_registry() -> t.Generator[None, None, None]:
    """Ensure every test starts and ends with an empty chain mock registry."""
    chain_mock.lifecycle.reset_all_mocks()
    yield
    chain_mock.lifecycle.reset_all_mocks()
