"""Pytest plugin providing the ``chain_mock`` fixture."""

from __future__ import annotations

import logging
import typing as t

import pytest

from .lifecycle import reset_all_mocks, unregister
from .node import ChainMock, create

logger = logging.getLogger(__name__)


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line and ini options for the plugin."""
    group = parser.getgroup("chain_mock")
    group.addoption(
        "--chain-mock-reset-all",
        action="store_true",
        dest="chain_mock_reset_all",
        default=None,
        help=(
            "Reset every chain mock after each test. Overrides the pytest.ini "
            "setting."
        ),
    )
    group.addoption(
        "--no-chain-mock-reset-all",
        action="store_false",
        dest="chain_mock_reset_all",
        default=None,
        help=(
            "Leave chain mocks created outside the fixture untouched after each "
            "test. Overrides the pytest.ini setting."
        ),
    )
    parser.addini(
        "chain_mock_reset_all",
        "Reset every chain mock after each test that uses the chain_mock fixture.",
        type="bool",
        default=True,
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register plugin-specific markers."""
    config.addinivalue_line(
        "markers",
        (
            "chain_mock(reset_all: bool = True): override whether every chain "
            "mock is reset after a single test."
        ),
    )


def _reset_all_enabled(request: pytest.FixtureRequest) -> bool:
    """Return whether teardown should reset every registered chain mock."""
    # Priority order: marker > CLI option > INI setting
    marker = request.node.get_closest_marker("chain_mock")
    if marker is not None and "reset_all" in marker.kwargs:
        return bool(marker.kwargs["reset_all"])

    config = request.config
    cli_value = config.getoption("chain_mock_reset_all")
    if cli_value is not None:
        return bool(cli_value)

    return bool(config.getini("chain_mock_reset_all"))


@pytest.fixture
def chain_mock(request: pytest.FixtureRequest) -> t.Generator[ChainMock, None, None]:
    """Provide a fresh root chain mock, reset after the test."""
    reset_all = _reset_all_enabled(request)
    mock = create()
    try:
        yield mock
    finally:
        _teardown_chain_mock(mock, reset_all=reset_all)


def _teardown_chain_mock(mock: ChainMock, *, reset_all: bool) -> None:
    """Reset *mock*, and every other chain mock when *reset_all* is set."""
    try:
        if reset_all:
            reset_all_mocks()
        else:
            mock.mock_reset()
            unregister(mock)
    except Exception:
        logger.exception("Error during chain_mock fixture cleanup")
        pytest.fail("chain_mock fixture cleanup failed")
