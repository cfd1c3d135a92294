"""Steps for testing the pytest plugin."""

from __future__ import annotations

import shutil
import subprocess
import sys
import tempfile
import textwrap
import typing as t
from pathlib import Path

from behave import given, then, when  # type: ignore[attr-defined]


class BehaveContext(t.Protocol):
    """Behave step context for plugin tests."""

    test_file: Path
    tmpdir: Path
    result: subprocess.CompletedProcess[str]


BASIC_USAGE = textwrap.dedent(
    """
    import asyncio

    from chain_mock import expect

    pytest_plugins = ("chain_mock.pytest_plugin",)

    def test_example(chain_mock):
        chain_mock.select.from_.where.mock_resolved_value([{"id": 42}])

        async def fetch():
            return await chain_mock.select("id").from_("users").where("id = 42")

        assert asyncio.run(fetch()) == [{"id": 42}]
        expect(chain_mock.select.from_.where).to_have_been_chain_called_with(
            ["id"], ["users"], ["id = 42"]
        )
    """
)

SHARED_MOCK = textwrap.dedent(
    """
    import pytest

    from chain_mock import create

    pytest_plugins = ("chain_mock.pytest_plugin",)

    shared = create()

    {marker}
    def test_configure(chain_mock):
        shared.query.mock_return_value("configured")
        assert shared.query() == "configured"
    """
)

EXPECT_RESET = textwrap.dedent(
    """

    def test_after_fixture_teardown():
        assert shared.query() is shared.query
        assert len(shared.query.mock.calls) == 1
    """
)

EXPECT_SURVIVE = textwrap.dedent(
    """

    def test_after_fixture_teardown():
        assert shared.query() == "configured"
    """
)


def _write_test_file(context: BehaveContext, source: str) -> None:
    tmpdir = Path(tempfile.mkdtemp())
    context.tmpdir = tmpdir
    context.test_file = tmpdir / "test_example.py"
    context.test_file.write_text(source)


@given("a temporary test file using the chain_mock fixture")
def step_create_test_file(context: BehaveContext) -> None:
    """Write a pytest file that exercises the fixture."""
    _write_test_file(context, BASIC_USAGE)


@given("a temporary test file expecting other chain mocks to be reset")
def step_create_reset_file(context: BehaveContext) -> None:
    """Write a file relying on the shared mock being reset."""
    _write_test_file(context, SHARED_MOCK.format(marker="") + EXPECT_RESET)


@given("a temporary test file expecting other chain mocks to survive")
def step_create_survive_file(context: BehaveContext) -> None:
    """Write a file relying on the shared mock surviving the fixture."""
    _write_test_file(context, SHARED_MOCK.format(marker="") + EXPECT_SURVIVE)


@given("a temporary test file marking the fixture test with reset_all disabled")
def step_create_marker_file(context: BehaveContext) -> None:
    """Write a file disabling the global reset with the marker."""
    marker = "@pytest.mark.chain_mock(reset_all=False)"
    _write_test_file(context, SHARED_MOCK.format(marker=marker) + EXPECT_SURVIVE)


@given("an ini file disabling chain_mock_reset_all")
def step_create_ini_file(context: BehaveContext) -> None:
    """Turn the global reset off in the ini file."""
    (context.tmpdir / "pytest.ini").write_text(
        "[pytest]\nchain_mock_reset_all = false\n"
    )


def _run_pytest(context: BehaveContext, *options: str) -> None:
    result = subprocess.run(  # noqa: S603
        [
            sys.executable,
            "-m",
            "pytest",
            "-p",
            "chain_mock.pytest_plugin",
            *options,
            str(context.test_file),
        ],
        capture_output=True,
        text=True,
        cwd=context.tmpdir,
    )
    context.result = result
    shutil.rmtree(context.tmpdir)


@when("I run pytest on the file")
def step_run_pytest(context: BehaveContext) -> None:
    """Execute pytest on the generated file."""
    _run_pytest(context)


@when('I run pytest on the file with "{option}"')
def step_run_pytest_with_option(context: BehaveContext, option: str) -> None:
    """Execute pytest on the generated file with an extra option."""
    _run_pytest(context, option)


@then("the run should pass")
def step_check_pass(context: BehaveContext) -> None:
    """Assert that pytest exited successfully."""
    assert context.result.returncode == 0  # noqa: S101
