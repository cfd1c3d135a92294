"""Step definitions for chain mock behavioural tests."""
# pyright: reportMissingImports=false, reportUnknownMemberType=false

from __future__ import annotations

import asyncio
import functools
import typing as t

from behave import given, then, when  # type: ignore[attr-defined]

from chain_mock import ChainMock, MockRejection, create, expect


class BehaveContext(t.Protocol):
    """Behave step context with attributes used in tests."""

    db: ChainMock
    awaited: object
    rejection: MockRejection | None
    returns: list[object]


def _node(db: ChainMock, path: str) -> ChainMock:
    return functools.reduce(getattr, path.split("."), db)


async def _await(node: t.Awaitable[object]) -> object:
    return await node


def _per_segment(args: str) -> list[list[str]]:
    return [[arg] for arg in args.split("|")]


@given("a chain mock")
def step_create_chain_mock(context: BehaveContext) -> None:
    """Create a fresh root chain mock for the scenario."""
    context.db = create()


@given('"{path}" resolves to "{value}"')
def step_resolves_to(context: BehaveContext, path: str, value: str) -> None:
    """Configure the awaited value of *path*."""
    _node(context.db, path).mock_resolved_value(value)


@given('"{path}" rejects with "{value}"')
def step_rejects_with(context: BehaveContext, path: str, value: str) -> None:
    """Configure the rejection of *path*."""
    _node(context.db, path).mock_rejected_value(value)


@given('"{path}" returns "{value}" once')
def step_returns_once(context: BehaveContext, path: str, value: str) -> None:
    """Queue a one-shot return value on *path*."""
    _node(context.db, path).mock_return_value_once(value)


@given('"{path}" returns "{value}"')
def step_returns(context: BehaveContext, path: str, value: str) -> None:
    """Configure the persistent return value of *path*."""
    _node(context.db, path).mock_return_value(value)


@when('I await "{path}" called with "{args}"')
def step_await_chain(context: BehaveContext, path: str, args: str) -> None:
    """Call every segment with one argument and await the last node."""
    node = context.db
    for segment, arg in zip(path.split("."), args.split("|"), strict=True):
        node = getattr(node, segment)(arg)
    context.awaited = None
    context.rejection = None
    try:
        context.awaited = asyncio.run(_await(node))
    except MockRejection as err:
        context.rejection = err


@when('I call "{path}" {count:d} times')
def step_call_repeatedly(context: BehaveContext, path: str, count: int) -> None:
    """Call *path* without arguments *count* times."""
    context.returns = [_node(context.db, path)() for _ in range(count)]


@when("I clear the chain mock")
def step_clear(context: BehaveContext) -> None:
    """Erase the recorded calls."""
    context.db.mock_clear()


@when("I reset the chain mock")
def step_reset(context: BehaveContext) -> None:
    """Erase calls and configuration."""
    context.db.mock_reset()


@then('the awaited value is "{value}"')
def step_check_awaited(context: BehaveContext, value: str) -> None:
    """The chain resolved to *value*."""
    assert context.rejection is None  # noqa: S101
    assert context.awaited == value  # noqa: S101


@then("the awaited value is None")
def step_check_awaited_none(context: BehaveContext) -> None:
    """The chain resolved to ``None``."""
    assert context.rejection is None  # noqa: S101
    assert context.awaited is None  # noqa: S101


@then('awaiting failed with "{value}"')
def step_check_rejection(context: BehaveContext, value: str) -> None:
    """Awaiting rejected with *value*."""
    assert context.rejection is not None  # noqa: S101
    assert context.rejection.value == value  # noqa: S101


@then('the return values are "{values}"')
def step_check_returns(context: BehaveContext, values: str) -> None:
    """Each call returned the expected value in order."""
    assert context.returns == values.split("|")  # noqa: S101


@then('calling "{path}" returns "{value}"')
def step_check_call_returns(context: BehaveContext, path: str, value: str) -> None:
    """A fresh call returns *value*."""
    assert _node(context.db, path)() == value  # noqa: S101


@then('"{path}" was chain called with "{args}"')
def step_check_called_with(context: BehaveContext, path: str, args: str) -> None:
    """Every segment received its argument on the same call."""
    expect(_node(context.db, path)).to_have_been_chain_called_with(
        *_per_segment(args)
    )


@then('"{path}" was chain called once')
def step_check_called_once(context: BehaveContext, path: str) -> None:
    """Every segment was called exactly once."""
    expect(_node(context.db, path)).to_have_been_chain_called_once()


@then('"{path}" was chain called {count:d} times')
def step_check_called_times(context: BehaveContext, path: str, count: int) -> None:
    """Every segment was called *count* times."""
    expect(_node(context.db, path)).to_have_been_chain_called_times(count)


@then(
    'asserting "{path}" was chain called with "{args}" fails mentioning "{text}"'
)
def step_check_failure_message(
    context: BehaveContext, path: str, args: str, text: str
) -> None:
    """The failed assertion names *text*."""
    try:
        expect(_node(context.db, path)).to_have_been_chain_called_with(
            *_per_segment(args)
        )
    except AssertionError as err:
        assert text in str(err)  # noqa: S101
    else:
        msg = "expected the chain assertion to fail"
        raise AssertionError(msg)
