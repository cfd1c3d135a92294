"""Asymmetric placeholders for matching recorded call arguments.

A placeholder compares equal to every value it accepts, so it can sit inside
the expected arguments given to a chain matcher::

    expect(db.select.where).to_have_been_chain_called_with(
        [Any()], [StartsWith("id =")]
    )

:data:`unittest.mock.ANY` works the same way.
"""

from __future__ import annotations

import re
import typing as t


class Comparator:
    """Base class for placeholders that match through ``==``."""

    def matches(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""
        raise NotImplementedError

    def __call__(self, value: object) -> bool:
        """Return ``True`` if *value* satisfies the comparison."""
        return self.matches(value)

    def __eq__(self, other: object) -> bool:
        """Compare equal to every accepted value."""
        return self.matches(other)

    def __ne__(self, other: object) -> bool:
        """Invert :meth:`__eq__`."""
        return not self.matches(other)

    __hash__ = None  # type: ignore[assignment]


class Any(Comparator):
    """Match any value."""

    def matches(self, value: object) -> bool:
        """Return ``True`` for any input."""
        return True

    def __repr__(self) -> str:
        """Return a debug representation."""
        return "Any()"


class IsA(Comparator):
    """Match instances of ``typ``."""

    def __init__(self, typ: type | tuple[type, ...]) -> None:
        self.typ = typ

    def matches(self, value: object) -> bool:
        """Return ``True`` when ``value`` is an instance of ``typ``."""
        return isinstance(value, self.typ)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"IsA(typ={self.typ!r})"


class Regex(Comparator):
    """Match strings in which ``pattern`` is found."""

    def __init__(self, pattern: str) -> None:
        self._pattern = re.compile(pattern)

    def matches(self, value: object) -> bool:
        """Return ``True`` if *value* is a string the regex matches."""
        return isinstance(value, str) and bool(self._pattern.search(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Regex(pattern={self._pattern.pattern!r})"


class Contains(Comparator):
    """Match containers holding ``item`` (substrings for strings)."""

    def __init__(self, item: object) -> None:
        self.item = item

    def matches(self, value: object) -> bool:
        """Return ``True`` if ``item`` is in *value*."""
        try:
            return self.item in value  # type: ignore[operator]
        except TypeError:
            return False

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Contains(item={self.item!r})"


class StartsWith(Comparator):
    """Match strings beginning with ``prefix``."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    def matches(self, value: object) -> bool:
        """Return ``True`` if *value* is a string starting with ``prefix``."""
        return isinstance(value, str) and value.startswith(self.prefix)

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"StartsWith(prefix={self.prefix!r})"


class Predicate(Comparator):
    """Use a custom ``func`` to determine a match."""

    def __init__(self, func: t.Callable[[t.Any], object]) -> None:
        self.func = func

    def matches(self, value: object) -> bool:
        """Return ``True`` if ``func(value)`` is truthy."""
        return bool(self.func(value))

    def __repr__(self) -> str:
        """Return a debug representation."""
        return f"Predicate(func={self.func!r})"


__all__ = [
    "Any",
    "Comparator",
    "Contains",
    "IsA",
    "Predicate",
    "Regex",
    "StartsWith",
]
