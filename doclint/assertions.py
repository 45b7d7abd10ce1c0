"""Assertion helpers used by operators to signal lint violations."""

from __future__ import annotations

from collections.abc import Mapping, Sized
from typing import Any


class AssertionFailure(AssertionError):
    """A lint violation raised by an operator check.

    Only this type is turned into a LintResult by the evaluator; any other
    exception escaping an operator is an engine fault.
    """

    def __init__(
        self,
        kind: str,
        message: str,
        *,
        expected: Any = None,
        actual: Any = None,
    ):
        self.kind = kind
        self.message = message
        self.expected = expected
        self.actual = actual
        super().__init__(message)


def is_empty(value: Any) -> bool:
    """None, and strings/sequences/mappings of length 0, are empty."""
    if value is None:
        return True
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def ensure(
    condition: bool,
    kind: str,
    message: str,
    *,
    expected: Any = None,
    actual: Any = None,
) -> None:
    if not condition:
        raise AssertionFailure(kind, message, expected=expected, actual=actual)


def fail(kind: str, message: str, **kwargs: Any) -> None:
    raise AssertionFailure(kind, message, **kwargs)


def ensure_has_property(obj: Mapping[str, Any], name: str, kind: str) -> None:
    ensure(name in obj, kind, f"expected object to have property {name!r}", expected=name)


def ensure_not_empty(value: Any, name: str, kind: str) -> None:
    ensure(not is_empty(value), kind, f"expected property {name!r} not to be empty", actual=value)
