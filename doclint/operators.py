from __future__ import annotations

from collections.abc import Mapping
from contextlib import AbstractContextManager
from functools import cmp_to_key
from typing import Any, Callable

from .assertions import ensure, ensure_has_property, ensure_not_empty, fail
from .schema import (
    Alphabetical,
    AnyOf,
    ExactLength,
    ExactlyOne,
    NotContain,
    NotEndWith,
    Operator,
    Pattern,
    PropertyCount,
    Rule,
    Truthy,
)


# Each ``with recording():`` block turns an AssertionFailure into one LintResult.
Recorder = Callable[[], AbstractContextManager[None]]
CheckFn = Callable[[Any, Mapping[str, Any], Rule, Recorder], None]


def _message(rule: Rule, fallback: str) -> str:
    return rule.description or fallback


def check_truthy(op: Truthy, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    for name in op.properties:
        with recording():
            ensure_has_property(obj, name, "truthy")
            ensure_not_empty(obj[name], name, "truthy")


def _keyed_compare(key: str) -> Callable[[Any, Any], int]:
    def compare(a: Any, b: Any) -> int:
        left = a.get(key) if isinstance(a, Mapping) else None
        right = b.get(key) if isinstance(b, Mapping) else None
        if left is None or right is None:
            return 0
        if left < right:
            return -1
        if left > right:
            return 1
        return 0

    return compare


def _string_form(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Mapping):
        return "[object Object]"
    if isinstance(value, (list, tuple)):
        return ",".join(_string_form(v) for v in value)
    return str(value)


def _default_sort_key(value: Any) -> str:
    """Default ordering compares string forms, so ``[10, 9]`` is sorted and None sorts as ``"null"``."""
    return "null" if value is None else _string_form(value)


def check_alphabetical(op: Alphabetical, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    for name in op.properties:
        value = obj.get(name)
        if not value or len(value) < 2:
            continue

        # sorted() is stable, so elements with equal keys keep their order.
        if op.keyed_by:
            expected = sorted(value, key=cmp_to_key(_keyed_compare(op.keyed_by)))
        else:
            expected = sorted(value, key=_default_sort_key)

        with recording():
            ensure_has_property(obj, name, "alphabetical")
            ensure(
                list(value) == expected,
                "alphabetical",
                _message(rule, f"property {name!r} is not in alphabetical order"),
                expected=expected,
                actual=list(value),
            )


def check_property_count(op: PropertyCount, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    with recording():
        ensure(
            len(obj) == op.count,
            "properties",
            f"expected {op.count} properties, found {len(obj)}",
            expected=op.count,
            actual=len(obj),
        )


def check_any_of(op: AnyOf, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    found = any(name in obj for name in op.properties)
    with recording():
        ensure(found, "or", _message(rule, f"expected one of: {', '.join(op.properties)}"))


def check_exactly_one(op: ExactlyOne, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    defined = 0
    for name in op.properties:
        if name not in obj:
            continue
        defined += 1
        if defined == 2:
            with recording():
                fail("xor", _message(rule, f"expected only one of: {', '.join(op.properties)}"), actual=name)

    # Two or more defined: the surplus failure above plus this one.
    with recording():
        ensure(
            defined == 1,
            "xor",
            _message(rule, f"expected exactly one of: {', '.join(op.properties)}"),
            expected=1,
            actual=defined,
        )


def check_pattern(op: Pattern, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    """Test each component of a string property against the rule regex.

    An absent or null property is skipped. Any other non-string value is an
    engine fault.
    """
    target = obj.get(op.property)
    if target is None:
        return
    if not isinstance(target, str):
        raise TypeError(f"pattern property {op.property!r} must be a string, got {type(target).__name__}")

    components = target.split(op.split) if op.split else [target]
    for component in components:
        if op.omit:
            component = component.replace(op.omit, "")
        if not component:
            continue
        with recording():
            ensure(
                op.regex.search(component) is not None,
                "pattern",
                _message(rule, f"{component!r} does not match {op.value!r}"),
                expected=op.value,
                actual=component,
            )


def check_not_contain(op: NotContain, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    for name in op.properties:
        value = obj.get(name)
        if value and isinstance(value, str) and op.value in value:
            with recording():
                fail("notContain", _message(rule, f"property {name!r} contains {op.value!r}"), actual=value)


def check_not_end_with(op: NotEndWith, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    """An absent or null property is skipped; a non-string value is an engine fault."""
    value = obj.get(op.property)
    if value is None:
        return
    if not isinstance(value, str):
        raise TypeError(f"notEndWith property {op.property!r} must be a string, got {type(value).__name__}")
    with recording():
        ensure(
            not value.endswith(op.value),
            "notEndWith",
            f"expected {op.property!r} not to end with {op.value!r}",
            actual=value,
        )


def check_exact_length(op: ExactLength, obj: Mapping[str, Any], rule: Rule, recording: Recorder) -> None:
    value = obj.get(op.property)
    if not value or not isinstance(value, str):
        return
    with recording():
        ensure(
            len(value) == op.value,
            "maxLength",
            f"expected property {op.property!r} to have length {op.value}, found {len(value)}",
            expected=op.value,
            actual=len(value),
        )


CHECKS: dict[type, CheckFn] = {
    Truthy: check_truthy,
    Alphabetical: check_alphabetical,
    PropertyCount: check_property_count,
    AnyOf: check_any_of,
    ExactlyOne: check_exactly_one,
    Pattern: check_pattern,
    NotContain: check_not_contain,
    NotEndWith: check_not_end_with,
    ExactLength: check_exact_length,
}


def check_for(op: Operator) -> CheckFn:
    return CHECKS[type(op)]
