from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Union


WILDCARD = "*"


@dataclass(frozen=True)
class Truthy:
    properties: tuple[str, ...]


@dataclass(frozen=True)
class Alphabetical:
    properties: tuple[str, ...]
    keyed_by: str | None = None


@dataclass(frozen=True)
class PropertyCount:
    count: int


@dataclass(frozen=True)
class AnyOf:
    properties: tuple[str, ...]


@dataclass(frozen=True)
class ExactlyOne:
    properties: tuple[str, ...]


@dataclass(frozen=True)
class Pattern:
    property: str
    value: str
    regex: re.Pattern[str] = field(compare=False, repr=False)
    split: str | None = None
    omit: str | None = None


@dataclass(frozen=True)
class NotContain:
    value: str
    properties: tuple[str, ...]


@dataclass(frozen=True)
class NotEndWith:
    value: str
    property: str


@dataclass(frozen=True)
class ExactLength:
    """Configured as ``maxLength`` in rule files, but enforces an exact length."""

    value: int
    property: str


Operator = Union[
    Truthy,
    Alphabetical,
    PropertyCount,
    AnyOf,
    ExactlyOne,
    Pattern,
    NotContain,
    NotEndWith,
    ExactLength,
]

# Rule-file key for each operator variant, in evaluation order.
OPERATOR_KEYS: dict[type, str] = {
    Truthy: "truthy",
    Alphabetical: "alphabetical",
    PropertyCount: "properties",
    AnyOf: "or",
    ExactlyOne: "xor",
    Pattern: "pattern",
    NotContain: "notContain",
    NotEndWith: "notEndWith",
    ExactLength: "maxLength",
}


@dataclass(frozen=True)
class Rule:
    name: str
    objects: tuple[str, ...]
    enabled: bool = True
    skip: str | None = None
    description: str = ""
    operators: tuple[Operator, ...] = ()
    source: str | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def applies_to(self, object_kind: str) -> bool:
        # The wildcard only counts in first position.
        return self.objects[0] == WILDCARD or object_kind in self.objects

    def operator_names(self) -> list[str]:
        return [OPERATOR_KEYS[type(op)] for op in self.operators]


@dataclass(frozen=True)
class RuleFile:
    """A parsed rule-file before rule filtering."""

    identifier: str
    rules: dict[str, Any]
    require: str | None = None
