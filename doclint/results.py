"""Lint results and per-call evaluation state."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .assertions import AssertionFailure
from .schema import Rule


@dataclass
class LintResult:
    """A single failed assertion."""

    pointer: str | None
    rule: Rule
    error: AssertionFailure

    @property
    def message(self) -> str:
        return self.error.message

    def __str__(self) -> str:
        loc = self.pointer if self.pointer is not None else "<root>"
        return f"[{self.rule.name}] {loc} - {self.error.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "pointer": self.pointer,
            "rule": self.rule.name,
            "kind": self.error.kind,
            "message": self.error.message,
        }


@dataclass
class EvaluationContext:
    """Caller-owned state for one or more evaluate calls.

    ``context`` is the breadcrumb stack; its last element becomes the pointer
    of every result recorded while it is on top. ``lint_results`` only ever
    grows.
    """

    context: list[str] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)
    lint_results: list[LintResult] = field(default_factory=list)

    @property
    def pointer(self) -> str | None:
        return self.context[-1] if self.context else None

    def option(self, name: str) -> bool:
        return bool(self.options.get(name))

    def record(self, rule: Rule, error: AssertionFailure) -> LintResult:
        result = LintResult(pointer=self.pointer, rule=rule, error=error)
        self.lint_results.append(result)
        return result

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> "EvaluationContext":
        """Build a context from a flat options bag.

        ``context`` and ``lintResults`` are taken by reference so results land
        in the caller's list; every other key is a named option.
        """
        stack = options.get("context")
        results = options.get("lintResults")
        flags = {k: v for k, v in options.items() if k not in ("context", "lintResults")}
        return cls(
            context=stack if stack is not None else [],
            options=flags,
            lint_results=results if results is not None else [],
        )
