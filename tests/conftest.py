"""Pytest configuration and fixtures."""

from pathlib import Path
from typing import Any

import pytest

from doclint.engine import RuleRegistry
from doclint.results import EvaluationContext
from doclint.sources import MappingRuleSource


@pytest.fixture
def make_registry():
    """Build a registry over in-memory rule files and load them."""

    def _make(documents: dict[str, Any], names: list[str] | None = None, skip: set[str] | None = None) -> RuleRegistry:
        registry = RuleRegistry(MappingRuleSource(documents))
        registry.load_rule_sets(names if names is not None else list(documents), skip or set())
        return registry

    return _make


@pytest.fixture
def lint(make_registry):
    """Load a single rule file holding ``rules`` and lint one object with it."""

    def _lint(
        rules: dict[str, Any],
        obj: dict[str, Any],
        kind: str = "thing",
        context: list[str] | None = None,
        **options: Any,
    ):
        registry = make_registry({"test": {"rules": rules}})
        ctx = EvaluationContext(context=context if context is not None else ["#/thing"], options=options)
        registry.evaluate(kind, obj, ctx)
        return ctx.lint_results

    return _lint


@pytest.fixture
def rules_dir(tmp_path: Path) -> Path:
    path = tmp_path / "rules"
    path.mkdir()
    return path
