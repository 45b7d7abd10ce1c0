from __future__ import annotations

import logging
from collections.abc import Collection, Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any

from .assertions import AssertionFailure
from .errors import EngineFault, RuleEvaluationError
from .load import as_names, load_rule_sets
from .operators import check_for
from .results import EvaluationContext
from .schema import OPERATOR_KEYS, Rule
from .sources import PackageRuleSource, RuleSource

logger = logging.getLogger(__name__)


def _active_rules(rules: Sequence[Rule], object_kind: str, ctx: EvaluationContext) -> Iterator[Rule]:
    for rule in rules:
        if not rule.applies_to(object_kind):
            continue
        if rule.skip and ctx.option(rule.skip):
            continue
        yield rule


def evaluate_rules(
    rules: Sequence[Rule],
    object_kind: str,
    obj: Mapping[str, Any],
    ctx: EvaluationContext,
) -> None:
    """
    Evaluate every applicable rule against one object.

    Lint violations are appended to ``ctx.lint_results``; nothing is returned.

    Raises:
        RuleEvaluationError: an operator failed for a reason other than a lint
            violation (malformed configuration, unexpected value types)
    """
    if not isinstance(obj, Mapping):
        raise RuleEvaluationError(
            f"Cannot lint {object_kind!r}: expected a mapping, got {type(obj).__name__}",
            {"object_kind": object_kind, "pointer": ctx.pointer},
        )

    for rule in _active_rules(rules, object_kind, ctx):

        @contextmanager
        def recording(rule: Rule = rule) -> Iterator[None]:
            try:
                yield
            except AssertionFailure as failure:
                ctx.record(rule, failure)

        for op in rule.operators:
            try:
                check_for(op)(op, obj, rule, recording)
            except EngineFault:
                raise
            except Exception as e:
                raise RuleEvaluationError(
                    f"Rule {rule.name!r} ({OPERATOR_KEYS[type(op)]}) failed on {object_kind!r}: {e}",
                    {"rule": rule.name, "operator": OPERATOR_KEYS[type(op)], "pointer": ctx.pointer},
                ) from e


class RuleRegistry:
    """The active rule list for one linting workflow.

    Loading replaces the whole list. Keep one registry per concurrent
    workflow; a registry must not be reloaded while another caller is
    evaluating against it.
    """

    def __init__(self, source: RuleSource | None = None):
        self.source = source if source is not None else PackageRuleSource()
        self._rules: tuple[Rule, ...] = ()

    @property
    def rules(self) -> tuple[Rule, ...]:
        return self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def get(self, name: str) -> Rule | None:
        for rule in self._rules:
            if rule.name == name:
                return rule
        return None

    def load_rule_sets(
        self,
        names: str | Iterable[str] = (),
        skip_rule_names: str | Collection[str] = frozenset(),
    ) -> None:
        """Load rule-files (``["default"]`` when none are named), replacing all rules."""
        names = as_names(names)
        self._rules = ()
        self._rules = tuple(load_rule_sets(self.source, names, skip_rule_names))
        logger.info("Loaded %d rules from %s", len(self._rules), ", ".join(names) or "default")

    def evaluate(
        self,
        object_kind: str,
        obj: Mapping[str, Any],
        context: EvaluationContext | Mapping[str, Any],
    ) -> None:
        """Lint one object of ``object_kind``.

        ``context`` is an EvaluationContext, or a flat options bag with
        ``context`` / ``lintResults`` keys and named flags. Results are appended
        to its collector.
        """
        if isinstance(context, EvaluationContext):
            ctx = context
        else:
            ctx = EvaluationContext.from_options(context)

        evaluate_rules(self._rules, object_kind, obj, ctx)
