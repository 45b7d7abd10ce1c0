"""doclint - declarative rule engine for linting structured documents."""

__version__ = "0.1.0"

from .assertions import AssertionFailure
from .engine import RuleRegistry, evaluate_rules
from .errors import (
    EngineFault,
    RequireCycleError,
    RuleConfigError,
    RuleEvaluationError,
    RuleFileError,
    RuleFileNotFoundError,
)
from .load import load_rule_sets, resolve_rule_file
from .results import EvaluationContext, LintResult
from .schema import Rule
from .sources import ChainedRuleSource, DirectoryRuleSource, MappingRuleSource, PackageRuleSource

__all__ = [
    "__version__",
    "AssertionFailure",
    "ChainedRuleSource",
    "DirectoryRuleSource",
    "EngineFault",
    "EvaluationContext",
    "LintResult",
    "MappingRuleSource",
    "PackageRuleSource",
    "RequireCycleError",
    "Rule",
    "RuleConfigError",
    "RuleEvaluationError",
    "RuleFileError",
    "RuleFileNotFoundError",
    "RuleRegistry",
    "evaluate_rules",
    "load_rule_sets",
    "resolve_rule_file",
]
