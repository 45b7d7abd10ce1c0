"""
Engine faults raised by doclint.

Lint violations are never raised out of the engine; they are recorded as
LintResult entries. Everything in this module signals a broken rule
configuration or integration and is meant to stop the current load or
evaluate call.
"""

from typing import Any


class EngineFault(Exception):
    """Base exception for all doclint engine faults."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class RuleFileNotFoundError(EngineFault):
    """No rule source can provide the requested rule-file identifier."""

    pass


class RuleFileError(EngineFault):
    """
    A rule-file exists but cannot be used.

    Examples:
    - invalid YAML / JSON / TOML
    - top level is not a mapping
    - ``rules`` is not a mapping, ``require`` is not a string
    """

    pass


class RuleConfigError(EngineFault):
    """A single rule carries a malformed operator configuration."""

    pass


class RequireCycleError(EngineFault):
    """A rule-file requires itself, directly or through its parents."""

    pass


class RuleEvaluationError(EngineFault):
    """An operator failed for a reason other than a lint violation."""

    pass
