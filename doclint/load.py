from __future__ import annotations

import logging
import re
from collections.abc import Collection, Iterable, Mapping
from typing import Any

from .errors import RequireCycleError, RuleConfigError
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
from .sources import RuleSource

logger = logging.getLogger(__name__)

DEFAULT_RULE_FILE = "default"


def _config_error(rule_name: str, key: str, problem: str, value: Any = None) -> RuleConfigError:
    return RuleConfigError(
        f"Rule {rule_name!r}: {key} {problem}",
        {"rule": rule_name, "operator": key, "value": value},
    )


def _coerce_names(value: Any, rule_name: str, key: str, *, promote: bool) -> tuple[str, ...]:
    """Read a list of property names; bare strings are promoted when allowed."""
    if isinstance(value, str) and promote:
        return (value,)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise _config_error(rule_name, key, "must be a list of property names", value)
    return tuple(value)


def _require_str(config: Mapping[str, Any], field: str, rule_name: str, key: str) -> str:
    value = config.get(field)
    if not isinstance(value, str):
        raise _config_error(rule_name, key, f"requires a string '{field}'", value)
    return value


def _require_int(config: Mapping[str, Any], field: str, rule_name: str, key: str) -> int:
    value = config.get(field)
    if isinstance(value, bool) or not isinstance(value, int):
        raise _config_error(rule_name, key, f"requires an integer '{field}'", value)
    return value


def _optional_str(config: Mapping[str, Any], field: str, rule_name: str, key: str) -> str | None:
    value = config.get(field)
    if not value:
        return None
    if not isinstance(value, str):
        raise _config_error(rule_name, key, f"'{field}' must be a string", value)
    return value


def _require_mapping(value: Any, rule_name: str, key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise _config_error(rule_name, key, "must be a mapping", value)
    return value


def build_operators(rule_name: str, raw: Mapping[str, Any]) -> tuple[Operator, ...]:
    """Turn the operator fields of a rule spec into tagged operator values.

    An operator is present when its field is truthy, so ``properties: 0`` is
    the same as leaving ``properties`` out.
    """
    ops: list[Operator] = []

    if raw.get("truthy"):
        ops.append(Truthy(properties=_coerce_names(raw["truthy"], rule_name, "truthy", promote=True)))

    if raw.get("alphabetical"):
        cfg = _require_mapping(raw["alphabetical"], rule_name, "alphabetical")
        ops.append(
            Alphabetical(
                properties=_coerce_names(cfg.get("properties"), rule_name, "alphabetical.properties", promote=True),
                keyed_by=_optional_str(cfg, "keyedBy", rule_name, "alphabetical"),
            )
        )

    if raw.get("properties"):
        count = raw["properties"]
        if isinstance(count, bool) or not isinstance(count, int):
            raise _config_error(rule_name, "properties", "must be an integer key count", count)
        ops.append(PropertyCount(count=count))

    if raw.get("or"):
        ops.append(AnyOf(properties=_coerce_names(raw["or"], rule_name, "or", promote=False)))

    if raw.get("xor"):
        ops.append(ExactlyOne(properties=_coerce_names(raw["xor"], rule_name, "xor", promote=False)))

    if raw.get("pattern"):
        cfg = _require_mapping(raw["pattern"], rule_name, "pattern")
        source = _require_str(cfg, "value", rule_name, "pattern")
        try:
            regex = re.compile(source)
        except re.error as e:
            raise _config_error(rule_name, "pattern", f"has an invalid regular expression: {e}", source) from e
        ops.append(
            Pattern(
                property=_require_str(cfg, "property", rule_name, "pattern"),
                value=source,
                regex=regex,
                split=_optional_str(cfg, "split", rule_name, "pattern"),
                omit=_optional_str(cfg, "omit", rule_name, "pattern"),
            )
        )

    if raw.get("notContain"):
        cfg = _require_mapping(raw["notContain"], rule_name, "notContain")
        ops.append(
            NotContain(
                value=_require_str(cfg, "value", rule_name, "notContain"),
                properties=_coerce_names(cfg.get("properties"), rule_name, "notContain.properties", promote=False),
            )
        )

    if raw.get("notEndWith"):
        cfg = _require_mapping(raw["notEndWith"], rule_name, "notEndWith")
        ops.append(
            NotEndWith(
                value=_require_str(cfg, "value", rule_name, "notEndWith"),
                property=_require_str(cfg, "property", rule_name, "notEndWith"),
            )
        )

    if raw.get("maxLength"):
        cfg = _require_mapping(raw["maxLength"], rule_name, "maxLength")
        ops.append(
            ExactLength(
                value=_require_int(cfg, "value", rule_name, "maxLength"),
                property=_require_str(cfg, "property", rule_name, "maxLength"),
            )
        )

    return tuple(ops)


def build_rule(key: str, raw: Mapping[str, Any], source: str | None = None) -> Rule:
    """Normalize one enabled rule spec into a Rule."""
    name = raw.get("name", key)
    if not isinstance(name, str) or not name.strip():
        raise RuleConfigError(f"Rule {key!r}: name must be a non-empty string", {"rule": key})

    objects = raw.get("object")
    if isinstance(objects, str):
        objects = [objects]
    if not isinstance(objects, list) or not objects or not all(isinstance(o, str) for o in objects):
        raise _config_error(name, "object", "must be an object kind or a non-empty list of object kinds", objects)

    skip = raw.get("skip")
    if skip is not None and not isinstance(skip, str):
        raise _config_error(name, "skip", "must name an option", skip)

    description = raw.get("description")
    return Rule(
        name=name,
        objects=tuple(objects),
        enabled=True,
        skip=skip or None,
        description=str(description) if description is not None else "",
        operators=build_operators(name, raw),
        source=source,
        raw=dict(raw),
    )


def resolve_rule_file(
    source: RuleSource,
    identifier: str,
    skip_rule_names: str | Collection[str] = frozenset(),
    accumulated: list[Rule] | None = None,
    *,
    _chain: tuple[str, ...] = (),
) -> list[Rule]:
    """
    Resolve a rule-file and its ``require`` parents into an ordered rule list.

    Parent rules are appended before the child's own rules. Disabled rules and
    rules named in ``skip_rule_names`` are dropped.

    Raises:
        RuleFileNotFoundError / RuleFileError: the file (or a parent) is unusable
        RequireCycleError: the ``require`` chain loops back on itself
        RuleConfigError: an enabled rule is malformed
    """
    if isinstance(skip_rule_names, str):
        skip_rule_names = [skip_rule_names]
    if identifier in _chain:
        cycle = [*_chain, identifier]
        raise RequireCycleError(
            f"Circular require: {' -> '.join(cycle)}",
            {"chain": cycle},
        )

    rules = accumulated if accumulated is not None else []
    rule_file = source.fetch(identifier)
    chain = (*_chain, identifier)

    if rule_file.require:
        logger.debug("Rule file %s requires %s", identifier, rule_file.require)
        rules = resolve_rule_file(source, rule_file.require, skip_rule_names, rules, _chain=chain)

    for key, raw in rule_file.rules.items():
        if not isinstance(raw, Mapping):
            raise RuleConfigError(f"Rule {key!r} in {identifier!r} must be a mapping", {"rule": key})
        if not raw.get("enabled"):
            continue
        name = raw.get("name", key)
        if isinstance(name, str) and name in skip_rule_names:
            logger.debug("Skipping rule %s from %s", name, identifier)
            continue
        rules.append(build_rule(str(key), raw, source=identifier))

    logger.debug("Resolved rule file %s (%d rules so far)", identifier, len(rules))
    return rules


def as_names(value: str | Iterable[str]) -> list[str]:
    """A bare string is one name, not a sequence of characters."""
    if isinstance(value, str):
        return [value]
    return list(value)


def load_rule_sets(
    source: RuleSource,
    names: str | Iterable[str] = (),
    skip_rule_names: str | Collection[str] = frozenset(),
) -> list[Rule]:
    """Resolve each named rule-file in order and concatenate the results."""
    files = as_names(names) or [DEFAULT_RULE_FILE]
    skip = frozenset(as_names(skip_rule_names))

    rules: list[Rule] = []
    for name in files:
        rules.extend(resolve_rule_file(source, name, skip))
    return rules
