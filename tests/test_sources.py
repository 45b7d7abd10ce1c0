from __future__ import annotations

import json
from pathlib import Path

import pytest

from doclint.engine import RuleRegistry
from doclint.errors import RuleFileError, RuleFileNotFoundError
from doclint.results import EvaluationContext
from doclint.sources import ChainedRuleSource, DirectoryRuleSource, PackageRuleSource, default_source


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_directory_source_reads_yaml(rules_dir: Path) -> None:
    _write(
        rules_dir / "house.yaml",
        """
require: base
rules:
  info-contact:
    object: info
    enabled: true
    truthy: contact
""",
    )
    rule_file = DirectoryRuleSource(rules_dir).fetch("house")
    assert rule_file.identifier == "house"
    assert rule_file.require == "base"
    assert list(rule_file.rules) == ["info-contact"]


def test_directory_source_reads_json_and_toml(rules_dir: Path) -> None:
    _write(
        rules_dir / "base.json",
        json.dumps({"rules": {"license-url": {"object": "license", "enabled": True, "truthy": "url"}}}),
    )
    _write(
        rules_dir / "extra.toml",
        """
require = "base"

[rules.server-trailing-slash]
object = "server"
enabled = true
notEndWith = { property = "url", value = "/" }
""",
    )
    source = DirectoryRuleSource(rules_dir)
    assert source.identifiers() == ["base", "extra"]

    registry = RuleRegistry(source)
    registry.load_rule_sets(["extra"])
    assert [r.name for r in registry] == ["license-url", "server-trailing-slash"]

    ctx = EvaluationContext(context=["#/servers/0"])
    registry.evaluate("server", {"url": "https://api.example.com/"}, ctx)
    assert [r.rule.name for r in ctx.lint_results] == ["server-trailing-slash"]


def test_directory_source_prefers_yaml_over_json(rules_dir: Path) -> None:
    _write(rules_dir / "both.json", json.dumps({"rules": {"from-json": {}}}))
    _write(rules_dir / "both.yaml", "rules:\n  from-yaml: {}\n")
    assert list(DirectoryRuleSource(rules_dir).fetch("both").rules) == ["from-yaml"]


def test_unparseable_rule_file_is_fatal(rules_dir: Path) -> None:
    _write(rules_dir / "broken.yaml", "rules: [unclosed\n")
    _write(rules_dir / "broken2.toml", "rules = = 1\n")
    source = DirectoryRuleSource(rules_dir)
    with pytest.raises(RuleFileError):
        source.fetch("broken")
    with pytest.raises(RuleFileError):
        source.fetch("broken2")


def test_empty_rule_file_is_fatal(rules_dir: Path) -> None:
    _write(rules_dir / "empty.yaml", "")
    with pytest.raises(RuleFileError):
        DirectoryRuleSource(rules_dir).fetch("empty")


def test_missing_rule_file(rules_dir: Path) -> None:
    with pytest.raises(RuleFileNotFoundError):
        DirectoryRuleSource(rules_dir).fetch("absent")


def test_chained_source_first_match_wins(tmp_path: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    _write(first / "shared.yaml", "rules:\n  from-first: {}\n")
    _write(second / "shared.yaml", "rules:\n  from-second: {}\n")
    _write(second / "only-second.yaml", "rules: {}\n")

    source = ChainedRuleSource([DirectoryRuleSource(first), DirectoryRuleSource(second)])
    assert list(source.fetch("shared").rules) == ["from-first"]
    assert source.fetch("only-second").rules == {}
    assert source.identifiers() == ["only-second", "shared"]
    with pytest.raises(RuleFileNotFoundError):
        source.fetch("nowhere")


def test_user_rules_can_require_bundled_rules(rules_dir: Path) -> None:
    _write(
        rules_dir / "house.yaml",
        """
require: default
rules:
  tag-description:
    object: tag
    enabled: true
    truthy: description
""",
    )
    registry = RuleRegistry(default_source([rules_dir]))
    registry.load_rule_sets(["house"])
    assert registry.rules[-1].name == "tag-description"
    assert registry.get("openapi-tags") is not None


def test_bundled_default_rules() -> None:
    registry = RuleRegistry(PackageRuleSource())
    registry.load_rule_sets([])
    names = [r.name for r in registry]
    assert "openapi-tags" in names
    assert "parameter-description" not in names  # disabled in default
    assert all(r.source == "default" for r in registry)


def test_bundled_strict_rules_extend_default() -> None:
    default = RuleRegistry()
    default.load_rule_sets(["default"])
    strict = RuleRegistry()
    strict.load_rule_sets(["strict"])

    strict_names = [r.name for r in strict]
    assert strict_names[: len(default)] == [r.name for r in default]
    assert "parameter-description" in strict_names
    assert "info-description" in strict_names


def test_bundled_rules_lint_an_openapi_document() -> None:
    registry = RuleRegistry()
    registry.load_rule_sets(["default"])
    ctx = EvaluationContext(context=["#"])

    registry.evaluate("openapi", {"openapi": "3.0.0", "tags": [{"name": "pets"}, {"name": "admin"}]}, ctx)
    ctx.context.append("#/info")
    registry.evaluate("info", {"title": "API", "description": "<script>alert(1)</script>"}, ctx)

    assert [(r.rule.name, r.pointer) for r in ctx.lint_results] == [
        ("openapi-tags-alphabetical", "#"),
        ("no-script-tags-in-markdown", "#/info"),
        ("info-contact", "#/info"),
    ]


def test_bundled_operation_tags_skipped_for_callbacks() -> None:
    registry = RuleRegistry()
    registry.load_rule_sets(["default"], {"operation-operationId"})
    operation = {"summary": "List pets"}

    ctx = EvaluationContext(options={"isCallback": True})
    registry.evaluate("operation", operation, ctx)
    assert ctx.lint_results == []

    ctx = EvaluationContext()
    registry.evaluate("operation", operation, ctx)
    assert [r.rule.name for r in ctx.lint_results] == ["operation-tags"]
