"""Check, rules and explain command implementations."""

import json
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..engine import RuleRegistry
from ..errors import EngineFault
from ..results import EvaluationContext, LintResult
from ..schema import Rule
from ..sources import default_source


def _registry(rules_dirs: tuple[Path, ...], rule_files: tuple[str, ...], skip_rules: tuple[str, ...]) -> RuleRegistry:
    registry = RuleRegistry(default_source(rules_dirs))
    registry.load_rule_sets(rule_files, set(skip_rules))
    return registry


def load_document(path: Path) -> Any:
    """Read a YAML or JSON document."""
    try:
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise EngineFault(f"Failed to parse document: {path}: {e}", {"path": str(path)}) from e


def _rule_to_dict(rule: Rule) -> dict:
    return {
        "name": rule.name,
        "object": list(rule.objects),
        "skip": rule.skip,
        "description": rule.description,
        "operators": rule.operator_names(),
        "source": rule.source,
    }


def run_check(
    document_path: Path,
    object_kind: str,
    *,
    rule_files: tuple[str, ...] = (),
    skip_rules: tuple[str, ...] = (),
    options: tuple[str, ...] = (),
    pointers: tuple[str, ...] = (),
    rules_dirs: tuple[Path, ...] = (),
    output_json: bool = False,
) -> int:
    """Lint a document as a single object of ``object_kind``.

    Args:
        document_path: YAML or JSON document to lint
        object_kind: Object kind used to select rules (e.g. 'openapi', 'info')
        rule_files: Rule-file identifiers to load (default rules when empty)
        skip_rules: Rule names to leave out at load time
        options: Option flags switched on for this run (matched against rule ``skip``)
        pointers: Context breadcrumbs; the last one is reported as the pointer
        rules_dirs: Extra directories searched for rule files before the bundled ones
        output_json: Output results as JSON instead of a table

    Returns:
        Exit code (0 = clean, 1 = lint results found)
    """
    console = Console(stderr=True)

    registry = _registry(rules_dirs, rule_files, skip_rules)
    console.print(f"Loaded {len(registry)} rules", style="dim")

    document = load_document(document_path)
    ctx = EvaluationContext(
        context=list(pointers),
        options={name: True for name in options},
    )
    registry.evaluate(object_kind, document, ctx)
    results = ctx.lint_results

    if output_json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        _print_results(console, results)

    return 1 if results else 0


def _print_results(console: Console, results: list[LintResult]) -> None:
    if not results:
        console.print("✅ No lint results", style="bold green")
        return

    table = Table(title="Lint results")
    table.add_column("rule", style="cyan", no_wrap=True)
    table.add_column("pointer", style="magenta")
    table.add_column("kind", style="dim")
    table.add_column("message")
    for r in results:
        table.add_row(escape(r.rule.name), escape(r.pointer or ""), r.error.kind, escape(r.message))

    Console().print(table)
    console.print(f"❌ {len(results)} lint result(s)", style="bold red")


def run_rules(
    *,
    rule_files: tuple[str, ...] = (),
    skip_rules: tuple[str, ...] = (),
    rules_dirs: tuple[Path, ...] = (),
    output_json: bool = False,
) -> int:
    """List the active rules after loading."""
    registry = _registry(rules_dirs, rule_files, skip_rules)

    if output_json:
        print(json.dumps([_rule_to_dict(r) for r in registry], indent=2))
        return 0

    table = Table(title="Active rules")
    table.add_column("name", style="cyan", no_wrap=True)
    table.add_column("object", style="magenta")
    table.add_column("operators")
    table.add_column("skip", style="dim")
    table.add_column("source", style="dim")
    for rule in registry:
        table.add_row(
            escape(rule.name),
            escape(", ".join(rule.objects)),
            ", ".join(rule.operator_names()),
            escape(rule.skip or ""),
            escape(rule.source or ""),
        )

    Console().print(table)
    return 0


def run_explain(
    rule_name: str,
    *,
    rule_files: tuple[str, ...] = (),
    rules_dirs: tuple[Path, ...] = (),
) -> int:
    """Explain a loaded rule.

    Returns:
        Exit code (0 = success, 1 = rule not found)
    """
    console = Console()
    registry = _registry(rules_dirs, rule_files, ())

    rule = registry.get(rule_name.strip())
    if rule is None:
        console.print(f"Unknown rule: {escape(rule_name)}", style="bold red")
        console.print()
        console.print("Known rules:", style="bold")
        for name in sorted(r.name for r in registry):
            console.print(f"  - {escape(name)}")
        return 1

    console.print(escape(rule.name), style="bold cyan")
    if rule.description:
        console.print(escape(rule.description))
    console.print()
    console.print(f"applies to: {escape(', '.join(rule.objects))}")
    if rule.skip:
        console.print(f"skipped when option is set: {escape(rule.skip)}")
    console.print(f"defined in: {escape(rule.source or '')}", style="dim")
    console.print()
    for key in rule.operator_names():
        console.print(f"  {key}: {escape(json.dumps(rule.raw.get(key)))}")
    return 0
