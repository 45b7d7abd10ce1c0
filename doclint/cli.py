"""CLI entrypoint for doclint."""

import logging
import sys
from collections.abc import Callable
from pathlib import Path

import click

from . import __version__
from .errors import EngineFault


def _run(fn: Callable[..., int], *args, **kwargs) -> None:
    """Run a command body, turning engine faults into CLI errors."""
    try:
        exit_code = fn(*args, **kwargs)
    except EngineFault as e:
        raise click.ClickException(e.message) from e
    sys.exit(exit_code)


rules_option = click.option(
    "--rules",
    "-r",
    "rule_files",
    multiple=True,
    metavar="NAME",
    help="Rule-file to load (repeatable; defaults to 'default')",
)


@click.group()
@click.version_option(__version__, prog_name="doclint")
@click.option(
    "--rules-dir",
    "rules_dirs",
    multiple=True,
    envvar="DOCLINT_RULES_DIR",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    help="Directory searched for rule files before the bundled ones (repeatable)",
)
@click.option("--verbose", is_flag=True, help="Log rule loading details")
@click.pass_context
def cli(ctx: click.Context, rules_dirs: tuple[Path, ...], verbose: bool) -> None:
    """doclint - lint structured documents with declarative rule files."""
    ctx.ensure_object(dict)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    ctx.obj["rules_dirs"] = tuple(p.resolve() for p in rules_dirs)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--kind", "-k", "object_kind", required=True, help="Object kind of the document (e.g. openapi)")
@rules_option
@click.option("--skip", "skip_rules", multiple=True, metavar="RULE", help="Rule name to leave out (repeatable)")
@click.option(
    "--option",
    "-o",
    "options",
    multiple=True,
    metavar="FLAG",
    help="Switch on an option consulted by rules' skip field (repeatable)",
)
@click.option("--pointer", "pointers", multiple=True, metavar="P", help="Context breadcrumb (repeatable)")
@click.option("--json", "output_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def check(
    ctx: click.Context,
    document: Path,
    object_kind: str,
    rule_files: tuple[str, ...],
    skip_rules: tuple[str, ...],
    options: tuple[str, ...],
    pointers: tuple[str, ...],
    output_json: bool,
) -> None:
    """Lint DOCUMENT (YAML or JSON) as one object of the given kind.

    Examples:

        doclint check api.yaml --kind openapi

        doclint check info.json -k info -r strict --skip info-contact
    """
    from .commands.lint import run_check

    _run(
        run_check,
        document,
        object_kind,
        rule_files=rule_files,
        skip_rules=skip_rules,
        options=options,
        pointers=pointers,
        rules_dirs=ctx.obj["rules_dirs"],
        output_json=output_json,
    )


@cli.command()
@rules_option
@click.option("--skip", "skip_rules", multiple=True, metavar="RULE", help="Rule name to leave out (repeatable)")
@click.option("--json", "output_json", is_flag=True, help="Output rules as JSON")
@click.pass_context
def rules(ctx: click.Context, rule_files: tuple[str, ...], skip_rules: tuple[str, ...], output_json: bool) -> None:
    """List the rules that would be active after loading."""
    from .commands.lint import run_rules

    _run(
        run_rules,
        rule_files=rule_files,
        skip_rules=skip_rules,
        rules_dirs=ctx.obj["rules_dirs"],
        output_json=output_json,
    )


@cli.command()
@click.argument("rule_name")
@rules_option
@click.pass_context
def explain(ctx: click.Context, rule_name: str, rule_files: tuple[str, ...]) -> None:
    """Explain a rule and its operators."""
    from .commands.lint import run_explain

    _run(run_explain, rule_name, rule_files=rule_files, rules_dirs=ctx.obj["rules_dirs"])


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
