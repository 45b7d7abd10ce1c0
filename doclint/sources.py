"""Rule-file sources: identifier -> parsed rule-file."""

from __future__ import annotations

import logging
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any, Protocol

import yaml

from .errors import RuleFileError, RuleFileNotFoundError
from .schema import RuleFile

logger = logging.getLogger(__name__)

BUNDLED_RULES_DIR = Path(__file__).parent / "rules"

# Searched in this order for each identifier.
RULE_FILE_SUFFIXES = (".yaml", ".yml", ".json", ".toml")


class RuleSource(Protocol):
    def fetch(self, identifier: str) -> RuleFile: ...

    def identifiers(self) -> list[str]: ...


def parse_rule_document(identifier: str, data: Any) -> RuleFile:
    """Validate the top-level shape of a rule-file document."""
    if not isinstance(data, Mapping):
        raise RuleFileError(
            f"Rule file {identifier!r} must contain a mapping",
            {"identifier": identifier, "type": type(data).__name__},
        )

    rules = data.get("rules")
    if rules is None:
        rules = {}
    if not isinstance(rules, Mapping):
        raise RuleFileError(
            f"Rule file {identifier!r}: 'rules' must be a mapping of rule name to rule",
            {"identifier": identifier},
        )

    require = data.get("require")
    if require is not None and not isinstance(require, str):
        raise RuleFileError(
            f"Rule file {identifier!r}: 'require' must be a rule-file identifier",
            {"identifier": identifier, "require": require},
        )

    return RuleFile(identifier=identifier, rules=dict(rules), require=require or None)


def _read_rule_file(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix == ".toml":
        try:
            return tomllib.loads(text)
        except tomllib.TOMLDecodeError as e:
            raise RuleFileError(f"Failed to parse rule file TOML: {path}: {e}", {"path": str(path)}) from e
    # JSON is read with the YAML loader.
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RuleFileError(f"Failed to parse rule file: {path}: {e}", {"path": str(path)}) from e


class DirectoryRuleSource:
    """Rule files stored as ``<root>/<identifier>.<yaml|yml|json|toml>``."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def __repr__(self) -> str:
        return f"DirectoryRuleSource({str(self.root)!r})"

    def path_for(self, identifier: str) -> Path | None:
        for suffix in RULE_FILE_SUFFIXES:
            candidate = self.root / f"{identifier}{suffix}"
            if candidate.is_file():
                return candidate
        return None

    def fetch(self, identifier: str) -> RuleFile:
        path = self.path_for(identifier)
        if path is None:
            raise RuleFileNotFoundError(
                f"Rule file not found: {identifier}",
                {"identifier": identifier, "searched": [str(self.root)]},
            )
        logger.debug("Reading rule file %s", path)
        return parse_rule_document(identifier, _read_rule_file(path))

    def identifiers(self) -> list[str]:
        if not self.root.is_dir():
            return []
        names = {p.stem for p in self.root.iterdir() if p.is_file() and p.suffix in RULE_FILE_SUFFIXES}
        return sorted(names)


class PackageRuleSource(DirectoryRuleSource):
    """The rule files shipped with doclint."""

    def __init__(self) -> None:
        super().__init__(BUNDLED_RULES_DIR)


class MappingRuleSource:
    """In-memory rule files keyed by identifier."""

    def __init__(self, documents: Mapping[str, Any]):
        self.documents = dict(documents)

    def fetch(self, identifier: str) -> RuleFile:
        if identifier not in self.documents:
            raise RuleFileNotFoundError(f"Rule file not found: {identifier}", {"identifier": identifier})
        return parse_rule_document(identifier, self.documents[identifier])

    def identifiers(self) -> list[str]:
        return sorted(self.documents)


class ChainedRuleSource:
    """Tries each source in order; the first one holding the identifier wins."""

    def __init__(self, sources: Iterable[RuleSource]):
        self.sources = list(sources)

    def fetch(self, identifier: str) -> RuleFile:
        for source in self.sources:
            try:
                return source.fetch(identifier)
            except RuleFileNotFoundError:
                continue
        raise RuleFileNotFoundError(
            f"Rule file not found: {identifier}",
            {"identifier": identifier, "searched": [repr(s) for s in self.sources]},
        )

    def identifiers(self) -> list[str]:
        names: set[str] = set()
        for source in self.sources:
            names.update(source.identifiers())
        return sorted(names)


def default_source(extra_dirs: Iterable[Path] = ()) -> RuleSource:
    """User rule directories first, bundled rules last."""
    dirs = [DirectoryRuleSource(Path(d)) for d in extra_dirs]
    if not dirs:
        return PackageRuleSource()
    return ChainedRuleSource([*dirs, PackageRuleSource()])
