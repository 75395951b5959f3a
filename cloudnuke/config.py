"""Name filtering rules for resources, read from a YAML file."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    """Raised when a configuration document cannot be turned into a Config."""


@dataclass(frozen=True)
class Expression:
    """A compiled regular expression matched anywhere in a resource name."""

    regex: re.Pattern[str]

    @classmethod
    def compile(cls, pattern: str) -> Expression:
        try:
            return cls(re.compile(pattern))
        except re.error as exc:
            raise ConfigError(f"invalid regular expression {pattern!r}: {exc}") from exc

    def matches(self, name: str) -> bool:
        return self.regex.search(name) is not None


@dataclass
class FilterRule:
    """A list of name expressions."""

    names_regexp: list[Expression] = field(default_factory=list)


@dataclass
class ResourceType:
    """Include and exclude rules for one kind of resource."""

    include_rule: FilterRule = field(default_factory=FilterRule)
    exclude_rule: FilterRule = field(default_factory=FilterRule)


@dataclass
class Config:
    """Filtering rules for every resource kind that supports them."""

    s3: ResourceType = field(default_factory=ResourceType, metadata={"key": "s3"})
    iam_users: ResourceType = field(default_factory=ResourceType, metadata={"key": "IAMUsers"})
    secrets_manager_secrets: ResourceType = field(
        default_factory=ResourceType, metadata={"key": "SecretsManager"}
    )
    nat_gateway: ResourceType = field(default_factory=ResourceType, metadata={"key": "NatGateway"})
    access_analyzer: ResourceType = field(
        default_factory=ResourceType, metadata={"key": "AccessAnalyzer"}
    )


def _pattern_text(value: Any, where: str) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (str, int, float)):
        return str(value)
    raise ConfigError(f"{where}: expected a regular expression string, got {value!r}")


def _parse_rule(node: Any, where: str) -> FilterRule:
    if node is None:
        return FilterRule()
    if not isinstance(node, dict):
        raise ConfigError(f"{where}: expected a mapping, got {node!r}")
    patterns = node.get("names_regex")
    if patterns is None:
        return FilterRule()
    if not isinstance(patterns, list):
        raise ConfigError(f"{where}.names_regex: expected a list, got {patterns!r}")
    return FilterRule(
        [Expression.compile(_pattern_text(p, f"{where}.names_regex")) for p in patterns]
    )


def _parse_resource_type(node: Any, where: str) -> ResourceType:
    if node is None:
        return ResourceType()
    if not isinstance(node, dict):
        raise ConfigError(f"{where}: expected a mapping, got {node!r}")
    return ResourceType(
        include_rule=_parse_rule(node.get("include"), f"{where}.include"),
        exclude_rule=_parse_rule(node.get("exclude"), f"{where}.exclude"),
    )


def load_config(data: str | bytes) -> Config:
    """Parse a YAML document into a Config; unknown keys are ignored."""
    try:
        document = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}") from exc
    if document is None:
        return Config()
    if not isinstance(document, dict):
        raise ConfigError(f"expected a mapping at the top level, got {document!r}")
    values = {
        f.name: _parse_resource_type(document.get(f.metadata["key"]), f.metadata["key"])
        for f in fields(Config)
    }
    return Config(**values)


def get_config(file_path: str | Path) -> Config:
    """Read and parse the configuration file at file_path."""
    path = Path(file_path).resolve()
    return load_config(path.read_bytes())


def _matches(name: str, expressions: Iterable[Expression]) -> bool:
    return any(expression.matches(name) for expression in expressions)


def should_include(
    name: str,
    include_res: list[Expression] | None,
    exclude_res: list[Expression] | None,
) -> bool:
    """Decide whether a resource name passes the include and exclude rules."""
    include_res = include_res or []
    exclude_res = exclude_res or []
    if not include_res and not exclude_res:
        return True
    if _matches(name, exclude_res):
        return False
    if not include_res:
        return True
    return _matches(name, include_res)