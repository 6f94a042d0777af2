"""YAML loader for the routing file."""

from __future__ import annotations

from pathlib import Path

import msgspec
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import ConfigError
from .models import BridgeConfig, RoutingTarget, describe_target

YAML_VERSION = (1, 2)


def load_bridge_config(path: Path | str) -> BridgeConfig:
    """Parse and validate a routing file.

    Raises
    ------
    ConfigError
        When the file cannot be read, is not valid YAML, does not match the
        schema, or fails semantic validation.

    """
    path_obj = Path(path)
    try:
        text = path_obj.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError.unreadable_file(path_obj, exc) from exc

    try:
        loaded = _yaml().load(text)
    except YAMLError as exc:
        raise ConfigError([f"failed to parse YAML: {exc}"]) from exc

    if loaded is None:
        raise ConfigError([f"{path_obj} is empty"])

    try:
        config = msgspec.convert(loaded, type=BridgeConfig)
    except msgspec.ValidationError as exc:
        raise ConfigError([f"schema validation failed: {exc}"]) from exc

    return validate_bridge_config(config)


def validate_bridge_config(config: BridgeConfig) -> BridgeConfig:
    """Check slugs, scope uniqueness and the trigger emoji.

    All problems are collected so operators can fix the file in one pass.
    """
    issues: list[str] = []
    if not config.trigger_emoji.strip():
        issues.append("trigger_emoji must not be empty")
    if not config.issue_label.strip():
        issues.append("issue_label must not be empty")

    claimed: dict[RoutingTarget, str] = {}
    for slug, route in config.repositories.items():
        if not _is_repo_slug(slug):
            issues.append(f"repository {slug!r} must be in 'owner/name' form")
        previous = claimed.get(route.target)
        if previous is not None:
            issues.append(
                f"{describe_target(route.target)} is "
                f"mapped to both {previous} and {slug}"
            )
        else:
            claimed[route.target] = slug

    if issues:
        raise ConfigError(issues)
    return config


def _is_repo_slug(slug: str) -> bool:
    owner, sep, name = slug.partition("/")
    return bool(sep and owner and name and "/" not in name)


def _yaml() -> YAML:
    yaml = YAML(typ="safe")
    yaml.version = YAML_VERSION
    yaml.allow_duplicate_keys = False
    return yaml
