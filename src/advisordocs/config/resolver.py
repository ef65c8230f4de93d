"""Merge configuration layers into a validated ``AdvisorDocsConfig``."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import AdvisorDocsConfig

ENV_PREFIX = "ADVISORDOCS__"


def resolve_with_precedence(
    *,
    defaults: AdvisorDocsConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> AdvisorDocsConfig:
    """Layer overrides on top of ``defaults`` and validate the result.

    Later layers win: file, then environment, then CLI. Keys may be nested
    mappings or dotted paths such as ``scheduling.due_soon_days``.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the YAML configuration file.
        env_overrides: Values parsed from ``ADVISORDOCS__`` environment variables.
        cli_overrides: Values passed explicitly by the caller.

    Returns:
        AdvisorDocsConfig: Validated configuration.

    Raises:
        ConfigError: If an override is malformed or fails validation.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for label, layer in layers:
        if layer is not None:
            merged = merge_mappings(merged, expand_dotted(layer, source=label))

    try:
        return AdvisorDocsConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: AdvisorDocsConfig) -> dict[str, str]:
    """Render ``config`` as ``ADVISORDOCS__SECTION__KEY`` variables."""
    flat: dict[str, str] = {}
    for section, values in config.model_dump(mode="python").items():
        for key, value in values.items():
            env_key = f"{ENV_PREFIX}{section.upper()}__{key.upper()}"
            if value is None:
                flat[env_key] = "null"
            elif isinstance(value, (list, dict)):
                flat[env_key] = yaml.safe_dump(value, default_flow_style=True).strip()
            else:
                flat[env_key] = str(value)
    return flat


def parse_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect ``ADVISORDOCS__`` variables into a nested override mapping.

    Values are parsed as YAML scalars so ``"14"`` becomes an integer and
    ``"true"`` a boolean; unparsable values are kept verbatim.
    """
    overrides: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in name[len(ENV_PREFIX) :].split("__") if part]
        if not segments:
            continue
        try:
            value = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        set_path(overrides, segments, value)
    return overrides


def expand_dotted(values: Mapping[str, Any], *, source: str) -> dict[str, Any]:
    """Expand dotted keys in ``values`` into nested mappings.

    Args:
        values: Override mapping, possibly using ``section.key`` keys.
        source: Name of the layer, used in error messages.

    Returns:
        dict[str, Any]: Nested override mapping.

    Raises:
        ConfigError: If ``values`` is not a mapping or a key is not a string.
    """
    if not isinstance(values, MappingABC):
        raise ConfigError(f"{source.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in values.items():
        if not isinstance(key, str):
            raise ConfigError(f"{source.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, source=source)
        path = key.split(".")
        existing = expanded.get(path[0]) if len(path) == 1 else None
        if isinstance(existing, dict) and isinstance(value, dict):
            expanded[path[0]] = merge_mappings(existing, value)
            continue
        try:
            set_path(expanded, path, value)
        except ConfigError as exc:
            raise ConfigError(
                f"{source.capitalize()} override for {key} conflicts with an existing value."
            ) from exc
    return expanded


def set_path(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign ``value`` at ``path`` inside ``target``, creating mappings on the way.

    Raises:
        ConfigError: If a non-mapping value sits on the path.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot assign into '{segment}' because it is not a mapping.")
        node = child
    node[path[-1]] = value


def merge_mappings(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep merge of ``overrides`` onto ``base`` without mutating either."""
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = merge_mappings(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "flatten_for_env",
    "parse_env",
    "set_path",
    "merge_mappings",
]
