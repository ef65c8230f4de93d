"""Configuration management for advisordocs."""

from __future__ import annotations

import difflib
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

import yaml

from .exceptions import ConfigError
from .models import AdvisorDocsConfig
from .resolver import flatten_for_env, parse_env, resolve_with_precedence, set_path

DEFAULT_CONFIG_PATH = Path("~/.advisordocs/config.yaml")
_HEADER_LINES = (
    "# advisordocs configuration file",
    "# Generated automatically; manage via `advisordocs config edit` or `advisordocs config set`.",
)


def render_config(data: Mapping[str, Any], *, stamp: datetime | None = None) -> str:
    """Render ``data`` as the YAML document stored on disk, header included."""
    stamp = stamp or datetime.now(timezone.utc)
    updated = stamp.isoformat().replace("+00:00", "Z")
    header = "\n".join((*_HEADER_LINES, f"# Last updated: {updated}"))
    return f"{header}\n{yaml.safe_dump(dict(data), sort_keys=False)}"


def parse_config_text(text: str) -> dict[str, Any]:
    """Parse the YAML configuration document ``text`` into raw overrides.

    Raises:
        ConfigError: If the text is not YAML or not a top-level mapping.
    """
    try:
        raw = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in configuration: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError("Configuration file must contain a mapping at the top level.")
    return raw


def _settings_lines(text: str) -> list[str]:
    return [line for line in text.splitlines() if not line.startswith("#")]


class ConfigManager:
    """Own the YAML configuration file and resolve the effective settings.

    The file holds only overrides; defaults come from ``AdvisorDocsConfig``.
    Every write is validated first, so an invalid value never reaches disk.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = env if env is not None else os.environ

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def ensure_exists(self) -> Path:
        """Write the default settings when no configuration file exists yet."""
        if not self._config_path.exists():
            self._store(AdvisorDocsConfig().model_dump(mode="python"))
        return self._config_path

    def text(self) -> str:
        """Return the configuration document, creating it on first use."""
        return self.ensure_exists().read_text(encoding="utf-8")

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> AdvisorDocsConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Highest-precedence overrides, dotted or nested.
            include_env: Whether ``ADVISORDOCS__`` variables are applied.
            ensure_file: Whether to create a default file first.
            env_overrides: Environment mapping used instead of ``os.environ``.

        Raises:
            ConfigError: If the file or any override is invalid.
        """
        if ensure_file:
            self.ensure_exists()
        file_layer: dict[str, Any] = {}
        if self._config_path.exists():
            file_layer = parse_config_text(self._config_path.read_text(encoding="utf-8"))

        env_layer = None
        if include_env:
            env_layer = parse_env(env_overrides if env_overrides is not None else self._env)

        return resolve_with_precedence(
            defaults=AdvisorDocsConfig(),
            file_overrides=file_layer,
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def save(self, config: AdvisorDocsConfig | Mapping[str, Any]) -> None:
        """Validate ``config`` and write it to disk.

        Raises:
            ConfigError: If the values do not form a valid configuration.
        """
        if isinstance(config, AdvisorDocsConfig):
            data = config.model_dump(mode="python")
        else:
            data = dict(config)
            resolve_with_precedence(defaults=AdvisorDocsConfig(), file_overrides=data)
        self._store(data)

    def assign(self, path: Sequence[str], value: Any) -> list[str]:
        """Set the dotted ``path`` to ``value`` in the file.

        Returns:
            list[str]: Unified diff of the file, empty when no setting changed.

        Raises:
            ConfigError: If the path is empty or the result is invalid.
        """
        if not path:
            raise ConfigError("A dotted key such as 'scheduling.due_soon_days' is required.")
        before = self.text()
        overrides = parse_config_text(before)
        set_path(overrides, list(path), value)
        self.save(overrides)
        return self._diff(before, self.text())

    def replace(self, text: str) -> None:
        """Replace the file with the edited document ``text`` after validating it.

        Raises:
            ConfigError: If ``text`` is not a valid configuration document.
        """
        self.save(parse_config_text(text))

    def _store(self, data: Mapping[str, Any]) -> None:
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(render_config(data), encoding="utf-8")

    @staticmethod
    def _diff(before: str, after: str) -> list[str]:
        # Header comments carry a timestamp that changes on every write.
        if _settings_lines(before) == _settings_lines(after):
            return []
        return list(
            difflib.unified_diff(
                before.splitlines(),
                after.splitlines(),
                fromfile="config.yaml (before)",
                tofile="config.yaml (after)",
                lineterm="",
            )
        )


__all__ = [
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "AdvisorDocsConfig",
    "resolve_with_precedence",
    "flatten_for_env",
    "render_config",
    "parse_config_text",
    "ConfigError",
]
