"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from advisordocs.config import (
    AdvisorDocsConfig,
    ConfigError,
    ConfigManager,
    flatten_for_env,
    resolve_with_precedence,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".advisordocs" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "advisordocs configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, AdvisorDocsConfig)
    assert config.storage.presets_key == "wlp.documentPresets"


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"scheduling": {"due_soon_days": 21}, "requests": {"advisor_name": "John"}})

    env = {
        "ADVISORDOCS__SCHEDULING__UPCOMING_LIMIT": "5",
        "ADVISORDOCS__REQUESTS__ADVISOR_NAME": "Env Advisor",
        "UNRELATED": "ignored",
    }
    cli = {"requests.advisor_name": "John Smith"}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.scheduling.due_soon_days == 21
    assert config.scheduling.upcoming_limit == 5
    # CLI overrides take precedence over environment
    assert config.requests.advisor_name == "John Smith"


def test_environment_ignored_when_disabled(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    monkeypatch.setenv("ADVISORDOCS__MATCHING__MIN_OVERLAP", "4")

    assert manager.load(include_env=False).matching.min_overlap == 2
    assert manager.load().matching.min_overlap == 4


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_section_raises_config_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()
    before = manager.text()

    with pytest.raises(ConfigError):
        manager.save({"llm": {"model": "gpt-4"}})
    assert manager.text() == before

    manager.config_path.write_text("llm:\n  model: gpt-4\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        manager.load(include_env=False)


def test_flatten_for_env_round_trips_defaults() -> None:
    flat = flatten_for_env(AdvisorDocsConfig())

    assert flat["ADVISORDOCS__SCHEDULING__DUE_SOON_DAYS"] == "14"
    assert flat["ADVISORDOCS__STORAGE__PRESETS_KEY"] == "wlp.documentPresets"
    assert flat["ADVISORDOCS__MATCHING__OVERLAP_RATIO"] == "0.6"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=AdvisorDocsConfig(),
            file_overrides={"scheduling": {"due_soon_days": "not-an-int"}},
        )


def test_assign_returns_diff_only_when_settings_change(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    diff = manager.assign(["requests", "advisor_name"], "John Smith")

    assert "+  advisor_name: John Smith" in diff
    assert manager.load(include_env=False).requests.advisor_name == "John Smith"
    assert manager.assign(["requests", "advisor_name"], "John Smith") == []


def test_assign_rejects_invalid_values_without_writing(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    before = manager.text()

    with pytest.raises(ConfigError):
        manager.assign(["scheduling", "due_soon_days"], "soon")
    with pytest.raises(ConfigError):
        manager.assign([], 1)

    assert manager.text() == before


def test_replace_validates_edited_text(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    manager.replace("requests:\n  default_frequency: yearly\n")

    assert manager.load(include_env=False).requests.default_frequency == "yearly"
    assert manager.text().startswith("# advisordocs configuration file")
    for text in ("- a list", "requests: [", "requests:\n  default_frequency: weekly\n"):
        with pytest.raises(ConfigError):
            manager.replace(text)
