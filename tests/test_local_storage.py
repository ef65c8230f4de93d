"""Local storage tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from advisordocs.storage import LocalStorage, StorageError


def test_set_and_get_round_trip(tmp_path: Path) -> None:
    """Values written under a key are returned unchanged.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    storage = LocalStorage(tmp_path / "storage")

    storage.set_item("wlp.documentPresets", '[{"id": "preset-1"}]')

    assert storage.get_item("wlp.documentPresets") == '[{"id": "preset-1"}]'
    assert (tmp_path / "storage" / "wlp.documentPresets.json").exists()


def test_missing_key_returns_none(tmp_path: Path) -> None:
    assert LocalStorage(tmp_path).get_item("absent") is None


def test_keys_remove_and_clear(tmp_path: Path) -> None:
    """Keys are listed sorted and can be removed individually or all at once.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    storage = LocalStorage(tmp_path)
    storage.set_item("b", "2")
    storage.set_item("a", "1")

    assert storage.keys() == ["a", "b"]

    storage.remove_item("a")
    storage.remove_item("a")
    assert storage.keys() == ["b"]

    storage.clear()
    assert storage.keys() == []


def test_invalid_key_raises(tmp_path: Path) -> None:
    storage = LocalStorage(tmp_path)

    with pytest.raises(StorageError):
        storage.set_item("../escape", "x")
    with pytest.raises(StorageError):
        storage.get_item("with space")


def test_unwritable_directory_raises(tmp_path: Path) -> None:
    """A file in place of the storage directory surfaces as StorageError.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(StorageError):
        LocalStorage(blocker).set_item("key", "value")


def test_directory_expands_user(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert LocalStorage("~/store").directory == tmp_path / "store"
