"""File-backed key/value storage, one file per key."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .errors import StorageError

DEFAULT_STORAGE_DIR = Path("~/.advisordocs/storage")
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")

LOGGER = logging.getLogger(__name__)


class LocalStorage:
    """Persist string values under short keys inside a directory.

    Values are opaque strings; callers own serialization. Each key maps to
    ``<directory>/<key>.json``.
    """

    def __init__(self, directory: Path | str = DEFAULT_STORAGE_DIR) -> None:
        """Initialize the storage rooted at ``directory``.

        Args:
            directory: Directory that holds the key files. Created lazily.
        """
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        """Return the directory that holds the key files."""
        return self._directory

    def get_item(self, key: str) -> str | None:
        """Return the value stored under ``key`` or ``None`` when absent.

        Raises:
            StorageError: If the key is invalid or the file cannot be read.
        """
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Unable to read storage key {key!r}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous value.

        Raises:
            StorageError: If the key is invalid or the file cannot be written.
        """
        path = self._path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            path.write_text(value, encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Unable to write storage key {key!r}: {exc}") from exc
        LOGGER.debug("Wrote %d characters to storage key %s", len(value), key)

    def remove_item(self, key: str) -> None:
        """Delete ``key``; missing keys are ignored."""
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Unable to remove storage key {key!r}: {exc}") from exc

    def keys(self) -> list[str]:
        """Return the stored keys in sorted order."""
        if not self._directory.is_dir():
            return []
        return sorted(path.stem for path in self._directory.glob("*.json") if path.is_file())

    def clear(self) -> None:
        """Remove every stored key."""
        for key in self.keys():
            self.remove_item(key)

    def _path_for(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise StorageError(f"Invalid storage key {key!r}")
        return self._directory / f"{key}.json"


__all__ = ["LocalStorage", "DEFAULT_STORAGE_DIR", "StorageError"]
