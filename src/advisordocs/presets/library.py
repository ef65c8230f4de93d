"""Preset collection persisted to local storage."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Union
from uuid import uuid4

from pydantic import TypeAdapter, ValidationError

from advisordocs.storage import LocalStorage, StorageError

from .models import DocumentPreset, PresetBin, PresetItem

PRESETS_STORAGE_KEY = "wlp.documentPresets"

LOGGER = logging.getLogger(__name__)

_PRESET_LIST = TypeAdapter(list[DocumentPreset])

BinInput = Union[PresetBin, Mapping[str, Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PresetLibrary:
    """Hold document presets in memory and flush them after every change.

    Unreadable or malformed stored data yields an empty library; write
    failures are logged and otherwise ignored.
    """

    def __init__(
        self,
        storage: LocalStorage,
        *,
        key: str = PRESETS_STORAGE_KEY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock
        self._presets: list[DocumentPreset] = self._load()

    @property
    def presets(self) -> list[DocumentPreset]:
        """Return the presets, most recently saved first."""
        return list(self._presets)

    def get(self, preset_id: str) -> Optional[DocumentPreset]:
        return next((preset for preset in self._presets if preset.id == preset_id), None)

    def save(self, name: str, bins: Iterable[BinInput]) -> DocumentPreset:
        """Snapshot ``bins`` into a new preset and store it first in the list.

        Only bin ids, labels and item names are copied. A blank name becomes
        ``Preset N``.
        """
        now = self._clock()
        preset = DocumentPreset(
            id=f"preset-{uuid4().hex[:12]}",
            name=name.strip() or f"Preset {len(self._presets) + 1}",
            bins=_snapshot_bins(bins),
            created_at=now,
            updated_at=now,
        )
        self._presets.insert(0, preset)
        self._flush()
        LOGGER.info("Saved preset %s (%s) with %d bins", preset.id, preset.name, len(preset.bins))
        return preset

    def update(
        self,
        preset_id: str,
        *,
        name: Optional[str] = None,
        bins: Optional[Iterable[BinInput]] = None,
    ) -> Optional[DocumentPreset]:
        """Merge ``name`` and/or ``bins`` into a preset and refresh ``updated_at``.

        Returns the updated preset, or ``None`` when ``preset_id`` is unknown.
        """
        for index, preset in enumerate(self._presets):
            if preset.id != preset_id:
                continue
            changes: dict[str, Any] = {"updated_at": self._clock()}
            if name is not None:
                changes["name"] = name
            if bins is not None:
                changes["bins"] = _snapshot_bins(bins)
            updated = preset.model_copy(update=changes)
            self._presets[index] = updated
            self._flush()
            return updated
        LOGGER.debug("Ignoring update for unknown preset %s", preset_id)
        return None

    def delete(self, preset_id: str) -> bool:
        """Remove a preset by id, returning whether anything was removed."""
        remaining = [preset for preset in self._presets if preset.id != preset_id]
        if len(remaining) == len(self._presets):
            return False
        self._presets = remaining
        self._flush()
        return True

    def _load(self) -> list[DocumentPreset]:
        try:
            raw = self._storage.get_item(self._key)
        except StorageError as exc:
            LOGGER.warning("Could not read presets: %s", exc)
            return []
        if not raw:
            return []
        try:
            return _PRESET_LIST.validate_python(json.loads(raw))
        except (json.JSONDecodeError, ValidationError) as exc:
            LOGGER.warning("Discarding malformed presets under %s: %s", self._key, exc)
            return []

    def _flush(self) -> None:
        payload = _PRESET_LIST.dump_python(self._presets, mode="json", by_alias=True)
        try:
            self._storage.set_item(self._key, json.dumps(payload, indent=2))
        except StorageError as exc:
            LOGGER.warning("Could not persist presets: %s", exc)


def _snapshot_bins(bins: Iterable[BinInput]) -> tuple[PresetBin, ...]:
    snapshot = []
    for entry in bins:
        source = entry if isinstance(entry, PresetBin) else PresetBin.model_validate(entry)
        snapshot.append(
            PresetBin(
                id=source.id,
                label=source.label,
                items=tuple(PresetItem(name=item.name) for item in source.items),
            )
        )
    return tuple(snapshot)


__all__ = ["PresetLibrary", "PRESETS_STORAGE_KEY"]
