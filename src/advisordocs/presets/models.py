"""Preset data models and label-based frequency inference."""

from __future__ import annotations

from datetime import datetime
from typing import Tuple

from pydantic import BaseModel, ConfigDict, Field

from advisordocs.documents.models import RequestFrequency


class PresetItem(BaseModel):
    """A document type listed in a preset bin."""

    model_config = ConfigDict(frozen=True)

    name: str


class PresetBin(BaseModel):
    """A labeled group of document types sharing a recurrence.

    The recurrence is not stored; it is inferred from ``label`` when the
    preset is applied.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    items: Tuple[PresetItem, ...] = ()

    @property
    def frequency(self) -> RequestFrequency:
        return infer_frequency_from_label(self.label)


class DocumentPreset(BaseModel):
    """A named, reusable bundle of document requests.

    Presets are immutable snapshots; changes go through ``PresetLibrary.update``.
    Serialized with camelCase timestamp keys (``createdAt``/``updatedAt``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    name: str
    bins: Tuple[PresetBin, ...] = ()
    created_at: datetime = Field(alias="createdAt")
    updated_at: datetime = Field(alias="updatedAt")


def infer_frequency_from_label(label: str) -> RequestFrequency:
    """Return the recurrence implied by a bin label such as ``"Monthly Documents"``."""
    lowered = label.lower()
    if "day" in lowered:
        return "daily"
    if "month" in lowered:
        return "monthly"
    if "quarter" in lowered:
        return "quarterly"
    if "year" in lowered:
        return "yearly"
    return "one-time"


__all__ = ["PresetItem", "PresetBin", "DocumentPreset", "infer_frequency_from_label"]
