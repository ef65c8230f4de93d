"""Reusable document request presets."""

from .library import PRESETS_STORAGE_KEY, PresetLibrary
from .models import DocumentPreset, PresetBin, PresetItem, infer_frequency_from_label

__all__ = [
    "PRESETS_STORAGE_KEY",
    "PresetLibrary",
    "DocumentPreset",
    "PresetBin",
    "PresetItem",
    "infer_frequency_from_label",
]
