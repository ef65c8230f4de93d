"""Configuration models describing advisordocs settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AdvisorDocsBaseModel(BaseModel):
    """Shared configuration for advisordocs settings models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(AdvisorDocsBaseModel):
    """Location of the local key/value storage.

    Attributes:
        directory: Directory holding one file per storage key.
        presets_key: Storage key under which document presets are kept.
    """

    directory: str = "~/.advisordocs/storage"
    presets_key: str = "wlp.documentPresets"


class MatchingSettings(AdvisorDocsBaseModel):
    """Thresholds for the word-overlap name similarity test.

    Attributes:
        min_word_length: Shortest word counted as significant.
        min_overlap: Overlap that always suffices for a match.
        overlap_ratio: Fraction of the longer word list that suffices for a match.
    """

    min_word_length: int = Field(default=3, ge=1)
    min_overlap: int = Field(default=2, ge=1)
    overlap_ratio: float = Field(default=0.6, gt=0, le=1)


class SchedulingSettings(AdvisorDocsBaseModel):
    """Due-date classification windows.

    Attributes:
        due_soon_days: Days ahead of now that count as "due soon".
        upcoming_limit: Maximum entries in the upcoming list.
    """

    due_soon_days: int = Field(default=14, ge=0)
    upcoming_limit: int = Field(default=8, ge=1)


class RequestDefaults(AdvisorDocsBaseModel):
    """Defaults applied to newly created requests and uploads.

    Attributes:
        default_folder: Folder assigned to new records.
        default_frequency: Frequency preselected for ad hoc requests.
        advisor_name: Name recorded as the requester when none is given.
    """

    default_folder: str = "Documents"
    default_frequency: Literal["daily", "monthly", "quarterly", "yearly", "one-time"] = "monthly"
    advisor_name: str = "Advisor"


class LoggingSettings(AdvisorDocsBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        file: Optional path of a rotating log file.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(AdvisorDocsBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress notifications by default.
    """

    quiet_default: bool = False


class AdvisorDocsConfig(AdvisorDocsBaseModel):
    """Top-level configuration struct for advisordocs."""

    storage: StorageSettings = Field(default_factory=StorageSettings)
    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    scheduling: SchedulingSettings = Field(default_factory=SchedulingSettings)
    requests: RequestDefaults = Field(default_factory=RequestDefaults)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "AdvisorDocsBaseModel",
    "StorageSettings",
    "MatchingSettings",
    "SchedulingSettings",
    "RequestDefaults",
    "LoggingSettings",
    "CLIOptions",
    "AdvisorDocsConfig",
]
