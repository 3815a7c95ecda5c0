"""Target loudness presets and volume-adjustment guidance."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any

MIN_TARGET_LUFS = -50.0
MAX_TARGET_LUFS = 0.0
DEFAULT_TARGET_LUFS = -14.0

ON_TARGET_TOLERANCE_DB = 0.5
SLIGHT_DEVIATION_DB = 1.5


class InvalidTargetLoudnessError(ValueError):
    """Raised when a target loudness is outside the supported range."""


class GuidanceSeverity(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
    NO_SIGNAL = "no_signal"


@dataclass(frozen=True, slots=True)
class TargetPreset:
    """Named loudness target for a delivery platform."""

    name: str
    label: str
    value: float
    description: str


TARGET_PRESETS: tuple[TargetPreset, ...] = (
    TargetPreset("spotify", "Spotify", -14.0, "Streaming standard"),
    TargetPreset("youtube", "YouTube", -13.0, "Video platform"),
    TargetPreset("apple-music", "Apple Music", -16.0, "Apple streaming"),
    TargetPreset("broadcast", "Broadcast", -23.0, "TV/Radio standard"),
    TargetPreset("mastering", "Mastering", -9.0, "High impact"),
)


def preset_names() -> tuple[str, ...]:
    return tuple(preset.name for preset in TARGET_PRESETS)


def resolve_preset(raw_value: str) -> TargetPreset:
    """Look a preset up by name or label, case-insensitively."""

    normalized = raw_value.strip().lower()
    for preset in TARGET_PRESETS:
        if normalized in (preset.name, preset.label.lower()):
            return preset

    allowed = ", ".join(preset_names())
    raise ValueError(f"Unknown target preset: '{raw_value}'. Allowed values: {allowed}.")


def validate_target_lufs(target_lufs: float) -> float:
    value = float(target_lufs)
    if not math.isfinite(value) or not (MIN_TARGET_LUFS <= value <= MAX_TARGET_LUFS):
        raise InvalidTargetLoudnessError(
            f"Target loudness must be between {MIN_TARGET_LUFS:.0f} and {MAX_TARGET_LUFS:.0f} LUFS, got {target_lufs}."
        )
    return value


@dataclass(frozen=True, slots=True)
class VolumeGuidance:
    """How far a measured loudness is from the target and what to do about it."""

    current_lufs: float
    target_lufs: float
    difference_db: float | None
    severity: GuidanceSeverity
    message: str
    action: str

    def as_dict(self) -> dict[str, Any]:
        return {
            "current_lufs": self.current_lufs if math.isfinite(self.current_lufs) else None,
            "target_lufs": self.target_lufs,
            "difference_db": self.difference_db,
            "severity": self.severity.value,
            "message": self.message,
            "action": self.action,
        }


def suggested_gain_db(current_lufs: float, target_lufs: float) -> float:
    """Gain that would move ``current_lufs`` onto the target; 0.0 without signal."""

    if not math.isfinite(current_lufs):
        return 0.0
    return float(target_lufs - current_lufs)


def build_guidance(current_lufs: float, target_lufs: float) -> VolumeGuidance:
    target = validate_target_lufs(target_lufs)

    if not math.isfinite(current_lufs):
        return VolumeGuidance(
            current_lufs=current_lufs,
            target_lufs=target,
            difference_db=None,
            severity=GuidanceSeverity.NO_SIGNAL,
            message="No signal above the loudness gate.",
            action="Check the input level or source before adjusting volume",
        )

    difference = float(current_lufs - target)
    magnitude = abs(difference)
    too_loud = difference > 0

    if magnitude <= ON_TARGET_TOLERANCE_DB:
        return VolumeGuidance(
            current_lufs=current_lufs,
            target_lufs=target,
            difference_db=difference,
            severity=GuidanceSeverity.GOOD,
            message="Perfect! Your audio is at the target loudness.",
            action="No adjustment needed",
        )

    if magnitude <= SLIGHT_DEVIATION_DB:
        severity = GuidanceSeverity.WARNING
        message = "Audio is slightly too loud" if too_loud else "Audio is slightly too quiet"
    else:
        severity = GuidanceSeverity.CRITICAL
        message = "Audio is significantly too loud" if too_loud else "Audio is significantly too quiet"

    verb = "Decrease" if too_loud else "Increase"
    return VolumeGuidance(
        current_lufs=current_lufs,
        target_lufs=target,
        difference_db=difference,
        severity=severity,
        message=message,
        action=f"{verb} volume by approximately {magnitude:.1f} dB",
    )
