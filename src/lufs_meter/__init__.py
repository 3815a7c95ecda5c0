"""Public package exports for lufs_meter with lazy imports."""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "LoudnessCalculator",
    "LoudnessSnapshot",
    "InvalidSampleRateError",
    "NonFiniteSampleError",
    "SampleLayoutError",
    "block_loudness",
    "gate_loudness",
    "filter_block",
    "LiveLoudnessSession",
    "TargetPreset",
    "TARGET_PRESETS",
    "VolumeGuidance",
    "build_guidance",
    "AnalyzeLoudness",
    "LoudnessReport",
    "AudioIngestError",
]

_EXPORT_MODULES: dict[str, str] = {
    "LoudnessCalculator": "lufs_meter.meter",
    "LoudnessSnapshot": "lufs_meter.meter",
    "InvalidSampleRateError": "lufs_meter.meter",
    "NonFiniteSampleError": "lufs_meter.meter",
    "SampleLayoutError": "lufs_meter.meter",
    "block_loudness": "lufs_meter.meter",
    "gate_loudness": "lufs_meter.meter",
    "filter_block": "lufs_meter.weighting",
    "LiveLoudnessSession": "lufs_meter.streaming",
    "TargetPreset": "lufs_meter.guidance",
    "TARGET_PRESETS": "lufs_meter.guidance",
    "VolumeGuidance": "lufs_meter.guidance",
    "build_guidance": "lufs_meter.guidance",
    "AnalyzeLoudness": "lufs_meter.application.analysis_service",
    "LoudnessReport": "lufs_meter.application.analysis_service",
    "AudioIngestError": "lufs_meter.audio_contract",
}


def __getattr__(name: str) -> Any:
    if name not in _EXPORT_MODULES:
        raise AttributeError(f"module 'lufs_meter' has no attribute {name!r}")

    module = import_module(_EXPORT_MODULES[name])
    value = getattr(module, name)
    globals()[name] = value
    return value
