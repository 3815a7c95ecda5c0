from __future__ import annotations

import json
import logging
import os
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from lufs_meter.audio_contract import DEFAULT_MAX_UPLOAD_BYTES
from lufs_meter.guidance import DEFAULT_TARGET_LUFS, MAX_TARGET_LUFS, MIN_TARGET_LUFS
from lufs_meter.meter import RANGE_MIN_BLOCKS

_ENV_PREFIX = "LUFS_METER_"
_TRUTHY = {"1", "true", "yes", "on"}


class MeterSettings(BaseModel):
    target_lufs: float = Field(DEFAULT_TARGET_LUFS, ge=MIN_TARGET_LUFS, le=MAX_TARGET_LUFS)
    max_upload_bytes: int = Field(DEFAULT_MAX_UPLOAD_BYTES, gt=0)
    max_integrated_blocks: int | None = Field(None)
    include_reference: bool = True
    log_level: str = "WARNING"

    @field_validator("max_integrated_blocks")
    @classmethod
    def _validate_max_integrated_blocks(cls, value: int | None) -> int | None:
        if value is None:
            return value
        if value < RANGE_MIN_BLOCKS:
            raise ValueError(f"max_integrated_blocks must be >= {RANGE_MIN_BLOCKS} when provided.")
        return value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value!r}.")
        return normalized


def load_settings(path: Path) -> MeterSettings:
    data = _load_config_data(path)
    return MeterSettings.model_validate(data)


def _load_config_data(path: Path) -> dict:
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise ImportError("PyYAML is required to load YAML configs.") from exc

        with path.open("r", encoding="utf-8") as handle:
            return yaml.safe_load(handle) or {}

    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@lru_cache(maxsize=1)
def settings_from_env() -> MeterSettings:
    """Build settings from ``LUFS_METER_*`` environment variables.

    ``LUFS_METER_CONFIG`` points at a JSON/YAML file used as the base; the
    individual variables override it.
    """

    config_path = os.getenv(f"{_ENV_PREFIX}CONFIG")
    data: dict = _load_config_data(Path(config_path)) if config_path else {}

    overrides = {
        "target_lufs": os.getenv(f"{_ENV_PREFIX}TARGET_LUFS"),
        "max_upload_bytes": os.getenv(f"{_ENV_PREFIX}MAX_UPLOAD_BYTES"),
        "max_integrated_blocks": os.getenv(f"{_ENV_PREFIX}MAX_INTEGRATED_BLOCKS"),
        "log_level": os.getenv(f"{_ENV_PREFIX}LOG_LEVEL"),
    }
    data.update({key: value for key, value in overrides.items() if value is not None})

    include_reference = os.getenv(f"{_ENV_PREFIX}INCLUDE_REFERENCE")
    if include_reference is not None:
        data["include_reference"] = include_reference.lower() in _TRUTHY

    return MeterSettings.model_validate(data)
