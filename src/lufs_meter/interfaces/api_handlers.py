"""API-facing handlers that delegate to application services."""

from __future__ import annotations

from lufs_meter.application.analysis_service import AnalyzeLoudness, LoudnessReport
from lufs_meter.audio_contract import AudioIngestError
from lufs_meter.infrastructure.logging_event_publisher import LoggingEventPublisher
from lufs_meter.utils.config import settings_from_env

_event_publisher = LoggingEventPublisher()
analysis_service = AnalyzeLoudness(settings=settings_from_env(), event_publisher=_event_publisher)


def analyze_uploaded_bytes(
    payload: bytes,
    *,
    filename: str | None,
    content_type: str | None,
    target_lufs: float | None,
    correlation_id: str,
) -> LoudnessReport:
    return analysis_service.analyze_bytes(
        payload,
        filename=filename,
        content_type=content_type,
        correlation_id=correlation_id,
        target_lufs=target_lufs,
    )


INGEST_ERROR_STATUS: dict[str, int] = {
    "empty_file": 400,
    "file_too_large": 400,
    "undecodable_audio": 400,
    "file_not_found": 400,
    "file_unreadable": 400,
    "unsupported_format": 415,
}


def ingest_error_status(error: AudioIngestError) -> int:
    return INGEST_ERROR_STATUS.get(error.code, 400)


__all__ = ["AudioIngestError", "analyze_uploaded_bytes", "ingest_error_status"]
