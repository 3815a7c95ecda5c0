"""Application service orchestrating whole-file loudness analysis."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from uuid import uuid4

from lufs_meter.application.event_publisher import EventPublisher, NullEventPublisher
from lufs_meter.audio_contract import (
    ANALYZED_CHANNEL_INDEX,
    AudioIngestError,
    ensure_supported_path,
    ensure_supported_upload,
    ensure_upload_size,
)
from lufs_meter.domain.events import AnalysisFailed, AudioIngested, LoudnessMeasured
from lufs_meter import guidance as guidance_rules
from lufs_meter.guidance import VolumeGuidance, build_guidance, validate_target_lufs
from lufs_meter.io.audio_file import DecodedAudio, read_audio_bytes
from lufs_meter.meter import LoudnessCalculator, LoudnessSnapshot
from lufs_meter.reference import measure_reference_loudness
from lufs_meter.utils.config import MeterSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LoudnessReport:
    """Everything measured for one finite audio source."""

    source: str
    sample_rate_hz: int
    channel_count: int
    duration_seconds: float
    analyzed_channel: int
    measurement: LoudnessSnapshot
    guidance: VolumeGuidance
    reference_integrated_lufs: float | None = None

    @property
    def suggested_gain_db(self) -> float:
        return guidance_rules.suggested_gain_db(self.measurement.integrated, self.guidance.target_lufs)

    def as_dict(self) -> dict[str, Any]:
        reference = self.reference_integrated_lufs
        return {
            "source": self.source,
            "sample_rate_hz": self.sample_rate_hz,
            "channel_count": self.channel_count,
            "duration_seconds": self.duration_seconds,
            "analyzed_channel": self.analyzed_channel,
            "measurement": self.measurement.as_dict(),
            "guidance": self.guidance.as_dict(),
            "suggested_gain_db": self.suggested_gain_db,
            "reference_integrated_lufs": reference if reference is not None and math.isfinite(reference) else None,
        }


@dataclass(slots=True)
class AnalyzeLoudness:
    """Use case that decodes one audio source and measures its loudness."""

    settings: MeterSettings = field(default_factory=MeterSettings)
    event_publisher: EventPublisher = field(default_factory=NullEventPublisher)

    def analyze_bytes(
        self,
        raw_bytes: bytes,
        *,
        filename: str | None = None,
        content_type: str | None = None,
        correlation_id: str | None = None,
        target_lufs: float | None = None,
    ) -> LoudnessReport:
        run_correlation_id = correlation_id or str(uuid4())
        source = filename or "upload"
        target = validate_target_lufs(self.settings.target_lufs if target_lufs is None else target_lufs)
        try:
            ensure_upload_size(len(raw_bytes), self.settings.max_upload_bytes)
            ensure_supported_upload(filename, content_type)
            decoded = read_audio_bytes(raw_bytes)
        except AudioIngestError as error:
            self._publish_failure(run_correlation_id, source, error.code, error.message)
            raise
        return self._measure(decoded, source, run_correlation_id, target)

    def analyze_file(
        self,
        path: Path,
        *,
        correlation_id: str | None = None,
        target_lufs: float | None = None,
    ) -> LoudnessReport:
        run_correlation_id = correlation_id or str(uuid4())
        try:
            ensure_supported_path(path)
            raw_bytes = path.read_bytes()
        except AudioIngestError as error:
            self._publish_failure(run_correlation_id, str(path), error.code, error.message)
            raise
        except OSError as error:
            self._publish_failure(run_correlation_id, str(path), "file_unreadable", str(error))
            raise AudioIngestError("file_unreadable", f"Audio file is unreadable: {path}") from error

        return self.analyze_bytes(
            raw_bytes,
            filename=path.name,
            correlation_id=run_correlation_id,
            target_lufs=target_lufs,
        )

    def _measure(
        self,
        decoded: DecodedAudio,
        source: str,
        correlation_id: str,
        target: float,
    ) -> LoudnessReport:
        self.event_publisher.publish(
            AudioIngested(
                correlation_id=correlation_id,
                payload_summary={
                    "source": source,
                    "sample_rate_hz": decoded.sample_rate,
                    "channel_count": decoded.channel_count,
                    "duration_seconds": decoded.duration_seconds,
                },
            )
        )

        samples = decoded.channel(ANALYZED_CHANNEL_INDEX)
        try:
            calculator = LoudnessCalculator(
                decoded.sample_rate,
                max_integrated_blocks=self.settings.max_integrated_blocks,
            )
            snapshot = calculator.process_buffer(samples)
        except ValueError as error:
            self._publish_failure(correlation_id, source, "measurement_failed", str(error))
            raise

        reference = None
        if self.settings.include_reference:
            reference = measure_reference_loudness(samples, decoded.sample_rate)

        report = LoudnessReport(
            source=source,
            sample_rate_hz=decoded.sample_rate,
            channel_count=decoded.channel_count,
            duration_seconds=decoded.duration_seconds,
            analyzed_channel=ANALYZED_CHANNEL_INDEX,
            measurement=snapshot,
            guidance=build_guidance(snapshot.integrated, target),
            reference_integrated_lufs=reference,
        )
        self.event_publisher.publish(
            LoudnessMeasured(
                correlation_id=correlation_id,
                payload_summary={
                    "source": source,
                    "blocks": calculator.blocks_processed,
                    "integrated": report.measurement.as_dict()["integrated"],
                    "has_signal": snapshot.has_signal,
                    "range": snapshot.loudness_range,
                    "severity": report.guidance.severity.value,
                },
            )
        )
        return report

    def _publish_failure(self, correlation_id: str, source: str, code: str, message: str) -> None:
        logger.warning("Loudness analysis failed for %s: %s", source, message)
        self.event_publisher.publish(
            AnalysisFailed(
                correlation_id=correlation_id,
                payload_summary={"source": source, "code": code, "message": message},
            )
        )
