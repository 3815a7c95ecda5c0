"""CLI-facing handlers that delegate to application services."""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import BinaryIO, Iterator

import numpy as np

from lufs_meter.application.analysis_service import AnalyzeLoudness, LoudnessReport
from lufs_meter.guidance import TARGET_PRESETS, VolumeGuidance, build_guidance
from lufs_meter.infrastructure.logging_event_publisher import LoggingEventPublisher
from lufs_meter.meter import LoudnessSnapshot
from lufs_meter.streaming import LiveLoudnessSession
from lufs_meter.utils.config import MeterSettings

_event_publisher = LoggingEventPublisher()

PCM_DTYPE = np.dtype("<f4")


def build_analysis_service(settings: MeterSettings) -> AnalyzeLoudness:
    return AnalyzeLoudness(settings=settings, event_publisher=_event_publisher)


def _lufs(value: float) -> str:
    return f"{value:6.1f}" if math.isfinite(value) else "  -inf"


def format_snapshot(snapshot: LoudnessSnapshot) -> str:
    return (
        f"M {_lufs(snapshot.momentary)} | S {_lufs(snapshot.short_term)} | "
        f"I {_lufs(snapshot.integrated)} LUFS | LRA {snapshot.loudness_range:4.1f} LU"
    )


def format_guidance(guidance: VolumeGuidance) -> list[str]:
    return [
        f"Target:      {guidance.target_lufs:.1f} LUFS",
        f"Guidance:    [{guidance.severity.value}] {guidance.message}",
        f"Action:      {guidance.action}",
    ]


def format_report(report: LoudnessReport) -> list[str]:
    snapshot = report.measurement
    lines = [
        f"Source:      {report.source}",
        f"Format:      {report.sample_rate_hz} Hz, {report.channel_count} ch, {report.duration_seconds:.2f} s "
        f"(channel {report.analyzed_channel} analyzed)",
        f"Integrated:  {_lufs(snapshot.integrated).strip()} LUFS"
        + ("" if snapshot.has_signal else " (no signal above the gate)"),
        f"Short-term:  {_lufs(snapshot.short_term).strip()} LUFS",
        f"Momentary:   {_lufs(snapshot.momentary).strip()} LUFS",
        f"Range:       {snapshot.loudness_range:.1f} LU",
        f"Peak:        {snapshot.peak:.1f} dB (placeholder, not measured)",
    ]
    if report.reference_integrated_lufs is not None:
        lines.append(f"BS.1770 ref: {_lufs(report.reference_integrated_lufs).strip()} LUFS")
    lines.extend(format_guidance(report.guidance))
    return lines


def format_presets() -> list[str]:
    return [
        f"{preset.name:<12} {preset.value:6.1f} LUFS  {preset.label} ({preset.description})"
        for preset in TARGET_PRESETS
    ]


def analyze_path(
    path: Path,
    *,
    settings: MeterSettings,
    correlation_id: str,
    target_lufs: float | None = None,
    report_json: Path | None = None,
) -> LoudnessReport:
    service = build_analysis_service(settings)
    report = service.analyze_file(path, correlation_id=correlation_id, target_lufs=target_lufs)
    if report_json is not None:
        report_json.parent.mkdir(parents=True, exist_ok=True)
        report_json.write_text(json.dumps(report.as_dict(), indent=2))
    return report


def stream_pcm(
    stream: BinaryIO,
    *,
    sample_rate: int,
    target_lufs: float,
    frames_per_read: int = 2048,
    every: int = 1,
    max_integrated_blocks: int | None = None,
) -> Iterator[str]:
    """Meter raw little-endian float32 mono PCM from ``stream``.

    Yields one formatted line each time ``every`` blocks have been ingested,
    then a final line plus guidance once the stream ends.
    """

    session = LiveLoudnessSession.for_sample_rate(sample_rate, max_integrated_blocks=max_integrated_blocks)
    read_size = max(1, frames_per_read) * PCM_DTYPE.itemsize
    step = max(1, every)
    remainder = b""
    last_reported = 0

    while True:
        chunk = stream.read(read_size)
        if not chunk:
            break
        payload = remainder + chunk
        usable = len(payload) - (len(payload) % PCM_DTYPE.itemsize)
        remainder = payload[usable:]
        if usable == 0:
            continue

        snapshot = session.feed(np.frombuffer(payload[:usable], dtype=PCM_DTYPE))
        blocks = session.blocks_ingested
        if snapshot is not None and blocks - last_reported >= step:
            last_reported = blocks
            yield format_snapshot(snapshot)

    final = session.flush()
    yield format_snapshot(final)
    yield from format_guidance(build_guidance(final.integrated, target_lufs))
