from __future__ import annotations

import logging
import math

import pytest

from conftest import make_wav_bytes
from lufs_meter.application.analysis_service import AnalyzeLoudness
from lufs_meter.audio_contract import AudioIngestError
from lufs_meter.domain.events import AnalysisFailed, AudioIngested, LoudnessMeasured
from lufs_meter.guidance import InvalidTargetLoudnessError
from lufs_meter.infrastructure.logging_event_publisher import LoggingEventPublisher
from lufs_meter.utils.config import MeterSettings


class RecordingPublisher:
    def __init__(self) -> None:
        self.events = []

    def publish(self, event) -> None:
        self.events.append(event)


def _service(publisher, **settings) -> AnalyzeLoudness:
    return AnalyzeLoudness(settings=MeterSettings(**settings), event_publisher=publisher)


def test_analyze_bytes_emits_events_in_order_success() -> None:
    publisher = RecordingPublisher()
    service = _service(publisher, include_reference=False)

    report = service.analyze_bytes(make_wav_bytes(duration_seconds=2.0), filename="tone.wav", correlation_id="corr-1")

    assert [type(event) for event in publisher.events] == [AudioIngested, LoudnessMeasured]
    assert {event.correlation_id for event in publisher.events} == {"corr-1"}
    assert publisher.events[0].payload_summary["sample_rate_hz"] == 48_000
    assert publisher.events[1].payload_summary["blocks"] == 20
    assert publisher.events[1].payload_summary["has_signal"] is True
    assert math.isfinite(report.measurement.integrated)
    assert report.reference_integrated_lufs is None


def test_analyze_bytes_emits_failure_event() -> None:
    publisher = RecordingPublisher()
    service = _service(publisher)

    with pytest.raises(AudioIngestError):
        service.analyze_bytes(b"", filename="empty.wav", correlation_id="corr-2")

    assert [type(event) for event in publisher.events] == [AnalysisFailed]
    assert publisher.events[0].payload_summary["code"] == "empty_file"


def test_invalid_target_fails_before_ingest() -> None:
    publisher = RecordingPublisher()
    service = _service(publisher)

    with pytest.raises(InvalidTargetLoudnessError):
        service.analyze_bytes(make_wav_bytes(), filename="tone.wav", target_lufs=12.0)

    assert publisher.events == []


def test_analyze_file_reports_missing_file(tmp_path) -> None:
    publisher = RecordingPublisher()
    service = _service(publisher)

    with pytest.raises(AudioIngestError) as exc_info:
        service.analyze_file(tmp_path / "missing.wav", correlation_id="corr-3")

    assert exc_info.value.code == "file_not_found"
    assert [type(event) for event in publisher.events] == [AnalysisFailed]


def test_logging_event_publisher_writes_structured_record(caplog) -> None:
    service = _service(LoggingEventPublisher(), include_reference=False)

    with caplog.at_level(logging.INFO, logger="lufs_meter.events"):
        service.analyze_bytes(make_wav_bytes(), filename="tone.wav", correlation_id="corr-4")

    records = [record for record in caplog.records if record.name == "lufs_meter.events"]
    assert [record.event_name for record in records] == ["AudioIngested", "LoudnessMeasured"]
    assert all(record.getMessage() == "loudness_event" for record in records)
    assert records[0].correlation_id == "corr-4"
    assert records[0].source == "tone.wav"


def test_logging_event_publisher_logs_failures_as_warnings(caplog) -> None:
    service = _service(LoggingEventPublisher())

    with caplog.at_level(logging.INFO, logger="lufs_meter.events"):
        with pytest.raises(AudioIngestError):
            service.analyze_bytes(b"", filename="empty.wav", correlation_id="corr-5")

    records = [record for record in caplog.records if record.name == "lufs_meter.events"]
    assert len(records) == 1
    assert records[0].levelno == logging.WARNING
    assert records[0].event_name == "AnalysisFailed"
    assert records[0].source == "empty.wav"


def test_analyze_file_reports_unreadable_file(tone_wav, monkeypatch) -> None:
    publisher = RecordingPublisher()
    service = _service(publisher)

    def deny(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr("pathlib.Path.read_bytes", deny)

    with pytest.raises(AudioIngestError) as exc_info:
        service.analyze_file(tone_wav, correlation_id="corr-6")

    assert exc_info.value.code == "file_unreadable"
    assert [type(event) for event in publisher.events] == [AnalysisFailed]
    assert publisher.events[0].payload_summary["code"] == "file_unreadable"
