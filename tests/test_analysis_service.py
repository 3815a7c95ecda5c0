import json
import math

import pytest

from conftest import make_wav_bytes
from lufs_meter.application.analysis_service import AnalyzeLoudness
from lufs_meter.guidance import GuidanceSeverity
from lufs_meter.meter import LoudnessCalculator
from lufs_meter.io.audio_file import read_audio
from lufs_meter.utils.config import MeterSettings


def test_analyze_file_matches_direct_measurement(tone_wav):
    report = AnalyzeLoudness().analyze_file(tone_wav, target_lufs=-23.0)
    decoded = read_audio(tone_wav)
    direct = LoudnessCalculator(decoded.sample_rate).process_buffer(decoded.channel(0))

    assert report.source == "tone.wav"
    assert report.sample_rate_hz == 48_000
    assert report.channel_count == 1
    assert report.duration_seconds == pytest.approx(4.0)
    assert report.measurement == direct
    assert report.guidance.target_lufs == -23.0
    assert report.suggested_gain_db == pytest.approx(-23.0 - direct.integrated)


def test_reference_reading_is_close_for_a_steady_tone(tone_wav):
    report = AnalyzeLoudness(settings=MeterSettings(include_reference=True)).analyze_file(tone_wav)

    assert report.reference_integrated_lufs is not None
    assert math.isfinite(report.reference_integrated_lufs)
    assert report.reference_integrated_lufs > report.measurement.integrated


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_only_channel_zero_is_measured():
    raw = make_wav_bytes(duration_seconds=1.0, channels=2, silent_channels=(0,))

    report = AnalyzeLoudness().analyze_bytes(raw, filename="stereo.wav")

    assert report.channel_count == 2
    assert report.analyzed_channel == 0
    assert report.measurement.integrated == -math.inf
    assert report.guidance.severity is GuidanceSeverity.NO_SIGNAL
    assert report.suggested_gain_db == 0.0


@pytest.mark.filterwarnings("ignore::RuntimeWarning")
def test_report_as_dict_is_json_safe():
    raw = make_wav_bytes(duration_seconds=1.0, amplitude=0)

    payload = AnalyzeLoudness().analyze_bytes(raw, filename="silence.wav").as_dict()

    assert payload["measurement"]["integrated"] is None
    assert payload["reference_integrated_lufs"] is None
    assert payload["guidance"]["severity"] == "no_signal"
    json.dumps(payload, allow_nan=False)


def test_default_target_comes_from_settings(tone_wav):
    service = AnalyzeLoudness(settings=MeterSettings(target_lufs=-16.0, include_reference=False))

    assert service.analyze_file(tone_wav).guidance.target_lufs == -16.0


def test_integrated_cap_applies_to_file_analysis(tone_wav):
    service = AnalyzeLoudness(settings=MeterSettings(max_integrated_blocks=30, include_reference=False))

    report = service.analyze_file(tone_wav)

    assert math.isfinite(report.measurement.integrated)
