import numpy as np
import pytest

from conftest import make_wav_bytes
from lufs_meter.audio_contract import AudioIngestError
from lufs_meter.io.audio_file import read_audio, read_audio_bytes, write_audio


def test_write_and_read_audio_roundtrip(tmp_path):
    audio = np.linspace(-0.5, 0.5, 4410, dtype=np.float32)
    sample_rate = 44100
    path = tmp_path / "roundtrip.wav"

    write_audio(path, audio, sample_rate)
    decoded = read_audio(path)

    assert decoded.sample_rate == sample_rate
    assert decoded.channel_count == 1
    assert decoded.frames == audio.shape[0]
    assert np.allclose(decoded.channel(0), audio, atol=1e-6)


def test_read_audio_bytes_is_channel_first():
    decoded = read_audio_bytes(make_wav_bytes(duration_seconds=0.5, channels=2, silent_channels=(1,)))

    assert decoded.samples.shape == (2, 24_000)
    assert decoded.samples.dtype == np.float64
    assert decoded.duration_seconds == pytest.approx(0.5)
    assert np.abs(decoded.channel(0)).max() > 0.2
    assert not np.any(decoded.channel(1))


def test_channel_out_of_range():
    decoded = read_audio_bytes(make_wav_bytes(duration_seconds=0.1))

    with pytest.raises(IndexError):
        decoded.channel(1)


def test_garbage_bytes_are_undecodable():
    with pytest.raises(AudioIngestError) as exc_info:
        read_audio_bytes(b"definitely not a wav file")

    assert exc_info.value.code == "undecodable_audio"


def test_header_only_wav_is_empty():
    with pytest.raises(AudioIngestError) as exc_info:
        read_audio_bytes(make_wav_bytes(duration_seconds=0.0))

    assert exc_info.value.code == "empty_file"
