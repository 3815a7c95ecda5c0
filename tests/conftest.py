import io
import math
import struct
import wave

import numpy as np
import pytest


def make_sine(
    *, amplitude: float = 0.1, frequency: float = 1_000.0, sample_rate: int = 48_000, duration_s: float = 1.0
) -> np.ndarray:
    t = np.arange(int(round(sample_rate * duration_s))) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


def make_wav_bytes(
    *,
    duration_seconds: float = 1.0,
    sample_rate: int = 48_000,
    channels: int = 1,
    amplitude: int = 8_000,
    silent_channels: tuple[int, ...] = (),
) -> bytes:
    frames = int(duration_seconds * sample_rate)
    tone = bytearray()
    for frame in range(frames):
        sample = int(amplitude * math.sin(2 * math.pi * 1_000 * frame / sample_rate))
        for channel in range(channels):
            tone.extend(struct.pack("<h", 0 if channel in silent_channels else sample))

    with io.BytesIO() as buffer:
        with wave.open(buffer, "wb") as wav:
            wav.setnchannels(channels)
            wav.setsampwidth(2)
            wav.setframerate(sample_rate)
            wav.writeframes(bytes(tone))
        return buffer.getvalue()


@pytest.fixture
def sine_wave():
    sample_rate = 48_000
    base = make_sine(amplitude=1.0, sample_rate=sample_rate, duration_s=5.0)
    return {
        "sample_rate": sample_rate,
        "quiet": 0.1 * base,
        "loud": 0.5 * base,
    }


@pytest.fixture
def tone_wav(tmp_path):
    path = tmp_path / "tone.wav"
    path.write_bytes(make_wav_bytes(duration_seconds=4.0))
    return path
