from __future__ import annotations

import io
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import soundfile as sf

from lufs_meter.audio_contract import AudioIngestError


@dataclass(frozen=True, slots=True)
class DecodedAudio:
    """Channel-first float64 PCM plus the stream parameters it came with."""

    samples: np.ndarray
    sample_rate: int

    @property
    def channel_count(self) -> int:
        return int(self.samples.shape[0])

    @property
    def frames(self) -> int:
        return int(self.samples.shape[1])

    @property
    def duration_seconds(self) -> float:
        return self.frames / self.sample_rate if self.sample_rate else 0.0

    def channel(self, index: int = 0) -> np.ndarray:
        if not 0 <= index < self.channel_count:
            raise IndexError(f"Channel {index} out of range for {self.channel_count}-channel audio.")
        return self.samples[index]


def _decode(source) -> DecodedAudio:
    try:
        audio, sample_rate = sf.read(source, dtype="float64", always_2d=True)
    except (RuntimeError, TypeError) as exc:
        raise AudioIngestError("undecodable_audio", f"Audio could not be decoded: {exc}") from exc

    if audio.shape[0] == 0:
        raise AudioIngestError("empty_file", "Decoded audio contains no samples.")
    return DecodedAudio(samples=np.ascontiguousarray(audio.T), sample_rate=int(sample_rate))


def read_audio(path: Path) -> DecodedAudio:
    return _decode(str(path))


def read_audio_bytes(raw_bytes: bytes) -> DecodedAudio:
    return _decode(io.BytesIO(raw_bytes))


def write_audio(path: Path, samples: np.ndarray, sample_rate: int) -> None:
    """Write channel-first or mono float samples to ``path``."""

    audio = np.asarray(samples)
    if audio.ndim == 2:
        audio = audio.T
    sf.write(path, audio, samplerate=sample_rate, subtype="FLOAT")
