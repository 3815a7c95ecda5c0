"""Block-based loudness measurement engine.

A :class:`LoudnessCalculator` turns mono PCM blocks of roughly 100 ms into
block loudness values, keeps three histories of them and reduces those
histories into a :class:`LoudnessSnapshot` on demand:

* momentary: last 48 blocks, absolute gate only;
* short-term: last 30 blocks, absolute gate only;
* integrated: every block since the last reset, absolute + relative gate;
* range: spread between the 10th and 95th percentile of the gated integrated
  blocks, once at least 3 s of audio has been seen.

"No usable data" is reported with sentinels rather than exceptions: ``-inf``
for loudness and ``0.0`` for range. Only a bad sample rate, non-finite samples
and multi-channel blocks raise.
"""

from __future__ import annotations

import logging
import math
import numbers
from collections import deque
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import numpy as np

from .weighting import filter_block

logger = logging.getLogger(__name__)

BLOCK_SECONDS = 0.1
MOMENTARY_BLOCKS = 48
SHORT_TERM_BLOCKS = 30
RANGE_MIN_BLOCKS = 30

ABSOLUTE_GATE_LUFS = -70.0
RELATIVE_GATE_OFFSET_LU = -10.0
LOUDNESS_OFFSET_DB = -0.691

RANGE_LOW_PERCENTILE = 0.10
RANGE_HIGH_PERCENTILE = 0.95

# Stand-in until oversampled true-peak detection exists.
PEAK_PLACEHOLDER_DB = -6.0


class InvalidSampleRateError(ValueError):
    """Raised when a calculator is built without a positive integer sample rate."""


class NonFiniteSampleError(ValueError):
    """Raised when a sample block contains NaN or infinite values."""


class SampleLayoutError(ValueError):
    """Raised when samples are not laid out the way the meter reads them."""


@dataclass(frozen=True, slots=True)
class LoudnessSnapshot:
    """One reading of every loudness horizon.

    ``peak`` is a fixed placeholder and is not derived from the samples;
    ``peak_is_measured`` is always ``False``.
    """

    momentary: float
    short_term: float
    integrated: float
    loudness_range: float
    peak: float = PEAK_PLACEHOLDER_DB
    peak_is_measured: bool = False

    @property
    def has_signal(self) -> bool:
        return math.isfinite(self.integrated)

    def as_dict(self) -> dict[str, Any]:
        """JSON-safe mapping; non-finite loudness values become ``None``."""

        return {
            "momentary": _finite_or_none(self.momentary),
            "short_term": _finite_or_none(self.short_term),
            "integrated": _finite_or_none(self.integrated),
            "range": self.loudness_range,
            "peak": self.peak,
            "peak_is_measured": self.peak_is_measured,
        }


def _finite_or_none(value: float) -> float | None:
    return value if math.isfinite(value) else None


def validate_sample_rate(sample_rate: Any) -> int:
    if sample_rate is None:
        raise InvalidSampleRateError("Sample rate is required.")
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, numbers.Integral):
        raise InvalidSampleRateError(f"Sample rate must be an integer, got {sample_rate!r}.")
    if sample_rate <= 0:
        raise InvalidSampleRateError(f"Sample rate must be positive, got {sample_rate}.")
    return int(sample_rate)


def block_size_for(sample_rate: int) -> int:
    """Samples per 100 ms block at ``sample_rate``."""

    return max(1, int(round(sample_rate * BLOCK_SECONDS)))


def as_block(samples: Iterable[float] | np.ndarray) -> np.ndarray:
    """Return ``samples`` as a 1-D float64 array, rejecting non-finite values.

    Blocks are mono. Multi-channel input raises :class:`SampleLayoutError`;
    pick a channel first or use :meth:`LoudnessCalculator.process_buffer`.
    """

    block = np.asarray(samples, dtype=np.float64)
    if block.ndim > 1:
        raise SampleLayoutError(
            f"Sample block must be 1-D mono, got an array of shape {block.shape}."
        )
    block = block.reshape(-1)
    if not np.all(np.isfinite(block)):
        raise NonFiniteSampleError("Sample block contains NaN or infinite values.")
    return block


def first_channel(samples: Iterable[float] | np.ndarray) -> np.ndarray:
    """Return channel 0 of a mono or channel-first ``(channels, frames)`` buffer."""

    audio = np.asarray(samples, dtype=np.float64)
    if audio.ndim <= 1:
        return audio
    if audio.ndim > 2:
        raise SampleLayoutError(
            f"Expected mono or (channels, frames) audio, got {audio.ndim} dimensions."
        )
    channels, frames = audio.shape
    if channels > frames:
        raise SampleLayoutError(
            f"Expected (channels, frames) audio, got shape {audio.shape}; "
            "frames-first buffers must be transposed."
        )
    return audio[0]


def validate_max_integrated_blocks(max_blocks: Any) -> int | None:
    if max_blocks is None:
        return None
    if isinstance(max_blocks, bool) or not isinstance(max_blocks, numbers.Integral):
        raise ValueError(f"max_integrated_blocks must be an integer, got {max_blocks!r}.")
    if max_blocks < RANGE_MIN_BLOCKS:
        raise ValueError(f"max_integrated_blocks must be at least {RANGE_MIN_BLOCKS} when provided.")
    return int(max_blocks)


def mean_square_to_loudness(mean_square: float) -> float:
    if not mean_square > 0:
        return -math.inf
    return LOUDNESS_OFFSET_DB + 10.0 * math.log10(mean_square)


def block_loudness(samples: Iterable[float] | np.ndarray, sample_rate: int) -> float:
    """Loudness of one block: weight, take the mean square, convert to dB."""

    block = as_block(samples)
    if block.size == 0:
        return -math.inf

    weighted = filter_block(block, sample_rate)
    mean_square = float(np.mean(np.square(weighted)))
    return mean_square_to_loudness(mean_square)


def energy_mean_loudness(values: Sequence[float]) -> float:
    """Average loudness values in the energy domain; ``-inf`` for no values."""

    if len(values) == 0:
        return -math.inf
    energies = np.power(10.0, np.asarray(values, dtype=np.float64) / 10.0)
    mean_energy = float(np.mean(energies))
    if mean_energy <= 0:
        return -math.inf
    return float(10.0 * np.log10(mean_energy))


def absolute_gate(values: Iterable[float]) -> list[float]:
    return [value for value in values if value > ABSOLUTE_GATE_LUFS]


def gate_loudness(values: Iterable[float]) -> list[float]:
    """Two-pass gate: drop blocks at or below -70, then those 10 LU under the gated mean."""

    gated = absolute_gate(values)
    if not gated:
        return []

    relative_threshold = energy_mean_loudness(gated) + RELATIVE_GATE_OFFSET_LU
    return [value for value in gated if value > relative_threshold]


def loudness_range(values: Sequence[float]) -> float:
    if len(values) < RANGE_MIN_BLOCKS:
        return 0.0

    gated = sorted(gate_loudness(values))
    count = len(gated)
    if count == 0:
        return 0.0

    low_index = math.floor(count * RANGE_LOW_PERCENTILE)
    high_index = math.floor(count * RANGE_HIGH_PERCENTILE)
    if high_index >= count:
        return 0.0
    return float(gated[high_index] - gated[low_index])


class LoudnessCalculator:
    """Streaming loudness meter for a single mono channel.

    Not thread-safe; use one instance per analysis session.

    ``max_integrated_blocks`` bounds the integrated history (oldest blocks are
    evicted first). It defaults to ``None``, which keeps every block until
    :meth:`reset`.
    """

    def __init__(self, sample_rate: int, *, max_integrated_blocks: int | None = None) -> None:
        self.sample_rate = validate_sample_rate(sample_rate)
        self.max_integrated_blocks = validate_max_integrated_blocks(max_integrated_blocks)
        self.block_size = block_size_for(self.sample_rate)
        self.momentary_length = MOMENTARY_BLOCKS
        self.short_term_length = SHORT_TERM_BLOCKS

        self._momentary: deque[float] = deque(maxlen=self.momentary_length)
        self._short_term: deque[float] = deque(maxlen=self.short_term_length)
        self._integrated: deque[float] = deque(maxlen=self.max_integrated_blocks)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(sample_rate={self.sample_rate}, "
            f"blocks={len(self._integrated)})"
        )

    @property
    def momentary_history(self) -> tuple[float, ...]:
        return tuple(self._momentary)

    @property
    def short_term_history(self) -> tuple[float, ...]:
        return tuple(self._short_term)

    @property
    def integrated_history(self) -> tuple[float, ...]:
        return tuple(self._integrated)

    @property
    def blocks_processed(self) -> int:
        return len(self._integrated)

    def loudness(self, block: Iterable[float] | np.ndarray) -> float:
        return block_loudness(block, self.sample_rate)

    def push_loudness(self, value: float) -> None:
        """Record one block loudness value in every history."""

        self._momentary.append(value)
        self._short_term.append(value)
        self._integrated.append(value)

    def ingest(self, block: Iterable[float] | np.ndarray) -> None:
        self.push_loudness(self.loudness(block))

    def momentary(self) -> float:
        return energy_mean_loudness(absolute_gate(self._momentary))

    def short_term(self) -> float:
        return energy_mean_loudness(absolute_gate(self._short_term))

    def integrated(self) -> float:
        return energy_mean_loudness(gate_loudness(self._integrated))

    def loudness_range(self) -> float:
        return loudness_range(self._integrated)

    def snapshot(self) -> LoudnessSnapshot:
        return LoudnessSnapshot(
            momentary=self.momentary(),
            short_term=self.short_term(),
            integrated=self.integrated(),
            loudness_range=self.loudness_range(),
        )

    def reset(self) -> None:
        self._momentary.clear()
        self._short_term.clear()
        self._integrated.clear()

    def iter_blocks(self, samples: np.ndarray) -> Iterable[np.ndarray]:
        """Yield consecutive blocks of ``samples``; the last one may be short."""

        for start in range(0, samples.shape[0], self.block_size):
            yield samples[start : start + self.block_size]

    def process_buffer(self, samples: Iterable[float] | np.ndarray) -> LoudnessSnapshot:
        """Measure a whole finite signal from scratch.

        A 2-D channel-first array is accepted; only channel 0 is read.
        """

        signal = as_block(first_channel(samples))

        self.reset()
        for block in self.iter_blocks(signal):
            self.ingest(block)

        result = self.snapshot()
        logger.debug(
            "Processed %d samples in %d blocks at %d Hz (integrated=%.2f)",
            signal.shape[0],
            self.blocks_processed,
            self.sample_rate,
            result.integrated,
        )
        return result
