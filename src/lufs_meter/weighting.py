"""Single-stage frequency weighting applied to one block of samples.

The filter is a fixed biquad high-pass whose feedback coefficients are scaled
by ``sample_rate / 48000``. It approximates the perceptual weighting of
ITU-R BS.1770 but is not the two-stage shelf + high-pass cascade.

Filter memory starts at zero for every block and is discarded afterwards, so
consecutive blocks are filtered independently.
"""

from __future__ import annotations

import numpy as np
from scipy import signal

REFERENCE_SAMPLE_RATE_HZ = 48_000

_B0 = 0.85319059207939
_B1 = -1.70638118415879
_B2 = 0.85319059207939
_A1 = -1.69065929318241
_A2 = 0.73248077421585


def weighting_coefficients(sample_rate: int) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(b, a)`` for the weighting biquad at ``sample_rate``."""

    ratio = sample_rate / REFERENCE_SAMPLE_RATE_HZ
    b = np.array([_B0, _B1, _B2], dtype=np.float64)
    a = np.array([1.0, _A1 * ratio, _A2 * ratio], dtype=np.float64)
    return b, a


def filter_block(samples: np.ndarray, sample_rate: int) -> np.ndarray:
    """Filter one block from a zero initial state and return a block of equal length."""

    block = np.asarray(samples, dtype=np.float64)
    if block.size == 0:
        return block.copy()

    b, a = weighting_coefficients(sample_rate)
    return signal.lfilter(b, a, block)
