"""BS.1770-4 reference reading backed by pyloudnorm.

The in-house meter is an approximation. This reading is reported next to it so
users can see how far the two disagree on a given file.
"""

from __future__ import annotations

import math

import numpy as np
import pyloudnorm as pyln

REFERENCE_BLOCK_SECONDS = 0.4


def measure_reference_loudness(samples: np.ndarray, sample_rate: int) -> float:
    """Return integrated loudness of a mono signal, ``-inf`` if it is too short or silent."""

    mono = np.asarray(samples, dtype=np.float64).reshape(-1)
    if mono.shape[0] <= int(REFERENCE_BLOCK_SECONDS * sample_rate):
        return -math.inf

    meter = pyln.Meter(sample_rate, block_size=REFERENCE_BLOCK_SECONDS)
    with np.errstate(divide="ignore", invalid="ignore"):
        loudness = float(meter.integrated_loudness(mono))
    if math.isnan(loudness):
        return -math.inf
    return loudness
