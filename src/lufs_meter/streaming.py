"""Live measurement on top of :class:`LoudnessCalculator`.

Capture callbacks rarely deliver exactly one 100 ms block at a time, so the
session buffers incoming frames and hands complete blocks to the calculator.
"""

from __future__ import annotations

import logging

import numpy as np

from .meter import LoudnessCalculator, LoudnessSnapshot, as_block

logger = logging.getLogger(__name__)


class LiveLoudnessSession:
    """Accumulate arbitrary-length mono frames into fixed-size blocks."""

    def __init__(self, calculator: LoudnessCalculator) -> None:
        self.calculator = calculator
        self._pending = np.zeros(0, dtype=np.float64)
        self.blocks_ingested = 0

    @classmethod
    def for_sample_rate(
        cls, sample_rate: int, *, max_integrated_blocks: int | None = None
    ) -> "LiveLoudnessSession":
        return cls(LoudnessCalculator(sample_rate, max_integrated_blocks=max_integrated_blocks))

    @property
    def pending_samples(self) -> int:
        return int(self._pending.shape[0])

    def feed(self, frames: np.ndarray) -> LoudnessSnapshot | None:
        """Buffer ``frames``; return a fresh snapshot if a block was completed."""

        incoming = as_block(frames)
        if incoming.size == 0:
            return None

        buffered = np.concatenate((self._pending, incoming))
        block_size = self.calculator.block_size
        complete = buffered.shape[0] // block_size
        for index in range(complete):
            self.calculator.ingest(buffered[index * block_size : (index + 1) * block_size])
        self.blocks_ingested += complete
        self._pending = buffered[complete * block_size :].copy()

        if complete == 0:
            return None
        return self.calculator.snapshot()

    def flush(self) -> LoudnessSnapshot:
        """Ingest whatever partial block is pending and return the current snapshot."""

        if self._pending.size:
            logger.debug("Flushing partial block of %d samples", self._pending.size)
            self.calculator.ingest(self._pending)
            self.blocks_ingested += 1
            self._pending = np.zeros(0, dtype=np.float64)
        return self.calculator.snapshot()

    def reset(self) -> None:
        self._pending = np.zeros(0, dtype=np.float64)
        self.blocks_ingested = 0
        self.calculator.reset()
