"""Domain event contracts for loudness analysis workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """Base domain event emitted by application services."""

    correlation_id: str
    payload_summary: dict[str, Any]
    occurred_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


@dataclass(frozen=True, slots=True)
class AudioIngested(DomainEvent):
    """An upload or local file passed the ingest contract and was decoded."""


@dataclass(frozen=True, slots=True)
class LoudnessMeasured(DomainEvent):
    """A loudness report was produced for the ingested audio."""


@dataclass(frozen=True, slots=True)
class AnalysisFailed(DomainEvent):
    """Analysis stopped with an error for a correlation id."""
