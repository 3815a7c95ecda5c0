"""DDD domain layer."""

from .events import AnalysisFailed, AudioIngested, DomainEvent, LoudnessMeasured

__all__ = [
    "DomainEvent",
    "AudioIngested",
    "LoudnessMeasured",
    "AnalysisFailed",
]
