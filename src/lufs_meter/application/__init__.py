"""DDD application layer."""

from .analysis_service import AnalyzeLoudness, LoudnessReport
from .event_publisher import EventPublisher, NullEventPublisher

__all__ = ["AnalyzeLoudness", "LoudnessReport", "EventPublisher", "NullEventPublisher"]
