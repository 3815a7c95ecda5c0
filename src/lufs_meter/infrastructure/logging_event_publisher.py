"""Analysis events written to the ``lufs_meter.events`` logger."""

from __future__ import annotations

import logging

from lufs_meter.domain.events import AnalysisFailed, DomainEvent

LOGGER = logging.getLogger("lufs_meter.events")


class LoggingEventPublisher:
    """Log one ``loudness_event`` record per event.

    Failures are logged at WARNING, everything else at INFO. The record's
    ``extra`` carries the event name, the correlation id, the audio source and
    the payload summary.
    """

    def publish(self, event: DomainEvent) -> None:
        level = logging.WARNING if isinstance(event, AnalysisFailed) else logging.INFO
        LOGGER.log(
            level,
            "loudness_event",
            extra={
                "event_name": type(event).__name__,
                "correlation_id": event.correlation_id,
                "source": event.payload_summary.get("source"),
                "payload_summary": event.payload_summary,
                "occurred_at": event.occurred_at.isoformat(),
            },
        )
