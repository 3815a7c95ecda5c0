"""Outbound port for analysis lifecycle events."""

from __future__ import annotations

from typing import Protocol

from lufs_meter.domain.events import DomainEvent


class EventPublisher(Protocol):
    """Receives every event :class:`AnalyzeLoudness` emits for one correlation id."""

    def publish(self, event: DomainEvent) -> None:
        ...


class NullEventPublisher:
    """Drops events; the default when the meter is used as a library."""

    def publish(self, event: DomainEvent) -> None:
        del event
