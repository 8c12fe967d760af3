"""Shared building blocks for domain models and events."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr


def generate_id() -> str:
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ValueObject(BaseModel):
    """Immutable model compared by value."""

    model_config = {"frozen": True}


class DomainEvent(BaseModel):
    """Something that happened during a teardown run."""

    event_id: str = Field(default_factory=generate_id)
    event_type: str = ""
    occurred_at: datetime = Field(default_factory=utc_now)
    correlation_id: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}


class AggregateRoot(BaseModel):
    """Identity plus a queue of domain events awaiting publication."""

    id: str = Field(default_factory=generate_id)
    created_at: datetime = Field(default_factory=utc_now)

    _events: list[DomainEvent] = PrivateAttr(default_factory=list)

    model_config = {"validate_assignment": True}

    def add_event(self, event: DomainEvent) -> None:
        self._events.append(event)

    def collect_events(self) -> list[DomainEvent]:
        """Return pending events and clear the queue."""
        events, self._events = self._events, []
        return events

    @property
    def pending_events(self) -> list[DomainEvent]:
        return list(self._events)
