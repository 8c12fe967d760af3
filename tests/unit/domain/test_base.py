"""Unit tests for base domain models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from microdeploy.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    generate_id,
    utc_now,
    ValueObject,
)


class TestHelpers:
    def test_ids_are_unique(self) -> None:
        assert len({generate_id() for _ in range(100)}) == 100

    def test_utc_now_is_aware(self) -> None:
        assert utc_now().tzinfo is not None


class TestValueObject:
    def test_frozen(self) -> None:
        class Size(ValueObject):
            mb: int

        size = Size(mb=10)
        with pytest.raises(ValidationError):
            size.mb = 20


class TestAggregateRoot:
    def test_collect_clears(self) -> None:
        agg = AggregateRoot()
        agg.add_event(DomainEvent(event_type="a"))
        agg.add_event(DomainEvent(event_type="b"))
        assert len(agg.pending_events) == 2

        events = agg.collect_events()
        assert [e.event_type for e in events] == ["a", "b"]
        assert agg.collect_events() == []

    def test_events_not_shared(self) -> None:
        first, second = AggregateRoot(), AggregateRoot()
        first.add_event(DomainEvent(event_type="a"))
        assert second.pending_events == []

    def test_events_not_serialized(self) -> None:
        agg = AggregateRoot()
        agg.add_event(DomainEvent(event_type="a"))
        assert set(agg.model_dump()) == {"id", "created_at"}
