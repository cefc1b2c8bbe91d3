"""Tests for condition merging and the retrying status publisher."""

from __future__ import annotations

import pytest

from addon_health.domain.enums import ConditionStatus
from addon_health.domain.events import RecordedEvent
from addon_health.domain.exceptions import WriteConflictError, WriteExhaustedError
from addon_health.domain.values import AddOnStatus, CompositeCondition, StatusCondition
from addon_health.infrastructure.event_bus import EventBus, EventRecorder, EventStore
from addon_health.infrastructure.status_store import InMemoryStatusStore
from addon_health.services.publisher import (
    STATUS_UPDATED_REASON,
    StatusPublisher,
    set_condition,
    update_condition_fn,
)
from addon_health.testing import ConflictingStatusStore

CLUSTER = "cluster1"
HEALTHY = CompositeCondition(ConditionStatus.FALSE, "Deployed", "Submariner (v1) is deployed on managed cluster.")
DEGRADED = CompositeCondition(ConditionStatus.TRUE, "NoGatewayDaemonSet", "The gateway daemon set does not exist")
OTHER = StatusCondition("RegistrationApplied", ConditionStatus.TRUE, "Applied", "ok", 1.0)


class TestSetCondition:
    def test_appends_new_type(self) -> None:
        merged = set_condition((OTHER,), HEALTHY, now=10.0)
        assert merged[0] is OTHER
        assert merged[1] == StatusCondition.from_composite(HEALTHY, 10.0)

    def test_replaces_same_type(self) -> None:
        merged = set_condition((StatusCondition.from_composite(HEALTHY, 5.0), OTHER), DEGRADED, now=10.0)
        assert len(merged) == 2
        assert merged[0].reason == "NoGatewayDaemonSet"
        assert merged[0].last_transition_time == 10.0
        assert merged[1] is OTHER

    def test_keeps_transition_time_when_status_unchanged(self) -> None:
        existing = StatusCondition.from_composite(DEGRADED, 5.0)
        worse = CompositeCondition(ConditionStatus.TRUE, "NoGatewayDaemonSet,NoRouteAgentDaemonSet", "a\nb")
        (merged,) = set_condition((existing,), worse, now=10.0)
        assert merged.reason == worse.reason
        assert merged.last_transition_time == 5.0

    def test_identical_condition_is_no_op(self) -> None:
        existing = (StatusCondition.from_composite(HEALTHY, 5.0),)
        assert set_condition(existing, HEALTHY, now=99.0) == existing

    def test_update_condition_fn_uses_clock(self) -> None:
        merge = update_condition_fn(HEALTHY, clock=lambda: 42.0)
        (merged,) = merge(AddOnStatus())
        assert merged.last_transition_time == 42.0


class TestStatusPublisher:
    def test_first_publish_writes(self, event_bus: EventBus, event_store: EventStore) -> None:
        store = InMemoryStatusStore()
        publisher = StatusPublisher(store, recorder=EventRecorder(event_bus))

        status, changed = publisher.publish(CLUSTER, HEALTHY)

        assert changed is True
        assert status.resource_version == 1
        assert HEALTHY.same_as(status.find("AgentDegraded"))
        (event,) = event_store.query(RecordedEvent)
        assert event.reason == STATUS_UPDATED_REASON
        assert "AgentDegraded=False (Deployed)" in event.message

    def test_identical_publish_writes_once(self, event_bus: EventBus, event_store: EventStore) -> None:
        store = InMemoryStatusStore()
        publisher = StatusPublisher(store, recorder=EventRecorder(event_bus))

        publisher.publish(CLUSTER, HEALTHY)
        status, changed = publisher.publish(CLUSTER, HEALTHY)

        assert changed is False
        assert status.resource_version == 1
        assert store.write_count == 1
        assert len(event_store.query(RecordedEvent)) == 1

    def test_change_writes_again(self) -> None:
        store = InMemoryStatusStore()
        publisher = StatusPublisher(store)
        publisher.publish(CLUSTER, HEALTHY)
        _, changed = publisher.publish(CLUSTER, DEGRADED)
        assert changed is True
        assert store.write_count == 2
        assert store.get_status(CLUSTER).find("AgentDegraded").reason == "NoGatewayDaemonSet"

    def test_preserves_unrelated_conditions(self) -> None:
        store = InMemoryStatusStore()
        store.replace_status(CLUSTER, AddOnStatus(conditions=(OTHER,)))
        StatusPublisher(store).publish(CLUSTER, DEGRADED)
        conditions = store.get_status(CLUSTER).conditions
        assert conditions[0] == OTHER
        assert conditions[1].type == "AgentDegraded"

    def test_single_conflict_then_success(self) -> None:
        store = ConflictingStatusStore(conflicts=1)
        publisher = StatusPublisher(store, conflict_delay=0.0)

        status, changed = publisher.publish(CLUSTER, DEGRADED)

        assert changed is True
        assert store.attempted_writes == 2
        assert store.write_count == 1
        assert status.resource_version == 2
        assert DEGRADED.same_as(status.find("AgentDegraded"))

    def test_merge_reapplied_to_fresh_read(self) -> None:
        store = ConflictingStatusStore(conflicts=1)
        seen_versions: list[int] = []
        merge = update_condition_fn(DEGRADED)

        def tracking_merge(status: AddOnStatus) -> tuple[StatusCondition, ...]:
            seen_versions.append(status.resource_version)
            return merge(status)

        StatusPublisher(store, conflict_delay=0.0).update_status(CLUSTER, tracking_merge)
        assert seen_versions == [0, 1]

    def test_exhausted_after_max_attempts(self) -> None:
        store = ConflictingStatusStore(conflicts=10)
        publisher = StatusPublisher(store, max_attempts=3, conflict_delay=0.0)

        with pytest.raises(WriteExhaustedError) as exc_info:
            publisher.publish(CLUSTER, DEGRADED)

        assert exc_info.value.attempts == 3
        assert exc_info.value.cluster == CLUSTER
        assert isinstance(exc_info.value.__cause__, WriteConflictError)
        assert store.attempted_writes == 3

    def test_timeout_stops_retries(self) -> None:
        store = ConflictingStatusStore(conflicts=10)
        publisher = StatusPublisher(store, max_attempts=10, timeout=1e-9, conflict_delay=0.0)
        with pytest.raises(WriteExhaustedError) as exc_info:
            publisher.publish(CLUSTER, DEGRADED)
        assert exc_info.value.attempts == 1

    def test_rejects_invalid_attempts(self) -> None:
        with pytest.raises(ValueError):
            StatusPublisher(InMemoryStatusStore(), max_attempts=0)

    def test_recorder_failure_does_not_fail_publish(self) -> None:
        bus = EventBus()

        def boom(event: RecordedEvent) -> None:
            raise RuntimeError("event sink down")

        bus.subscribe(RecordedEvent, boom)
        _, changed = StatusPublisher(InMemoryStatusStore(), recorder=EventRecorder(bus)).publish(
            CLUSTER, HEALTHY
        )
        assert changed is True
