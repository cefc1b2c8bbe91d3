"""Tests for domain value objects."""

from __future__ import annotations

import dataclasses

import pytest

from addon_health.domain.enums import ConditionStatus, ResourceKind
from addon_health.domain.values import (
    AGENT_DEGRADED,
    AddOnStatus,
    ChangeNotification,
    CompositeCondition,
    DegradedSignal,
    ResourceKey,
    StatusCondition,
)


class TestResourceKey:
    def test_parse_namespaced(self) -> None:
        key = ResourceKey.parse("submariner-operator/submariner")
        assert key == ResourceKey("submariner-operator", "submariner")
        assert str(key) == "submariner-operator/submariner"

    def test_parse_cluster_scoped(self) -> None:
        key = ResourceKey.parse("cluster1")
        assert key.namespace == ""
        assert str(key) == "cluster1"

    def test_hashable(self) -> None:
        assert len({ResourceKey("a", "b"), ResourceKey("a", "b")}) == 1


class TestChangeNotification:
    def test_key(self) -> None:
        note = ChangeNotification(ResourceKind.DEPLOYMENT, "ns", "dep")
        assert note.key == ResourceKey("ns", "dep")


class TestDegradedSignal:
    def test_valid_reason(self) -> None:
        signal = DegradedSignal("CSVNotInstalled", "not installed")
        assert signal.reason == "CSVNotInstalled"

    @pytest.mark.parametrize("reason", ["", "has space", "lowerCase", "Comma,Joined"])
    def test_rejects_bad_reason(self, reason: str) -> None:
        with pytest.raises(ValueError, match="PascalCase"):
            DegradedSignal(reason, "msg")

    def test_frozen(self) -> None:
        signal = DegradedSignal("NoGatewayDaemonSet", "msg")
        with pytest.raises(dataclasses.FrozenInstanceError):
            signal.reason = "Other"  # type: ignore[misc]


class TestCompositeCondition:
    def test_default_type(self) -> None:
        cond = CompositeCondition(ConditionStatus.FALSE, "Deployed", "ok")
        assert cond.type == AGENT_DEGRADED
        assert cond.degraded is False

    def test_same_as_ignores_transition_time(self) -> None:
        cond = CompositeCondition(ConditionStatus.TRUE, "NoGatewayDaemonSet", "msg")
        stored = StatusCondition.from_composite(cond, last_transition_time=123.0)
        assert cond.same_as(stored)
        assert not cond.same_as(None)

    def test_same_as_detects_message_change(self) -> None:
        a = CompositeCondition(ConditionStatus.TRUE, "GatewaysUnavailable", "1 unavailable")
        b = CompositeCondition(ConditionStatus.TRUE, "GatewaysUnavailable", "2 unavailable")
        assert not a.same_as(b)


class TestAddOnStatus:
    def test_find(self) -> None:
        cond = StatusCondition("Available", ConditionStatus.TRUE, "Ok", "fine")
        status = AddOnStatus(conditions=(cond,), resource_version=3)
        assert status.find("Available") is cond
        assert status.find(AGENT_DEGRADED) is None

    def test_with_conditions_keeps_version(self) -> None:
        status = AddOnStatus(resource_version=7)
        cond = StatusCondition("X", ConditionStatus.FALSE, "Ok", "")
        updated = status.with_conditions((cond,))
        assert updated.resource_version == 7
        assert updated.conditions == (cond,)
