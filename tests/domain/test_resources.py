"""Tests for resource snapshot decoding."""

from __future__ import annotations

import pytest

from addon_health.domain.enums import ResourceKind
from addon_health.domain.exceptions import ResourceReadError
from addon_health.domain.resources import (
    DaemonSet,
    Deployment,
    Submariner,
    Subscription,
    decode,
)
from addon_health.testing import daemonset, deployment, submariner, subscription


class TestDecode:
    def test_subscription(self) -> None:
        sub = decode(
            ResourceKind.SUBSCRIPTION,
            subscription("", starting_csv="submariner.v0.10.1", channel="alpha-0.10"),
        )
        assert isinstance(sub, Subscription)
        assert sub.status.installed_csv == ""
        assert sub.spec.starting_csv == "submariner.v0.10.1"
        assert sub.spec.channel == "alpha-0.10"
        assert sub.spec.source_namespace == "openshift-marketplace"
        assert sub.metadata.name == "submariner"

    def test_deployment(self) -> None:
        dep = decode(ResourceKind.DEPLOYMENT, deployment("submariner-operator", available=2))
        assert isinstance(dep, Deployment)
        assert dep.status.available_replicas == 2

    def test_daemonset(self) -> None:
        ds = decode(ResourceKind.DAEMONSET, daemonset("submariner-gateway", desired=3, unavailable=1))
        assert isinstance(ds, DaemonSet)
        assert ds.status.desired_number_scheduled == 3
        assert ds.status.number_unavailable == 1
        assert ds.status.number_available == 2

    def test_submariner(self) -> None:
        sm = decode(
            ResourceKind.SUBMARINER,
            submariner(global_cidr="242.0.0.0/8", network_plugin="OVNKubernetes"),
        )
        assert isinstance(sm, Submariner)
        assert sm.spec.global_cidr == "242.0.0.0/8"
        assert sm.status.network_plugin == "OVNKubernetes"

    def test_missing_sections_default(self) -> None:
        dep = decode(ResourceKind.DEPLOYMENT, {"metadata": {"name": "x"}})
        assert dep.status.available_replicas == 0

    def test_unknown_fields_ignored(self) -> None:
        data = deployment("x")
        data["status"]["conditions"] = [{"type": "Available"}]
        data["spec"] = {"replicas": 1}
        assert decode(ResourceKind.DEPLOYMENT, data).status.available_replicas == 1

    def test_invalid_counts_raise_read_error(self) -> None:
        data = deployment("x")
        data["status"]["availableReplicas"] = -1
        with pytest.raises(ResourceReadError) as exc_info:
            decode(ResourceKind.DEPLOYMENT, data, key="ns/x")
        assert exc_info.value.kind == "Deployment"
        assert exc_info.value.key == "ns/x"
        assert exc_info.value.details["errors"]

    def test_wrong_type_raises_read_error(self) -> None:
        with pytest.raises(ResourceReadError):
            decode(ResourceKind.DAEMONSET, {"status": {"numberUnavailable": "many"}})
