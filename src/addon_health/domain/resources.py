"""Typed snapshots of the watched resources.

The watch cache hands out unstructured (camelCase) mappings, the same shape
the API server returns.  Each kind is decoded into a small Pydantic model that
keeps only the fields the health checks read and ignores everything else.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .enums import ResourceKind
from .exceptions import ResourceReadError


class _Snapshot(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class ObjectMeta(_Snapshot):
    name: str = ""
    namespace: str = ""


# -- Subscription --------------------------------------------------------------

class SubscriptionSpec(_Snapshot):
    starting_csv: str = Field(default="", alias="startingCSV")
    channel: str = ""
    source: str = ""
    source_namespace: str = Field(default="", alias="sourceNamespace")


class SubscriptionStatus(_Snapshot):
    installed_csv: str = Field(default="", alias="installedCSV")


class Subscription(_Snapshot):
    """Operator subscription that installs the add-on's operator."""

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: SubscriptionSpec = Field(default_factory=SubscriptionSpec)
    status: SubscriptionStatus = Field(default_factory=SubscriptionStatus)


# -- Deployment ----------------------------------------------------------------

class DeploymentStatus(_Snapshot):
    replicas: int = Field(default=0, ge=0)
    available_replicas: int = Field(default=0, ge=0, alias="availableReplicas")


class Deployment(_Snapshot):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    status: DeploymentStatus = Field(default_factory=DeploymentStatus)


# -- DaemonSet -----------------------------------------------------------------

class DaemonSetStatus(_Snapshot):
    desired_number_scheduled: int = Field(default=0, ge=0, alias="desiredNumberScheduled")
    number_available: int = Field(default=0, ge=0, alias="numberAvailable")
    number_unavailable: int = Field(default=0, ge=0, alias="numberUnavailable")


class DaemonSet(_Snapshot):
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    status: DaemonSetStatus = Field(default_factory=DaemonSetStatus)


# -- Submariner (configuration resource) ---------------------------------------

class SubmarinerSpec(_Snapshot):
    global_cidr: str = Field(default="", alias="globalCIDR")


class SubmarinerStatus(_Snapshot):
    network_plugin: str = Field(default="", alias="networkPlugin")


class Submariner(_Snapshot):
    """The custom configuration resource; one instance per reconciliation target."""

    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: SubmarinerSpec = Field(default_factory=SubmarinerSpec)
    status: SubmarinerStatus = Field(default_factory=SubmarinerStatus)


Resource = Union[Subscription, Deployment, DaemonSet, Submariner]

RESOURCE_MODELS: dict[ResourceKind, type[_Snapshot]] = {
    ResourceKind.SUBSCRIPTION: Subscription,
    ResourceKind.DEPLOYMENT: Deployment,
    ResourceKind.DAEMONSET: DaemonSet,
    ResourceKind.SUBMARINER: Submariner,
}


def decode(kind: ResourceKind, data: Mapping[str, Any], key: str = "") -> Any:
    """Decode an unstructured mapping into the snapshot model for *kind*.

    Raises
    ------
    ResourceReadError
        If the mapping does not fit the model (wrong types, negative counts).
    """
    model = RESOURCE_MODELS[kind]
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ResourceReadError(
            f"cannot decode {kind.value} {key}: {exc.error_count()} validation error(s)",
            kind=kind.value,
            key=key,
            details={"errors": exc.errors(include_url=False)},
        ) from exc
