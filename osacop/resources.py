"""Resource models and condition/finalizer helpers shared by the controllers."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone

CONDITION_TRUE = "True"
CONDITION_FALSE = "False"
CONDITION_UNKNOWN = "Unknown"


class NotFoundError(LookupError):
    """Raised by a client when the requested object does not exist."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} {key} not found")
        self.kind = kind
        self.key = key


@dataclass(frozen=True)
class ObjectKey:
    """Namespace and name identifying an object."""

    namespace: str = ""
    name: str = ""

    def __str__(self) -> str:
        if not self.namespace:
            return self.name
        return f"{self.namespace}/{self.name}"


@dataclass
class Result:
    """Outcome of a reconciliation: whether and when to run again."""

    requeue: bool = False
    requeue_after: float = 0.0

    @property
    def is_zero(self) -> bool:
        return not self.requeue and self.requeue_after == 0


@dataclass
class Condition:
    """A status condition of a resource."""

    type: str
    status: str = CONDITION_UNKNOWN
    reason: str = ""
    message: str = ""
    observed_generation: int = 0
    last_transition_time: datetime | None = None


@dataclass
class ObjectMeta:
    """Metadata common to all resources."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    finalizers: list[str] = field(default_factory=list)
    generation: int = 0
    creation_timestamp: datetime | None = None
    deletion_timestamp: datetime | None = None


class ComputeInstancePhase(str, enum.Enum):
    STARTING = "Starting"
    RUNNING = "Running"
    FAILED = "Failed"
    DELETING = "Deleting"
    STOPPING = "Stopping"
    STOPPED = "Stopped"
    PAUSED = "Paused"


class ComputeInstanceConditionType(str, enum.Enum):
    CONFIGURATION_APPLIED = "ConfigurationApplied"
    AVAILABLE = "Available"
    RESTART_IN_PROGRESS = "RestartInProgress"
    RESTART_FAILED = "RestartFailed"
    PROVISIONED = "Provisioned"
    RESTART_REQUIRED = "RestartRequired"


class HostPoolPhase(str, enum.Enum):
    PROGRESSING = "Progressing"
    FAILED = "Failed"
    READY = "Ready"
    DELETING = "Deleting"


class HostPoolConditionType(str, enum.Enum):
    ACCEPTED = "Accepted"
    PROGRESSING = "Progressing"
    AVAILABLE = "Available"
    DELETING = "Deleting"


class ClusterOrderPhase(str, enum.Enum):
    PROGRESSING = "Progressing"
    FAILED = "Failed"
    READY = "Ready"
    DELETING = "Deleting"


class ClusterOrderConditionType(str, enum.Enum):
    ACCEPTED = "Accepted"
    PROGRESSING = "Progressing"
    CONTROL_PLANE_AVAILABLE = "ControlPlaneAvailable"
    AVAILABLE = "Available"


@dataclass
class VirtualMachineReference:
    kubevirt_virtual_machine_name: str = ""
    namespace: str = ""


@dataclass
class ComputeInstance:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    restart_requested_at: datetime | None = None
    phase: str = ""
    conditions: list[Condition] = field(default_factory=list)
    last_restarted_at: datetime | None = None
    virtual_machine_reference: VirtualMachineReference | None = None
    tenant_reference_name: str = ""
    tenant_reference_namespace: str = ""


@dataclass
class VirtualMachineInstance:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)


@dataclass
class Tenant:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)


@dataclass
class Namespace:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)


@dataclass
class HostSet:
    host_class: str = ""
    size: int = 0


@dataclass
class HostPool:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    host_sets: list[HostSet] = field(default_factory=list)
    phase: str = ""
    conditions: list[Condition] = field(default_factory=list)
    status_host_sets: list[HostSet] = field(default_factory=list)
    host_pool_reference_namespace: str = ""


@dataclass
class NodeRequest:
    resource_class: str = ""
    number_of_nodes: int = 0


@dataclass
class ClusterReference:
    namespace: str = ""
    hosted_cluster_name: str = ""


@dataclass
class ClusterOrder:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    phase: str = ""
    conditions: list[Condition] = field(default_factory=list)
    node_requests: list[NodeRequest] = field(default_factory=list)
    cluster_reference: ClusterReference | None = None


@dataclass
class HostedCluster:
    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    control_plane_host: str = ""
    control_plane_port: int = 0
    base_domain: str = ""


def _condition_type(value: object) -> str:
    return value.value if isinstance(value, enum.Enum) else str(value)


def find_status_condition(conditions: list[Condition], condition_type: object) -> Condition | None:
    """Return the condition of the given type, or None."""
    wanted = _condition_type(condition_type)
    return next((c for c in conditions if _condition_type(c.type) == wanted), None)


def is_status_condition_true(conditions: list[Condition], condition_type: object) -> bool:
    """Tell whether the condition of the given type exists and is True."""
    condition = find_status_condition(conditions, condition_type)
    return condition is not None and condition.status == CONDITION_TRUE


def set_status_condition(conditions: list[Condition], condition: Condition) -> bool:
    """Add or update a condition in place; return whether anything changed.

    The transition time is only moved when the status changes.
    """
    existing = find_status_condition(conditions, condition.type)
    if existing is None:
        new = Condition(
            type=_condition_type(condition.type),
            status=condition.status,
            reason=condition.reason,
            message=condition.message,
            observed_generation=condition.observed_generation,
            last_transition_time=condition.last_transition_time or datetime.now(timezone.utc),
        )
        conditions.append(new)
        return True

    changed = False
    if existing.status != condition.status:
        existing.status = condition.status
        existing.last_transition_time = condition.last_transition_time or datetime.now(timezone.utc)
        changed = True
    for attribute in ("reason", "message", "observed_generation"):
        value = getattr(condition, attribute)
        if getattr(existing, attribute) != value:
            setattr(existing, attribute, value)
            changed = True
    return changed


def remove_status_condition(conditions: list[Condition], condition_type: object) -> bool:
    """Remove the condition of the given type in place; return whether it was present."""
    wanted = _condition_type(condition_type)
    kept = [c for c in conditions if _condition_type(c.type) != wanted]
    if len(kept) == len(conditions):
        return False
    conditions[:] = kept
    return True


def contains_finalizer(obj: object, finalizer: str) -> bool:
    """Tell whether the object carries the finalizer."""
    return finalizer in obj.metadata.finalizers


def add_finalizer(obj: object, finalizer: str) -> bool:
    """Add the finalizer if missing; return whether it was added."""
    if contains_finalizer(obj, finalizer):
        return False
    obj.metadata.finalizers.append(finalizer)
    return True


def remove_finalizer(obj: object, finalizer: str) -> bool:
    """Remove every occurrence of the finalizer; return whether any was removed."""
    finalizers = obj.metadata.finalizers
    kept = [f for f in finalizers if f != finalizer]
    if len(kept) == len(finalizers):
        return False
    finalizers[:] = kept
    return True