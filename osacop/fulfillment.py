"""Records kept by the fulfillment service, and helpers to sync conditions into them."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from osacop.resources import CONDITION_FALSE, CONDITION_TRUE, Condition


class ConditionStatus(str, enum.Enum):
    UNSPECIFIED = "CONDITION_STATUS_UNSPECIFIED"
    TRUE = "CONDITION_STATUS_TRUE"
    FALSE = "CONDITION_STATUS_FALSE"


class InstanceState(str, enum.Enum):
    UNSPECIFIED = "COMPUTE_INSTANCE_STATE_UNSPECIFIED"
    STARTING = "COMPUTE_INSTANCE_STATE_STARTING"
    RUNNING = "COMPUTE_INSTANCE_STATE_RUNNING"
    FAILED = "COMPUTE_INSTANCE_STATE_FAILED"
    DELETING = "COMPUTE_INSTANCE_STATE_DELETING"
    STOPPING = "COMPUTE_INSTANCE_STATE_STOPPING"
    STOPPED = "COMPUTE_INSTANCE_STATE_STOPPED"
    PAUSED = "COMPUTE_INSTANCE_STATE_PAUSED"


class InstanceConditionType(str, enum.Enum):
    UNSPECIFIED = "COMPUTE_INSTANCE_CONDITION_TYPE_UNSPECIFIED"
    CONFIGURATION_APPLIED = "COMPUTE_INSTANCE_CONDITION_TYPE_CONFIGURATION_APPLIED"
    AVAILABLE = "COMPUTE_INSTANCE_CONDITION_TYPE_AVAILABLE"
    RESTART_IN_PROGRESS = "COMPUTE_INSTANCE_CONDITION_TYPE_RESTART_IN_PROGRESS"
    RESTART_FAILED = "COMPUTE_INSTANCE_CONDITION_TYPE_RESTART_FAILED"
    PROVISIONED = "COMPUTE_INSTANCE_CONDITION_TYPE_PROVISIONED"
    RESTART_REQUIRED = "COMPUTE_INSTANCE_CONDITION_TYPE_RESTART_REQUIRED"


class ClusterState(str, enum.Enum):
    UNSPECIFIED = "CLUSTER_STATE_UNSPECIFIED"
    PROGRESSING = "CLUSTER_STATE_PROGRESSING"
    READY = "CLUSTER_STATE_READY"
    FAILED = "CLUSTER_STATE_FAILED"


class ClusterConditionType(str, enum.Enum):
    UNSPECIFIED = "CLUSTER_CONDITION_TYPE_UNSPECIFIED"
    PROGRESSING = "CLUSTER_CONDITION_TYPE_PROGRESSING"
    READY = "CLUSTER_CONDITION_TYPE_READY"


class PoolState(str, enum.Enum):
    UNSPECIFIED = "HOST_POOL_STATE_UNSPECIFIED"
    PROGRESSING = "HOST_POOL_STATE_PROGRESSING"
    READY = "HOST_POOL_STATE_READY"
    FAILED = "HOST_POOL_STATE_FAILED"


class PoolConditionType(str, enum.Enum):
    UNSPECIFIED = "HOST_POOL_CONDITION_TYPE_UNSPECIFIED"
    PROGRESSING = "HOST_POOL_CONDITION_TYPE_PROGRESSING"
    READY = "HOST_POOL_CONDITION_TYPE_READY"


@dataclass
class RecordCondition:
    """A condition as stored in a fulfillment service record."""

    type: Any
    status: ConditionStatus = ConditionStatus.UNSPECIFIED
    message: str = ""
    last_transition_time: datetime | None = None


@dataclass
class InstanceStatus:
    state: InstanceState = InstanceState.UNSPECIFIED
    conditions: list[RecordCondition] = field(default_factory=list)
    ip_address: str = ""
    last_restarted_at: datetime | None = None


@dataclass
class InstanceRecord:
    id: str = ""
    spec: dict[str, Any] = field(default_factory=dict)
    status: InstanceStatus = field(default_factory=InstanceStatus)


@dataclass
class ClusterNodeSet:
    host_class: str = ""
    size: int = 0


@dataclass
class ClusterSpec:
    node_sets: dict[str, ClusterNodeSet] = field(default_factory=dict)


@dataclass
class ClusterStatus:
    state: ClusterState = ClusterState.UNSPECIFIED
    conditions: list[RecordCondition] = field(default_factory=list)
    api_url: str = ""
    console_url: str = ""
    node_sets: dict[str, ClusterNodeSet] = field(default_factory=dict)


@dataclass
class ClusterRecord:
    id: str = ""
    spec: ClusterSpec = field(default_factory=ClusterSpec)
    status: ClusterStatus = field(default_factory=ClusterStatus)


@dataclass
class PoolStatus:
    state: PoolState = PoolState.UNSPECIFIED
    conditions: list[RecordCondition] = field(default_factory=list)


@dataclass
class PoolRecord:
    id: str = ""
    spec: dict[str, Any] = field(default_factory=dict)
    status: PoolStatus = field(default_factory=PoolStatus)


def map_condition_status(status: str) -> ConditionStatus:
    """Translate a resource condition status into a record condition status."""
    if status == CONDITION_FALSE:
        return ConditionStatus.FALSE
    if status == CONDITION_TRUE:
        return ConditionStatus.TRUE
    return ConditionStatus.UNSPECIFIED


def find_or_add_condition(conditions: list[RecordCondition], kind: Any) -> RecordCondition:
    """Return the record condition of the given kind, appending a False one if missing."""
    for current in conditions:
        if current.type == kind:
            return current
    condition = RecordCondition(type=kind, status=ConditionStatus.FALSE)
    conditions.append(condition)
    return condition


def sync_record_condition(
    conditions: list[RecordCondition], kind: Any, cr_condition: Condition
) -> RecordCondition:
    """Copy a resource condition into the record condition of the given kind.

    The transition time is only moved when the status changes.
    """
    record_condition = find_or_add_condition(conditions, kind)
    old_status = record_condition.status
    new_status = map_condition_status(cr_condition.status)
    record_condition.status = new_status
    record_condition.message = cr_condition.message
    if new_status != old_status:
        record_condition.last_transition_time = datetime.now(timezone.utc)
    return record_condition