import copy
from datetime import datetime, timezone

import pytest

from osacop.fulfillment import (
    ConditionStatus,
    PoolConditionType,
    PoolRecord,
    PoolState,
    PoolStatus,
)
from osacop.hostpool_feedback import HostPoolFeedbackReconciler
from osacop.names import HOST_POOL_ID_LABEL
from osacop.resources import (
    CONDITION_FALSE,
    CONDITION_TRUE,
    Condition,
    HostPool,
    HostPoolConditionType,
    HostPoolPhase,
    NotFoundError,
    ObjectKey,
    ObjectMeta,
)

NAMESPACE = "osac-hostpool-orders"
POOL_ID = "pool-id"
KEY = ObjectKey(namespace=NAMESPACE, name="pool")


class FakeHub:
    def __init__(self, objects=None):
        self.objects = objects or {}

    def get(self, kind, key):
        try:
            return self.objects[key]
        except KeyError:
            raise NotFoundError(kind.__name__, key) from None


class FakePools:
    def __init__(self, record=None):
        self.record = record if record is not None else PoolRecord(id=POOL_ID)
        self.get_calls = []
        self.updates = []

    def get(self, pool_id):
        self.get_calls.append(pool_id)
        return copy.deepcopy(self.record)

    def update(self, record):
        self.updates.append(copy.deepcopy(record))
        self.record = copy.deepcopy(record)


def make_pool(labels=None, phase="", conditions=None, deleting=False):
    return HostPool(
        metadata=ObjectMeta(
            name=KEY.name,
            namespace=KEY.namespace,
            labels={HOST_POOL_ID_LABEL: POOL_ID} if labels is None else labels,
            deletion_timestamp=datetime.now(timezone.utc) if deleting else None,
        ),
        phase=phase,
        conditions=conditions or [],
    )


def make_reconciler(pool, pools=None):
    pools = pools or FakePools()
    hub = FakeHub({KEY: pool} if pool is not None else {})
    return HostPoolFeedbackReconciler(hub, pools, NAMESPACE), pools


def find(record, kind):
    return next(c for c in record.status.conditions if c.type == kind)


def test_missing_object_does_nothing():
    reconciler, pools = make_reconciler(None)
    result = reconciler.reconcile(KEY)
    assert result.is_zero
    assert pools.get_calls == []
    assert pools.updates == []


def test_object_without_id_label_is_ignored():
    reconciler, pools = make_reconciler(make_pool(labels={}, phase="Ready"))
    result = reconciler.reconcile(KEY)
    assert result.is_zero
    assert pools.get_calls == []
    assert pools.updates == []


def test_object_being_deleted_is_skipped():
    reconciler, pools = make_reconciler(make_pool(phase="Ready", deleting=True))
    result = reconciler.reconcile(KEY)
    assert result.is_zero
    assert pools.get_calls == []
    assert pools.updates == []


@pytest.mark.parametrize(
    "phase, state",
    [
        (HostPoolPhase.PROGRESSING, PoolState.PROGRESSING),
        (HostPoolPhase.FAILED, PoolState.FAILED),
        (HostPoolPhase.READY, PoolState.READY),
    ],
)
def test_phase_is_synced(phase, state):
    reconciler, pools = make_reconciler(make_pool(phase=phase.value))
    reconciler.reconcile(KEY)
    assert pools.get_calls == [POOL_ID]
    assert len(pools.updates) == 1
    assert pools.updates[0].status.state == state


def test_deleting_phase_leaves_state_unchanged():
    record = PoolRecord(id=POOL_ID, status=PoolStatus(state=PoolState.READY))
    reconciler, pools = make_reconciler(
        make_pool(phase=HostPoolPhase.DELETING.value), FakePools(record)
    )
    reconciler.reconcile(KEY)
    assert pools.updates == []
    assert pools.record.status.state == PoolState.READY


def test_unknown_phase_is_ignored():
    reconciler, pools = make_reconciler(make_pool(phase="Bogus"))
    reconciler.reconcile(KEY)
    assert pools.updates == []


def test_available_condition_maps_to_ready():
    condition = Condition(
        type=HostPoolConditionType.AVAILABLE.value,
        status=CONDITION_TRUE,
        message="HostPool is available",
    )
    reconciler, pools = make_reconciler(make_pool(conditions=[condition]))
    reconciler.reconcile(KEY)
    assert len(pools.updates) == 1
    synced = find(pools.updates[0], PoolConditionType.READY)
    assert synced.status == ConditionStatus.TRUE
    assert synced.message == "HostPool is available"
    assert isinstance(synced.last_transition_time, datetime)


@pytest.mark.parametrize(
    "condition_type",
    [
        HostPoolConditionType.ACCEPTED,
        HostPoolConditionType.PROGRESSING,
        HostPoolConditionType.DELETING,
    ],
)
def test_other_conditions_map_to_progressing(condition_type):
    condition = Condition(type=condition_type.value, status=CONDITION_TRUE, message="msg")
    reconciler, pools = make_reconciler(make_pool(conditions=[condition]))
    reconciler.reconcile(KEY)
    record = pools.updates[0]
    assert [c.type for c in record.status.conditions] == [PoolConditionType.PROGRESSING]
    assert record.status.conditions[0].status == ConditionStatus.TRUE
    assert record.status.conditions[0].message == "msg"


def test_unknown_condition_is_ignored():
    condition = Condition(type="Mystery", status=CONDITION_TRUE, message="x")
    reconciler, pools = make_reconciler(make_pool(conditions=[condition]))
    reconciler.reconcile(KEY)
    assert pools.updates == []
    assert pools.record.status.conditions == []


def test_false_condition_on_new_record_keeps_transition_time_unset():
    condition = Condition(
        type=HostPoolConditionType.PROGRESSING.value, status=CONDITION_FALSE, message="done"
    )
    reconciler, pools = make_reconciler(make_pool(conditions=[condition]))
    reconciler.reconcile(KEY)
    synced = find(pools.updates[0], PoolConditionType.PROGRESSING)
    assert synced.status == ConditionStatus.FALSE
    assert synced.message == "done"
    assert synced.last_transition_time is None


def test_second_reconcile_with_same_data_does_not_update():
    condition = Condition(
        type=HostPoolConditionType.AVAILABLE.value, status=CONDITION_TRUE, message="ok"
    )
    reconciler, pools = make_reconciler(
        make_pool(phase=HostPoolPhase.READY.value, conditions=[condition])
    )
    reconciler.reconcile(KEY)
    reconciler.reconcile(KEY)
    assert len(pools.updates) == 1
    assert pools.get_calls == [POOL_ID, POOL_ID]


def test_missing_spec_and_status_are_initialized():
    record = PoolRecord(id=POOL_ID)
    record.spec = None
    record.status = None
    reconciler, pools = make_reconciler(
        make_pool(phase=HostPoolPhase.FAILED.value), FakePools(record)
    )
    reconciler.reconcile(KEY)
    updated = pools.updates[0]
    assert updated.spec == {}
    assert updated.status.state == PoolState.FAILED
    assert updated.id == POOL_ID


def test_get_error_propagates():
    class FailingPools(FakePools):
        def get(self, pool_id):
            raise RuntimeError("unavailable")

    reconciler, _ = make_reconciler(make_pool(phase="Ready"), FailingPools())
    with pytest.raises(RuntimeError, match="unavailable"):
        reconciler.reconcile(KEY)