"""Reconciler that reports host pool state to the fulfillment service."""

from __future__ import annotations

import copy
import logging
from typing import Any

from osacop.fulfillment import (
    PoolConditionType,
    PoolRecord,
    PoolState,
    PoolStatus,
    sync_record_condition,
)
from osacop.names import HOST_POOL_ID_LABEL
from osacop.resources import (
    Condition,
    HostPool,
    HostPoolConditionType,
    HostPoolPhase,
    NotFoundError,
    ObjectKey,
    Result,
)

logger = logging.getLogger(__name__)

_CONDITION_MAP: dict[str, PoolConditionType] = {
    HostPoolConditionType.ACCEPTED.value: PoolConditionType.PROGRESSING,
    HostPoolConditionType.PROGRESSING.value: PoolConditionType.PROGRESSING,
    HostPoolConditionType.AVAILABLE.value: PoolConditionType.READY,
    HostPoolConditionType.DELETING.value: PoolConditionType.PROGRESSING,
}

_PHASE_MAP: dict[HostPoolPhase, PoolState] = {
    HostPoolPhase.PROGRESSING: PoolState.PROGRESSING,
    HostPoolPhase.FAILED: PoolState.FAILED,
    HostPoolPhase.READY: PoolState.READY,
}


class HostPoolFeedbackReconciler:
    """Sends host pool updates to the fulfillment service.

    ``hub_client`` offers ``get(kind, key)`` (raising NotFoundError).
    ``pools_client`` offers ``get(id)`` and ``update(record)``.
    """

    def __init__(self, hub_client: Any, pools_client: Any, namespace: str) -> None:
        self.hub_client = hub_client
        self.pools_client = pools_client
        self.namespace = namespace

    def reconcile(self, key: ObjectKey) -> Result:
        """Sync one host pool into its fulfillment record."""
        try:
            pool = self.hub_client.get(HostPool, key)
        except NotFoundError:
            return Result()

        pool_id = pool.metadata.labels.get(HOST_POOL_ID_LABEL)
        if pool_id is None:
            logger.info(
                "There is no label containing the host pool identifier, will ignore it (label %s)",
                HOST_POOL_ID_LABEL,
            )
            return Result()

        if pool.metadata.deletion_timestamp is not None:
            logger.info("HostPool is being deleted, skipping feedback reconciliation")
            return Result()

        before = self._fetch(pool_id)
        after = copy.deepcopy(before)

        for condition in pool.conditions:
            self._sync_condition(condition, after)
        self._sync_phase(pool, after)

        if after != before:
            self.pools_client.update(after)
        return Result()

    def _fetch(self, pool_id: str) -> PoolRecord:
        record = self.pools_client.get(pool_id)
        if record.spec is None:
            record.spec = {}
        if record.status is None:
            record.status = PoolStatus()
        return record

    def _sync_condition(self, condition: Condition, record: PoolRecord) -> None:
        condition_type = getattr(condition.type, "value", condition.type)
        kind = _CONDITION_MAP.get(condition_type)
        if kind is None:
            logger.info("Unknown condition, will ignore it (condition %r)", condition_type)
            return
        sync_record_condition(record.status.conditions, kind, condition)

    def _sync_phase(self, pool: HostPool, record: PoolRecord) -> None:
        try:
            phase = HostPoolPhase(pool.phase)
        except ValueError:
            logger.info("Unknown phase, will ignore it (phase %r)", pool.phase)
            return
        state = _PHASE_MAP.get(phase)
        # The deleting phase has no equivalent state in the record.
        if state is not None:
            record.status.state = state