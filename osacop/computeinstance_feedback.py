"""Reconciler that reports compute instance state to the fulfillment service."""

from __future__ import annotations

import copy
import logging
from typing import Any

from osacop.fulfillment import (
    InstanceConditionType,
    InstanceRecord,
    InstanceState,
    InstanceStatus,
    sync_record_condition,
)
from osacop.names import (
    COMPUTE_INSTANCE_FEEDBACK_FINALIZER,
    COMPUTE_INSTANCE_ID_LABEL,
    FLOATING_IP_ADDRESS_ANNOTATION,
)
from osacop.resources import (
    ComputeInstance,
    ComputeInstanceConditionType,
    ComputeInstancePhase,
    NotFoundError,
    ObjectKey,
    Result,
    add_finalizer,
    contains_finalizer,
    find_status_condition,
    remove_finalizer,
)

logger = logging.getLogger(__name__)

_CONDITION_MAP: tuple[tuple[ComputeInstanceConditionType, InstanceConditionType], ...] = (
    (ComputeInstanceConditionType.CONFIGURATION_APPLIED, InstanceConditionType.CONFIGURATION_APPLIED),
    (ComputeInstanceConditionType.AVAILABLE, InstanceConditionType.AVAILABLE),
    (ComputeInstanceConditionType.RESTART_IN_PROGRESS, InstanceConditionType.RESTART_IN_PROGRESS),
    (ComputeInstanceConditionType.RESTART_FAILED, InstanceConditionType.RESTART_FAILED),
    (ComputeInstanceConditionType.PROVISIONED, InstanceConditionType.PROVISIONED),
    (ComputeInstanceConditionType.RESTART_REQUIRED, InstanceConditionType.RESTART_REQUIRED),
)

_PHASE_MAP: dict[ComputeInstancePhase, InstanceState] = {
    ComputeInstancePhase.STARTING: InstanceState.STARTING,
    ComputeInstancePhase.FAILED: InstanceState.FAILED,
    ComputeInstancePhase.RUNNING: InstanceState.RUNNING,
    ComputeInstancePhase.DELETING: InstanceState.DELETING,
    ComputeInstancePhase.STOPPING: InstanceState.STOPPING,
    ComputeInstancePhase.STOPPED: InstanceState.STOPPED,
    ComputeInstancePhase.PAUSED: InstanceState.PAUSED,
}


class ComputeInstanceFeedbackReconciler:
    """Sends compute instance updates to the fulfillment service.

    ``hub_client`` offers ``get(kind, key)`` (raising NotFoundError) and
    ``update(obj)``. ``instances_client`` offers ``get(id)``, ``update(record)``
    and ``signal(id)``.
    """

    def __init__(self, hub_client: Any, instances_client: Any, namespace: str) -> None:
        self.hub_client = hub_client
        self.instances_client = instances_client
        self.namespace = namespace

    def reconcile(self, key: ObjectKey) -> Result:
        """Sync one compute instance resource into its fulfillment record."""
        try:
            instance = self.hub_client.get(ComputeInstance, key)
        except NotFoundError:
            logger.info("CR not found, nothing to do")
            return Result()

        deleting = instance.metadata.deletion_timestamp is not None
        ci_id = instance.metadata.labels.get(COMPUTE_INSTANCE_ID_LABEL)
        if ci_id is None:
            if deleting and contains_finalizer(instance, COMPUTE_INSTANCE_FEEDBACK_FINALIZER):
                logger.info("CR without CI ID label is being deleted, removing feedback finalizer")
                if remove_finalizer(instance, COMPUTE_INSTANCE_FEEDBACK_FINALIZER):
                    self.hub_client.update(instance)
                return Result()
            logger.info(
                "There is no label containing the compute instance identifier, will ignore it "
                "(label %s)",
                COMPUTE_INSTANCE_ID_LABEL,
            )
            return Result()

        before = self._fetch(ci_id)
        after = copy.deepcopy(before)

        if not deleting:
            if add_finalizer(instance, COMPUTE_INSTANCE_FEEDBACK_FINALIZER):
                self.hub_client.update(instance)
        self._sync_state(instance, after)

        self._save(before, after)

        if deleting and contains_finalizer(instance, COMPUTE_INSTANCE_FEEDBACK_FINALIZER):
            if len(instance.metadata.finalizers) == 1:
                logger.info(
                    "Feedback finalizer is last remaining, removing finalizer and signaling (ciID %s)",
                    ci_id,
                )
                if remove_finalizer(instance, COMPUTE_INSTANCE_FEEDBACK_FINALIZER):
                    self.hub_client.update(instance)
                try:
                    self.instances_client.signal(ci_id)
                except Exception:
                    logger.exception(
                        "Failed to signal fulfillment service, periodic sync will handle cleanup "
                        "(ciID %s)",
                        ci_id,
                    )
            else:
                logger.info(
                    "Other finalizers still present, waiting (finalizers %s)",
                    instance.metadata.finalizers,
                )

        return Result()

    def _fetch(self, ci_id: str) -> InstanceRecord:
        record = self.instances_client.get(ci_id)
        if record.spec is None:
            record.spec = {}
        if record.status is None:
            record.status = InstanceStatus()
        return record

    def _save(self, before: InstanceRecord, after: InstanceRecord) -> None:
        if after != before:
            logger.info("Updating compute instance (before %s, after %s)", before, after)
            self.instances_client.update(after)

    def _sync_state(self, instance: ComputeInstance, record: InstanceRecord) -> None:
        for cr_type, record_type in _CONDITION_MAP:
            cr_condition = find_status_condition(instance.conditions, cr_type)
            if cr_condition is not None:
                sync_record_condition(record.status.conditions, record_type, cr_condition)

        try:
            phase = ComputeInstancePhase(instance.phase)
        except ValueError:
            logger.info("Unknown phase, will ignore it (phase %r)", instance.phase)
        else:
            record.status.state = _PHASE_MAP[phase]

        ip_address = instance.metadata.annotations.get(FLOATING_IP_ADDRESS_ANNOTATION, "")
        if ip_address:
            record.status.ip_address = ip_address

        if instance.last_restarted_at is not None:
            record.status.last_restarted_at = instance.last_restarted_at