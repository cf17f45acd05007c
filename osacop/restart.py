"""Restart handling for compute instances."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from osacop.resources import (
    CONDITION_TRUE,
    ComputeInstance,
    ComputeInstanceConditionType,
    Condition,
    NotFoundError,
    ObjectKey,
    Result,
    VirtualMachineInstance,
    is_status_condition_true,
    remove_status_condition,
    set_status_condition,
)

logger = logging.getLogger(__name__)

REASON_RESTART_REQUESTED = "RestartRequested"
REASON_RESTART_IN_PROGRESS = "RestartInProgress"
REASON_NO_VM_REFERENCE = "NoVMReference"
REASON_VMI_DELETION_FAILED = "VMIDeletionFailed"


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    if moment.utcoffset() == timezone.utc.utcoffset(None):
        return moment.strftime("%Y-%m-%dT%H:%M:%SZ")
    return moment.replace(microsecond=0).isoformat()


def clear_restart_conditions(instance: ComputeInstance) -> bool:
    """Remove restart-related conditions; return whether any was removed."""
    changed = remove_status_condition(
        instance.conditions, ComputeInstanceConditionType.RESTART_IN_PROGRESS
    )
    if remove_status_condition(instance.conditions, ComputeInstanceConditionType.RESTART_FAILED):
        changed = True
    return changed


class RestartHandler:
    """Restarts virtual machines on request by deleting their running instance.

    A target client offers ``get(kind, key)`` (raising NotFoundError) and
    ``delete(obj)``. ``target_client_factory`` supplies one when none is given.
    """

    def __init__(self, target_client_factory: Callable[[], Any] | None = None) -> None:
        self.target_client_factory = target_client_factory

    def _resolve(self, target_client: Any) -> Any:
        if target_client is not None:
            return target_client
        if self.target_client_factory is None:
            raise ValueError("no target client available")
        return self.target_client_factory()

    def handle_restart_request(self, instance: ComputeInstance, target_client: Any = None) -> Result:
        """Restart when the requested time is newer than the last restart."""
        if instance.restart_requested_at is None:
            clear_restart_conditions(instance)
            return Result()

        if is_status_condition_true(
            instance.conditions, ComputeInstanceConditionType.RESTART_IN_PROGRESS
        ):
            self.check_restart_completion(instance, self._resolve(target_client))
            return Result()

        if (
            instance.last_restarted_at is not None
            and not instance.restart_requested_at > instance.last_restarted_at
        ):
            return Result()

        logger.info(
            "New restart request detected (requestedAt %s)",
            _rfc3339(instance.restart_requested_at),
        )
        return self.perform_restart(instance, target_client)

    def perform_restart(self, instance: ComputeInstance, target_client: Any = None) -> Result:
        """Delete the running instance so that it is recreated."""
        generation = instance.metadata.generation
        reference = instance.virtual_machine_reference
        if reference is None:
            logger.info("No VirtualMachineReference found, cannot perform restart")
            set_status_condition(
                instance.conditions,
                Condition(
                    type=ComputeInstanceConditionType.RESTART_FAILED.value,
                    status=CONDITION_TRUE,
                    reason=REASON_NO_VM_REFERENCE,
                    message="No VirtualMachine reference found",
                    observed_generation=generation,
                ),
            )
            return Result()

        client = self._resolve(target_client)
        requested = _rfc3339(instance.restart_requested_at)
        key = ObjectKey(namespace=reference.namespace, name=reference.kubevirt_virtual_machine_name)

        try:
            vmi = client.get(VirtualMachineInstance, key)
        except NotFoundError:
            logger.info("VirtualMachineInstance not found, marking restart as in progress")
            set_status_condition(
                instance.conditions,
                Condition(
                    type=ComputeInstanceConditionType.RESTART_IN_PROGRESS.value,
                    status=CONDITION_TRUE,
                    reason=REASON_RESTART_IN_PROGRESS,
                    message=f"Waiting for VMI to be created (restart requested at {requested})",
                    observed_generation=generation,
                ),
            )
            return Result()

        logger.info("Deleting VirtualMachineInstance to trigger restart (vmi %s)", key)
        try:
            client.delete(vmi)
        except NotFoundError:
            pass
        except Exception as error:
            logger.error("Failed to delete VirtualMachineInstance: %s", error)
            set_status_condition(
                instance.conditions,
                Condition(
                    type=ComputeInstanceConditionType.RESTART_FAILED.value,
                    status=CONDITION_TRUE,
                    reason=REASON_VMI_DELETION_FAILED,
                    message=f"Failed to delete VMI: {error}",
                    observed_generation=generation,
                ),
            )
            raise

        set_status_condition(
            instance.conditions,
            Condition(
                type=ComputeInstanceConditionType.RESTART_IN_PROGRESS.value,
                status=CONDITION_TRUE,
                reason=REASON_RESTART_IN_PROGRESS,
                message=f"Restart initiated at {requested}",
                observed_generation=generation,
            ),
        )
        remove_status_condition(instance.conditions, ComputeInstanceConditionType.RESTART_FAILED)
        logger.info("Restart initiated successfully (restartRequestedAt %s)", requested)
        return Result()

    def check_restart_completion(self, instance: ComputeInstance, target_client: Any) -> None:
        """Mark the restart done once the instance was recreated after the request."""
        reference = instance.virtual_machine_reference
        if reference is None:
            return
        key = ObjectKey(namespace=reference.namespace, name=reference.kubevirt_virtual_machine_name)
        try:
            vmi = target_client.get(VirtualMachineInstance, key)
        except NotFoundError:
            return

        created = vmi.metadata.creation_timestamp
        requested = instance.restart_requested_at
        if created is not None and requested is not None and created > requested:
            logger.info(
                "Restart completed successfully (vmiCreated %s, restartRequested %s)",
                _rfc3339(created),
                _rfc3339(requested),
            )
            instance.last_restarted_at = requested
            clear_restart_conditions(instance)