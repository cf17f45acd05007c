"""Tenant lookup for compute instances."""

from __future__ import annotations

from typing import Any

from osacop.names import COMPUTE_INSTANCE_NAME_LABEL, TENANT_ANNOTATION
from osacop.resources import ComputeInstance, ObjectKey, Tenant


class TenantBeingDeletedError(Exception):
    """The tenant exists but is being deleted."""


def get_tenant(client: Any, tenant_namespace: str, instance: ComputeInstance) -> Tenant:
    """Fetch the instance's tenant and record the reference on the instance.

    ``client.get(kind, key)`` must return the object or raise NotFoundError.
    Raises LookupError when the instance names no tenant, and
    TenantBeingDeletedError when the tenant is being deleted.
    """
    tenant_name = instance.metadata.annotations.get(TENANT_ANNOTATION, "")
    if not tenant_name:
        raise LookupError(
            f"tenant information for compute instance {instance.metadata.name} not found"
        )

    tenant = client.get(Tenant, ObjectKey(namespace=tenant_namespace, name=tenant_name))

    if tenant.metadata.deletion_timestamp is not None:
        raise TenantBeingDeletedError(f"tenant is being deleted: {tenant.metadata.name}")

    instance.tenant_reference_name = tenant.metadata.name
    instance.tenant_reference_namespace = tenant.metadata.namespace
    return tenant


def label_selector_for_compute_instance(instance: ComputeInstance) -> dict[str, str]:
    """Return the labels that select objects belonging to the instance."""
    return {COMPUTE_INSTANCE_NAME_LABEL: instance.metadata.name}