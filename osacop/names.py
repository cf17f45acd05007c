"""Well-known names, labels, annotations and finalizers used by the operator."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from osacop.resources import HostPool

# Management state values.
MANAGEMENT_STATE_MANUAL = "manual"
"""The resource should not be managed by the controller."""

MANAGEMENT_STATE_UNMANAGED = "unmanaged"
"""The resource should be ignored by the controller."""

OSAC_APP_NAME = "osac-operator"
OSAC_PREFIX = "osac.openshift.io"

IMPLEMENTATION_STRATEGY_ANNOTATION = f"{OSAC_PREFIX}/implementation-strategy"
TENANT_ANNOTATION = f"{OSAC_PREFIX}/tenant"

# Compute instances.
DEFAULT_COMPUTE_INSTANCE_NAMESPACE = "osac-computeinstance"

COMPUTE_INSTANCE_NAME_LABEL = f"{OSAC_PREFIX}/computeinstance"
COMPUTE_INSTANCE_ID_LABEL = f"{OSAC_PREFIX}/computeinstance-uuid"
COMPUTE_INSTANCE_FINALIZER = f"{OSAC_PREFIX}/computeinstance"
AAP_COMPUTE_INSTANCE_FINALIZER = f"{OSAC_PREFIX}/computeinstance-aap"
COMPUTE_INSTANCE_FEEDBACK_FINALIZER = f"{OSAC_PREFIX}/computeinstance-feedback"
COMPUTE_INSTANCE_MANAGEMENT_STATE_ANNOTATION = f"{OSAC_PREFIX}/management-state"
FLOATING_IP_ADDRESS_ANNOTATION = f"{OSAC_PREFIX}/floating-ip-address"
AAP_RECONCILED_CONFIG_VERSION_ANNOTATION = f"{OSAC_PREFIX}/reconciled-config-version"

# Cluster orders.
CLUSTER_ORDER_ID_LABEL = f"{OSAC_PREFIX}/clusterorder-uuid"

# Host pools.
DEFAULT_HOST_POOL_NAME = "hostpool"
DEFAULT_HOST_POOL_NAMESPACE = "osac-hostpool-orders"

HOST_POOL_NAME_LABEL = f"{OSAC_PREFIX}/hostpool"
HOST_POOL_ID_LABEL = f"{OSAC_PREFIX}/hostpool-uuid"
HOST_POOL_FINALIZER = f"{OSAC_PREFIX}/finalizer"
HOST_POOL_MANAGEMENT_STATE_ANNOTATION = f"{OSAC_PREFIX}/management-state"


def generate_host_pool_namespace_name(instance: HostPool) -> str:
    """Return the name of the working namespace for a host pool."""
    return f"{instance.metadata.namespace}-{instance.metadata.name}"