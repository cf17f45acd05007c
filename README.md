# osacop

Reconciliation pieces for compute instances, host pools and cluster orders:
reconcilers that push resource status into a fulfillment service's records,
a restart handler for compute instances, and helpers for conditions,
finalizers, tenants and host pool namespaces.

Everything works on plain Python dataclasses. You supply the clients as
ordinary objects with a few methods, which keeps each piece easy to drive
with in-memory fakes:

- a hub client with `get(kind, key)`, raising `NotFoundError` when the
  object is missing, and `update(obj)`;
- for `new_host_pool_namespace`, a client with `list(kind, labels=...)`;
- for `RestartHandler`, a target client with `get(kind, key)` and
  `delete(obj)`;
- a fulfillment client with `get(id)` and `update(record)`; the compute
  instance reconciler also calls `signal(id)`.

## Modules

- `osacop.names` – label, annotation and finalizer names (for example
  `COMPUTE_INSTANCE_ID_LABEL`, `COMPUTE_INSTANCE_FEEDBACK_FINALIZER`,
  `HOST_POOL_ID_LABEL`, `CLUSTER_ORDER_ID_LABEL`, `TENANT_ANNOTATION`) and
  `generate_host_pool_namespace_name`, which returns `"<namespace>-<name>"`.
- `osacop.resources` – the resource model (`ObjectMeta`, `ObjectKey`,
  `Condition`, `ComputeInstance`, `VirtualMachineInstance`, `Tenant`,
  `Namespace`, `HostPool`, `HostSet`, `ClusterOrder`, `NodeRequest`,
  `ClusterReference`, `HostedCluster`, the phase and condition-type enums),
  `Result`, `NotFoundError`, and helpers: `set_status_condition`,
  `remove_status_condition`, `find_status_condition`,
  `is_status_condition_true`, `contains_finalizer`, `add_finalizer`,
  `remove_finalizer`.
- `osacop.tenants` – `get_tenant(client, tenant_namespace, instance)` looks
  up the tenant named by the instance's tenant annotation and records the
  reference on the instance. It raises `LookupError` when no tenant is named
  and `TenantBeingDeletedError` while the tenant is being deleted.
  `label_selector_for_compute_instance` gives the labels that select an
  instance's objects.
- `osacop.hostpool_namespace` – `new_host_pool_namespace(client, instance)`
  reuses the one existing namespace labelled for the host pool or names a new
  one, and returns a `NamespaceResource` whose `mutate()` applies the common
  labels and records the namespace on the host pool. More than one matching
  namespace raises `ValueError`. Also `common_labels`,
  `ensure_common_labels` and `label_selector_for_host_pool`.
- `osacop.fulfillment` – the fulfillment service's records
  (`InstanceRecord`, `ClusterRecord`, `PoolRecord` and their status types),
  their enums, and `map_condition_status`, `find_or_add_condition`,
  `sync_record_condition`. A record condition's transition time moves only
  when its status changes.
- `osacop.restart` – `RestartHandler` restarts a compute instance when
  `restart_requested_at` is newer than `last_restarted_at`, by deleting its
  `VirtualMachineInstance`; it sets `RestartInProgress` or `RestartFailed`
  conditions and, once the instance is recreated after the request, sets
  `last_restarted_at` and clears them. `clear_restart_conditions` removes
  both conditions.
- `osacop.computeinstance_feedback` – `ComputeInstanceFeedbackReconciler`
  adds its finalizer, syncs conditions, phase, floating IP address and last
  restart time into the instance record, and on deletion removes its
  finalizer and signals the service when it is the last one left.
- `osacop.cluster_feedback` – `ClusterFeedbackReconciler` syncs conditions,
  phase, API and console URLs and node set sizes into the cluster record.
- `osacop.hostpool_feedback` – `HostPoolFeedbackReconciler` syncs conditions
  and phase into the host pool record, and skips pools being deleted.

Each reconciler sends an update only when the record actually changed.

## Example

```python
from osacop.computeinstance_feedback import ComputeInstanceFeedbackReconciler
from osacop.resources import ObjectKey

reconciler = ComputeInstanceFeedbackReconciler(hub_client, instances_client, "osac-computeinstance")
result = reconciler.reconcile(ObjectKey(namespace="osac-computeinstance", name="my-instance"))
```

A resource that no longer exists simply ends the reconcile; other errors
from the clients propagate as exceptions.

## What it does not do

There is no command and no running controller: nothing here watches a
cluster, queues requests or calls `reconcile` for you, and no client for a
cluster API or for the fulfillment service is included. The host pool
helpers describe the working namespace but do not create or delete it, and
nothing here provisions host pools or calls webhooks.

## Running the tests

```
pip install -e .[test]
pytest
```