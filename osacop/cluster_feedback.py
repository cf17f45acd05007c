"""Reconciler that reports cluster order state to the fulfillment service."""

from __future__ import annotations

import copy
import logging
from typing import Any

from osacop.fulfillment import (
    ClusterConditionType,
    ClusterNodeSet,
    ClusterRecord,
    ClusterSpec,
    ClusterState,
    ClusterStatus,
    sync_record_condition,
)
from osacop.names import CLUSTER_ORDER_ID_LABEL
from osacop.resources import (
    ClusterOrder,
    ClusterOrderConditionType,
    ClusterOrderPhase,
    Condition,
    HostedCluster,
    NodeRequest,
    NotFoundError,
    ObjectKey,
    Result,
)

logger = logging.getLogger(__name__)

_KNOWN_CONDITIONS = frozenset(c.value for c in ClusterOrderConditionType)


class ClusterFeedbackReconciler:
    """Sends cluster order updates to the fulfillment service.

    ``hub_client`` offers ``get(kind, key)`` (raising NotFoundError).
    ``clusters_client`` offers ``get(id)`` and ``update(record)``.
    """

    def __init__(self, hub_client: Any, clusters_client: Any, namespace: str) -> None:
        self.hub_client = hub_client
        self.clusters_client = clusters_client
        self.namespace = namespace

    def reconcile(self, key: ObjectKey) -> Result:
        """Sync one cluster order into its fulfillment record."""
        try:
            order = self.hub_client.get(ClusterOrder, key)
        except NotFoundError:
            return Result()

        cluster_id = order.metadata.labels.get(CLUSTER_ORDER_ID_LABEL)
        if cluster_id is None:
            logger.info(
                "There is no label containing the cluster identifier, will ignore it (label %s)",
                CLUSTER_ORDER_ID_LABEL,
            )
            return Result()

        before = self._fetch(cluster_id)
        after = copy.deepcopy(before)

        if order.metadata.deletion_timestamp is None:
            self._handle_update(order, after)

        if after != before:
            self.clusters_client.update(after)
        return Result()

    def _fetch(self, cluster_id: str) -> ClusterRecord:
        record = self.clusters_client.get(cluster_id)
        if record.spec is None:
            record.spec = ClusterSpec()
        if record.status is None:
            record.status = ClusterStatus()
        return record

    def _handle_update(self, order: ClusterOrder, record: ClusterRecord) -> None:
        for condition in order.conditions:
            self._sync_condition(condition, record)
        self._sync_phase(order, record)
        for request in order.node_requests:
            self._sync_node_request(request, record)

    def _sync_condition(self, condition: Condition, record: ClusterRecord) -> None:
        condition_type = getattr(condition.type, "value", condition.type)
        if condition_type not in _KNOWN_CONDITIONS:
            logger.info("Unknown condition, will ignore it (condition %r)", condition_type)
            return
        # Every known order condition is reported through the progressing condition.
        sync_record_condition(
            record.status.conditions, ClusterConditionType.PROGRESSING, condition
        )

    def _sync_phase(self, order: ClusterOrder, record: ClusterRecord) -> None:
        try:
            phase = ClusterOrderPhase(order.phase)
        except ValueError:
            logger.info("Unknown phase, will ignore it (phase %r)", order.phase)
            return
        if phase is ClusterOrderPhase.PROGRESSING:
            record.status.state = ClusterState.PROGRESSING
        elif phase is ClusterOrderPhase.FAILED:
            record.status.state = ClusterState.FAILED
        elif phase is ClusterOrderPhase.READY:
            self._sync_phase_ready(order, record)
        # The deleting phase has no equivalent state in the record.

    def _sync_phase_ready(self, order: ClusterOrder, record: ClusterRecord) -> None:
        status = record.status
        status.state = ClusterState.READY
        hosted_cluster = self._fetch_hosted_cluster(order)
        api_url = _api_url(hosted_cluster)
        if api_url:
            status.api_url = api_url
        console_url = _console_url(hosted_cluster)
        if console_url:
            status.console_url = console_url

    def _fetch_hosted_cluster(self, order: ClusterOrder) -> HostedCluster | None:
        reference = order.cluster_reference
        if reference is None or not reference.namespace or not reference.hosted_cluster_name:
            return None
        key = ObjectKey(namespace=reference.namespace, name=reference.hosted_cluster_name)
        try:
            return self.hub_client.get(HostedCluster, key)
        except NotFoundError:
            return None

    def _sync_node_request(self, request: NodeRequest, record: ClusterRecord) -> None:
        node_set_id = next(
            (
                candidate_id
                for candidate_id, candidate in record.spec.node_sets.items()
                if candidate.host_class == request.resource_class
            ),
            "",
        )
        if not node_set_id:
            logger.error(
                "Failed to find a matching node set (resource_class %s)", request.resource_class
            )
            return

        if record.status.node_sets is None:
            record.status.node_sets = {}
        node_sets = record.status.node_sets
        node_set = node_sets.get(node_set_id)
        if node_set is None:
            node_set = ClusterNodeSet(host_class=request.resource_class)
            node_sets[node_set_id] = node_set

        new_value = int(request.number_of_nodes)
        if node_set.size != new_value:
            logger.info(
                "Updating node set size (resource_class %s, old_value %d, new_value %d)",
                request.resource_class,
                node_set.size,
                new_value,
            )
            node_set.size = new_value


def _api_url(hosted_cluster: HostedCluster | None) -> str:
    if hosted_cluster is None:
        return ""
    if not hosted_cluster.control_plane_host or hosted_cluster.control_plane_port == 0:
        return ""
    return f"https://{hosted_cluster.control_plane_host}:{hosted_cluster.control_plane_port}"


def _console_url(hosted_cluster: HostedCluster | None) -> str:
    if hosted_cluster is None:
        return ""
    return (
        "https://console-openshift-console.apps."
        f"{hosted_cluster.metadata.name}.{hosted_cluster.base_domain}"
    )