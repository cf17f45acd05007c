import pytest

from osacop.hostpool_namespace import (
    common_labels,
    ensure_common_labels,
    label_selector_for_host_pool,
    new_host_pool_namespace,
)
from osacop.names import HOST_POOL_NAME_LABEL
from osacop.resources import HostPool, Namespace, ObjectMeta


class FakeClient:
    def __init__(self, *objects):
        self.objects = list(objects)

    def list(self, kind, labels):
        return [
            o
            for o in self.objects
            if isinstance(o, kind) and all(o.metadata.labels.get(k) == v for k, v in labels.items())
        ]


def _pool():
    return HostPool(metadata=ObjectMeta(name="pool", namespace="ns1"))


def test_common_labels():
    labels = common_labels(_pool())
    assert labels["app.kubernetes.io/name"] == "osac-operator"
    assert labels[HOST_POOL_NAME_LABEL] == "pool"


def test_label_selector():
    assert label_selector_for_host_pool(_pool()) == {HOST_POOL_NAME_LABEL: "pool"}


def test_new_namespace_generates_name():
    pool = _pool()
    resource = new_host_pool_namespace(FakeClient(), pool)
    assert resource.object.metadata.name == "ns1-pool"
    assert resource.object.metadata.labels == common_labels(pool)
    assert pool.host_pool_reference_namespace == ""
    resource.mutate()
    assert pool.host_pool_reference_namespace == "ns1-pool"


def test_existing_namespace_is_reused():
    pool = _pool()
    existing = Namespace(metadata=ObjectMeta(name="kept", labels={HOST_POOL_NAME_LABEL: "pool"}))
    other = Namespace(metadata=ObjectMeta(name="other", labels={HOST_POOL_NAME_LABEL: "x"}))
    resource = new_host_pool_namespace(FakeClient(existing, other), pool)
    assert resource.object.metadata.name == "kept"
    resource.mutate()
    assert pool.host_pool_reference_namespace == "kept"


def test_multiple_namespaces_raise():
    labels = {HOST_POOL_NAME_LABEL: "pool"}
    client = FakeClient(
        Namespace(metadata=ObjectMeta(name="a", labels=dict(labels))),
        Namespace(metadata=ObjectMeta(name="b", labels=dict(labels))),
    )
    with pytest.raises(ValueError, match="found multiple matching namespaces for pool"):
        new_host_pool_namespace(client, _pool())


def test_mutate_restores_labels():
    pool = _pool()
    resource = new_host_pool_namespace(FakeClient(), pool)
    resource.object.metadata.labels = {"extra": "1"}
    resource.mutate()
    assert resource.object.metadata.labels == {"extra": "1", **common_labels(pool)}


def test_ensure_common_labels_keeps_others_and_handles_none():
    pool = _pool()
    namespace = Namespace(metadata=ObjectMeta(name="n", labels={HOST_POOL_NAME_LABEL: "stale", "k": "v"}))
    ensure_common_labels(pool, namespace)
    assert namespace.metadata.labels["k"] == "v"
    assert namespace.metadata.labels[HOST_POOL_NAME_LABEL] == "pool"

    bare = Namespace(metadata=ObjectMeta(name="m"))
    bare.metadata.labels = None
    ensure_common_labels(pool, bare)
    assert bare.metadata.labels == common_labels(pool)