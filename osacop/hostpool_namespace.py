"""Working namespace of a host pool."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from osacop.names import HOST_POOL_NAME_LABEL, OSAC_APP_NAME, generate_host_pool_namespace_name
from osacop.resources import HostPool, Namespace, ObjectMeta


@dataclass
class NamespaceResource:
    """A namespace to create or update, with the function that brings it in line."""

    object: Namespace
    mutate: Callable[[], None]


def common_labels(instance: HostPool) -> dict[str, str]:
    """Return the labels every object owned by the host pool carries."""
    return {
        "app.kubernetes.io/name": OSAC_APP_NAME,
        HOST_POOL_NAME_LABEL: instance.metadata.name,
    }


def ensure_common_labels(instance: HostPool, obj: Any) -> None:
    """Add the host pool's common labels to the object, keeping its others."""
    if obj.metadata.labels is None:
        obj.metadata.labels = {}
    obj.metadata.labels.update(common_labels(instance))


def label_selector_for_host_pool(instance: HostPool) -> dict[str, str]:
    """Return the labels that select objects belonging to the host pool."""
    return {HOST_POOL_NAME_LABEL: instance.metadata.name}


def new_host_pool_namespace(client: Any, instance: HostPool) -> NamespaceResource:
    """Describe the working namespace of the host pool.

    ``client.list(kind, labels=...)`` must return the matching objects. An
    existing namespace is reused; more than one match is an error.
    """
    existing = list(client.list(Namespace, labels=label_selector_for_host_pool(instance)))
    if len(existing) > 1:
        raise ValueError(f"found multiple matching namespaces for {instance.metadata.name}")

    if existing:
        namespace_name = existing[0].metadata.name
    else:
        namespace_name = generate_host_pool_namespace_name(instance)
        if not namespace_name:
            raise ValueError("failed to generate namespace name")

    namespace = Namespace(metadata=ObjectMeta(name=namespace_name, labels=common_labels(instance)))

    def mutate() -> None:
        ensure_common_labels(instance, namespace)
        instance.host_pool_reference_namespace = namespace_name

    return NamespaceResource(namespace, mutate)