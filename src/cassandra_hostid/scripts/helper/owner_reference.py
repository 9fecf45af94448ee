"""
Licence: MIT

Finds the StatefulSet that created a pod.
"""
import json
import logging
from dataclasses import dataclass
from cassandra_hostid.scripts.helper import exceptions

logger = logging.getLogger("hostid")

CREATED_BY_ANNOTATION = "kubernetes.io/created-by"
STATEFUL_SET_KIND = "StatefulSet"


@dataclass
class OwnerReference:
    kind: str = ""
    namespace: str = ""
    name: str = ""


def _metadata(pod) -> dict:
    # V1Pod or the dict form returned by the API client
    if isinstance(pod, dict):
        return pod.get("metadata") or {}
    metadata = pod.metadata
    if metadata is None:
        return {}
    owners = metadata.owner_references or []
    return {
        "name": metadata.name,
        "namespace": metadata.namespace,
        "annotations": metadata.annotations or {},
        "ownerReferences": [{"kind": o.kind, "name": o.name} for o in owners],
    }


def decode_created_by(created_by_json: str) -> OwnerReference:
    """
    Decodes the serialized reference stored in the created-by annotation.

    Raises:
        NotFoundError: If the annotation is not a serialized reference.
    """
    try:
        serialized = json.loads(created_by_json)
        reference = serialized["reference"]
        return OwnerReference(kind=reference.get("kind", ""), namespace=reference.get("namespace", ""), name=reference["name"])
    except (ValueError, TypeError, KeyError, AttributeError) as e:
        raise exceptions.NotFoundError(f"the created-by annotation cannot be decoded: {e}")


def resolve_owner(pod, logger: logging.Logger = logger) -> OwnerReference:
    """
    Determines the StatefulSet that owns the pod.

    The created-by annotation is used where present, otherwise the StatefulSet entry
    in the pod's owner references, which lives in the pod's namespace.

    Args:
        pod: The pod, either a kubernetes.client.V1Pod or its dict form.
        logger (logging.Logger): Logger to report to.

    Returns:
        OwnerReference: Kind, namespace and name of the owner.

    Raises:
        NotFoundError: If the pod names no owning StatefulSet.
    """
    metadata = _metadata(pod)
    pod_namespace = metadata.get("namespace") or ""
    annotations = metadata.get("annotations") or {}

    created_by_json = annotations.get(CREATED_BY_ANNOTATION)
    if created_by_json is not None:
        owner = decode_created_by(created_by_json)
        if not owner.namespace:
            owner.namespace = pod_namespace
        logger.debug(f"Owner from {CREATED_BY_ANNOTATION}: {owner}")
        return owner

    for reference in metadata.get("ownerReferences") or []:
        if reference.get("kind") == STATEFUL_SET_KIND:
            owner = OwnerReference(kind=STATEFUL_SET_KIND, namespace=pod_namespace, name=reference.get("name", ""))
            logger.debug(f"Owner from owner references: {owner}")
            return owner

    raise exceptions.NotFoundError(f"the created-by annotation isn't present and pod {metadata.get('name')} has no StatefulSet owner")
