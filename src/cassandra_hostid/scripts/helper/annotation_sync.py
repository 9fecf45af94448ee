"""
Licence: MIT

Writes the Cassandra host ID of a pod into the annotations of its StatefulSet and reads it back.
"""
import logging
from typing import Dict, Optional
from cassandra_hostid.scripts.helper import exceptions
from cassandra_hostid.scripts.helper.nodetool import CommandRunner, DEFAULT_NODETOOL_PATH, get_cassandra_host_id

logger = logging.getLogger("hostid")


class WorkloadGroupClient:
    """The two StatefulSet operations the synchronizer needs."""

    def get_workload_group(self, namespace: str, name: str) -> Dict[str, str]:
        """Returns the annotations of the StatefulSet, raises NotFoundError if it does not exist."""
        raise NotImplementedError

    def patch_annotations(self, namespace: str, name: str, annotations: Dict[str, str]) -> Dict[str, str]:
        """Merge-patches the given annotations and returns the resulting annotations."""
        raise NotImplementedError


def get_annotation_name(prefix: str, member_name: str) -> str:
    return f"{prefix}/{member_name}"


def populate_host_id(client: WorkloadGroupClient, namespace: str, group_name: str, member_name: str, prefix: str,
                     host_id: Optional[str] = None, nodetool_path: str = DEFAULT_NODETOOL_PATH,
                     runner: Optional[CommandRunner] = None, logger: logging.Logger = logger,
                     strict_exit_code: bool = False) -> str:
    """
    Stores the host ID of member_name as annotation '<prefix>/<member_name>' of the StatefulSet.

    Only that single annotation is set, all other annotations stay untouched.

    Args:
        client (WorkloadGroupClient): Access to the StatefulSet.
        namespace (str): Namespace of the StatefulSet.
        group_name (str): Name of the StatefulSet.
        member_name (str): Name of the pod.
        prefix (str): Prefix of the annotation key.
        host_id (str): Host ID to store, read from nodetool if None.
        nodetool_path (str): Path to nodetool.
        runner (CommandRunner): Runner for nodetool.
        logger (logging.Logger): Logger to report to.
        strict_exit_code (bool): Treat a non-zero nodetool exit as a failure.

    Returns:
        str: The host ID that was written.

    Raises:
        ExecutionError, IdentifierNotFoundError: If the host ID cannot be read from nodetool.
        NotFoundError: If the StatefulSet does not exist.
        ApplyError: If the patch is rejected.
    """
    if host_id is None:
        try:
            host_id = get_cassandra_host_id(nodetool_path, runner=runner, logger=logger, strict_exit_code=strict_exit_code)
        except exceptions.HostIdFatalError:
            logger.error("Could not obtain Cassandra host ID")
            raise

    try:
        client.get_workload_group(namespace, group_name)
    except exceptions.NotFoundError:
        logger.error(f"Could not find StatefulSet {group_name}")
        raise

    key = get_annotation_name(prefix, member_name)
    try:
        result = client.patch_annotations(namespace, group_name, {key: host_id})
    except exceptions.ApplyError:
        logger.error("Error patching StatefulSet")
        raise
    logger.debug(f"Resulting annotations: {result}")
    logger.info(f"Stored host ID {host_id} for {member_name} in StatefulSet {namespace}/{group_name}")
    return host_id


def fetch_host_id(client: WorkloadGroupClient, namespace: str, group_name: str, member_name: str, prefix: str,
                  logger: logging.Logger = logger) -> str:
    """
    Reads the host ID of member_name from the annotations of the StatefulSet.

    Raises:
        NotFoundError: If the StatefulSet does not exist.
        MissingAnnotationError: If no host ID was stored for member_name.
    """
    try:
        annotations = client.get_workload_group(namespace, group_name)
    except exceptions.NotFoundError:
        logger.error(f"Could not find StatefulSet {group_name}")
        raise

    key = get_annotation_name(prefix, member_name)
    host_id = (annotations or {}).get(key)
    if host_id is None:
        raise exceptions.MissingAnnotationError(f"Host ID for {member_name} not present in annotations for StatefulSet {group_name}")
    return host_id
