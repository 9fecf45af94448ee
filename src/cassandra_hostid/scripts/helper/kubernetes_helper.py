"""
Licence: MIT

Kubernetes access for cassandra-hostid.
"""
import json
import logging
from typing import Dict, Optional
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError
from cassandra_hostid.scripts.helper import exceptions
from cassandra_hostid.scripts.helper.annotation_sync import WorkloadGroupClient

logger = logging.getLogger("hostid")

MERGE_PATCH_CONTENT_TYPE = "application/merge-patch+json"
METADATA_KEY = "metadata"
ANNOTATIONS_KEY = "annotations"


def create_api_client(kubeconfig: Optional[str] = None) -> client.ApiClient:
    """
    Creates a Kubernetes API client.

    Args:
        kubeconfig (str): Path to a kubeconfig file. The in-cluster service account is used if empty.

    Returns:
        client.ApiClient: Client for the configured cluster.

    Raises:
        AuthError: If no configuration can be loaded.
    """
    configuration = client.Configuration()
    try:
        if kubeconfig:
            logger.debug(f"Loading kubeconfig {kubeconfig}")
            config.load_kube_config(config_file=kubeconfig, client_configuration=configuration)
        else:
            logger.debug("Loading in-cluster config")
            config.load_incluster_config(client_configuration=configuration)
    except (ConfigException, OSError) as e:
        logger.error("Could not open k8s config")
        raise exceptions.AuthError(f"Could not load Kubernetes configuration: {e}")
    return client.ApiClient(configuration)


def build_annotation_patch(annotations: Dict[str, str]) -> dict:
    return {
        METADATA_KEY: {
            ANNOTATIONS_KEY: annotations
        }
    }


def _raise_for_api_exception(e: ApiException, what: str):
    if e.status == 404:
        raise exceptions.NotFoundError(f"{what} not found")
    if e.status in (401, 403):
        raise exceptions.AuthError(f"Access to {what} denied: {e.reason}")
    raise exceptions.OrchestrationError(f"Reading {what} failed: {e.status} {e.reason}")


class KubernetesWorkloadClient(WorkloadGroupClient):
    """WorkloadGroupClient on top of the StatefulSet API, plus pod lookup."""

    def __init__(self, api_client: Optional[client.ApiClient] = None,
                 apps_api: Optional[client.AppsV1Api] = None,
                 core_api: Optional[client.CoreV1Api] = None):
        self.apps_api = apps_api or client.AppsV1Api(api_client)
        self.core_api = core_api or client.CoreV1Api(api_client)

    def get_member(self, namespace: str, name: str) -> client.V1Pod:
        try:
            return self.core_api.read_namespaced_pod(name, namespace)
        except ApiException as e:
            logger.error(f"Could not find our pod: {name}")
            _raise_for_api_exception(e, f"Pod {namespace}/{name}")
        except HTTPError as e:
            raise exceptions.OrchestrationError(f"Reading Pod {namespace}/{name} failed: {e}")

    def get_workload_group(self, namespace: str, name: str) -> Dict[str, str]:
        try:
            stateful_set = self.apps_api.read_namespaced_stateful_set(name, namespace)
        except ApiException as e:
            _raise_for_api_exception(e, f"StatefulSet {namespace}/{name}")
        except HTTPError as e:
            raise exceptions.OrchestrationError(f"Reading StatefulSet {namespace}/{name} failed: {e}")
        return dict(stateful_set.metadata.annotations or {})

    def patch_annotations(self, namespace: str, name: str, annotations: Dict[str, str]) -> Dict[str, str]:
        """
        Applies a JSON merge patch to metadata.annotations of the StatefulSet.

        Args:
            namespace (str): Namespace of the StatefulSet.
            name (str): Name of the StatefulSet.
            annotations (dict): Annotations to add or overwrite.

        Returns:
            dict: All annotations of the StatefulSet after the patch.

        Raises:
            ApplyError: If the API rejects the patch or cannot be reached.
        """
        body = build_annotation_patch(annotations)
        logger.debug(f"Patching StatefulSet: {json.dumps(body)}")
        try:
            result = self.apps_api.patch_namespaced_stateful_set(name, namespace, body, _content_type=MERGE_PATCH_CONTENT_TYPE)
        except ApiException as e:
            raise exceptions.ApplyError(f"Patching StatefulSet {namespace}/{name} failed: {e.status} {e.reason}")
        except HTTPError as e:
            raise exceptions.ApplyError(f"Patching StatefulSet {namespace}/{name} failed: {e}")
        return dict(result.metadata.annotations or {})
