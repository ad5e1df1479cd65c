"""Kubernetes client for cluster operations."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1ConfigMap, V1Node, V1Pod, VersionInfo
from urllib3.exceptions import HTTPError

from kubesmoke.core.exceptions import InvalidCredentialError, TransientAPIError
from kubesmoke.utils.kubeconfig import parse_kubeconfig, serialize_kubeconfig, validate_kubeconfig
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)

# Per-request timeout; retry waits are governed by RetryPolicy.
DEFAULT_REQUEST_TIMEOUT = 30


class KubernetesClient:
    """Kubernetes client wrapper bound to a single cluster.

    Every API failure is raised as TransientAPIError: during polling the
    caller treats it as "not ready yet".
    """

    def __init__(
        self,
        api_client: client.ApiClient,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        """Initialize Kubernetes client.

        Args:
            api_client: API client configured for one cluster
            request_timeout: Timeout for each API request (seconds)
        """
        self.api_client = api_client
        self.request_timeout = request_timeout
        self.core_v1 = client.CoreV1Api(api_client)
        self.version_api = client.VersionApi(api_client)

        logger.debug("k8s_client_initialized", host=api_client.configuration.host)

    def get_server_version(self) -> VersionInfo:
        """Get the API server version.

        Returns:
            VersionInfo of the API server

        Raises:
            TransientAPIError: If the version cannot be retrieved
        """
        try:
            return self.version_api.get_code(_request_timeout=self.request_timeout)
        except ApiException as e:
            logger.error("get_server_version_failed", status=e.status, reason=e.reason)
            raise TransientAPIError(f"Failed to get server version: {e.reason}") from e
        except HTTPError as e:
            logger.error("get_server_version_failed", error=str(e))
            raise TransientAPIError(f"Failed to get server version: {e}") from e

    def get_config_map(self, name: str, namespace: str) -> V1ConfigMap:
        """Get a config map.

        Args:
            name: ConfigMap name
            namespace: Namespace

        Returns:
            V1ConfigMap object

        Raises:
            TransientAPIError: If the config map cannot be retrieved
        """
        try:
            logger.debug("getting_config_map", name=name, namespace=namespace)
            return self.core_v1.read_namespaced_config_map(
                name=name, namespace=namespace, _request_timeout=self.request_timeout
            )
        except ApiException as e:
            logger.debug("get_config_map_failed", name=name, status=e.status, reason=e.reason)
            raise TransientAPIError(f"Failed to get config map {namespace}/{name}: {e.reason}") from e
        except HTTPError as e:
            logger.debug("get_config_map_failed", name=name, error=str(e))
            raise TransientAPIError(f"Failed to get config map {namespace}/{name}: {e}") from e

    def list_nodes(self) -> list[V1Node]:
        """Get all nodes in the cluster.

        Returns:
            List of V1Node objects

        Raises:
            TransientAPIError: If nodes cannot be retrieved
        """
        try:
            logger.debug("listing_nodes")
            response = self.core_v1.list_node(_request_timeout=self.request_timeout)
            nodes = response.items

            logger.debug("nodes_retrieved", count=len(nodes))
            return nodes

        except ApiException as e:
            logger.debug("list_nodes_failed", status=e.status, reason=e.reason)
            raise TransientAPIError(f"Failed to list nodes: {e.reason}") from e
        except HTTPError as e:
            logger.debug("list_nodes_failed", error=str(e))
            raise TransientAPIError(f"Failed to list nodes: {e}") from e

    def get_node(self, name: str) -> V1Node:
        """Get a node by name.

        Args:
            name: Node name

        Returns:
            V1Node object

        Raises:
            TransientAPIError: If the node cannot be retrieved
        """
        try:
            return self.core_v1.read_node(name=name, _request_timeout=self.request_timeout)
        except ApiException as e:
            logger.debug("get_node_failed", name=name, status=e.status, reason=e.reason)
            raise TransientAPIError(f"Failed to get node {name}: {e.reason}") from e
        except HTTPError as e:
            logger.debug("get_node_failed", name=name, error=str(e))
            raise TransientAPIError(f"Failed to get node {name}: {e}") from e

    def list_pods(self) -> list[V1Pod]:
        """Get pods across all namespaces.

        Returns:
            List of V1Pod objects

        Raises:
            TransientAPIError: If pods cannot be retrieved
        """
        try:
            logger.debug("listing_pods")
            response = self.core_v1.list_pod_for_all_namespaces(
                _request_timeout=self.request_timeout
            )
            pods = response.items

            logger.debug("pods_retrieved", count=len(pods))
            return pods

        except ApiException as e:
            logger.debug("list_pods_failed", status=e.status, reason=e.reason)
            raise TransientAPIError(f"Failed to list pods: {e.reason}") from e
        except HTTPError as e:
            logger.debug("list_pods_failed", error=str(e))
            raise TransientAPIError(f"Failed to list pods: {e}") from e

    def get_pod(self, name: str, namespace: str) -> V1Pod:
        """Get a pod.

        Args:
            name: Pod name
            namespace: Namespace

        Returns:
            V1Pod object

        Raises:
            TransientAPIError: If the pod cannot be retrieved
        """
        try:
            return self.core_v1.read_namespaced_pod(
                name=name, namespace=namespace, _request_timeout=self.request_timeout
            )
        except ApiException as e:
            logger.debug("get_pod_failed", name=name, namespace=namespace, status=e.status)
            raise TransientAPIError(f"Failed to get pod {namespace}/{name}: {e.reason}") from e
        except HTTPError as e:
            logger.debug("get_pod_failed", name=name, namespace=namespace, error=str(e))
            raise TransientAPIError(f"Failed to get pod {namespace}/{name}: {e}") from e


@dataclass(frozen=True)
class ClusterHandle:
    """Resolved access to one cluster under test.

    Attributes:
        kubeconfig: Validated kubeconfig the handle was resolved from
        rest_config: REST configuration derived from the current context
        kube_client: Kubernetes client bound to the REST configuration
    """

    kubeconfig: dict[str, Any] = field(repr=False)
    rest_config: client.Configuration = field(repr=False)
    kube_client: KubernetesClient = field(repr=False)

    @property
    def context(self) -> str:
        """Name of the kubeconfig context in use."""
        return self.kubeconfig["current-context"]

    @property
    def host(self) -> str:
        """API server endpoint."""
        return self.rest_config.host


def resolve_credential(
    credential: Mapping[str, Any] | str | bytes,
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
) -> ClusterHandle:
    """Turn a kubeconfig into a validated, usable cluster handle.

    Args:
        credential: Kubeconfig as a mapping or serialized document
        request_timeout: Timeout for each API request (seconds)

    Returns:
        ClusterHandle bound to the kubeconfig's current context

    Raises:
        InvalidCredentialError: If the kubeconfig is malformed or inconsistent
    """
    kubeconfig = parse_kubeconfig(serialize_kubeconfig(credential))
    validate_kubeconfig(kubeconfig)

    rest_config = client.Configuration()
    try:
        config.load_kube_config_from_dict(
            config_dict=kubeconfig,
            context=kubeconfig["current-context"],
            client_configuration=rest_config,
            persist_config=False,
        )
    except Exception as e:
        logger.error("rest_config_load_failed", error=str(e))
        raise InvalidCredentialError(f"Failed to load REST configuration: {e}") from e

    api_client = client.ApiClient(configuration=rest_config)
    handle = ClusterHandle(
        kubeconfig=kubeconfig,
        rest_config=rest_config,
        kube_client=KubernetesClient(api_client, request_timeout=request_timeout),
    )

    logger.debug("credential_resolved", context=handle.context, host=handle.host)
    return handle
