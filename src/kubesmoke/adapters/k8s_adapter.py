"""Kubernetes adapter implementing KubernetesProvider interface."""

import asyncio

from kubernetes.client.models import V1Node, V1Pod

from kubesmoke.clients.kubernetes_client import KubernetesClient
from kubesmoke.interfaces.kubernetes_provider import (
    ConfigMapInfo,
    KubernetesProvider,
    NodeInfo,
    PodInfo,
    ServerVersion,
)
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)


def _conditions(status: object) -> dict[str, str]:
    """Map condition type to status for a node or pod status."""
    conditions = getattr(status, "conditions", None) or []
    return {cond.type: cond.status for cond in conditions}


def node_info(node: V1Node) -> NodeInfo:
    """Normalize a V1Node."""
    conditions = _conditions(node.status)
    return NodeInfo(
        name=node.metadata.name,
        ready=conditions.get("Ready") == "True",
        conditions=conditions,
    )


def pod_info(pod: V1Pod) -> PodInfo:
    """Normalize a V1Pod."""
    return PodInfo(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        phase=pod.status.phase if pod.status else None,
        conditions=_conditions(pod.status),
    )


class KubernetesAdapter(KubernetesProvider):
    """Adapter wrapping KubernetesClient to implement KubernetesProvider interface.

    Blocking client calls run in a worker thread so that several clusters can
    be polled concurrently from one event loop. TransientAPIError from the
    client passes through unchanged.
    """

    def __init__(self, client: KubernetesClient):
        """Initialize Kubernetes adapter.

        Args:
            client: Kubernetes client bound to one cluster
        """
        self.client = client
        logger.debug("k8s_adapter_initialized")

    async def get_server_version(self) -> ServerVersion:
        """Get the API server version."""
        version = await asyncio.to_thread(self.client.get_server_version)
        return ServerVersion(
            major=version.major,
            minor=version.minor,
            git_version=version.git_version,
        )

    async def get_config_map(self, name: str, namespace: str) -> ConfigMapInfo:
        """Get a config map."""
        config_map = await asyncio.to_thread(self.client.get_config_map, name, namespace)
        return ConfigMapInfo(
            name=config_map.metadata.name,
            namespace=config_map.metadata.namespace,
            data=dict(config_map.data or {}),
        )

    async def list_nodes(self) -> list[NodeInfo]:
        """Get all nodes in the cluster."""
        nodes = await asyncio.to_thread(self.client.list_nodes)
        return [node_info(node) for node in nodes]

    async def get_node(self, name: str) -> NodeInfo:
        """Get a single node by name."""
        return node_info(await asyncio.to_thread(self.client.get_node, name))

    async def list_pods(self) -> list[PodInfo]:
        """Get pods across all namespaces."""
        pods = await asyncio.to_thread(self.client.list_pods)
        return [pod_info(pod) for pod in pods]

    async def get_pod(self, name: str, namespace: str) -> PodInfo:
        """Get a single pod."""
        return pod_info(await asyncio.to_thread(self.client.get_pod, name, namespace))
