"""Kubernetes provider interface for cluster observation."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class NodeInfo:
    """Normalized node information."""

    name: str
    ready: bool
    conditions: dict[str, str] = field(default_factory=dict)


@dataclass
class PodInfo:
    """Normalized pod information."""

    name: str
    namespace: str
    phase: str | None
    conditions: dict[str, str] = field(default_factory=dict)

    @property
    def qualified_name(self) -> str:
        """Namespace-qualified pod name."""
        return f"{self.namespace}/{self.name}"

    @property
    def ready(self) -> bool:
        """Running or Succeeded with a Ready condition of True."""
        return self.phase in ("Running", "Succeeded") and self.conditions.get("Ready") == "True"


@dataclass
class ConfigMapInfo:
    """Normalized config map information."""

    name: str
    namespace: str
    data: dict[str, str] = field(default_factory=dict)


@dataclass
class ServerVersion:
    """API server version."""

    major: str
    minor: str
    git_version: str


class KubernetesProvider(ABC):
    """Abstract interface for observing a Kubernetes cluster.

    All methods return normalized data structures (dataclasses) rather than
    native K8s API objects. Any API failure is raised as TransientAPIError.
    """

    @abstractmethod
    async def get_server_version(self) -> ServerVersion:
        """Get the API server version.

        Raises:
            TransientAPIError: If the version cannot be retrieved
        """

    @abstractmethod
    async def get_config_map(self, name: str, namespace: str) -> ConfigMapInfo:
        """Get a config map.

        Args:
            name: ConfigMap name
            namespace: Namespace

        Raises:
            TransientAPIError: If the config map cannot be retrieved
        """

    @abstractmethod
    async def list_nodes(self) -> list[NodeInfo]:
        """Get all nodes in the cluster.

        Raises:
            TransientAPIError: If nodes cannot be retrieved
        """

    @abstractmethod
    async def get_node(self, name: str) -> NodeInfo:
        """Get a single node by name.

        Args:
            name: Node name

        Raises:
            TransientAPIError: If the node cannot be retrieved
        """

    @abstractmethod
    async def list_pods(self) -> list[PodInfo]:
        """Get pods across all namespaces.

        Raises:
            TransientAPIError: If pods cannot be retrieved
        """

    @abstractmethod
    async def get_pod(self, name: str, namespace: str) -> PodInfo:
        """Get a single pod.

        Args:
            name: Pod name
            namespace: Namespace

        Raises:
            TransientAPIError: If the pod cannot be retrieved
        """
