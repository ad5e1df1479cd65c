"""Unit tests for KubernetesAdapter.

Tests the Kubernetes adapter implementation of KubernetesProvider interface.
All Kubernetes API calls are mocked to ensure tests are isolated and fast.
"""

from unittest.mock import MagicMock

import pytest
from kubernetes.client.models import (
    V1ConfigMap,
    V1Node,
    V1NodeCondition,
    V1NodeStatus,
    V1ObjectMeta,
    V1Pod,
    V1PodCondition,
    V1PodStatus,
    VersionInfo,
)

from kubesmoke.adapters.k8s_adapter import KubernetesAdapter, node_info, pod_info
from kubesmoke.core.exceptions import TransientAPIError
from kubesmoke.interfaces.kubernetes_provider import ConfigMapInfo, NodeInfo, PodInfo


def make_node(name: str, ready: str = "True") -> V1Node:
    """Build a V1Node with a Ready condition."""
    return V1Node(
        metadata=V1ObjectMeta(name=name),
        status=V1NodeStatus(
            conditions=[
                V1NodeCondition(type="MemoryPressure", status="False"),
                V1NodeCondition(type="Ready", status=ready),
            ]
        ),
    )


def make_pod(name: str, phase: str = "Running", ready: str = "True") -> V1Pod:
    """Build a V1Pod in kube-system."""
    return V1Pod(
        metadata=V1ObjectMeta(name=name, namespace="kube-system"),
        status=V1PodStatus(
            phase=phase,
            conditions=[V1PodCondition(type="Ready", status=ready)],
        ),
    )


@pytest.fixture
def mock_client() -> MagicMock:
    """Provide a mock KubernetesClient."""
    return MagicMock()


@pytest.fixture
def adapter(mock_client: MagicMock) -> KubernetesAdapter:
    """Provide an adapter over the mock client."""
    return KubernetesAdapter(mock_client)


class TestNormalization:
    """Tests for node and pod normalization."""

    def test_ready_node(self) -> None:
        """Test a node with Ready=True is ready."""
        info = node_info(make_node("node-1"))

        assert info == NodeInfo(
            name="node-1",
            ready=True,
            conditions={"MemoryPressure": "False", "Ready": "True"},
        )

    def test_unready_node(self) -> None:
        """Test Ready=Unknown is not ready."""
        assert node_info(make_node("node-1", ready="Unknown")).ready is False

    def test_node_without_status(self) -> None:
        """Test a node with no reported status is not ready."""
        info = node_info(V1Node(metadata=V1ObjectMeta(name="node-1")))

        assert info.ready is False
        assert info.conditions == {}

    def test_running_ready_pod(self) -> None:
        """Test a Running pod with Ready=True is ready."""
        info = pod_info(make_pod("coredns"))

        assert info.ready is True
        assert info.qualified_name == "kube-system/coredns"

    def test_succeeded_pod_is_ready(self) -> None:
        """Test a Succeeded pod with Ready=True counts as ready."""
        assert pod_info(make_pod("job", phase="Succeeded")).ready is True

    def test_pending_pod_not_ready(self) -> None:
        """Test a Pending pod is not ready even when the condition is True."""
        assert pod_info(make_pod("web", phase="Pending")).ready is False

    def test_running_pod_without_ready_condition(self) -> None:
        """Test a Running pod whose Ready condition is False is not ready."""
        assert pod_info(make_pod("web", ready="False")).ready is False

    def test_pod_without_status(self) -> None:
        """Test a pod with no status is not ready."""
        pod = V1Pod(metadata=V1ObjectMeta(name="web", namespace="default"))

        assert pod_info(pod) == PodInfo(name="web", namespace="default", phase=None)


class TestKubernetesAdapterCalls:
    """Tests for KubernetesAdapter provider methods."""

    @pytest.mark.asyncio
    async def test_get_server_version(
        self, adapter: KubernetesAdapter, mock_client: MagicMock
    ) -> None:
        """Test the server version is normalized."""
        mock_client.get_server_version.return_value = VersionInfo(
            major="1",
            minor="29+",
            git_version="v1.29.3-eks-adc7111",
            build_date="",
            compiler="gc",
            git_commit="",
            git_tree_state="clean",
            go_version="go1.21",
            platform="linux/amd64",
        )

        version = await adapter.get_server_version()

        assert version.major == "1"
        assert version.minor == "29+"
        assert version.git_version == "v1.29.3-eks-adc7111"

    @pytest.mark.asyncio
    async def test_get_config_map(self, adapter: KubernetesAdapter, mock_client: MagicMock) -> None:
        """Test a config map is normalized with its data."""
        mock_client.get_config_map.return_value = V1ConfigMap(
            metadata=V1ObjectMeta(name="aws-auth", namespace="kube-system"),
            data={"mapRoles": "- rolearn: arn:aws:iam::123:role/node"},
        )

        config_map = await adapter.get_config_map("aws-auth", "kube-system")

        assert config_map == ConfigMapInfo(
            name="aws-auth",
            namespace="kube-system",
            data={"mapRoles": "- rolearn: arn:aws:iam::123:role/node"},
        )
        mock_client.get_config_map.assert_called_once_with("aws-auth", "kube-system")

    @pytest.mark.asyncio
    async def test_get_config_map_without_data(
        self, adapter: KubernetesAdapter, mock_client: MagicMock
    ) -> None:
        """Test a config map with no data normalizes to empty data."""
        mock_client.get_config_map.return_value = V1ConfigMap(
            metadata=V1ObjectMeta(name="aws-auth", namespace="kube-system")
        )

        assert (await adapter.get_config_map("aws-auth", "kube-system")).data == {}

    @pytest.mark.asyncio
    async def test_list_nodes(self, adapter: KubernetesAdapter, mock_client: MagicMock) -> None:
        """Test nodes are listed and normalized."""
        mock_client.list_nodes.return_value = [make_node("node-1"), make_node("node-2", "False")]

        nodes = await adapter.list_nodes()

        assert [(n.name, n.ready) for n in nodes] == [("node-1", True), ("node-2", False)]

    @pytest.mark.asyncio
    async def test_get_node(self, adapter: KubernetesAdapter, mock_client: MagicMock) -> None:
        """Test a single node is read by name."""
        mock_client.get_node.return_value = make_node("node-1")

        node = await adapter.get_node("node-1")

        assert node.ready is True
        mock_client.get_node.assert_called_once_with("node-1")

    @pytest.mark.asyncio
    async def test_list_pods(self, adapter: KubernetesAdapter, mock_client: MagicMock) -> None:
        """Test pods are listed and normalized."""
        mock_client.list_pods.return_value = [make_pod("coredns"), make_pod("web", "Pending")]

        pods = await adapter.list_pods()

        assert [p.ready for p in pods] == [True, False]

    @pytest.mark.asyncio
    async def test_get_pod(self, adapter: KubernetesAdapter, mock_client: MagicMock) -> None:
        """Test a single pod is read by name and namespace."""
        mock_client.get_pod.return_value = make_pod("coredns")

        pod = await adapter.get_pod("coredns", "kube-system")

        assert pod.qualified_name == "kube-system/coredns"
        mock_client.get_pod.assert_called_once_with("coredns", "kube-system")

    @pytest.mark.asyncio
    async def test_transient_error_passes_through(
        self, adapter: KubernetesAdapter, mock_client: MagicMock
    ) -> None:
        """Test TransientAPIError from the client is not wrapped."""
        mock_client.list_nodes.side_effect = TransientAPIError("Failed to list nodes")

        with pytest.raises(TransientAPIError, match="Failed to list nodes"):
            await adapter.list_nodes()
