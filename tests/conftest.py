"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import yaml

from kubesmoke.interfaces.check import CheckContext
from kubesmoke.interfaces.kubernetes_provider import (
    ConfigMapInfo,
    NodeInfo,
    PodInfo,
    ServerVersion,
)
from kubesmoke.utils.retry import RetryPolicy

# ==============================================================================
# Kubeconfig Fixtures
# ==============================================================================


def build_kubeconfig(
    cluster_name: str = "prod",
    server: str = "https://prod.eks.example.com",
    exec_args: list[str] | None = None,
) -> dict[str, Any]:
    """Build an EKS-style kubeconfig authenticating through an exec plugin."""
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": "aws",
        "clusters": [
            {
                "name": "kubernetes",
                "cluster": {
                    "server": server,
                    "certificate-authority-data": "",
                },
            }
        ],
        "contexts": [{"name": "aws", "context": {"cluster": "kubernetes", "user": "aws"}}],
        "users": [
            {
                "name": "aws",
                "user": {
                    "exec": {
                        "apiVersion": "client.authentication.k8s.io/v1beta1",
                        "command": "aws-iam-authenticator",
                        "args": exec_args
                        if exec_args is not None
                        else ["token", "-i", cluster_name],
                    }
                },
            }
        ],
    }


@pytest.fixture
def make_kubeconfig() -> Callable[..., dict[str, Any]]:
    """Provide a factory for EKS-style kubeconfigs."""
    return build_kubeconfig


@pytest.fixture
def sample_kubeconfig() -> dict[str, Any]:
    """Provide a kubeconfig for a cluster named prod."""
    return build_kubeconfig()


@pytest.fixture
def token_kubeconfig() -> dict[str, Any]:
    """Provide a kubeconfig authenticating with a static token."""
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": "dev",
        "clusters": [{"name": "dev", "cluster": {"server": "https://dev.example.com:6443"}}],
        "contexts": [{"name": "dev", "context": {"cluster": "dev", "user": "dev"}}],
        "users": [{"name": "dev", "user": {"token": "secret-token"}}],
    }


def _load_rest_config(
    config_dict: dict[str, Any],
    context: str,
    client_configuration: Any,
    persist_config: bool,
) -> None:
    """Stand-in REST config loader that does not run exec plugins."""
    contexts = {c["name"]: c["context"] for c in config_dict["contexts"]}
    clusters = {c["name"]: c["cluster"] for c in config_dict["clusters"]}
    client_configuration.host = clusters[contexts[context]["cluster"]]["server"]


@pytest.fixture
def stub_rest_config_loader():
    """Patch the kubeconfig loader so exec plugins are never invoked."""
    with patch(
        "kubesmoke.clients.kubernetes_client.config.load_kube_config_from_dict",
        side_effect=_load_rest_config,
    ) as loader:
        yield loader


# ==============================================================================
# Stack Resource Fixtures
# ==============================================================================


def node_group_template(
    desired_capacity: Any = 3, name_tag: str | None = "prod-worker-a"
) -> str:
    """Render a node group stack template body."""
    properties: dict[str, Any] = {"DesiredCapacity": desired_capacity}
    if name_tag is not None:
        properties["Tags"] = [
            {"Key": "Name", "Value": name_tag, "PropagateAtLaunch": True},
        ]
    return yaml.safe_dump(
        {
            "AWSTemplateFormatVersion": "2010-09-09",
            "Resources": {
                "NodeGroup": {
                    "Type": "AWS::AutoScaling::AutoScalingGroup",
                    "Properties": properties,
                }
            },
        }
    )


def node_group_resource(
    desired_capacity: Any = 3,
    name_tag: str | None = "prod-worker-a",
    stack: str = "prod-worker-a",
) -> dict[str, Any]:
    """Build a node group stack resource as exported by the provisioning tool."""
    return {
        "id": f"arn:aws:cloudformation:us-west-2:123456789012:stack/{stack}/0f1e2d3c",
        "type": "aws:cloudformation/stack:Stack",
        "urn": f"urn:pulumi:test::eks::aws:cloudformation/stack:Stack::{stack}",
        "outputs": {"templateBody": node_group_template(desired_capacity, name_tag)},
    }


@pytest.fixture
def sample_resources() -> list[dict[str, Any]]:
    """Provide stack resources: two prod node groups and one unrelated resource."""
    return [
        {
            "id": "vpc-0a1b2c3d",
            "type": "aws:ec2/vpc:Vpc",
            "urn": "urn:pulumi:test::eks::aws:ec2/vpc:Vpc::vpc",
            "outputs": {"cidrBlock": "10.0.0.0/16"},
        },
        node_group_resource(2, "prod-worker-a", stack="prod-worker-a"),
        node_group_resource(1, "prod-worker-b", stack="prod-worker-b"),
    ]


# ==============================================================================
# Provider Fixtures
# ==============================================================================


def ready_node(name: str, ready: bool = True) -> NodeInfo:
    """Build a node with the given Ready condition."""
    status = "True" if ready else "False"
    return NodeInfo(name=name, ready=ready, conditions={"Ready": status})


def ready_pod(
    name: str, namespace: str = "kube-system", phase: str = "Running", ready: bool = True
) -> PodInfo:
    """Build a pod with the given phase and Ready condition."""
    return PodInfo(
        name=name,
        namespace=namespace,
        phase=phase,
        conditions={"Ready": "True" if ready else "False"},
    )


@pytest.fixture
def mock_k8s_provider() -> MagicMock:
    """Provide a mock Kubernetes provider observing a healthy cluster."""
    provider = MagicMock()
    provider.get_server_version = AsyncMock(
        return_value=ServerVersion(major="1", minor="29", git_version="v1.29.3-eks-adc7111")
    )
    provider.get_config_map = AsyncMock(
        return_value=ConfigMapInfo(
            name="aws-auth", namespace="kube-system", data={"mapRoles": "- rolearn: x"}
        )
    )
    provider.list_nodes = AsyncMock(return_value=[])
    provider.get_node = AsyncMock(side_effect=lambda name: ready_node(name))
    provider.list_pods = AsyncMock(return_value=[])
    provider.get_pod = AsyncMock(side_effect=lambda name, namespace: ready_pod(name, namespace))
    return provider


@pytest.fixture
def fast_retry_policy() -> RetryPolicy:
    """Provide a retry policy with a small budget and no waiting."""
    return RetryPolicy(max_attempts=3, interval_seconds=0)


@pytest.fixture
def mock_sleep() -> AsyncMock:
    """Provide a recording sleep that returns immediately."""
    return AsyncMock()


@pytest.fixture
def check_context(
    mock_k8s_provider: MagicMock, fast_retry_policy: RetryPolicy, mock_sleep: AsyncMock
) -> CheckContext:
    """Provide a check context over the mock provider."""
    return CheckContext(
        kubernetes_provider=mock_k8s_provider,
        retry_policy=fast_retry_policy,
        sleep=mock_sleep,
    )


# ==============================================================================
# Pytest Markers
# ==============================================================================


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "e2e: End-to-end tests")
