"""Kubernetes readiness checks."""

from kubesmoke.checks.kubernetes.config_map import ConfigMapReadyCheck
from kubesmoke.checks.kubernetes.control_plane import APIServerVersionCheck
from kubesmoke.checks.kubernetes.node_readiness import NodeReadinessCheck
from kubesmoke.checks.kubernetes.pod_health import PodReadinessCheck

__all__ = [
    "APIServerVersionCheck",
    "ConfigMapReadyCheck",
    "NodeReadinessCheck",
    "PodReadinessCheck",
]
