"""Interface definitions for kubesmoke."""

from kubesmoke.interfaces.check import Check, CheckContext
from kubesmoke.interfaces.kubernetes_provider import (
    ConfigMapInfo,
    KubernetesProvider,
    NodeInfo,
    PodInfo,
    ServerVersion,
)
from kubesmoke.interfaces.naming_strategy import ClusterNamingStrategy

__all__ = [
    "Check",
    "CheckContext",
    "ClusterNamingStrategy",
    "ConfigMapInfo",
    "KubernetesProvider",
    "NodeInfo",
    "PodInfo",
    "ServerVersion",
]
