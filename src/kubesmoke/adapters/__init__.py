"""Adapter implementations for external services."""

from kubesmoke.adapters.k8s_adapter import KubernetesAdapter

__all__ = [
    "KubernetesAdapter",
]
