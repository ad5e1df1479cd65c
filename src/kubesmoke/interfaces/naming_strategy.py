"""Naming strategy interface mapping node groups to clusters."""

from abc import ABC, abstractmethod

from kubesmoke.core.models import NodeGroupTemplate


class ClusterNamingStrategy(ABC):
    """Derive the owning cluster's name from a node group template.

    Swap implementations to support other node group naming conventions
    without touching capacity aggregation.
    """

    @abstractmethod
    def cluster_name(self, template: NodeGroupTemplate) -> str:
        """Return the cluster a node group belongs to.

        Args:
            template: Decoded node group template

        Returns:
            Cluster name, empty if it cannot be determined
        """
