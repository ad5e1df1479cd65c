"""Naming strategies mapping node group templates to cluster names."""

from kubesmoke.core.models import NodeGroupTemplate
from kubesmoke.interfaces.naming_strategy import ClusterNamingStrategy


class WorkerTagNamingStrategy(ClusterNamingStrategy):
    """Read the cluster name from a worker node group's name tag.

    Node groups are tagged ``Name=<cluster>-worker...``; the cluster name is
    everything before the first occurrence of the delimiter. An untagged node
    group yields an empty name.
    """

    def __init__(self, tag_key: str = "Name", delimiter: str = "-worker"):
        """Initialize naming strategy.

        Args:
            tag_key: Key of the tag carrying the node group name
            delimiter: Suffix separating the cluster name from the rest
        """
        self.tag_key = tag_key
        self.delimiter = delimiter

    def cluster_name(self, template: NodeGroupTemplate) -> str:
        """Return the cluster a node group belongs to."""
        value = template.tag_value(self.tag_key) or ""
        return value.split(self.delimiter, 1)[0]


class TagValueNamingStrategy(ClusterNamingStrategy):
    """Use a tag's value verbatim as the cluster name.

    Suits node groups carrying an explicit cluster tag, such as
    ``eks:cluster-name``.
    """

    def __init__(self, tag_key: str):
        """Initialize naming strategy.

        Args:
            tag_key: Key of the tag holding the cluster name
        """
        self.tag_key = tag_key

    def cluster_name(self, template: NodeGroupTemplate) -> str:
        """Return the cluster a node group belongs to."""
        return template.tag_value(self.tag_key) or ""
