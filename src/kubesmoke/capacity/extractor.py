"""Expected worker node capacity per cluster, from stack resources."""

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from kubesmoke.capacity.naming import WorkerTagNamingStrategy
from kubesmoke.core.exceptions import ConfigurationError, TemplateDecodeError
from kubesmoke.core.models import InfrastructureResource, NodeGroupTemplate
from kubesmoke.interfaces.naming_strategy import ClusterNamingStrategy
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)

CLOUDFORMATION_PREFIX = "arn:aws:cloudformation"
TEMPLATE_OUTPUT = "templateBody"


def _section(document: Any, key: str, path: str) -> dict[str, Any]:
    """Return a nested mapping, treating a missing key as empty."""
    value = document.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise TemplateDecodeError(f"Template section {path} must be a mapping")
    return value


def decode_node_group_template(body: Any) -> NodeGroupTemplate:
    """Decode a node group stack template.

    Only ``Resources.NodeGroup.Properties`` is read: its ``DesiredCapacity``
    and ``Tags``. Missing sections decode to zero capacity and no tags.

    Args:
        body: Serialized YAML (or JSON) template

    Returns:
        Decoded NodeGroupTemplate

    Raises:
        TemplateDecodeError: If the template cannot be decoded
    """
    if not isinstance(body, str):
        raise TemplateDecodeError(
            f"Template body must be a string, got {type(body).__name__}"
        )

    try:
        document = yaml.safe_load(body)
    except yaml.YAMLError as e:
        raise TemplateDecodeError(f"Template body is not valid YAML: {e}") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise TemplateDecodeError("Template body must be a mapping")

    resources = _section(document, "Resources", "Resources")
    node_group = _section(resources, "NodeGroup", "Resources.NodeGroup")
    properties = _section(node_group, "Properties", "Resources.NodeGroup.Properties")

    try:
        return NodeGroupTemplate(
            desired_capacity=properties.get("DesiredCapacity") or 0,
            tags=properties.get("Tags") or [],
        )
    except ValidationError as e:
        raise TemplateDecodeError(f"Invalid node group properties: {e}") from e


def extract_expected_capacity(
    resources: Iterable[InfrastructureResource | Mapping[str, Any]],
    naming: ClusterNamingStrategy | None = None,
    prefix: str = CLOUDFORMATION_PREFIX,
    template_output: str = TEMPLATE_OUTPUT,
) -> dict[str, int]:
    """Aggregate the desired worker node count per cluster.

    Every resource whose ID starts with the prefix is a node group stack.
    Node groups belonging to the same cluster sum together.

    Args:
        resources: Stack resources
        naming: Strategy deriving the cluster name from a template
        prefix: Resource ID prefix of node group stacks
        template_output: Output field holding the stack template

    Returns:
        Mapping of cluster name to total desired node count

    Raises:
        TemplateDecodeError: If a node group template cannot be decoded
    """
    naming = naming or WorkerTagNamingStrategy()
    capacity: dict[str, int] = {}

    for raw in resources:
        resource = (
            raw
            if isinstance(raw, InfrastructureResource)
            else InfrastructureResource.model_validate(raw)
        )
        if not resource.id.startswith(prefix):
            continue

        try:
            template = decode_node_group_template(resource.outputs.get(template_output))
        except TemplateDecodeError:
            logger.error("node_group_template_decode_failed", resource_id=resource.id)
            raise

        cluster_name = naming.cluster_name(template)
        capacity[cluster_name] = capacity.get(cluster_name, 0) + template.desired_capacity

        logger.debug(
            "node_group_capacity_found",
            resource_id=resource.id,
            cluster=cluster_name,
            desired_capacity=template.desired_capacity,
        )

    logger.info("expected_capacity_extracted", capacity=capacity)
    return capacity


def load_stack_resources(
    source: str | Path | Mapping[str, Any] | list[Any],
) -> list[InfrastructureResource]:
    """Load resources from a stack export.

    Accepts a path to an exported deployment, the parsed export itself
    (``{"deployment": {"resources": [...]}}``), a bare deployment, or a
    plain list of resources.

    Args:
        source: Export file path or parsed export

    Returns:
        List of InfrastructureResource

    Raises:
        ConfigurationError: If the export cannot be read
    """
    if isinstance(source, (str, Path)):
        path = Path(source).expanduser()
        try:
            with path.open() as f:
                source = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Failed to load stack export {path}: {e}") from e

    if isinstance(source, Mapping):
        deployment = source.get("deployment", source)
        source = deployment.get("resources") or []

    if not isinstance(source, list):
        raise ConfigurationError("Stack export does not contain a resource list")

    try:
        return [InfrastructureResource.model_validate(item) for item in source]
    except ValidationError as e:
        raise ConfigurationError(f"Invalid stack resource: {e}") from e
