"""Core data models for kubesmoke."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from kubesmoke.core.exceptions import ConvergenceExhaustedError


class ResourceKind(str, Enum):
    """Resource kinds evaluated by the readiness checks."""

    CONFIG_MAP = "configmap"
    NODE = "node"
    POD = "pod"


class ClusterCredential(BaseModel):
    """Access descriptor for one cluster under test.

    The kubeconfig is kept opaque: a mapping straight from the stack outputs,
    or a serialized YAML/JSON document.
    """

    kubeconfig: dict[str, Any] | str | bytes = Field(..., description="Serialized kubeconfig")
    cluster_name: str | None = Field(
        None, description="Explicit cluster identity; derived from exec args when absent"
    )


class InfrastructureResource(BaseModel):
    """A resource from the provisioning tool's deployment state."""

    id: str = ""
    type: str = ""
    urn: str = ""
    outputs: dict[str, Any] = Field(default_factory=dict)


class NodeGroupTag(BaseModel):
    """A key/value tag declared on a node group."""

    model_config = ConfigDict(populate_by_name=True)

    key: str = Field("", alias="Key")
    value: str = Field("", alias="Value")


class NodeGroupTemplate(BaseModel):
    """Capacity declaration of a single node group stack template."""

    desired_capacity: int = Field(0, ge=0)
    tags: list[NodeGroupTag] = Field(default_factory=list)

    def tag_value(self, key: str) -> str | None:
        """Return the value of the last tag with the given key."""
        value = None
        for tag in self.tags:
            if tag.key == key:
                value = tag.value
        return value


class ReadinessReport(BaseModel):
    """Observed vs. ready counts for one resource kind."""

    kind: ResourceKind
    total: int = 0
    ready: int = 0
    expected: int | None = None
    not_ready: list[str] = Field(default_factory=list)
    converged: bool = False

    model_config = ConfigDict(use_enum_values=True)


class CheckResult(BaseModel):
    """Result of a readiness check."""

    check_name: str
    passed: bool
    message: str
    metrics: dict[str, Any] = Field(default_factory=dict)
    report: ReadinessReport | None = None
    critical: bool = True
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class ClusterSmokeResult(BaseModel):
    """Outcome of the full checklist against one cluster."""

    cluster_name: str
    expected_node_count: int = 0
    results: list[CheckResult] = Field(default_factory=list)
    error: str | None = None

    @property
    def passed(self) -> bool:
        """Whether every critical check passed and the checklist ran to completion."""
        return self.error is None and not self.failed_checks

    @property
    def failed_checks(self) -> list[CheckResult]:
        """Results of the critical checks that did not pass."""
        return [r for r in self.results if r.critical and not r.passed]


class SmokeTestReport(BaseModel):
    """Aggregate outcome of a smoke test run across every cluster."""

    clusters: dict[str, ClusterSmokeResult] = Field(default_factory=dict)
    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished_at: datetime | None = None

    @property
    def passed(self) -> bool:
        """Whether every cluster passed."""
        return all(c.passed for c in self.clusters.values())

    @property
    def failures(self) -> list[str]:
        """Human-readable description of every failure."""
        lines = []
        for name, cluster in self.clusters.items():
            if cluster.error:
                lines.append(f"{name}: {cluster.error}")
            for result in cluster.failed_checks:
                lines.append(f"{name}: {result.check_name}: {result.message}")
        return lines

    def raise_for_failures(self) -> None:
        """Raise a single assertion failure listing every failed check.

        Raises:
            ConvergenceExhaustedError: If any cluster did not pass
        """
        if self.passed:
            return

        failed = {
            name: cluster.failed_checks
            for name, cluster in self.clusters.items()
            if not cluster.passed
        }
        raise ConvergenceExhaustedError(
            "Smoke test failed:\n" + "\n".join(f"  - {line}" for line in self.failures),
            failures=failed,
        )
