"""Readiness check interface."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from kubesmoke.core.models import CheckResult
from kubesmoke.interfaces.kubernetes_provider import KubernetesProvider
from kubesmoke.utils.retry import RetryPolicy, SleepFunc


@dataclass
class CheckContext:
    """Context passed to readiness checks containing dependencies."""

    kubernetes_provider: KubernetesProvider
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    expected_node_count: int = 0
    max_concurrent_item_polls: int = 1
    sleep: SleepFunc = asyncio.sleep


class Check(ABC):
    """Abstract interface for readiness checks.

    Each check observes one resource kind of one cluster, polls it under the
    context's retry policy, and reports the outcome as a CheckResult. Checks
    never raise for a cluster that is merely not ready.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the check name for logging/reporting.

        Returns:
            Human-readable check name
        """

    @property
    @abstractmethod
    def description(self) -> str:
        """Get a description of what this check validates.

        Returns:
            Description of the check's purpose
        """

    @abstractmethod
    async def execute(self, cluster_name: str, context: CheckContext) -> CheckResult:
        """Execute the readiness check.

        Args:
            cluster_name: Logical name of the cluster under test
            context: Check context with provider dependencies

        Returns:
            CheckResult indicating pass/fail and details
        """

    @property
    def is_critical(self) -> bool:
        """Whether a failure of this check fails the cluster.

        Returns:
            True if check failure should fail the smoke test (default: True)
        """
        return True
