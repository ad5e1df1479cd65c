"""Smoke test runner evaluating every cluster under test."""

import asyncio
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from kubesmoke.adapters.k8s_adapter import KubernetesAdapter
from kubesmoke.capacity.extractor import extract_expected_capacity
from kubesmoke.capacity.naming import WorkerTagNamingStrategy
from kubesmoke.checks.check_orchestrator import CheckOrchestrator
from kubesmoke.checks.check_registry import CheckRegistry
from kubesmoke.clients.kubernetes_client import ClusterHandle
from kubesmoke.core.config import SmokeTestConfig
from kubesmoke.core.models import (
    ClusterCredential,
    ClusterSmokeResult,
    InfrastructureResource,
    SmokeTestReport,
)
from kubesmoke.interfaces.check import CheckContext
from kubesmoke.interfaces.kubernetes_provider import KubernetesProvider
from kubesmoke.registry.cluster_registry import ClusterRegistry
from kubesmoke.utils.logging import bind_cluster, get_logger, log_error
from kubesmoke.utils.retry import SleepFunc

logger = get_logger(__name__)


class SmokeTestRunner:
    """Runs the readiness checklist against every registered cluster.

    Clusters are evaluated concurrently and in isolation: an error in one
    cluster is recorded against that cluster and never stops the others.
    """

    def __init__(
        self,
        config: SmokeTestConfig | None = None,
        check_registry: CheckRegistry | None = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        """Initialize smoke test runner.

        Args:
            config: Smoke test configuration
            check_registry: Checklist to run (default: standard checklist)
            sleep: Awaitable sleep used between polling attempts
        """
        self.config = config or SmokeTestConfig()
        self.check_registry = check_registry or CheckRegistry.default(self.config)
        self.orchestrator = CheckOrchestrator(
            registry=self.check_registry,
            fail_fast=self.config.execution.fail_fast,
        )
        self.sleep = sleep
        logger.debug(
            "smoke_test_runner_initialized",
            checks=[check.name for check in self.check_registry.get_all_checks()],
            max_parallel_clusters=self.config.execution.max_parallel_clusters,
        )

    def _provider(self, handle: ClusterHandle) -> KubernetesProvider:
        """Create the provider used to observe a cluster."""
        return KubernetesAdapter(handle.kube_client)

    async def _evaluate_cluster(
        self,
        cluster_name: str,
        handle: ClusterHandle,
        expected_node_count: int,
        semaphore: asyncio.Semaphore,
    ) -> ClusterSmokeResult:
        """Evaluate a single cluster with error isolation."""
        async with semaphore:
            bind_cluster(cluster_name)
            logger.info(
                "cluster_evaluation_started",
                cluster=cluster_name,
                expected_node_count=expected_node_count,
            )

            try:
                context = CheckContext(
                    kubernetes_provider=self._provider(handle),
                    retry_policy=self.config.retry,
                    expected_node_count=expected_node_count,
                    max_concurrent_item_polls=self.config.execution.max_concurrent_item_polls,
                    sleep=self.sleep,
                )
                results = await self.orchestrator.run_checks(cluster_name, context)
            except Exception as e:
                log_error(logger, e, operation="evaluate_cluster", cluster=cluster_name)
                return ClusterSmokeResult(
                    cluster_name=cluster_name,
                    expected_node_count=expected_node_count,
                    error=str(e),
                )

            result = ClusterSmokeResult(
                cluster_name=cluster_name,
                expected_node_count=expected_node_count,
                results=results,
            )
            logger.info(
                "cluster_evaluation_complete",
                cluster=cluster_name,
                passed=result.passed,
                failed_checks=[r.check_name for r in result.failed_checks],
            )
            return result

    async def run(
        self,
        registry: Mapping[str, ClusterHandle],
        expected: Mapping[str, int],
    ) -> SmokeTestReport:
        """Evaluate every cluster in the registry.

        A cluster missing from the expected capacity map is evaluated against
        an expected node count of zero.

        Args:
            registry: Cluster handles keyed by cluster name
            expected: Expected worker node count per cluster name

        Returns:
            SmokeTestReport across all clusters
        """
        report = SmokeTestReport()
        logger.info("smoke_test_started", clusters=list(registry), expected=dict(expected))

        semaphore = asyncio.Semaphore(self.config.execution.max_parallel_clusters)
        tasks = [
            self._evaluate_cluster(name, handle, expected.get(name, 0), semaphore)
            for name, handle in registry.items()
        ]
        results = await asyncio.gather(*tasks)

        for result in results:
            report.clusters[result.cluster_name] = result
        report.finished_at = datetime.utcnow()

        logger.info(
            "smoke_test_complete",
            total=len(results),
            passed=sum(1 for r in results if r.passed),
            failed=sum(1 for r in results if not r.passed),
        )
        return report


async def run_smoke_test(
    resources: Iterable[InfrastructureResource | Mapping[str, Any]],
    *credentials: ClusterCredential | Mapping[str, Any] | str | bytes,
    config: SmokeTestConfig | None = None,
    sleep: SleepFunc = asyncio.sleep,
) -> SmokeTestReport:
    """Run the smoke test for a freshly provisioned stack.

    Builds the cluster registry from the credentials, extracts the expected
    node capacity from the stack resources, and evaluates every cluster.

    Args:
        resources: Stack resources describing the node groups
        credentials: One kubeconfig per cluster under test
        config: Smoke test configuration
        sleep: Awaitable sleep used between polling attempts

    Returns:
        SmokeTestReport across all clusters

    Raises:
        InvalidCredentialError: If any credential cannot be resolved
        TemplateDecodeError: If a node group template cannot be decoded
    """
    config = config or SmokeTestConfig()

    registry = ClusterRegistry.build(
        credentials,
        cluster_name_arg_index=config.credentials.cluster_name_arg_index,
    )
    expected = extract_expected_capacity(
        resources,
        naming=WorkerTagNamingStrategy(
            tag_key=config.capacity.name_tag,
            delimiter=config.capacity.worker_delimiter,
        ),
        prefix=config.capacity.resource_prefix,
        template_output=config.capacity.template_output,
    )

    runner = SmokeTestRunner(config=config, sleep=sleep)
    return await runner.run(registry, expected)
