"""Node readiness check."""

from kubesmoke.core.models import CheckResult, ReadinessReport, ResourceKind
from kubesmoke.interfaces.check import Check, CheckContext
from kubesmoke.interfaces.kubernetes_provider import NodeInfo
from kubesmoke.utils.logging import get_logger
from kubesmoke.utils.retry import PollOutcome, poll_each, poll_until

logger = get_logger(__name__)


class NodeReadinessCheck(Check):
    """Check that the expected number of nodes joined and all are Ready.

    Runs in two phases. The node list is polled until its length matches the
    expected count; if that never happens the last list seen is evaluated
    anyway. Then every listed node is polled on its own budget for a Ready
    condition of True, so one stuck node never hides the state of the rest.
    """

    @property
    def name(self) -> str:
        """Get check name."""
        return "node_readiness"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Validates the expected number of nodes joined and are in Ready state"

    async def execute(self, cluster_name: str, context: CheckContext) -> CheckResult:
        """Execute node readiness check.

        Args:
            cluster_name: Logical name of the cluster under test
            context: Check context with providers

        Returns:
            CheckResult indicating pass/fail
        """
        expected = context.expected_node_count
        k8s = context.kubernetes_provider
        logger.info("checking_node_readiness", cluster=cluster_name, expected=expected)

        listing = await poll_until(
            k8s.list_nodes,
            lambda nodes: len(nodes) == expected,
            context.retry_policy,
            resource="nodes",
            status=f"count={expected}",
            sleep=context.sleep,
        )

        if listing.value is None:
            logger.error(
                "node_list_unavailable",
                cluster=cluster_name,
                attempts=listing.attempts,
                error=str(listing.last_error),
            )
            return CheckResult(
                check_name=self.name,
                passed=False,
                message=f"Could not list nodes after {listing.attempts} attempts: "
                f"{listing.last_error}",
                metrics={"list_attempts": listing.attempts},
                report=ReadinessReport(kind=ResourceKind.NODE, expected=expected),
            )

        nodes = listing.value
        if not listing.converged:
            logger.warning(
                "node_count_mismatch",
                cluster=cluster_name,
                expected=expected,
                observed=len(nodes),
            )

        async def poll_node(node: NodeInfo) -> PollOutcome[NodeInfo]:
            return await poll_until(
                lambda: k8s.get_node(node.name),
                lambda observed: observed.ready,
                context.retry_policy,
                resource=f"node {node.name}",
                status="Ready",
                sleep=context.sleep,
            )

        outcomes = await poll_each(nodes, poll_node, context.max_concurrent_item_polls)
        not_ready = [node.name for node, o in zip(nodes, outcomes) if not o.converged]
        ready = len(nodes) - len(not_ready)

        report = ReadinessReport(
            kind=ResourceKind.NODE,
            total=len(nodes),
            ready=ready,
            expected=expected,
            not_ready=not_ready,
            converged=listing.converged and not not_ready,
        )
        logger.info(
            "node_readiness_evaluated",
            cluster=cluster_name,
            total=report.total,
            ready=report.ready,
            expected=expected,
        )

        metrics = {
            "list_attempts": listing.attempts,
            "node_count": len(nodes),
            "ready_count": ready,
            "unready_count": len(not_ready),
        }

        problems = []
        if not listing.converged:
            problems.append(f"expected {expected} nodes, found {len(nodes)}")
        if not_ready:
            problems.append(f"{ready}/{len(nodes)} nodes ready, not ready: {', '.join(not_ready)}")

        if problems:
            return CheckResult(
                check_name=self.name,
                passed=False,
                message="; ".join(problems),
                metrics={**metrics, "unready_nodes": not_ready},
                report=report,
            )

        return CheckResult(
            check_name=self.name,
            passed=True,
            message=f"All {ready} nodes are ready",
            metrics=metrics,
            report=report,
        )
