"""Pod readiness check."""

from kubesmoke.core.models import CheckResult, ReadinessReport, ResourceKind
from kubesmoke.interfaces.check import Check, CheckContext
from kubesmoke.interfaces.kubernetes_provider import PodInfo
from kubesmoke.utils.logging import get_logger
from kubesmoke.utils.retry import PollOutcome, poll_each, poll_until

logger = get_logger(__name__)


class PodReadinessCheck(Check):
    """Check that every pod in the cluster is running and Ready.

    There is no expected pod count: the first successful cluster-wide listing
    is taken as the set to evaluate. A cluster with no pods at all fails.
    """

    @property
    def name(self) -> str:
        """Get check name."""
        return "pod_readiness"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Validates all pods are Running or Succeeded with a Ready condition"

    async def execute(self, cluster_name: str, context: CheckContext) -> CheckResult:
        """Execute pod readiness check.

        Args:
            cluster_name: Logical name of the cluster under test
            context: Check context with providers

        Returns:
            CheckResult indicating pass/fail
        """
        k8s = context.kubernetes_provider
        logger.info("checking_pod_readiness", cluster=cluster_name)

        listing = await poll_until(
            k8s.list_pods,
            lambda pods: True,
            context.retry_policy,
            resource="pods",
            status="listed",
            sleep=context.sleep,
        )

        if not listing.converged:
            logger.error(
                "pod_list_unavailable",
                cluster=cluster_name,
                attempts=listing.attempts,
                error=str(listing.last_error),
            )
            return CheckResult(
                check_name=self.name,
                passed=False,
                message=f"Could not list pods after {listing.attempts} attempts: "
                f"{listing.last_error}",
                metrics={"list_attempts": listing.attempts},
                report=ReadinessReport(kind=ResourceKind.POD),
            )

        pods = listing.value

        async def poll_pod(pod: PodInfo) -> PollOutcome[PodInfo]:
            return await poll_until(
                lambda: k8s.get_pod(pod.name, pod.namespace),
                lambda observed: observed.ready,
                context.retry_policy,
                resource=f"pod {pod.qualified_name}",
                status="Ready",
                sleep=context.sleep,
            )

        outcomes = await poll_each(pods, poll_pod, context.max_concurrent_item_polls)
        not_ready = [pod.qualified_name for pod, o in zip(pods, outcomes) if not o.converged]
        ready = len(pods) - len(not_ready)
        passed = ready > 0 and not not_ready

        report = ReadinessReport(
            kind=ResourceKind.POD,
            total=len(pods),
            ready=ready,
            not_ready=not_ready,
            converged=passed,
        )
        logger.info(
            "pod_readiness_evaluated",
            cluster=cluster_name,
            total=report.total,
            ready=report.ready,
        )

        metrics = {
            "list_attempts": listing.attempts,
            "pod_count": len(pods),
            "ready_count": ready,
            "unready_count": len(not_ready),
        }

        if passed:
            return CheckResult(
                check_name=self.name,
                passed=True,
                message=f"All {ready} pods are ready",
                metrics=metrics,
                report=report,
            )

        if not pods:
            message = "No pods found in cluster"
        else:
            message = f"{ready}/{len(pods)} pods ready, not ready: {', '.join(not_ready)}"

        return CheckResult(
            check_name=self.name,
            passed=False,
            message=message,
            metrics={**metrics, "unready_pods": not_ready},
            report=report,
        )
