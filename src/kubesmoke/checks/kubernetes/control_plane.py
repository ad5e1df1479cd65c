"""API server version check."""

from kubesmoke.core.models import CheckResult
from kubesmoke.interfaces.check import Check, CheckContext
from kubesmoke.utils.logging import get_logger
from kubesmoke.utils.retry import poll_until

logger = get_logger(__name__)


class APIServerVersionCheck(Check):
    """Report the Kubernetes API server version.

    Informational: a cluster whose version endpoint is unreachable is still
    judged by the readiness checks that follow.
    """

    @property
    def name(self) -> str:
        """Get check name."""
        return "api_server_version"

    @property
    def description(self) -> str:
        """Get check description."""
        return "Reports the Kubernetes API server version"

    @property
    def is_critical(self) -> bool:
        """Version reporting never fails a cluster."""
        return False

    async def execute(self, cluster_name: str, context: CheckContext) -> CheckResult:
        """Execute API server version check.

        Args:
            cluster_name: Logical name of the cluster under test
            context: Check context with providers

        Returns:
            CheckResult carrying the version, or a non-critical failure
        """
        outcome = await poll_until(
            context.kubernetes_provider.get_server_version,
            lambda version: True,
            context.retry_policy,
            resource="api server version",
            status="reachable",
            sleep=context.sleep,
        )

        if not outcome.converged:
            logger.warning(
                "api_server_version_unavailable",
                cluster=cluster_name,
                error=str(outcome.last_error),
            )
            return CheckResult(
                check_name=self.name,
                passed=False,
                message=f"API server version unavailable: {outcome.last_error}",
                metrics={"attempts": outcome.attempts},
            )

        version = outcome.value
        logger.info(
            "api_server_version",
            cluster=cluster_name,
            major=version.major,
            minor=version.minor,
            git_version=version.git_version,
        )
        return CheckResult(
            check_name=self.name,
            passed=True,
            message=f"API server {version.major}.{version.minor} ({version.git_version})",
            metrics={
                "major": version.major,
                "minor": version.minor,
                "git_version": version.git_version,
            },
        )
