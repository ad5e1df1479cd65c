"""Check orchestrator for running readiness checks."""

from kubesmoke.checks.check_registry import CheckRegistry
from kubesmoke.core.models import CheckResult
from kubesmoke.interfaces.check import Check, CheckContext
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)


class CheckOrchestrator:
    """Orchestrates execution of readiness checks against one cluster.

    This orchestrator coordinates check execution without knowing
    the specifics of each check. It handles:
    - Sequential execution in registration order
    - Dependency injection via CheckContext
    - Failure isolation
    - Result aggregation
    """

    def __init__(self, registry: CheckRegistry, fail_fast: bool = False):
        """Initialize check orchestrator.

        Args:
            registry: Check registry containing registered checks
            fail_fast: Stop after the first critical failure (default: False)
        """
        self.registry = registry
        self.fail_fast = fail_fast
        logger.debug("check_orchestrator_initialized", fail_fast=fail_fast)

    async def _execute(self, check: Check, cluster_name: str, context: CheckContext) -> CheckResult:
        """Run one check, turning an unexpected error into a failed result."""
        logger.debug("executing_check", cluster=cluster_name, check_name=check.name)

        try:
            result = await check.execute(cluster_name, context)
        except Exception as e:
            logger.error(
                "check_execution_failed",
                cluster=cluster_name,
                check_name=check.name,
                error=str(e),
            )
            result = CheckResult(
                check_name=check.name,
                passed=False,
                message=f"Check failed with error: {e}",
                metrics={},
            )

        result.critical = check.is_critical
        logger.info(
            "check_completed",
            cluster=cluster_name,
            check_name=check.name,
            passed=result.passed,
        )
        return result

    async def run_checks(self, cluster_name: str, context: CheckContext) -> list[CheckResult]:
        """Run all registered checks for a cluster.

        Args:
            cluster_name: Logical name of the cluster under test
            context: Check context with provider dependencies

        Returns:
            List of check results
        """
        logger.info("running_checks", cluster=cluster_name)

        results = []
        for check in self.registry.get_all_checks():
            result = await self._execute(check, cluster_name, context)
            results.append(result)

            if self.fail_fast and not result.passed and check.is_critical:
                logger.warning(
                    "check_failed_stopping",
                    cluster=cluster_name,
                    check_name=check.name,
                    message=result.message,
                )
                break

        logger.info(
            "checks_completed",
            cluster=cluster_name,
            total=len(results),
            passed=sum(1 for r in results if r.passed),
            all_passed=all(r.passed for r in results),
        )
        return results
