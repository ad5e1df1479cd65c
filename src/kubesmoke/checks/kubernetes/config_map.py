"""Config map readiness check."""

from kubesmoke.core.models import CheckResult, ReadinessReport, ResourceKind
from kubesmoke.interfaces.check import Check, CheckContext
from kubesmoke.interfaces.kubernetes_provider import ConfigMapInfo
from kubesmoke.utils.logging import get_logger
from kubesmoke.utils.retry import poll_until

logger = get_logger(__name__)


class ConfigMapReadyCheck(Check):
    """Check that a well-known config map exists and carries data.

    On EKS the ``aws-auth`` config map in ``kube-system`` maps the node
    instance role; worker nodes cannot join until it is populated.
    """

    def __init__(self, name: str = "aws-auth", namespace: str = "kube-system"):
        """Initialize config map check.

        Args:
            name: ConfigMap name
            namespace: ConfigMap namespace
        """
        self.config_map_name = name
        self.namespace = namespace

    @property
    def name(self) -> str:
        """Get check name."""
        return "config_map_ready"

    @property
    def description(self) -> str:
        """Get check description."""
        return f"Validates config map {self.namespace}/{self.config_map_name} exists with data"

    async def execute(self, cluster_name: str, context: CheckContext) -> CheckResult:
        """Execute config map readiness check.

        Args:
            cluster_name: Logical name of the cluster under test
            context: Check context with providers

        Returns:
            CheckResult indicating pass/fail
        """
        qualified = f"{self.namespace}/{self.config_map_name}"
        logger.info("checking_config_map", cluster=cluster_name, config_map=qualified)

        k8s = context.kubernetes_provider

        async def probe() -> ConfigMapInfo:
            return await k8s.get_config_map(self.config_map_name, self.namespace)

        outcome = await poll_until(
            probe,
            lambda config_map: bool(config_map.data),
            context.retry_policy,
            resource=f"configmap {qualified}",
            status="populated",
            sleep=context.sleep,
        )

        report = ReadinessReport(
            kind=ResourceKind.CONFIG_MAP,
            total=1,
            ready=1 if outcome.converged else 0,
            expected=1,
            not_ready=[] if outcome.converged else [qualified],
            converged=outcome.converged,
        )
        metrics = {"attempts": outcome.attempts}

        if outcome.converged:
            return CheckResult(
                check_name=self.name,
                passed=True,
                message=f"Config map {qualified} is populated",
                metrics={**metrics, "keys": sorted(outcome.value.data)},
                report=report,
            )

        if outcome.value is None:
            reason = f"could not be retrieved: {outcome.last_error}"
        else:
            reason = "has no data"

        logger.warning(
            "config_map_not_ready",
            cluster=cluster_name,
            config_map=qualified,
            attempts=outcome.attempts,
        )
        return CheckResult(
            check_name=self.name,
            passed=False,
            message=f"Config map {qualified} {reason} after {outcome.attempts} attempts",
            metrics=metrics,
            report=report,
        )
