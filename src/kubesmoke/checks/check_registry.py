"""Registry for managing readiness checks."""

from kubesmoke.checks.kubernetes import (
    APIServerVersionCheck,
    ConfigMapReadyCheck,
    NodeReadinessCheck,
    PodReadinessCheck,
)
from kubesmoke.core.config import SmokeTestConfig
from kubesmoke.interfaces.check import Check
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)


class CheckRegistry:
    """Registry for readiness check management.

    Checks run in the order they were registered.
    """

    def __init__(self) -> None:
        """Initialize check registry."""
        self._checks: list[Check] = []
        self._checks_by_name: dict[str, Check] = {}
        logger.debug("check_registry_initialized")

    def register(self, check: Check) -> None:
        """Register a readiness check.

        Args:
            check: Readiness check to register
        """
        if check.name in self._checks_by_name:
            logger.warning("check_already_registered", check_name=check.name)
            return

        self._checks.append(check)
        self._checks_by_name[check.name] = check

        logger.debug("check_registered", check_name=check.name)

    def get_all_checks(self) -> list[Check]:
        """Get all registered checks.

        Returns:
            List of all registered checks in registration order
        """
        return self._checks.copy()

    def __len__(self) -> int:
        """Get number of registered checks."""
        return len(self._checks)

    @classmethod
    def default(cls, config: SmokeTestConfig | None = None) -> "CheckRegistry":
        """Build the standard smoke test checklist.

        Order: API server version, config map, nodes, pods.

        Args:
            config: Configuration supplying the config map to wait for

        Returns:
            CheckRegistry with the standard checks registered
        """
        config = config or SmokeTestConfig()

        registry = cls()
        registry.register(APIServerVersionCheck())
        registry.register(
            ConfigMapReadyCheck(
                name=config.config_map.name,
                namespace=config.config_map.namespace,
            )
        )
        registry.register(NodeReadinessCheck())
        registry.register(PodReadinessCheck())
        return registry
