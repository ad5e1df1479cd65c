"""Unit tests for CheckOrchestrator and CheckRegistry.

This module tests the check orchestration logic that runs the readiness
checklist in order with failure isolation and result aggregation.
"""

from unittest.mock import MagicMock

import pytest

from kubesmoke.checks.check_orchestrator import CheckOrchestrator
from kubesmoke.checks.check_registry import CheckRegistry
from kubesmoke.checks.kubernetes import (
    APIServerVersionCheck,
    ConfigMapReadyCheck,
    NodeReadinessCheck,
    PodReadinessCheck,
)
from kubesmoke.core.config import SmokeTestConfig
from kubesmoke.core.models import CheckResult
from kubesmoke.interfaces.check import Check, CheckContext


class MockCheck(Check):
    """Mock check implementation for testing."""

    def __init__(
        self,
        check_name: str,
        will_pass: bool = True,
        will_raise: Exception | None = None,
        is_critical_check: bool = True,
    ):
        """Initialize mock check.

        Args:
            check_name: Name of the check
            will_pass: Whether check will pass
            will_raise: Exception to raise during execution
            is_critical_check: Whether check is critical
        """
        self._name = check_name
        self._will_pass = will_pass
        self._will_raise = will_raise
        self._is_critical = is_critical_check
        self.executed_for: list[str] = []

    @property
    def name(self) -> str:
        """Get check name."""
        return self._name

    @property
    def description(self) -> str:
        """Get check description."""
        return f"Mock check {self._name}"

    @property
    def is_critical(self) -> bool:
        """Get criticality."""
        return self._is_critical

    async def execute(self, cluster_name: str, context: CheckContext) -> CheckResult:
        """Execute mock check."""
        self.executed_for.append(cluster_name)
        if self._will_raise:
            raise self._will_raise
        return CheckResult(
            check_name=self._name,
            passed=self._will_pass,
            message="passed" if self._will_pass else "failed",
        )


@pytest.fixture
def context() -> CheckContext:
    """Provide a check context with a mock provider."""
    return CheckContext(kubernetes_provider=MagicMock())


def registry_of(*checks: Check) -> CheckRegistry:
    """Build a registry holding the given checks."""
    registry = CheckRegistry()
    for check in checks:
        registry.register(check)
    return registry


class TestCheckRegistry:
    """Tests for CheckRegistry."""

    def test_register_keeps_order(self) -> None:
        """Test checks are kept in registration order."""
        first, second = MockCheck("first"), MockCheck("second")
        registry = registry_of(first, second)

        assert len(registry) == 2
        assert registry.get_all_checks() == [first, second]

    def test_duplicate_registration_ignored(self) -> None:
        """Test registering a name twice keeps the first check."""
        first = MockCheck("same")
        registry = registry_of(first, MockCheck("same"))

        assert registry.get_all_checks() == [first]

    def test_default_checklist_order(self) -> None:
        """Test the standard checklist runs version, config map, nodes, pods."""
        checks = CheckRegistry.default().get_all_checks()

        assert [type(c) for c in checks] == [
            APIServerVersionCheck,
            ConfigMapReadyCheck,
            NodeReadinessCheck,
            PodReadinessCheck,
        ]

    def test_default_checklist_uses_config(self) -> None:
        """Test the config map to await comes from configuration."""
        config = SmokeTestConfig(config_map={"name": "auth", "namespace": "system"})

        check = CheckRegistry.default(config).get_all_checks()[1]

        assert check.config_map_name == "auth"
        assert check.namespace == "system"


class TestCheckOrchestrator:
    """Tests for CheckOrchestrator.run_checks."""

    @pytest.mark.asyncio
    async def test_runs_all_checks_in_order(self, context: CheckContext) -> None:
        """Test every check runs and results keep registration order."""
        registry = registry_of(MockCheck("a"), MockCheck("b"), MockCheck("c"))

        results = await CheckOrchestrator(registry).run_checks("prod", context)

        assert [r.check_name for r in results] == ["a", "b", "c"]
        assert all(r.passed for r in results)

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_checklist(self, context: CheckContext) -> None:
        """Test a failed check does not short-circuit by default."""
        last = MockCheck("last")
        registry = registry_of(MockCheck("fails", will_pass=False), last)

        results = await CheckOrchestrator(registry).run_checks("prod", context)

        assert len(results) == 2
        assert last.executed_for == ["prod"]

    @pytest.mark.asyncio
    async def test_fail_fast_stops_on_critical_failure(self, context: CheckContext) -> None:
        """Test fail_fast stops after the first critical failure."""
        last = MockCheck("last")
        registry = registry_of(MockCheck("fails", will_pass=False), last)

        results = await CheckOrchestrator(registry, fail_fast=True).run_checks("prod", context)

        assert len(results) == 1
        assert last.executed_for == []

    @pytest.mark.asyncio
    async def test_fail_fast_ignores_non_critical_failure(self, context: CheckContext) -> None:
        """Test a non-critical failure never stops the checklist."""
        registry = registry_of(
            MockCheck("info", will_pass=False, is_critical_check=False), MockCheck("last")
        )

        results = await CheckOrchestrator(registry, fail_fast=True).run_checks("prod", context)

        assert len(results) == 2
        assert results[0].critical is False

    @pytest.mark.asyncio
    async def test_exception_becomes_failed_result(self, context: CheckContext) -> None:
        """Test an unexpected exception is isolated as a failed result."""
        registry = registry_of(MockCheck("broken", will_raise=RuntimeError("bug")), MockCheck("ok"))

        results = await CheckOrchestrator(registry).run_checks("prod", context)

        assert results[0].passed is False
        assert results[0].message == "Check failed with error: bug"
        assert results[1].passed is True
