"""Custom exceptions for kubesmoke."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kubesmoke.core.models import CheckResult


class KubeSmokeError(Exception):
    """Base exception for all kubesmoke errors."""


class ConfigurationError(KubeSmokeError):
    """Configuration-related errors."""


class InvalidCredentialError(KubeSmokeError):
    """Cluster access configuration is malformed or internally inconsistent."""


class TemplateDecodeError(KubeSmokeError):
    """Embedded node group template could not be decoded."""


class KubernetesError(KubeSmokeError):
    """Kubernetes operation failed."""


class TransientAPIError(KubernetesError):
    """A cluster API call failed while polling; retried until the budget runs out."""


class ScriptExecutionError(KubeSmokeError):
    """External script invocation failed."""


class ConvergenceExhaustedError(KubeSmokeError, AssertionError):
    """One or more readiness checks never converged.

    Subclasses AssertionError so test runners report it as a failed assertion
    rather than an error.

    Attributes:
        failures: Mapping of cluster name to its failed check results
    """

    def __init__(self, message: str, failures: dict[str, list[CheckResult]] | None = None):
        """Initialize convergence error.

        Args:
            message: Error message
            failures: Failed check results keyed by cluster name
        """
        super().__init__(message)
        self.failures = failures or {}
