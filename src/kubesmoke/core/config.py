"""Configuration management for kubesmoke."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field

from kubesmoke.core.exceptions import ConfigurationError
from kubesmoke.utils.retry import RetryPolicy


class ConfigMapConfig(BaseModel):
    """Well-known configuration object that must exist with data."""

    name: str = "aws-auth"
    namespace: str = "kube-system"


class CapacityConfig(BaseModel):
    """Where to find node group capacity in the stack resources."""

    resource_prefix: str = "arn:aws:cloudformation"
    template_output: str = "templateBody"
    name_tag: str = "Name"
    worker_delimiter: str = "-worker"


class CredentialConfig(BaseModel):
    """Cluster identity derivation from kubeconfigs."""

    # Position of the cluster name in the active user's exec args,
    # e.g. ["token", "-i", "<cluster>"] for aws-iam-authenticator.
    cluster_name_arg_index: int = Field(2, ge=0)


class ExecutionConfig(BaseModel):
    """Execution configuration."""

    model_config = ConfigDict(validate_assignment=True)

    max_parallel_clusters: int = Field(5, ge=1)
    max_concurrent_item_polls: int = Field(1, ge=1)
    fail_fast: bool = False


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    output: str = "stdout"


class SmokeTestConfig(BaseModel):
    """Main kubesmoke configuration."""

    retry: RetryPolicy = Field(default_factory=RetryPolicy)
    config_map: ConfigMapConfig = Field(default_factory=ConfigMapConfig)
    capacity: CapacityConfig = Field(default_factory=CapacityConfig)
    credentials: CredentialConfig = Field(default_factory=CredentialConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "SmokeTestConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            SmokeTestConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e
