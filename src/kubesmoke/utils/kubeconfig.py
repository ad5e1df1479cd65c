"""Kubeconfig parsing, validation and export utilities."""

import json
import tempfile
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import yaml

from kubesmoke.core.exceptions import InvalidCredentialError
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)

_SECTIONS = (("clusters", "cluster"), ("contexts", "context"), ("users", "user"))


def serialize_kubeconfig(kubeconfig: Mapping[str, Any] | str | bytes) -> bytes:
    """Serialize a kubeconfig to its canonical byte form.

    Mappings are rendered as JSON with sorted keys, so two equal documents
    always produce the same bytes.

    Args:
        kubeconfig: Kubeconfig as a mapping, or an already serialized document

    Returns:
        Serialized kubeconfig

    Raises:
        InvalidCredentialError: If the value cannot be serialized
    """
    if isinstance(kubeconfig, bytes):
        return kubeconfig
    if isinstance(kubeconfig, str):
        return kubeconfig.encode("utf-8")
    if not isinstance(kubeconfig, Mapping):
        raise InvalidCredentialError(
            f"Unsupported kubeconfig type: {type(kubeconfig).__name__}"
        )

    try:
        return json.dumps(kubeconfig, sort_keys=True).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise InvalidCredentialError(f"Kubeconfig is not serializable: {e}") from e


def parse_kubeconfig(data: bytes | str) -> dict[str, Any]:
    """Parse a serialized kubeconfig document.

    Args:
        data: YAML or JSON document

    Returns:
        Kubeconfig mapping

    Raises:
        InvalidCredentialError: If the document is malformed
    """
    try:
        config = yaml.safe_load(data)
    except yaml.YAMLError as e:
        raise InvalidCredentialError(f"Kubeconfig is not valid YAML/JSON: {e}") from e

    if not isinstance(config, dict):
        raise InvalidCredentialError("Kubeconfig must be a mapping")

    return config


def validate_kubeconfig(config: Mapping[str, Any]) -> None:
    """Check a kubeconfig is complete and free of conflicts.

    Collects every problem before failing so one error message describes the
    whole document.

    Args:
        config: Parsed kubeconfig

    Raises:
        InvalidCredentialError: If the kubeconfig is invalid
    """
    errors: list[str] = []
    entries: dict[str, dict[str, Any]] = {}

    for section, payload_key in _SECTIONS:
        items = config.get(section) or []
        if not isinstance(items, list):
            errors.append(f"'{section}' must be a list")
            entries[section] = {}
            continue

        named: dict[str, Any] = {}
        for item in items:
            if not isinstance(item, dict) or not item.get("name"):
                errors.append(f"entry in '{section}' has no name")
                continue
            name = item["name"]
            if name in named:
                errors.append(f"duplicate {payload_key} entry '{name}'")
                continue
            if not isinstance(item.get(payload_key), dict):
                errors.append(f"{payload_key} '{name}' has no '{payload_key}' section")
                continue
            named[name] = item[payload_key]
        entries[section] = named

    current = config.get("current-context")
    if not current:
        errors.append("no current-context is set")
    elif current not in entries["contexts"]:
        errors.append(f"current-context '{current}' does not exist")

    for name, context in entries["contexts"].items():
        cluster = context.get("cluster")
        user = context.get("user")
        if not cluster:
            errors.append(f"context '{name}' has no cluster")
        elif cluster not in entries["clusters"]:
            errors.append(f"context '{name}' references missing cluster '{cluster}'")
        if not user:
            errors.append(f"context '{name}' has no user")
        elif user not in entries["users"]:
            errors.append(f"context '{name}' references missing user '{user}'")

    for name, cluster in entries["clusters"].items():
        if not cluster.get("server"):
            errors.append(f"cluster '{name}' has no server")

    for name, user in entries["users"].items():
        exec_config = user.get("exec")
        if exec_config is not None and not (
            isinstance(exec_config, dict) and exec_config.get("command")
        ):
            errors.append(f"user '{name}' exec section has no command")

    if errors:
        logger.warning("kubeconfig_invalid", errors=errors)
        raise InvalidCredentialError("Invalid kubeconfig: " + "; ".join(errors))


def active_user(config: Mapping[str, Any]) -> dict[str, Any]:
    """Return the user section referenced by the current context.

    Args:
        config: Validated kubeconfig

    Returns:
        User section, empty if the context names no user
    """
    current = config["current-context"]
    context = next(c["context"] for c in config["contexts"] if c["name"] == current)
    user_name = context.get("user")
    for user in config.get("users") or []:
        if user["name"] == user_name:
            return user["user"]
    return {}


def cluster_name_from_exec_args(config: Mapping[str, Any], index: int = 2) -> str:
    """Recover the cluster name from the active user's exec plugin arguments.

    EKS kubeconfigs authenticate through an exec plugin whose arguments carry
    the cluster name at a fixed position.

    Args:
        config: Validated kubeconfig
        index: Position of the cluster name in the exec args

    Returns:
        Cluster name

    Raises:
        InvalidCredentialError: If there is no exec plugin or the args are too short
    """
    exec_config = active_user(config).get("exec")
    if not exec_config:
        raise InvalidCredentialError(
            "Kubeconfig user has no exec section to derive the cluster name from"
        )

    args = exec_config.get("args") or []
    if len(args) <= index:
        raise InvalidCredentialError(
            f"Kubeconfig exec args {args} have no cluster name at position {index}"
        )

    return str(args[index])


@contextmanager
def exported_kubeconfig(kubeconfig: Mapping[str, Any] | str | bytes) -> Iterator[Path]:
    """Write a kubeconfig to a temporary file for external tools.

    The file is removed when the context exits.

    Args:
        kubeconfig: Kubeconfig to export

    Yields:
        Path to the temporary kubeconfig file
    """
    data = serialize_kubeconfig(kubeconfig)

    with tempfile.NamedTemporaryFile(
        mode="wb", prefix="kubeconfig-", suffix=".json", delete=False
    ) as f:
        f.write(data)
        path = Path(f.name)

    logger.debug("kubeconfig_exported", path=str(path))
    try:
        yield path
    finally:
        path.unlink(missing_ok=True)
        logger.debug("kubeconfig_export_removed", path=str(path))
