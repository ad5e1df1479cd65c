"""Cluster registry mapping cluster names to resolved handles."""

from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from kubesmoke.clients.kubernetes_client import (
    DEFAULT_REQUEST_TIMEOUT,
    ClusterHandle,
    resolve_credential,
)
from kubesmoke.core.exceptions import InvalidCredentialError
from kubesmoke.core.models import ClusterCredential
from kubesmoke.utils.kubeconfig import cluster_name_from_exec_args, serialize_kubeconfig
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)


def _as_credential(raw: Any) -> ClusterCredential:
    """Wrap a bare kubeconfig in a ClusterCredential."""
    if isinstance(raw, ClusterCredential):
        return raw
    try:
        return ClusterCredential(kubeconfig=raw)
    except ValidationError as e:
        raise InvalidCredentialError(
            f"Unsupported credential type: {type(raw).__name__}"
        ) from e


class ClusterRegistry(Mapping[str, ClusterHandle]):
    """Read-only mapping of cluster name to its ClusterHandle.

    Built once per smoke test run; there is no way to add or replace a
    cluster afterwards.
    """

    def __init__(self, handles: Mapping[str, ClusterHandle] | None = None):
        """Initialize cluster registry.

        Args:
            handles: Cluster handles keyed by cluster name
        """
        self._handles = MappingProxyType(dict(handles or {}))
        logger.debug("cluster_registry_initialized", clusters=list(self._handles))

    def __getitem__(self, cluster_name: str) -> ClusterHandle:
        return self._handles[cluster_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handles)

    def __len__(self) -> int:
        return len(self._handles)

    def __repr__(self) -> str:
        return f"ClusterRegistry({sorted(self._handles)})"

    @classmethod
    def build(
        cls,
        credentials: Iterable[ClusterCredential | Mapping[str, Any] | str | bytes],
        cluster_name_arg_index: int = 2,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ) -> "ClusterRegistry":
        """Resolve every credential and key its handle by cluster name.

        The cluster name is the credential's explicit name when given,
        otherwise the exec plugin argument at cluster_name_arg_index. When two
        credentials yield the same name, the later one replaces the earlier.

        Args:
            credentials: Credentials in order, as ClusterCredential or bare kubeconfigs
            cluster_name_arg_index: Position of the cluster name in the exec args
            request_timeout: Timeout for each API request (seconds)

        Returns:
            ClusterRegistry holding one handle per distinct cluster name

        Raises:
            InvalidCredentialError: On the first credential that cannot be resolved
        """
        handles: dict[str, ClusterHandle] = {}

        for position, raw in enumerate(credentials):
            try:
                credential = _as_credential(raw)
                handle = resolve_credential(
                    serialize_kubeconfig(credential.kubeconfig),
                    request_timeout=request_timeout,
                )
                cluster_name = credential.cluster_name or cluster_name_from_exec_args(
                    handle.kubeconfig, cluster_name_arg_index
                )
            except InvalidCredentialError as e:
                logger.error("credential_resolution_failed", position=position, error=str(e))
                raise

            if cluster_name in handles:
                logger.warning(
                    "duplicate_cluster_name",
                    cluster=cluster_name,
                    position=position,
                )

            handles[cluster_name] = handle
            logger.info("cluster_registered", cluster=cluster_name, host=handle.host)

        return cls(handles)
