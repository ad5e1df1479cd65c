"""Shell script runner for cluster maintenance scripts."""

import os
import subprocess
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from kubesmoke.core.exceptions import ScriptExecutionError
from kubesmoke.utils.kubeconfig import exported_kubeconfig
from kubesmoke.utils.logging import get_logger

logger = get_logger(__name__)


class ScriptRunner:
    """Runs bash scripts against a cluster, such as node drain or delete.

    The cluster's kubeconfig is written to a temporary file for the duration
    of the script and exposed to it through ``KUBECONFIG``.
    """

    def __init__(self, shell: str = "/bin/bash", timeout: float | None = None):
        """Initialize script runner.

        Args:
            shell: Interpreter used to run scripts
            timeout: Maximum script run time in seconds (optional)
        """
        self.shell = shell
        self.timeout = timeout

        logger.debug("script_runner_initialized", shell=shell)

    def run(
        self,
        script: str | Path,
        kubeconfig: Mapping[str, Any] | str | bytes,
        args: list[str] | None = None,
    ) -> subprocess.CompletedProcess:
        """Run a script with KUBECONFIG pointing at the cluster.

        Args:
            script: Path to the script
            kubeconfig: Kubeconfig of the target cluster
            args: Extra script arguments (optional)

        Returns:
            CompletedProcess instance

        Raises:
            ScriptExecutionError: If the script cannot be started or exits non-zero
        """
        cmd = [self.shell, str(script)] + (args or [])

        with exported_kubeconfig(kubeconfig) as kubeconfig_path:
            env = {**os.environ, "KUBECONFIG": str(kubeconfig_path)}
            logger.info("running_script", command=" ".join(cmd))

            try:
                result = subprocess.run(
                    cmd,
                    capture_output=True,
                    text=True,
                    check=True,
                    env=env,
                    timeout=self.timeout,
                )
            except subprocess.CalledProcessError as e:
                logger.error(
                    "script_failed",
                    command=" ".join(cmd),
                    returncode=e.returncode,
                    stderr=e.stderr,
                )
                raise ScriptExecutionError(
                    f"Script {script} failed with exit code {e.returncode}: "
                    f"{e.stderr or e.stdout}"
                ) from e
            except subprocess.TimeoutExpired as e:
                logger.error("script_timed_out", command=" ".join(cmd), timeout=self.timeout)
                raise ScriptExecutionError(
                    f"Script {script} timed out after {self.timeout} seconds"
                ) from e
            except OSError as e:
                logger.error("script_not_runnable", command=" ".join(cmd), error=str(e))
                raise ScriptExecutionError(f"Could not run script {script}: {e}") from e

        logger.debug("script_completed", command=" ".join(cmd), returncode=result.returncode)
        return result
