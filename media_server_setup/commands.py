"""Command execution helpers."""

import logging
import os
import shutil
import subprocess
from typing import Dict, List, Optional

from .errors import ExecutionError, PrivilegeError

logger = logging.getLogger("media_server_setup")


def run_command(
    cmd: List[str],
    env: Optional[Dict[str, str]] = None,
    check: bool = True,
    capture_output: bool = True,
    timeout: Optional[int] = None,
) -> subprocess.CompletedProcess:
    """
    Execute a system command with robust error handling.

    Args:
        cmd: Command and arguments.
        env: Extra environment variables, merged over the current environment.
        check: Raise ExecutionError on a non-zero exit status.
        capture_output: Capture stdout/stderr instead of streaming them.
        timeout: Seconds before the command is killed; None waits forever.

    Returns:
        The completed process.

    Raises:
        ExecutionError: The command failed and ``check`` is set, timed out,
            or could not be started.
    """
    cmd_str = " ".join(cmd)
    logger.debug(f"Executing: {cmd_str}")

    run_env = os.environ.copy()
    run_env["DEBIAN_FRONTEND"] = "noninteractive"
    if env:
        run_env.update(env)

    try:
        result = subprocess.run(
            cmd,
            env=run_env,
            check=check,
            text=True,
            capture_output=capture_output,
            timeout=timeout,
        )
    except subprocess.CalledProcessError as e:
        error_msg = f"Command failed (code {e.returncode}): {cmd_str}"
        if e.stdout:
            logger.debug(f"Stdout: {e.stdout.strip()}")
        if e.stderr:
            error_msg += f"\nError: {e.stderr.strip()}"
        logger.debug(error_msg)
        raise ExecutionError(error_msg) from e
    except subprocess.TimeoutExpired as e:
        raise ExecutionError(f"Command timed out after {timeout} seconds: {cmd_str}") from e
    except OSError as e:
        raise ExecutionError(f"Error executing command: {cmd_str}: {e}") from e

    if result.returncode != 0:
        logger.debug(f"Command exited with {result.returncode} (unchecked): {cmd_str}")
    return result


def command_exists(cmd: str) -> bool:
    return shutil.which(cmd) is not None


def check_root() -> None:
    """
    Verify that the script is running with root privileges.

    Raises:
        PrivilegeError: The effective user is not root.
    """
    if os.geteuid() != 0:
        raise PrivilegeError("This script must be run as root (e.g., using sudo).")
    logger.debug("Root privileges confirmed.")
