"""
Setup steps.

Every step is a plain function taking the AppConfig and raising on failure.
``Step`` wraps one of them, times it and turns the outcome into a
``StepResult``. Steps that may fail without stopping the run are marked
``best_effort`` explicitly.
"""

import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List

from . import commands
from .config import AppConfig
from .errors import ExecutionError, SetupError
from .netplan import write_netplan

logger = logging.getLogger("media_server_setup")

DOCKER_PACKAGES = ["docker.io", "docker-compose"]
GOVERNOR = "performance"


@dataclass(frozen=True)
class StepResult:
    key: str
    success: bool
    message: str = ""
    elapsed: float = 0.0
    best_effort: bool = False
    skipped: bool = False

    @property
    def status(self) -> str:
        if self.skipped:
            return "skipped"
        if self.success:
            return "success"
        return "warning" if self.best_effort else "failed"


@dataclass(frozen=True)
class Step:
    """
    A named unit of work in the setup sequence.

    Attributes:
        key: Identifier used for ``--skip`` and the status table.
        description: Logged when the step starts.
        action: Callable performing the work; raises SetupError on failure.
        failure_message: Logged when a checked step fails.
        best_effort: When True a failure is reported but never aborts the run.
    """

    key: str
    description: str
    action: Callable[[AppConfig], None]
    failure_message: str
    best_effort: bool = False

    def execute(self, config: AppConfig) -> StepResult:
        logger.info(self.description)
        start = time.time()
        try:
            self.action(config)
        except (SetupError, OSError) as e:
            elapsed = time.time() - start
            if self.best_effort:
                logger.warning(f"{self.failure_message} Continuing anyway: {e}")
            else:
                logger.error(f"{self.key} failed after {elapsed:.2f}s: {e}")
            return StepResult(self.key, False, str(e), elapsed, self.best_effort)
        elapsed = time.time() - start
        logger.debug(f"{self.key} completed in {elapsed:.2f}s")
        return StepResult(self.key, True, f"Completed in {elapsed:.2f}s", elapsed, self.best_effort)

    def skip(self) -> StepResult:
        logger.info(f"Skipping {self.key}.")
        return StepResult(self.key, True, "Skipped", best_effort=self.best_effort, skipped=True)


# ------------------------------
# Step implementations
# ------------------------------
def update_system(config: AppConfig) -> None:
    commands.run_command(["apt-get", "update", "-y"], timeout=config.command_timeout)
    commands.run_command(["apt-get", "upgrade", "-y"], timeout=config.command_timeout)


def install_casaos(config: AppConfig) -> None:
    """Download the CasaOS installer over HTTPS and run it with bash."""
    fd, script = tempfile.mkstemp(prefix="media_server_setup_casaos_", suffix=".sh")
    os.close(fd)
    try:
        commands.run_command(
            ["curl", "-fsSL", config.casaos_url, "-o", script],
            timeout=config.command_timeout,
        )
        commands.run_command(["bash", script], capture_output=False, timeout=config.command_timeout)
    finally:
        Path(script).unlink(missing_ok=True)


def configure_static_ip(config: AppConfig) -> None:
    target = write_netplan(config.netplan_target, config.network, config.netplan_template)
    logger.debug(f"Wrote netplan configuration to {target}")
    commands.run_command(["netplan", "apply"], timeout=config.command_timeout)


def install_docker(config: AppConfig) -> None:
    commands.run_command(["apt-get", "install", "-y"] + DOCKER_PACKAGES, timeout=config.command_timeout)
    commands.run_command(["systemctl", "enable", "--now", "docker"], timeout=config.command_timeout)


def compose_command() -> List[str]:
    """Prefer the standalone docker-compose binary, fall back to the plugin."""
    if commands.command_exists("docker-compose"):
        return ["docker-compose"]
    return ["docker", "compose"]


def deploy_docker_services(config: AppConfig) -> None:
    config.log_dir.mkdir(parents=True, exist_ok=True)
    commands.run_command(
        compose_command() + ["-f", str(config.docker_compose), "up", "-d"],
        timeout=config.command_timeout,
    )


def configure_firewall(config: AppConfig) -> None:
    config.ufw_target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(config.ufw_rules, config.ufw_target)
    for args in (
        ["--force", "reset"],
        ["default", "deny", "incoming"],
        ["default", "allow", "outgoing"],
        ["allow", "from", config.network.lan_subnet],
        ["--force", "enable"],
    ):
        commands.run_command(["ufw"] + args, timeout=config.command_timeout)


def set_performance_mode(config: AppConfig) -> None:
    """
    Write the performance governor to every CPU core.

    Raises:
        ExecutionError: At least one governor file could not be written.
    """
    governors = sorted(config.cpu_sysfs_root.glob("cpu*/cpufreq/scaling_governor"))
    if not governors:
        logger.warning(f"No CPU frequency governors found under {config.cpu_sysfs_root}")
        return

    failed = []
    for path in governors:
        try:
            path.write_text(GOVERNOR)
            logger.debug(f"Set {path} to {GOVERNOR}")
        except OSError as e:
            logger.debug(f"Could not write {path}: {e}")
            failed.append(path.parent.parent.name)
    if failed:
        raise ExecutionError(f"Could not set governor on {len(failed)}/{len(governors)} CPUs: {', '.join(failed)}")


def build_steps() -> List[Step]:
    """Return the setup steps in execution order."""
    return [
        Step("system_update", "Updating system packages...", update_system,
             "System package update failed.", best_effort=True),
        Step("casaos", "Installing CasaOS...", install_casaos,
             "CasaOS installation failed."),
        Step("static_ip", "Configuring static IP...", configure_static_ip,
             "Failed to apply netplan configuration."),
        Step("docker", "Installing Docker...", install_docker,
             "Failed to install Docker."),
        Step("docker_services", "Deploying Docker services...", deploy_docker_services,
             "Docker deployment failed."),
        Step("firewall", "Configuring firewall (UFW)...", configure_firewall,
             "Failed to enable UFW."),
        Step("cpu_governor", "Setting CPU governor to performance mode...", set_performance_mode,
             "Could not set CPU governor.", best_effort=True),
    ]


STEP_KEYS = [step.key for step in build_steps()]
