"""Shared fixtures: a fake host under tmp_path and a command recorder."""

import subprocess

import pytest

from media_server_setup import commands
from media_server_setup.config import load_config
from media_server_setup.errors import ExecutionError


class CommandRecorder:
    """Stands in for run_command; records calls and fails on request."""

    def __init__(self):
        self.calls = []
        self.failing = []

    def fail_on(self, *prefix):
        self.failing.append(list(prefix))

    def __call__(self, cmd, env=None, check=True, capture_output=True, timeout=None):
        self.calls.append(list(cmd))
        failed = any(cmd[: len(prefix)] == prefix for prefix in self.failing)
        if failed and check:
            raise ExecutionError(f"Command failed (code 1): {' '.join(cmd)}")
        return subprocess.CompletedProcess(cmd, 1 if failed else 0, stdout="", stderr="")

    def ran(self, *prefix):
        return any(call[: len(prefix)] == list(prefix) for call in self.calls)


@pytest.fixture
def recorder(monkeypatch):
    rec = CommandRecorder()
    monkeypatch.setattr(commands, "run_command", rec)
    monkeypatch.setattr(commands, "command_exists", lambda cmd: True)
    return rec


@pytest.fixture
def host(tmp_path):
    """Project files plus stand-ins for /etc and sysfs."""
    base = tmp_path / "project"
    (base / "config").mkdir(parents=True)
    (base / "docker").mkdir()
    (base / "config" / "ufw.rules").write_text("*filter\nCOMMIT\n")
    (base / "docker" / "docker-compose.yml").write_text("services: {}\n")

    sysfs = tmp_path / "sys" / "cpu"
    for cpu in ("cpu0", "cpu1"):
        gov = sysfs / cpu / "cpufreq" / "scaling_governor"
        gov.parent.mkdir(parents=True)
        gov.write_text("powersave\n")

    return {
        "base": base,
        "netplan_target": tmp_path / "etc" / "netplan" / "01-static-ip.yaml",
        "ufw_target": tmp_path / "etc" / "ufw" / "ufw.rules",
        "cpu_sysfs_root": sysfs,
    }


@pytest.fixture
def system_paths(host):
    return {k: host[k] for k in ("netplan_target", "ufw_target", "cpu_sysfs_root")}


@pytest.fixture
def app_config(host, system_paths):
    return load_config(host["base"] / ".env", host["base"], **system_paths)
