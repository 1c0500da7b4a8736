import logging

import pytest

from media_server_setup import steps
from media_server_setup.errors import ExecutionError


def test_update_system(recorder, app_config):
    steps.update_system(app_config)
    assert recorder.calls == [["apt-get", "update", "-y"], ["apt-get", "upgrade", "-y"]]


def test_install_casaos_downloads_then_runs(recorder, app_config):
    steps.install_casaos(app_config)

    curl, bash = recorder.calls
    assert curl[:3] == ["curl", "-fsSL", "https://get.casaos.io"]
    assert bash == ["bash", curl[-1]]


def test_install_casaos_skips_run_when_download_fails(recorder, app_config):
    recorder.fail_on("curl")
    with pytest.raises(ExecutionError):
        steps.install_casaos(app_config)
    assert not recorder.ran("bash")


def test_configure_static_ip_writes_and_applies(recorder, app_config):
    steps.configure_static_ip(app_config)

    content = app_config.netplan_target.read_text()
    assert "192.168.8.160/24" in content
    assert "eth0" in content
    assert recorder.calls == [["netplan", "apply"]]


def test_configure_static_ip_with_template(recorder, app_config, tmp_path):
    template = tmp_path / "netplan.yaml"
    template.write_text("network:\n  ethernets:\n    <INTERFACE>:\n      addresses: [<STATIC_IP>/24]\n")
    steps.configure_static_ip(app_config.with_overrides(netplan_template=template))

    assert "<" not in app_config.netplan_target.read_text()


def test_install_docker(recorder, app_config):
    steps.install_docker(app_config)
    assert recorder.calls == [
        ["apt-get", "install", "-y", "docker.io", "docker-compose"],
        ["systemctl", "enable", "--now", "docker"],
    ]


def test_deploy_docker_services(recorder, app_config):
    steps.deploy_docker_services(app_config)

    assert recorder.calls == [["docker-compose", "-f", str(app_config.docker_compose), "up", "-d"]]
    assert app_config.log_dir.is_dir()


def test_compose_plugin_fallback(recorder, monkeypatch, app_config):
    monkeypatch.setattr(steps.commands, "command_exists", lambda cmd: False)
    steps.deploy_docker_services(app_config)
    assert recorder.calls[0][:2] == ["docker", "compose"]


def test_configure_firewall(recorder, app_config):
    steps.configure_firewall(app_config)

    assert app_config.ufw_target.read_text() == "*filter\nCOMMIT\n"
    assert recorder.calls == [
        ["ufw", "--force", "reset"],
        ["ufw", "default", "deny", "incoming"],
        ["ufw", "default", "allow", "outgoing"],
        ["ufw", "allow", "from", "192.168.8.0/24"],
        ["ufw", "--force", "enable"],
    ]


def test_configure_firewall_missing_rules(recorder, app_config, tmp_path):
    config = app_config.with_overrides(ufw_rules=tmp_path / "missing.rules")
    with pytest.raises(OSError):
        steps.configure_firewall(config)
    assert recorder.calls == []


def test_set_performance_mode(app_config):
    steps.set_performance_mode(app_config)

    for gov in app_config.cpu_sysfs_root.glob("cpu*/cpufreq/scaling_governor"):
        assert gov.read_text() == "performance"


def test_set_performance_mode_reports_failed_cores(app_config):
    bad = app_config.cpu_sysfs_root / "cpu1" / "cpufreq" / "scaling_governor"
    bad.unlink()
    bad.mkdir()

    with pytest.raises(ExecutionError, match="1/2 CPUs: cpu1"):
        steps.set_performance_mode(app_config)
    gov = app_config.cpu_sysfs_root / "cpu0" / "cpufreq" / "scaling_governor"
    assert gov.read_text() == "performance"


def test_set_performance_mode_without_cpufreq(app_config, tmp_path, caplog):
    caplog.set_level(logging.WARNING, logger="media_server_setup")
    steps.set_performance_mode(app_config.with_overrides(cpu_sysfs_root=tmp_path / "empty"))
    assert "No CPU frequency governors found" in caplog.text


def test_step_execute_checked_failure(app_config, caplog):
    caplog.set_level(logging.INFO, logger="media_server_setup")

    def boom(config):
        raise ExecutionError("exit 2")

    result = steps.Step("demo", "Doing demo...", boom, "Demo failed.").execute(app_config)

    assert not result.success
    assert result.status == "failed"
    assert result.message == "exit 2"
    assert "Doing demo..." in caplog.text


def test_step_execute_best_effort_failure(app_config, caplog):
    caplog.set_level(logging.INFO, logger="media_server_setup")

    def boom(config):
        raise ExecutionError("exit 2")

    step = steps.Step("demo", "Doing demo...", boom, "Demo failed.", best_effort=True)
    result = step.execute(app_config)

    assert result.status == "warning"
    assert "Demo failed. Continuing anyway" in caplog.text


def test_step_execute_does_not_hide_bugs(app_config):
    def broken(config):
        raise KeyError("bug")

    with pytest.raises(KeyError):
        steps.Step("demo", "Doing demo...", broken, "Demo failed.").execute(app_config)


def test_only_update_and_governor_are_best_effort():
    best_effort = [step.key for step in steps.build_steps() if step.best_effort]
    assert best_effort == ["system_update", "cpu_governor"]
    assert steps.STEP_KEYS == [
        "system_update",
        "casaos",
        "static_ip",
        "docker",
        "docker_services",
        "firewall",
        "cpu_governor",
    ]
