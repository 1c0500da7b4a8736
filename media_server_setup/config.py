"""
Configuration for the media server setup.

Network values come from an optional ``.env`` file and fall back to the
defaults below. Everything is collected into a frozen ``AppConfig`` that is
built once at startup and handed to each step.
"""

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values

logger = logging.getLogger("media_server_setup")

# ------------------------------
# Defaults
# ------------------------------
DEFAULT_NETWORK: Dict[str, str] = {
    "STATIC_IP": "192.168.8.160",
    "GATEWAY": "192.168.8.1",
    "DNS1": "192.168.8.1",
    "DNS2": "8.8.8.8",
    "NETWORK_INTERFACE": "eth0",
}
DEFAULT_PREFIX_LENGTH = "24"
DEFAULT_LAN_SUBNET = "192.168.8.0/24"

CONFIG_DIR = "config"
LOG_DIR = "logs"
LOG_FILE_NAME = "setup.log"
NETPLAN_TEMPLATE = "netplan.yaml"
UFW_RULES = "ufw.rules"
DOCKER_COMPOSE = "docker/docker-compose.yml"

NETPLAN_TARGET = "/etc/netplan/01-static-ip.yaml"
UFW_TARGET = "/etc/ufw/ufw.rules"
CPU_SYSFS_ROOT = "/sys/devices/system/cpu"
CASAOS_INSTALL_URL = "https://get.casaos.io"


@dataclass(frozen=True)
class NetworkConfig:
    """Static addressing for the server's primary interface."""

    static_ip: str = DEFAULT_NETWORK["STATIC_IP"]
    gateway: str = DEFAULT_NETWORK["GATEWAY"]
    dns1: str = DEFAULT_NETWORK["DNS1"]
    dns2: str = DEFAULT_NETWORK["DNS2"]
    interface: str = DEFAULT_NETWORK["NETWORK_INTERFACE"]
    prefix_length: str = DEFAULT_PREFIX_LENGTH
    lan_subnet: str = DEFAULT_LAN_SUBNET

    @property
    def address(self) -> str:
        return f"{self.static_ip}/{self.prefix_length}"


@dataclass(frozen=True)
class AppConfig:
    """Immutable application configuration."""

    network: NetworkConfig = field(default_factory=NetworkConfig)
    base_dir: Path = field(default_factory=Path.cwd)

    config_dir: Path = Path(CONFIG_DIR)
    log_dir: Path = Path(LOG_DIR)
    log_file: Path = Path(LOG_DIR) / LOG_FILE_NAME
    netplan_template: Optional[Path] = None
    ufw_rules: Path = Path(CONFIG_DIR) / UFW_RULES
    docker_compose: Path = Path(DOCKER_COMPOSE)

    netplan_target: Path = Path(NETPLAN_TARGET)
    ufw_target: Path = Path(UFW_TARGET)
    cpu_sysfs_root: Path = Path(CPU_SYSFS_ROOT)
    casaos_url: str = CASAOS_INSTALL_URL

    command_timeout: Optional[int] = None

    def with_overrides(self, **changes) -> "AppConfig":
        """Return a copy of this configuration with the given fields replaced."""
        return replace(self, **changes)


def default_paths(base_dir: Union[str, Path] = ".") -> Dict[str, Path]:
    """Resolve the fixed relative file paths against ``base_dir``."""
    base = Path(base_dir)
    config_dir = base / CONFIG_DIR
    log_dir = base / LOG_DIR
    return {
        "base_dir": base,
        "config_dir": config_dir,
        "log_dir": log_dir,
        "log_file": log_dir / LOG_FILE_NAME,
        "ufw_rules": config_dir / UFW_RULES,
        "docker_compose": base / DOCKER_COMPOSE,
    }


def read_env_file(env_file: Union[str, Path]) -> Optional[Dict[str, str]]:
    """
    Parse a key=value variable file.

    Returns:
        The parsed values, or None when the file does not exist or cannot
        be read.
    """
    path = Path(env_file)
    if not path.is_file():
        return None
    try:
        values = dotenv_values(path, encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return None
    return {k: v for k, v in values.items() if v is not None}


def load_network_config(env_file: Union[str, Path] = ".env") -> NetworkConfig:
    """
    Build the network configuration from ``env_file`` or the defaults.

    Values are taken verbatim; nothing is validated. Keys missing from a
    present file keep their default.
    """
    values = read_env_file(env_file)
    if values is None:
        if Path(env_file).is_file():
            logger.warning(f"Ignoring unreadable {env_file}. Using default values.")
        else:
            logger.info("No .env file found. Using default values.")
        values = {}
    else:
        logger.info(f"Loaded environment variables from {env_file}")
        missing = [key for key in DEFAULT_NETWORK if key not in values]
        if missing:
            logger.warning(f"{env_file} does not define {', '.join(missing)}; using defaults")

    def pick(key: str, default: str) -> str:
        return values.get(key, default)

    return NetworkConfig(
        static_ip=pick("STATIC_IP", DEFAULT_NETWORK["STATIC_IP"]),
        gateway=pick("GATEWAY", DEFAULT_NETWORK["GATEWAY"]),
        dns1=pick("DNS1", DEFAULT_NETWORK["DNS1"]),
        dns2=pick("DNS2", DEFAULT_NETWORK["DNS2"]),
        interface=pick("NETWORK_INTERFACE", DEFAULT_NETWORK["NETWORK_INTERFACE"]),
        prefix_length=pick("PREFIX_LENGTH", DEFAULT_PREFIX_LENGTH),
        lan_subnet=pick("LAN_SUBNET", DEFAULT_LAN_SUBNET),
    )


def load_config(
    env_file: Union[str, Path] = ".env",
    base_dir: Union[str, Path] = ".",
    **overrides,
) -> AppConfig:
    """
    Load the full application configuration.

    Args:
        env_file: Optional variable file with the network settings.
        base_dir: Directory the relative config, log and docker paths live in.
        **overrides: Any other ``AppConfig`` field to set.

    Returns:
        A frozen AppConfig.
    """
    settings = default_paths(base_dir)
    settings["network"] = load_network_config(env_file)
    settings.update(overrides)
    return AppConfig(**settings)
