"""
Netplan configuration for the static IP.

The default path serializes a NetworkConfig straight into netplan YAML. The
placeholder-template path is kept for hand-written templates and refuses to
install a file that still carries unreplaced tokens or no longer parses.
"""

import re
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from .config import NetworkConfig
from .errors import ConfigurationError

PLACEHOLDER_PATTERN = re.compile(r"<[A-Z0-9_]+>")


def build_netplan(network: NetworkConfig) -> Dict[str, Any]:
    """Return the netplan v2 document for a static address on one interface."""
    return {
        "network": {
            "version": 2,
            "renderer": "networkd",
            "ethernets": {
                network.interface: {
                    "dhcp4": False,
                    "addresses": [network.address],
                    "routes": [{"to": "default", "via": network.gateway}],
                    "nameservers": {"addresses": [network.dns1, network.dns2]},
                }
            },
        }
    }


def render_netplan(network: NetworkConfig) -> str:
    return yaml.safe_dump(build_netplan(network), default_flow_style=False, sort_keys=False)


def placeholder_values(network: NetworkConfig) -> Dict[str, str]:
    return {
        "<INTERFACE>": network.interface,
        "<STATIC_IP>": network.static_ip,
        "<GATEWAY>": network.gateway,
        "<DNS1>": network.dns1,
        "<DNS2>": network.dns2,
        "<PREFIX_LENGTH>": network.prefix_length,
    }


def render_template(template: str, network: NetworkConfig) -> str:
    """
    Substitute every placeholder token in a netplan template.

    Args:
        template: Template text containing ``<INTERFACE>``, ``<STATIC_IP>``,
            ``<GATEWAY>``, ``<DNS1>``, ``<DNS2>`` and ``<PREFIX_LENGTH>``
            tokens.
        network: Values to substitute.

    Returns:
        The rendered YAML text.

    Raises:
        ConfigurationError: A placeholder token is left over or the result is
            not valid YAML.
    """
    rendered = template
    for token, value in placeholder_values(network).items():
        rendered = rendered.replace(token, value)

    leftover = sorted(set(PLACEHOLDER_PATTERN.findall(rendered)))
    if leftover:
        raise ConfigurationError(f"Unreplaced placeholders in netplan template: {', '.join(leftover)}")
    try:
        yaml.safe_load(rendered)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Rendered netplan configuration is not valid YAML: {e}") from e
    return rendered


def write_netplan(
    target: Union[str, Path],
    network: NetworkConfig,
    template: Union[str, Path, None] = None,
) -> Path:
    """
    Write the netplan file for ``network`` to ``target`` with mode 0600.

    When ``template`` is given its placeholders are substituted, otherwise
    the document is generated from the configuration.
    """
    if template is not None:
        try:
            text = Path(template).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ConfigurationError(f"Netplan template {template} is not valid UTF-8: {e}") from e
        content = render_template(text, network)
    else:
        content = render_netplan(network)

    target = Path(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    target.chmod(0o600)
    return target
