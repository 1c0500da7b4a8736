"""
Media Server Setup

Provisions a single Ubuntu host as a home media server: package updates,
CasaOS, a static IP, Docker, the container stack, UFW and CPU tuning.
"""

__version__ = "1.0.0"

from .config import AppConfig, NetworkConfig, load_config
from .provisioner import MediaServerSetup, service_urls

__all__ = [
    "AppConfig",
    "NetworkConfig",
    "load_config",
    "MediaServerSetup",
    "service_urls",
]
