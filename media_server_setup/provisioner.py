"""Ordered execution of the setup steps and the closing summary."""

import logging
import time
from typing import Iterable, List, Optional, Tuple

from .config import AppConfig
from .logging_setup import log
from .steps import Step, StepResult, build_steps

logger = logging.getLogger("media_server_setup")

SERVICES: List[Tuple[str, Optional[int]]] = [
    ("CasaOS", None),
    ("Radarr", 7878),
    ("Sonarr", 8989),
    ("qBittorrent", 8081),
    ("Bazarr", 6767),
    ("Jackett", 9117),
    ("Jellyfin", 8096),
]


def service_urls(static_ip: str) -> List[Tuple[str, str]]:
    """Return (name, url) for every deployed service in display order."""
    urls = []
    for name, port in SERVICES:
        url = f"http://{static_ip}" if port is None else f"http://{static_ip}:{port}"
        urls.append((name, url))
    return urls


class MediaServerSetup:
    """Runs the setup steps in order and stops at the first checked failure."""

    def __init__(
        self,
        config: AppConfig,
        steps: Optional[List[Step]] = None,
        skip: Iterable[str] = (),
    ):
        self.config = config
        self.steps = steps if steps is not None else build_steps()
        self.skip = set(skip)
        self.results: List[StepResult] = []
        self.failed_step: Optional[Step] = None

    @property
    def failure_message(self) -> Optional[str]:
        return self.failed_step.failure_message if self.failed_step else None

    def run(self) -> bool:
        """
        Execute every step in order.

        Returns:
            True when no checked step failed. On failure ``failed_step`` is
            set and no later step has been run.
        """
        logger.info("Starting media server setup...")
        start = time.time()
        for step in self.steps:
            if step.key in self.skip:
                self.results.append(step.skip())
                continue
            result = step.execute(self.config)
            self.results.append(result)
            if not result.success and not step.best_effort:
                self.failed_step = step
                return False

        logger.debug(f"All steps finished in {time.time() - start:.2f}s")
        self.print_summary()
        return True

    def print_summary(self) -> None:
        log("Setup complete! Access services at:")
        for name, url in service_urls(self.config.network.static_ip):
            log(f" - {name}: {url}")
        log("Reboot recommended for all changes to take effect.")
