"""Command line entry point."""

import signal
import sys
from pathlib import Path
from typing import Any, Optional, Tuple

import click

from . import __version__
from .commands import check_root
from .config import default_paths, load_config
from .errors import PrivilegeError
from .logging_setup import error_exit, logger, setup_logging
from .provisioner import MediaServerSetup
from .steps import STEP_KEYS
from .ui import print_header, status_report


def signal_handler(signum: int, frame: Optional[Any]) -> None:
    """Log the interrupting signal and exit with a signal-specific code."""
    try:
        sig_name = signal.Signals(signum).name
    except ValueError:
        sig_name = f"signal {signum}"
    logger.error(f"Setup interrupted by {sig_name}. Exiting.")
    sys.exit(128 + signum)


@click.command()
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Variable file with STATIC_IP, GATEWAY, DNS1, DNS2, NETWORK_INTERFACE [default: BASE_DIR/.env]",
)
@click.option(
    "--base-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
    help="Directory holding config/, docker/ and logs/",
)
@click.option(
    "--netplan-template",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Render this placeholder template instead of generating the netplan file",
)
@click.option("--skip", "skip", multiple=True, type=click.Choice(STEP_KEYS), help="Skip a step (repeatable)")
@click.option("--timeout", type=int, default=None, help="Per-command timeout in seconds")
@click.option("--skip-root-check", is_flag=True, help="Do not require root privileges")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(__version__)
def main(
    env_file: Optional[Path],
    base_dir: Path,
    netplan_template: Optional[Path],
    skip: Tuple[str, ...],
    timeout: Optional[int],
    skip_root_check: bool,
    debug: bool,
) -> None:
    """Ubuntu Media Server Setup"""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    print_header("Media Server")
    setup_logging(default_paths(base_dir)["log_file"], debug=debug)

    if not skip_root_check:
        try:
            check_root()
        except PrivilegeError as e:
            error_exit(str(e))

    config = load_config(
        env_file if env_file is not None else base_dir / ".env",
        base_dir,
        netplan_template=netplan_template,
        command_timeout=timeout,
    )

    setup = MediaServerSetup(config, skip=skip)
    ok = setup.run()
    status_report(setup.results)
    if not ok:
        error_exit(setup.failure_message)


if __name__ == "__main__":
    main()
