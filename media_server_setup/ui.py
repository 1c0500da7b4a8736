"""Nord-themed console output helpers."""

from typing import Iterable

import pyfiglet
from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table
from rich.theme import Theme


class NordColors:
    """Nord color palette for consistent theming throughout the application."""

    POLAR_NIGHT_4: str = "#4C566A"

    SNOW_STORM_1: str = "#D8DEE9"

    FROST_1: str = "#8FBCBB"
    FROST_2: str = "#88C0D0"
    FROST_3: str = "#81A1C1"
    FROST_4: str = "#5E81AC"

    RED: str = "#BF616A"
    YELLOW: str = "#EBCB8B"
    GREEN: str = "#A3BE8C"


NORD_THEME = Theme(
    {
        "info": f"bold {NordColors.FROST_2}",
        "warning": f"bold {NordColors.YELLOW}",
        "error": f"bold {NordColors.RED}",
        "success": f"bold {NordColors.GREEN}",
        "step": f"{NordColors.FROST_2}",
        "skipped": f"{NordColors.POLAR_NIGHT_4}",
    }
)

console = Console(theme=NORD_THEME)
err_console = Console(theme=NORD_THEME, stderr=True)


def print_header(text: str) -> None:
    """Print a striking ASCII art header using pyfiglet."""
    ascii_art = pyfiglet.figlet_format(text, font="slant")
    console.print(ascii_art, style=f"bold {NordColors.FROST_2}")


def status_report(results: Iterable, title: str = "Media Server Setup Status") -> None:
    """
    Display a table reporting the status of every setup step.

    Args:
        results: StepResult objects in execution order.
        title: Table title.
    """
    icons = {"success": "✓", "failed": "✗", "warning": "⚠", "skipped": "-"}
    styles = {"success": "success", "failed": "error", "warning": "warning", "skipped": "skipped"}

    table = Table(
        show_header=True,
        header_style=f"bold {NordColors.FROST_1}",
        border_style=NordColors.FROST_3,
        box=ROUNDED,
        title=f"[bold {NordColors.FROST_2}]{title}[/]",
        title_justify="center",
    )
    table.add_column("Task", style=f"bold {NordColors.FROST_2}")
    table.add_column("Status", justify="center")
    table.add_column("Message", style=NordColors.SNOW_STORM_1)

    for result in results:
        st = result.status
        table.add_row(
            result.key.replace("_", " ").title(),
            f"[{styles.get(st, 'step')}]{icons.get(st, '?')} {st.upper()}[/]",
            result.message,
        )
    console.print(table)
