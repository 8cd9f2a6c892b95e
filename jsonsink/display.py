"""Rich terminal output for the CLI."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from jsonsink.config import ReporterState
from jsonsink.reporter import ReportResult

console = Console()


def get_status_color(status_code: int) -> str:
    """Get color based on HTTP status code.

    Args:
        status_code: HTTP status returned by the sink

    Returns:
        Color name for Rich
    """
    if status_code < 300:
        return "green"
    elif status_code < 500:
        return "yellow"
    else:
        return "red"


def display_state(state: ReporterState) -> None:
    """Display the resolved reporter state."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value")

    table.add_row("Sink:", state.sink_url)
    table.add_row("Method:", state.request_method.value)
    table.add_row("Host:", state.hostname)
    if state.timeout is not None:
        table.add_row("Timeout:", f"{state.timeout}s")
    for key, value in state.headers:
        table.add_row(f"Header {key}:", value)

    panel = Panel(table, title="Reporter", border_style="blue")
    console.print(panel)


def display_report_result(result: ReportResult) -> None:
    """Display the outcome of a report call.

    Args:
        result: Report outcome
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="dim")
    table.add_column("Value")

    table.add_row("Sink:", result.state.sink_url)
    table.add_row("Method:", result.state.request_method.value)

    if result.ok:
        color = get_status_color(result.status_code)
        table.add_row("Status:", Text(str(result.status_code), style=f"{color} bold"))
    else:
        table.add_row("Error:", Text(str(result.error.reason), style="red bold"))

    border = "green" if result.ok else "red"
    panel = Panel(table, title="Report", border_style=border)
    console.print(panel)


def display_config(config: dict[str, Any]) -> None:
    """Display configuration.

    Args:
        config: Configuration dictionary
    """
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Key", style="cyan")
    table.add_column("Value")

    # Flatten and display config
    def add_items(d: dict, prefix: str = ""):
        for key, value in d.items():
            full_key = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict) and value:
                add_items(value, full_key)
            else:
                table.add_row(full_key, str(value))

    add_items(config)

    panel = Panel(table, title="Configuration", border_style="blue")
    console.print(panel)


def display_json(data: dict[str, Any]) -> None:
    """Display JSON data with syntax highlighting.

    Args:
        data: Dictionary to display as JSON
    """
    json_str = json.dumps(data, indent=2, default=str)
    syntax = Syntax(json_str, "json", theme="monokai", line_numbers=False)
    console.print(syntax)


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✅ {message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]❌ {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]⚠️  {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]ℹ️  {message}[/blue]")
