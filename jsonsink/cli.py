"""CLI commands for the JSON sink reporter."""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from jsonsink import __version__
from jsonsink.config import (
    Config,
    LoggingConfig,
    load_config,
    save_config,
    set_config_value,
)
from jsonsink.display import (
    display_config,
    display_json,
    display_report_result,
    display_state,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from jsonsink.metric import build_envelope, envelope_to_dict
from jsonsink.reporter import JsonReporter

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="jsonsink",
    help="Forward metric values as JSON documents to an HTTP sink.",
    add_completion=False,
)
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")

console = Console()


def setup_logging(logging_config: LoggingConfig) -> None:
    """Configure logging."""
    log_level = getattr(logging, logging_config.level.upper(), logging.INFO)

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Add file handler if configured
    if logging_config.file:
        try:
            file_handler = logging.FileHandler(logging_config.file)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
            )
            logging.getLogger().addHandler(file_handler)
        except PermissionError:
            logger.warning(f"Cannot write to log file: {logging_config.file}")


def parse_value(raw: str) -> Any:
    """Parse a command line value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


METRIC_ARGUMENT = typer.Argument(..., help="Metric path segments, e.g. cpu load")
DATAPOINT_OPTION = typer.Option("value", "--datapoint", "-p", help="Datapoint label")
VALUE_OPTION = typer.Option(..., "--value", "-v", help="Value (parsed as JSON when possible)")
CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Path to config file")


@app.command()
def report(
    metric: list[str] = METRIC_ARGUMENT,
    datapoint: str = DATAPOINT_OPTION,
    value: str = VALUE_OPTION,
    config_file: Optional[Path] = CONFIG_OPTION,
):
    """Send one metric value to the sink."""
    config = load_config(config_file)
    setup_logging(config.logging)

    reporter = JsonReporter()
    state = reporter.init(config.reporter)

    try:
        result = reporter.report(metric, datapoint, None, parse_value(value), state)
    except (TypeError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(1)
    finally:
        reporter.terminate("normal", state)

    display_report_result(result)

    if not result.ok:
        print_error(f"Failed to reach sink: {result.error.reason}")
        raise typer.Exit(1)

    if result.status_code >= 400:
        print_warning(f"Sink answered with status {result.status_code}")
    else:
        print_success(f"Sent to {state.sink_url}")


@app.command()
def preview(
    metric: list[str] = METRIC_ARGUMENT,
    datapoint: str = DATAPOINT_OPTION,
    value: str = VALUE_OPTION,
    config_file: Optional[Path] = CONFIG_OPTION,
):
    """Show the JSON document without sending it."""
    config = load_config(config_file)
    state = JsonReporter().init(config.reporter)

    try:
        envelope = build_envelope(metric, datapoint, parse_value(value), state.hostname)
    except (TypeError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    display_state(state)
    print_info(f"{state.request_method.value} {state.sink_url} (dry-run):")
    console.print()
    display_json(envelope_to_dict(envelope))


@app.command()
def version():
    """Show version information."""
    console.print(f"JSON Sink Reporter v{__version__}")


# Config subcommands
@config_app.command("show")
def config_show(config_file: Optional[Path] = CONFIG_OPTION):
    """Show current configuration."""
    config = load_config(config_file)
    display_config(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key"),
    value: str = typer.Argument(..., help="Value to set"),
    config_file: Optional[Path] = CONFIG_OPTION,
):
    """Set a configuration value.

    Available keys:
    - reporter.sink_url: Sink URL
    - reporter.request_type: put or post (anything else means put)
    - reporter.hostname: Reported host, "auto" for the local hostname
    - reporter.timeout: HTTP timeout in seconds, empty for the default
    - logging.level: Log level (DEBUG, INFO, WARNING, ERROR)
    - logging.file: Log file path
    """
    try:
        set_config_value(key, value, config_file)
        print_success(f"{key} = {value}")
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)
    except PermissionError:
        print_error("Permission denied. Try running with sudo.")
        raise typer.Exit(1)


@config_app.command("reset")
def config_reset(config_file: Optional[Path] = CONFIG_OPTION):
    """Reset configuration to defaults."""
    try:
        save_config(Config(), config_file)
        print_success("Configuration reset to defaults")
    except PermissionError:
        print_error("Permission denied. Try running with sudo.")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
