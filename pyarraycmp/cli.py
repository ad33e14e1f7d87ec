"""Defines the command-line interface for arraycmp.

This module uses the `click` library to manage and inspect the options that
`Comparator.from_config` reads. Comparing data is left to library callers;
the CLI only handles configuration.
"""
import json
import logging
import sys
from typing import Any, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.comparator import Comparator
from .core.config import BOOLEAN_KEYS, Config, parse_bool
from .core.errors import ConfigError

_BOOLEAN_WORDS = ("true", "false", "yes", "no", "on", "off", "1", "0")
_STRING_KEYS = ("separator", "log_level")

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


def _parse_value(key: str, value: str) -> Any:
    """Casts a command-line value to the type its key expects.

    Args:
        key: The dot-separated configuration key.
        value: The raw value typed by the user.

    Returns:
        The value as a bool, int, skip table, or unchanged string.
    """
    if key == "skip":
        positions = {}
        for item in value.split(","):
            item = item.strip()
            if not item:
                continue
            if not item.isdigit():
                raise click.BadParameter(f"Invalid skip position: {item!r}", param_hint="VALUE")
            positions[item] = True
        return positions
    if key in BOOLEAN_KEYS:
        if value.strip().lower() not in _BOOLEAN_WORDS:
            raise click.BadParameter(f"Expected a boolean for '{key}', got {value!r}", param_hint="VALUE")
        return parse_bool(value)
    if key in _STRING_KEYS:
        return value
    if value.lower() in ('true', 'false'):
        return value.lower() == 'true'
    if value.isdigit():
        return int(value)
    return value


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="arraycmp")
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
def main(verbose: bool, debug: bool) -> None:
    """Inspect and manage arraycmp comparator configuration."""
    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        configured = logging.getLevelName(str(Config().get("log_level", "WARNING")).upper())
        log_level = configured if isinstance(configured, int) else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug("Debug mode enabled.")


@main.command()
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False), help="Path to a custom config file.")
def show(config_path: Optional[str]) -> None:
    """Show the settings a comparator would be built with."""
    config_obj = Config(config_path=config_path)
    try:
        comparator = Comparator.from_config(config_obj)
    except ConfigError as e:
        err_console.print(f"[red]Invalid configuration: {e}[/red]")
        sys.exit(1)

    table = Table(title="Comparator Settings")
    table.add_column("Option", style="cyan")
    table.add_column("Value")
    table.add_row("separator", repr(comparator.separator))
    table.add_row("whitespace_significant", str(comparator.whitespace_significant))
    table.add_row("case_significant", str(comparator.case_significant))
    table.add_row("default_full", str(comparator.default_full))
    skipped = sorted(p for p, flag in comparator.skip.items() if flag)
    table.add_row("skip", ", ".join(str(p) for p in skipped) or "(none)")
    console.print(table)


@main.command()
@click.argument("action", type=click.Choice(['get', 'set', 'list', 'reset']), required=True)
@click.argument("key", type=str, required=False)
@click.argument("value", type=str, required=False)
def config(action: str, key: Optional[str], value: Optional[str]) -> None:
    """Manage the arraycmp configuration.

    \b
    ACTION:
        get <key>         Get a configuration value.
        set <key> <value> Set a configuration value.
        list              List all current configuration values.
        reset             Reset the configuration to its default state.
    """
    config_obj = Config()
    if action == "list":
        console.print(Panel(json.dumps(config_obj.config, indent=2), title="Current Configuration"))
    elif action == "get":
        if not key:
            err_console.print("[red]Error: 'get' action requires a key.[/red]")
            sys.exit(1)
        console.print(repr(config_obj.get(key)), markup=False)
    elif action == "set":
        if not key or value is None:
            err_console.print("[red]Error: 'set' action requires a key and a value.[/red]")
            sys.exit(1)
        processed_value = _parse_value(key, value)
        config_obj.set(key, processed_value)
        try:
            config_obj.save_user_config()
        except ConfigError as e:
            err_console.print(f"[red]Error saving configuration: {e}[/red]")
            sys.exit(1)
        console.print(f"[green]'{key}' set to '{processed_value}' and saved to user config.[/green]")
    elif action == "reset":
        if config_obj.reset_user_config():
            console.print("[green]Configuration reset to defaults.[/green]")
        else:
            console.print("[yellow]No user configuration file to reset.[/yellow]")


if __name__ == "__main__":
    main()
