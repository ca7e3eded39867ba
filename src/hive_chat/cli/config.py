"""CLI: hive config show|set"""

import json

import click
from pydantic import ValidationError
from rich.console import Console

from hive_chat.config import HiveConfig, config_path, load_config, save_config

console = Console()


@click.group()
def config():
    """Client configuration."""


@config.command("show")
def config_show():
    """Print the active configuration."""
    cfg = load_config()
    data = cfg.model_dump()
    if data.get("access_token"):
        data["access_token"] = "***"
    console.print(f"[dim]{config_path()}[/dim]")
    click.echo(json.dumps(data, indent=2))


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str):
    """Set one configuration KEY to VALUE."""
    if key not in HiveConfig.model_fields:
        raise click.BadParameter(f"unknown key {key!r}", param_hint="KEY")
    cfg = load_config()
    try:
        updated = HiveConfig.model_validate({**cfg.model_dump(), key: value})
    except ValidationError as e:
        raise click.BadParameter(str(e), param_hint="VALUE")
    path = save_config(updated)
    console.print(f"[green]{key} saved to {path}[/green]")
