"""CLI: hive history, hive watch, hive send, hive location, hive download"""

import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from hive_chat.cli.cards import to_renderable
from hive_chat.composer import SelectedFile
from hive_chat.errors import HiveChatError
from hive_chat.location import IpGeolocationProvider, parse_manual_location

console = Console()


def _get_client():
    from hive_chat.cli.main import _get_client
    return _get_client()


def _run(coro):
    from hive_chat.cli.main import _run
    return _run(coro)


@click.command("history")
@click.argument("channel_id")
@click.option("--pages", default=1, type=int, help="Pages of history to fetch")
@click.option("--json-output", "--json", is_flag=True)
def history_cmd(channel_id: str, pages: int, json_output: bool):
    """Print recent messages in a channel."""

    async def _history():
        async with _get_client() as client:
            transcript = await client.history(channel_id, pages=pages)
            messages = list(transcript)
            if json_output:
                click.echo(json.dumps([m.model_dump() for m in messages], indent=2))
                return
            if not messages:
                console.print("[dim]No messages yet. Start the conversation![/dim]")
                return
            for view in await client.views(messages):
                console.print(to_renderable(view, client.blobs))

    _run(_history())


@click.command("watch")
@click.argument("channel_id")
def watch_cmd(channel_id: str):
    """Follow a channel, printing messages as they arrive (Ctrl+C to exit)."""

    async def _watch():
        async with _get_client() as client:
            async for message in client.watch(channel_id):
                view = (await client.views([message]))[0]
                console.print(to_renderable(view, client.blobs))

    try:
        _run(_watch())
    except KeyboardInterrupt:
        pass


@click.command("send")
@click.argument("channel_id")
@click.argument("text", required=False, default="")
@click.option("-f", "--file", "file_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def send_cmd(channel_id: str, text: str, file_path: Optional[Path]):
    """Send TEXT to a channel, optionally attaching a file."""

    async def _send():
        async with _get_client() as client:
            composer = client.composer(channel_id)
            composer.typed_text = text
            try:
                if file_path is not None:
                    composer.select_file(SelectedFile.from_path(file_path))
                with console.status("Uploading..." if file_path else "Sending..."):
                    message = await composer.send()
            except HiveChatError as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)
            console.print(f"[green]Sent[/green] [dim]{message.created_at_ms}[/dim]")

    _run(_send())


@click.command("location")
@click.argument("channel_id")
@click.option("--lat", default=None, help="Latitude")
@click.option("--lng", default=None, help="Longitude")
@click.option("--label", default="", help="Optional place name")
@click.option("--auto", is_flag=True, help="Look up the current position")
def location_cmd(channel_id: str, lat: Optional[str], lng: Optional[str], label: str, auto: bool):
    """Share a location, typed in or looked up."""
    if not auto and (lat is None or lng is None):
        raise click.UsageError("Pass --lat and --lng, or --auto.")

    async def _share():
        async with _get_client() as client:
            composer = client.composer(channel_id)
            try:
                if auto:
                    with console.status("Getting location..."):
                        message = await composer.share_current_location(
                            IpGeolocationProvider(), label, client.config.location_timeout_ms,
                        )
                else:
                    position = parse_manual_location(lat, lng, label)
                    message = await composer.send_location(position.lat, position.lng, position.label)
            except (HiveChatError, ValueError) as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)
            console.print(f"[green]Location sent[/green] [dim]{message.created_at_ms}[/dim]")

    _run(_share())


@click.command("download")
@click.argument("blob_id")
@click.option("-o", "--output", type=click.Path(dir_okay=False, path_type=Path), required=True)
def download_cmd(blob_id: str, output: Path):
    """Download an attachment by blob id."""

    async def _download():
        async with _get_client() as client:
            try:
                with console.status("Downloading..."):
                    data = await client.blobs.download(blob_id)
            except HiveChatError as e:
                console.print(f"[red]{e}[/red]")
                raise SystemExit(1)
            output.write_bytes(data)
            console.print(f"[green]Saved {len(data)} bytes to {output}[/green]")

    _run(_download())
