"""CLI: hive devices, hive record"""

import asyncio
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from hive_chat.capture.session import CaptureSession, CaptureState
from hive_chat.errors import HiveChatError

console = Console()


def _get_client():
    from hive_chat.cli.main import _get_client
    return _get_client()


def _run(coro):
    from hive_chat.cli.main import _run
    return _run(coro)


@click.command("devices")
def devices_cmd():
    """List audio input devices and the default pick."""

    async def _devices():
        async with _get_client() as client:
            async with client.capture_session() as session:
                devices = await session.enumerate_devices()
                if session.error:
                    console.print(f"[red]{session.error_message}[/red]")
                    raise SystemExit(1)
                table = Table(title="Input devices")
                table.add_column("ID", style="bold")
                table.add_column("Label")
                table.add_column("Default")
                for d in devices:
                    table.add_row(d.id, d.label, "*" if d.id == session.device_id else "")
                console.print(table)

    _run(_devices())


async def _await_command(session: CaptureSession) -> str:
    """Read one control line: Enter stops, 'p' toggles pause, 'c' cancels."""
    loop = asyncio.get_running_loop()
    while True:
        line = (await loop.run_in_executor(None, input)).strip().lower()
        if line == "p":
            if session.state is CaptureState.RECORDING:
                session.pause()
                console.print(f"[yellow]Paused at {session.formatted_time()}[/yellow]")
            else:
                session.resume()
                console.print("[cyan]Recording...[/cyan]")
            continue
        return "cancel" if line == "c" else "stop"


@click.command("record")
@click.argument("channel_id")
@click.option("--caption", default="", help="Text to send with the voice message")
@click.option("--device", "device_id", default=None, help="Input device id (see `hive devices`)")
def record_cmd(channel_id: str, caption: str, device_id: Optional[str]):
    """Record a voice message and send it to a channel."""

    async def _record():
        async with _get_client() as client:
            async with client.capture_session() as session:
                await session.enumerate_devices()
                if device_id is not None:
                    session.select_device(device_id)

                await session.start()
                if session.state is CaptureState.ERROR:
                    console.print(f"[red]{session.error_message}[/red]")
                    raise SystemExit(1)
                console.print("[cyan]Recording... Enter to stop, p+Enter to pause/resume, c+Enter to cancel[/cyan]")

                action = await _await_command(session)
                if session.state is CaptureState.ERROR:
                    console.print(f"[red]{session.error_message}[/red]")
                    raise SystemExit(1)
                if action == "cancel":
                    session.clear()
                    console.print("[dim]Recording discarded.[/dim]")
                    return
                session.stop()
                console.print(f"[green]Recorded {session.formatted_time()}[/green] [dim]{session.finished_url}[/dim]")

                composer = client.composer(channel_id, capture=session)
                composer.typed_text = caption
                try:
                    with console.status("Uploading voice message..."):
                        await composer.send()
                except HiveChatError as e:
                    console.print(f"[red]{e}[/red]")
                    raise SystemExit(1)
                console.print("[green]Voice message sent.[/green]")

    _run(_record())
