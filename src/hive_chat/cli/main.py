"""
hive CLI — `hive` command.

Commands:
  hive config show|set      Inspect or change ~/.hive/config.json
  hive history <channel>    Print recent messages
  hive watch <channel>      Follow a channel
  hive send <channel> TEXT  Send text, optionally with --file
  hive record <channel>     Record and send a voice message
  hive location <channel>   Share a location
  hive devices              List microphones
  hive download <blob-id>   Fetch an attachment
"""

import asyncio

try:
    import click
    from rich.console import Console
except ImportError:
    raise SystemExit("CLI requires extras: pip install hive-chat[cli]")

from hive_chat.client import AsyncHiveChat
from hive_chat.config import load_config
from hive_chat.logging_utils import setup_logging

console = Console()


def _get_client() -> AsyncHiveChat:
    cfg = load_config()
    setup_logging(cfg.log_dir, cfg.log_level)
    return AsyncHiveChat(config=cfg)


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
def main():
    """hive — chat with files, voice notes and locations over a text-only backend."""


# Register subcommands from separate modules
from hive_chat.cli.chat import history_cmd, watch_cmd, send_cmd, location_cmd, download_cmd
from hive_chat.cli.config import config
from hive_chat.cli.record import devices_cmd, record_cmd

main.add_command(config)
main.add_command(history_cmd)
main.add_command(watch_cmd)
main.add_command(send_cmd)
main.add_command(location_cmd)
main.add_command(download_cmd)
main.add_command(devices_cmd)
main.add_command(record_cmd)


if __name__ == "__main__":
    main()
