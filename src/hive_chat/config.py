"""
Client configuration — a JSON file at ~/.hive/config.json.

HIVE_CONFIG overrides the path. A missing or unreadable file yields defaults.
"""

import json
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ValidationError

from hive_chat.blobstore import DEFAULT_AGGREGATOR_URL, DEFAULT_EPOCHS, DEFAULT_PUBLISHER_URL
from hive_chat.composer import MAX_FILE_BYTES
from hive_chat.location import DEFAULT_TIMEOUT_MS
from hive_chat.messaging import DEFAULT_POLL_INTERVAL_S
from hive_chat.names import DEFAULT_RPC_URL
from hive_chat.transport.http import DEFAULT_BASE_URL

DEFAULT_CONFIG_FILE = Path.home() / ".hive" / "config.json"


class HiveConfig(BaseModel):
    messaging_url: str = DEFAULT_BASE_URL
    access_token: Optional[str] = None
    account_address: Optional[str] = None
    publisher_url: str = DEFAULT_PUBLISHER_URL
    aggregator_url: str = DEFAULT_AGGREGATOR_URL
    epochs: int = DEFAULT_EPOCHS
    sui_rpc_url: str = DEFAULT_RPC_URL
    max_file_bytes: int = MAX_FILE_BYTES
    preferred_device: Optional[str] = None
    location_timeout_ms: int = DEFAULT_TIMEOUT_MS
    poll_interval_s: float = DEFAULT_POLL_INTERVAL_S
    http_timeout_s: float = 30.0
    log_dir: str = str(Path.home() / ".hive" / "logs")
    log_level: str = "INFO"


def config_path() -> Path:
    override = os.environ.get("HIVE_CONFIG")
    return Path(override) if override else DEFAULT_CONFIG_FILE


def load_config(path: Optional[Union[str, Path]] = None) -> HiveConfig:
    path = Path(path) if path else config_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return HiveConfig.model_validate(data)
    except (FileNotFoundError, json.JSONDecodeError, ValidationError):
        return HiveConfig()


def save_config(config: HiveConfig, path: Optional[Union[str, Path]] = None) -> Path:
    path = Path(path) if path else config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config.model_dump(), indent=2), encoding="utf-8")
    return path
