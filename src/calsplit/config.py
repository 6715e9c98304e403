from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict
import os
import yaml

CONFIG_PATH_DEFAULT = "~/.config/calsplit/config.yaml"
CONFIG_DIR_DEFAULT = "~/.config/calsplit"

SEND_UPDATES_CHOICES = ("all", "externalOnly", "none")

@dataclass
class GoogleConfig:
    credentials_json: str
    token_json: str

@dataclass
class AppConfig:
    calendar_id: str
    log_level: str
    send_updates: str
    google: GoogleConfig

def load_config(path: str = CONFIG_PATH_DEFAULT) -> AppConfig:
    p = Path(path).expanduser()
    data: Dict[str, Any] = {}
    if p.exists():
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {p} must contain a mapping.")

    google = data.get("google", {}) or {}
    config_dir = Path(CONFIG_DIR_DEFAULT).expanduser()

    send_updates = str(data.get("send_updates", "none"))
    if send_updates not in SEND_UPDATES_CHOICES:
        raise ValueError(f"send_updates must be one of {', '.join(SEND_UPDATES_CHOICES)}.")

    # Environment wins over the YAML file for credential locations.
    credentials_json = os.environ.get("GOOGLE_CREDENTIALS_JSON") or google.get(
        "credentials_json", str(config_dir / "credentials.json")
    )
    token_json = os.environ.get("GOOGLE_TOKEN_JSON") or google.get(
        "token_json", str(config_dir / "token.json")
    )

    return AppConfig(
        calendar_id=str(data.get("calendar_id", "primary")),
        log_level=str(data.get("log_level", "WARNING")).upper(),
        send_updates=send_updates,
        google=GoogleConfig(
            credentials_json=str(Path(credentials_json).expanduser()),
            token_json=str(Path(token_json).expanduser()),
        ),
    )
