from __future__ import annotations

import copy
import json
import os
import platform
from pathlib import Path
from typing import Any, Callable
from urllib.parse import quote

import yaml

from cardstamp.models import Card, TournamentConfig, card_from_dict, tournament_config_from_dict

DEFAULT_CONFIG: dict[str, Any] = {
    "asset_root": "assets",
    "camera_icon": None,
    "font_path": None,
    "italic_font_path": None,
    "name_template": "{card_id}__{template}.{ext}",
    "request_timeout": 30,
    "log_level": "info",
}


APP_DIR_NAME = "CardStamp"
CONFIG_DIR_ENV = "CARDSTAMP_CONFIG_DIR"


def get_user_data_dir() -> Path:
    """Per-user writable directory for the app config.

    ``CARDSTAMP_CONFIG_DIR`` wins; otherwise the platform convention applies.
    """
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()

    home = Path.home()
    system_name = platform.system().lower()
    if system_name == "windows":
        roots = (os.environ.get("APPDATA"), os.environ.get("LOCALAPPDATA"))
        return Path(next((root for root in roots if root), home / "AppData" / "Roaming")) / APP_DIR_NAME
    if system_name == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME
    return Path(os.environ.get("XDG_CONFIG_HOME") or home / ".config") / APP_DIR_NAME


def get_config_path() -> Path:
    return get_user_data_dir() / "config.yaml"


def _deep_merge(base: dict[str, Any], incoming: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    cfg_path = path or get_config_path()
    if not cfg_path.exists():
        return copy.deepcopy(DEFAULT_CONFIG)

    loaded = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{cfg_path} must contain a mapping of settings")
    return _deep_merge(DEFAULT_CONFIG, loaded)


def write_default_config(path: Path | None = None, force: bool = False) -> Path:
    cfg_path = path or get_config_path()
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    if cfg_path.exists() and not force:
        return cfg_path
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    cfg_path.write_text(yaml.safe_dump(cfg, sort_keys=False, allow_unicode=True), encoding="utf-8")
    return cfg_path


def load_document(path: Path) -> dict[str, Any]:
    """Read a card or tournament document stored as JSON or YAML."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def load_tournament_config(path: Path) -> TournamentConfig:
    return tournament_config_from_dict(load_document(path))


def load_card(path: Path) -> Card:
    return card_from_dict(load_document(path))


def asset_resolver(root: str | Path) -> Callable[[str], str]:
    """Map storage keys onto a local directory or a URL prefix."""
    text = str(root)
    if text.startswith(("http://", "https://")):
        prefix = text.rstrip("/")

        def resolve_url(key: str) -> str:
            return f"{prefix}/{quote(key.lstrip('/'))}"

        return resolve_url

    base = Path(text).expanduser()

    def resolve_path(key: str) -> str:
        if key.startswith(("http://", "https://", "file://", "data:")):
            return key
        return str(base / key.lstrip("/"))

    return resolve_path
