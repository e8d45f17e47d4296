# file_inventory/shared/config.py
from __future__ import annotations

from datetime import datetime
from pathlib import Path

import yaml

from file_inventory.shared.errors import ConfigError

DEFAULT_TS_FORMAT = "%Y%m%d_%H%M%S"


def load_config(path) -> dict:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigError(f"Config not readable: {p} ({e})") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Config is not valid YAML: {p}\n{e}") from e

    if not isinstance(cfg, dict):
        raise ConfigError(f"Config must be a mapping at top level: {p}")
    return cfg


def section(cfg: dict, key: str) -> dict:
    # `key:` with nothing under it loads as None
    value = cfg.get(key) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section `{key}:` must be a mapping, got {type(value).__name__}")
    return value


def timestamp(cfg: dict) -> str:
    fmt = section(cfg, "logging").get("timestamp_format", DEFAULT_TS_FORMAT)
    return datetime.now().strftime(fmt)
