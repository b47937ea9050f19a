from __future__ import annotations

"""Bot configuration and logging setup.

Purpose: Load settings from a single JSON file (`settings/config.json` by
default). Configure root logging with a concise format.

"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Union

from .errors import ConfigError


DEFAULT_CONFIG_PATH = Path("settings/config.json")


@dataclass(frozen=True)
class Settings:
    gateway_url: str
    token: str
    prefix: str
    log_level: str
    token_type: str = "Bot"
    # Accept "@bot command" as well as the literal prefix
    allow_mention_prefix: bool = True
    # Print connection-level log events at INFO instead of DEBUG
    print_log: bool = True
    reply_on_unknown_command: bool = False
    definitions_path: str = "settings/bot.json"


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    try:
        return str(value).strip().lower() in {"1", "true", "yes", "on"}
    except Exception:
        return default


def load_settings(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> Settings:
    """Load settings strictly from the given JSON file.

    The file must exist and contain the required keys; optional keys fall back
    to the Settings defaults.
    """
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"{cfg_path} not found")
    try:
        data = json.loads(cfg_path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigError(f"failed to parse {cfg_path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{cfg_path} must contain a JSON object")

    required_keys = ["gateway_url", "token", "prefix", "log_level"]
    missing = [k for k in required_keys if k not in data]
    if missing:
        raise ConfigError(f"{cfg_path} missing required keys: {', '.join(missing)}")
    if not str(data["token"]).strip():
        raise ConfigError(f"{cfg_path}: token must not be empty")

    defaults = Settings(gateway_url="", token="", prefix="", log_level="INFO")

    def gv(key: str) -> Any:
        return data.get(key, getattr(defaults, key))

    return Settings(
        gateway_url=str(data["gateway_url"]),
        token=str(data["token"]).strip(),
        prefix=str(data["prefix"]),
        log_level=str(data["log_level"]).upper(),
        token_type=str(gv("token_type")),
        allow_mention_prefix=_as_bool(data.get("allow_mention_prefix"), defaults.allow_mention_prefix),
        print_log=_as_bool(data.get("print_log"), defaults.print_log),
        reply_on_unknown_command=_as_bool(data.get("reply_on_unknown_command"), defaults.reply_on_unknown_command),
        definitions_path=str(gv("definitions_path")),
    )


def configure_logging(log_level: str) -> None:
    """Configure root logger with a concise, structured-ish format."""
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
    )
