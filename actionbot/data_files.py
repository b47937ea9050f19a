from __future__ import annotations

"""Definitions file loader (JSON).

Purpose: Read the commands/events definitions from disk so the tables can be
built from plain data, keeping behaviour out of code.
"""

import json
from pathlib import Path
from typing import Any, Dict, Tuple, Union

from .errors import ConfigError
from .tables import CommandTable, EventTable, load_tables


def _load_required(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"required data file missing: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigError(f"failed to parse {path}: {e}") from e


def load_definitions(path: Union[str, Path]) -> Dict[str, Any]:
    """Return the raw definitions object: {binds?, commands?, events?}."""
    data = _load_required(Path(path))
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must be an object with 'commands' and/or 'events'")
    return data


def load_tables_from_file(path: Union[str, Path]) -> Tuple[CommandTable, EventTable]:
    data = load_definitions(path)
    try:
        return load_tables(data)
    except ConfigError as e:
        raise ConfigError(f"{path}: {e}") from e
