"""Load a Configuration from a JSON or YAML file."""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

import yaml

from .config import Configuration
from .errors import ConfigurationError

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z])(?=[A-Z0-9])")


def snake_case(key: str) -> str:
    """``initialBankroll`` -> ``initial_bankroll``, ``numberBet10`` -> ``number_bet_10``."""
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def normalize_keys(data: Dict[str, Any]) -> Tuple[Dict[str, Any], List[Dict[str, str]]]:
    """
    Rename camelCase keys to the snake_case field names.

    Returns the normalized mapping plus one record per renamed key. When both
    spellings are present the snake_case one wins.
    """
    out: Dict[str, Any] = {}
    renamed: List[Dict[str, str]] = []
    for key, value in data.items():
        new_key = snake_case(str(key))
        if new_key == key:
            out[key] = value
            continue
        if new_key in data:
            renamed.append({"old": key, "new": new_key, "action": "kept_new_dropped_old"})
            continue
        out[new_key] = value
        renamed.append({"old": key, "new": new_key, "action": "migrated"})
    return out, renamed


def read_config_data(path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigurationError([f"cannot read {p}: {e}"]) from e

    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            data: Any = yaml.safe_load(text) or {}
        else:
            data = json.loads(text or "{}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigurationError([f"cannot parse {p}: {e}"]) from e

    if not isinstance(data, dict):
        raise ConfigurationError(["Configuration root must be a JSON/YAML object (mapping)."])
    normalized, _ = normalize_keys(data)
    return normalized


def load_configuration(path: Union[str, Path]) -> Configuration:
    """Read ``path`` and build a Configuration; malformed files raise ConfigurationError."""
    return Configuration.from_dict(read_config_data(path))


def dump_configuration(configuration: Configuration, fmt: str = "yaml") -> str:
    data = configuration.to_dict()
    if fmt == "json":
        return json.dumps(data, indent=2)
    return yaml.safe_dump(data, sort_keys=False)
