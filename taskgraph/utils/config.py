# taskgraph/utils/config.py
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional
from .paths import config_dir

SETTINGS_NAME = "settings.json"

_DEFAULTS: Dict[str, Any] = {
    "database": {
        "path": None,
    },
    "background": {
        "max_threads": 4,
    },
}

_log = logging.getLogger("taskgraph.config")


def settings_file() -> Path:
    return config_dir() / SETTINGS_NAME


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = {k: (dict(v) if isinstance(v, dict) else v) for k, v in base.items()}
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = {**out[key], **value}
        else:
            out[key] = value
    return out


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    path = path or settings_file()
    if path.exists():
        try:
            return _merge(_DEFAULTS, json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as exc:
            _log.warning("Unreadable settings at %s (%s); using defaults", path, exc)
            return _merge(_DEFAULTS, {})
    return _merge(_DEFAULTS, {})


def save_settings(data: Dict[str, Any], path: Optional[Path] = None) -> None:
    path = path or settings_file()
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
