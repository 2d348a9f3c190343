"""Persistent GUI configuration (wavecursor.config.json).

On first launch the file is created in the OS-specific user preferences
directory with all built-in defaults.  On later launches it is loaded,
merged with the current defaults (so new keys always get a value) and
validated; a file that fails validation is backed up as ``*.bak`` and
its engine sections are reset.

Layout::

    {
        "view":     { ... },   # zoom, center lines
        "playback": { ... },   # cursor interval
        "decode":   { ... },   # raw PCM assumptions
        "gui":      { ... },   # colors, last directory, window size
    }

Locations:
    Windows : %APPDATA%\\wavecursor\\wavecursor.config.json
    macOS   : ~/Library/Application Support/wavecursor/wavecursor.config.json
    Linux   : $XDG_CONFIG_HOME/wavecursor/wavecursor.config.json
"""

from __future__ import annotations

import copy
import json
import logging
import os
import platform
from typing import Any

from wavecursorlib.config import (
    build_structured_defaults,
    validate_structured_config,
)

log = logging.getLogger(__name__)

CONFIG_FILENAME = "wavecursor.config.json"

_GUI_DEFAULTS: dict[str, Any] = {
    "last_directory": "",
    "window_width": 1400,
    "window_height": 800,
    "channel_colors": [
        "#44aa44", "#44aaaa", "#aa44aa", "#aaaa44",
        "#4488cc", "#cc8844", "#88cc44", "#cc4488",
    ],
    "cursor_color": "#ff5050",
}


def _config_dir() -> str:
    """Return the OS-specific configuration directory."""
    system = platform.system()
    if system == "Windows":
        base = os.environ.get("APPDATA") or os.path.expanduser("~")
        return os.path.join(base, "wavecursor")
    if system == "Darwin":
        return os.path.join(os.path.expanduser("~"), "Library",
                            "Application Support", "wavecursor")
    base = os.environ.get("XDG_CONFIG_HOME")
    if not base:
        base = os.path.join(os.path.expanduser("~"), ".config")
    return os.path.join(base, "wavecursor")


def config_path() -> str:
    return os.path.join(_config_dir(), CONFIG_FILENAME)


def build_defaults() -> dict[str, Any]:
    defaults = build_structured_defaults()
    defaults["gui"] = copy.deepcopy(_GUI_DEFAULTS)
    return defaults


def load_config() -> dict[str, Any]:
    """Load the structured GUI config, creating it with defaults if needed."""
    path = config_path()
    defaults = build_defaults()

    if not os.path.isfile(path):
        log.info("Config file not found, creating %s", path)
        save_config(defaults)
        return copy.deepcopy(defaults)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        log.warning("Cannot read config (%s), recreating from defaults", exc)
        _backup_corrupt(path)
        save_config(defaults)
        return copy.deepcopy(defaults)

    if not isinstance(data, dict):
        log.warning("Config root is %s, expected object, recreating",
                    type(data).__name__)
        _backup_corrupt(path)
        save_config(defaults)
        return copy.deepcopy(defaults)

    merged = _merge_structured(defaults, data)

    errors = validate_structured_config(merged)
    if errors:
        msgs = "; ".join(e.message for e in errors)
        log.warning("Config validation failed (%s), resetting engine sections",
                    msgs)
        _backup_corrupt(path)
        defaults["gui"] = copy.deepcopy(merged["gui"])
        save_config(defaults)
        return copy.deepcopy(defaults)

    if merged != data:
        save_config(merged)
    return merged


def save_config(config: dict[str, Any]) -> str:
    """Write *config* to the user preferences file and return the path."""
    path = config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4, ensure_ascii=False)
        f.write("\n")
    log.info("Config saved to %s", path)
    return path


def _merge_structured(defaults: dict[str, Any],
                      overrides: dict[str, Any]) -> dict[str, Any]:
    """Merge *overrides* into *defaults*, known keys only (gui: all keys)."""
    merged = copy.deepcopy(defaults)
    for section, values in merged.items():
        over = overrides.get(section)
        if not isinstance(over, dict):
            continue
        if section == "gui":
            values.update(over)
            continue
        for k, v in over.items():
            if k in values:
                values[k] = v
    return merged


def _backup_corrupt(path: str) -> None:
    """Rename a corrupt config file to ``*.bak`` (best-effort)."""
    backup = path + ".bak"
    try:
        if os.path.isfile(backup):
            os.remove(backup)
        os.rename(path, backup)
        log.info("Backed up corrupt config to %s", backup)
    except OSError as exc:
        log.warning("Could not back up %s: %s", path, exc)
