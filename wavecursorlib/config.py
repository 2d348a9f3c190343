from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any

PRESET_SCHEMA_VERSION = "1.0"


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


@dataclass
class ConfigFieldError:
    """A single validation error for one configuration field.

    Attributes:
        key:     The config key that failed validation.
        value:   The offending value.
        message: Human-readable explanation of what is wrong.
    """
    key: str
    value: Any
    message: str


@dataclass(frozen=True)
class ParamSpec:
    """Declarative specification for a single configuration parameter."""
    key: str
    type: type | tuple              # expected Python type(s)
    default: Any
    label: str                       # short UI label
    description: str = ""
    min: float | int | None = None   # inclusive lower bound (unless min_exclusive)
    max: float | int | None = None   # inclusive upper bound
    min_exclusive: bool = False
    choices: list | None = None      # allowed string values


# ---------------------------------------------------------------------------
# Parameter sections
# ---------------------------------------------------------------------------

VIEW_PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="zoom_factor", type=(int, float), default=1, min=1,
        label="Initial zoom",
        description="1 fits the whole file into the widget width; larger "
                    "values aggregate more frames per pixel column.",
    ),
    ParamSpec(
        key="zoom_step", type=(int, float), default=2.0, min=1.0,
        min_exclusive=True,
        label="Zoom step",
        description="Factor applied per mouse-wheel notch or +/- key.",
    ),
    ParamSpec(
        key="max_zoom", type=(int, float), default=256, min=1,
        label="Maximum zoom",
    ),
    ParamSpec(
        key="show_center_line", type=bool, default=True,
        label="Show channel center lines",
    ),
]

PLAYBACK_PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="cursor_interval_ms", type=int, default=30, min=5, max=1000,
        label="Cursor update interval (ms)",
        description="How often the playback transport reports its position.",
    ),
]

DECODE_PARAMS: list[ParamSpec] = [
    ParamSpec(
        key="raw_channels", type=int, default=1, min=1,
        label="Raw PCM channels",
        description="Channel count assumed for headerless PCM files.",
    ),
    ParamSpec(
        key="raw_sample_rate", type=int, default=44100, min=1,
        label="Raw PCM sample rate (Hz)",
    ),
    ParamSpec(
        key="raw_dtype", type=str, default="<i2",
        choices=["<i2", ">i2", "<i4", ">i4", "<f4", "<f8", "u1"],
        label="Raw PCM sample format",
        description="numpy dtype string of headerless PCM samples.",
    ),
]

_SECTIONS: dict[str, list[ParamSpec]] = {
    "view": VIEW_PARAMS,
    "playback": PLAYBACK_PARAMS,
    "decode": DECODE_PARAMS,
}


def all_param_specs() -> list[ParamSpec]:
    specs: list[ParamSpec] = []
    for params in _SECTIONS.values():
        specs.extend(params)
    return specs


def default_config() -> dict[str, Any]:
    """Returns the built-in default configuration (flat)."""
    return {p.key: p.default for p in all_param_specs()}


def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
    """Merge multiple config dicts left-to-right; later values win."""
    result: dict[str, Any] = {}
    for cfg in configs:
        result.update(cfg)
    return result


def load_preset(path: str) -> dict[str, Any]:
    """
    Load a JSON preset file. Returns a partial config dict.
    Raises ConfigError if the file cannot be read or parsed.
    """
    if not os.path.isfile(path):
        raise ConfigError(f"Preset file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in preset file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Cannot read preset file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Preset file must contain a JSON object, got {type(data).__name__}")

    return {k: v for k, v in data.items() if k not in ("schema_version", "_description")}


def save_preset(config: dict[str, Any], path: str, *, description: str | None = None) -> None:
    """
    Save a config dict as a JSON preset file.
    Only values that differ from the defaults are written.
    """
    preset: dict[str, Any] = {"schema_version": PRESET_SCHEMA_VERSION}
    if description:
        preset["_description"] = description

    defaults = default_config()
    for k, v in config.items():
        if k.startswith("_"):
            continue
        if k in defaults and defaults[k] == v:
            continue
        preset[k] = v

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(preset, f, indent=4, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Validation  (ParamSpec-driven)
# ---------------------------------------------------------------------------

def validate_param_values(
    params: list[ParamSpec],
    values: dict[str, Any],
) -> list[ConfigFieldError]:
    """Validate *values* against a list of :class:`ParamSpec` definitions.

    Only keys present in *values* are checked; missing keys are not errors
    (they will receive their default).
    """
    errors: list[ConfigFieldError] = []

    for spec in params:
        if spec.key not in values:
            continue

        value = values[spec.key]

        if value is None:
            errors.append(ConfigFieldError(
                spec.key, value, f"{spec.label} must not be empty.",
            ))
            continue

        # -- type (bool ⊄ int guard) --
        expected = spec.type
        if expected is not bool and isinstance(value, bool):
            errors.append(ConfigFieldError(
                spec.key, value,
                f"{spec.label} must be {_type_label(expected)}, got boolean.",
            ))
            continue
        if not isinstance(value, expected):
            errors.append(ConfigFieldError(
                spec.key, value,
                f"{spec.label} must be {_type_label(expected)}, "
                f"got {type(value).__name__}.",
            ))
            continue

        if spec.choices is not None and value not in spec.choices:
            opts = ", ".join(repr(c) for c in spec.choices)
            errors.append(ConfigFieldError(
                spec.key, value, f"{spec.label} must be one of {opts}.",
            ))
            continue

        # -- numeric range --
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if spec.min is not None:
                if spec.min_exclusive and value <= spec.min:
                    errors.append(ConfigFieldError(
                        spec.key, value,
                        f"{spec.label} must be greater than {spec.min}.",
                    ))
                    continue
                if not spec.min_exclusive and value < spec.min:
                    errors.append(ConfigFieldError(
                        spec.key, value,
                        f"{spec.label} must be at least {spec.min}.",
                    ))
                    continue
            if spec.max is not None and value > spec.max:
                errors.append(ConfigFieldError(
                    spec.key, value,
                    f"{spec.label} must be at most {spec.max}.",
                ))

    return errors


def validate_config_fields(config: dict[str, Any]) -> list[ConfigFieldError]:
    """Validate a **flat** config dict.  Never raises."""
    return validate_param_values(all_param_specs(), config)


def validate_config(config: dict[str, Any]) -> None:
    """Validate a flat config dict.

    Raises :class:`ConfigError` listing every invalid field.
    """
    errors = validate_config_fields(config)
    if errors:
        lines = [e.message for e in errors]
        raise ConfigError(
            "Configuration has invalid values:\n  • " + "\n  • ".join(lines)
        )


# ---------------------------------------------------------------------------
# Structured config  (GUI config file format)
# ---------------------------------------------------------------------------

def build_structured_defaults() -> dict[str, Any]:
    """Defaults organized by section: ``{"view": {...}, "playback": {...}, "decode": {...}}``."""
    return {
        name: {p.key: p.default for p in params}
        for name, params in _SECTIONS.items()
    }


def flatten_structured_config(structured: dict[str, Any]) -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for name in _SECTIONS:
        section = structured.get(name, {})
        if isinstance(section, dict):
            flat.update(section)
    return flat


def validate_structured_config(
    structured: dict[str, Any],
) -> list[ConfigFieldError]:
    """Validate section by section; keys are prefixed, e.g. ``"view.zoom_step"``."""
    errors: list[ConfigFieldError] = []
    for name, params in _SECTIONS.items():
        section = structured.get(name, {})
        if not isinstance(section, dict):
            errors.append(ConfigFieldError(
                name, section, f"Section '{name}' must be a JSON object.",
            ))
            continue
        for err in validate_param_values(params, section):
            errors.append(ConfigFieldError(
                f"{name}.{err.key}", err.value, err.message,
            ))
    return errors


def _type_label(t) -> str:
    """Human-readable label for an expected type or tuple of types."""
    if isinstance(t, tuple):
        return " or ".join(x.__name__ for x in t)
    return t.__name__
