from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Tuple

import yaml

logger = logging.getLogger(__name__)

CHUNK_MODE = "chunk"
PARAGRAPH_MODE = "paragraph"
READING_MODES = (CHUNK_MODE, PARAGRAPH_MODE)

# Inclusive bounds applied to every numeric setting before use.
SETTING_RANGES: Dict[str, Tuple[float, float]] = {
    "fixation": (0.2, 0.8),
    "saccade": (0.5, 1.5),
    "opacity": (0.3, 1.0),
    "speed": (0.5, 10.0),
    "max_words_per_chunk": (3, 20),
}

# camelCase names used by settings files written for the web reader.
SETTING_ALIASES = {
    "maxWordsPerChunk": "max_words_per_chunk",
    "readingMode": "reading_mode",
}


@dataclass(slots=True, frozen=True)
class ReaderSettings:
    """Immutable snapshot of the reader configuration."""

    fixation: float = 0.5
    saccade: float = 1.0
    opacity: float = 1.0
    speed: float = 2.5
    max_words_per_chunk: int = 10
    reading_mode: str = CHUNK_MODE

    def to_dict(self) -> dict[str, Any]:
        """Return a mutable dictionary representation of the settings."""
        return dict(asdict(self))


ACCESSIBILITY_PRESETS: Dict[str, Dict[str, float]] = {
    "dyslexia": {
        "fixation": 0.7,
        "saccade": 1.2,
        "opacity": 0.9,
        "speed": 3.0,
        "max_words_per_chunk": 5,
    },
    "adhd": {
        "fixation": 0.6,
        "saccade": 0.8,
        "opacity": 1.0,
        "speed": 1.8,
        "max_words_per_chunk": 8,
    },
    "default": {
        "fixation": 0.5,
        "saccade": 1.0,
        "opacity": 1.0,
        "speed": 2.5,
        "max_words_per_chunk": 10,
    },
}


def normalize_key(key: str) -> str:
    """Map camelCase aliases onto the dataclass field names."""
    return SETTING_ALIASES.get(key, key)


def validate_setting(settings: ReaderSettings, key: str, value: Any) -> Any:
    """
    Return the validated value for ``key``.

    Numeric values are clamped to their range. Anything that cannot be parsed
    falls back to the value currently held by ``settings``.
    """
    name = normalize_key(key)
    if name not in _FIELD_NAMES:
        raise KeyError(f"Unknown setting '{key}'.")
    previous = getattr(settings, name)

    if name == "reading_mode":
        mode = str(value).strip().lower() if value is not None else ""
        if mode in READING_MODES:
            return mode
        logger.debug("Ignoring unknown reading mode %r; keeping %r", value, previous)
        return previous

    parsed = _parse_number(value)
    if parsed is None:
        logger.debug("Ignoring invalid %s=%r; keeping %r", name, value, previous)
        return previous
    low, high = SETTING_RANGES[name]
    if name == "max_words_per_chunk":
        # Round half up, then clamp to whole words.
        return int(max(low, min(high, math.floor(parsed + 0.5))))
    return max(low, min(high, parsed))


def update_settings(
    settings: ReaderSettings, changes: Mapping[str, Any] | None
) -> ReaderSettings:
    """Return a new settings snapshot with every change validated."""
    if not changes:
        return settings
    validated: dict[str, Any] = {}
    for key, value in changes.items():
        name = normalize_key(key)
        if name not in _FIELD_NAMES:
            logger.debug("Skipping unknown setting %r", key)
            continue
        validated[name] = validate_setting(settings, name, value)
    return replace(settings, **validated)


def clamp_settings(settings: ReaderSettings) -> ReaderSettings:
    """Re-validate a snapshot that may have been constructed directly."""
    return update_settings(ReaderSettings(), settings.to_dict())


def apply_preset(settings: ReaderSettings, name: str) -> ReaderSettings:
    """Overlay an accessibility preset, keeping the current reading mode."""
    preset = ACCESSIBILITY_PRESETS.get(name.lower().strip())
    if preset is None:
        known = ", ".join(sorted(ACCESSIBILITY_PRESETS))
        raise ValueError(f"Unknown preset '{name}'. Expected one of: {known}.")
    return update_settings(settings, preset)


def config_from_dict(data: Mapping[str, Any] | None) -> ReaderSettings:
    """Build ReaderSettings from a dictionary-like input."""
    settings = ReaderSettings()
    if data is None:
        return settings
    preset = data.get("preset")
    if preset:
        settings = apply_preset(settings, str(preset))
    return update_settings(settings, {k: v for k, v in data.items() if k != "preset"})


def config_from_yaml(path: str | Path) -> ReaderSettings:
    """Load settings from a YAML file."""
    contents = Path(path).read_text(encoding="utf-8")
    parsed = yaml.safe_load(contents) or {}
    if not isinstance(parsed, MutableMapping):
        raise ValueError("Configuration YAML must define a mapping.")
    return config_from_dict(parsed)


def load_config(path: str | Path | None = None) -> ReaderSettings:
    """Load settings from YAML when provided, otherwise return defaults."""
    if path is None:
        return ReaderSettings()
    return config_from_yaml(path)


def _parse_number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


_FIELD_NAMES = frozenset(field.name for field in fields(ReaderSettings))
