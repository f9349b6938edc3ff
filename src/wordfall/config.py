from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import yaml

from wordfall.log import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG: Dict[str, Any] = {
    "data_root": "~/.wordfall",
    "log_level": "INFO",
    "display": {
        "fullscreen": False,
        "width": 1280,
        "height": 800,
        "fps": 60,
    },
    "text": {
        "font_name": "serif",
        "min_font_size": 14,
        "max_font_size": 24,
        "font_scale": 0.022,
        "region_fraction": 0.625,
        "line_spacing": 1.25,
        "space_scale": 0.68,
        "tab_spaces": 5,
        "overflow_fraction": 0.05,
    },
    "handoff": {
        # Frames without a keystroke before the words are handed off.
        "idle_ticks": 500,
        "wall_thickness": 10,
        "wall_margin": 100,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(value, dict)
        ):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _candidate_config_paths() -> list[Path]:
    env_path = os.environ.get("WORDFALL_CONFIG")
    paths = []
    if env_path:
        paths.append(Path(env_path))
    paths.extend([
        Path("config.yaml"),
        Path("/etc/wordfall/config.yaml"),
    ])
    return paths


def load_config() -> Dict[str, Any]:
    config = dict(DEFAULT_CONFIG)
    for path in _candidate_config_paths():
        if path.exists():
            try:
                with path.open("r", encoding="utf-8") as handle:
                    data = yaml.safe_load(handle) or {}
            except (OSError, yaml.YAMLError) as exc:
                logger.warning("Ignoring unreadable config %s: %s", path, exc)
                break
            if isinstance(data, dict):
                config = _deep_merge(config, data)
            logger.debug("Loaded config from %s", path)
            break
    return config
