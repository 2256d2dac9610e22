"""
YAML -> settings loader.

Loads tunable settings from settings.yaml (bundled with the package) and
optionally merges user overrides from <data dir>/settings.yaml, where the
data directory is $GYM_TRACKER_HOME or ~/.gym-tracker.

Usage:
    from gym_tracker.core.config_loader import load_settings
    cfg = load_settings()
    divisor = cfg.get("metrics", {}).get("epley_divisor", 30.0)

If the user override file exists but cannot be parsed, a warning is issued
and the file is ignored.
"""

from __future__ import annotations

import importlib.resources
import os
import warnings
from pathlib import Path
from typing import Any

import yaml

from .config import (
    DATA_DIR_ENV,
    DEFAULT_DATA_DIR,
    EPLEY_DIVISOR,
    OVERLOAD_NOTABLE_MAX,
    OVERLOAD_PLATEAU_MAX,
    OVERLOAD_SLIGHT_MAX,
)

SETTINGS_FILENAME = "settings.yaml"

# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML mapping; raises on unreadable or malformed files."""
    with open(path, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping")
    return data


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_home_dir() -> Path:
    """Return the gym-tracker home directory ($GYM_TRACKER_HOME or ~/.gym-tracker)."""
    override = os.environ.get(DATA_DIR_ENV)
    return Path(override).expanduser() if override else DEFAULT_DATA_DIR


def get_bundled_yaml_path() -> Path:
    """Return the path to the bundled settings.yaml."""
    ref = importlib.resources.files("gym_tracker").joinpath(SETTINGS_FILENAME)
    return Path(str(ref))


def get_user_yaml_path() -> Path | None:
    """Return <home>/settings.yaml if it exists, else None."""
    p = get_home_dir() / SETTINGS_FILENAME
    return p if p.exists() else None


def load_settings(user_path: Path | None = None) -> dict[str, Any]:
    """
    Load and merge settings from YAML sources.

    Load order (later overrides earlier):
    1. Bundled src/gym_tracker/settings.yaml
    2. User override (``user_path`` or <home>/settings.yaml)

    Args:
        user_path: Explicit override file; defaults to the one in the home dir

    Returns:
        Merged dict of settings sections
    """
    config: dict[str, Any] = {}

    bundled = get_bundled_yaml_path()
    if bundled.exists():
        config = _deep_merge(config, _load_yaml_file(bundled))

    user = user_path if user_path is not None else get_user_yaml_path()
    if user is not None and user.exists():
        try:
            config = _deep_merge(config, _load_yaml_file(user))
        except (OSError, ValueError, yaml.YAMLError) as exc:
            warnings.warn(
                f"gym-tracker: ignoring settings override {user} ({exc})",
                stacklevel=2,
            )

    return config


def epley_divisor(cfg: dict[str, Any]) -> float:
    """Rep divisor for the one-rep-max estimate."""
    return float(cfg.get("metrics", {}).get("epley_divisor", EPLEY_DIVISOR))


def overload_thresholds(cfg: dict[str, Any]) -> tuple[float, float, float]:
    """(plateau, slight, notable) upper bounds on |overload score| in percent."""
    bands = cfg.get("overload_bands", {})
    return (
        float(bands.get("plateau", OVERLOAD_PLATEAU_MAX)),
        float(bands.get("slight", OVERLOAD_SLIGHT_MAX)),
        float(bands.get("notable", OVERLOAD_NOTABLE_MAX)),
    )


def data_dir(cfg: dict[str, Any]) -> Path:
    """
    Directory holding the persisted snapshots.

    $GYM_TRACKER_HOME wins, then ``storage.data_dir`` from settings, then
    ~/.gym-tracker.
    """
    if os.environ.get(DATA_DIR_ENV):
        return get_home_dir()
    configured = cfg.get("storage", {}).get("data_dir")
    if configured:
        return Path(configured).expanduser()
    return DEFAULT_DATA_DIR
