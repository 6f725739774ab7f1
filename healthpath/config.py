from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "config.yaml"
CONFIG_ENV_VAR = "HEALTHPATH_CONFIG"

DEFAULTS: Dict[str, Any] = {
    "storage": {
        "backend": "memory",  # memory | json | sql
        "key": "healthpath_user_profile",
        "path": "./outputs/storage.json",
        "db_url": "sqlite:///./outputs/healthpath.db",
    },
    "events": {
        "profile_updated": "reportsUpdated",
    },
    "growth": {
        "reference": {},
        "bmi": {"underweight_below": 15.0, "overweight_above": 22.0},
    },
    "reminders": {
        "window_days": 7,
    },
    "ai": {
        "model": "gemini-2.5-flash",
        "base_url": "https://generativelanguage.googleapis.com/v1beta",
        "timeout": 60,
        "api_key_env": "GEMINI_API_KEY",
    },
    "logging": {
        "level": "INFO",
        "format": "console",
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(path: Optional[str | Path] = None) -> Dict[str, Any]:
    """
    Load configs/config.yaml (or HEALTHPATH_CONFIG, or `path`) over DEFAULTS.
    A file that was asked for explicitly must exist; the default one may be absent.
    """
    explicit = path or os.environ.get(CONFIG_ENV_VAR)
    cfg_path = Path(explicit) if explicit else DEFAULT_CONFIG_PATH

    if not cfg_path.exists():
        if explicit:
            raise FileNotFoundError(f"{cfg_path} not found")
        return copy.deepcopy(DEFAULTS)

    with cfg_path.open("r", encoding="utf-8") as f:
        loaded = yaml.safe_load(f) or {}
    if not isinstance(loaded, dict):
        raise ValueError(f"{cfg_path} must contain a mapping at the top level")
    return _deep_merge(DEFAULTS, loaded)
