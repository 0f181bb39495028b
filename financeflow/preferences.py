"""Lightweight persistent store for local user preferences.

Holds the theme choice between runs. Session tokens are kept per client by
the backend and never written here.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

try:
    from .config import PREFERENCES_PATH
except ImportError:
    from config import PREFERENCES_PATH

THEMES = ('light', 'dark')
DEFAULT_PREFERENCES: Dict[str, Any] = {
    'theme': 'light',
}


def load_preferences(path: Path | None = None) -> Dict[str, Any]:
    target = path or PREFERENCES_PATH
    if not target.exists():
        return DEFAULT_PREFERENCES.copy()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError):
        return DEFAULT_PREFERENCES.copy()
    if not isinstance(data, dict):
        return DEFAULT_PREFERENCES.copy()
    merged = DEFAULT_PREFERENCES.copy()
    merged.update({k: v for k, v in data.items() if k in DEFAULT_PREFERENCES})
    if merged['theme'] not in THEMES:
        merged['theme'] = DEFAULT_PREFERENCES['theme']
    return merged


def save_preferences(preferences: Dict[str, Any], path: Path | None = None) -> None:
    target = path or PREFERENCES_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open('w', encoding='utf-8') as handle:
        json.dump(preferences, handle, indent=2, sort_keys=True)


def update_preferences(path: Path | None = None, **changes: Any) -> Dict[str, Any]:
    """Merge ``changes`` into the stored preferences and write them back."""
    preferences = load_preferences(path)
    preferences.update({k: v for k, v in changes.items() if k in DEFAULT_PREFERENCES})
    save_preferences(preferences, path)
    return preferences


def load_theme(path: Path | None = None) -> str:
    return load_preferences(path)['theme']


def save_theme(theme: str, path: Path | None = None) -> None:
    if theme not in THEMES:
        raise ValueError(f"Unknown theme: {theme!r}")
    update_preferences(path, theme=theme)
