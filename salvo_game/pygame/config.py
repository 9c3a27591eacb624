"""Persistent configuration helpers for the pygame client."""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Tuple

from salvo_game.core.settings import MAX_PLAYERS, GameSettings, PlayerSetup, default_roster
from salvo_game.core.terrain import TERRAIN_STYLES

_SETTINGS_PATH = Path.home() / ".salvo" / "user_settings.json"
_SAVE_PATH = Path.home() / ".salvo" / "quicksave.json"


def settings_path() -> Path:
    return _SETTINGS_PATH


def quicksave_path() -> Path:
    return _SAVE_PATH


def load_user_settings() -> Dict[str, Any]:
    """Load persisted user settings from disk."""
    try:
        with _SETTINGS_PATH.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
            if isinstance(data, dict):
                return data
    except FileNotFoundError:
        return {}
    except json.JSONDecodeError:
        return {}
    except OSError:
        return {}
    return {}


def save_user_settings(settings: Dict[str, Any]) -> None:
    """Persist user settings to disk, ignoring filesystem errors."""
    try:
        _SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
        with _SETTINGS_PATH.open("w", encoding="utf-8") as handle:
            json.dump(settings, handle, indent=2, sort_keys=True)
    except OSError:
        # Persistence errors are non-fatal for gameplay; ignore quietly.
        pass


def match_from_user_settings(
    data: Dict[str, Any],
    settings: GameSettings,
) -> Tuple[GameSettings, List[PlayerSetup]]:
    """Apply stored preferences on top of ``settings``.

    Unknown or out-of-range values are ignored rather than trusted.
    """

    num_rounds = data.get("num_rounds")
    if isinstance(num_rounds, int) and 1 <= num_rounds <= 100:
        settings = replace(settings, num_rounds=num_rounds)
    style = data.get("terrain_style")
    if style in TERRAIN_STYLES:
        settings = replace(settings, terrain=replace(settings.terrain, style=style))
    num_players = data.get("num_players")
    if not isinstance(num_players, int) or not 2 <= num_players <= MAX_PLAYERS:
        num_players = 2
    return settings, default_roster()[:num_players]


def user_settings_for(settings: GameSettings, roster: List[PlayerSetup]) -> Dict[str, Any]:
    return {
        "num_rounds": int(settings.num_rounds),
        "num_players": len(roster),
        "terrain_style": settings.terrain.style,
    }


__all__ = [
    "load_user_settings",
    "match_from_user_settings",
    "quicksave_path",
    "save_user_settings",
    "settings_path",
    "user_settings_for",
]
