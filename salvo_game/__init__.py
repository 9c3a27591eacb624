"""Top-level package for the Salvo artillery game."""

__version__ = "1.0.0"

from salvo_game.core import (
    GameSession,
    GameSettings,
    ManualClock,
    PlayerSetup,
    RenderSnapshot,
    WeaponKind,
    default_roster,
    load_game,
    save_game,
)

__all__ = [
    "GameSession",
    "GameSettings",
    "ManualClock",
    "PlayerSetup",
    "RenderSnapshot",
    "WeaponKind",
    "default_roster",
    "load_game",
    "save_game",
]

__all__.append("__version__")

try:
    from salvo_game.pygame import SalvoApp, run_pygame  # type: ignore[misc]
except (ImportError, RuntimeError):
    SalvoApp = None

    def run_pygame(*_args, **_kwargs):  # type: ignore[override]
        raise RuntimeError(
            "The pygame front-end requires the optional pygame dependency. "
            "Install pygame to enable graphical gameplay."
        )

__all__.extend(["SalvoApp", "run_pygame"])
