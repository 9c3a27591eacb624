"""Suspend a session to a JSON file and resume it later."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Union

from salvo_game.core.clock import Clock
from salvo_game.core.errors import DomainError
from salvo_game.core.session import GameSession

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def save_game(path: PathLike, session: GameSession) -> Path:
    """Write the session's resumable record to ``path``.

    Unlike user preferences, a save that cannot be written is an error the
    caller needs to hear about, so filesystem errors propagate.
    """

    target = Path(path)
    record = session.save_state()
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8") as handle:
        json.dump(record, handle, indent=2, sort_keys=True)
    logger.debug("Saved game to %s", target)
    return target


def load_game(path: PathLike, *, clock: Optional[Clock] = None) -> GameSession:
    """Rebuild a session from a file written by :func:`save_game`."""

    source = Path(path)
    with source.open("r", encoding="utf-8") as handle:
        try:
            record = json.load(handle)
        except json.JSONDecodeError as exc:
            raise DomainError(f"save file {source} is not valid JSON: {exc}") from exc
    if not isinstance(record, dict):
        raise DomainError(f"save file {source} does not hold a game record")
    logger.debug("Loaded game from %s", source)
    return GameSession.restore(record, clock=clock)


__all__ = ["load_game", "save_game"]
