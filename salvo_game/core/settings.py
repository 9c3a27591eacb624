"""Match configuration and the roster of players taking part."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from salvo_game.core.player import (
    COLORS,
    DEFAULT_STARTING_LIFE,
    MAX_NAME_LENGTH,
    MAX_STARTING_LIFE,
    MIN_STARTING_LIFE,
)
from salvo_game.core.terrain import TerrainSettings

HUMAN = "human"
COMPUTER_EASY = "computer_easy"
COMPUTER_MEDIUM = "computer_medium"
COMPUTER_HARD = "computer_hard"
PLAYER_KINDS = (HUMAN, COMPUTER_EASY, COMPUTER_MEDIUM, COMPUTER_HARD)

MAX_PLAYERS = 8


@dataclass
class GameSettings:
    """Options chosen before a match starts."""

    num_rounds: int = 3
    starting_cash: int = 20_000
    max_wind: int = 10
    buy_phase: bool = True
    computer_think_millis: int = 600
    round_win_reward: int = 5_000
    kill_reward: int = 2_500
    random_placement: bool = True
    seed: Optional[int] = None
    terrain: TerrainSettings = field(default_factory=TerrainSettings)

    def to_record(self) -> Dict[str, Any]:
        data = dict(vars(self))
        data["terrain"] = dict(vars(self.terrain))
        return data

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "GameSettings":
        values = dict(record)
        terrain = TerrainSettings(**values.pop("terrain", {}))
        return cls(terrain=terrain, **values)


@dataclass
class PlayerSetup:
    """One entry of the pre-game player list."""

    name: str
    kind: str = HUMAN
    starting_life_percent: int = 100
    color: str = "red"

    def __post_init__(self) -> None:
        self.name = self.name[:MAX_NAME_LENGTH]
        if self.kind not in PLAYER_KINDS:
            raise ValueError(f"Unknown player kind '{self.kind}'")
        if self.color not in COLORS:
            raise ValueError(f"Unknown player color '{self.color}'")

    @property
    def starting_life(self) -> int:
        life = DEFAULT_STARTING_LIFE * self.starting_life_percent // 100
        return max(MIN_STARTING_LIFE, min(MAX_STARTING_LIFE, life))


def default_roster() -> List[PlayerSetup]:
    return [
        PlayerSetup("Red", HUMAN, 100, "red"),
        PlayerSetup("Yellow", COMPUTER_EASY, 100, "yellow"),
        PlayerSetup("Green", COMPUTER_MEDIUM, 100, "green"),
        PlayerSetup("Cyan", COMPUTER_HARD, 90, "cyan"),
        PlayerSetup("Blue", COMPUTER_HARD, 100, "blue"),
        PlayerSetup("Pink", COMPUTER_HARD, 75, "pink"),
        PlayerSetup("Purple", COMPUTER_HARD, 75, "purple"),
        PlayerSetup("Grey", COMPUTER_HARD, 75, "grey"),
    ]


__all__ = [
    "COMPUTER_EASY",
    "COMPUTER_HARD",
    "COMPUTER_MEDIUM",
    "GameSettings",
    "HUMAN",
    "MAX_PLAYERS",
    "PLAYER_KINDS",
    "PlayerSetup",
    "default_roster",
]
