from typing import Callable

import pytest

from salvo_game.core.brain import HumanBrain
from salvo_game.core.clock import ManualClock
from salvo_game.core.context import GameContext
from salvo_game.core.cosmos import PlayerInfo
from salvo_game.core.player import Player
from salvo_game.core.round import Round
from salvo_game.core.settings import HUMAN, GameSettings, PlayerSetup
from salvo_game.core.terrain import Terrain, TerrainSettings


@pytest.fixture
def flat_terrain() -> Terrain:
    """Provide deterministic flat terrain for gameplay tests."""

    return Terrain.flat(200, 50.0, max_y=100.0)


@pytest.fixture
def make_player() -> Callable[..., Player]:
    def factory(
        player_id: int,
        x: int,
        terrain: Terrain,
        *,
        life: int = 100,
        angle: int = 90,
        cash: int = 20_000,
        name: str = "",
        color: str = "red",
    ) -> Player:
        return Player(
            id=player_id,
            name=name or f"P{player_id}",
            color=color,
            x=x,
            y=terrain.height_at(x),
            info=PlayerInfo.from_initial(cash),
            brain=HumanBrain(),
            life=life,
            angle=angle,
        )

    return factory


@pytest.fixture
def two_player_round(flat_terrain: Terrain, make_player) -> Round:
    players = [
        make_player(0, 40, flat_terrain, angle=45, color="red"),
        make_player(1, 160, flat_terrain, angle=135, color="blue"),
    ]
    return Round(flat_terrain, players)


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def duel_settings() -> GameSettings:
    return GameSettings(
        num_rounds=2,
        max_wind=0,
        buy_phase=False,
        computer_think_millis=0,
        random_placement=False,
        seed=7,
        terrain=TerrainSettings(width=200, max_y=100.0, min_height=50, max_height=50, style="flat"),
    )


@pytest.fixture
def duel_roster() -> list:
    return [
        PlayerSetup("Alpha", HUMAN, 100, "red"),
        PlayerSetup("Bravo", HUMAN, 100, "blue"),
    ]


@pytest.fixture
def duel_context(duel_settings, duel_roster, manual_clock) -> GameContext:
    """Two humans on flat ground at columns 66 and 133, no wind."""

    return GameContext.new_match(duel_settings, duel_roster, clock=manual_clock)
