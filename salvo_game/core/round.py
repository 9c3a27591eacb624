"""A single round: the terrain, the players on it and whose turn it is."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence

from salvo_game.core.brain import brain_for_kind
from salvo_game.core.cosmos import Cosmos
from salvo_game.core.damage import DamageResolver
from salvo_game.core.errors import DomainError
from salvo_game.core.player import Player
from salvo_game.core.settings import GameSettings, PlayerSetup
from salvo_game.core.terrain import Terrain

logger = logging.getLogger(__name__)

INVALID_PLAYER_ID = -1


@dataclass(frozen=True)
class NextTurnInfo:
    """Answer to "who goes next?"."""

    next_player_id: Optional[int] = None
    winner_id: Optional[int] = None
    is_draw: bool = False

    @property
    def round_over(self) -> bool:
        return self.is_draw or self.winner_id is not None


class Round:
    """State of one round of combat. Rebuilt from scratch every round."""

    def __init__(
        self,
        terrain: Terrain,
        players: Sequence[Player],
        wind: int = 0,
        cur_player_id: int = INVALID_PLAYER_ID,
    ) -> None:
        if not players:
            raise DomainError("a round needs at least one player")
        self.terrain = terrain
        self.players: List[Player] = list(players)
        self.wind = wind
        self.cur_player_id = cur_player_id

    @classmethod
    def create(
        cls,
        settings: GameSettings,
        cosmos: Cosmos,
        roster: Sequence[PlayerSetup],
        rng: random.Random,
    ) -> "Round":
        if len(roster) != len(cosmos.player_info):
            raise DomainError(
                f"roster has {len(roster)} players but the cosmos tracks {len(cosmos.player_info)}"
            )
        terrain_settings = settings.terrain
        if terrain_settings.seed is None:
            terrain_settings = replace(terrain_settings, seed=rng.randrange(1 << 30))
        terrain = Terrain(terrain_settings)

        count = len(roster)
        slots = [int(terrain.width * (i + 1) / (count + 1)) for i in range(count)]
        if settings.random_placement:
            rng.shuffle(slots)

        players: List[Player] = []
        for index, (setup, x) in enumerate(zip(roster, slots)):
            player = Player(
                id=index,
                name=setup.name,
                color=setup.color,
                x=x,
                y=terrain.height_at(x),
                info=cosmos.player_info[index],
                brain=brain_for_kind(setup.kind, seed=rng.randrange(1 << 30)),
                life=setup.starting_life,
                angle=45 if x < terrain.width // 2 else 135,
            )
            players.append(player)

        wind = rng.randint(-settings.max_wind, settings.max_wind) if settings.max_wind > 0 else 0
        logger.info(
            "Round %d of %d: %d players, wind %+d",
            cosmos.cur_round,
            cosmos.num_rounds,
            count,
            wind,
        )
        return cls(terrain, players, wind)

    # ------------------------------------------------------------------
    @property
    def cur_player(self) -> Player:
        if not 0 <= self.cur_player_id < len(self.players):
            raise DomainError(f"no current player (id {self.cur_player_id})")
        return self.players[self.cur_player_id]

    def alive_players(self) -> List[Player]:
        return [player for player in self.players if player.alive]

    def next_turn_info(self) -> NextTurnInfo:
        """Find the next player to act, or the round's outcome.

        Players are visited in cyclic order starting just after the current
        one. Pure: asking twice without a change in between gives the same
        answer.
        """

        alive = self.alive_players()
        if not alive:
            return NextTurnInfo(is_draw=True)
        if len(alive) == 1:
            return NextTurnInfo(winner_id=alive[0].id)
        count = len(self.players)
        for offset in range(1, count + 1):
            candidate = (self.cur_player_id + offset) % count
            if self.players[candidate].alive:
                return NextTurnInfo(next_player_id=candidate)
        raise DomainError("unreachable: live players exist but none was found")

    def resolver(self) -> DamageResolver:
        return DamageResolver(self.terrain, self.players)

    # ------------------------------------------------------------------
    def to_record(self) -> Dict[str, Any]:
        return {
            "cur_player": self.cur_player_id,
            "wind": self.wind,
            "terrain": {
                "max_y": self.terrain.max_y,
                "heights": list(self.terrain.heights),
            },
            "players": [player.to_record() for player in self.players],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any], cosmos: Cosmos, settings: GameSettings) -> "Round":
        player_records = record["players"]
        if len(player_records) != len(cosmos.player_info):
            raise DomainError(
                f"saved round has {len(player_records)} players but the cosmos tracks "
                f"{len(cosmos.player_info)}"
            )
        terrain_record = record["terrain"]
        terrain_settings = replace(settings.terrain, max_y=float(terrain_record["max_y"]))
        terrain = Terrain(terrain_settings, heights=terrain_record["heights"])
        players = [
            Player.from_record(index, data, cosmos.player_info[index])
            for index, data in enumerate(player_records)
        ]
        return cls(terrain, players, int(record["wind"]), int(record["cur_player"]))


__all__ = ["INVALID_PLAYER_ID", "NextTurnInfo", "Round"]
