"""The single owned context threaded through every state's ``tick``."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import List, Optional

from salvo_game.core.clock import Clock, SystemClock
from salvo_game.core.cosmos import Cosmos, Leaderboard
from salvo_game.core.damage import DamageReport
from salvo_game.core.round import Round
from salvo_game.core.settings import GameSettings, PlayerSetup

logger = logging.getLogger(__name__)


@dataclass
class GameContext:
    """Everything the game states read and mutate."""

    settings: GameSettings
    roster: List[PlayerSetup]
    cosmos: Cosmos
    round: Round
    clock: Clock = field(default_factory=SystemClock)
    rng: random.Random = field(default_factory=random.Random)
    message: str = ""
    match_over: bool = False
    leaderboard: Optional[Leaderboard] = None
    last_report: Optional[DamageReport] = None

    @classmethod
    def new_match(
        cls,
        settings: GameSettings,
        roster: List[PlayerSetup],
        *,
        clock: Optional[Clock] = None,
    ) -> "GameContext":
        rng = random.Random(settings.seed)
        cosmos = Cosmos.from_initial(settings.num_rounds, len(roster), settings.starting_cash)
        round_ = Round.create(settings, cosmos, roster, rng)
        return cls(
            settings=settings,
            roster=list(roster),
            cosmos=cosmos,
            round=round_,
            clock=clock or SystemClock(),
            rng=rng,
        )

    def now(self) -> int:
        return self.clock.now_millis()

    def start_next_round(self) -> None:
        self.cosmos.next_round()
        logger.debug("Advancing to round %d of %d", self.cosmos.cur_round, self.cosmos.num_rounds)
        self.round = Round.create(self.settings, self.cosmos, self.roster, self.rng)
        self.leaderboard = None
        self.last_report = None


__all__ = ["GameContext"]
