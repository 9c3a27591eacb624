"""State carried across rounds: cash, earnings, armories and the leaderboard.

The Cosmos outlives every :class:`~salvo_game.core.round.Round`. Players in a
round hold a reference to their :class:`PlayerInfo`, so purchases and
rewards made during a round land directly in the cross-round ledger.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from salvo_game.core.errors import DomainError, InsufficientFundsError
from salvo_game.core.weapons import MINIMUM_WEAPON_COST, WEAPONS, Armory, WeaponKind

logger = logging.getLogger(__name__)


@dataclass
class PlayerInfo:
    """Player information which is preserved across rounds."""

    cash: int
    earnings: int = 0
    armory: Armory = field(default_factory=Armory.from_default)

    @classmethod
    def from_initial(cls, starting_cash: int) -> "PlayerInfo":
        return cls(cash=starting_cash)

    def can_afford(self, amount: int) -> bool:
        return 0 <= amount <= self.cash

    def can_buy_something(self) -> bool:
        return self.cash >= MINIMUM_WEAPON_COST

    def spend_money(self, amount: int) -> None:
        if amount < 0:
            raise DomainError(f"spend_money: negative amount {amount}")
        if self.cash < amount:
            raise InsufficientFundsError(self.cash, amount)
        self.cash -= amount

    def earn_money(self, amount: int) -> None:
        """Credit a reward; penalties reduce earnings but never cash."""

        if amount < 0:
            self.earnings += amount
        else:
            self.cash += amount
            self.earnings += amount

    def buy_weapon(self, kind: WeaponKind) -> int:
        """Buy one bundle of ``kind``; returns the number of units added."""

        spec = WEAPONS[kind]
        self.spend_money(spec.price)
        self.armory.add(kind, spec.bundle)
        logger.debug("Bought %d x %s for $%d", spec.bundle, spec.name, spec.price)
        return spec.bundle

    def to_record(self) -> Dict[str, Any]:
        return {
            "money": self.cash,
            "earnings": self.earnings,
            "armory": self.armory.to_record(),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "PlayerInfo":
        return cls(
            cash=int(record["money"]),
            earnings=int(record["earnings"]),
            armory=Armory.from_record(record["armory"]),
        )


class Cosmos:
    """Owns all game state that is preserved across rounds."""

    def __init__(self, cur_round: int, num_rounds: int, player_info: Sequence[PlayerInfo]) -> None:
        if num_rounds < 1:
            raise DomainError(f"a match needs at least one round, got {num_rounds}")
        self.cur_round = cur_round
        self.num_rounds = num_rounds
        self.player_info: List[PlayerInfo] = list(player_info)

    @classmethod
    def from_initial(cls, num_rounds: int, num_players: int, starting_cash: int) -> "Cosmos":
        infos = [PlayerInfo.from_initial(starting_cash) for _ in range(num_players)]
        return cls(cur_round=1, num_rounds=num_rounds, player_info=infos)

    def more_rounds_remaining(self) -> bool:
        return self.cur_round < self.num_rounds

    def next_round(self) -> None:
        if not self.more_rounds_remaining():
            raise DomainError(f"round {self.cur_round} of {self.num_rounds} was the last one")
        self.cur_round += 1

    def armory(self, index: int) -> Armory:
        return self.player_info[index].armory

    def to_record(self) -> Dict[str, Any]:
        return {
            "cur_round": self.cur_round,
            "num_rounds": self.num_rounds,
            "players": [info.to_record() for info in self.player_info],
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Cosmos":
        infos = [PlayerInfo.from_record(data) for data in record["players"]]
        return cls(int(record["cur_round"]), int(record["num_rounds"]), infos)


# ----------------------------------------------------------------------
# Leaderboard


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    earnings: int
    color: str
    rgb: int


class Leaderboard:
    """Players ranked by total earnings, best first."""

    def __init__(self, entries: Sequence[LeaderboardEntry]) -> None:
        self.entries: Tuple[LeaderboardEntry, ...] = tuple(
            sorted(entries, key=lambda e: (-e.earnings, e.name, e.color))
        )

    @classmethod
    def build(cls, cosmos: Cosmos, players: Sequence[Any]) -> "Leaderboard":
        if len(cosmos.player_info) != len(players):
            raise DomainError(
                "must have len(cosmos.player_info) == len(players), "
                f"got {len(cosmos.player_info)} and {len(players)}"
            )
        entries = [
            LeaderboardEntry(
                name=player.name,
                earnings=info.earnings,
                color=player.color,
                rgb=player.rgb,
            )
            for info, player in zip(cosmos.player_info, players)
        ]
        return cls(entries)

    def __len__(self) -> int:
        return len(self.entries)

    def tie_for_winner(self) -> bool:
        if len(self.entries) < 2:
            return False
        return self.entries[0].earnings == self.entries[1].earnings

    def winners(self) -> List[LeaderboardEntry]:
        if not self.entries:
            raise DomainError("winner_text: no entries in the leaderboard")
        best = self.entries[0].earnings
        return [entry for entry in self.entries if entry.earnings == best]

    def winner_text(self) -> str:
        names = [entry.name for entry in self.winners()]
        if len(names) == 1:
            return names[0]
        return ", ".join(names[:-1]) + " and " + names[-1]

    def winner_color(self, default: int = 0xFFFFFF) -> int:
        if not self.entries or self.tie_for_winner():
            return default
        return self.entries[0].rgb

    def leader(self) -> Optional[LeaderboardEntry]:
        return self.entries[0] if self.entries else None


__all__ = ["Cosmos", "Leaderboard", "LeaderboardEntry", "PlayerInfo"]
