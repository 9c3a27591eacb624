"""Decision makers attached to players: human input or a computer planner."""

from __future__ import annotations

import abc
import logging
import math
import random
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from salvo_game.core.ballistics import Collision, simulate_flight
from salvo_game.core.cosmos import PlayerInfo
from salvo_game.core.errors import DomainError
from salvo_game.core.player import MAX_POWER, MIN_POWER, Player, clamp_angle, clamp_power
from salvo_game.core.weapons import UNLIMITED, WEAPON_ORDER, WEAPONS, Armory, WeaponKind

if TYPE_CHECKING:
    from salvo_game.core.round import Round

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShotChoice:
    """A complete, fireable shot."""

    angle_deg: int
    power: int
    weapon: WeaponKind

    def validate(self, armory: Armory) -> "ShotChoice":
        if not armory.can_fire(self.weapon):
            raise DomainError(f"brain chose {self.weapon.value} with no ammunition left")
        return ShotChoice(clamp_angle(self.angle_deg), clamp_power(self.power), self.weapon)


class Brain(abc.ABC):
    """Supplies the aim, power and weapon for a player's turn."""

    kind: str = ""

    @property
    def is_human(self) -> bool:
        return False

    @abc.abstractmethod
    def choose_shot(self, round_: "Round", player: Player) -> ShotChoice:
        """Pick a shot without any user input."""

    def buy_weapons(self, info: PlayerInfo) -> List[WeaponKind]:
        return []

    def to_record(self) -> Dict[str, Any]:
        return {"kind": self.kind}


class HumanBrain(Brain):
    """Turns are driven by input signals handled in the HumanMove state."""

    kind = "human"

    @property
    def is_human(self) -> bool:
        return True

    def choose_shot(self, round_: "Round", player: Player) -> ShotChoice:
        raise DomainError(f"{player.name} is human and aims interactively")


@dataclass(frozen=True)
class Skill:
    angle_error: float
    power_error: float
    angle_step: int
    cash_reserve: float


SKILLS: Dict[str, Skill] = {
    "computer_easy": Skill(angle_error=12.0, power_error=150.0, angle_step=6, cash_reserve=0.75),
    "computer_medium": Skill(angle_error=5.0, power_error=60.0, angle_step=4, cash_reserve=0.5),
    "computer_hard": Skill(angle_error=1.0, power_error=10.0, angle_step=2, cash_reserve=0.25),
}


class ComputerBrain(Brain):
    """Searches candidate shots by simulating them against the current field."""

    power_samples: Tuple[int, ...] = (200, 400, 600, 800, MAX_POWER)
    planning_samples = 3000

    def __init__(self, kind: str = "computer_medium", seed: Optional[int] = None) -> None:
        if kind not in SKILLS:
            raise ValueError(f"Unknown computer skill '{kind}'")
        self.kind = kind
        self.skill = SKILLS[kind]
        self.seed = seed
        self._rng = random.Random(seed)

    def choose_shot(self, round_: "Round", player: Player) -> ShotChoice:
        weapon = self.pick_weapon(player.armory)
        targets = [other for other in round_.players if other.alive and other.id != player.id]
        if not targets:
            return ShotChoice(player.angle_deg, MIN_POWER, weapon)

        original_angle = player.angle_deg
        best: Optional[Tuple[float, int, int]] = None
        try:
            for angle in self._candidate_angles(player, targets):
                player.set_angle_deg(angle)
                for power in self.power_samples:
                    error = self._score(round_, player, targets, power, weapon)
                    if best is None or error < best[0]:
                        best = (error, angle, power)
        finally:
            player.set_angle_deg(original_angle)

        if best is None or math.isinf(best[0]):
            logger.debug("%s found no useful shot, firing blind", player.name)
            return ShotChoice(original_angle, MAX_POWER // 2, weapon)

        _, angle, power = best
        angle = clamp_angle(angle + self._rng.uniform(-1.0, 1.0) * self.skill.angle_error)
        power = clamp_power(power + self._rng.uniform(-1.0, 1.0) * self.skill.power_error)
        power = max(MIN_POWER, power)
        logger.debug("%s (%s) aims %d deg at power %d", player.name, self.kind, angle, power)
        return ShotChoice(angle, power, weapon)

    def pick_weapon(self, armory: Armory) -> WeaponKind:
        owned = [kind for kind in WEAPON_ORDER if armory.can_fire(kind)]
        if not owned:
            raise DomainError("computer player has nothing to fire")
        return max(owned, key=lambda kind: WEAPONS[kind].max_damage)

    def buy_weapons(self, info: PlayerInfo) -> List[WeaponKind]:
        bought: List[WeaponKind] = []
        budget = int(info.cash * (1.0 - self.skill.cash_reserve))
        while True:
            affordable = [
                kind
                for kind in WEAPON_ORDER
                if info.armory.count(kind) != UNLIMITED and WEAPONS[kind].price <= budget
            ]
            if not affordable:
                break
            kind = max(affordable, key=lambda k: WEAPONS[k].price)
            info.buy_weapon(kind)
            budget -= WEAPONS[kind].price
            bought.append(kind)
        return bought

    def to_record(self) -> Dict[str, Any]:
        return {"kind": self.kind, "seed": self.seed}

    # ------------------------------------------------------------------
    def _candidate_angles(self, player: Player, targets: Sequence[Player]) -> List[int]:
        nearest = min(targets, key=lambda target: abs(target.x - player.x))
        if nearest.x >= player.x:
            low, high = 0, 90
        else:
            low, high = 90, 180
        return list(range(low, high + 1, self.skill.angle_step))

    def _score(
        self,
        round_: "Round",
        player: Player,
        targets: Sequence[Player],
        power: int,
        weapon: WeaponKind,
    ) -> float:
        flight = simulate_flight(
            round_.terrain,
            round_.players,
            player,
            power,
            round_.wind,
            max_samples=self.planning_samples,
        )
        if not flight.collision.explodes:
            return math.inf
        if flight.collision is Collision.PLAYER and flight.hit_player != player.id:
            error = 0.0
        else:
            error = min(
                math.hypot(target.center()[0] - flight.x, target.center()[1] - flight.y)
                for target in targets
            )
        own_x, own_y = player.center()
        if math.hypot(own_x - flight.x, own_y - flight.y) < WEAPONS[weapon].explosion_radius:
            error += 1000.0
        return error


def brain_for_kind(kind: str, seed: Optional[int] = None) -> Brain:
    if kind == HumanBrain.kind:
        return HumanBrain()
    if kind in SKILLS:
        return ComputerBrain(kind, seed=seed)
    raise DomainError(f"can't recognize brain kind {kind!r}")


def brain_from_record(record: Dict[str, Any]) -> Brain:
    return brain_for_kind(record["kind"], seed=record.get("seed"))


__all__ = [
    "Brain",
    "ComputerBrain",
    "HumanBrain",
    "SKILLS",
    "ShotChoice",
    "Skill",
    "brain_for_kind",
    "brain_from_record",
]
