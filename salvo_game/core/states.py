"""Turn orchestration: the states a game can be in and how it moves between them.

Each state handles input signals and implements ``tick``, which returns the
next state or ``None`` to stay put. A state is a small value object: a
transition builds a fresh instance, and restoring from a saved record builds
one carrying only the fields needed to resume.

::

    Leaderboard --ok--> BuyWeapons --ok--> TurnStart --> HumanMove ----+
         ^                                   |  ^    \\-> ComputerMove -+
         |           round decided           |  |                       |
         +-----------------------------------+  +----- Ballistics <-----+
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Type

from salvo_game.core.ballistics import Collision, Explosion, Projectile
from salvo_game.core.context import GameContext
from salvo_game.core.cosmos import Leaderboard
from salvo_game.core.damage import DamageReport
from salvo_game.core.errors import DomainError
from salvo_game.core.player import INVALID_POWER, MAX_POWER, Player, clamp_power
from salvo_game.core.round import NextTurnInfo
from salvo_game.core.weapons import WEAPONS, WeaponKind, weapon_from_id

logger = logging.getLogger(__name__)

MAX_CHARGE_MILLIS = 2400


class GameButton(Enum):
    ARMORY_LEFT = "armory_left"
    ARMORY_RIGHT = "armory_right"
    OK = "ok"
    PRESS_FIRE = "press_fire"
    RELEASE_FIRE = "release_fire"


def power_for_hold(elapsed_millis: int) -> int:
    """Power reached after holding fire for ``elapsed_millis``."""

    elapsed = max(0, elapsed_millis)
    return min(MAX_POWER, (elapsed * MAX_POWER) // MAX_CHARGE_MILLIS)


class GameState:
    """Base class for every state of the turn machine."""

    ID: ClassVar[int] = -1
    name: ClassVar[str] = "state"

    def on_enter(self, ctx: GameContext) -> None:
        """Side effects of entering the state."""

    def tick(self, ctx: GameContext) -> Optional["GameState"]:
        raise NotImplementedError

    def on_exit(self, ctx: GameContext) -> None:
        """Side effects of leaving the state."""

    def blocking_delay(self) -> int:
        """Minimum milliseconds between ticks; 0 blocks until input arrives."""

        return 0

    # Input handlers return True when the UI should refresh.
    def on_button(self, ctx: GameContext, button: GameButton) -> bool:
        return False

    def on_aim(self, ctx: GameContext, angle_deg: float) -> bool:
        return False

    def on_power(self, ctx: GameContext, power: float) -> bool:
        return False

    def on_buy(self, ctx: GameContext, player_id: int, weapon: WeaponKind) -> bool:
        return False

    def current_power(self, ctx: GameContext) -> int:
        return INVALID_POWER

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.ID}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "GameState":
        return cls()


@dataclass
class LeaderboardState(GameState):
    """Shows the standings after a round; OK moves on to the next one."""

    ID: ClassVar[int] = 0
    name: ClassVar[str] = "leaderboard"

    finished: bool = False

    def on_enter(self, ctx: GameContext) -> None:
        ctx.leaderboard = Leaderboard.build(ctx.cosmos, ctx.round.players)
        if not ctx.cosmos.more_rounds_remaining():
            ctx.message = f"Game over! {ctx.leaderboard.winner_text()} wins the match"
            logger.info("Match finished, winner: %s", ctx.leaderboard.winner_text())

    def tick(self, ctx: GameContext) -> Optional[GameState]:
        if not self.finished:
            return None
        if not ctx.cosmos.more_rounds_remaining():
            ctx.match_over = True
            return None
        ctx.start_next_round()
        if ctx.settings.buy_phase:
            return BuyWeaponsState()
        return TurnStartState()

    def on_button(self, ctx: GameContext, button: GameButton) -> bool:
        if button is GameButton.OK:
            self.finished = True
            return True
        return False


@dataclass
class BuyWeaponsState(GameState):
    """Humans shop one bundle at a time; computers shop silently on entry."""

    ID: ClassVar[int] = 5
    name: ClassVar[str] = "buy_weapons"

    computers_shopped: bool = False
    finished: bool = False

    def on_enter(self, ctx: GameContext) -> None:
        self.finished = False
        if self.computers_shopped:
            return
        for player in ctx.round.players:
            if player.brain.is_human:
                continue
            bought = player.brain.buy_weapons(player.info)
            if bought:
                logger.debug("%s bought %s", player.name, [kind.value for kind in bought])
        self.computers_shopped = True
        ctx.message = "Buy weapons, then press OK"

    def tick(self, ctx: GameContext) -> Optional[GameState]:
        if self.finished:
            return TurnStartState()
        return None

    def on_button(self, ctx: GameContext, button: GameButton) -> bool:
        if button is GameButton.OK:
            self.finished = True
            return True
        return False

    def on_buy(self, ctx: GameContext, player_id: int, weapon: WeaponKind) -> bool:
        if not 0 <= player_id < len(ctx.round.players):
            return False
        player = ctx.round.players[player_id]
        if not player.brain.is_human:
            return False
        spec = WEAPONS[weapon]
        if player.armory.is_unlimited(weapon):
            ctx.message = f"{player.name} already has unlimited {spec.name}s"
            return True
        if not player.info.can_afford(spec.price):
            ctx.message = f"{player.name} can't afford a {spec.name} (${spec.price})"
            return True
        player.info.buy_weapon(weapon)
        ctx.message = (
            f"{player.name} bought {spec.bundle} x {spec.name}, ${player.info.cash} left"
        )
        return True

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.ID, "computers_shopped": self.computers_shopped}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BuyWeaponsState":
        return cls(computers_shopped=bool(record.get("computers_shopped", False)))


@dataclass
class TurnStartState(GameState):
    """Finds the next player to act, or ends the round."""

    ID: ClassVar[int] = 10
    name: ClassVar[str] = "turn_start"

    info: Optional[NextTurnInfo] = None

    def on_enter(self, ctx: GameContext) -> None:
        self.info = ctx.round.next_turn_info()

    def tick(self, ctx: GameContext) -> Optional[GameState]:
        info = self.info or ctx.round.next_turn_info()
        if info.is_draw:
            ctx.message = "It's a draw!"
            logger.info("Round %d ended in a draw", ctx.cosmos.cur_round)
            return LeaderboardState()
        if info.winner_id is not None:
            winner = ctx.round.players[info.winner_id]
            winner.info.earn_money(ctx.settings.round_win_reward)
            ctx.message = f"{winner.name} wins the round!"
            logger.info("Round %d won by %s", ctx.cosmos.cur_round, winner.name)
            return LeaderboardState()
        ctx.round.cur_player_id = info.next_player_id
        player = ctx.round.cur_player
        ctx.message = player.introduction()
        if player.brain.is_human:
            return HumanMoveState()
        return ComputerMoveState()


def _armory_text(player: Player) -> str:
    weapon = player.selected_weapon
    return f"{WEAPONS[weapon].name} {player.armory.describe(weapon)}"


@dataclass
class HumanMoveState(GameState):
    """A human turn: aim, pick a weapon, hold fire to charge power."""

    ID: ClassVar[int] = 15
    name: ClassVar[str] = "human_move"

    fire_millis: Optional[int] = None
    release_millis: Optional[int] = None
    released_power: int = 0
    preset_power: Optional[int] = None

    def on_enter(self, ctx: GameContext) -> None:
        player = ctx.round.cur_player
        ctx.message = f"{player.introduction()}: {player.angle_deg}° {_armory_text(player)}"

    def time_to_power(self, now_millis: int) -> int:
        if self.fire_millis is None:
            return INVALID_POWER
        return power_for_hold(now_millis - self.fire_millis)

    def current_power(self, ctx: GameContext) -> int:
        if self.release_millis is not None:
            return self.released_power
        if self.fire_millis is None and self.preset_power is not None:
            return self.preset_power
        return self.time_to_power(ctx.now())

    def tick(self, ctx: GameContext) -> Optional[GameState]:
        if self.fire_millis is not None and self.release_millis is None:
            now = ctx.now()
            if self.time_to_power(now) >= MAX_POWER:
                self._release(now)
        if self.release_millis is None:
            return None
        player = ctx.round.cur_player
        weapon = player.selected_weapon
        player.selected_weapon = player.armory.use_weapon(weapon)
        return BallisticsState(power=self.released_power, weapon=weapon)

    def blocking_delay(self) -> int:
        return 0 if self.fire_millis is None else 1

    def _release(self, now_millis: int) -> None:
        self.release_millis = now_millis
        self.released_power = self.time_to_power(now_millis)

    def on_button(self, ctx: GameContext, button: GameButton) -> bool:
        player = ctx.round.cur_player
        charging = self.fire_millis is not None
        if button in (GameButton.ARMORY_LEFT, GameButton.ARMORY_RIGHT):
            if charging:
                return False
            armory = player.armory
            if button is GameButton.ARMORY_LEFT:
                player.selected_weapon = armory.get_prev_weapon(player.selected_weapon)
            else:
                player.selected_weapon = armory.get_next_weapon(player.selected_weapon)
            ctx.message = _armory_text(player)
            return True
        if button is GameButton.PRESS_FIRE:
            if charging:
                return False
            if not player.armory.can_fire(player.selected_weapon):
                ctx.message = f"No {WEAPONS[player.selected_weapon].name} left"
                return True
            self.fire_millis = ctx.now()
            return True
        if button is GameButton.RELEASE_FIRE:
            if not charging or self.release_millis is not None:
                return False
            self._release(ctx.now())
            return True
        if button is GameButton.OK:
            if charging or self.preset_power is None:
                return False
            if not player.armory.can_fire(player.selected_weapon):
                ctx.message = f"No {WEAPONS[player.selected_weapon].name} left"
                return True
            now = ctx.now()
            self.fire_millis = now
            self.release_millis = now
            self.released_power = self.preset_power
            return True
        return False

    def on_aim(self, ctx: GameContext, angle_deg: float) -> bool:
        if self.fire_millis is not None:
            return False
        player = ctx.round.cur_player
        if not player.set_angle_deg(angle_deg):
            return False
        ctx.message = f"{player.angle_deg}°"
        return True

    def on_power(self, ctx: GameContext, power: float) -> bool:
        if self.fire_millis is not None:
            return False
        self.preset_power = clamp_power(power)
        return True


@dataclass
class ComputerMoveState(GameState):
    """A computer turn: the player's brain picks the shot."""

    ID: ClassVar[int] = 16
    name: ClassVar[str] = "computer_move"

    enter_millis: int = 0

    def on_enter(self, ctx: GameContext) -> None:
        self.enter_millis = ctx.now()
        ctx.message = f"{ctx.round.cur_player.name}'s targeting computer calibrates"

    def tick(self, ctx: GameContext) -> Optional[GameState]:
        if ctx.now() - self.enter_millis < ctx.settings.computer_think_millis:
            return None
        player = ctx.round.cur_player
        choice = player.brain.choose_shot(ctx.round, player).validate(player.armory)
        player.set_angle_deg(choice.angle_deg)
        player.selected_weapon = player.armory.use_weapon(choice.weapon)
        return BallisticsState(power=choice.power, weapon=choice.weapon)

    def blocking_delay(self) -> int:
        return 1


@dataclass
class BallisticsState(GameState):
    """Flies the projectile, waits out the explosion, then resolves it."""

    ID: ClassVar[int] = 20
    name: ClassVar[str] = "ballistics"

    power: int = 0
    weapon: WeaponKind = WeaponKind.BABY_MISSILE
    projectile: Projectile = field(default_factory=Projectile, repr=False)
    explosion: Explosion = field(default_factory=Explosion, repr=False)

    def on_enter(self, ctx: GameContext) -> None:
        shooter = ctx.round.cur_player
        self.explosion.clear()
        self.projectile.launch(
            shooter,
            self.power,
            ctx.round.wind,
            y_scale=ctx.round.terrain.vertical_scale,
        )
        ctx.message = f"{shooter.name} fires a {WEAPONS[self.weapon].name}!"
        logger.debug(
            "%s fires %s: angle=%d power=%d wind=%+d",
            shooter.name,
            self.weapon.value,
            shooter.angle_deg,
            self.power,
            ctx.round.wind,
        )

    def tick(self, ctx: GameContext) -> Optional[GameState]:
        finished = True
        round_ = ctx.round
        if self.projectile.in_use:
            finished = False
            self.projectile.step()
            collision = self.projectile.test_collision(
                round_.terrain, round_.players, round_.cur_player_id
            )
            if collision is Collision.LOST:
                self.projectile.retire()
                ctx.message = "Shot flew off into the distance."
                logger.debug("Projectile lost after %d samples", self.projectile.samples)
            elif collision.explodes:
                self.projectile.retire()
                self.explosion.initialize(
                    self.projectile.x, self.projectile.y, self.weapon, ctx.now()
                )
                logger.debug(
                    "Projectile %s collision at (%.1f, %.1f)",
                    collision.value,
                    self.projectile.x,
                    self.projectile.y,
                )
        if self.explosion.in_use:
            finished = False
            if self.explosion.finished(ctx.now()):
                self.explosion.clear()
                report = round_.resolver().resolve(self.explosion.center, self.weapon)
                ctx.last_report = report
                self._pay_out(ctx, report)
        if finished:
            return TurnStartState()
        return None

    def _pay_out(self, ctx: GameContext, report: DamageReport) -> None:
        shooter = ctx.round.cur_player
        for victim_id in report.killed:
            victim = ctx.round.players[victim_id]
            if victim_id == shooter.id:
                shooter.info.earn_money(-ctx.settings.kill_reward)
                ctx.message = f"{shooter.name} blew themselves up!"
            else:
                shooter.info.earn_money(ctx.settings.kill_reward)
                ctx.message = f"{shooter.name} destroyed {victim.name}!"

    def blocking_delay(self) -> int:
        return 1

    def current_power(self, ctx: GameContext) -> int:
        return self.power

    def to_record(self) -> Dict[str, Any]:
        return {"id": self.ID, "power": self.power, "weapon": self.weapon.value}

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "BallisticsState":
        return cls(power=clamp_power(record["power"]), weapon=weapon_from_id(record["weapon"]))


STATES: Dict[int, Type[GameState]] = {
    state.ID: state
    for state in (
        LeaderboardState,
        BuyWeaponsState,
        TurnStartState,
        HumanMoveState,
        ComputerMoveState,
        BallisticsState,
    )
}


def state_from_record(record: Dict[str, Any]) -> GameState:
    state_id = record.get("id")
    try:
        state_cls = STATES[state_id]
    except (KeyError, TypeError) as exc:
        raise DomainError(f"can't recognize state with ID = {state_id!r}") from exc
    return state_cls.from_record(record)


def initial_state(ctx: GameContext) -> GameState:
    if ctx.settings.buy_phase:
        return BuyWeaponsState()
    return TurnStartState()


__all__ = [
    "BallisticsState",
    "BuyWeaponsState",
    "ComputerMoveState",
    "GameButton",
    "GameState",
    "HumanMoveState",
    "LeaderboardState",
    "MAX_CHARGE_MILLIS",
    "STATES",
    "TurnStartState",
    "initial_state",
    "power_for_hold",
    "state_from_record",
]
