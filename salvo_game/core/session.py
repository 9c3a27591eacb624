"""Game session management decoupled from rendering concerns.

A :class:`GameSession` owns the live state of a match and drives the turn
machine. Input sources (a UI thread, tests) only *stage* signals; the
simulation loop drains them, ticks the live state and performs transitions
while holding the session's condition, so nothing else ever mutates the
round.
"""

from __future__ import annotations

import logging
import random
import threading
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence, Tuple

from salvo_game.core.clock import Clock, SystemClock
from salvo_game.core.context import GameContext
from salvo_game.core.cosmos import Cosmos
from salvo_game.core.errors import DomainError
from salvo_game.core.round import Round
from salvo_game.core.settings import GameSettings, PlayerSetup, default_roster
from salvo_game.core.states import (
    BallisticsState,
    GameButton,
    GameState,
    initial_state,
    state_from_record,
)
from salvo_game.core.weapons import WEAPONS, WeaponKind

logger = logging.getLogger(__name__)

SAVE_FORMAT_VERSION = 1

Point = Tuple[float, float]


@dataclass(frozen=True)
class PlayerView:
    id: int
    name: str
    rgb: int
    x: int
    y: float
    angle_deg: int
    life: int
    alive: bool
    cash: int
    earnings: int
    weapon: str
    is_human: bool
    is_current: bool


@dataclass(frozen=True)
class ExplosionView:
    x: float
    y: float
    radius: float


@dataclass(frozen=True)
class RenderSnapshot:
    """Read-only picture of the match for renderers."""

    state: str
    round_number: int
    num_rounds: int
    wind: int
    max_y: float
    heights: Tuple[float, ...]
    players: Tuple[PlayerView, ...]
    trajectory: Tuple[Point, ...] = ()
    projectile: Optional[Point] = None
    explosion: Optional[ExplosionView] = None
    power: int = -1
    message: str = ""
    match_over: bool = False
    standings: Tuple[Tuple[str, int, int], ...] = ()

    @property
    def current_player(self) -> Optional[PlayerView]:
        return next((player for player in self.players if player.is_current), None)


class GameSession:
    """Own the mutable state of an active Salvo match."""

    def __init__(self, ctx: GameContext, state: Optional[GameState] = None) -> None:
        self.ctx = ctx
        self._state = state if state is not None else initial_state(ctx)
        self._entered = False
        self._cond = threading.Condition()
        self._signals: Deque[Tuple[str, Any]] = deque()
        self._shutdown = False
        self._thread: Optional[threading.Thread] = None
        self.refresh_needed = True

    @classmethod
    def new_match(
        cls,
        settings: Optional[GameSettings] = None,
        roster: Optional[Sequence[PlayerSetup]] = None,
        *,
        clock: Optional[Clock] = None,
    ) -> "GameSession":
        settings = settings or GameSettings()
        roster = list(roster) if roster is not None else default_roster()[:2]
        if len(roster) < 2:
            raise ValueError("A match needs at least two players")
        return cls(GameContext.new_match(settings, roster, clock=clock))

    # ------------------------------------------------------------------
    # Properties
    @property
    def state(self) -> GameState:
        return self._state

    @property
    def round(self) -> Round:
        return self.ctx.round

    @property
    def message(self) -> str:
        return self.ctx.message

    @property
    def match_over(self) -> bool:
        return self.ctx.match_over

    # ------------------------------------------------------------------
    # Input staging
    def _stage(self, kind: str, payload: Any = None) -> None:
        with self._cond:
            self._signals.append((kind, payload))
            self._cond.notify_all()

    def press_fire(self) -> None:
        self._stage("button", GameButton.PRESS_FIRE)

    def release_fire(self) -> None:
        self._stage("button", GameButton.RELEASE_FIRE)

    def cycle_weapon_left(self) -> None:
        self._stage("button", GameButton.ARMORY_LEFT)

    def cycle_weapon_right(self) -> None:
        self._stage("button", GameButton.ARMORY_RIGHT)

    def confirm_ok(self) -> None:
        self._stage("button", GameButton.OK)

    def aim_to(self, angle_deg: float) -> None:
        self._stage("aim", angle_deg)

    def set_power(self, power: float) -> None:
        self._stage("power", power)

    def buy_weapon(self, player_id: int, weapon: WeaponKind) -> None:
        self._stage("buy", (player_id, weapon))

    # ------------------------------------------------------------------
    # Simulation loop
    def step(self) -> bool:
        """Drain staged input, tick once; returns True on a state change."""

        with self._cond:
            return self._step_locked()

    def _step_locked(self) -> bool:
        ctx = self.ctx
        if not self._entered:
            self._state.on_enter(ctx)
            self._entered = True
        refresh = False
        while self._signals:
            kind, payload = self._signals.popleft()
            refresh = self._dispatch(kind, payload) or refresh
        next_state = self._state.tick(ctx)
        if next_state is not None:
            logger.debug("State %s -> %s", self._state.name, next_state.name)
            self._state.on_exit(ctx)
            self._state = next_state
            next_state.on_enter(ctx)
            refresh = True
        elif self._state.blocking_delay() > 0:
            refresh = True
        if refresh:
            self.refresh_needed = True
        return next_state is not None

    def _dispatch(self, kind: str, payload: Any) -> bool:
        state = self._state
        if kind == "button":
            return state.on_button(self.ctx, payload)
        if kind == "aim":
            return state.on_aim(self.ctx, payload)
        if kind == "power":
            return state.on_power(self.ctx, payload)
        if kind == "buy":
            player_id, weapon = payload
            return state.on_buy(self.ctx, player_id, weapon)
        raise DomainError(f"unknown input signal {kind!r}")

    def run(self) -> None:
        """Tick until shutdown or the end of the match."""

        with self._cond:
            while not self._shutdown and not self.ctx.match_over:
                changed = self._step_locked()
                if changed or self._shutdown or self.ctx.match_over:
                    continue
                delay = self._state.blocking_delay()
                if delay <= 0:
                    if not self._signals:
                        self._cond.wait()
                else:
                    self._cond.wait(timeout=delay / 1000.0)
        logger.debug("Simulation loop stopped")

    def step_until_idle(
        self,
        limit: int = 100_000,
        *,
        advance: Optional[Callable[[int], Any]] = None,
    ) -> int:
        """Step until the live state waits for input; returns steps taken.

        ``advance`` is called with the state's polling delay between steps
        that did not change state, which lets tests drive a manual clock.
        """

        steps = 0
        while steps < limit and not self.ctx.match_over:
            steps += 1
            changed = self.step()
            if changed:
                continue
            delay = self._state.blocking_delay()
            if delay <= 0:
                if not self._signals:
                    break
            elif advance is not None:
                advance(delay)
        return steps

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._shutdown = False
        self._thread = threading.Thread(target=self.run, name="salvo-sim", daemon=True)
        self._thread.start()
        return self._thread

    def shutdown(self) -> None:
        with self._cond:
            self._shutdown = True
            self._cond.notify_all()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the loop thread; returns True once it has stopped."""

        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    # ------------------------------------------------------------------
    # Rendering
    def snapshot(self) -> RenderSnapshot:
        with self._cond:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> RenderSnapshot:
        ctx = self.ctx
        round_ = ctx.round
        players = tuple(
            PlayerView(
                id=player.id,
                name=player.name,
                rgb=player.rgb,
                x=player.x,
                y=player.y,
                angle_deg=player.angle_deg,
                life=player.life,
                alive=player.alive,
                cash=player.money,
                earnings=player.total_earnings,
                weapon=(
                    f"{WEAPONS[player.selected_weapon].name} "
                    f"{player.armory.describe(player.selected_weapon)}"
                ),
                is_human=player.brain.is_human,
                is_current=player.id == round_.cur_player_id,
            )
            for player in round_.players
        )
        trajectory: Tuple[Point, ...] = ()
        projectile: Optional[Point] = None
        explosion: Optional[ExplosionView] = None
        state = self._state
        if isinstance(state, BallisticsState):
            if state.projectile.trajectory is not None:
                trajectory = state.projectile.trajectory.points
            if state.projectile.in_use:
                projectile = (state.projectile.x, state.projectile.y)
            if state.explosion.in_use:
                explosion = ExplosionView(
                    state.explosion.x, state.explosion.y, state.explosion.radius
                )
        standings: Tuple[Tuple[str, int, int], ...] = ()
        if ctx.leaderboard is not None:
            standings = tuple(
                (entry.name, entry.earnings, entry.rgb) for entry in ctx.leaderboard.entries
            )
        return RenderSnapshot(
            state=state.name,
            round_number=ctx.cosmos.cur_round,
            num_rounds=ctx.cosmos.num_rounds,
            wind=round_.wind,
            max_y=round_.terrain.max_y,
            heights=round_.terrain.heights,
            players=players,
            trajectory=trajectory,
            projectile=projectile,
            explosion=explosion,
            power=state.current_power(ctx) if self._entered else -1,
            message=ctx.message,
            match_over=ctx.match_over,
            standings=standings,
        )

    # ------------------------------------------------------------------
    # Suspend / resume
    def save_state(self) -> Dict[str, Any]:
        with self._cond:
            ctx = self.ctx
            version, internal, gauss = ctx.rng.getstate()
            return {
                "version": SAVE_FORMAT_VERSION,
                "settings": ctx.settings.to_record(),
                "roster": [asdict(setup) for setup in ctx.roster],
                "cosmos": ctx.cosmos.to_record(),
                "round": ctx.round.to_record(),
                "state": self._state.to_record(),
                "rng": [version, list(internal), gauss],
                "message": ctx.message,
            }

    @classmethod
    def restore(cls, record: Dict[str, Any], *, clock: Optional[Clock] = None) -> "GameSession":
        version = record.get("version")
        if version != SAVE_FORMAT_VERSION:
            raise DomainError(f"unsupported save format version {version!r}")
        settings = GameSettings.from_record(record["settings"])
        roster: List[PlayerSetup] = [PlayerSetup(**data) for data in record["roster"]]
        cosmos = Cosmos.from_record(record["cosmos"])
        if len(roster) != len(cosmos.player_info):
            raise DomainError(
                f"saved roster has {len(roster)} players but the cosmos tracks "
                f"{len(cosmos.player_info)}"
            )
        round_ = Round.from_record(record["round"], cosmos, settings)
        rng = random.Random(settings.seed)
        saved_rng = record.get("rng")
        if saved_rng:
            rng.setstate((saved_rng[0], tuple(saved_rng[1]), saved_rng[2]))
        ctx = GameContext(
            settings=settings,
            roster=roster,
            cosmos=cosmos,
            round=round_,
            clock=clock or SystemClock(),
            rng=rng,
            message=str(record.get("message", "")),
        )
        state = state_from_record(record["state"])
        logger.info(
            "Resuming round %d of %d in state %s",
            cosmos.cur_round,
            cosmos.num_rounds,
            state.name,
        )
        return cls(ctx, state)


__all__ = [
    "ExplosionView",
    "GameSession",
    "PlayerView",
    "RenderSnapshot",
    "SAVE_FORMAT_VERSION",
]
