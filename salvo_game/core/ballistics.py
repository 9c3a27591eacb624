"""Projectile flight, trajectory compaction and explosion timing.

A projectile moves in a straight line: its velocity is fixed at launch from
turret angle, power and wind and is added to the position once per tick.
Only one projectile and one explosion exist at a time.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from salvo_game.core.player import PLAYER_Y_SIZE, Player
from salvo_game.core.terrain import Terrain
from salvo_game.core.weapons import WEAPONS, WeaponKind

logger = logging.getLogger(__name__)

MAX_NUM_SAMPLES = 10_000
MIN_UPDATE_DIST_SQUARED = 4.0
VELOCITY_DIVISOR = 120.0
WIND_FACTOR = 0.05

Point = Tuple[float, float]


class Collision(Enum):
    NONE = "none"
    GROUND = "ground"
    PLAYER = "player"
    TIMEOUT = "timeout"
    LOST = "lost"

    @property
    def explodes(self) -> bool:
        return self in (Collision.GROUND, Collision.PLAYER, Collision.TIMEOUT)


def launch_velocity(angle_rad: float, power: int, wind: int) -> Tuple[float, float]:
    dx = math.cos(angle_rad) * power / VELOCITY_DIVISOR + wind * WIND_FACTOR
    dy = math.sin(angle_rad) * power / VELOCITY_DIVISOR
    return dx, dy


def distance_squared(x1: float, y1: float, x2: float, y2: float, y_scale: float) -> float:
    x_delta = x1 - x2
    y_delta = (y1 - y2) * y_scale
    return x_delta * x_delta + y_delta * y_delta


class Trajectory:
    """The path flown so far, with nearby samples merged together.

    Every stored waypoint is at least ``min_distance_squared`` away from the
    one before it, except the last, which tracks the projectile's current
    position until it gets far enough away to be committed.
    """

    def __init__(
        self,
        x: float,
        y: float,
        *,
        min_distance_squared: float = MIN_UPDATE_DIST_SQUARED,
        y_scale: float = 1.0,
    ) -> None:
        self._points: List[Point] = [(x, y)]
        self._has_tip = False
        self.min_distance_squared = min_distance_squared
        self.y_scale = y_scale

    def __len__(self) -> int:
        return len(self._points)

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(self._points)

    @property
    def current(self) -> Point:
        return self._points[-1]

    def add_sample(self, x: float, y: float) -> None:
        if self._has_tip:
            self._points[-1] = (x, y)
        else:
            self._points.append((x, y))
            self._has_tip = True
        anchor_x, anchor_y = self._points[-2]
        if distance_squared(x, y, anchor_x, anchor_y, self.y_scale) >= self.min_distance_squared:
            self._has_tip = False


class Projectile:
    """The single in-flight projectile of a Ballistics phase."""

    def __init__(self) -> None:
        self.in_use = False
        self.x = 0.0
        self.y = 0.0
        self.dx = 0.0
        self.dy = 0.0
        self.samples = 0
        self.max_samples = MAX_NUM_SAMPLES
        self.hit_player: Optional[int] = None
        self.trajectory: Optional[Trajectory] = None

    def initialize(
        self,
        x: float,
        y: float,
        dx: float,
        dy: float,
        *,
        y_scale: float = 1.0,
        max_samples: int = MAX_NUM_SAMPLES,
    ) -> None:
        self.x = x
        self.y = y
        self.dx = dx
        self.dy = dy
        self.samples = 0
        self.max_samples = max_samples
        self.hit_player = None
        self.trajectory = Trajectory(x, y, y_scale=y_scale)
        self.in_use = True
        logger.debug("Projectile launched at (%.1f, %.1f) with velocity (%.3f, %.3f)", x, y, dx, dy)

    def launch(
        self,
        shooter: Player,
        power: int,
        wind: int,
        *,
        y_scale: float = 1.0,
        max_samples: int = MAX_NUM_SAMPLES,
    ) -> None:
        x, y = shooter.turret_tip()
        dx, dy = launch_velocity(shooter.angle_rad, power, wind)
        self.initialize(x, y, dx, dy, y_scale=y_scale, max_samples=max_samples)

    def retire(self) -> None:
        self.in_use = False

    def step(self) -> None:
        self.samples += 1
        self.x += self.dx
        self.y += self.dy
        if self.trajectory is not None:
            self.trajectory.add_sample(self.x, self.y)

    def test_collision(
        self,
        terrain: Terrain,
        players: Sequence[Player],
        shooter_id: Optional[int] = None,
    ) -> Collision:
        column = int(round(self.x))
        if not terrain.in_bounds(column):
            return Collision.LOST
        if self.dy >= 0 and self.y > terrain.max_y + PLAYER_Y_SIZE:
            # Still climbing above everything it could ever hit.
            return Collision.LOST
        for player in players:
            if not player.alive or player.id == shooter_id:
                continue
            if player.hit_test(self.x, self.y):
                self.hit_player = player.id
                return Collision.PLAYER
        if self.y <= terrain.height_at(column):
            return Collision.GROUND
        # Users don't want turns to take an extremely long time.
        if self.samples >= self.max_samples:
            return Collision.TIMEOUT
        return Collision.NONE


@dataclass
class FlightResult:
    collision: Collision
    x: float
    y: float
    hit_player: Optional[int]
    samples: int
    path: Tuple[Point, ...]


def simulate_flight(
    terrain: Terrain,
    players: Sequence[Player],
    shooter: Player,
    power: int,
    wind: int,
    *,
    max_samples: int = MAX_NUM_SAMPLES,
) -> FlightResult:
    """Fly a shot to completion without touching terrain or players."""

    projectile = Projectile()
    projectile.launch(
        shooter,
        power,
        wind,
        y_scale=terrain.vertical_scale,
        max_samples=max_samples,
    )
    collision = Collision.NONE
    while collision is Collision.NONE:
        projectile.step()
        collision = projectile.test_collision(terrain, players, shooter.id)
    path = projectile.trajectory.points if projectile.trajectory else ()
    return FlightResult(
        collision=collision,
        x=projectile.x,
        y=projectile.y,
        hit_player=projectile.hit_player,
        samples=projectile.samples,
        path=path,
    )


class Explosion:
    """A timed blast at the point where the projectile stopped."""

    def __init__(self) -> None:
        self.in_use = False
        self.x = 0.0
        self.y = 0.0
        self.weapon = WeaponKind.BABY_MISSILE
        self.start_millis = 0

    def initialize(self, x: float, y: float, weapon: WeaponKind, now_millis: int) -> None:
        self.x = x
        self.y = y
        self.weapon = weapon
        self.start_millis = now_millis
        self.in_use = True

    @property
    def radius(self) -> float:
        return WEAPONS[self.weapon].explosion_radius

    @property
    def center(self) -> Point:
        return self.x, self.y

    def finished(self, now_millis: int) -> bool:
        return now_millis - self.start_millis >= WEAPONS[self.weapon].explosion_millis

    def clear(self) -> None:
        self.in_use = False


__all__ = [
    "Collision",
    "Explosion",
    "FlightResult",
    "MAX_NUM_SAMPLES",
    "MIN_UPDATE_DIST_SQUARED",
    "Projectile",
    "Trajectory",
    "VELOCITY_DIVISOR",
    "WIND_FACTOR",
    "distance_squared",
    "launch_velocity",
    "simulate_flight",
]
