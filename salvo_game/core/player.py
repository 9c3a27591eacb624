"""Combatant state: position, turret, life and ownership links."""

from __future__ import annotations

import math
from dataclasses import InitVar, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Tuple

from salvo_game.core.cosmos import PlayerInfo
from salvo_game.core.errors import DomainError
from salvo_game.core.terrain import Terrain
from salvo_game.core.weapons import DEFAULT_WEAPON, Armory, WeaponKind, weapon_from_id

if TYPE_CHECKING:
    from salvo_game.core.brain import Brain

MIN_STARTING_LIFE = 25
DEFAULT_STARTING_LIFE = 100
MAX_STARTING_LIFE = 300
MAX_LIFE = MAX_STARTING_LIFE
MAX_NAME_LENGTH = 14

INVALID_POWER = -1
MIN_POWER = 50
MAX_POWER = 1000

MIN_TURRET_ANGLE = 0
MAX_TURRET_ANGLE = 180

PLAYER_X_SIZE = 30
PLAYER_Y_SIZE = 21
TURRET_LENGTH = 20


@dataclass(frozen=True)
class PlayerColor:
    display_name: str
    rgb: int


COLORS: Dict[str, PlayerColor] = {
    "red": PlayerColor("red", 0xEF2929),
    "orange": PlayerColor("orange", 0xFFBB44),
    "brown": PlayerColor("brown", 0xA67A3E),
    "yellow": PlayerColor("yellow", 0xFCE94F),
    "green": PlayerColor("green", 0x06D030),
    "cyan": PlayerColor("cyan", 0x8DEFEF),
    "blue": PlayerColor("blue", 0x729FCF),
    "pink": PlayerColor("pink", 0xFF83E9),
    "purple": PlayerColor("purple", 0xAD7FA8),
    "grey": PlayerColor("grey", 0xD3D7CF),
}
WHITE = 0xFFFFFF


def with_alpha(rgb: int, alpha: int) -> int:
    """Pack ``rgb`` with ``alpha`` (0-255) into a 32-bit ARGB value."""

    return ((alpha & 0xFF) << 24) | (rgb & 0xFFFFFF)


def color_rgb(color_id: str) -> int:
    try:
        return COLORS[color_id].rgb
    except KeyError as exc:
        raise DomainError(f"unknown player color '{color_id}'") from exc


def clamp_angle(angle_deg: float) -> int:
    return int(max(MIN_TURRET_ANGLE, min(MAX_TURRET_ANGLE, round(angle_deg))))


def clamp_power(power: float) -> int:
    return int(max(0, min(MAX_POWER, round(power))))


@dataclass
class Player:
    """A tank on the field.

    ``x`` is the column the tank sits on and ``y`` the height of its base.
    The turret angle is kept both in whole degrees and as cached radians;
    :meth:`set_angle_deg` is the only way to change it so the two never drift.
    Angles run counter-clockwise from 0 (pointing right) to 180 (left).
    """

    id: int
    name: str
    color: str
    x: int
    y: float
    info: PlayerInfo
    brain: "Brain"
    life: int = DEFAULT_STARTING_LIFE
    selected_weapon: WeaponKind = DEFAULT_WEAPON
    angle: InitVar[int] = 90
    _angle_deg: int = field(init=False, repr=False, default=90)
    _angle_rad: float = field(init=False, repr=False, default=math.pi / 2)

    def __post_init__(self, angle: int) -> None:
        self.set_angle_deg(angle)

    # ------------------------------------------------------------------
    # Access
    @property
    def alive(self) -> bool:
        return self.life > 0

    @property
    def angle_deg(self) -> int:
        return self._angle_deg

    @property
    def angle_rad(self) -> float:
        return self._angle_rad

    @property
    def armory(self) -> Armory:
        return self.info.armory

    @property
    def money(self) -> int:
        return self.info.cash

    @property
    def total_earnings(self) -> int:
        return self.info.earnings

    @property
    def rgb(self) -> int:
        return color_rgb(self.color)

    def introduction(self) -> str:
        return f"{self.name}'s turn"

    def turret_center_y(self) -> float:
        return self.y + PLAYER_Y_SIZE / 4

    def turret_tip(self) -> Tuple[float, float]:
        return (
            self.x + TURRET_LENGTH * math.cos(self._angle_rad),
            self.turret_center_y() + TURRET_LENGTH * math.sin(self._angle_rad),
        )

    def center(self) -> Tuple[float, float]:
        return float(self.x), self.y + PLAYER_Y_SIZE / 2

    def hit_test(self, px: float, py: float) -> bool:
        return abs(px - self.x) <= PLAYER_X_SIZE / 2 and self.y <= py <= self.y + PLAYER_Y_SIZE

    # ------------------------------------------------------------------
    # Operations
    def set_angle_deg(self, angle_deg: float) -> bool:
        """Clamp and apply a new turret angle; returns True if it changed."""

        clamped = clamp_angle(angle_deg)
        changed = clamped != self._angle_deg
        self._angle_deg = clamped
        self._angle_rad = math.radians(clamped)
        return changed

    def set_x(self, x: int, terrain: Terrain) -> None:
        self.x = max(0, min(terrain.width - 1, x))
        self.y = terrain.height_at(self.x)

    def take_damage(self, amount: int) -> int:
        before = self.life
        self.life = max(0, self.life - max(0, amount))
        return before - self.life

    def do_falling(self, terrain: Terrain) -> bool:
        """Drop onto the ground if it was removed from under the tank."""

        ground = terrain.height_at(self.x)
        if ground < self.y:
            self.y = ground
            return True
        return False

    # ------------------------------------------------------------------
    # Save
    def to_record(self) -> Dict[str, Any]:
        return {
            "life": self.life,
            "x": self.x,
            "y": self.y,
            "angle_deg": self._angle_deg,
            "name": self.name,
            "color": self.color,
            "weapon": self.selected_weapon.value,
            "brain": self.brain.to_record(),
        }

    @classmethod
    def from_record(cls, index: int, record: Dict[str, Any], info: PlayerInfo) -> "Player":
        from salvo_game.core.brain import brain_from_record

        color = record["color"]
        if color not in COLORS:
            raise DomainError(f"unknown player color '{color}'")
        return cls(
            id=index,
            name=str(record["name"])[:MAX_NAME_LENGTH],
            color=color,
            x=int(record["x"]),
            y=float(record["y"]),
            info=info,
            brain=brain_from_record(record["brain"]),
            life=max(0, min(MAX_LIFE, int(record["life"]))),
            selected_weapon=weapon_from_id(record["weapon"]),
            angle=int(record["angle_deg"]),
        )


__all__ = [
    "COLORS",
    "DEFAULT_STARTING_LIFE",
    "INVALID_POWER",
    "MAX_LIFE",
    "MAX_NAME_LENGTH",
    "MAX_POWER",
    "MAX_STARTING_LIFE",
    "MAX_TURRET_ANGLE",
    "MIN_POWER",
    "MIN_STARTING_LIFE",
    "MIN_TURRET_ANGLE",
    "PLAYER_X_SIZE",
    "PLAYER_Y_SIZE",
    "Player",
    "PlayerColor",
    "TURRET_LENGTH",
    "WHITE",
    "clamp_angle",
    "clamp_power",
    "color_rgb",
    "with_alpha",
]
