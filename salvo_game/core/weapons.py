"""Weapon catalogue and per-player armories."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Mapping, Optional

from salvo_game.core.errors import DomainError, OutOfAmmoError

logger = logging.getLogger(__name__)

UNLIMITED = -1


class WeaponKind(Enum):
    """Every weapon in the game, in cycling order."""

    BABY_MISSILE = "baby_missile"
    MISSILE = "missile"
    BABY_NUKE = "baby_nuke"
    NUKE = "nuke"


@dataclass(frozen=True)
class WeaponSpec:
    name: str
    price: int
    bundle: int
    explosion_radius: float
    crater_radius: float
    max_damage: int
    explosion_millis: int


WEAPONS: Dict[WeaponKind, WeaponSpec] = {
    WeaponKind.BABY_MISSILE: WeaponSpec(
        name="Baby Missile",
        price=400,
        bundle=10,
        explosion_radius=24.0,
        crater_radius=14.0,
        max_damage=40,
        explosion_millis=300,
    ),
    WeaponKind.MISSILE: WeaponSpec(
        name="Missile",
        price=1875,
        bundle=5,
        explosion_radius=36.0,
        crater_radius=24.0,
        max_damage=75,
        explosion_millis=450,
    ),
    WeaponKind.BABY_NUKE: WeaponSpec(
        name="Baby Nuke",
        price=10000,
        bundle=3,
        explosion_radius=60.0,
        crater_radius=40.0,
        max_damage=120,
        explosion_millis=700,
    ),
    WeaponKind.NUKE: WeaponSpec(
        name="Nuke",
        price=12000,
        bundle=1,
        explosion_radius=100.0,
        crater_radius=70.0,
        max_damage=250,
        explosion_millis=1000,
    ),
}

WEAPON_ORDER = tuple(WeaponKind)
MINIMUM_WEAPON_COST = min(spec.price for spec in WEAPONS.values())
DEFAULT_WEAPON = WeaponKind.BABY_MISSILE


def weapon_spec(kind: WeaponKind) -> WeaponSpec:
    return WEAPONS[kind]


def weapon_from_id(value: str) -> WeaponKind:
    try:
        return WeaponKind(value)
    except ValueError as exc:
        raise DomainError(f"can't recognize weapon with ID = {value!r}") from exc


class Armory:
    """Remaining ammunition per weapon kind.

    Counts are never negative. ``UNLIMITED`` entries are never decremented.
    Selection cycling ignores counts: a player may select an empty weapon,
    but :meth:`use_weapon` refuses to fire it.
    """

    def __init__(self, counts: Optional[Mapping[WeaponKind, int]] = None) -> None:
        self._counts: Dict[WeaponKind, int] = {kind: 0 for kind in WEAPON_ORDER}
        for kind, count in (counts or {}).items():
            if count < 0 and count != UNLIMITED:
                raise DomainError(f"negative count {count} for {kind.value}")
            self._counts[kind] = count

    @classmethod
    def from_default(cls) -> "Armory":
        return cls({DEFAULT_WEAPON: UNLIMITED})

    # ------------------------------------------------------------------
    def count(self, kind: WeaponKind) -> int:
        return self._counts[kind]

    def is_unlimited(self, kind: WeaponKind) -> bool:
        return self._counts[kind] == UNLIMITED

    def can_fire(self, kind: WeaponKind) -> bool:
        return self._counts[kind] != 0

    def describe(self, kind: WeaponKind) -> str:
        count = self._counts[kind]
        return "[∞]" if count == UNLIMITED else f"[{count}]"

    def owned(self) -> Iterable[WeaponKind]:
        return (kind for kind in WEAPON_ORDER if self._counts[kind] != 0)

    def get_next_weapon(self, kind: WeaponKind) -> WeaponKind:
        idx = WEAPON_ORDER.index(kind)
        return WEAPON_ORDER[(idx + 1) % len(WEAPON_ORDER)]

    def get_prev_weapon(self, kind: WeaponKind) -> WeaponKind:
        idx = WEAPON_ORDER.index(kind)
        return WEAPON_ORDER[(idx - 1) % len(WEAPON_ORDER)]

    # ------------------------------------------------------------------
    def use_weapon(self, kind: WeaponKind) -> WeaponKind:
        """Consume one unit of ``kind`` and return the weapon to select next.

        When the last unit is fired, selection moves forward in cycling order
        to the first weapon that still has ammunition. If nothing is left the
        spent weapon stays selected.
        """

        count = self._counts[kind]
        if count == 0:
            raise OutOfAmmoError(WEAPONS[kind].name)
        if count == UNLIMITED:
            return kind
        self._counts[kind] = count - 1
        if count - 1 > 0:
            return kind
        candidate = self.get_next_weapon(kind)
        while candidate is not kind:
            if self._counts[candidate] != 0:
                logger.debug("%s exhausted, selecting %s", kind.value, candidate.value)
                return candidate
            candidate = self.get_next_weapon(candidate)
        return kind

    def add(self, kind: WeaponKind, amount: int) -> None:
        if amount < 0:
            raise DomainError(f"cannot add {amount} units of {kind.value}")
        if self._counts[kind] == UNLIMITED:
            return
        self._counts[kind] += amount

    # ------------------------------------------------------------------
    def to_record(self) -> Dict[str, int]:
        return {kind.value: count for kind, count in self._counts.items()}

    @classmethod
    def from_record(cls, record: Mapping[str, int]) -> "Armory":
        return cls({weapon_from_id(key): int(value) for key, value in record.items()})

    def copy(self) -> "Armory":
        return Armory(dict(self._counts))


__all__ = [
    "Armory",
    "DEFAULT_WEAPON",
    "MINIMUM_WEAPON_COST",
    "UNLIMITED",
    "WEAPONS",
    "WEAPON_ORDER",
    "WeaponKind",
    "WeaponSpec",
    "weapon_from_id",
    "weapon_spec",
]
