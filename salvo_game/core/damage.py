"""Explosion resolution: direct damage, crater carving and falling."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from salvo_game.core.player import Player
from salvo_game.core.terrain import Terrain
from salvo_game.core.weapons import WEAPONS, WeaponKind

logger = logging.getLogger(__name__)


def blast_damage(distance: float, radius: float, max_damage: int) -> int:
    """Full damage at the center, falling linearly to nothing at ``radius``."""

    if radius <= 0 or distance >= radius:
        return 0
    return int(max_damage * (1.0 - max(0.0, distance) / radius))


@dataclass
class DamageReport:
    damage: Dict[int, int] = field(default_factory=dict)
    killed: List[int] = field(default_factory=list)
    fallen: List[int] = field(default_factory=list)
    columns_lowered: int = 0


class DamageResolver:
    """Apply a finished explosion to the round.

    The order is fixed: damage is measured against where the players stand
    before the crater exists, then the crater is carved, then every player
    settles onto the new ground.
    """

    def __init__(self, terrain: Terrain, players: Sequence[Player]) -> None:
        self.terrain = terrain
        self.players = players

    def resolve(self, center: Tuple[float, float], weapon: WeaponKind) -> DamageReport:
        report = DamageReport()
        self.apply_direct_damage(center, weapon, report)
        spec = WEAPONS[weapon]
        report.columns_lowered = self.terrain.carve(center[0], center[1], spec.crater_radius)
        for player in self.players:
            if player.do_falling(self.terrain):
                report.fallen.append(player.id)
        if report.fallen:
            logger.debug("Players fell after crater: %s", report.fallen)
        return report

    def apply_direct_damage(
        self,
        center: Tuple[float, float],
        weapon: WeaponKind,
        report: DamageReport,
    ) -> None:
        spec = WEAPONS[weapon]
        cx, cy = center
        for player in self.players:
            if not player.alive:
                continue
            px, py = player.center()
            distance = math.hypot(px - cx, py - cy)
            amount = blast_damage(distance, spec.explosion_radius, spec.max_damage)
            if amount <= 0:
                continue
            dealt = player.take_damage(amount)
            report.damage[player.id] = dealt
            logger.debug(
                "%s takes %d damage from %s at distance %.1f (life %d)",
                player.name,
                dealt,
                spec.name,
                distance,
                player.life,
            )
            if not player.alive:
                report.killed.append(player.id)


__all__ = ["DamageReport", "DamageResolver", "blast_damage"]
