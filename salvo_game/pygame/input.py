"""Input handling for the pygame client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Optional

import pygame

from salvo_game.core.player import MAX_POWER, MIN_POWER
from salvo_game.core.weapons import WeaponKind

if TYPE_CHECKING:
    from salvo_game.pygame.app import SalvoApp

BUY_KEYS: Dict[int, WeaponKind] = {
    pygame.K_1: WeaponKind.BABY_MISSILE,
    pygame.K_2: WeaponKind.MISSILE,
    pygame.K_3: WeaponKind.BABY_NUKE,
    pygame.K_4: WeaponKind.NUKE,
}


class InputHandler:
    """Translate pygame events into session signals."""

    def __init__(self, app: "SalvoApp") -> None:
        self.app = app
        self.preset_power = MAX_POWER // 2
        self.shopper: Optional[int] = None

    # ------------------------------------------------------------------
    # Event entry point
    def process_event(self, event: pygame.event.Event) -> None:
        if event.type == pygame.KEYDOWN:
            self._handle_key_down(event)
        elif event.type == pygame.KEYUP:
            if event.key == pygame.K_SPACE:
                self.app.session.release_fire()

    # ------------------------------------------------------------------
    # Internal helpers
    def _handle_key_down(self, event: pygame.event.Event) -> None:
        app = self.app
        session = app.session
        key = event.key
        mods = getattr(event, "mod", 0)
        shift_pressed = bool(mods & pygame.KMOD_SHIFT)
        turret_step = 5 if shift_pressed else 1
        power_step = 100 if shift_pressed else 25

        if key == pygame.K_ESCAPE:
            app.running = False
            return
        if key == pygame.K_F5:
            app.quick_save()
            return
        if key == pygame.K_F9:
            app.quick_load()
            return

        if key in (pygame.K_LEFT, pygame.K_RIGHT):
            current = app.snapshot.current_player if app.snapshot else None
            if current is None:
                return
            # Angles grow counter-clockwise, so left raises the angle.
            delta = turret_step if key == pygame.K_LEFT else -turret_step
            session.aim_to(current.angle_deg + delta)
        elif key in (pygame.K_UP, pygame.K_DOWN):
            delta = power_step if key == pygame.K_UP else -power_step
            self.preset_power = max(MIN_POWER, min(MAX_POWER, self.preset_power + delta))
            session.set_power(self.preset_power)
        elif key == pygame.K_LEFTBRACKET:
            session.cycle_weapon_left()
        elif key == pygame.K_RIGHTBRACKET:
            session.cycle_weapon_right()
        elif key == pygame.K_SPACE:
            session.press_fire()
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            session.confirm_ok()
        elif key == pygame.K_TAB:
            self.shopper = self._next_shopper()
        elif key in BUY_KEYS:
            shopper = self.shopper if self.shopper is not None else self._next_shopper()
            if shopper is not None:
                self.shopper = shopper
                session.buy_weapon(shopper, BUY_KEYS[key])

    def _next_shopper(self) -> Optional[int]:
        snapshot = self.app.snapshot
        if snapshot is None:
            return None
        humans = [player.id for player in snapshot.players if player.is_human]
        if not humans:
            return None
        if self.shopper not in humans:
            return humans[0]
        return humans[(humans.index(self.shopper) + 1) % len(humans)]


__all__ = ["BUY_KEYS", "InputHandler"]
