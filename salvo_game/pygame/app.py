"""Pygame-powered presentation layer for Salvo."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

try:
    import pygame
except ImportError as exc:  # pragma: no cover - depends on runtime environment
    raise RuntimeError(
        "The pygame package is required to run the graphical version of Salvo."
    ) from exc

from salvo_game.core.errors import DomainError
from salvo_game.core.persistence import load_game, save_game
from salvo_game.core.session import GameSession, RenderSnapshot
from salvo_game.core.settings import GameSettings, PlayerSetup
from salvo_game.pygame.config import (
    load_user_settings,
    match_from_user_settings,
    quicksave_path,
    save_user_settings,
    user_settings_for,
)
from salvo_game.pygame.input import InputHandler
from salvo_game.pygame.renderer import (
    Viewport,
    draw_background,
    draw_explosion,
    draw_hud,
    draw_players,
    draw_standings,
    draw_terrain,
    draw_trajectory,
)

logger = logging.getLogger(__name__)


class SalvoApp:
    """Graphical Salvo client built on top of the core game session."""

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        roster: Optional[Sequence[PlayerSetup]] = None,
        *,
        size: tuple = (960, 640),
        hud_height: int = 96,
        threaded: bool = True,
    ) -> None:
        pygame.init()
        pygame.font.init()

        self._user_settings = load_user_settings()
        base = settings or GameSettings()
        if roster is None:
            base, stored_roster = match_from_user_settings(self._user_settings, base)
            roster = stored_roster
        self.settings = base
        self.roster: List[PlayerSetup] = list(roster)

        self.screen = pygame.display.set_mode(size)
        pygame.display.set_caption("Salvo")
        width, height = self.screen.get_size()
        self.hud_rect = pygame.Rect(0, 0, width, hud_height)
        self.field_rect = pygame.Rect(0, hud_height, width, height - hud_height)

        self.font_small = pygame.font.SysFont("consolas", 16)
        self.font_regular = pygame.font.SysFont("consolas", 20)
        self.font_large = pygame.font.SysFont(None, 48)

        self.clock = pygame.time.Clock()
        self.running = True
        self.threaded = threaded

        self.session = GameSession.new_match(self.settings, self.roster)
        self.snapshot: Optional[RenderSnapshot] = None
        self.input = InputHandler(self)

    # ------------------------------------------------------------------
    # Session helpers
    def _replace_session(self, session: GameSession) -> None:
        old = self.session
        old.shutdown()
        if self.threaded:
            old.join(1.0)
        self.session = session
        self.settings = session.ctx.settings
        self.roster = list(session.ctx.roster)
        self.snapshot = None
        if self.threaded:
            session.start()

    def quick_save(self) -> None:
        try:
            path = save_game(quicksave_path(), self.session)
        except OSError as exc:
            logger.warning("Quick save failed: %s", exc)
            return
        logger.info("Game saved to %s", path)

    def quick_load(self) -> None:
        try:
            session = load_game(quicksave_path())
        except FileNotFoundError:
            logger.info("No quick save to load")
            return
        except (OSError, DomainError, KeyError, ValueError) as exc:
            logger.warning("Quick save could not be loaded: %s", exc)
            return
        self._replace_session(session)

    def _save_user_settings(self) -> None:
        data = user_settings_for(self.settings, self.roster)
        save_user_settings(data)
        self._user_settings = data

    # ------------------------------------------------------------------
    # Main loop
    def run(self) -> None:
        """Main pygame loop."""

        if self.threaded:
            self.session.start()
        try:
            while self.running:
                self.clock.tick(60)
                self._handle_events()
                self._update()
                self._draw()
        finally:
            self.session.shutdown()
            if self.threaded:
                self.session.join(1.0)
            self._save_user_settings()
            pygame.quit()

    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            else:
                self.input.process_event(event)

    def _update(self) -> None:
        if not self.threaded and not self.session.match_over:
            self.session.step()
        self.snapshot = self.session.snapshot()

    def _draw(self) -> None:
        snapshot = self.snapshot or self.session.snapshot()
        viewport = Viewport(self.field_rect, len(snapshot.heights), snapshot.max_y)
        self.screen.fill((0, 0, 0))
        draw_background(self.screen, viewport)
        draw_terrain(self.screen, snapshot, viewport)
        draw_players(self.screen, snapshot, viewport)
        draw_trajectory(self.screen, snapshot, viewport)
        draw_explosion(self.screen, snapshot, viewport)
        draw_hud(self.screen, snapshot, self.hud_rect, self.font_small)
        draw_standings(self.screen, snapshot, self.field_rect, self.font_large, self.font_regular)
        pygame.display.flip()


def run_pygame(**kwargs: object) -> None:
    """Convenience helper for launching the pygame client."""

    app = SalvoApp(**kwargs)
    app.run()


__all__ = ["SalvoApp", "run_pygame"]
