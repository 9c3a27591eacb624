"""Pygame front-end for Salvo."""

from salvo_game.pygame.app import SalvoApp, run_pygame

__all__ = ["SalvoApp", "run_pygame"]
