"""Rendering helpers for the Salvo pygame client.

Everything here draws from a :class:`~salvo_game.core.session.RenderSnapshot`
and never touches the live session.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import pygame

from salvo_game.core.player import PLAYER_X_SIZE, PLAYER_Y_SIZE, TURRET_LENGTH
from salvo_game.core.session import PlayerView, RenderSnapshot

SKY_TOP = pygame.Color(18, 24, 48)
SKY_BOTTOM = pygame.Color(70, 96, 140)
GROUND = pygame.Color(94, 140, 62)
GROUND_DARK = pygame.Color(58, 92, 40)
TRAIL = pygame.Color(240, 240, 200)
EXPLOSION_CORE = pygame.Color(255, 240, 160)
EXPLOSION_EDGE = pygame.Color(230, 90, 30)
HUD_BACKGROUND = pygame.Color(12, 14, 22)
TEXT = pygame.Color(230, 230, 230)


def _rgb(value: int) -> pygame.Color:
    return pygame.Color((value >> 16) & 0xFF, (value >> 8) & 0xFF, value & 0xFF)


def _blend_color(color: pygame.Color, other: pygame.Color, ratio: float) -> pygame.Color:
    clamped = max(0.0, min(1.0, ratio))
    inv = 1.0 - clamped
    return pygame.Color(
        int(color.r * inv + other.r * clamped),
        int(color.g * inv + other.g * clamped),
        int(color.b * inv + other.b * clamped),
    )


@dataclass(frozen=True)
class Viewport:
    """Maps field coordinates (y up) onto the playfield rectangle."""

    rect: pygame.Rect
    field_width: int
    max_y: float

    @property
    def scale_x(self) -> float:
        return self.rect.width / max(1, self.field_width)

    @property
    def scale_y(self) -> float:
        return self.rect.height / max(1.0, self.max_y)

    def to_screen(self, x: float, y: float) -> Tuple[int, int]:
        sx = self.rect.left + x * self.scale_x
        sy = self.rect.bottom - y * self.scale_y
        return int(round(sx)), int(round(sy))


def draw_background(surface: pygame.Surface, viewport: Viewport) -> None:
    rect = viewport.rect
    steps = 24
    band = max(1, rect.height // steps + 1)
    for i in range(steps):
        color = _blend_color(SKY_TOP, SKY_BOTTOM, i / (steps - 1))
        pygame.draw.rect(surface, color, (rect.left, rect.top + i * band, rect.width, band))


def draw_terrain(surface: pygame.Surface, snapshot: RenderSnapshot, viewport: Viewport) -> None:
    heights = snapshot.heights
    if not heights:
        return
    points = [viewport.to_screen(0, 0)]
    points.extend(viewport.to_screen(x, h) for x, h in enumerate(heights))
    points.append(viewport.to_screen(len(heights) - 1, 0))
    pygame.draw.polygon(surface, GROUND, points)
    pygame.draw.lines(surface, GROUND_DARK, False, points[1:-1], 2)


def _draw_player(surface: pygame.Surface, player: PlayerView, viewport: Viewport) -> None:
    color = _rgb(player.rgb)
    if not player.alive:
        color = _blend_color(color, pygame.Color("black"), 0.6)
    left, top = viewport.to_screen(player.x - PLAYER_X_SIZE / 2, player.y + PLAYER_Y_SIZE / 2)
    right, bottom = viewport.to_screen(player.x + PLAYER_X_SIZE / 2, player.y)
    body = pygame.Rect(left, top, max(2, right - left), max(2, bottom - top))
    pygame.draw.rect(surface, color, body, border_radius=3)

    turret_y = player.y + PLAYER_Y_SIZE / 4
    rad = math.radians(player.angle_deg)
    start = viewport.to_screen(player.x, turret_y)
    end = viewport.to_screen(
        player.x + TURRET_LENGTH * math.cos(rad),
        turret_y + TURRET_LENGTH * math.sin(rad),
    )
    if player.alive:
        pygame.draw.line(surface, color, start, end, 3)
    if player.is_current:
        pygame.draw.rect(surface, pygame.Color("white"), body.inflate(6, 6), 1, border_radius=4)


def draw_players(surface: pygame.Surface, snapshot: RenderSnapshot, viewport: Viewport) -> None:
    for player in snapshot.players:
        _draw_player(surface, player, viewport)


def draw_trajectory(surface: pygame.Surface, snapshot: RenderSnapshot, viewport: Viewport) -> None:
    if len(snapshot.trajectory) >= 2:
        points = [viewport.to_screen(x, y) for x, y in snapshot.trajectory]
        pygame.draw.lines(surface, TRAIL, False, points, 1)
    if snapshot.projectile is not None:
        pygame.draw.circle(surface, pygame.Color("white"), viewport.to_screen(*snapshot.projectile), 3)


def draw_explosion(surface: pygame.Surface, snapshot: RenderSnapshot, viewport: Viewport) -> None:
    explosion = snapshot.explosion
    if explosion is None:
        return
    center = viewport.to_screen(explosion.x, explosion.y)
    radius = max(2, int(explosion.radius * viewport.scale_x))
    pygame.draw.circle(surface, EXPLOSION_EDGE, center, radius)
    pygame.draw.circle(surface, EXPLOSION_CORE, center, max(1, radius * 2 // 3))


def draw_hud(
    surface: pygame.Surface,
    snapshot: RenderSnapshot,
    rect: pygame.Rect,
    font: pygame.font.Font,
) -> None:
    pygame.draw.rect(surface, HUD_BACKGROUND, rect)
    lines = [
        f"Round {snapshot.round_number}/{snapshot.num_rounds}   Wind {snapshot.wind:+d}",
        snapshot.message,
    ]
    current = snapshot.current_player
    if current is not None and snapshot.state in ("human_move", "computer_move", "ballistics"):
        power = f"{snapshot.power}" if snapshot.power >= 0 else "--"
        lines.append(
            f"{current.name}: angle {current.angle_deg}  power {power}  "
            f"{current.weapon}  life {current.life}  ${current.cash}"
        )
    y = rect.top + 8
    for line in lines:
        text = font.render(line, True, TEXT)
        surface.blit(text, (rect.left + 12, y))
        y += text.get_height() + 4


def draw_standings(
    surface: pygame.Surface,
    snapshot: RenderSnapshot,
    rect: pygame.Rect,
    title_font: pygame.font.Font,
    font: pygame.font.Font,
) -> None:
    if snapshot.state != "leaderboard" or not snapshot.standings:
        return
    overlay = pygame.Surface(rect.size, pygame.SRCALPHA)
    overlay.fill((0, 0, 0, 170))
    surface.blit(overlay, rect.topleft)
    title = "Final standings" if snapshot.num_rounds == snapshot.round_number else "Standings"
    text = title_font.render(title, True, TEXT)
    surface.blit(text, text.get_rect(midtop=(rect.centerx, rect.top + 24)))
    y = rect.top + 24 + text.get_height() + 16
    for name, earnings, rgb in snapshot.standings:
        line = font.render(f"{name:<14} ${earnings:>8}", True, _rgb(rgb))
        surface.blit(line, line.get_rect(midtop=(rect.centerx, y)))
        y += line.get_height() + 6


__all__ = [
    "Viewport",
    "draw_background",
    "draw_explosion",
    "draw_hud",
    "draw_players",
    "draw_standings",
    "draw_terrain",
    "draw_trajectory",
]
