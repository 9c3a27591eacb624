"""Destructible battlefield floor stored as a one-dimensional height field."""

from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence

logger = logging.getLogger(__name__)

TERRAIN_STYLES = ("hilly", "rolling", "flat")


@dataclass
class TerrainSettings:
    """Configuration options for terrain generation."""

    width: int = 480
    max_y: float = 320.0
    min_height: float = 40.0
    max_height: float = 200.0
    smoothing: int = 3
    seed: Optional[int] = None
    style: str = "hilly"


class Terrain:
    """Height samples, one per column, each kept within ``[0, max_y]``.

    Columns are never added, removed or reordered after generation; the only
    mutation is :meth:`carve`, which can lower a column but never raise it.
    """

    def __init__(
        self,
        settings: Optional[TerrainSettings] = None,
        heights: Optional[Sequence[float]] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or TerrainSettings()
        self.max_y = float(self.settings.max_y)
        self._rng = rng or random.Random(self.settings.seed)
        if heights is not None:
            self.width = len(heights)
            self._heights: List[float] = [self._clamp(h) for h in heights]
        else:
            self.width = self.settings.width
            self._heights = self._generate()

    @classmethod
    def flat(cls, width: int, height: float, max_y: float = 320.0) -> "Terrain":
        settings = TerrainSettings(
            width=width,
            max_y=max_y,
            min_height=height,
            max_height=height,
            smoothing=0,
            style="flat",
        )
        return cls(settings)

    # ------------------------------------------------------------------
    # Generation
    def _generate(self) -> List[float]:
        style = (self.settings.style or "hilly").lower()
        if style not in TERRAIN_STYLES:
            raise ValueError(f"Unknown terrain style '{self.settings.style}'")
        min_h = max(0.0, min(self.settings.min_height, self.max_y))
        max_h = max(min_h, min(self.settings.max_height, self.max_y))
        if style == "flat" or max_h == min_h:
            return [self._clamp((min_h + max_h) * 0.5) for _ in range(self.width)]

        if style == "rolling":
            layers = [(self.width // 2, 0.8), (self.width // 6, 0.2)]
        else:
            layers = [(self.width // 4, 0.55), (self.width // 10, 0.3), (self.width // 24, 0.15)]

        heights = [0.0] * self.width
        for spacing, strength in layers:
            noise = self._value_noise(spacing)
            amplitude = (max_h - min_h) * strength
            for i in range(self.width):
                heights[i] += (noise[i] - 0.5) * amplitude

        offset = (min_h + max_h) * 0.5
        heights = [max(min_h, min(max_h, offset + h)) for h in heights]
        return self._smooth(heights, self.settings.smoothing)

    def _value_noise(self, spacing: int) -> List[float]:
        spacing = max(1, spacing)
        control_count = self.width // spacing + 3
        controls = [self._rng.random() for _ in range(control_count)]
        noise = [0.0] * self.width
        for i in range(self.width):
            idx = i // spacing
            local = (i % spacing) / spacing
            t = local * local * (3 - 2 * local)  # smoothstep
            noise[i] = controls[idx] * (1 - t) + controls[idx + 1] * t
        return noise

    def _smooth(self, heights: List[float], iterations: int) -> List[float]:
        if self.width < 3:
            return heights
        kernel = (0.25, 0.5, 0.25)
        for _ in range(max(0, iterations)):
            previous = heights[:]
            for i in range(self.width):
                left = previous[max(0, i - 1)]
                right = previous[min(self.width - 1, i + 1)]
                heights[i] = left * kernel[0] + previous[i] * kernel[1] + right * kernel[2]
        return heights

    # ------------------------------------------------------------------
    # Queries
    @property
    def vertical_scale(self) -> float:
        """Factor that puts vertical distances in column units."""

        return self.width / self.max_y if self.max_y > 0 else 1.0

    @property
    def heights(self) -> tuple:
        return tuple(self._heights)

    def in_bounds(self, column: int) -> bool:
        return 0 <= column < self.width

    def height_at(self, column: int) -> float:
        """Ground height under ``column``, with out-of-range columns clamped."""

        column = max(0, min(self.width - 1, column))
        return self._heights[column]

    def ground_under(self, x: float) -> float:
        return self.height_at(int(round(x)))

    # ------------------------------------------------------------------
    # Terrain manipulation
    def carve(self, cx: float, cy: float, radius: float) -> int:
        """Cut a circular crater; returns the number of columns lowered."""

        if radius <= 0:
            return 0
        start = max(0, int(math.floor(cx - radius)))
        end = min(self.width - 1, int(math.ceil(cx + radius)))
        lowered = 0
        for column in range(start, end + 1):
            dx = column - cx
            if abs(dx) > radius:
                continue
            dip = math.sqrt(radius * radius - dx * dx)
            floor = cy - dip
            current = self._heights[column]
            if floor < current:
                self._heights[column] = max(0.0, floor)
                lowered += 1
        logger.debug(
            "Carved crater at (%.1f, %.1f) r=%.1f, %d columns lowered",
            cx,
            cy,
            radius,
            lowered,
        )
        return lowered

    def _clamp(self, value: float) -> float:
        return max(0.0, min(self.max_y, float(value)))


__all__ = ["TERRAIN_STYLES", "Terrain", "TerrainSettings"]
