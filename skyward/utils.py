"""Geometry and color utility functions used across the game."""

from __future__ import annotations

import math
from typing import Callable

import numpy as np


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp a numeric value into the inclusive range [lo, hi]."""
    return max(lo, min(hi, value))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def closest_point_on_rect(
    px: float, py: float, x: float, y: float, w: float, h: float
) -> tuple[float, float]:
    """Return the point of rectangle (x, y, w, h) closest to P(px, py)."""
    return clamp(px, x, x + w), clamp(py, y, y + h)


def circle_rect_collision(
    cx: float, cy: float, r: float, x: float, y: float, w: float, h: float
) -> bool:
    """True if the circle centered at (cx, cy) with radius r touches the rectangle."""
    closest_x, closest_y = closest_point_on_rect(cx, cy, x, y, w, h)
    dx = cx - closest_x
    dy = cy - closest_y
    return (dx * dx + dy * dy) <= r * r


def rects_overlap(
    a: tuple[float, float, float, float],
    b: tuple[float, float, float, float],
    pad: float = 0.0,
) -> bool:
    """True if rectangles a and b, each (x, y, w, h), intersect once padded by pad."""
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return not (
        ax + aw + pad < bx
        or bx + bw + pad < ax
        or ay + ah + pad < by
        or by + bh + pad < ay
    )


def point_in_rect(px: float, py: float, x: float, y: float, w: float, h: float) -> bool:
    return x < px < x + w and y < py < y + h


def distance(ax: float, ay: float, bx: float, by: float) -> float:
    return math.hypot(bx - ax, by - ay)


def scale_color(color: tuple[int, int, int], factor: float) -> tuple[int, int, int]:
    """Scale an RGB color by factor, clamped to [0,255]."""
    r, g, b = color
    return (
        int(clamp(r * factor, 0, 255)),
        int(clamp(g * factor, 0, 255)),
        int(clamp(b * factor, 0, 255)),
    )


def procedural_noise_surface(
    w: int, h: int, noise_func: Callable[[np.ndarray, np.ndarray], np.ndarray]
) -> np.ndarray:
    """Generate a grayscale noise image using NumPy meshgrid and a custom noise function.

    Args:
        w, h: Dimensions.
        noise_func: Function taking X, Y meshgrids in [0, 1] and returning values in [0, 1].

    Returns:
        A (w, h, 3) uint8 array laid out for ``pygame.surfarray``.
    """
    x = np.linspace(0, 1, w, dtype=np.float32)
    y = np.linspace(0, 1, h, dtype=np.float32)
    X, Y = np.meshgrid(x, y, indexing="ij")
    v = noise_func(X, Y)
    c = np.clip(v * 255, 0, 255).astype(np.uint8)
    return np.stack([c, c, c], axis=-1)


def starfield(w: int, h: int, count: int, rng: np.random.Generator) -> np.ndarray:
    """Return a (count, 4) array of stars as columns x, y, radius, alpha."""
    stars = np.empty((count, 4), dtype=np.float32)
    stars[:, 0] = rng.uniform(0, w, count)
    stars[:, 1] = rng.uniform(0, h, count)
    stars[:, 2] = rng.uniform(0.3, 1.5, count)
    stars[:, 3] = rng.uniform(0.1, 1.0, count)
    return stars
