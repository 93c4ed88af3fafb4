# server/utils/helpers.py
"""Utility functions and helpers."""

import math
import random
import time


def now_ms() -> float:
    """Monotonic time in milliseconds; only differences are meaningful."""
    return time.monotonic() * 1000


def calculate_distance(x1: float, y1: float, x2: float, y2: float) -> float:
    """Calculate distance between two points."""
    return math.hypot(x2 - x1, y2 - y1)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def clamp_to_arena(x: float, y: float, size: float, width: float, height: float) -> tuple:
    """Clamp a top-left anchored box of ``size`` into the arena."""
    return clamp(x, 0, width - size), clamp(y, 0, height - size)


def reflect_off_vertical(angle: float) -> float:
    """Reflect a heading off a left/right wall."""
    return math.pi - angle


def reflect_off_horizontal(angle: float) -> float:
    """Reflect a heading off a top/bottom wall."""
    return -angle


def random_color(rng: random.Random) -> str:
    return f"hsl({rng.randint(0, 360)}, 100%, 50%)"


def random_spawn(rng: random.Random, size: float, width: float, height: float) -> tuple:
    """Random top-left position for a box of ``size`` inside the arena."""
    return float(rng.randint(0, int(width - size))), float(rng.randint(0, int(height - size)))


def is_collision(
    x1: float, y1: float, r1: float, x2: float, y2: float, r2: float
) -> bool:
    """True when the circle at (x1, y1) overlaps the circle at (x2, y2)."""
    return calculate_distance(x1, y1, x2, y2) < (r1 + r2)
