"""
Geometry helpers for the sketch: points, vectors, distances and range mapping
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """2D position on the canvas"""
    x: float
    y: float


@dataclass(frozen=True)
class Vector:
    """2D velocity (units per frame)"""
    x: float
    y: float

    def flipped_x(self):
        return Vector(-self.x, self.y)

    def flipped_y(self):
        return Vector(self.x, -self.y)


def translate(point, vector):
    """Move a point by a vector"""
    return Point(point.x + vector.x, point.y + vector.y)


def distance_between(a, b):
    """Length of the line segment from a to b"""
    return math.sqrt((b.x - a.x) ** 2 + (b.y - a.y) ** 2)


def map_range(value, from_lower, from_upper, to_lower, to_upper):
    """Linearly remap value from [from_lower, from_upper] onto [to_lower, to_upper]

    Not clamped: values outside the source range overshoot the target range.
    """
    return to_lower + (value - from_lower) / (from_upper - from_lower) * (to_upper - to_lower)
