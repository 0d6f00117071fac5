"""
2D point/vector primitive. All lengths are in inches.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vec2:
    """Immutable 2D vector."""
    x: float
    y: float

    @staticmethod
    def from_polar(theta: float, radius: float) -> "Vec2":
        return Vec2(math.cos(theta) * radius, math.sin(theta) * radius)

    def distance_to_squared(self, other: "Vec2") -> float:
        return (self.x - other.x) ** 2 + (self.y - other.y) ** 2

    def distance_to(self, other: "Vec2") -> float:
        return math.sqrt(self.distance_to_squared(other))

    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)

    def direction(self) -> float:
        """Angle of the vector in radians, measured from +x."""
        return math.atan2(self.y, self.x)

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__
