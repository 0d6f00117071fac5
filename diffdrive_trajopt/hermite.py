"""
Quintic Hermite spline evaluation.

A segment blends two waypoints, each carrying a position, a first derivative
and a second derivative. The six basis functions weight, in order:

    initial position, initial derivative, initial 2nd derivative,
    final 2nd derivative, final derivative, final position

so that the curve reproduces the initial waypoint exactly at t=0 and the final
waypoint at t=1, including both derivatives.
"""

from dataclasses import dataclass

import numpy as np
from numpy.polynomial import polynomial as P

from .vec2 import Vec2


# Basis coefficients, one column per basis function (h0..h5),
# one row per power of t (t^0..t^5).
_BASIS = np.array([
    #  h0     h1     h2     h3     h4     h5
    [  1.0,   0.0,   0.0,   0.0,   0.0,   0.0],
    [  0.0,   1.0,   0.0,   0.0,   0.0,   0.0],
    [  0.0,   0.0,   0.5,   0.0,   0.0,   0.0],
    [-10.0,  -6.0,  -1.5,   0.5,  -4.0,  10.0],
    [ 15.0,   8.0,   1.5,  -1.0,   7.0, -15.0],
    [ -6.0,  -3.0,  -0.5,   0.5,  -3.0,   6.0],
])
_BASIS_PRIME = P.polyder(_BASIS, axis=0)
_BASIS_DOUBLE_PRIME = P.polyder(_BASIS, m=2, axis=0)

_BASIS_BY_ORDER = (_BASIS, _BASIS_PRIME, _BASIS_DOUBLE_PRIME)


@dataclass
class HermiteWaypoint:
    """Spline control point: position plus 1st and 2nd derivative (inches)."""
    position: Vec2
    derivative: Vec2
    derivative_2: Vec2


def basis(t: float, order: int = 0) -> np.ndarray:
    """
    Evaluate all six basis functions (or their derivatives) at t.

    Args:
        t: Spline parameter in [0, 1]
        order: 0 for h0..h5, 1 for first derivatives, 2 for second derivatives

    Returns:
        Array of shape (6,) ordered h0..h5
    """
    if order not in (0, 1, 2):
        raise ValueError(f"Unsupported basis derivative order: {order}")
    return P.polyval(t, _BASIS_BY_ORDER[order])


def control_matrix(initial: HermiteWaypoint, final: HermiteWaypoint) -> np.ndarray:
    """Stack the segment's control vectors in basis order, shape (6, 2)."""
    return np.array([
        [initial.position.x, initial.position.y],
        [initial.derivative.x, initial.derivative.y],
        [initial.derivative_2.x, initial.derivative_2.y],
        [final.derivative_2.x, final.derivative_2.y],
        [final.derivative.x, final.derivative.y],
        [final.position.x, final.position.y],
    ], dtype=float)


def evaluate(t: float, controls: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Position, first and second derivative at t for a precomputed control matrix."""
    return (
        basis(t, 0) @ controls,
        basis(t, 1) @ controls,
        basis(t, 2) @ controls,
    )


def _blend(t: float, order: int, initial: HermiteWaypoint, final: HermiteWaypoint) -> Vec2:
    x, y = basis(t, order) @ control_matrix(initial, final)
    return Vec2(float(x), float(y))


def lerp_hermite(t: float, initial: HermiteWaypoint, final: HermiteWaypoint) -> Vec2:
    return _blend(t, 0, initial, final)


def lerp_hermite_prime(t: float, initial: HermiteWaypoint, final: HermiteWaypoint) -> Vec2:
    return _blend(t, 1, initial, final)


def lerp_hermite_double_prime(t: float, initial: HermiteWaypoint, final: HermiteWaypoint) -> Vec2:
    return _blend(t, 2, initial, final)
