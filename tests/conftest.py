import pytest

from diffdrive_trajopt.dynamics import TrajectoryConstraints
from diffdrive_trajopt.path import Path, Waypoint
from diffdrive_trajopt.vec2 import Vec2


def _waypoint(x, y, dx, dy, ddx=0.0, ddy=0.0, **locks) -> Waypoint:
    return Waypoint(
        position=Vec2(x, y),
        derivative=Vec2(dx, dy),
        derivative_2=Vec2(ddx, ddy),
        **locks,
    )


@pytest.fixture
def make_waypoint():
    """Build a Waypoint from plain coordinates: (x, y, dx, dy[, ddx, ddy], **locks)."""
    return _waypoint


@pytest.fixture
def constraints() -> TrajectoryConstraints:
    """Generous limits: ~62.8 in/s free speed, 100 in/s^2 wheel acceleration."""
    return TrajectoryConstraints(
        drivetrain_rpm=300,
        wheel_diameter=4,
        max_wheel_accel=100,
        track_width=15,
        mass_lb=30,
        friction_coefficient=1.0,
    )


@pytest.fixture
def straight_path() -> Path:
    """A straight 24 inch line along +x, parameterized at constant speed."""
    return Path([
        _waypoint(0, 0, 24, 0),
        _waypoint(24, 0, 24, 0),
    ])


@pytest.fixture
def curved_path() -> Path:
    """A quarter-turn to the left from (0, 0) heading +x to (36, 36) heading +y."""
    return Path([
        _waypoint(0, 0, 60, 0),
        _waypoint(36, 36, 0, 60),
    ])
