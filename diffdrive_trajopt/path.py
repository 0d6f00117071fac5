"""
Piecewise quintic Hermite paths.

A path is an ordered list of waypoints; each consecutive pair forms one
spline segment. Paths discretize themselves into samples spaced roughly
1/points_per_inch apart along the curve, report caller-defined speed zones,
and can tune their own waypoints to minimize traversal time.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Optional, Union

from .dynamics import TrajectoryConstraints
from .hermite import HermiteWaypoint, control_matrix, evaluate
from .optimizer import (
    OptimizablePolarVec2Data,
    OptimizableVariableData,
    OptimizableVec2Data,
    layered_search,
)
from .trajectory import PathInstant, Trajectory, TrajectoryPose
from .trajectory_builder import TrajectoryBuilder
from .vec2 import Vec2

logger = logging.getLogger(__name__)

SpeedCallback = Callable[[Vec2], float]

# Below this derivative magnitude the tangent is undefined
_DERIVATIVE_EPSILON = 1e-9
# Largest parameter step; also the step taken while the spline is stationary
_MAX_STEP = 0.1
# Largest allowed sample spacing, as a multiple of 1/points_per_inch
_MAX_SPACING_RATIO = 1.5
# Snap to the segment end instead of emitting a near-duplicate final sample
_END_EPSILON = 1e-9


@dataclass
class Waypoint(HermiteWaypoint):
    """A spline control point plus the search domains the optimizer may move it in."""
    position_lock: OptimizableVec2Data = field(default_factory=OptimizableVec2Data)
    derivative_lock: OptimizablePolarVec2Data = field(default_factory=OptimizablePolarVec2Data)
    derivative_2_lock: OptimizablePolarVec2Data = field(default_factory=OptimizablePolarVec2Data)


class ControlLockMode(Enum):
    UNLOCKED = "unlocked"
    DIRECTION_LOCKED = "direction_locked"
    LOCKED = "locked"


def default_polar_optimizer_data(mode: ControlLockMode, max_magnitude: float = 120,
                                 min_magnitude: float = 10) -> OptimizablePolarVec2Data:
    """
    Default search domains for a derivative handle.

    UNLOCKED searches direction and magnitude, DIRECTION_LOCKED only
    magnitude, LOCKED neither.
    """
    magnitude = None
    direction = None

    if mode in (ControlLockMode.UNLOCKED, ControlLockMode.DIRECTION_LOCKED):
        magnitude = OptimizableVariableData(
            range_min=min_magnitude,
            range_max=max_magnitude,
            per_layer=6,
            tolerance=5,
        )

    if mode == ControlLockMode.UNLOCKED:
        direction = OptimizableVariableData(
            range_min=0,
            range_max=2 * math.pi,
            per_layer=8,
            tolerance=math.pi / 64,
        )

    return OptimizablePolarVec2Data(direction=direction, magnitude=magnitude)


class Path:
    """Ordered Hermite waypoints plus speed-limit zones."""

    def __init__(self, waypoints: Optional[Iterable[Waypoint]] = None,
                 speed_callbacks: Optional[Iterable[SpeedCallback]] = None):
        self._waypoints: list[Waypoint] = list(waypoints or [])
        self._speed_callbacks: list[SpeedCallback] = list(speed_callbacks or [])
        self.last_trajectory: Optional[Trajectory] = None

    @property
    def waypoints(self) -> tuple[Waypoint, ...]:
        return tuple(self._waypoints)

    @property
    def speed_callbacks(self) -> tuple[SpeedCallback, ...]:
        return tuple(self._speed_callbacks)

    def append_waypoint(self, *waypoints: Waypoint):
        self._waypoints.extend(waypoints)

    def append_speed_callback(self, *callbacks: SpeedCallback):
        self._speed_callbacks.extend(callbacks)

    @staticmethod
    def _discretize_segment(points_per_inch: float, initial: HermiteWaypoint, final: HermiteWaypoint,
                            fill_velocity_placeholders: bool) -> list[PathInstant]:
        """
        Walk t from 0 to 1 with steps sized to cover 1/points_per_inch of arc each.

        The first-order step ``ds / |r'(t)|`` is capped at _MAX_STEP and then
        halved until the chord it spans is at most _MAX_SPACING_RATIO * ds.
        The profiler counts every gap as ds, so stationary or fast-accelerating
        stretches of the spline must not leave longer gaps.
        """
        states = []
        controls = control_matrix(initial, final)
        inches_per_point = 1 / points_per_inch
        max_spacing = _MAX_SPACING_RATIO * inches_per_point

        instant_type = TrajectoryPose if fill_velocity_placeholders else PathInstant

        def sample(t):
            position, prime, double_prime = evaluate(t, controls)
            prime_magnitude = math.hypot(prime[0], prime[1])

            if prime_magnitude > _DERIVATIVE_EPSILON:
                curvature = (prime[0] * double_prime[1] - double_prime[0] * prime[1]) / prime_magnitude ** 3
            else:
                curvature = 0.0

            instant = instant_type(
                position=Vec2(float(position[0]), float(position[1])),
                curvature=float(curvature),
                heading=math.atan2(prime[1], prime[0]),
            )
            return instant, prime_magnitude

        t = 0.0
        current, prime_magnitude = sample(t)
        states.append(current)

        while t < 1:
            if prime_magnitude > _DERIVATIVE_EPSILON:
                dt = min(_MAX_STEP, inches_per_point / prime_magnitude)
            else:
                dt = _MAX_STEP

            while True:
                next_t = t + dt
                if 1 - next_t < _END_EPSILON:
                    next_t = 1.0
                candidate, candidate_magnitude = sample(next_t)
                if not current.position.distance_to(candidate.position) > max_spacing:
                    break
                dt /= 2

            t = next_t
            current, prime_magnitude = candidate, candidate_magnitude
            states.append(current)

        return states

    def discretize(self, points_per_inch: float,
                   fill_velocity_placeholders: bool = False) -> list[Union[PathInstant, TrajectoryPose]]:
        """
        Sample the whole path at roughly uniform arc length.

        With ``fill_velocity_placeholders`` the samples are TrajectoryPose
        objects whose velocities and time are +inf, ready for profiling.
        """
        if points_per_inch <= 0:
            raise ValueError(f"points_per_inch must be positive, got {points_per_inch}")

        samples = []
        for initial, final in zip(self._waypoints, self._waypoints[1:]):
            # The previous segment's end is this segment's start
            if samples:
                samples.pop()
            samples.extend(self._discretize_segment(points_per_inch, initial, final, fill_velocity_placeholders))

        return samples

    def max_speed_at(self, position: Vec2) -> float:
        """Lowest speed limit (in/s) of all speed zones at position; inf if there are none."""
        return min((callback(position) for callback in self._speed_callbacks), default=math.inf)

    def _local_path(self, i: int) -> "Path":
        """Waypoint i with its immediate neighbors, sharing this path's waypoint objects."""
        return Path(self._waypoints[max(0, i - 1):i + 2], self._speed_callbacks)

    async def optimize(self, layers: int, constraints: TrajectoryConstraints, points_per_inch: float = 3):
        """
        Tune each waypoint in turn to minimize the time of its local trajectory.

        Every waypoint is optimized against its current neighbors only, over
        position x/y and the polar form of both derivatives. Components with
        no search domain stay at their current value.
        """
        trajectory_builder = TrajectoryBuilder(constraints)

        for i, waypoint in enumerate(self._waypoints):
            path = self._local_path(i)

            async def loss_function(v: dict[str, float]) -> float:
                waypoint.position = Vec2(v['position_x'], v['position_y'])
                waypoint.derivative = Vec2.from_polar(v['derivative_dir'], v['derivative_mag'])
                waypoint.derivative_2 = Vec2.from_polar(v['derivative_2_dir'], v['derivative_2_mag'])

                self.last_trajectory = trajectory_builder.build(path, points_per_inch)

                # Let other tasks run between candidate evaluations
                await asyncio.sleep(0)

                error = self.last_trajectory.total_time()
                return error if not math.isnan(error) else math.inf

            variable_data = {
                'position_x': waypoint.position_lock.x or OptimizableVariableData.fixed(waypoint.position.x),
                'position_y': waypoint.position_lock.y or OptimizableVariableData.fixed(waypoint.position.y),

                'derivative_dir': (waypoint.derivative_lock.direction
                                   or OptimizableVariableData.fixed(waypoint.derivative.direction())),
                'derivative_mag': (waypoint.derivative_lock.magnitude
                                   or OptimizableVariableData.fixed(waypoint.derivative.magnitude())),

                'derivative_2_dir': (waypoint.derivative_2_lock.direction
                                     or OptimizableVariableData.fixed(waypoint.derivative_2.direction())),
                'derivative_2_mag': (waypoint.derivative_2_lock.magnitude
                                     or OptimizableVariableData.fixed(waypoint.derivative_2.magnitude())),
            }

            optimal = await layered_search(layers, loss_function, variable_data)

            waypoint.position = Vec2(optimal['position_x'], optimal['position_y'])
            waypoint.derivative = Vec2.from_polar(optimal['derivative_dir'], optimal['derivative_mag'])
            waypoint.derivative_2 = Vec2.from_polar(optimal['derivative_2_dir'], optimal['derivative_2_mag'])

            self.last_trajectory = trajectory_builder.build(path, points_per_inch)
            logger.info("Optimized waypoint %d: position=(%.2f, %.2f), local time=%.3f s",
                        i, waypoint.position.x, waypoint.position.y, self.last_trajectory.total_time())
