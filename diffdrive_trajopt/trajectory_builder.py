"""
Velocity profiler for differential-drive paths.

Converts a discretized path into a timed trajectory:
- Start and end at rest
- Forward pass limits acceleration out of each sample
- Backward pass limits deceleration into each sample
- Reconciliation pass re-checks acceleration after the backward pass and
  assigns timestamps

Each sample's center velocity is capped by wheel free speed, per-wheel
acceleration, tire friction in the turn, and any path speed zones.
"""

import logging
import math
from typing import TYPE_CHECKING

from .dynamics import TrajectoryConstraints, friction_max_speed, wheel_conversion
from .trajectory import Trajectory, TrajectoryPose

if TYPE_CHECKING:
    from .path import Path

logger = logging.getLogger(__name__)

# Floor for a zero average curvature so straight segments still get a finite radius
_CURVATURE_EPSILON = 1e-8
_MIN_CUSP_HEADING_CHANGE = 0.01  # rad


def _wrap_angle(angle: float) -> float:
    """Wrap an angle difference into [-pi, pi]."""
    return (angle + math.pi) % (2 * math.pi) - math.pi


def _center_velocity_ceiling(wheel_velocity: float, conversion: float) -> float:
    """Center velocity implied by a wheel limit; non-positive results do not constrain."""
    if conversion == 0:
        return math.inf
    center = wheel_velocity / conversion
    return center if center > 0 else math.inf


class TrajectoryBuilder:
    """Builds timed trajectories from paths under fixed vehicle constraints."""

    def __init__(self, constraints: TrajectoryConstraints):
        self.constraints = constraints

    @staticmethod
    def _wheel_ceiling(previous_velocity: float, wheel_displacement: float,
                       max_wheel_speed: float, max_wheel_accel: float) -> float:
        """Fastest a wheel can be moving after covering wheel_displacement from previous_velocity."""
        if previous_velocity >= max_wheel_speed:
            return max_wheel_speed
        reachable = math.sqrt(previous_velocity * previous_velocity + 2 * max_wheel_accel * abs(wheel_displacement))
        return math.copysign(1.0, wheel_displacement) * min(max_wheel_speed, reachable)

    @staticmethod
    def compute_velocity_max(constraints: TrajectoryConstraints, previous: TrajectoryPose,
                             current: TrajectoryPose, points_per_inch: float,
                             max_speed: float) -> tuple[float, float]:
        """
        Compute the highest (left, right) wheel velocities reachable at ``current``
        coming from ``previous``.

        ``previous`` is the neighbor already settled by the current pass; in the
        backward pass it is the sample downstream of ``current``.
        """
        curvature_avg = (previous.curvature + current.curvature) / 2 or _CURVATURE_EPSILON

        max_wheel_speed = constraints.max_wheel_speed
        displacement = 1 / points_per_inch

        left_conversion, right_conversion = wheel_conversion(curvature_avg, constraints.track_width)

        max_left_velocity = TrajectoryBuilder._wheel_ceiling(
            previous.left_drive_velocity, displacement * left_conversion,
            max_wheel_speed, constraints.max_wheel_accel
        )
        max_right_velocity = TrajectoryBuilder._wheel_ceiling(
            previous.right_drive_velocity, displacement * right_conversion,
            max_wheel_speed, constraints.max_wheel_accel
        )

        center_velocity = min(
            current.center_velocity,
            _center_velocity_ceiling(max_left_velocity, left_conversion),
            _center_velocity_ceiling(max_right_velocity, right_conversion),
            friction_max_speed(constraints, curvature_avg),
            max_speed,
        )

        return center_velocity * left_conversion, center_velocity * right_conversion

    def _exceeds_accel(self, previous: TrajectoryPose, current: TrajectoryPose, displacement: float) -> bool:
        budget = 2 * self.constraints.max_wheel_accel * displacement
        return (
            current.left_drive_velocity ** 2 > previous.left_drive_velocity ** 2 + budget
            or current.right_drive_velocity ** 2 > previous.right_drive_velocity ** 2 + budget
        )

    def _apply_velocity_max(self, path: "Path", previous: TrajectoryPose,
                            current: TrajectoryPose, points_per_inch: float):
        max_speed = path.max_speed_at(current.position)
        current.left_drive_velocity, current.right_drive_velocity = self.compute_velocity_max(
            self.constraints, previous, current, points_per_inch, max_speed
        )

    def build(self, path: "Path", points_per_inch: float = 3) -> Trajectory:
        """
        Profile ``path`` into a timed trajectory.

        Returns an infeasible trajectory (see ``Trajectory.infeasible``) when the
        path reverses heading faster than its curvature allows.
        """
        if points_per_inch <= 0:
            raise ValueError(f"points_per_inch must be positive, got {points_per_inch}")

        trajectory = path.discretize(points_per_inch, fill_velocity_placeholders=True)
        if len(trajectory) < 2:
            return Trajectory.infeasible("path has no length")

        first = trajectory[0]
        last = trajectory[-1]
        first.left_drive_velocity = 0.0
        first.right_drive_velocity = 0.0
        first.time = 0.0
        last.left_drive_velocity = 0.0
        last.right_drive_velocity = 0.0

        displacement = 1 / points_per_inch
        n = len(trajectory)

        # Forward pass (acceleration)
        for i in range(1, n):
            previous = trajectory[i - 1]
            current = trajectory[i]

            if i < n - 1:
                self._apply_velocity_max(path, previous, current, points_per_inch)

            heading_change = abs(_wrap_angle(current.heading - previous.heading))
            cusp_threshold = max(2 * abs(previous.curvature) * displacement, _MIN_CUSP_HEADING_CHANGE)
            if heading_change > cusp_threshold:
                logger.debug("Rejecting path: heading change %.4f rad at sample %d exceeds %.4f",
                             heading_change, i, cusp_threshold)
                return Trajectory.infeasible(f"cusp at sample {i}")

        # Backward pass (deceleration)
        for i in range(n - 2, 0, -1):
            self._apply_velocity_max(path, trajectory[i + 1], trajectory[i], points_per_inch)

        # Reconciliation pass and timestamps
        for i in range(1, n):
            previous = trajectory[i - 1]
            current = trajectory[i]

            if self._exceeds_accel(previous, current, displacement):
                self._apply_velocity_max(path, previous, current, points_per_inch)

            avg_velocity = abs((previous.center_velocity + current.center_velocity) / 2)
            current.time = previous.time + (displacement / avg_velocity if avg_velocity > 0 else math.inf)

        return Trajectory(trajectory)
