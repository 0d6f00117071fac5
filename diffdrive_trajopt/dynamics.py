"""
Differential-drive kinematics and physical limits.

Units at this boundary:
    lengths       inches
    velocities    in/s
    accelerations in/s^2
    angles        radians
    mass          pounds (converted to kg internally)
    motor speed   RPM

Curvature is signed by the cross product x'y'' - x''y'. For a center velocity v
and curvature k the wheel velocities are

    left  = v * (1 + k * track_width / 2)
    right = v * (1 - k * track_width / 2)
"""

import math
from dataclasses import dataclass

import casadi as ca


GRAVITATIONAL_ACCEL = 9.81      # m/s^2
KG_PER_LB = 0.453592
METERS_PER_INCH = 0.0254
INCHES_PER_METER = 39.3701


@dataclass(frozen=True)
class TrajectoryConstraints:
    """Physical parameters for the differential-drive vehicle."""
    drivetrain_rpm: float = 300.0        # RPM (wheel free speed)
    wheel_diameter: float = 4.0          # in
    max_wheel_accel: float = 100.0       # in/s^2
    track_width: float = 15.0            # in
    mass_lb: float = 30.0                # lb
    friction_coefficient: float = 1.0

    @property
    def max_wheel_speed(self) -> float:
        """Wheel surface speed at free speed (in/s)."""
        return (self.drivetrain_rpm * math.pi * self.wheel_diameter) / 60

    @property
    def mass_kg(self) -> float:
        return self.mass_lb * KG_PER_LB


def wheel_conversion(curvature: float, track_width: float) -> tuple[float, float]:
    """Factors mapping center velocity to (left, right) wheel velocity."""
    half_track = track_width / 2
    return 1 + curvature * half_track, 1 - curvature * half_track


def friction_max_speed(constraints: TrajectoryConstraints, curvature: float) -> float:
    """
    Highest center speed (in/s) at which tire friction can hold the turn.

    Evaluated in SI: v = sqrt(mu * m * g / |k|), with k converted to 1/m.
    """
    curvature_unsigned = abs(curvature)
    if curvature_unsigned == 0:
        return math.inf

    curvature_m = curvature_unsigned * INCHES_PER_METER
    return INCHES_PER_METER * math.sqrt(
        (constraints.friction_coefficient * constraints.mass_kg * GRAVITATIONAL_ACCEL) / curvature_m
    )


def create_wheel_force_function(constraints: TrajectoryConstraints) -> ca.Function:
    """
    Create a CasADi function for the empirical per-wheel force envelope.

    The envelope is a motor torque curve (capped by a vendor current limit)
    scaled to ground force at the wheel. It is not used by the velocity
    profiler; it is exposed for force-based analysis of a built trajectory.

    Returns:
        f_wheel_force: CasADi Function (wheel_velocity [in/s]) -> max force [N]
    """
    wheel_velocity = ca.MX.sym('wheel_velocity')

    wheel_radius = constraints.wheel_diameter / 2
    wheel_radius_m = wheel_radius * METERS_PER_INCH
    max_rpm = constraints.drivetrain_rpm

    # rad/s -> RPM, then fraction of free speed
    wheel_rotational_velocity = wheel_velocity / wheel_radius
    percent_of_max_speed = (wheel_rotational_velocity * (60 / (2 * math.pi))) / max_rpm

    # Torque falls off linearly with speed, capped at the vendor limit
    torque = (100 / max_rpm) * ca.fmin(2.1, -3.275 * percent_of_max_speed + 3.965)
    force = torque / wheel_radius_m

    return ca.Function('f_wheel_force', [wheel_velocity], [force])
