"""
Pydantic models for API request/response types.
"""

from typing import Optional
from pydantic import BaseModel, Field


class Vec2Model(BaseModel):
    x: float = Field(..., description="X in inches")
    y: float = Field(..., description="Y in inches")


# Waypoint models
class WaypointRequest(BaseModel):
    position: Vec2Model
    derivative: Vec2Model = Field(..., description="First derivative (tangent handle) in inches")
    derivative_2: Vec2Model = Field(default_factory=lambda: Vec2Model(x=0.0, y=0.0),
                                    description="Second derivative handle in inches")
    position_locked: bool = Field(True, description="Whether the optimizer must keep the position fixed")
    position_range: float = Field(12.0, gt=0, description="Search width around the position when unlocked (in)")
    derivative_mode: str = Field("locked", pattern="^(unlocked|direction_locked|locked)$",
                                 description="Lock mode for the first derivative")
    derivative_2_mode: str = Field("locked", pattern="^(unlocked|direction_locked|locked)$",
                                   description="Lock mode for the second derivative")


# Speed zone models
class SpeedZoneRequest(BaseModel):
    """Axis-aligned rectangle inside which speed is capped."""
    x: float = Field(..., description="Lower-left X (in)")
    y: float = Field(..., description="Lower-left Y (in)")
    width: float = Field(..., gt=0, description="Width (in)")
    height: float = Field(..., gt=0, description="Height (in)")
    max_speed: float = Field(..., gt=0, description="Speed cap inside the zone (in/s)")


# Vehicle parameters
class ConstraintsRequest(BaseModel):
    drivetrain_rpm: float = Field(300.0, gt=0, description="Wheel free speed (RPM)")
    wheel_diameter: float = Field(4.0, gt=0, description="Wheel diameter (in)")
    max_wheel_accel: float = Field(100.0, gt=0, description="Max wheel acceleration (in/s^2)")
    track_width: float = Field(15.0, gt=0, description="Track width (in)")
    mass_lb: float = Field(30.0, gt=0, description="Robot mass (lb)")
    friction_coefficient: float = Field(1.0, gt=0, description="Tire friction coefficient")


# Solve request/response
class SolveRequest(BaseModel):
    waypoints: list[WaypointRequest] = Field(..., min_length=2)
    constraints: Optional[ConstraintsRequest] = None
    speed_zones: list[SpeedZoneRequest] = Field(default_factory=list)
    points_per_inch: Optional[float] = Field(None, gt=0, le=100, description="Samples per inch (default from config)")


class OptimizeRequest(SolveRequest):
    layers: Optional[int] = Field(None, ge=0, le=20, description="Narrowing layers (default from config)")


class TrajectoryResponse(BaseModel):
    times: list[float]
    x: list[float]
    y: list[float]
    heading: list[float]
    curvature: list[float]
    left_velocity: list[float]
    right_velocity: list[float]
    left_force_limit: list[float]
    right_force_limit: list[float]


class SolveResponse(BaseModel):
    success: bool
    reason: Optional[str] = None
    total_time: Optional[float] = None
    trajectory: Optional[TrajectoryResponse] = None


class WaypointResponse(BaseModel):
    position: Vec2Model
    derivative: Vec2Model
    derivative_2: Vec2Model


class OptimizeResponse(SolveResponse):
    waypoints: list[WaypointResponse]
    optimize_time_ms: float
