"""
Trajectory build and optimize endpoints.
"""

import logging
import math
import time

import casadi as ca
import numpy as np
from fastapi import APIRouter, HTTPException

from ..config import get_optimizer_layers, get_points_per_inch
from ..dynamics import TrajectoryConstraints, create_wheel_force_function
from ..models import (
    OptimizeRequest,
    OptimizeResponse,
    SolveRequest,
    SolveResponse,
    SpeedZoneRequest,
    TrajectoryResponse,
    Vec2Model,
    WaypointRequest,
    WaypointResponse,
)
from ..optimizer import OptimizableVariableData, OptimizableVec2Data
from ..path import ControlLockMode, Path, SpeedCallback, Waypoint, default_polar_optimizer_data
from ..trajectory import Trajectory
from ..trajectory_builder import TrajectoryBuilder
from ..vec2 import Vec2

logger = logging.getLogger(__name__)

router = APIRouter()

# Position search tolerance for unlocked waypoints (in)
POSITION_TOLERANCE = 0.5


def _to_constraints(request: SolveRequest) -> TrajectoryConstraints:
    if request.constraints is None:
        return TrajectoryConstraints()
    return TrajectoryConstraints(**request.constraints.model_dump())


def _position_lock(wp: WaypointRequest) -> OptimizableVec2Data:
    if wp.position_locked:
        return OptimizableVec2Data()

    half_range = wp.position_range / 2
    return OptimizableVec2Data(
        x=OptimizableVariableData(wp.position.x - half_range, wp.position.x + half_range,
                                  per_layer=3, tolerance=POSITION_TOLERANCE),
        y=OptimizableVariableData(wp.position.y - half_range, wp.position.y + half_range,
                                  per_layer=3, tolerance=POSITION_TOLERANCE),
    )


def _to_waypoint(wp: WaypointRequest) -> Waypoint:
    return Waypoint(
        position=Vec2(wp.position.x, wp.position.y),
        derivative=Vec2(wp.derivative.x, wp.derivative.y),
        derivative_2=Vec2(wp.derivative_2.x, wp.derivative_2.y),
        position_lock=_position_lock(wp),
        derivative_lock=default_polar_optimizer_data(ControlLockMode(wp.derivative_mode)),
        derivative_2_lock=default_polar_optimizer_data(ControlLockMode(wp.derivative_2_mode)),
    )


def _zone_callback(zone: SpeedZoneRequest) -> SpeedCallback:
    def max_speed(position: Vec2) -> float:
        inside = (zone.x <= position.x <= zone.x + zone.width
                  and zone.y <= position.y <= zone.y + zone.height)
        return zone.max_speed if inside else math.inf
    return max_speed


def _to_path(request: SolveRequest) -> Path:
    return Path(
        waypoints=[_to_waypoint(wp) for wp in request.waypoints],
        speed_callbacks=[_zone_callback(zone) for zone in request.speed_zones],
    )


def _force_limits(constraints: TrajectoryConstraints, velocities: np.ndarray) -> list[float]:
    """Evaluate the wheel force envelope at every sample."""
    f_wheel_force = create_wheel_force_function(constraints).map(len(velocities))
    forces = f_wheel_force(ca.DM(velocities).T)
    return [float(f) for f in np.array(forces).ravel()]


def _to_response_fields(trajectory: Trajectory, constraints: TrajectoryConstraints) -> dict:
    if not trajectory.feasible:
        return {"success": False, "reason": trajectory.infeasible_reason}

    total_time = trajectory.total_time()
    if not math.isfinite(total_time):
        return {"success": False, "reason": "trajectory never reaches the end of the path"}

    arrays = trajectory.to_arrays()
    return {
        "success": True,
        "total_time": total_time,
        "trajectory": TrajectoryResponse(
            times=arrays['time'].tolist(),
            x=arrays['x'].tolist(),
            y=arrays['y'].tolist(),
            heading=arrays['heading'].tolist(),
            curvature=arrays['curvature'].tolist(),
            left_velocity=arrays['left_velocity'].tolist(),
            right_velocity=arrays['right_velocity'].tolist(),
            left_force_limit=_force_limits(constraints, np.abs(arrays['left_velocity'])),
            right_force_limit=_force_limits(constraints, np.abs(arrays['right_velocity'])),
        ),
    }


@router.post("/solve", response_model=SolveResponse)
async def solve_trajectory(request: SolveRequest):
    """
    Profile the path through the given waypoints into a timed trajectory.

    The profile respects:
    - Wheel free speed and acceleration limits
    - Tire friction in turns
    - Speed zones
    """
    constraints = _to_constraints(request)
    path = _to_path(request)
    points_per_inch = request.points_per_inch or get_points_per_inch()

    try:
        trajectory = TrajectoryBuilder(constraints).build(path, points_per_inch)
        return SolveResponse(**_to_response_fields(trajectory, constraints))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Trajectory build failed")
        raise HTTPException(status_code=500, detail=f"Solver error: {str(e)}")


@router.post("/optimize", response_model=OptimizeResponse)
async def optimize_trajectory(request: OptimizeRequest):
    """
    Tune unlocked waypoint parameters to minimize traversal time, then
    return the tuned waypoints and their trajectory.
    """
    constraints = _to_constraints(request)
    path = _to_path(request)
    points_per_inch = request.points_per_inch or get_points_per_inch()
    layers = request.layers if request.layers is not None else get_optimizer_layers()

    start_time = time.time()
    try:
        await path.optimize(layers, constraints, points_per_inch)
        trajectory = TrajectoryBuilder(constraints).build(path, points_per_inch)
        fields = _to_response_fields(trajectory, constraints)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("Path optimization failed")
        raise HTTPException(status_code=500, detail=f"Solver error: {str(e)}")
    optimize_time_ms = (time.time() - start_time) * 1000

    return OptimizeResponse(
        **fields,
        waypoints=[
            WaypointResponse(
                position=Vec2Model(x=wp.position.x, y=wp.position.y),
                derivative=Vec2Model(x=wp.derivative.x, y=wp.derivative.y),
                derivative_2=Vec2Model(x=wp.derivative_2.x, y=wp.derivative_2.y),
            )
            for wp in path.waypoints
        ],
        optimize_time_ms=optimize_time_ms,
    )
