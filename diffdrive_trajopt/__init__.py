"""Differential-drive Hermite trajectory generator and optimizer."""

from .dynamics import TrajectoryConstraints, create_wheel_force_function
from .optimizer import OptimizableVariableData, layered_search, search
from .path import ControlLockMode, Path, Waypoint, default_polar_optimizer_data
from .trajectory import Trajectory, TrajectoryPose
from .trajectory_builder import TrajectoryBuilder
from .vec2 import Vec2

__all__ = [
    'TrajectoryConstraints',
    'create_wheel_force_function',
    'OptimizableVariableData',
    'search',
    'layered_search',
    'ControlLockMode',
    'Path',
    'Waypoint',
    'default_polar_optimizer_data',
    'Trajectory',
    'TrajectoryPose',
    'TrajectoryBuilder',
    'Vec2',
]
