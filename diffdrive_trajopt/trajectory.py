"""
Timed trajectory samples and time-indexed playback.
"""

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .vec2 import Vec2


@dataclass
class PathInstant:
    """A geometric sample along a path."""
    position: Vec2
    curvature: float  # 1/in, positive for left turns
    heading: float    # radians


@dataclass
class TrajectoryPose(PathInstant):
    """A path sample with wheel velocities (in/s) and timestamp (s) filled in by the profiler."""
    left_drive_velocity: float = math.inf
    right_drive_velocity: float = math.inf
    time: float = math.inf

    @property
    def center_velocity(self) -> float:
        return (self.left_drive_velocity + self.right_drive_velocity) / 2


def _lerp(a: float, b: float, t: float) -> float:
    return a + t * (b - a)


@dataclass
class Trajectory:
    """
    Ordered, time-monotonic sequence of poses.

    An infeasible trajectory carries a reason and a single pose whose fields
    are all +inf, so ``total_time()`` evaluates to inf and it scores as the
    worst possible candidate.
    """
    states: list[TrajectoryPose] = field(default_factory=list)
    infeasible_reason: Optional[str] = None

    @classmethod
    def infeasible(cls, reason: str) -> "Trajectory":
        sentinel = TrajectoryPose(
            position=Vec2(math.inf, math.inf),
            curvature=math.inf,
            heading=math.inf,
            left_drive_velocity=math.inf,
            right_drive_velocity=math.inf,
            time=math.inf,
        )
        return cls(states=[sentinel], infeasible_reason=reason)

    @property
    def feasible(self) -> bool:
        return self.infeasible_reason is None

    def total_time(self) -> float:
        if not self.states:
            raise ValueError("Trajectory has no states")
        return self.states[-1].time

    def get_state(self, time: float) -> Optional[TrajectoryPose]:
        """
        Interpolate the pose at ``time``.

        Returns None if time is before the first sample or at/after the last.
        """
        for last_state, state in zip(self.states, self.states[1:]):
            if state.time > time:
                if time < last_state.time:
                    return None

                t = (time - last_state.time) / (state.time - last_state.time)

                return TrajectoryPose(
                    position=Vec2(
                        _lerp(last_state.position.x, state.position.x, t),
                        _lerp(last_state.position.y, state.position.y, t),
                    ),
                    curvature=_lerp(last_state.curvature, state.curvature, t),
                    heading=_lerp(last_state.heading, state.heading, t),
                    left_drive_velocity=_lerp(last_state.left_drive_velocity, state.left_drive_velocity, t),
                    right_drive_velocity=_lerp(last_state.right_drive_velocity, state.right_drive_velocity, t),
                    time=time,
                )

        return None

    def to_arrays(self) -> dict[str, np.ndarray]:
        """Column-wise view of the samples, for plotting and serialization."""
        return {
            'time': np.array([s.time for s in self.states], dtype=float),
            'x': np.array([s.position.x for s in self.states], dtype=float),
            'y': np.array([s.position.y for s in self.states], dtype=float),
            'heading': np.array([s.heading for s in self.states], dtype=float),
            'curvature': np.array([s.curvature for s in self.states], dtype=float),
            'left_velocity': np.array([s.left_drive_velocity for s in self.states], dtype=float),
            'right_velocity': np.array([s.right_drive_velocity for s in self.states], dtype=float),
        }
