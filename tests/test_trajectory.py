import math

import pytest

from diffdrive_trajopt.trajectory import Trajectory, TrajectoryPose
from diffdrive_trajopt.vec2 import Vec2


def _pose(x, time, velocity, heading=0.0, curvature=0.0):
    return TrajectoryPose(
        position=Vec2(x, 0.0),
        curvature=curvature,
        heading=heading,
        left_drive_velocity=velocity,
        right_drive_velocity=velocity,
        time=time,
    )


@pytest.fixture
def trajectory() -> Trajectory:
    return Trajectory([
        _pose(0.0, 0.0, 0.0),
        _pose(1.0, 1.0, 2.0, heading=0.2, curvature=0.1),
        _pose(3.0, 2.0, 0.0, heading=0.4, curvature=0.0),
    ])


def test_get_state_interpolates_between_bracketing_samples(trajectory):
    state = trajectory.get_state(0.5)

    assert state is not None
    assert state.time == 0.5
    assert state.position.x == pytest.approx(0.5)
    assert state.left_drive_velocity == pytest.approx(1.0)
    assert state.right_drive_velocity == pytest.approx(1.0)
    assert state.heading == pytest.approx(0.1)
    assert state.curvature == pytest.approx(0.05)

    later = trajectory.get_state(1.25)
    assert later.position.x == pytest.approx(1.5)
    assert later.left_drive_velocity == pytest.approx(1.5)


def test_get_state_at_sample_time_returns_that_sample(trajectory):
    state = trajectory.get_state(1.0)

    assert state.position.x == pytest.approx(1.0)
    assert state.left_drive_velocity == pytest.approx(2.0)


def test_get_state_outside_span_returns_none(trajectory):
    assert trajectory.get_state(-0.1) is None
    assert trajectory.get_state(2.0) is None
    assert trajectory.get_state(10.0) is None


def test_total_time(trajectory):
    assert trajectory.total_time() == 2.0


def test_total_time_of_empty_trajectory_raises():
    with pytest.raises(ValueError):
        Trajectory().total_time()


def test_infeasible_trajectory():
    trajectory = Trajectory.infeasible("cusp at sample 4")

    assert not trajectory.feasible
    assert trajectory.infeasible_reason == "cusp at sample 4"
    assert trajectory.total_time() == math.inf
    assert trajectory.get_state(0.0) is None


def test_center_velocity():
    pose = TrajectoryPose(Vec2(0, 0), 0.0, 0.0, left_drive_velocity=10.0, right_drive_velocity=20.0, time=0.0)
    assert pose.center_velocity == 15.0


def test_to_arrays(trajectory):
    arrays = trajectory.to_arrays()

    assert set(arrays) == {'time', 'x', 'y', 'heading', 'curvature', 'left_velocity', 'right_velocity'}
    assert arrays['time'].tolist() == [0.0, 1.0, 2.0]
    assert arrays['x'].tolist() == [0.0, 1.0, 3.0]
    assert arrays['left_velocity'].tolist() == [0.0, 2.0, 0.0]
