import numpy as np
import pytest

from L3_spatial import FREE, OCCUPIED, UNKNOWN, FootprintSituationModel, Pose
from L4_agent import Action, ActionType, AgentState


@pytest.fixture
def model():
    return FootprintSituationModel()


def test_empty_overlay_is_unknown(model):
    grid = model.overlay([], [])
    assert grid.shape == (51, 51)
    assert np.all(grid == UNKNOWN)


def test_open_scan_marks_free_only(model, agent):
    grid = model.footprint(agent.endpoints, agent.pose)
    assert grid[25, 25] == FREE
    assert grid[40, 25] == FREE
    assert not np.any(grid == OCCUPIED)


def test_wall_cell_is_occupied(model, origin, angles, wall_ranges):
    state = AgentState()
    state.update(origin, wall_ranges(3.0), angles)
    grid = model.footprint(state.endpoints, state.pose)
    assert grid[28, 25] == OCCUPIED
    assert grid[26, 25] == FREE
    assert grid[25, 25] == FREE


def test_hit_mask_overrides_range(model, origin):
    grid = model.footprint(np.array([[3.0, 0.0]]), origin, hits=np.array([False]))
    assert grid[28, 25] == FREE
    assert not np.any(grid == OCCUPIED)

    with pytest.raises(ValueError):
        model.footprint(np.array([[3.0, 0.0]]), origin, hits=np.array([True, False]))


def test_short_laser_max_range_is_not_a_wall(model, origin, angles):
    state = AgentState(max_range=10.0)
    state.update(origin, np.full(len(angles), np.inf), angles)
    assert not state.hits.any()

    # Without the mask the 10 m endpoints look like hits to a 25 m model
    assert model.footprint(state.endpoints, state.pose)[35, 25] == OCCUPIED
    grid = model.footprint(state.endpoints, state.pose, state.hits)
    assert grid[35, 25] == FREE
    assert not np.any(grid == OCCUPIED)


def test_footprint_is_in_robot_frame(model):
    # Point 3 m ahead of a robot facing +y
    grid = model.footprint(np.array([[0.0, 3.0]]), Pose(0.0, 0.0, np.pi / 2))
    assert grid[28, 25] == OCCUPIED
    assert grid[27, 25] == FREE


def test_overlay_centres_on_latest_pose(model):
    scans = [np.array([[5.0, 0.0]]), np.array([[5.0, 1.0]])]
    poses = [Pose(0.0, 0.0, 0.0), Pose(2.0, 0.0, 0.0)]
    grid = model.overlay(scans, poses)
    assert grid[28, 25] == OCCUPIED
    assert grid[28, 26] == OCCUPIED
    # The older scan's ray starts behind the latest pose
    assert grid[23, 25] == FREE


def test_recognition_and_weights(model, agent):
    footprint = model.footprint(agent.endpoints, agent.pose)
    left = Action(ActionType.LEFT_TURN, 1)
    assert model.recognition_confidence(footprint) == 0.0
    assert model.action_weight(footprint, left) == pytest.approx(0.5)

    model.add_situation(footprint, {left: 0.1})
    assert model.recognition_confidence(footprint) == pytest.approx(1.0)
    assert model.action_weight(footprint, left) == pytest.approx(0.1)
    assert model.action_weight(footprint, Action(ActionType.FORWARD, 1)) == pytest.approx(0.5)

    model.clear()
    assert model.recognition_confidence(footprint) == 0.0


def test_prototype_shape_checked(model):
    with pytest.raises(ValueError):
        model.add_situation(np.zeros((5, 5)), {})
