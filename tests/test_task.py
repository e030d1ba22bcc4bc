import numpy as np

from L3_spatial import Pose
from L4_agent import Action, ActionType, Task


def test_next_waypoint_falls_back_to_goal():
    task = Task(goal=[5.0, 5.0])
    assert np.allclose(task.next_waypoint(), [5.0, 5.0])
    assert task.pop_waypoint() is None


def test_push_waypoint_goes_to_front():
    task = Task(goal=[5.0, 5.0], waypoints=[[1.0, 1.0]])
    task.push_waypoint([2.0, 2.0])
    assert np.allclose(task.next_waypoint(), [2.0, 2.0])
    assert np.allclose(task.pop_waypoint(), [2.0, 2.0])
    assert np.allclose(task.next_waypoint(), [1.0, 1.0])


def test_push_plan_keeps_order_and_tracks_progress():
    task = Task(goal=[9.0, 0.0], waypoints=[[8.0, 0.0]])
    assert not task.plan_pending
    task.push_plan([[0.1, 0.0], [1.0, 0.0], [2.0, 0.0]])
    assert task.plan_pending
    assert [w.tolist() for w in task.waypoints] == [[0.1, 0.0], [1.0, 0.0], [2.0, 0.0], [8.0, 0.0]]

    task.advance_waypoints(Pose(0.0, 0.0, 0.0))
    task.advance_waypoints(Pose(1.0, 0.0, 0.0))
    assert task.plan_pending
    assert np.allclose(task.pop_waypoint(), [2.0, 0.0])
    assert not task.plan_pending
    assert np.allclose(task.next_waypoint(), [8.0, 0.0])


def test_advance_waypoints_drops_reached_ones():
    task = Task(goal=[9.0, 0.0], waypoints=[[0.1, 0.0], [0.3, 0.0], [4.0, 0.0]])
    assert task.advance_waypoints(Pose(0.0, 0.0, 0.0)) == 2
    assert np.allclose(task.next_waypoint(), [4.0, 0.0])
    assert task.advance_waypoints(Pose(0.0, 0.0, 0.0)) == 0


def test_visited_grid_uses_floor_cells():
    task = Task(goal=[0.0, 0.0])
    task.mark_visited(1.2, -0.4)
    assert task.visited(1.9, -0.1)
    assert not task.visited(2.0, -0.1)
    assert not task.visited(1.5, 0.0)


def test_history_is_append_only():
    task = Task(goal=[0.0, 0.0])
    task.record_decision(Action(ActionType.FORWARD, 1))
    task.record_position(Pose(1.0, 0.0, 0.0))
    decisions = task.previous_decisions()
    decisions.append(Action(ActionType.FORWARD, 2))
    assert task.previous_decisions() == [Action(ActionType.FORWARD, 1)]
    assert task.position_history() == [Pose(1.0, 0.0, 0.0)]


def test_is_complete():
    task = Task(goal=[1.0, 1.0])
    assert task.is_complete(Pose(1.2, 1.0, 0.0))
    assert not task.is_complete(Pose(0.0, 0.0, 0.0))
