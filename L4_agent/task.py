# =============================================================================
# L4 Agent - Task and Plan
# =============================================================================
# One navigation leg: goal, waypoint queue, decision and position history,
# and the grid of positions already visited on this leg.
# =============================================================================

import logging
import numpy as np
from collections import deque
from typing import List, Optional, Set, Tuple

from L3_spatial import Pose

from .types import Action
from .config import PLAN_GRID_RESOLUTION, WAYPOINT_TOLERANCE

logger = logging.getLogger(__name__)


class Task:
    """
    Navigation task toward a goal point.

    History is append-only and read from the end. The plan grid is a
    sparse set of visited cells; the waypoint queue is consumed from
    the front.
    """

    def __init__(self, goal, waypoints=None,
                 plan_resolution: float = PLAN_GRID_RESOLUTION,
                 waypoint_tolerance: float = WAYPOINT_TOLERANCE):
        """
        Args:
            goal: Goal position [x, y]
            waypoints: Optional initial waypoints, first to visit first
            plan_resolution: Cell size of the visited grid (m)
            waypoint_tolerance: Distance at which a waypoint is reached (m)
        """
        self.goal = np.asarray(goal, dtype=float)
        self.plan_resolution = plan_resolution
        self.waypoint_tolerance = waypoint_tolerance

        self.waypoints = deque(np.asarray(w, dtype=float) for w in (waypoints or []))
        self.decisions: List[Action] = []
        self.positions: List[Pose] = []
        self.plan_positions: Set[Tuple[int, int]] = set()
        # Escape-plan waypoints still at the front of the queue
        self.plan_remaining = 0

    # =========================================================================
    # History
    # =========================================================================

    def previous_decisions(self) -> List[Action]:
        return list(self.decisions)

    def position_history(self) -> List[Pose]:
        return list(self.positions)

    def record_decision(self, action: Action):
        self.decisions.append(action)

    def record_position(self, pose: Pose):
        self.positions.append(pose)

    # =========================================================================
    # Plan grid
    # =========================================================================

    def _cell(self, x: float, y: float) -> Tuple[int, int]:
        return (int(np.floor(x / self.plan_resolution)),
                int(np.floor(y / self.plan_resolution)))

    def visited(self, x: float, y: float) -> bool:
        return self._cell(x, y) in self.plan_positions

    def mark_visited(self, x: float, y: float):
        self.plan_positions.add(self._cell(x, y))

    # =========================================================================
    # Waypoints
    # =========================================================================

    def goal_point(self) -> np.ndarray:
        return self.goal.copy()

    def next_waypoint(self) -> np.ndarray:
        """Front of the waypoint queue, or the goal when the queue is empty."""
        if self.waypoints:
            return self.waypoints[0].copy()
        return self.goal_point()

    def push_waypoint(self, point):
        """Put a waypoint at the front of the queue."""
        self.waypoints.appendleft(np.asarray(point, dtype=float))

    def push_plan(self, points):
        """Put a planned path at the front of the queue, first step first."""
        for point in reversed(points):
            self.push_waypoint(point)
        self.plan_remaining += len(points)

    @property
    def plan_pending(self) -> bool:
        """True while waypoints of a queued plan have not been reached."""
        return self.plan_remaining > 0

    def pop_waypoint(self) -> Optional[np.ndarray]:
        if self.waypoints:
            self.plan_remaining = max(0, self.plan_remaining - 1)
            return self.waypoints.popleft()
        return None

    def advance_waypoints(self, pose: Pose) -> int:
        """
        Drop waypoints the robot has reached.

        Returns:
            Number of waypoints removed
        """
        removed = 0
        while self.waypoints and np.linalg.norm(self.waypoints[0] - pose.position) < self.waypoint_tolerance:
            self.waypoints.popleft()
            removed += 1
        self.plan_remaining = max(0, self.plan_remaining - removed)
        if removed:
            logger.debug(f"Reached {removed} waypoint(s), {len(self.waypoints)} left")
        return removed

    def is_complete(self, pose: Pose) -> bool:
        return float(np.linalg.norm(self.goal - pose.position)) < self.waypoint_tolerance
