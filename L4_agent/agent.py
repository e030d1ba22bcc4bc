# =============================================================================
# L4 Agent - Agent State
# =============================================================================
# What the robot believes about itself right now: pose, latest laser
# endpoints, recent scan history, and the robot-configuration queries the
# advisors ask (safe forward move, predicted pose, visibility, steering).
# =============================================================================

import numpy as np
from collections import deque
from typing import List, Optional, Sequence, Tuple

from L3_spatial import (
    Pose,
    LineSegment,
    normalize_angle,
    transform_to_robot_frame,
    can_see,
    nearest_distance
)

from .types import Action, ActionType, ConfigurationError
from .actions import ActionCatalog
from .laser import LaserProcessor

from .config import (
    MOVEMENT_TABLE,
    ROTATION_TABLE,
    ROBOT_RADIUS,
    FORWARD_SAFETY_BUFFER,
    LASER_MAX_RANGE,
    LASER_HISTORY_LENGTH
)


def _validate_table(name: str, table: Sequence[float]):
    values = np.asarray(table, dtype=float)
    if values.ndim != 1 or len(values) < 2:
        raise ConfigurationError(f"{name} needs at least one non-zero entry")
    if values[0] != 0.0 or np.any(np.diff(values) <= 0):
        raise ConfigurationError(f"{name} must start at 0 and strictly increase")


class AgentState:
    """
    Robot beliefs and configuration for one decision cycle.

    Holds the action catalog with its movement/rotation tables and the
    most recent pose and laser scan. All geometry queries answer for the
    current pose.
    """

    def __init__(self,
                 catalog: Optional[ActionCatalog] = None,
                 movement_table: Sequence[float] = MOVEMENT_TABLE,
                 rotation_table: Sequence[float] = ROTATION_TABLE,
                 robot_radius: float = ROBOT_RADIUS,
                 forward_buffer: float = FORWARD_SAFETY_BUFFER,
                 max_range: float = LASER_MAX_RANGE,
                 history_length: int = LASER_HISTORY_LENGTH):
        """
        Initialize agent state.

        Args:
            catalog: Legal actions; built from the tables when omitted
            movement_table: Forward distance per intensity (m)
            rotation_table: Turn angle per intensity (rad)
            robot_radius: Robot radius (m)
            forward_buffer: Clearance kept ahead after a forward move (m)
            max_range: Laser max range (m)
            history_length: Number of (pose, scan) pairs remembered

        Raises:
            ConfigurationError: if tables or catalog are malformed
        """
        _validate_table("movement table", movement_table)
        _validate_table("rotation table", rotation_table)
        self.movement_table = tuple(float(m) for m in movement_table)
        self.rotation_table = tuple(float(r) for r in rotation_table)

        if catalog is None:
            catalog = ActionCatalog.from_counts(len(self.movement_table) - 1,
                                                len(self.rotation_table) - 1)
        if catalog.max_forward_intensity >= len(self.movement_table):
            raise ConfigurationError("Catalog has forward actions beyond the movement table")
        if catalog.max_rotation_intensity >= len(self.rotation_table):
            raise ConfigurationError("Catalog has turns beyond the rotation table")
        self.catalog = catalog

        self.robot_radius = robot_radius
        self.forward_buffer = forward_buffer
        self.laser = LaserProcessor(max_range=max_range)

        self._pose: Optional[Pose] = None
        self.endpoints = np.zeros((0, 2))
        self.hits = np.zeros(0, dtype=bool)
        self.laser_history = deque(maxlen=history_length)

    # =========================================================================
    # State update
    # =========================================================================

    @property
    def pose(self) -> Pose:
        if self._pose is None:
            raise ConfigurationError("No pose received yet")
        return self._pose

    @property
    def has_pose(self) -> bool:
        return self._pose is not None

    def update(self, pose: Pose, ranges: np.ndarray, angles: np.ndarray):
        """Take in the pose and laser scan of a new cycle."""
        self._pose = pose
        self.endpoints, self.hits = self.laser.transform_to_endpoints(pose, ranges, angles)
        # Hit endpoints are stored once so every reader sees the same array
        self.laser_history.append((pose, self.endpoints, self.hits, self.endpoints[self.hits]))

    def reset(self):
        self._pose = None
        self.endpoints = np.zeros((0, 2))
        self.hits = np.zeros(0, dtype=bool)
        self.laser_history.clear()

    def recent_scans(self, count: int) -> Tuple[List[np.ndarray], List[Pose], List[np.ndarray]]:
        """
        Last `count` scans with their poses and hit masks, oldest first.

        Returns fewer when the history is shorter.
        """
        recent = list(self.laser_history)[-count:]
        return [r[1] for r in recent], [r[0] for r in recent], [r[2] for r in recent]

    def recent_hit_scans(self) -> List[np.ndarray]:
        """Every remembered scan with max-range readings removed."""
        return [entry[3] for entry in self.laser_history]

    # =========================================================================
    # Motion model
    # =========================================================================

    def movement(self, intensity: int) -> float:
        return self.movement_table[intensity]

    def rotation(self, intensity: int) -> float:
        return self.rotation_table[intensity]

    def clearance_along(self, heading: float) -> float:
        """Range of the laser ray closest to a world-frame heading."""
        if len(self.endpoints) == 0:
            return self.laser.max_range
        rel = self.endpoints - self.pose.position
        bearings = np.arctan2(rel[:, 1], rel[:, 0])
        diffs = np.abs(np.arctan2(np.sin(bearings - heading), np.cos(bearings - heading)))
        return float(np.linalg.norm(rel[int(np.argmin(diffs))]))

    def forward_obstacle_distance(self) -> float:
        """Distance to the nearest hit inside the robot-wide corridor ahead."""
        if not np.any(self.hits):
            return self.laser.max_range
        local = transform_to_robot_frame(self.endpoints[self.hits], self.pose)
        ahead = (local[:, 0] > 0) & (np.abs(local[:, 1]) <= self.robot_radius)
        if not np.any(ahead):
            return self.laser.max_range
        return float(np.min(local[ahead, 0]))

    def max_safe_forward_intensity(self, obstacle_distance: Optional[float] = None) -> int:
        """
        Largest forward intensity that keeps the safety buffer to the obstacle.

        Args:
            obstacle_distance: Distance ahead; measured from the scan when omitted

        Returns:
            Intensity in 0..max forward intensity (0 = no forward move is safe)
        """
        if obstacle_distance is None:
            obstacle_distance = self.forward_obstacle_distance()
        best = 0
        for action in sorted(self.catalog.forward_actions):
            if self.movement(action.intensity) + self.forward_buffer <= obstacle_distance:
                best = action.intensity
        return best

    def predicted_pose(self, action: Action) -> Pose:
        """
        Pose expected after taking an action.

        Forward moves stop short of the obstacle ahead. A turn is followed
        by the longest move the new heading allows, so the prediction
        says where the turn leads rather than only where it faces.
        """
        pose = self.pose
        if action.type == ActionType.PAUSE or action.intensity == 0:
            return pose

        if action.type == ActionType.FORWARD:
            theta = pose.theta
            travel = self.movement(action.intensity)
        else:
            sign = 1.0 if action.type == ActionType.LEFT_TURN else -1.0
            theta = normalize_angle(pose.theta + sign * self.rotation(action.intensity))
            travel = self.movement_table[-1]

        travel = min(travel, max(self.clearance_along(theta) - self.forward_buffer, 0.0))
        return Pose(pose.x + travel * np.cos(theta), pose.y + travel * np.sin(theta), theta)

    # =========================================================================
    # Perception queries
    # =========================================================================

    def can_see(self, point, max_range: float) -> bool:
        """Line of sight from the current pose to a point."""
        return can_see(self.endpoints, self.pose.position, point, max_range)

    def distance_to_nearest_obstacle(self, barriers: Sequence[LineSegment] = ()) -> float:
        """Nearest laser hit or barrier from the current position."""
        return nearest_distance(self.pose.position, self.endpoints[self.hits], list(barriers))

    def steer_towards(self, point) -> Action:
        """
        Single action that heads most directly toward a point.

        Facing the point (within half the smallest turn): the longest safe
        forward move that does not overshoot it. Otherwise: the turn whose
        angle best matches the bearing error.
        """
        pose = self.pose
        target = np.asarray(point, dtype=float)
        dx, dy = target[0] - pose.x, target[1] - pose.y
        dist = float(np.hypot(dx, dy))
        bearing_error = normalize_angle(np.arctan2(dy, dx) - pose.theta) if dist > 0 else 0.0

        if abs(bearing_error) <= self.rotation(1) / 2:
            cap = self.max_safe_forward_intensity()
            intensity = 0
            for action in sorted(self.catalog.forward_actions):
                if action.intensity <= cap and self.movement(action.intensity) <= dist:
                    intensity = action.intensity
            return Action(ActionType.FORWARD, intensity)

        direction = ActionType.LEFT_TURN if bearing_error > 0 else ActionType.RIGHT_TURN
        turns = self.catalog.turns(direction)
        if not turns:
            return Action(ActionType.FORWARD, 0)
        return min(turns, key=lambda a: abs(self.rotation(a.intensity) - abs(bearing_error)))
