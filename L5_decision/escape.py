# =============================================================================
# L5 Decision - Confinement and Escape Planning
# =============================================================================
# Detects when the robot is boxed in and spinning in place, and plans a
# short waypoint path out of the local area.
#
# Planning steps:
# 1. Overlay the last few scans into one footprint around the robot
# 2. Pick exit candidates: free cells with few occupied neighbours
# 3. Take the candidate farthest from the robot
# 4. Walk the grid greedily toward it
# 5. Convert the walk to world coordinates and queue it on the task
# =============================================================================

import logging
import numpy as np
from typing import List, Optional, Sequence, Tuple

from L3_spatial import FREE, OCCUPIED, Pose, SituationModel, transform_to_world_frame
from L4_agent import Action, ActionCatalog, ActionType, Task

from .config import (
    ESCAPE_PATTERN_LENGTH,
    ESCAPE_MAX_OCCUPIED_NEIGHBORS,
    ESCAPE_STEP_FACTOR
)

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

# Four-neighbours first, diagonals only when no four-neighbour is free
_NEIGHBORS = ((1, 0), (0, 1), (-1, 0), (0, -1))
_DIAGONALS = ((1, 1), (-1, 1), (1, -1), (-1, -1))


def is_confined(nearest_distance: float, lookout_radius: float,
                tightness_ratio: float) -> bool:
    """Nearest obstacle closer than a fixed share of the lookout radius."""
    return nearest_distance < tightness_ratio * lookout_radius


def turn_pattern_established(decisions: Sequence[Action], catalog: ActionCatalog,
                             length: int = ESCAPE_PATTERN_LENGTH) -> Optional[ActionType]:
    """
    Check whether the robot has been spinning in place.

    Args:
        decisions: Previous decisions, oldest first
        catalog: Action catalog (defines the maximum turn intensity)
        length: Number of trailing decisions that must match

    Returns:
        Turn direction of the pattern, or None
    """
    if len(decisions) < length or catalog.max_rotation_intensity == 0:
        return None
    tail = decisions[-length:]
    first = tail[0]
    if not first.is_rotation or first.intensity != catalog.max_rotation_intensity:
        return None
    if all(a == first for a in tail):
        return first.type
    return None


def find_exit_candidates(grid: np.ndarray,
                         max_occupied: int = ESCAPE_MAX_OCCUPIED_NEIGHBORS) -> List[Cell]:
    """
    Interior free cells with at most `max_occupied` occupied 4-neighbours.

    Returns:
        Candidate cells in row-major order
    """
    if grid.shape[0] < 3 or grid.shape[1] < 3:
        return []
    occupied = (grid == OCCUPIED).astype(int)
    neighbors = (occupied[:-2, 1:-1] + occupied[2:, 1:-1] +
                 occupied[1:-1, :-2] + occupied[1:-1, 2:])
    mask = (grid[1:-1, 1:-1] == FREE) & (neighbors <= max_occupied)
    return [(int(i) + 1, int(j) + 1) for i, j in np.argwhere(mask)]


def farthest_candidate(candidates: Sequence[Cell], center: Cell) -> Optional[Cell]:
    """Candidate farthest from the centre; the first one wins ties."""
    best, best_dist = None, 0.0
    for cell in candidates:
        d = float(np.hypot(cell[0] - center[0], cell[1] - center[1]))
        if d > best_dist:
            best, best_dist = cell, d
    return best


def greedy_walk(grid: np.ndarray, start: Cell, goal: Cell,
                max_steps: int) -> Optional[List[Cell]]:
    """
    Step from start toward goal over free cells, always to the free
    neighbour closest to the goal.

    Diagonal moves are tried only when no 4-neighbour is free. The walk
    keeps the free cells it passes through and ends with the goal.

    Returns:
        Cells from start to goal, or None on a dead end or when the
        step bound runs out
    """
    rows, cols = grid.shape
    current = start
    path: List[Cell] = []

    def free_cells(moves):
        cells = []
        for di, dj in moves:
            i, j = current[0] + di, current[1] + dj
            if 0 <= i < rows and 0 <= j < cols and grid[i, j] == FREE:
                cells.append((i, j))
        return cells

    for _ in range(max_steps):
        if current == goal:
            path.append(goal)
            return path
        if grid[current] == FREE:
            path.append(current)

        options = free_cells(_NEIGHBORS) or free_cells(_DIAGONALS)
        if not options:
            logger.debug(f"Escape walk dead end at {current}")
            return None
        current = min(options, key=lambda c: np.hypot(c[0] - goal[0], c[1] - goal[1]))

    if current == goal:
        path.append(goal)
        return path
    logger.debug(f"Escape walk gave up after {max_steps} steps")
    return None


def grid_path_to_world(path: Sequence[Cell], pose: Pose, radius: int,
                       resolution: float = 1.0) -> List[np.ndarray]:
    """Footprint cells (centred on pose, i along its heading) to world points."""
    if not path:
        return []
    local = (np.asarray(path, dtype=float) - radius) * resolution
    return list(transform_to_world_frame(local, pose))


def plan_escape(situations: SituationModel, recent_scans: Sequence[np.ndarray],
                recent_poses: Sequence[Pose], task: Task,
                max_steps: Optional[int] = None,
                recent_hits: Optional[Sequence[np.ndarray]] = None) -> Optional[List[np.ndarray]]:
    """
    Plan a way out of the local area and queue it on the task.

    Args:
        situations: Model that overlays the scans into a footprint
        recent_scans: World-frame endpoints of recent scans, oldest first
        recent_poses: Pose of each scan, oldest first
        task: Task receiving the waypoints
        max_steps: Walk bound; ESCAPE_STEP_FACTOR grid diagonals when omitted
        recent_hits: Hit mask of each scan; max-range readings stay free

    Returns:
        World waypoints in travel order, or None if no plan was found
    """
    if not recent_poses:
        return None
    grid = situations.overlay(recent_scans, recent_poses, recent_hits)
    radius = grid.shape[0] // 2
    center = (radius, radius)

    goal = farthest_candidate(find_exit_candidates(grid), center)
    if goal is None:
        logger.debug("No exit candidates in footprint")
        return None

    if max_steps is None:
        max_steps = int(np.ceil(ESCAPE_STEP_FACTOR * np.sqrt(2) * grid.shape[0]))
    path = greedy_walk(grid, center, goal, max_steps)
    if path is None:
        return None

    waypoints = grid_path_to_world(path, recent_poses[-1], radius, situations.resolution)
    task.push_plan(waypoints)

    logger.info(f"Escape plan with {len(waypoints)} waypoints toward cell {goal}")
    return waypoints
