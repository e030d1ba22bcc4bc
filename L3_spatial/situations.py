# =============================================================================
# L3 Spatial Model - Situations
# =============================================================================
# Local occupancy footprints around the robot and the situation model that
# recognises them. Learning situations is done elsewhere; this module only
# rasterizes footprints and answers recognition/weight queries.
#
# Grid convention: grid[i, j], i along the latest pose's heading, j to its
# left, centre cell (R, R). 1 = free, -1 = occupied, 0 = unknown.
# =============================================================================

import logging
import numpy as np
from abc import ABC, abstractmethod
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

from .types import Pose
from .transforms import transform_to_robot_frame

from .config import (
    SITUATION_GRID_RADIUS,
    SITUATION_GRID_RESOLUTION,
    SITUATION_MAX_RANGE,
    SITUATION_DEFAULT_WEIGHT
)

logger = logging.getLogger(__name__)

FREE = 1
OCCUPIED = -1
UNKNOWN = 0


class SituationModel(ABC):
    """
    Interface the decision layer consults about situations.

    Subclasses must implement recognition, per-action weights and the
    multi-scan overlay.
    """

    # Cell size of the footprint grid (m)
    resolution: float = 1.0

    @abstractmethod
    def recognition_confidence(self, footprint: np.ndarray) -> float:
        """How confidently the footprint matches a known situation, in [0, 1]."""
        pass

    @abstractmethod
    def action_weight(self, footprint: np.ndarray, action: Hashable) -> float:
        """Learned success weight of an action in this situation, in [0, 1]."""
        pass

    @abstractmethod
    def overlay(self, recent_scans: Sequence[np.ndarray],
                recent_poses: Sequence[Pose],
                recent_hits: Optional[Sequence[np.ndarray]] = None) -> np.ndarray:
        """
        Occupancy grid built from several scans, centred on the latest pose.

        Args:
            recent_scans: World-frame endpoint arrays, oldest first
            recent_poses: Pose each scan was taken from, oldest first
            recent_hits: Per-scan boolean masks, False where the ray hit
                         nothing; without them, readings shorter than the
                         model's max range count as hits

        Returns:
            (2R+1, 2R+1) int grid
        """
        pass

    def footprint(self, endpoints: np.ndarray, pose: Pose,
                  hits: Optional[np.ndarray] = None) -> np.ndarray:
        """Footprint of a single scan."""
        return self.overlay([endpoints], [pose], None if hits is None else [hits])


class FootprintSituationModel(SituationModel):
    """
    Situation model over rasterized laser footprints.

    Known situations are prototype grids with a weight per action,
    supplied with add_situation(). A footprint is recognised by the
    fraction of agreeing cells among the cells known in either grid.
    """

    def __init__(self,
                 radius: int = SITUATION_GRID_RADIUS,
                 resolution: float = SITUATION_GRID_RESOLUTION,
                 max_range: float = SITUATION_MAX_RANGE,
                 default_weight: float = SITUATION_DEFAULT_WEIGHT):
        """
        Args:
            radius: Cells from the centre to each edge
            resolution: Cell size (m)
            max_range: Readings at or beyond this range hit nothing (m)
            default_weight: Weight for actions a situation has no entry for
        """
        self.radius = radius
        self.resolution = resolution
        self.max_range = max_range
        self.default_weight = default_weight
        self.situations: List[Tuple[np.ndarray, Dict[Hashable, float]]] = []

    @property
    def size(self) -> int:
        return 2 * self.radius + 1

    def add_situation(self, prototype: np.ndarray, weights: Dict[Hashable, float]):
        """Register a learned situation and its per-action weights."""
        prototype = np.asarray(prototype, dtype=int)
        if prototype.shape != (self.size, self.size):
            raise ValueError(f"Situation grid must be {self.size}x{self.size}, got {prototype.shape}")
        self.situations.append((prototype, dict(weights)))
        logger.debug(f"Situation {len(self.situations)} added with {len(weights)} action weights")

    def clear(self):
        self.situations.clear()

    # =========================================================================
    # Recognition
    # =========================================================================

    def _agreement(self, footprint: np.ndarray, prototype: np.ndarray) -> float:
        known = (footprint != UNKNOWN) | (prototype != UNKNOWN)
        if not np.any(known):
            return 0.0
        return float(np.sum((footprint == prototype) & known) / np.sum(known))

    def _best_match(self, footprint: np.ndarray):
        best, best_score = None, 0.0
        for prototype, weights in self.situations:
            score = self._agreement(footprint, prototype)
            if score > best_score:
                best, best_score = weights, score
        return best, best_score

    def recognition_confidence(self, footprint: np.ndarray) -> float:
        _, score = self._best_match(np.asarray(footprint))
        return score

    def action_weight(self, footprint: np.ndarray, action: Hashable) -> float:
        weights, _ = self._best_match(np.asarray(footprint))
        if weights is None:
            return self.default_weight
        return float(weights.get(action, self.default_weight))

    # =========================================================================
    # Rasterization
    # =========================================================================

    def overlay(self, recent_scans: Sequence[np.ndarray],
                recent_poses: Sequence[Pose],
                recent_hits: Optional[Sequence[np.ndarray]] = None) -> np.ndarray:
        grid = np.zeros((self.size, self.size), dtype=int)
        if not recent_poses:
            return grid

        latest = recent_poses[-1]
        occupied = np.zeros_like(grid, dtype=bool)

        if recent_hits is None:
            recent_hits = [None] * len(recent_poses)

        for scan, pose, hits in zip(recent_scans, recent_poses, recent_hits):
            pts = np.asarray(scan, dtype=float).reshape(-1, 2)
            if len(pts) == 0:
                continue
            if hits is None:
                hits = np.linalg.norm(pts - pose.position, axis=1) < self.max_range - 1e-6
            else:
                hits = np.asarray(hits, dtype=bool)
                if hits.shape != (len(pts),):
                    raise ValueError(f"Hit mask {hits.shape} does not match {len(pts)} endpoints")
            origin = transform_to_robot_frame(pose.position, latest) / self.resolution
            local = transform_to_robot_frame(pts, latest) / self.resolution

            for end, hit in zip(local, hits):
                self._mark_ray(grid, origin, end)
                if hit:
                    cell = self._cell(end)
                    if cell is not None:
                        occupied[cell] = True

        grid[occupied] = OCCUPIED
        return grid

    def _cell(self, point: np.ndarray):
        i = int(round(point[0])) + self.radius
        j = int(round(point[1])) + self.radius
        if 0 <= i < self.size and 0 <= j < self.size:
            return i, j
        return None

    def _mark_ray(self, grid: np.ndarray, origin: np.ndarray, end: np.ndarray):
        """Mark cells from origin to end as free, sampling every half cell."""
        length = float(np.linalg.norm(end - origin))
        steps = int(np.ceil(length * 2)) + 1
        samples = np.linspace(origin, end, steps)
        idx = np.rint(samples).astype(int) + self.radius
        inside = np.all((idx >= 0) & (idx < self.size), axis=1)
        idx = idx[inside]
        grid[idx[:, 0], idx[:, 1]] = FREE
