# =============================================================================
# L3 Spatial Model - Barrier Model
# =============================================================================
# Incremental fusion of laser endpoints into a persistent set of straight
# obstacle boundaries ("barriers").
#
# Pipeline (run on every update):
# 1. Extract candidate segments from each recent scan (DBSCAN + split)
# 2. Add the barriers currently held to the candidate pool
# 3. Compute the pairwise similarity matrix
# 4. Greedily match every segment to its most similar counterparts
# 5. Build one consensus segment per matched group and merge colinear ones
# =============================================================================

import logging
import numpy as np
from typing import Dict, List, Sequence, Tuple
from sklearn.cluster import DBSCAN
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from .types import LineSegment
from .geometry import (
    similarity_matrix,
    orientation_difference,
    perpendicular_distance
)

from .config import (
    BARRIER_MAX_RANGE,
    BARRIER_DBSCAN_EPS,
    BARRIER_DBSCAN_MIN_SAMPLES,
    SEGMENT_SPLIT_TOLERANCE,
    SEGMENT_MIN_POINTS,
    SEGMENT_MIN_LENGTH,
    SIMILARITY_THRESHOLD,
    MERGE_ANGLE_TOLERANCE,
    MERGE_OFFSET_TOLERANCE,
    MERGE_GAP_TOLERANCE,
    MAX_BARRIERS
)

logger = logging.getLogger(__name__)


class BarrierModel:
    """
    Learned obstacle boundaries as line segments.

    Barriers held from earlier updates re-enter every update as candidates
    next to the fresh segments, so the model keeps memory of what it saw
    without ever committing to it: a prior barrier that nothing matches
    simply persists, one that new evidence matches is re-estimated.

    The stored list is replaced in one assignment at the end of update(),
    readers never observe a half-built set.
    """

    def __init__(self,
                 max_range: float = BARRIER_MAX_RANGE,
                 cluster_distance: float = BARRIER_DBSCAN_EPS,
                 min_samples: int = BARRIER_DBSCAN_MIN_SAMPLES,
                 split_tolerance: float = SEGMENT_SPLIT_TOLERANCE,
                 min_points: int = SEGMENT_MIN_POINTS,
                 min_length: float = SEGMENT_MIN_LENGTH,
                 similarity_threshold: float = SIMILARITY_THRESHOLD,
                 merge_angle_tolerance: float = MERGE_ANGLE_TOLERANCE,
                 merge_offset_tolerance: float = MERGE_OFFSET_TOLERANCE,
                 merge_gap_tolerance: float = MERGE_GAP_TOLERANCE,
                 max_barriers: int = MAX_BARRIERS):
        """
        Initialize the barrier model.

        Args:
            max_range: Ignore endpoints farther than this from the robot (m)
            cluster_distance: DBSCAN epsilon for grouping endpoints (m)
            min_samples: DBSCAN minimum samples
            split_tolerance: Max deviation from a straight run before splitting (m)
            min_points: Minimum endpoints supporting a segment
            min_length: Minimum segment length (m)
            similarity_threshold: Max similarity score for two segments to match
            merge_angle_tolerance: Max orientation difference for merging (rad)
            merge_offset_tolerance: Max perpendicular offset for merging (m)
            merge_gap_tolerance: Max gap along the line for merging (m)
            max_barriers: Upper bound on stored barriers
        """
        self.max_range = max_range
        self.cluster_distance = cluster_distance
        self.min_samples = min_samples
        self.split_tolerance = split_tolerance
        self.min_points = min_points
        self.min_length = min_length
        self.similarity_threshold = similarity_threshold
        self.merge_angle_tolerance = merge_angle_tolerance
        self.merge_offset_tolerance = merge_offset_tolerance
        self.merge_gap_tolerance = merge_gap_tolerance
        self.max_barriers = max_barriers

        self.barriers: List[LineSegment] = []
        # id(scan) -> (scan, in-range mask, segments)
        self._segment_cache: Dict[int, Tuple[np.ndarray, np.ndarray, List[LineSegment]]] = {}

    def get(self) -> List[LineSegment]:
        """Returns a copy of the current barrier list."""
        return list(self.barriers)

    def clear(self):
        """Forget every barrier."""
        self.barriers = []
        self._segment_cache = {}

    def update(self, laser_history: Sequence[np.ndarray],
               current_position: np.ndarray) -> List[LineSegment]:
        """
        Recompute the barrier set from recent scans and the current set.

        Args:
            laser_history: Recent scans, each an (N, 2) array of world-frame
                           endpoints in scan order
            current_position: Robot position [x, y]

        Returns:
            The new barrier list
        """
        fresh = self.create_segments(laser_history, current_position)
        candidates = fresh + self.barriers

        similarities = similarity_matrix(candidates)
        most_similar = self.find_most_similar_segments(similarities)
        initial = self.create_initial_barriers(most_similar, candidates, len(fresh))
        merged = self.merge_nearby_barriers(initial)

        logger.debug(f"Barriers: {len(fresh)} fresh + {len(self.barriers)} held "
                     f"-> {len(initial)} initial -> {len(merged)} merged")
        self.barriers = merged
        return self.get()

    # =========================================================================
    # Stage 1: segment extraction
    # =========================================================================

    def create_segments(self, laser_history: Sequence[np.ndarray],
                        current_position: np.ndarray) -> List[LineSegment]:
        """
        Extract straight segments from every scan in the history.

        Segments are kept per scan object and reused on later updates while
        the same endpoints stay within range, so each scan is clustered
        once for as long as it remains in the history.
        """
        position = np.asarray(current_position, dtype=float)
        segments: List[LineSegment] = []
        cache = {}

        for scan in laser_history:
            pts = np.asarray(scan, dtype=float).reshape(-1, 2)
            if len(pts) == 0:
                continue
            in_range = np.linalg.norm(pts - position, axis=1) <= self.max_range

            entry = self._segment_cache.get(id(scan))
            if entry is not None and entry[0] is scan and np.array_equal(entry[1], in_range):
                found = entry[2]
            else:
                found = self.scan_segments(pts[in_range])
            cache[id(scan)] = (scan, in_range, found)
            segments.extend(found)

        self._segment_cache = cache
        return segments

    def scan_segments(self, pts: np.ndarray) -> List[LineSegment]:
        """Cluster one scan's endpoints and split each cluster into straight pieces."""
        if len(pts) < self.min_points:
            return []
        segments: List[LineSegment] = []
        labels = DBSCAN(eps=self.cluster_distance,
                        min_samples=self.min_samples).fit(pts).labels_
        for label in sorted(set(labels)):
            if label == -1:  # Ignore noise
                continue
            # Boolean indexing keeps scan order inside the cluster
            segments.extend(self.split_run(pts[labels == label]))
        return segments

    def split_run(self, run: np.ndarray) -> List[LineSegment]:
        """
        Iterative end-point fit over an ordered run of points.

        The chord between the first and last point is split at the point
        of maximum deviation until every piece is straight within
        tolerance. Each straight piece is then replaced by its
        least-squares line, clipped to the first and last point.
        """
        pieces = []
        stack = [(0, len(run) - 1)]

        while stack:
            i, j = stack.pop()
            if j - i + 1 < self.min_points:
                continue
            chord = LineSegment(run[i], run[j])
            if j - i > 1:
                rel = run[i + 1:j] - run[i]
                if chord.length < 1e-12:
                    deviations = np.linalg.norm(rel, axis=1)
                else:
                    u = chord.direction
                    deviations = np.abs(u[0] * rel[:, 1] - u[1] * rel[:, 0])
                worst = int(np.argmax(deviations))
                if deviations[worst] > self.split_tolerance:
                    k = i + 1 + worst
                    # Left piece is popped first so pieces stay in scan order
                    stack.append((k, j))
                    stack.append((i, k))
                    continue
            segment = self.fit_segment(run[i:j + 1])
            if segment.length >= self.min_length:
                pieces.append(segment)

        return pieces

    @staticmethod
    def fit_segment(points: np.ndarray) -> LineSegment:
        """Least-squares line through the points, clipped to the first and last."""
        centroid = points.mean(axis=0)
        _, _, vt = np.linalg.svd(points - centroid)
        u = vt[0]
        t_start = float(np.dot(points[0] - centroid, u))
        t_end = float(np.dot(points[-1] - centroid, u))
        return LineSegment(centroid + t_start * u, centroid + t_end * u)

    # =========================================================================
    # Stages 3-4: similarity and greedy matching
    # =========================================================================

    def find_most_similar_segments(self, similarities: np.ndarray) -> List[List[int]]:
        """
        For each segment, its matches under the similarity threshold.

        Returns:
            One row per segment: [index, best match, next best, ...]
        """
        most_similar = []
        for i in range(len(similarities)):
            row = similarities[i]
            order = np.argsort(row, kind='stable')
            matches = [int(j) for j in order if j != i and row[j] < self.similarity_threshold]
            most_similar.append([i] + matches)
        return most_similar

    # =========================================================================
    # Stage 5: consensus and merge
    # =========================================================================

    def create_initial_barriers(self, most_similar: List[List[int]],
                                segments: List[LineSegment],
                                num_fresh: int) -> List[LineSegment]:
        """
        One consensus segment per connected group of matches.

        Unmatched held barriers (index >= num_fresh) persist as they are,
        an unmatched fresh segment is a single observation and is dropped.
        """
        n = len(segments)
        if n == 0:
            return []

        rows, cols = [], []
        for row in most_similar:
            for j in row[1:]:
                rows.append(row[0])
                cols.append(j)
        adjacency = csr_matrix((np.ones(len(rows)), (np.asarray(rows, dtype=int), np.asarray(cols, dtype=int))),
                               shape=(n, n))
        num_groups, labels = connected_components(adjacency, directed=False)

        initial = []
        for group in range(num_groups):
            members = np.flatnonzero(labels == group)
            if len(members) == 1:
                if members[0] >= num_fresh:
                    initial.append(segments[members[0]])
                continue
            initial.append(self.consensus_segment([segments[m] for m in members]))
        return initial

    @staticmethod
    def consensus_segment(group: List[LineSegment]) -> LineSegment:
        """Average of the group's endpoints after aligning orientations."""
        reference = max(group, key=lambda s: s.length).direction
        starts, ends = [], []
        for seg in group:
            if np.dot(seg.direction, reference) < 0:
                seg = seg.reversed()
            starts.append(seg.start)
            ends.append(seg.end)
        return LineSegment(np.mean(starts, axis=0), np.mean(ends, axis=0))

    def merge_nearby_barriers(self, initial: List[LineSegment]) -> List[LineSegment]:
        """Merge colinear, adjacent barriers until no pair qualifies."""
        merged = list(initial)
        changed = True
        while changed:
            changed = False
            for i in range(len(merged)):
                for j in range(i + 1, len(merged)):
                    if self.can_merge(merged[i], merged[j]):
                        merged[i] = self.span(merged[i], merged[j])
                        del merged[j]
                        changed = True
                        break
                if changed:
                    break

        if len(merged) > self.max_barriers:
            merged = sorted(merged, key=lambda s: s.length, reverse=True)[:self.max_barriers]
        return merged

    def can_merge(self, a: LineSegment, b: LineSegment) -> bool:
        """Near-colinear within angle, offset and gap tolerances."""
        if orientation_difference(a, b) > self.merge_angle_tolerance:
            return False
        offset = max(perpendicular_distance(b.start, a), perpendicular_distance(b.end, a),
                     perpendicular_distance(a.start, b), perpendicular_distance(a.end, b))
        if offset > self.merge_offset_tolerance:
            return False

        u = a.direction
        a_lo, a_hi = sorted((0.0, float(np.dot(a.end - a.start, u))))
        b_lo, b_hi = sorted((float(np.dot(b.start - a.start, u)),
                             float(np.dot(b.end - a.start, u))))
        gap = max(a_lo, b_lo) - min(a_hi, b_hi)
        return gap <= self.merge_gap_tolerance

    @staticmethod
    def span(a: LineSegment, b: LineSegment) -> LineSegment:
        """Segment along the longer input covering both inputs' projections."""
        base = a if a.length >= b.length else b
        u = base.direction
        ts = [float(np.dot(p - base.start, u)) for p in (a.start, a.end, b.start, b.end)]
        return LineSegment(base.start + min(ts) * u, base.start + max(ts) * u)
