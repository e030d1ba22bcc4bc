# =============================================================================
# L3 Spatial Model - Geometry Kernel
# =============================================================================
# Pure geometric primitives: distances, segment similarity and
# line-of-sight checks against laser endpoints.
# =============================================================================

import numpy as np
from typing import List, Sequence

from .types import LineSegment, normalize_angle

from .config import (
    SIMILARITY_DISTANCE_WEIGHT,
    SIMILARITY_ANGLE_WEIGHT
)


def distance(p, q) -> float:
    """Euclidean distance between two points."""
    return float(np.hypot(q[0] - p[0], q[1] - p[1]))


def orientation_difference(a: LineSegment, b: LineSegment) -> float:
    """Undirected angle between two segments, in [0, pi/2]."""
    diff = abs(normalize_angle(a.angle - b.angle))
    if diff > np.pi / 2:
        diff = np.pi - diff
    return diff


def endpoint_proximity(a: LineSegment, b: LineSegment) -> float:
    """Mean endpoint distance under the better of the two endpoint pairings."""
    straight = distance(a.start, b.start) + distance(a.end, b.end)
    crossed = distance(a.start, b.end) + distance(a.end, b.start)
    return min(straight, crossed) / 2.0


def segment_similarity(a: LineSegment, b: LineSegment,
                       distance_weight: float = SIMILARITY_DISTANCE_WEIGHT,
                       angle_weight: float = SIMILARITY_ANGLE_WEIGHT) -> float:
    """
    Dissimilarity of two segments (smaller = more alike).
    
    Weighted sum of endpoint proximity and orientation difference.
    Identical segments score 0 regardless of endpoint order.
    
    Args:
        a: First segment
        b: Second segment
        distance_weight: Weight of the endpoint proximity term
        angle_weight: Weight of the orientation term (per radian)
        
    Returns:
        Non-negative similarity score
    """
    return (distance_weight * endpoint_proximity(a, b) +
            angle_weight * orientation_difference(a, b))


def similarity_matrix(segments: Sequence[LineSegment]) -> np.ndarray:
    """
    Pairwise similarity of all segments.
    
    Returns:
        Symmetric (N, N) matrix with zero diagonal
    """
    n = len(segments)
    if n == 0:
        return np.zeros((0, 0))
    starts = np.array([s.start for s in segments], dtype=float)
    ends = np.array([s.end for s in segments], dtype=float)
    angles = np.array([s.angle for s in segments])

    def pairwise(p, q):
        return np.linalg.norm(p[:, None, :] - q[None, :, :], axis=2)

    straight = pairwise(starts, starts) + pairwise(ends, ends)
    crossed = pairwise(starts, ends) + pairwise(ends, starts)
    proximity = np.minimum(straight, crossed) / 2.0

    diff = angles[:, None] - angles[None, :]
    diff = np.abs(np.arctan2(np.sin(diff), np.cos(diff)))
    diff = np.where(diff > np.pi / 2, np.pi - diff, diff)

    matrix = SIMILARITY_DISTANCE_WEIGHT * proximity + SIMILARITY_ANGLE_WEIGHT * diff
    np.fill_diagonal(matrix, 0.0)
    return matrix


def point_to_segment_distance(point, segment: LineSegment) -> float:
    """Shortest distance from a point to any point of the segment."""
    p = np.asarray(point, dtype=float)
    d = segment.end - segment.start
    denom = float(np.dot(d, d))
    if denom < 1e-12:
        return float(np.linalg.norm(p - segment.start))
    t = np.clip(np.dot(p - segment.start, d) / denom, 0.0, 1.0)
    return float(np.linalg.norm(p - (segment.start + t * d)))


def perpendicular_distance(point, segment: LineSegment) -> float:
    """Distance from a point to the infinite line through the segment."""
    p = np.asarray(point, dtype=float)
    if segment.length < 1e-12:
        return float(np.linalg.norm(p - segment.start))
    u = segment.direction
    rel = p - segment.start
    return float(abs(u[0] * rel[1] - u[1] * rel[0]))


def can_see(endpoints: np.ndarray, observer, point, max_range: float) -> bool:
    """
    Line-of-sight test from an observer to a point.
    
    The laser ray whose bearing is closest to the bearing of the point
    decides: the point is visible if that ray reaches at least as far
    as the point. With no endpoints, only the range limit applies.
    
    Args:
        endpoints: (N, 2) laser endpoints in world frame
        observer: Position the scan was taken from
        point: Point to test
        max_range: Maximum visibility range (meters)
        
    Returns:
        True if the point is visible
    """
    obs = np.asarray(observer, dtype=float)
    target = np.asarray(point, dtype=float)
    target_dist = float(np.linalg.norm(target - obs))
    if target_dist > max_range:
        return False
    pts = np.asarray(endpoints, dtype=float).reshape(-1, 2)
    if len(pts) == 0 or target_dist < 1e-9:
        return True

    rel = pts - obs
    bearings = np.arctan2(rel[:, 1], rel[:, 0])
    target_bearing = np.arctan2(target[1] - obs[1], target[0] - obs[0])
    diffs = np.abs(np.arctan2(np.sin(bearings - target_bearing),
                              np.cos(bearings - target_bearing)))
    ray = int(np.argmin(diffs))
    return float(np.linalg.norm(rel[ray])) >= target_dist


def nearest_distance(position, endpoints: np.ndarray,
                     segments: List[LineSegment] = ()) -> float:
    """
    Distance from a position to the nearest endpoint or segment.
    
    Returns:
        Nearest distance, or inf if there is nothing to measure against
    """
    from scipy.spatial import cKDTree

    best = float('inf')
    pts = np.asarray(endpoints, dtype=float).reshape(-1, 2)
    if len(pts):
        d, _ = cKDTree(pts).query(np.asarray(position, dtype=float))
        best = float(d)
    for seg in segments:
        best = min(best, point_to_segment_distance(position, seg))
    return best
