# =============================================================================
# L3 Spatial Model - Types and Data Structures
# =============================================================================
# Poses and line segments shared by every layer.
# =============================================================================

import numpy as np
from dataclasses import dataclass


class ConfigurationError(ValueError):
    """Robot configuration or pose is unusable; raised before any cycle runs."""


def normalize_angle(angle: float) -> float:
    """Normalize angle to (-pi, pi]."""
    angle = float(np.arctan2(np.sin(angle), np.cos(angle)))
    if angle == -np.pi:
        return np.pi
    return angle


# =============================================================================
# Pose
# =============================================================================

@dataclass(frozen=True)
class Pose:
    """Robot pose in world frame. Theta is kept in (-pi, pi]."""
    x: float
    y: float
    theta: float

    def __post_init__(self):
        if not np.all(np.isfinite([self.x, self.y, self.theta])):
            raise ConfigurationError(f"Non-finite pose ({self.x}, {self.y}, {self.theta})")
        object.__setattr__(self, 'x', float(self.x))
        object.__setattr__(self, 'y', float(self.y))
        object.__setattr__(self, 'theta', normalize_angle(self.theta))

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y])

    def distance_to(self, other: 'Pose') -> float:
        """Planar distance to another pose."""
        return float(np.hypot(self.x - other.x, self.y - other.y))


# =============================================================================
# Line Segment
# =============================================================================

@dataclass(frozen=True, eq=False)
class LineSegment:
    """Straight piece of obstacle boundary in world frame."""
    start: np.ndarray
    end: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, 'start', np.asarray(self.start, dtype=float))
        object.__setattr__(self, 'end', np.asarray(self.end, dtype=float))

    @property
    def length(self) -> float:
        return float(np.linalg.norm(self.end - self.start))

    @property
    def midpoint(self) -> np.ndarray:
        return (self.start + self.end) / 2.0

    @property
    def angle(self) -> float:
        """Orientation in radians; 0 for a degenerate segment."""
        d = self.end - self.start
        if not np.any(d):
            return 0.0
        return float(np.arctan2(d[1], d[0]))

    @property
    def direction(self) -> np.ndarray:
        """Unit direction vector; x axis for a degenerate segment."""
        d = self.end - self.start
        n = np.linalg.norm(d)
        if n < 1e-12:
            return np.array([1.0, 0.0])
        return d / n

    def reversed(self) -> 'LineSegment':
        return LineSegment(self.end, self.start)

    def almost_equal(self, other: 'LineSegment', tol: float = 1e-6) -> bool:
        """Same endpoints (in either order) within tolerance."""
        same = np.allclose(self.start, other.start, atol=tol) and np.allclose(self.end, other.end, atol=tol)
        flipped = np.allclose(self.start, other.end, atol=tol) and np.allclose(self.end, other.start, atol=tol)
        return same or flipped

    def to_list(self) -> list:
        return [self.start.tolist(), self.end.tolist()]
