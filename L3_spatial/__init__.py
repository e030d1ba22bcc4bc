# =============================================================================
# L3 Spatial Model Package
# =============================================================================
# Geometry and learned spatial structure the decision layer consults.
#
# Responsibilities:
# - Geometry kernel (distances, segment similarity, line of sight)
# - Frame transforms between robot and world
# - Barrier model (incremental fusion of laser segments)
# - Situation model (local occupancy footprints and recognition)
#
# Usage:
#   from L3_spatial import BarrierModel, Pose
#   barriers = BarrierModel()
#   barriers.update(recent_endpoint_scans, pose.position)
# =============================================================================

# Types
from .types import (
    ConfigurationError,
    Pose,
    LineSegment,
    normalize_angle
)

# Core components
from .transforms import (
    rotation_matrix_2d,
    transform_to_world_frame,
    transform_to_robot_frame
)
from .geometry import (
    distance,
    segment_similarity,
    similarity_matrix,
    point_to_segment_distance,
    perpendicular_distance,
    can_see,
    nearest_distance
)
from .barriers import BarrierModel
from .situations import (
    SituationModel,
    FootprintSituationModel,
    FREE,
    OCCUPIED,
    UNKNOWN
)

__all__ = [
    # Types
    'ConfigurationError',
    'Pose',
    'LineSegment',
    'normalize_angle',

    # Transforms
    'rotation_matrix_2d',
    'transform_to_world_frame',
    'transform_to_robot_frame',

    # Geometry
    'distance',
    'segment_similarity',
    'similarity_matrix',
    'point_to_segment_distance',
    'perpendicular_distance',
    'can_see',
    'nearest_distance',

    # Models
    'BarrierModel',
    'SituationModel',
    'FootprintSituationModel',
    'FREE',
    'OCCUPIED',
    'UNKNOWN',
]

__version__ = '1.0.0'
