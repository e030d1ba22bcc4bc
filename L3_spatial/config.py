# =============================================================================
# L3 Spatial Model - Configuration
# =============================================================================
# All configurable parameters for the geometry kernel, the barrier model
# and the situation footprints.
# =============================================================================

import numpy as np

# =============================================================================
# SEGMENT EXTRACTION CONFIGURATION
# =============================================================================
# Points farther than this from the current position are ignored (meters).
# Max-range returns are not obstacle boundaries.
BARRIER_MAX_RANGE = 20.0

# DBSCAN epsilon: maximum gap between neighbouring endpoints of one
# surface (meters)
BARRIER_DBSCAN_EPS = 0.5

# Minimum samples to form a DBSCAN core point
BARRIER_DBSCAN_MIN_SAMPLES = 2

# Maximum perpendicular deviation before a run is split (meters)
SEGMENT_SPLIT_TOLERANCE = 0.15

# Minimum number of endpoints supporting a segment
SEGMENT_MIN_POINTS = 4

# Minimum segment length to be kept (meters)
SEGMENT_MIN_LENGTH = 0.5

# =============================================================================
# SIMILARITY CONFIGURATION
# =============================================================================
# similarity = W_DIST * mean endpoint distance + W_ANGLE * orientation diff
SIMILARITY_DISTANCE_WEIGHT = 1.0
SIMILARITY_ANGLE_WEIGHT = 2.0

# Two segments closer than this are considered the same boundary
SIMILARITY_THRESHOLD = 0.6

# =============================================================================
# MERGE CONFIGURATION
# =============================================================================
# Maximum orientation difference for colinear merge (radians) - 10°
MERGE_ANGLE_TOLERANCE = np.deg2rad(10)

# Maximum perpendicular offset between merged segments (meters)
MERGE_OFFSET_TOLERANCE = 0.3

# Maximum gap along the common direction (meters)
MERGE_GAP_TOLERANCE = 0.5

# Upper bound on the number of barriers held
MAX_BARRIERS = 200

# =============================================================================
# SITUATION FOOTPRINT CONFIGURATION
# =============================================================================
# Cells in each direction from the centre cell (grid is 2R+1 wide)
SITUATION_GRID_RADIUS = 25

# Cell size (meters)
SITUATION_GRID_RESOLUTION = 1.0

# Laser readings at or beyond this range are free rays without an endpoint
SITUATION_MAX_RANGE = 25.0

# Weight reported for an action a recognised situation knows nothing about
SITUATION_DEFAULT_WEIGHT = 0.5
