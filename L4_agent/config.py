# =============================================================================
# L4 Agent - Configuration
# =============================================================================
# Robot configuration: motion primitives, body size, laser and task
# parameters.
# =============================================================================

# =============================================================================
# MOTION PRIMITIVES
# =============================================================================
# Forward distance per intensity (meters). Index 0 is "no move".
MOVEMENT_TABLE = (0.0, 0.2, 0.4, 0.8, 1.6, 3.25)

# Turn angle per intensity (radians). Index 0 is "no turn".
ROTATION_TABLE = (0.0, 0.25, 0.5, 1.0, 2.0)

# =============================================================================
# ROBOT BODY
# =============================================================================
ROBOT_RADIUS = 0.3              # Physical radius (meters)

# Clearance kept in front of the robot after a forward move (meters)
FORWARD_SAFETY_BUFFER = 0.3

# =============================================================================
# LASER CONFIGURATION
# =============================================================================
# Readings at or beyond this range (and inf/nan) hit nothing (meters)
LASER_MAX_RANGE = 25.0

# Readings below this range are sensor noise (meters)
LASER_MIN_RANGE = 0.05

# Number of (pose, scan) pairs remembered
LASER_HISTORY_LENGTH = 10

# =============================================================================
# TASK CONFIGURATION
# =============================================================================
# Cell size of the visited-position plan grid (meters)
PLAN_GRID_RESOLUTION = 1.0

# Distance at which a waypoint or the goal counts as reached (meters)
WAYPOINT_TOLERANCE = 0.5
