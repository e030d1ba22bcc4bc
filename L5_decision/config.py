# =============================================================================
# L5 Decision - Configuration
# =============================================================================
# All configurable parameters for the Tier-1 advisors and the escape
# planner.
# =============================================================================

# =============================================================================
# NOT OPPOSITE
# =============================================================================
# Decisions needed before the advisor looks at the history
NOT_OPPOSITE_MIN_DECISIONS = 2

# =============================================================================
# SITUATION
# =============================================================================
# Recognition confidence at which learned weights are trusted
SITUATION_CONFIDENCE_THRESHOLD = 0.75

# Actions weighted below this are vetoed in a recognised situation
SITUATION_WEIGHT_THRESHOLD = 0.25

# =============================================================================
# VICTORY
# =============================================================================
# Maximum range at which the goal or a waypoint counts as in sight (meters)
VICTORY_VISIBILITY_RANGE = 20.0

# Minimum predicted displacement for a committed action (meters)
VICTORY_MIN_DISPLACEMENT = 0.1

# =============================================================================
# GET OUT (CONFINEMENT AND ESCAPE)
# =============================================================================
# Radius the confinement check looks out to (meters)
CONFINEMENT_LOOKOUT_RADIUS = 5.0

# Confined when nearest obstacle < ratio * lookout radius
CONFINEMENT_TIGHTNESS_RATIO = 0.2

# Decisions needed before the advisor acts at all
ESCAPE_MIN_DECISIONS = 5

# Consecutive maximum-intensity turns that trigger planning
ESCAPE_PATTERN_LENGTH = 4

# Number of recent (scan, pose) pairs overlaid for planning
ESCAPE_SCAN_COUNT = 4

# Exit candidates are free cells with at most this many occupied 4-neighbours
ESCAPE_MAX_OCCUPIED_NEIGHBORS = 2

# Greedy walk step bound = factor * grid diagonal (cells)
ESCAPE_STEP_FACTOR = 4
