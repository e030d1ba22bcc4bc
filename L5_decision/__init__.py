# =============================================================================
# L5 Decision Package
# =============================================================================
# Tier-1 veto/override decision core for discrete-action navigation.
#
# Responsibilities:
# - Advisor outcomes and the per-cycle decision context
# - The six Tier-1 advisors in their fixed order
# - Confinement detection and escape planning
# - The pipeline that combines advisor outcomes into one result
# - A complete decision layer wiring agent, task and spatial models
#
# Usage:
#   # Complete layer
#   from L5_decision import DecisionLayer
#   layer = DecisionLayer(goal=[10.0, 0.0])
#   layer.update_state(pose, ranges, angles)
#   result = layer.decide()
#
#   # Or the pipeline on a hand-built context
#   from L5_decision import Tier1Pipeline, DecisionContext
#   result = Tier1Pipeline().decide(DecisionContext(agent, task, barriers, situations))
#
# Note: spatial models live in L3_spatial, robot beliefs in L4_agent.
# =============================================================================

# Types and data structures
from .types import (
    Vetoes,
    Commit,
    NoOp,
    AdvisorOutcome,
    Advisor,
    DecisionContext,
    DecisionStats,
    Tier1Result
)

# Re-export L4 types for convenience
from L4_agent import (
    Action,
    ActionType,
    PAUSE,
    ConfigurationError
)

# Advisors
from .advisors import (
    not_opposite,
    avoid_walls,
    dont_go_back,
    situation,
    victory,
    get_out,
    TIER1_ADVISORS
)

# Escape planning
from .escape import (
    is_confined,
    turn_pattern_established,
    find_exit_candidates,
    farthest_candidate,
    greedy_walk,
    grid_path_to_world,
    plan_escape
)

# Pipeline and complete layer
from .pipeline import Tier1Pipeline
from .layer import DecisionLayer

__all__ = [
    # Enums and types (from L4, re-exported)
    'Action',
    'ActionType',
    'PAUSE',
    'ConfigurationError',

    # Outcomes and context
    'Vetoes',
    'Commit',
    'NoOp',
    'AdvisorOutcome',
    'Advisor',
    'DecisionContext',
    'DecisionStats',
    'Tier1Result',

    # Advisors
    'not_opposite',
    'avoid_walls',
    'dont_go_back',
    'situation',
    'victory',
    'get_out',
    'TIER1_ADVISORS',

    # Escape planning
    'is_confined',
    'turn_pattern_established',
    'find_exit_candidates',
    'farthest_candidate',
    'greedy_walk',
    'grid_path_to_world',
    'plan_escape',

    # Pipeline and layer
    'Tier1Pipeline',
    'DecisionLayer',
]

__version__ = '1.0.0'
