# =============================================================================
# L4 Agent Package
# =============================================================================
# The robot's beliefs about itself and its current task.
#
# Responsibilities:
# - Action model and the fixed action catalog
# - Laser scan processing (ranges -> world-frame endpoints)
# - Agent state (pose, scan history, motion and visibility queries)
# - Task and plan (history, waypoints, visited-position grid)
#
# Usage:
#   from L4_agent import AgentState, Task
#   agent = AgentState()
#   agent.update(pose, ranges, angles)
#   task = Task(goal=[10.0, 0.0])
# =============================================================================

# Types
from .types import (
    ActionType,
    Action,
    PAUSE,
    ConfigurationError,
    Pose
)

# Core components
from .actions import ActionCatalog
from .laser import LaserProcessor
from .task import Task
from .agent import AgentState

__all__ = [
    # Types
    'ActionType',
    'Action',
    'PAUSE',
    'ConfigurationError',
    'Pose',

    # Components
    'ActionCatalog',
    'LaserProcessor',
    'Task',
    'AgentState',
]

__version__ = '1.0.0'
