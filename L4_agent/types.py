# =============================================================================
# L4 Agent - Types and Data Structures
# =============================================================================
# Discrete motion primitives the decision layer chooses from.
# =============================================================================

from dataclasses import dataclass
from enum import IntEnum

# Re-export for convenience
from L3_spatial import ConfigurationError, Pose


class ActionType(IntEnum):
    """Motion primitive types, in catalog order."""
    FORWARD = 0
    LEFT_TURN = 1
    RIGHT_TURN = 2
    PAUSE = 3


@dataclass(frozen=True, order=True)
class Action:
    """
    A motion primitive: type plus intensity.

    Higher intensity means a longer forward move or a wider turn.
    Ordered by type, then intensity, so actions can key sorted sets.
    """
    type: ActionType
    intensity: int = 0

    def __post_init__(self):
        if self.intensity < 0:
            raise ConfigurationError(f"Negative intensity for {self.type.name}")

    @property
    def is_rotation(self) -> bool:
        return self.type in (ActionType.LEFT_TURN, ActionType.RIGHT_TURN)

    def __str__(self) -> str:
        return f"{self.type.name} {self.intensity}"


PAUSE = Action(ActionType.PAUSE, 0)
