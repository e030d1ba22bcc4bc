# =============================================================================
# L4 Agent - Action Catalog
# =============================================================================
# The fixed set of legal actions for the robot, built once at startup.
# =============================================================================

from typing import FrozenSet, Iterable, Iterator, Tuple

from .types import Action, ActionType, ConfigurationError, PAUSE


class ActionCatalog:
    """
    Read-only, ordered catalog of every legal action.

    Partitioned into forward actions, rotation actions (the same
    intensities to the left and to the right) and the single pause.
    """

    def __init__(self, actions: Iterable[Action]):
        """
        Args:
            actions: Every legal action, including PAUSE

        Raises:
            ConfigurationError: if the catalog is empty, lacks PAUSE,
                holds more than one pause or is not turn-symmetric
        """
        ordered = tuple(sorted(set(actions)))
        if not ordered:
            raise ConfigurationError("Action catalog is empty")
        pauses = [a for a in ordered if a.type == ActionType.PAUSE]
        if pauses != [PAUSE]:
            raise ConfigurationError("Action catalog must contain exactly one PAUSE 0")

        lefts = {a.intensity for a in ordered if a.type == ActionType.LEFT_TURN}
        rights = {a.intensity for a in ordered if a.type == ActionType.RIGHT_TURN}
        if lefts != rights:
            raise ConfigurationError("Left and right turns must have matching intensities")

        self._actions: Tuple[Action, ...] = ordered
        self.forward_actions: FrozenSet[Action] = frozenset(
            a for a in ordered if a.type == ActionType.FORWARD)
        self.rotation_actions: FrozenSet[Action] = frozenset(
            a for a in ordered if a.is_rotation)
        self.pause: Action = PAUSE

    @classmethod
    def from_counts(cls, num_forward: int, num_rotations: int) -> 'ActionCatalog':
        """Catalog with FORWARD 1..num_forward and turns 1..num_rotations each way."""
        actions = [PAUSE]
        actions += [Action(ActionType.FORWARD, i) for i in range(1, num_forward + 1)]
        for i in range(1, num_rotations + 1):
            actions.append(Action(ActionType.LEFT_TURN, i))
            actions.append(Action(ActionType.RIGHT_TURN, i))
        return cls(actions)

    @property
    def all_actions(self) -> FrozenSet[Action]:
        return frozenset(self._actions)

    @property
    def max_forward_intensity(self) -> int:
        return max((a.intensity for a in self.forward_actions), default=0)

    @property
    def max_rotation_intensity(self) -> int:
        """Largest turn intensity; also the number of turns in each direction."""
        return len(self.rotation_actions) // 2

    def turns(self, direction: ActionType) -> Tuple[Action, ...]:
        """Every turn in one direction, weakest first."""
        return tuple(a for a in self._actions if a.type == direction)

    def remaining(self, vetoed: Iterable[Action]) -> FrozenSet[Action]:
        """Actions not in the vetoed set."""
        return self.all_actions - frozenset(vetoed)

    def __iter__(self) -> Iterator[Action]:
        return iter(self._actions)

    def __contains__(self, action) -> bool:
        return action in self.all_actions

    def __len__(self) -> int:
        return len(self._actions)
