# =============================================================================
# L5 Decision - Types and Data Structures
# =============================================================================
# Advisor outcomes, the per-cycle decision context and the result handed
# to the downstream tiers.
# =============================================================================

import numpy as np
from dataclasses import dataclass, field
from typing import Callable, FrozenSet, List, Optional, Set, Union

from L3_spatial import LineSegment, SituationModel
from L4_agent import Action, AgentState, Task


# =============================================================================
# Advisor Outcomes
# =============================================================================

@dataclass(frozen=True)
class Vetoes:
    """Advisor forbids these actions for the rest of the cycle."""
    actions: FrozenSet[Action]
    comment: str = ""


@dataclass(frozen=True)
class Commit:
    """Advisor selects this action; later advisors do not run."""
    action: Action
    comment: str = ""


@dataclass(frozen=True)
class NoOp:
    """Advisor has nothing to say this cycle."""
    comment: str = ""


AdvisorOutcome = Union[Vetoes, Commit, NoOp]


# =============================================================================
# Decision Context
# =============================================================================

@dataclass
class DecisionContext:
    """
    Everything an advisor may consult during one decision cycle.

    Built fresh every cycle. Only the pipeline adds to `vetoed`;
    advisors read it.
    """
    agent: AgentState
    task: Task
    barriers: List[LineSegment]
    situations: SituationModel
    vetoed: Set[Action] = field(default_factory=set)
    _forward_cap: Optional[int] = field(default=None, repr=False)
    _footprint: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def forward_cap(self) -> int:
        """Largest forward intensity that is safe from the current pose."""
        if self._forward_cap is None:
            self._forward_cap = self.agent.max_safe_forward_intensity()
        return self._forward_cap

    @property
    def footprint(self) -> np.ndarray:
        """Situation footprint of the current scan."""
        if self._footprint is None:
            self._footprint = self.situations.footprint(self.agent.endpoints, self.agent.pose,
                                                      self.agent.hits)
        return self._footprint


Advisor = Callable[[DecisionContext], AdvisorOutcome]


# =============================================================================
# Decision Result
# =============================================================================

@dataclass
class DecisionStats:
    """What happened in one cycle, for logs and analysis."""
    decision_tier: int = 0              # 1 = committed by Tier-1, 0 = handed on
    vetoed_actions: str = ""
    advisor: str = ""                   # Committing advisor, if any
    advisor_comments: List[str] = field(default_factory=list)


@dataclass
class Tier1Result:
    """Outcome of the Tier-1 pipeline for one cycle."""
    decision: Optional[Action]
    vetoed: FrozenSet[Action]
    remaining: FrozenSet[Action]
    stats: DecisionStats = field(default_factory=DecisionStats)

    @property
    def decision_made(self) -> bool:
        return self.decision is not None
