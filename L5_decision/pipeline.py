# =============================================================================
# L5 Decision - Tier-1 Pipeline
# =============================================================================
# Runs the Tier-1 advisors in order for one decision cycle.
#
# Every cycle starts from an empty vetoed set. Vetoes only ever add to it;
# the first commit ends the cycle. Whatever is left undecided is handed to
# the downstream tiers together with the vetoed and remaining actions.
# =============================================================================

import logging
from typing import Sequence

from .types import (
    Advisor,
    Commit,
    DecisionContext,
    DecisionStats,
    Tier1Result,
    Vetoes
)
from .advisors import TIER1_ADVISORS

logger = logging.getLogger(__name__)


def _format(actions) -> str:
    return ", ".join(str(a) for a in sorted(actions))


class Tier1Pipeline:
    """
    Ordered list of advisors with short-circuit on the first commit.

    Invariants kept here rather than in the advisors: PAUSE and actions
    outside the catalog never enter the vetoed set, and a commit to a
    vetoed action is ignored.
    """

    def __init__(self, advisors: Sequence[Advisor] = TIER1_ADVISORS):
        self.advisors = tuple(advisors)

    def decide(self, ctx: DecisionContext) -> Tier1Result:
        """
        Run one cycle.

        Args:
            ctx: Fresh context for this cycle; its vetoed set is reset

        Returns:
            Tier1Result with the committed action (or None), the vetoed
            actions and the remaining ones
        """
        catalog = ctx.agent.catalog
        ctx.vetoed = set()
        stats = DecisionStats()
        decision = None

        for advisor in self.advisors:
            name = getattr(advisor, "__name__", type(advisor).__name__)
            outcome = advisor(ctx)

            if isinstance(outcome, Vetoes):
                added = {a for a in outcome.actions
                         if a in catalog and a != catalog.pause and a not in ctx.vetoed}
                if added:
                    ctx.vetoed.update(added)
                    stats.advisor_comments.append(f"{name}: {outcome.comment}")

            elif isinstance(outcome, Commit):
                action = outcome.action
                if action not in catalog or action in ctx.vetoed:
                    logger.debug(f"{name} committed to unavailable {action}, ignored")
                    continue
                decision = action
                stats.decision_tier = 1
                stats.advisor = name
                stats.advisor_comments.append(f"{name}: {outcome.comment}")
                break

        vetoed = frozenset(ctx.vetoed)
        stats.vetoed_actions = _format(vetoed)

        if decision is not None:
            logger.debug(f"Tier 1 decision {decision} by {stats.advisor}, "
                         f"{len(vetoed)} vetoed")
        else:
            logger.debug(f"Tier 1 undecided, {len(vetoed)} vetoed: {stats.vetoed_actions}")

        return Tier1Result(decision=decision,
                           vetoed=vetoed,
                           remaining=catalog.remaining(vetoed),
                           stats=stats)
