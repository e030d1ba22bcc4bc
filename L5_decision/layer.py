# =============================================================================
# L5 Decision - Complete Decision Layer
# =============================================================================
# Full decision layer that integrates:
# - L4 agent state and task for the robot's beliefs
# - L3 barrier and situation models for learned spatial structure
# - The Tier-1 advisor pipeline
#
# This is a convenience layer: feed it a pose and a laser scan every
# cycle, ask it for a Tier-1 decision, and tell it which action was
# finally executed.
# =============================================================================

import logging
import numpy as np
from collections import Counter
from typing import Optional

from L3_spatial import BarrierModel, FootprintSituationModel, Pose, SituationModel
from L4_agent import Action, AgentState, ConfigurationError, Task

from .types import DecisionContext, Tier1Result
from .pipeline import Tier1Pipeline

logger = logging.getLogger(__name__)


class DecisionLayer:
    """
    Complete decision layer with the Tier-1 veto/override pipeline.

    Owns the agent state, the current task, the barrier and situation
    models and the pipeline. Barriers are refreshed in update_state(),
    before any advisor runs.
    """

    def __init__(self, goal, waypoints=None,
                 agent: Optional[AgentState] = None,
                 situations: Optional[SituationModel] = None,
                 barriers: Optional[BarrierModel] = None,
                 pipeline: Optional[Tier1Pipeline] = None):
        """
        Initialize decision layer.

        Args:
            goal: Goal position [x, y]
            waypoints: Optional initial waypoints
            agent: Agent state; default configuration when omitted
            situations: Situation model; an empty footprint model when omitted
            barriers: Barrier model; default parameters when omitted
            pipeline: Tier-1 pipeline; the standard advisor order when omitted
        """
        self.agent = agent if agent is not None else AgentState()
        self.situations = (situations if situations is not None
                           else FootprintSituationModel(max_range=self.agent.laser.max_range))
        self.barriers = barriers if barriers is not None else BarrierModel()
        self.pipeline = pipeline if pipeline is not None else Tier1Pipeline()
        self.task = Task(goal, waypoints)

        self.last_result: Optional[Tier1Result] = None
        self.cycles = 0
        self.tier1_decisions = 0
        self.advisor_counts = Counter()

    def set_task(self, goal, waypoints=None):
        """Start a new navigation leg; history and visited cells start empty."""
        self.task = Task(goal, waypoints)
        logger.info(f"New task toward ({float(goal[0]):.2f}, {float(goal[1]):.2f})")

    def update_state(self, pose: Pose, ranges: np.ndarray, angles: np.ndarray):
        """
        Take in a new pose and laser scan.

        Updates the agent, the task's position history and waypoint queue,
        then the barrier model.
        """
        self.agent.update(pose, ranges, angles)
        self.task.record_position(pose)
        self.task.advance_waypoints(pose)
        self.barriers.update(self.agent.recent_hit_scans(), pose.position)

    def decide(self) -> Tier1Result:
        """
        Run the Tier-1 pipeline for the current state.

        Raises:
            ConfigurationError: if no pose has been received yet
        """
        if not self.agent.has_pose:
            raise ConfigurationError("decide() called before update_state()")

        ctx = DecisionContext(agent=self.agent,
                              task=self.task,
                              barriers=self.barriers.get(),
                              situations=self.situations)
        result = self.pipeline.decide(ctx)
        self.last_result = result
        self.cycles += 1
        if result.decision_made:
            self.tier1_decisions += 1
            self.advisor_counts[result.stats.advisor] += 1
        return result

    def record_decision(self, action: Action):
        """Record the action that was finally executed this cycle."""
        self.task.record_decision(action)

    def is_mission_complete(self) -> bool:
        return self.agent.has_pose and self.task.is_complete(self.agent.pose)

    def reset(self):
        """Reset the decision layer, keeping the current goal."""
        self.agent.reset()
        self.barriers.clear()
        self.task = Task(self.task.goal)
        self.last_result = None
        self.cycles = 0
        self.tier1_decisions = 0
        self.advisor_counts.clear()

    def export_state(self) -> dict:
        """Export complete state for analysis/debug."""
        pose = self.agent.pose if self.agent.has_pose else None
        result = self.last_result
        return {
            "pose": None if pose is None else [pose.x, pose.y, pose.theta],
            "goal": self.task.goal.tolist(),
            "waypoints": [w.tolist() for w in self.task.waypoints],
            "barriers": [b.to_list() for b in self.barriers.get()],
            "visited_cells": sorted(self.task.plan_positions),
            "decisions": [str(a) for a in self.task.previous_decisions()],
            "last_decision": None if result is None or result.decision is None
                             else str(result.decision),
            "last_vetoed": [] if result is None else [str(a) for a in sorted(result.vetoed)],
            "last_comments": [] if result is None else list(result.stats.advisor_comments),
        }

    def get_statistics(self) -> dict:
        """Returns system statistics."""
        return {
            "cycles": self.cycles,
            "tier1_decisions": self.tier1_decisions,
            "tier1_rate": self.tier1_decisions / self.cycles if self.cycles else 0.0,
            "decisions_by_advisor": dict(self.advisor_counts),
            "num_barriers": len(self.barriers.get()),
            "num_waypoints": len(self.task.waypoints),
            "num_visited_cells": len(self.task.plan_positions),
        }
