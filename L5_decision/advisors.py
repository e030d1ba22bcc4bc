# =============================================================================
# L5 Decision - Tier-1 Advisors
# =============================================================================
# Reactive rules consulted in a fixed order every decision cycle. Each one
# reads the DecisionContext and either vetoes actions, commits to an action
# or stays silent.
#
# Order:
# 1. not_opposite   (veto)     - no immediate reversal of a turn
# 2. avoid_walls    (veto)     - no forward move into an obstacle
# 3. dont_go_back   (veto)     - no turn that leads to a visited cell
# 4. situation      (veto)     - no action a known situation advises against
# 5. victory        (override) - head straight for a goal in sight
# 6. get_out        (override) - leave a confined space
# =============================================================================

import logging

from L4_agent import Action, ActionType

from .types import Commit, DecisionContext, NoOp, Vetoes
from .escape import is_confined, turn_pattern_established, plan_escape

from .config import (
    NOT_OPPOSITE_MIN_DECISIONS,
    SITUATION_CONFIDENCE_THRESHOLD,
    SITUATION_WEIGHT_THRESHOLD,
    VICTORY_VISIBILITY_RANGE,
    VICTORY_MIN_DISPLACEMENT,
    CONFINEMENT_LOOKOUT_RADIUS,
    CONFINEMENT_TIGHTNESS_RATIO,
    ESCAPE_MIN_DECISIONS,
    ESCAPE_SCAN_COUNT
)

logger = logging.getLogger(__name__)

_OPPOSITE = {
    ActionType.LEFT_TURN: ActionType.RIGHT_TURN,
    ActionType.RIGHT_TURN: ActionType.LEFT_TURN,
}


def _format(actions) -> str:
    return ", ".join(str(a) for a in sorted(actions))


# =============================================================================
# Veto advisors
# =============================================================================

def not_opposite(ctx: DecisionContext):
    """
    Veto every turn opposite to the one just made.

    Active when the last decision was a turn, or a turn followed by a
    pause.
    """
    decisions = ctx.task.previous_decisions()
    if len(decisions) < NOT_OPPOSITE_MIN_DECISIONS:
        return NoOp("not enough history")

    last, before = decisions[-1], decisions[-2]
    if last.is_rotation:
        direction = last.type
    elif last.type == ActionType.PAUSE and before.is_rotation:
        direction = before.type
    else:
        return NoOp()

    vetoes = frozenset(ctx.agent.catalog.turns(_OPPOSITE[direction]))
    logger.debug(f"not_opposite: after {direction.name} vetoing {_format(vetoes)}")
    return Vetoes(vetoes, f"last turn {direction.name}")


def avoid_walls(ctx: DecisionContext):
    """Veto forward moves longer than the space ahead allows."""
    cap = ctx.forward_cap
    vetoes = frozenset(a for a in ctx.agent.catalog.forward_actions if a.intensity > cap)
    if not vetoes:
        return NoOp()
    logger.debug(f"avoid_walls: max safe forward {cap}, vetoing {_format(vetoes)}")
    return Vetoes(vetoes, f"max forward {cap}")


def dont_go_back(ctx: DecisionContext):
    """Veto turns whose predicted pose lands in an already visited cell."""
    agent, task = ctx.agent, ctx.task
    vetoes = set()
    for action in agent.catalog:
        if action in ctx.vetoed or not action.is_rotation:
            continue
        predicted = agent.predicted_pose(action)
        if task.visited(predicted.x, predicted.y):
            vetoes.add(action)

    if not vetoes:
        return NoOp()
    logger.debug(f"dont_go_back: vetoing {_format(vetoes)}")
    return Vetoes(frozenset(vetoes), f"{len(vetoes)} lead back")


def situation(ctx: DecisionContext):
    """In a recognised situation, veto actions it rates poorly."""
    footprint = ctx.footprint
    confidence = ctx.situations.recognition_confidence(footprint)
    if confidence < SITUATION_CONFIDENCE_THRESHOLD:
        return NoOp(f"confidence {confidence:.2f}")

    vetoes = set()
    for action in ctx.agent.catalog:
        if action in ctx.vetoed or action.type == ActionType.PAUSE:
            continue
        if ctx.situations.action_weight(footprint, action) < SITUATION_WEIGHT_THRESHOLD:
            vetoes.add(action)

    if not vetoes:
        return NoOp(f"confidence {confidence:.2f}")
    logger.debug(f"situation: confidence {confidence:.2f}, vetoing {_format(vetoes)}")
    return Vetoes(frozenset(vetoes), f"confidence {confidence:.2f}")


# =============================================================================
# Override advisors
# =============================================================================

def victory(ctx: DecisionContext):
    """
    Steer toward the goal, or else the next waypoint, when it is in sight.

    The steering action is taken only when it actually moves the robot
    (non-zero intensity, forward within the safe cap, predicted
    displacement at least VICTORY_MIN_DISPLACEMENT) and is not vetoed.
    Reaching for a waypoint marks the current position visited.
    """
    agent, task = ctx.agent, ctx.task

    goal = task.goal_point()
    if agent.can_see(goal, VICTORY_VISIBILITY_RANGE):
        target, label = goal, "goal"
    else:
        waypoint = task.next_waypoint()
        if not agent.can_see(waypoint, VICTORY_VISIBILITY_RANGE):
            return NoOp("nothing in sight")
        target, label = waypoint, "waypoint"

    action = agent.steer_towards(target)
    if action.intensity == 0:
        return NoOp(f"{label} in sight, no move")
    if action.type == ActionType.FORWARD and action.intensity > ctx.forward_cap:
        return NoOp(f"{label} in sight, blocked")
    if action in ctx.vetoed:
        return NoOp(f"{label} in sight, {action} vetoed")

    pose = agent.pose
    displacement = agent.predicted_pose(action).distance_to(pose)
    if displacement < VICTORY_MIN_DISPLACEMENT:
        return NoOp(f"{label} in sight, displacement {displacement:.2f}")

    if label == "waypoint":
        task.mark_visited(pose.x, pose.y)
    logger.debug(f"victory: {label} at ({target[0]:.2f}, {target[1]:.2f}) -> {action}")
    return Commit(action, f"{label} in sight")


def get_out(ctx: DecisionContext):
    """
    Leave a confined space.

    When confined and already spinning in place with maximum turns, plan
    an escape path onto the task and let the later tiers follow it. No
    new plan is made while one is still being followed.
    When confined otherwise, turn as hard as possible, preferring right.
    """
    agent = ctx.agent
    nearest = agent.distance_to_nearest_obstacle(ctx.barriers)
    if not is_confined(nearest, CONFINEMENT_LOOKOUT_RADIUS, CONFINEMENT_TIGHTNESS_RATIO):
        return NoOp()

    decisions = ctx.task.previous_decisions()
    if len(decisions) < ESCAPE_MIN_DECISIONS:
        return NoOp("confined, not enough history")

    if turn_pattern_established(decisions, agent.catalog) is not None:
        if ctx.task.plan_pending:
            return NoOp("confined, escape plan pending")
        scans, poses, hits = agent.recent_scans(ESCAPE_SCAN_COUNT)
        if len(poses) < ESCAPE_SCAN_COUNT:
            return NoOp("confined, not enough scans")
        plan = plan_escape(ctx.situations, scans, poses, ctx.task, recent_hits=hits)
        if plan is None:
            return NoOp("confined, no escape plan")
        return NoOp(f"confined, escape plan of {len(plan)} waypoints")

    intensity = agent.catalog.max_rotation_intensity
    if intensity == 0:
        return NoOp("confined, cannot turn")
    for direction in (ActionType.RIGHT_TURN, ActionType.LEFT_TURN):
        action = Action(direction, intensity)
        if action not in ctx.vetoed:
            logger.debug(f"get_out: nearest obstacle {nearest:.2f}, committing {action}")
            return Commit(action, f"confined at {nearest:.2f}")
    return NoOp("confined, hard turns vetoed")


TIER1_ADVISORS = (
    not_opposite,
    avoid_walls,
    dont_go_back,
    situation,
    victory,
    get_out,
)
