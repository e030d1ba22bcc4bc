import numpy as np
import pytest

from L4_agent import Action, ActionType, AgentState, PAUSE, Task
from L5_decision import TIER1_ADVISORS, Commit, NoOp, Tier1Pipeline, Vetoes

FORWARD_5 = Action(ActionType.FORWARD, 5)


def recording(advisors, snapshots):
    """Wrap advisors so the vetoed set is captured before each one runs."""
    def wrap(advisor):
        def run(ctx):
            snapshots.append(frozenset(ctx.vetoed))
            return advisor(ctx)
        run.__name__ = advisor.__name__
        return run
    return [wrap(a) for a in advisors]


def test_end_to_end_goal_in_sight(agent, task, make_context):
    result = Tier1Pipeline().decide(make_context(agent, task))
    assert result.decision_made
    assert result.decision == FORWARD_5
    assert result.vetoed == frozenset()
    assert result.remaining == agent.catalog.all_actions
    assert result.stats.decision_tier == 1
    assert result.stats.advisor == "victory"


def test_undecided_cycle_hands_on(agent, make_context):
    task = Task(goal=[100.0, 0.0])
    result = Tier1Pipeline().decide(make_context(agent, task))
    assert result.decision is None
    assert result.stats.decision_tier == 0
    assert result.stats.advisor == ""


def test_vetoes_only_grow(origin, angles, wall_ranges, make_context):
    agent = AgentState()
    agent.update(origin, wall_ranges(1.5), angles)
    task = Task(goal=[100.0, 0.0])
    task.record_decision(Action(ActionType.RIGHT_TURN, 1))
    task.record_decision(PAUSE)

    snapshots = []
    result = Tier1Pipeline(recording(TIER1_ADVISORS, snapshots)).decide(make_context(agent, task))
    snapshots.append(result.vetoed)

    assert snapshots[0] == frozenset()
    for before, after in zip(snapshots, snapshots[1:]):
        assert before <= after
    assert Action(ActionType.LEFT_TURN, 4) in result.vetoed
    assert Action(ActionType.FORWARD, 4) in result.vetoed
    assert result.remaining == agent.catalog.all_actions - result.vetoed


def test_pause_never_vetoed(agent, task, make_context):
    def veto_everything(ctx):
        return Vetoes(ctx.agent.catalog.all_actions)

    result = Tier1Pipeline([veto_everything]).decide(make_context(agent, task))
    assert PAUSE not in result.vetoed
    assert result.remaining == frozenset({PAUSE})


def test_foreign_actions_filtered(agent, task, make_context):
    foreign = Action(ActionType.FORWARD, 9)

    def veto_foreign(ctx):
        return Vetoes(frozenset({foreign, FORWARD_5}))

    result = Tier1Pipeline([veto_foreign]).decide(make_context(agent, task))
    assert result.vetoed == frozenset({FORWARD_5})


def test_first_commit_wins(agent, task, make_context):
    calls = []

    def first(ctx):
        calls.append("first")
        return Commit(Action(ActionType.LEFT_TURN, 1), "first")

    def second(ctx):
        calls.append("second")
        return Commit(Action(ActionType.RIGHT_TURN, 1), "second")

    result = Tier1Pipeline([first, second]).decide(make_context(agent, task))
    assert result.decision == Action(ActionType.LEFT_TURN, 1)
    assert calls == ["first"]
    assert result.stats.advisor == "first"


def test_commit_to_vetoed_action_ignored(agent, task, make_context):
    left = Action(ActionType.LEFT_TURN, 1)

    def veto_left(ctx):
        return Vetoes(frozenset({left}), "no left")

    def want_left(ctx):
        return Commit(left)

    def silent(ctx):
        return NoOp()

    result = Tier1Pipeline([veto_left, want_left, silent]).decide(make_context(agent, task))
    assert result.decision is None
    assert result.vetoed == frozenset({left})
    assert result.stats.advisor_comments == ["veto_left: no left"]
    assert result.stats.vetoed_actions == "LEFT_TURN 1"


def test_each_cycle_starts_clean(agent, task, make_context):
    ctx = make_context(agent, task)
    ctx.vetoed.add(FORWARD_5)
    result = Tier1Pipeline().decide(ctx)
    assert result.decision == FORWARD_5
