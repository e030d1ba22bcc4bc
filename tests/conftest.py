import numpy as np
import pytest

from L3_spatial import FREE, OCCUPIED, FootprintSituationModel, Pose, SituationModel
from L4_agent import AgentState, Task
from L5_decision import DecisionContext

NUM_RAYS = 360
MAX_RANGE = 25.0


@pytest.fixture
def angles():
    """One ray per degree, full circle, ray 180 points straight ahead."""
    return -np.pi + np.arange(NUM_RAYS) * (2 * np.pi / NUM_RAYS)


@pytest.fixture
def open_ranges(angles):
    return np.full(len(angles), MAX_RANGE)


@pytest.fixture
def wall_ranges(angles):
    """Ranges for a straight wall across the heading at the given distance."""
    def make(distance, half_width=np.deg2rad(45)):
        ranges = np.full(len(angles), MAX_RANGE)
        ahead = np.abs(angles) <= half_width
        ranges[ahead] = distance / np.cos(angles[ahead])
        return ranges
    return make


@pytest.fixture
def enclosure_ranges(angles):
    """Ranges for walls all around at a fixed distance, with an optional open gap ahead."""
    def make(distance, gap=0.0):
        ranges = np.full(len(angles), float(distance))
        ranges[np.abs(angles) < gap] = MAX_RANGE
        return ranges
    return make


@pytest.fixture
def origin():
    return Pose(0.0, 0.0, 0.0)


@pytest.fixture
def agent(origin, angles, open_ranges):
    state = AgentState()
    state.update(origin, open_ranges, angles)
    return state


@pytest.fixture
def task():
    return Task(goal=[10.0, 0.0])


@pytest.fixture
def situations():
    return FootprintSituationModel()


@pytest.fixture
def make_context(situations):
    def make(agent, task, barriers=()):
        return DecisionContext(agent=agent, task=task,
                               barriers=list(barriers), situations=situations)
    return make


class FixedGridModel(SituationModel):
    """Situation model whose overlay is a fixed grid."""

    def __init__(self, grid):
        self.grid = grid
        self.calls = 0
        self.last_hits = None

    def recognition_confidence(self, footprint):
        return 0.0

    def action_weight(self, footprint, action):
        return 0.5

    def overlay(self, recent_scans, recent_poses, recent_hits=None):
        self.calls += 1
        self.last_hits = recent_hits
        return self.grid.copy()


@pytest.fixture
def fixed_grid_model():
    return FixedGridModel


@pytest.fixture
def corridor_grid():
    """11x11 grid, walls everywhere except a corridor straight ahead of the centre."""
    grid = np.full((11, 11), OCCUPIED)
    grid[5:, 5] = FREE
    return grid
