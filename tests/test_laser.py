import numpy as np
import pytest

from L3_spatial import Pose
from L4_agent import LaserProcessor


@pytest.fixture
def laser():
    return LaserProcessor(max_range=10.0, min_range=0.1)


def test_parse_scan_sanitizes_readings(laser):
    ranges = np.array([1.0, np.nan, np.inf, 12.0, 0.05])
    angles = np.array([0.0, 0.5, 1.0, np.pi / 2, 2.0])
    points, hits = laser.parse_scan(ranges, angles)

    # The reading below min range is dropped
    assert points.shape == (4, 2)
    assert hits.tolist() == [True, False, False, False]
    assert np.allclose(points[0], [1.0, 0.0])
    assert np.allclose(np.linalg.norm(points[1:], axis=1), 10.0)


def test_parse_scan_shape_mismatch(laser):
    with pytest.raises(ValueError):
        laser.parse_scan(np.ones(3), np.ones(4))


def test_endpoints_in_world_frame(laser):
    pose = Pose(2.0, 1.0, np.pi / 2)
    endpoints, hits = laser.transform_to_endpoints(pose, np.array([3.0]), np.array([0.0]))
    assert np.allclose(endpoints, [[2.0, 4.0]])
    assert hits.tolist() == [True]
