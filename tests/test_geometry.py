import numpy as np
import pytest

from L3_spatial import (
    ConfigurationError,
    LineSegment,
    Pose,
    can_see,
    distance,
    nearest_distance,
    normalize_angle,
    perpendicular_distance,
    point_to_segment_distance,
    segment_similarity,
    similarity_matrix,
    transform_to_robot_frame,
    transform_to_world_frame,
)
from L3_spatial.geometry import orientation_difference


class TestAngles:

    def test_normalize_wraps_into_half_open_interval(self):
        assert normalize_angle(3 * np.pi / 2) == pytest.approx(-np.pi / 2)
        assert normalize_angle(-np.pi) == pytest.approx(np.pi)
        assert normalize_angle(np.pi) == pytest.approx(np.pi)

    def test_pose_normalizes_theta(self):
        assert Pose(0, 0, 2 * np.pi + 0.5).theta == pytest.approx(0.5)

    def test_pose_rejects_non_finite(self):
        with pytest.raises(ConfigurationError):
            Pose(float('nan'), 0.0, 0.0)
        with pytest.raises(ValueError):
            Pose(0.0, float('inf'), 0.0)


class TestTransforms:

    def test_world_and_robot_frames_are_inverse(self):
        pose = Pose(1.0, 2.0, np.pi / 3)
        pts = np.array([[1.0, 0.0], [0.5, -2.0], [3.0, 4.0]])
        back = transform_to_robot_frame(transform_to_world_frame(pts, pose), pose)
        assert np.allclose(back, pts)

    def test_point_ahead_of_rotated_pose(self):
        pose = Pose(1.0, 1.0, np.pi / 2)
        assert np.allclose(transform_to_world_frame(np.array([2.0, 0.0]), pose), [1.0, 3.0])


class TestSegments:

    def test_degenerate_segment_has_zero_angle(self):
        seg = LineSegment([1.0, 1.0], [1.0, 1.0])
        assert seg.length == 0.0
        assert seg.angle == 0.0

    def test_similarity_of_identical_segments_is_zero(self):
        seg = LineSegment([0, 0], [2, 0])
        assert segment_similarity(seg, seg) == pytest.approx(0.0)
        assert segment_similarity(seg, seg.reversed()) == pytest.approx(0.0)

    def test_similarity_grows_with_offset_and_angle(self):
        base = LineSegment([0, 0], [2, 0])
        shifted = LineSegment([0, 1], [2, 1])
        rotated = LineSegment([0, 0], [0, 2])
        assert segment_similarity(base, shifted) == pytest.approx(1.0)
        assert segment_similarity(base, rotated) > segment_similarity(base, shifted)

    def test_orientation_difference_is_undirected(self):
        a = LineSegment([0, 0], [1, 0])
        b = LineSegment([0, 0], [-1, 0.01])
        assert orientation_difference(a, b) < 0.02

    def test_similarity_matrix_symmetric_with_zero_diagonal(self):
        segs = [LineSegment([0, 0], [2, 0]),
                LineSegment([0, 1], [2, 1.5]),
                LineSegment([5, 5], [5, 7])]
        m = similarity_matrix(segs)
        assert m.shape == (3, 3)
        assert np.allclose(m, m.T)
        assert np.allclose(np.diag(m), 0.0)

    def test_similarity_matrix_matches_pairwise_scores(self):
        segs = [LineSegment([0, 0], [2, 0]),
                LineSegment([2.1, 0.2], [0, 0.1]),
                LineSegment([0, 1], [2, 1.5]),
                LineSegment([5, 5], [5, 7]),
                LineSegment([-1, -1], [-3, 1])]
        m = similarity_matrix(segs)
        for i, a in enumerate(segs):
            for j, b in enumerate(segs):
                if i != j:
                    assert m[i, j] == pytest.approx(segment_similarity(a, b))
        assert similarity_matrix([]).shape == (0, 0)

    def test_point_distances(self):
        seg = LineSegment([0, 0], [2, 0])
        assert point_to_segment_distance([1, 1], seg) == pytest.approx(1.0)
        assert point_to_segment_distance([4, 0], seg) == pytest.approx(2.0)
        assert perpendicular_distance([4, 0], seg) == pytest.approx(0.0)
        assert perpendicular_distance([4, -3], seg) == pytest.approx(3.0)


class TestVisibility:

    def test_out_of_range_is_not_visible(self):
        assert not can_see(np.zeros((0, 2)), [0, 0], [30, 0], 20)

    def test_no_endpoints_visible_within_range(self):
        assert can_see(np.zeros((0, 2)), [0, 0], [10, 0], 20)

    def test_blocked_by_closer_reading(self):
        endpoints = np.array([[2.0, 0.0], [0.0, 25.0]])
        assert not can_see(endpoints, [0, 0], [10, 0], 20)
        assert can_see(endpoints, [0, 0], [1.5, 0.0], 20)
        assert can_see(endpoints, [0, 0], [0.0, 10.0], 20)

    def test_nearest_distance(self):
        endpoints = np.array([[3.0, 0.0], [0.0, 4.0]])
        wall = LineSegment([-1, -1], [1, -1])
        assert nearest_distance([0, 0], endpoints) == pytest.approx(3.0)
        assert nearest_distance([0, 0], endpoints, [wall]) == pytest.approx(1.0)
        assert nearest_distance([0, 0], np.zeros((0, 2))) == float('inf')
        assert distance([0, 0], [3, 4]) == pytest.approx(5.0)
