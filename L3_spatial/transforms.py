# =============================================================================
# L3 Spatial Model - Coordinate Transforms
# =============================================================================
# Utilities for moving points between the robot frame and the world frame.
# =============================================================================

import numpy as np

from .types import Pose


def rotation_matrix_2d(theta: float) -> np.ndarray:
    """
    Creates a 2D rotation matrix.
    
    Args:
        theta: Rotation angle in radians
        
    Returns:
        2x2 rotation matrix
    """
    c, s = np.cos(theta), np.sin(theta)
    return np.array([[c, -s], [s, c]])


def transform_to_world_frame(points_robot_frame: np.ndarray, pose: Pose) -> np.ndarray:
    """
    Transforms positions from the robot frame to the world frame.
    
    Args:
        points_robot_frame: Single point [x, y] or (N, 2) array
        pose: Robot pose in world frame
        
    Returns:
        Positions in world frame, same shape as the input
    """
    R = rotation_matrix_2d(pose.theta)
    pts = np.asarray(points_robot_frame, dtype=float)
    return pts @ R.T + pose.position


def transform_to_robot_frame(points_world_frame: np.ndarray, pose: Pose) -> np.ndarray:
    """
    Transforms positions from the world frame to the robot frame.
    
    Args:
        points_world_frame: Single point [x, y] or (N, 2) array
        pose: Robot pose in world frame
        
    Returns:
        Positions in robot frame, same shape as the input
    """
    R = rotation_matrix_2d(-pose.theta)
    pts = np.asarray(points_world_frame, dtype=float)
    return (pts - pose.position) @ R.T
