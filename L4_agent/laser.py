# =============================================================================
# L4 Agent - Laser Processor
# =============================================================================
# Converts raw laser range readings into Cartesian endpoints.
# =============================================================================

import numpy as np
from typing import Tuple

from L3_spatial import Pose, transform_to_world_frame

from .config import LASER_MAX_RANGE, LASER_MIN_RANGE


class LaserProcessor:
    """
    Processes raw laser scans into endpoints.
    
    Pipeline:
    1. Sanitize readings (nan/inf/over-range become max range)
    2. Drop readings below the minimum range (sensor noise)
    3. Convert polar to Cartesian in the robot frame
    4. Transform to the world frame with the capture pose
    """
    
    def __init__(self, 
                 max_range: float = LASER_MAX_RANGE,
                 min_range: float = LASER_MIN_RANGE):
        """
        Initialize the laser processor.
        
        Args:
            max_range: Readings at or beyond this distance hit nothing (meters)
            min_range: Readings below this distance are discarded (meters)
        """
        self.max_range = max_range
        self.min_range = min_range

    def parse_scan(self, ranges: np.ndarray, angles: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Convert raw readings to robot-frame points.
        
        Args:
            ranges: Array of distances
            angles: Array of angles (radians, robot frame)
            
        Returns:
            (points, hits): (N, 2) points in robot frame and a boolean
            mask that is False for max-range readings
        """
        ranges = np.asarray(ranges, dtype=float)
        angles = np.asarray(angles, dtype=float)
        if ranges.shape != angles.shape:
            raise ValueError(f"ranges {ranges.shape} and angles {angles.shape} differ")

        ranges = np.where(np.isfinite(ranges), ranges, self.max_range)
        ranges = np.minimum(ranges, self.max_range)
        keep = ranges >= self.min_range
        ranges, angles = ranges[keep], angles[keep]

        points = np.column_stack((ranges * np.cos(angles), ranges * np.sin(angles)))
        hits = ranges < self.max_range
        return points.reshape(-1, 2), hits

    def transform_to_endpoints(self, pose: Pose, ranges: np.ndarray,
                               angles: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """
        Full pipeline: parse the scan and place it in the world frame.
        
        Returns:
            (endpoints, hits): (N, 2) world-frame endpoints and hit mask
        """
        points, hits = self.parse_scan(ranges, angles)
        if len(points) == 0:
            return points, hits
        return transform_to_world_frame(points, pose), hits
