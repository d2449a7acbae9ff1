"""
Laser scan storage and sector analysis for wall tracking.

Angles are in degrees, 0 = forward, positive = left (counter-clockwise),
negative = right. Samples without a valid return count as far away, except in
open_place_check, which scores only the beams that returned.
"""

import numpy as np
from typing import Sequence

from .config import FRONT_LEFT_WALL_DISTANCE


# ========================================================================
# CONSTANTS
# ========================================================================

FRONT_WALL_HALF_WIDTH_DEG = 10.0   # Half-width of the front wall window
GAP_PROBE_DEG = 5.0                # Offset toward the front for the expected wall range
NOISE_WINDOW_DEG = 3.0             # Half-width of the gap corroboration window
NOISE_MIN_FRACTION = 0.8           # Share of open beams needed to trust a gap


class ScanData:
    """Latest laser scan, addressable by angle."""

    def __init__(self, angle_min: float, angle_increment: float,
                 range_min: float, range_max: float, ranges: Sequence[float] = ()):
        """
        Args:
            angle_min: Angle of the first beam (rad)
            angle_increment: Angle between beams (rad)
            range_min, range_max: Valid range limits of the sensor (m)
            ranges: Initial range readings
        """
        if angle_increment == 0.0:
            raise ValueError('angle_increment must be non-zero')
        self.angle_min = float(angle_min)
        self.angle_increment = float(angle_increment)
        self.range_min = float(range_min)
        self.range_max = float(range_max)
        self.ranges = np.empty(0)
        self.angles_deg = np.empty(0)
        self.valid = np.empty(0, dtype=bool)
        self.update(ranges)

    @classmethod
    def from_msg(cls, msg) -> 'ScanData':
        """Build from a sensor_msgs/LaserScan message."""
        return cls(msg.angle_min, msg.angle_increment,
                   msg.range_min, msg.range_max, msg.ranges)

    def update(self, ranges: Sequence[float]):
        """Replace the stored ranges with a new scan."""
        self.ranges = np.asarray(ranges, dtype=float)
        n = len(self.ranges)
        if len(self.angles_deg) != n:
            angles = self.angle_min + np.arange(n) * self.angle_increment
            # Wrap to [-180, 180) so sector bounds work for 0..2pi scanners too
            self.angles_deg = (np.degrees(angles) + 180.0) % 360.0 - 180.0
        with np.errstate(invalid='ignore'):
            self.valid = (
                np.isfinite(self.ranges)
                & (self.ranges >= self.range_min)
                & (self.ranges <= self.range_max)
            )

    def __len__(self):
        return len(self.ranges)

    # ========================================================================
    # INDEXING HELPERS
    # ========================================================================

    def _sector_mask(self, start_deg: float, end_deg: float) -> np.ndarray:
        lo, hi = min(start_deg, end_deg), max(start_deg, end_deg)
        return (self.angles_deg >= lo) & (self.angles_deg <= hi)

    def _nearest_index(self, deg: float) -> int:
        if len(self.ranges) == 0:
            return -1
        diff = np.abs((self.angles_deg - deg + 180.0) % 360.0 - 180.0)
        return int(np.argmin(diff))

    def _far_ranges(self) -> np.ndarray:
        """Ranges with every invalid sample replaced by +inf."""
        return np.where(self.valid, self.ranges, np.inf)

    def range_at(self, deg: float) -> float:
        """Range of the beam nearest to deg, +inf when it has no valid return."""
        i = self._nearest_index(deg)
        if i < 0 or not self.valid[i]:
            return float('inf')
        return float(self.ranges[i])

    # ========================================================================
    # SECTOR QUERIES
    # ========================================================================

    def left_wall_check(self, start_deg: float, end_deg: float) -> float:
        """
        Mean of the valid ranges in [start_deg, end_deg].

        Returns range_max when the sector has no valid sample.
        """
        mask = self._sector_mask(start_deg, end_deg) & self.valid
        if not np.any(mask):
            return self.range_max
        return float(np.mean(self.ranges[mask]))

    def threshold_check(self, deg: float, distance: float) -> bool:
        """True if the beam nearest to deg sees something closer than distance."""
        return self.range_at(deg) < distance

    def front_wall_check(self, center_deg: float, stop_distance: float) -> float:
        """Fraction of beams around center_deg closer than stop_distance."""
        mask = self._sector_mask(center_deg - FRONT_WALL_HALF_WIDTH_DEG,
                                 center_deg + FRONT_WALL_HALF_WIDTH_DEG)
        total = int(np.count_nonzero(mask))
        if total == 0:
            return 0.0
        hits = int(np.count_nonzero(self._far_ranges()[mask] < stop_distance))
        return float(hits / total)

    def conflict_check(self, deg: float, gap_th: float) -> bool:
        """
        Detect an opening in the wall at deg.

        The beam GAP_PROBE_DEG closer to the front gives the expected wall
        distance. A gap is reported when the beam at deg reaches at least
        gap_th beyond it.
        """
        probe = deg - GAP_PROBE_DEG if deg >= 0 else deg + GAP_PROBE_DEG
        expected = self.range_at(probe)
        if not np.isfinite(expected):
            return False
        return self.range_at(deg) >= expected + gap_th

    def noise_check(self, deg: float, distance: float = FRONT_LEFT_WALL_DISTANCE) -> bool:
        """
        True if the opening at deg is seen by the neighbouring beams as well.

        A single dropout among close returns is sensor noise, not a gap.
        """
        mask = self._sector_mask(deg - NOISE_WINDOW_DEG, deg + NOISE_WINDOW_DEG)
        total = int(np.count_nonzero(mask))
        if total == 0:
            return False
        open_beams = int(np.count_nonzero(self._far_ranges()[mask] >= distance))
        return bool(open_beams / total >= NOISE_MIN_FRACTION)

    def open_place_check(self, start_deg: float, end_deg: float,
                         open_distance: float) -> float:
        """
        Fraction of the valid beams in the sector that reach beyond open_distance.

        Returns 0 when the sector has no valid return.
        """
        mask = self._sector_mask(start_deg, end_deg) & self.valid
        total = int(np.count_nonzero(mask))
        if total == 0:
            return 0.0
        open_beams = int(np.count_nonzero(self.ranges[mask] > open_distance))
        return float(open_beams / total)
