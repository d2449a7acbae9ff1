"""
Indoor/outdoor mode and the open-place arrival flag.
"""

from enum import Enum


# sensor_msgs/NavSatFix.COVARIANCE_TYPE_UNKNOWN
COVARIANCE_TYPE_UNKNOWN = 0

# Hysteresis band on the frontal openness score
OPEN_PLACE_ENTER_TH = 0.7
OPEN_PLACE_EXIT_TH = 0.4

# Sector (deg) scored for open-place arrival
OPEN_PLACE_SECTOR = (-90.0, 90.0)


class OperatingMode(Enum):
    """Operating mode, picked from GNSS fix quality."""
    INDOOR = 0
    OUTDOOR = 1


def mode_from_covariance_type(covariance_type: int) -> OperatingMode:
    """Unknown fix covariance means no usable GNSS, i.e. indoors."""
    if covariance_type == COVARIANCE_TYPE_UNKNOWN:
        return OperatingMode.INDOOR
    return OperatingMode.OUTDOOR


class OpenPlaceTracker:
    """Hysteretic "open place reached" flag, only raised outdoors."""

    def __init__(self):
        self.arrived = False

    def update(self, mode: OperatingMode, score: float) -> bool:
        """
        Args:
            mode: Current operating mode
            score: Openness fraction of OPEN_PLACE_SECTOR

        Returns:
            The updated flag
        """
        if mode is OperatingMode.INDOOR:
            self.arrived = False
        elif self.arrived:
            self.arrived = bool(score >= OPEN_PLACE_EXIT_TH)
        else:
            self.arrived = bool(score >= OPEN_PLACE_ENTER_TH)
        return self.arrived
