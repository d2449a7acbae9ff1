"""
Shared controller state.

Written by the scan and GNSS callbacks, read by the control task. Every
access goes through one lock; the control task takes a snapshot once per
cycle and works on that.
"""

import threading
from dataclasses import dataclass
from typing import Optional

from .mode import OperatingMode, OpenPlaceTracker, OPEN_PLACE_SECTOR
from .scan_data import ScanData


@dataclass(frozen=True)
class StateSnapshot:
    """Consistent view of the state for one decision cycle."""
    scan: Optional[ScanData]
    mode: OperatingMode
    open_place: bool
    scan_seq: int


class ControllerState:
    """Lock-protected cell holding the latest sensor-derived state."""

    def __init__(self, open_place_distance: float):
        self.open_place_distance = open_place_distance
        self._cond = threading.Condition(threading.Lock())
        self._scan: Optional[ScanData] = None
        self._scan_seq = 0
        self._mode = OperatingMode.INDOOR
        self._tracker = OpenPlaceTracker()
        self._owner = 0

    @property
    def initialized(self) -> bool:
        with self._cond:
            return self._scan is not None

    def update_scan(self, msg) -> bool:
        """
        Store a new LaserScan and recompute the open-place flag.

        The first message also fixes the scan geometry.

        Returns:
            The open-place flag after the update
        """
        with self._cond:
            if self._scan is None:
                self._scan = ScanData.from_msg(msg)
            else:
                self._scan.update(msg.ranges)
            score = 0.0
            if self._mode is OperatingMode.OUTDOOR:
                score = self._scan.open_place_check(*OPEN_PLACE_SECTOR, self.open_place_distance)
            arrived = self._tracker.update(self._mode, score)
            self._scan_seq += 1
            self._cond.notify_all()
            return arrived

    def update_mode(self, mode: OperatingMode):
        with self._cond:
            self._mode = mode

    def claim_control(self) -> int:
        """Take over the controller for a new goal; older holders lose it."""
        with self._cond:
            self._owner += 1
            return self._owner

    def holds_control(self, token: int) -> bool:
        with self._cond:
            return self._owner == token

    def snapshot(self) -> StateSnapshot:
        with self._cond:
            scan = None
            if self._scan is not None:
                # Copy so a scan arriving mid-cycle does not change the frame under us
                scan = ScanData(self._scan.angle_min, self._scan.angle_increment,
                                self._scan.range_min, self._scan.range_max,
                                self._scan.ranges.copy())
            return StateSnapshot(scan, self._mode, self._tracker.arrived, self._scan_seq)

    def wait_for_scan(self, last_seq: int, timeout: float) -> bool:
        """
        Block until a scan newer than last_seq arrives or timeout expires.

        Returns:
            True if a newer scan is available
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._scan_seq > last_seq, timeout)
