"""
One wall tracking evaluation cycle.

Reads the sector analyses of the current scan and the operating mode, and
decides the velocity command and the open-place detection label.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .config import FRONT_LEFT_WALL_DISTANCE, WallTrackingConfig
from .mode import OperatingMode
from .pid import LateralPIDController
from .scan_data import ScanData


# Emergency turn when a wall is right in front
EMERGENCY_TURN_RATE = math.radians(-45)
EMERGENCY_DWELL = 2.0   # seconds

# Outdoor open-direction search
OPEN_SECTOR_TH = 0.7
OPEN_SECTORS = (
    ('Front', (-15.0, 15.0)),
    ('Left', (15.0, 45.0)),
    ('Right', (-45.0, -15.0)),
)

LABEL_INDOOR = 'Indoor'
LABEL_FRONT = 'Front'
LABEL_LEFT = 'Left'
LABEL_RIGHT = 'Right'
LABEL_NOT_OPEN = 'Not open place'


@dataclass(frozen=True)
class Command:
    linear: float = 0.0
    angular: float = 0.0


@dataclass(frozen=True)
class Decision:
    """Result of one cycle: command to publish, label, and how long to hold it."""
    command: Command
    label: str
    dwell: float = 0.0


def clamp_command(linear: float, angular: float, config: WallTrackingConfig) -> Command:
    """
    Apply the velocity limits.

    Linear velocity only has an upper bound; angular velocity is held in
    [min_angular_vel, max_angular_vel].
    """
    return Command(
        linear=min(linear, config.max_linear_vel),
        angular=max(min(angular, config.max_angular_vel), config.min_angular_vel),
    )


class DecisionEngine:
    """Wall tracking decision step shared by the indoor and outdoor modes."""

    def __init__(self, config: WallTrackingConfig, pid: LateralPIDController):
        self.config = config
        self.pid = pid

    def step(self, scan: ScanData, mode: OperatingMode) -> Decision:
        cfg = self.config
        gap_th = cfg.distance_from_wall * 2.0
        gap_start = scan.conflict_check(cfg.start_deg_lateral, gap_th)
        gap_end = scan.conflict_check(90.0, gap_th)
        front_left_wall = scan.threshold_check(cfg.flw_deg, FRONT_LEFT_WALL_DISTANCE)
        front_wall = scan.front_wall_check(cfg.fwc_deg, cfg.distance_to_stop)

        label = LABEL_INDOOR

        if front_wall >= cfg.stop_ray_th:
            # Same turn in both modes; the outdoor sector search is skipped
            command = clamp_command(cfg.max_linear_vel / 4, EMERGENCY_TURN_RATE, cfg)
            return Decision(command, label, EMERGENCY_DWELL)

        if mode is OperatingMode.OUTDOOR:
            label, linear, angular = self._open_direction(scan)
            if label != LABEL_NOT_OPEN:
                return Decision(clamp_command(linear, angular, cfg), label)

        linear, angular = self._follow_wall(scan, gap_start or gap_end, front_left_wall)
        return Decision(clamp_command(linear, angular, cfg), label)

    def _open_direction(self, scan: ScanData) -> Tuple[str, float, float]:
        """Pick the most open of the front/left/right sectors, if any qualifies."""
        cfg = self.config
        # Last slot stands for "nothing open"; scores below threshold never win
        evals = []
        for _, (start, end) in OPEN_SECTORS:
            res = scan.open_place_check(start, end, cfg.open_place_distance)
            evals.append(-1.0 if res < OPEN_SECTOR_TH else res)
        evals.append(0.0)
        best = evals.index(max(evals))

        if best == len(OPEN_SECTORS):
            return LABEL_NOT_OPEN, 0.0, 0.0
        label = OPEN_SECTORS[best][0]
        if label == LABEL_LEFT:
            return label, cfg.max_linear_vel, cfg.max_angular_vel
        if label == LABEL_RIGHT:
            return label, cfg.max_linear_vel, cfg.min_angular_vel
        return label, cfg.max_linear_vel, 0.0

    def _follow_wall(self, scan: ScanData, gap: bool,
                     front_left_wall: bool) -> Tuple[float, float]:
        """Skip a real gap straight ahead, otherwise hold the standoff with the PID."""
        cfg = self.config
        if gap and not front_left_wall and scan.noise_check(cfg.flw_deg):
            return cfg.max_linear_vel, 0.0
        lateral_mean = scan.left_wall_check(*cfg.lateral_sector)
        return cfg.max_linear_vel, self.pid.correct(lateral_mean)
