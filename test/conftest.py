import math
from types import SimpleNamespace

import pytest

from wall_tracking.config import WallTrackingConfig


RANGE_MIN = 0.1
RANGE_MAX = 10.0


def make_scan_msg(range_fn, n=360, angle_min=-math.pi):
    """
    LaserScan stand-in with one beam per degree.

    range_fn receives the integer beam angle in degrees, wrapped to [-180, 180).
    """
    increment = 2 * math.pi / n
    ranges = []
    for i in range(n):
        deg = round(math.degrees(angle_min + i * increment))
        deg = (deg + 180) % 360 - 180
        ranges.append(float(range_fn(deg)))
    return SimpleNamespace(
        angle_min=angle_min,
        angle_increment=increment,
        range_min=RANGE_MIN,
        range_max=RANGE_MAX,
        ranges=ranges,
    )


def left_wall(distance):
    """Range to a straight wall parallel to the heading on the left."""
    def fn(deg):
        if 0 < deg < 180:
            r = distance / math.sin(math.radians(deg))
            return r if r <= RANGE_MAX else math.inf
        return math.inf
    return fn


@pytest.fixture
def config():
    return WallTrackingConfig(
        max_linear_vel=0.5,
        max_angular_vel=1.0,
        min_angular_vel=-1.0,
        distance_from_wall=1.0,
        distance_to_stop=1.0,
        sampling_rate=0.1,
        kp=1.0,
        ki=0.0,
        kd=0.0,
        start_deg_lateral=30,
        end_deg_lateral=90,
        stop_ray_th=0.5,
        wheel_separation=0.5,
        distance_to_skip=1.0,
        open_place_distance=3.0,
    )
