"""
Wall tracking configuration.

Holds the parameter defaults declared by the node, the frozen configuration
built from them, and the two check angles derived from the robot geometry.
"""

import math
from dataclasses import dataclass, field
from typing import Callable, Tuple


# Distance (m) under which the front-left beam counts as a wall
FRONT_LEFT_WALL_DISTANCE = 1.87

DEFAULT_PARAMETERS = {
    'max_linear_vel': 0.5,        # m/s
    'max_angular_vel': 1.0,       # rad/s
    'min_angular_vel': -1.0,      # rad/s
    'distance_from_wall': 1.0,    # m, standoff to the left wall
    'distance_to_stop': 1.0,      # m
    'sampling_rate': 0.1,         # s, control period
    'kp': 1.0,
    'ki': 0.0,
    'kd': 0.0,
    'start_deg_lateral': 30,      # deg
    'end_deg_lateral': 90,        # deg
    'stop_ray_th': 0.5,           # fraction of front rays
    'wheel_separation': 0.5,      # m
    'distance_to_skip': 1.0,      # m
    'open_place_distance': 3.0,   # m
    'cmd_vel_topic_name': 'cmd_vel',
}


def front_wall_check_angle(wheel_separation: float, distance_to_stop: float) -> float:
    """Angle (deg) to the right wheel edge at the stop distance."""
    return math.degrees(math.atan2(-wheel_separation / 2, distance_to_stop))


def front_left_check_angle(distance_from_wall: float, distance_to_skip: float,
                           start_deg_lateral: float) -> float:
    """
    Angle (deg) to the point on the left wall that lies distance_to_skip
    ahead of where the lateral sector starts hitting it.
    """
    y = distance_from_wall
    x = distance_to_skip + distance_from_wall / math.tan(math.radians(start_deg_lateral))
    return math.degrees(math.atan2(y, x))


@dataclass(frozen=True)
class WallTrackingConfig:
    """Immutable tunables, fixed at node startup."""
    max_linear_vel: float = DEFAULT_PARAMETERS['max_linear_vel']
    max_angular_vel: float = DEFAULT_PARAMETERS['max_angular_vel']
    min_angular_vel: float = DEFAULT_PARAMETERS['min_angular_vel']
    distance_from_wall: float = DEFAULT_PARAMETERS['distance_from_wall']
    distance_to_stop: float = DEFAULT_PARAMETERS['distance_to_stop']
    sampling_rate: float = DEFAULT_PARAMETERS['sampling_rate']
    kp: float = DEFAULT_PARAMETERS['kp']
    ki: float = DEFAULT_PARAMETERS['ki']
    kd: float = DEFAULT_PARAMETERS['kd']
    start_deg_lateral: int = DEFAULT_PARAMETERS['start_deg_lateral']
    end_deg_lateral: int = DEFAULT_PARAMETERS['end_deg_lateral']
    stop_ray_th: float = DEFAULT_PARAMETERS['stop_ray_th']
    wheel_separation: float = DEFAULT_PARAMETERS['wheel_separation']
    distance_to_skip: float = DEFAULT_PARAMETERS['distance_to_skip']
    open_place_distance: float = DEFAULT_PARAMETERS['open_place_distance']
    cmd_vel_topic_name: str = DEFAULT_PARAMETERS['cmd_vel_topic_name']

    # Derived in __post_init__
    fwc_deg: float = field(init=False)
    flw_deg: float = field(init=False)

    def __post_init__(self):
        if self.sampling_rate <= 0.0:
            raise ValueError(f'sampling_rate must be positive, got {self.sampling_rate}')
        if self.min_angular_vel > self.max_angular_vel:
            raise ValueError(
                f'min_angular_vel ({self.min_angular_vel}) exceeds '
                f'max_angular_vel ({self.max_angular_vel})'
            )
        if not 0 < self.start_deg_lateral < 180:
            raise ValueError(
                f'start_deg_lateral must be in (0, 180), got {self.start_deg_lateral}'
            )
        if not 0.0 <= self.stop_ray_th <= 1.0:
            raise ValueError(f'stop_ray_th must be in [0, 1], got {self.stop_ray_th}')

        # frozen dataclass: derived fields go through object.__setattr__
        object.__setattr__(
            self, 'fwc_deg',
            front_wall_check_angle(self.wheel_separation, self.distance_to_stop)
        )
        object.__setattr__(
            self, 'flw_deg',
            front_left_check_angle(
                self.distance_from_wall, self.distance_to_skip, self.start_deg_lateral
            )
        )

    @property
    def lateral_sector(self) -> Tuple[float, float]:
        return float(self.start_deg_lateral), float(self.end_deg_lateral)

    @classmethod
    def from_parameters(cls, get_value: Callable[[str], object]) -> 'WallTrackingConfig':
        """
        Build a config from a parameter lookup.

        Args:
            get_value: Returns the value of a named parameter, e.g.
                ``lambda name: node.get_parameter(name).value``

        Returns:
            WallTrackingConfig with every DEFAULT_PARAMETERS key filled in
        """
        values = {}
        for name, default in DEFAULT_PARAMETERS.items():
            value = get_value(name)
            if isinstance(default, str):
                values[name] = str(value)
            elif isinstance(default, int) and not isinstance(default, bool):
                values[name] = int(value)
            else:
                values[name] = float(value)
        return cls(**values)
