"""Lateral PID controller for holding the standoff distance to the wall."""


class LateralPIDController:
    """
    Turns a measured wall distance into an angular velocity correction.

    The derivative term is e / sampling_rate rather than a difference of
    successive errors, so no previous error is stored.
    """

    def __init__(self, kp: float, ki: float, kd: float,
                 distance_from_wall: float, sampling_rate: float):
        self.kp = kp
        self.ki = ki
        self.kd = kd
        self.distance_from_wall = distance_from_wall
        self.sampling_rate = sampling_rate
        self.ei = 0.0

    @classmethod
    def from_config(cls, config) -> 'LateralPIDController':
        return cls(config.kp, config.ki, config.kd,
                   config.distance_from_wall, config.sampling_rate)

    def reset(self):
        self.ei = 0.0

    def correct(self, measured: float) -> float:
        e = measured - self.distance_from_wall
        self.ei += e * self.sampling_rate
        ed = e / self.sampling_rate
        return e * self.kp + self.ei * self.ki + ed * self.kd
