"""
Cancellable wall tracking loop run for each accepted action goal.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from .decision import DecisionEngine
from .state import ControllerState


class TaskStatus(Enum):
    PENDING = 0
    EXECUTING = 1
    SUCCEEDED = 2
    CANCELED = 3
    ABORTED = 4


@dataclass(frozen=True)
class TaskOutcome:
    status: TaskStatus
    open_place_arrived: bool


class ControlTask:
    """
    Runs DecisionEngine cycles until the goal is canceled or the node stops.

    The sink is anything with publish_cmd_vel(linear, angular) and
    publish_open_place_detection(label), the node in production.
    """

    def __init__(self, engine: DecisionEngine, state: ControllerState, sink, logger,
                 sleep: Callable[[float], None] = time.sleep):
        self.engine = engine
        self.state = state
        self.sink = sink
        self.logger = logger
        self.sleep = sleep
        self.status = TaskStatus.PENDING

    def run(self,
            is_cancel_requested: Callable[[], bool],
            publish_feedback: Callable[[bool], None],
            ok: Callable[[], bool]) -> TaskOutcome:
        """
        Execute the loop.

        Args:
            is_cancel_requested: Polled once per iteration, before anything else
            publish_feedback: Receives the open-place flag every iteration
            ok: False once the hosting process is shutting down

        Returns:
            TaskOutcome with the terminal status and the last open-place flag
        """
        token = self.state.claim_control()
        self.engine.pid.reset()
        self.status = TaskStatus.EXECUTING
        self.logger.info('EXECUTE')

        arrived = False
        last_seq = 0
        while ok():
            if is_cancel_requested():
                self.sink.publish_cmd_vel(0.0, 0.0)
                self.status = TaskStatus.CANCELED
                self.logger.info('Goal Canceled')
                return TaskOutcome(self.status, False)

            if not self.state.holds_control(token):
                # A newer goal owns the controller and publishes from now on
                self.status = TaskStatus.ABORTED
                self.logger.info('Goal preempted by a newer goal')
                return TaskOutcome(self.status, False)

            snapshot = self.state.snapshot()
            arrived = snapshot.open_place
            publish_feedback(arrived)

            if snapshot.scan is None:
                # Nothing to act on until the first scan arrives
                self.state.wait_for_scan(last_seq, self.engine.config.sampling_rate)
                continue

            last_seq = snapshot.scan_seq
            dwell = self.cycle(snapshot)
            if dwell > 0.0:
                self.sleep(dwell)
            else:
                self.state.wait_for_scan(last_seq, self.engine.config.sampling_rate)

        self.status = TaskStatus.SUCCEEDED
        self.logger.info('Goal Succeeded')
        return TaskOutcome(self.status, arrived)

    def cycle(self, snapshot) -> float:
        """Run one decision, publish its outputs, and return the dwell time."""
        decision = self.engine.step(snapshot.scan, snapshot.mode)
        self.sink.publish_cmd_vel(decision.command.linear, decision.command.angular)
        self.sink.publish_open_place_detection(decision.label)
        self.logger.debug(
            f'{decision.label}: v={decision.command.linear:.2f}, '
            f'w={decision.command.angular:.2f}'
        )
        return decision.dwell
