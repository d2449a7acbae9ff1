import logging
import math
import threading

import pytest

from wall_tracking.control_task import ControlTask, TaskStatus
from wall_tracking.decision import EMERGENCY_DWELL, DecisionEngine
from wall_tracking.mode import OperatingMode
from wall_tracking.pid import LateralPIDController
from wall_tracking.state import ControllerState

from conftest import left_wall, make_scan_msg


class RecordingSink:
    def __init__(self):
        self.cmd_vel = []
        self.detections = []

    def publish_cmd_vel(self, linear, angular):
        self.cmd_vel.append((linear, angular))

    def publish_open_place_detection(self, label):
        self.detections.append(label)


def countdown(n):
    """Callable that returns True n times, then False."""
    calls = iter([True] * n)
    return lambda: next(calls, False)


def cancel_after(n):
    """Cancel request that shows up on the (n + 1)-th poll."""
    polls = {'count': 0}

    def is_cancel_requested():
        polls['count'] += 1
        return polls['count'] > n
    return is_cancel_requested


@pytest.fixture
def state(config):
    return ControllerState(config.open_place_distance)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def task(config, state, sink, sleeps):
    engine = DecisionEngine(config, LateralPIDController.from_config(config))
    return ControlTask(engine, state, sink, logging.getLogger('test'), sleep=sleeps.append)


def test_cancel_stops_robot(task, state, sink):
    state.update_scan(make_scan_msg(left_wall(1.0)))
    feedback = []

    outcome = task.run(cancel_after(2), feedback.append, lambda: True)

    assert outcome.status is TaskStatus.CANCELED
    assert task.status is TaskStatus.CANCELED
    assert not outcome.open_place_arrived
    assert len(feedback) == 2
    assert len(sink.detections) == 2
    assert sink.cmd_vel[-1] == (0.0, 0.0)
    assert len(sink.cmd_vel) == 3


def test_cancel_before_first_scan(task, sink):
    outcome = task.run(lambda: True, lambda arrived: None, lambda: True)
    assert outcome.status is TaskStatus.CANCELED
    assert sink.cmd_vel == [(0.0, 0.0)]
    assert sink.detections == []


def test_waits_for_first_scan(task, sink):
    feedback = []
    outcome = task.run(lambda: False, feedback.append, countdown(2))

    assert outcome.status is TaskStatus.SUCCEEDED
    assert feedback == [False, False]
    assert sink.cmd_vel == []


def test_shutdown_reports_success_with_arrival(task, state, sink):
    state.update_mode(OperatingMode.OUTDOOR)
    assert state.update_scan(make_scan_msg(lambda deg: 5.0))
    feedback = []

    outcome = task.run(lambda: False, feedback.append, countdown(1))

    assert outcome.status is TaskStatus.SUCCEEDED
    assert outcome.open_place_arrived
    assert feedback == [True]
    assert sink.detections == ['Front']


def test_emergency_dwell_holds_command(task, state, sink, sleeps):
    state.update_scan(make_scan_msg(lambda deg: 0.5))

    task.run(lambda: False, lambda arrived: None, countdown(1))

    assert sleeps == [EMERGENCY_DWELL]
    assert sink.cmd_vel == [(0.125, pytest.approx(math.radians(-45)))]


def test_pid_integral_reset_on_start(task, state):
    state.update_scan(make_scan_msg(left_wall(1.0)))
    task.engine.pid.ei = 100.0

    task.run(lambda: True, lambda arrived: None, lambda: True)

    assert task.engine.pid.ei == 0.0


def test_cancel_from_another_thread(task, state, sink):
    state.update_scan(make_scan_msg(left_wall(1.0)))
    cancel = threading.Event()
    result = {}

    worker = threading.Thread(
        target=lambda: result.update(outcome=task.run(cancel.is_set, lambda a: None, lambda: True))
    )
    worker.start()
    for _ in range(3):
        state.update_scan(make_scan_msg(left_wall(1.0)))
    cancel.set()
    worker.join(timeout=5.0)

    assert not worker.is_alive()
    assert result['outcome'].status is TaskStatus.CANCELED
    assert sink.cmd_vel[-1] == (0.0, 0.0)


def test_outdoor_feedback_and_result_are_plain_bools(task, state):
    state.update_mode(OperatingMode.OUTDOOR)
    state.update_scan(make_scan_msg(lambda deg: 5.0))
    feedback = []

    outcome = task.run(lambda: False, feedback.append, countdown(2))

    assert feedback == [True, True]
    assert all(type(arrived) is bool for arrived in feedback)
    assert type(outcome.open_place_arrived) is bool


def test_newer_goal_preempts_running_task(task, state, sink):
    state.update_scan(make_scan_msg(left_wall(1.0)))
    polls = {'count': 0}

    def is_cancel_requested():
        polls['count'] += 1
        if polls['count'] == 2:
            state.claim_control()    # another goal starts executing
        return False

    outcome = task.run(is_cancel_requested, lambda arrived: None, lambda: True)

    assert outcome.status is TaskStatus.ABORTED
    assert not outcome.open_place_arrived
    # One cycle ran and no stop command followed; the new owner keeps driving
    assert len(sink.cmd_vel) == 1
