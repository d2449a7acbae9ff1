from wall_tracking.mode import (
    OpenPlaceTracker,
    OperatingMode,
    mode_from_covariance_type,
)


def test_unknown_covariance_is_indoor():
    assert mode_from_covariance_type(0) is OperatingMode.INDOOR


def test_known_covariance_is_outdoor():
    for covariance_type in (1, 2, 3):
        assert mode_from_covariance_type(covariance_type) is OperatingMode.OUTDOOR


def test_mode_has_no_memory():
    sequence = [2, 0, 3, 0, 0, 1]
    modes = [mode_from_covariance_type(t) for t in sequence]
    assert modes == [
        OperatingMode.OUTDOOR, OperatingMode.INDOOR, OperatingMode.OUTDOOR,
        OperatingMode.INDOOR, OperatingMode.INDOOR, OperatingMode.OUTDOOR,
    ]


def test_open_place_hysteresis():
    tracker = OpenPlaceTracker()
    flags = [tracker.update(OperatingMode.OUTDOOR, s) for s in [0.5, 0.75, 0.5, 0.35, 0.5]]
    assert flags == [False, True, True, False, False]


def test_open_place_thresholds_are_inclusive():
    tracker = OpenPlaceTracker()
    assert tracker.update(OperatingMode.OUTDOOR, 0.7)
    assert tracker.update(OperatingMode.OUTDOOR, 0.4)


def test_indoor_clears_latched_flag():
    tracker = OpenPlaceTracker()
    assert tracker.update(OperatingMode.OUTDOOR, 0.9)
    assert not tracker.update(OperatingMode.INDOOR, 1.0)
    # Back outdoors the latch has to be earned again
    assert not tracker.update(OperatingMode.OUTDOOR, 0.5)


def test_flag_is_plain_bool_for_numpy_scores():
    import numpy as np

    tracker = OpenPlaceTracker()
    assert type(tracker.update(OperatingMode.OUTDOOR, np.float64(0.9))) is bool
    assert type(tracker.update(OperatingMode.OUTDOOR, np.float64(0.5))) is bool
