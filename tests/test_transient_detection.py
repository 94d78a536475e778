import pytest

from mm1_simulator.transient_detection import UtilizationTransientDetection


def test_transient_over_after_window_of_stable_events():
    detector = UtilizationTransientDetection(0.5, window_size=3, tolerance=0.01)
    for _ in range(2):
        detector.add_value(busy_time=50.2, elapsed_time=100.0)
    assert not detector.is_transient_over()
    assert detector.get_transient_length() is None

    detector.add_value(busy_time=50.2, elapsed_time=100.0)
    assert detector.is_transient_over()
    assert detector.get_transient_length() == 3


def test_unstable_event_restarts_window():
    detector = UtilizationTransientDetection(0.5, window_size=3, tolerance=0.01)
    detector.add_value(49.9, 100.0)
    detector.add_value(49.9, 100.0)
    detector.add_value(60.0, 100.0)
    detector.add_value(50.0, 100.0)
    detector.add_value(50.0, 100.0)
    assert not detector.is_transient_over()
    detector.add_value(50.0, 100.0)
    assert detector.get_transient_length() == 6


def test_zero_elapsed_time_is_not_stable():
    detector = UtilizationTransientDetection(0.5, window_size=1)
    detector.add_value(0.0, 0.0)
    assert not detector.is_transient_over()


def test_invalid_target_utilization():
    with pytest.raises(ValueError):
        UtilizationTransientDetection(0.0)
