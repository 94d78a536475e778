import pytest

from mm1_simulator.sample_accumulators import Sample, TimeWeightedSample


def test_sample_mean_and_variance():
    sample = Sample()
    for value in [1.0, 2.0, 3.0]:
        sample.append(value)
    assert sample.mean() == pytest.approx(2.0)
    assert sample.variance() == pytest.approx(1.0)
    assert len(sample) == 3


def test_empty_sample_reports_zero():
    sample = Sample()
    assert sample.mean() == 0.0
    assert sample.variance() == 0.0


def test_single_value_sample_has_zero_variance():
    sample = Sample()
    sample.append(5.0)
    assert sample.mean() == 5.0
    assert sample.variance() == 0.0


def test_time_weighted_mean_and_variance():
    sample = TimeWeightedSample()
    for time, level in [(0.0, 0), (1.0, 1), (2.0, 2), (3.0, 0)]:
        sample.append(time, level)
    assert sample.mean() == pytest.approx(1.0)
    assert sample.variance() == pytest.approx(5 / 3 - 1.0)


def test_time_weighted_mean_uses_holding_times():
    sample = TimeWeightedSample()
    for time, level in [(10.0, 3), (11.0, 1), (14.0, 1)]:
        sample.append(time, level)
    # Level 3 held for 1 unit, level 1 for 3 units
    assert sample.mean() == pytest.approx(6 / 4)


def test_time_weighted_needs_two_points():
    sample = TimeWeightedSample()
    assert sample.mean() == 0.0
    assert sample.variance() == 0.0
    sample.append(1.0, 4)
    assert sample.mean() == 0.0
    assert sample.variance() == 0.0


def test_time_weighted_zero_elapsed_time():
    sample = TimeWeightedSample()
    sample.append(2.0, 1)
    sample.append(2.0, 2)
    assert sample.mean() == 0.0
    assert sample.variance() == 0.0
