import math
import numpy as np
import pytest

from mm1_simulator.rv_generation import (ExponentialTimeGenerator, RandomDurationSource,
                                         FixedScheduleDurationSource)


def test_same_seed_reproduces_same_sequence():
    first = ExponentialTimeGenerator(seed=42)
    second = ExponentialTimeGenerator(seed=42)
    assert [first.next_duration(0.5) for _ in range(100)] == [second.next_duration(0.5) for _ in range(100)]


def test_durations_are_finite_and_non_negative():
    generator = ExponentialTimeGenerator(seed=7)
    samples = [generator.next_duration(2.0) for _ in range(10_000)]
    assert all(math.isfinite(s) and s >= 0 for s in samples)


def test_sample_mean_matches_rate():
    generator = ExponentialTimeGenerator(seed=123)
    samples = np.array([generator.next_duration(4.0) for _ in range(50_000)])
    assert samples.mean() == pytest.approx(0.25, rel=0.03)


@pytest.mark.parametrize("rate", [0.0, -1.0])
def test_invalid_rate_raises(rate):
    with pytest.raises(ValueError):
        ExponentialTimeGenerator(seed=1).next_duration(rate)


def test_random_source_rejects_non_positive_rates():
    with pytest.raises(ValueError):
        RandomDurationSource(arrival_rate=0.0, service_rate=1.0, seed=1)


def test_fixed_schedule_cycles_forever():
    source = FixedScheduleDurationSource(interarrival_times=[1.0, 2.0], service_times=[3.0])
    assert [source.next_interarrival_time() for _ in range(5)] == [1.0, 2.0, 1.0, 2.0, 1.0]
    assert [source.next_service_time() for _ in range(3)] == [3.0, 3.0, 3.0]


@pytest.mark.parametrize("interarrivals, services", [([], [1.0]), ([1.0], []), ([1.0, 0.0], [1.0])])
def test_fixed_schedule_rejects_invalid_durations(interarrivals, services):
    with pytest.raises(ValueError):
        FixedScheduleDurationSource(interarrivals, services)
