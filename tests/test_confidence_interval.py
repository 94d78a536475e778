import math
import pytest
from scipy import stats

from mm1_simulator.confidence_interval import ConfidenceInterval, t_student_interval, chi_square_interval
from mm1_simulator.sample_accumulators import Sample


def make_sample(values):
    sample = Sample()
    for value in values:
        sample.append(value)
    return sample


def test_center_and_precision():
    ci = ConfidenceInterval(0.9, 1.1)
    assert ci.center == pytest.approx(1.0)
    assert ci.precision == pytest.approx(0.1)


def test_interval_is_immutable():
    ci = ConfidenceInterval(1.0, 2.0)
    with pytest.raises(AttributeError):
        ci.lower_bound = 0.0


def test_zero_width_interval_at_zero_has_zero_precision():
    assert ConfidenceInterval(0.0, 0.0).precision == 0.0


def test_convergence_is_symmetric():
    first = ConfidenceInterval(0.9, 1.2)
    second = ConfidenceInterval(1.0, 1.1)
    assert ConfidenceInterval.check_convergence(first, second)
    assert ConfidenceInterval.check_convergence(second, first)


def test_convergence_with_itself():
    ci = ConfidenceInterval(1.0, 3.0)
    assert ConfidenceInterval.check_convergence(ci, ci)


def test_no_convergence_when_center_outside():
    first = ConfidenceInterval(1.0, 1.1)
    second = ConfidenceInterval(1.05, 2.0)
    assert not ConfidenceInterval.check_convergence(first, second)
    assert not ConfidenceInterval.check_convergence(second, first)


def test_degenerate_interval_does_not_converge():
    ci = ConfidenceInterval(2.0, 2.0)
    assert not ConfidenceInterval.check_convergence(ci, ci)


def test_value_is_inside_with_tolerance():
    ci = ConfidenceInterval(1.0, 2.0)
    assert ci.value_is_inside(1.5)
    assert ci.value_is_inside(2.015)
    assert ci.value_is_inside(0.995)
    assert not ci.value_is_inside(2.05)
    assert not ci.value_is_inside(0.9)


def test_t_student_interval_uses_sample_degrees_of_freedom():
    sample = make_sample([1.0, 2.0, 3.0, 4.0, 5.0])
    ci = t_student_interval(sample, 0.95)
    half_width = stats.t.ppf(0.975, df=4) * math.sqrt(2.5 / 5)
    assert ci.center == pytest.approx(3.0)
    assert ci.upper_bound - ci.center == pytest.approx(half_width)


def test_t_student_interval_single_value():
    ci = t_student_interval(make_sample([4.0]))
    assert ci.lower_bound == ci.upper_bound == 4.0


def test_chi_square_interval_bounds():
    ci = chi_square_interval(2.0, degrees_of_freedom=29, confidence_level=0.95)
    assert ci.lower_bound == pytest.approx(29 * 2.0 / stats.chi2.ppf(0.975, df=29))
    assert ci.upper_bound == pytest.approx(29 * 2.0 / stats.chi2.ppf(0.025, df=29))
    assert ci.lower_bound < 2.0 < ci.upper_bound


def test_chi_square_interval_narrows_with_degrees_of_freedom():
    narrow = chi_square_interval(1.0, degrees_of_freedom=3199)
    wide = chi_square_interval(1.0, degrees_of_freedom=99)
    assert narrow.precision < wide.precision


def test_chi_square_interval_rejects_invalid_degrees_of_freedom():
    with pytest.raises(ValueError):
        chi_square_interval(1.0, degrees_of_freedom=0)
