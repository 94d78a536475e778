"""
Confidence intervals for simulation output data (method of batch means).
Each value of the input Sample is the mean (or variance) of one simulation round, so the
values can be treated as approximately independent observations.
"""
import math
from scipy import stats

from .sample_accumulators import Sample

CONFIDENCE_LEVEL = 0.95
BOUNDARY_TOLERANCE = 0.01  # Relative slack accepted when checking if a value is inside


# ----------------------------------------------------------------------------
# CONFIDENCE INTERVAL
# ----------------------------------------------------------------------------
class ConfidenceInterval:
    __slots__ = ("_lower_bound", "_upper_bound")

    def __init__(self, lower_bound: float, upper_bound: float):
        self._lower_bound = float(lower_bound)
        self._upper_bound = float(upper_bound)

    @property
    def lower_bound(self) -> float:
        return self._lower_bound

    @property
    def upper_bound(self) -> float:
        return self._upper_bound

    @property
    def center(self) -> float:
        return (self._lower_bound + self._upper_bound) / 2

    @property
    def precision(self) -> float:
        """Relative half-width of the interval."""
        width = self._upper_bound - self._lower_bound
        total = self._upper_bound + self._lower_bound
        if total == 0:
            return 0.0 if width == 0 else math.inf
        return width / total

    def value_is_inside(self, value: float) -> bool:
        lower = self._lower_bound - BOUNDARY_TOLERANCE * abs(self._lower_bound)
        upper = self._upper_bound + BOUNDARY_TOLERANCE * abs(self._upper_bound)
        return lower <= value <= upper

    @staticmethod
    def check_convergence(first: "ConfidenceInterval", second: "ConfidenceInterval") -> bool:
        """True if the center of each interval lies strictly inside the other one."""
        return (first.lower_bound < second.center < first.upper_bound and
                second.lower_bound < first.center < second.upper_bound)

    def __repr__(self) -> str:
        return (f"ConfidenceInterval(lower={self._lower_bound:.5f}, center={self.center:.5f}, "
                f"upper={self._upper_bound:.5f}, precision={self.precision:.5f})")


# ----------------------------------------------------------------------------
# INTERVAL CONSTRUCTION
# ----------------------------------------------------------------------------
def t_student_interval(sample: Sample, confidence_level: float = CONFIDENCE_LEVEL) -> ConfidenceInterval:
    """Interval for the mean of the sample using the Student's t distribution with n-1 degrees of freedom."""
    mean = sample.mean()
    sample_count = len(sample)
    if sample_count < 2:
        return ConfidenceInterval(mean, mean)

    t_score = stats.t.ppf(1 - (1 - confidence_level) / 2, df=sample_count - 1)
    margin_of_error = t_score * math.sqrt(sample.variance() / sample_count)
    return ConfidenceInterval(mean - margin_of_error, mean + margin_of_error)


def chi_square_interval(sample_variance: float, degrees_of_freedom: int,
                        confidence_level: float = CONFIDENCE_LEVEL) -> ConfidenceInterval:
    """Interval for a variance using the Chi-square distribution.

    Args:
        sample_variance (float): Point estimate of the variance.
        degrees_of_freedom (int): Degrees of freedom of the estimate.
        confidence_level (float): Confidence level of the interval.

    Returns:
        ConfidenceInterval: (df * s^2 / chi2_upper, df * s^2 / chi2_lower).
    """
    if degrees_of_freedom < 1:
        raise ValueError("Degrees of freedom must be a positive integer.")

    alpha = 1 - confidence_level
    chi_square_lower = stats.chi2.ppf(alpha / 2, df=degrees_of_freedom)
    chi_square_upper = stats.chi2.ppf(1 - alpha / 2, df=degrees_of_freedom)
    scaled_variance = degrees_of_freedom * sample_variance
    return ConfidenceInterval(scaled_variance / chi_square_upper, scaled_variance / chi_square_lower)
