"""
Measurement driver for the M/M/1 simulator (method of batch means).

The queue is warmed up, then simulated for a number of rounds with the same number of clients
each. The mean and variance of every round become one observation of the across-round samples,
from which the confidence intervals are computed. If the intervals are not precise enough, or the
two intervals of a variance do not agree, the whole measurement is repeated from the same seed
with bigger rounds.
"""
from enum import Enum
import time
from typing import Callable, Optional

from .confidence_interval import (ConfidenceInterval, CONFIDENCE_LEVEL,
                                  t_student_interval, chi_square_interval)
from .queue_system import QueueSimulator, ScheduleType, Metric
from .sample_accumulators import Sample

TARGET_PRECISION = 0.05
ROUND_SIZE_INCREMENT = 100
MAX_ESCALATIONS = 50
CHECK_CORRECTNESS_RHO = 0.0         # Sentinel utilization that selects the deterministic check
CHECK_CORRECTNESS_TRANSIENT = 8     # One full reference cycle (4 arrivals, 4 departures)


class QueueMode(Enum):
    REAL = "REAL"
    CHECK_CORRECTNESS = "CHECK_CORRECTNESS"


# ===================================================
# RESULTS
# ===================================================

class MeanEstimate:
    def __init__(self, value: float, t_student: ConfidenceInterval):
        self.value = value
        self.t_student = t_student


class VarianceEstimate:
    def __init__(self, value: float, t_student: ConfidenceInterval, chi_square: ConfidenceInterval):
        self.value = value
        self.t_student = t_student
        self.chi_square = chi_square

    def intervals_converge(self) -> bool:
        return ConfidenceInterval.check_convergence(self.t_student, self.chi_square)


class AnalyticValues:
    def __init__(self, mean_wait: float, variance_wait: float, mean_queue_length: float,
                 variance_queue_length: float):
        self.mean_wait = mean_wait
        self.variance_wait = variance_wait
        self.mean_queue_length = mean_queue_length
        self.variance_queue_length = variance_queue_length


class MeasurementResult:
    def __init__(self, rho: float, schedule_type: ScheduleType, queue_mode: QueueMode, round_size: int,
                 rounds_count: int, transient_phase_size: int):
        self.rho = rho
        self.schedule_type = schedule_type
        self.queue_mode = queue_mode
        self.round_size = round_size
        self.rounds_count = rounds_count
        self.transient_phase_size = transient_phase_size
        self.escalations = 0
        self.converged = False
        self.elapsed_time = 0.0

        self.mean_wait: Optional[MeanEstimate] = None
        self.variance_wait: Optional[VarianceEstimate] = None
        self.mean_queue_length: Optional[MeanEstimate] = None
        self.variance_queue_length: Optional[VarianceEstimate] = None
        # Plain estimates of N, T and X
        self.means: dict[Metric, float] = {}
        self.variances: dict[Metric, float] = {}
        self.analytic: Optional[AnalyticValues] = None

    def precision_reached(self, target_precision: float = TARGET_PRECISION) -> bool:
        return (self.mean_wait.t_student.precision <= target_precision and
                self.mean_queue_length.t_student.precision <= target_precision and
                self.variance_wait.intervals_converge() and
                self.variance_queue_length.intervals_converge())

    def analytic_mismatches(self) -> list[str]:
        """Names of the metrics whose analytic value lies outside the confidence intervals."""
        mismatches = []
        if not self.mean_wait.t_student.value_is_inside(self.analytic.mean_wait):
            mismatches.append("E[W]")
        if not (self.variance_wait.t_student.value_is_inside(self.analytic.variance_wait) and
                self.variance_wait.chi_square.value_is_inside(self.analytic.variance_wait)):
            mismatches.append("V(W)")
        if not self.mean_queue_length.t_student.value_is_inside(self.analytic.mean_queue_length):
            mismatches.append("E[Nq]")
        if not (self.variance_queue_length.t_student.value_is_inside(self.analytic.variance_queue_length) and
                self.variance_queue_length.chi_square.value_is_inside(self.analytic.variance_queue_length)):
            mismatches.append("V(Nq)")
        return mismatches


# ===================================================
# ANALYTIC VALUES
# ===================================================

def analytic_values(rho: float, schedule_type: ScheduleType,
                    queue_mode: QueueMode = QueueMode.REAL) -> AnalyticValues:
    if queue_mode == QueueMode.CHECK_CORRECTNESS:
        # Reference cycle: W in {0, 1, 2, 3} (FCFS) or {0, 0, 1, 5} (LCFS); Nq = 0, 1, 2 w.p. 4/9, 4/9, 1/9
        mean_wait = 1.0 * (1 / 4) + 2.0 * (1 / 4) + 3.0 * (1 / 4)
        if schedule_type == ScheduleType.FCFS:
            variance_wait = 1.0 * (1 / 4) + 4.0 * (1 / 4) + 9.0 * (1 / 4) - mean_wait ** 2
        else:
            variance_wait = 1.0 * (1 / 4) + 25.0 * (1 / 4) - mean_wait ** 2
        mean_queue_length = 1.0 * (4 / 9) + 2.0 * (1 / 9)
        variance_queue_length = 1.0 * (4 / 9) + 4.0 * (1 / 9) - mean_queue_length ** 2
        return AnalyticValues(mean_wait, variance_wait, mean_queue_length, variance_queue_length)

    mean_wait = rho / (1 - rho)
    if schedule_type == ScheduleType.FCFS:
        variance_wait = (2 * rho - rho ** 2) / (1 - rho) ** 2
    else:
        variance_wait = (2 * rho - rho ** 2 + rho ** 3) / (1 - rho) ** 3
    mean_queue_length = rho ** 2 / (1 - rho)
    variance_queue_length = (rho ** 2 + rho ** 3 - rho ** 4) / (1 - rho) ** 2
    return AnalyticValues(mean_wait, variance_wait, mean_queue_length, variance_queue_length)


# ===================================================
# MEASUREMENT
# ===================================================

def _build_queue(rho: float, schedule_type: ScheduleType, queue_mode: QueueMode, seed: int) -> QueueSimulator:
    if queue_mode == QueueMode.CHECK_CORRECTNESS:
        return QueueSimulator.check_correctness(schedule_type)
    return QueueSimulator(rho, schedule_type, seed=seed)


def run_measurement(rho: float, round_size: int, rounds_count: int, schedule_type: ScheduleType,
                    queue_mode: QueueMode, seed: int, transient_phase: Optional[int] = None,
                    progress_callback: Optional[Callable[[int, int], None]] = None) -> MeasurementResult:
    """Run one warm-up followed by rounds_count rounds of round_size clients."""
    queue = _build_queue(rho, schedule_type, queue_mode, seed)
    transient_phase_size = queue.transient_phase(fixed_length=transient_phase)

    # One sample of round means and one of round variances per metric
    mean_statistics = {metric: Sample() for metric in Metric}
    variance_statistics = {metric: Sample() for metric in Metric}

    for round_index in range(rounds_count):
        round_samples = queue.run_one_round(round_size)
        for metric in Metric:
            sample = round_samples.get(metric)
            mean_statistics[metric].append(sample.mean())
            variance_statistics[metric].append(sample.variance())
        if progress_callback is not None:
            progress_callback(round_index + 1, rounds_count)

    result = MeasurementResult(rho, schedule_type, queue_mode, round_size, rounds_count, transient_phase_size)
    degrees_of_freedom = round_size - 1

    w_mean = mean_statistics[Metric.WAIT_TIME]
    result.mean_wait = MeanEstimate(w_mean.mean(), t_student_interval(w_mean, CONFIDENCE_LEVEL))
    w_variance = variance_statistics[Metric.WAIT_TIME]
    result.variance_wait = VarianceEstimate(
        w_variance.mean(),
        t_student_interval(w_variance, CONFIDENCE_LEVEL),
        chi_square_interval(w_variance.mean(), degrees_of_freedom, CONFIDENCE_LEVEL))

    nq_mean = mean_statistics[Metric.QUEUE_LENGTH]
    result.mean_queue_length = MeanEstimate(nq_mean.mean(), t_student_interval(nq_mean, CONFIDENCE_LEVEL))
    nq_variance = variance_statistics[Metric.QUEUE_LENGTH]
    result.variance_queue_length = VarianceEstimate(
        nq_variance.mean(),
        t_student_interval(nq_variance, CONFIDENCE_LEVEL),
        chi_square_interval(nq_variance.mean(), degrees_of_freedom, CONFIDENCE_LEVEL))

    for metric in (Metric.OCCUPANCY, Metric.SOJOURN_TIME, Metric.SERVICE_TIME):
        result.means[metric] = mean_statistics[metric].mean()
        result.variances[metric] = variance_statistics[metric].mean()

    result.analytic = analytic_values(rho, schedule_type, queue_mode)
    return result


def simulator(rho: float, round_size: int, rounds_count: int, schedule_type: ScheduleType = ScheduleType.FCFS,
              seed: int = 9999, queue_mode: Optional[QueueMode] = None, transient_phase: Optional[int] = None,
              target_precision: float = TARGET_PRECISION, round_size_increment: int = ROUND_SIZE_INCREMENT,
              max_escalations: int = MAX_ESCALATIONS,
              progress_callback: Optional[Callable[[int, int], None]] = None,
              verbose: bool = True) -> MeasurementResult:
    """Measure the queue until the confidence intervals are precise enough and agree.

    Returns the last measurement; its converged flag is False when max_escalations bigger
    rounds were not enough to reach the target precision.
    """
    if queue_mode is None:
        queue_mode = QueueMode.CHECK_CORRECTNESS if rho == CHECK_CORRECTNESS_RHO else QueueMode.REAL
    if queue_mode == QueueMode.REAL and not 0 < rho < 1:
        raise ValueError("Utilization rho must be in the open interval (0, 1).")
    if round_size < 2:
        raise ValueError("Number of clients per round must be at least 2.")
    if rounds_count < 2:
        raise ValueError("Number of rounds must be at least 2.")
    if queue_mode == QueueMode.CHECK_CORRECTNESS and transient_phase is None:
        transient_phase = CHECK_CORRECTNESS_TRANSIENT

    start = time.perf_counter()
    escalations = 0
    while True:
        if verbose:
            if queue_mode == QueueMode.REAL:
                print(f"\nClients per round = {round_size}; Policy = {schedule_type.value}; rho = {rho}")
            else:
                print(f"\nSimulator correctness check!\nClients per round = {round_size}; "
                      f"Policy = {schedule_type.value}")

        result = run_measurement(rho, round_size, rounds_count, schedule_type, queue_mode, seed,
                                 transient_phase=transient_phase, progress_callback=progress_callback)
        result.escalations = escalations
        result.elapsed_time = time.perf_counter() - start

        if verbose:
            print_statistics(result)

        if queue_mode == QueueMode.CHECK_CORRECTNESS:
            result.converged = True
            return result

        result.converged = result.precision_reached(target_precision)
        if result.converged:
            return result

        if verbose:
            print_precision_report(result, target_precision)

        if escalations >= max_escalations:
            if verbose:
                print(f"Precision not achieved after {escalations} escalations "
                      f"(last round size {round_size})")
            return result

        escalations += 1
        round_size += round_size_increment
        if verbose:
            print(f"Running again with {round_size} clients per round")


# ===================================================
# REPORT
# ===================================================

def _interval_line(name: str, ci: ConfidenceInterval) -> str:
    return (f"\t\tCI {name}:\tL = {ci.lower_bound:.5f};\tCenter = {ci.center:.5f};"
            f"\tU = {ci.upper_bound:.5f};\tPrecision = {100 * ci.precision:.5f}%")


def print_statistics(result: MeasurementResult):
    print(f"Transient phase size = {result.transient_phase_size} events")
    print(f"Sample Means:\n\tE[N] = {result.means[Metric.OCCUPANCY]:.5f}"
          f"\tE[T] = {result.means[Metric.SOJOURN_TIME]:.5f}"
          f"\tE[X] = {result.means[Metric.SERVICE_TIME]:.5f}")
    print(f"Sample Variances:\n\tV(N) = {result.variances[Metric.OCCUPANCY]:.5f}"
          f"\tV(T) = {result.variances[Metric.SOJOURN_TIME]:.5f}"
          f"\tV(X) = {result.variances[Metric.SERVICE_TIME]:.5f}")

    print(f"Sample Mean and Confidence Interval:\n\tE[W]  = {result.mean_wait.value:.5f}")
    print(_interval_line("T-Student", result.mean_wait.t_student))
    print(f"Sample Variance and Confidence Interval:\n\tV(W)  = {result.variance_wait.value:.5f}")
    print(_interval_line("T-Student", result.variance_wait.t_student))
    print(_interval_line("Chi-Square", result.variance_wait.chi_square))
    print(f"Sample Mean and Confidence Interval:\n\tE[Nq] = {result.mean_queue_length.value:.5f}")
    print(_interval_line("T-Student", result.mean_queue_length.t_student))
    print(f"Sample Variance and Confidence Interval:\n\tV(Nq) = {result.variance_queue_length.value:.5f}")
    print(_interval_line("T-Student", result.variance_queue_length.t_student))
    print(_interval_line("Chi-Square", result.variance_queue_length.chi_square))

    analytic = result.analytic
    print(f"Analytical values:\n\tE[W]  = {analytic.mean_wait:.5f}\n\tV(W)  = {analytic.variance_wait:.5f}"
          f"\n\tE[Nq] = {analytic.mean_queue_length:.5f}\n\tV(Nq) = {analytic.variance_queue_length:.5f}")
    for name in result.analytic_mismatches():
        print(f"The analytic value of {name} is not inside the confidence interval as expected")
    print(f"Elapsed time = {result.elapsed_time:.5f}s")


def print_precision_report(result: MeasurementResult, target_precision: float = TARGET_PRECISION):
    if result.mean_wait.t_student.precision > target_precision:
        print(f"Precision of the E[W] CI = {100 * result.mean_wait.t_student.precision:.5f}% is not enough")
    if result.mean_queue_length.t_student.precision > target_precision:
        print(f"Precision of the E[Nq] CI = {100 * result.mean_queue_length.t_student.precision:.5f}% is not enough")
    if not result.variance_wait.intervals_converge():
        print("The T-Student and Chi-Square confidence intervals of V(W) do not converge")
    if not result.variance_queue_length.intervals_converge():
        print("The T-Student and Chi-Square confidence intervals of V(Nq) do not converge")
