import os
import pandas as pd

from .queue_system import Metric
from .simulator import MeasurementResult, MeanEstimate, VarianceEstimate
from .confidence_interval import ConfidenceInterval

DEFAULT_OUTPUT_FILE = "output.csv"


def _interval_columns(prefix: str, ci: ConfidenceInterval) -> dict[str, float]:
    return {
        f"{prefix}_L": ci.lower_bound,
        f"{prefix}_C": ci.center,
        f"{prefix}_U": ci.upper_bound,
        f"{prefix}_P": ci.precision,
    }


def _mean_columns(name: str, estimate: MeanEstimate) -> dict[str, float]:
    columns = {name: estimate.value}
    columns.update(_interval_columns(f"{name}_CI_TS", estimate.t_student))
    return columns


def _variance_columns(name: str, estimate: VarianceEstimate) -> dict[str, float]:
    columns = {name: estimate.value}
    columns.update(_interval_columns(f"{name}_CI_TS", estimate.t_student))
    columns.update(_interval_columns(f"{name}_CI_C2", estimate.chi_square))
    return columns


def result_to_row(result: MeasurementResult) -> dict:
    """Flatten a measurement into one csv row."""
    row = {
        "rho": result.rho,
        "round_size": result.round_size,
        "rounds_count": result.rounds_count,
        "transient_phase": result.transient_phase_size,
        "E[N]": result.means[Metric.OCCUPANCY],
        "E[T]": result.means[Metric.SOJOURN_TIME],
        "E[X]": result.means[Metric.SERVICE_TIME],
        "V(N)": result.variances[Metric.OCCUPANCY],
        "V(T)": result.variances[Metric.SOJOURN_TIME],
        "V(X)": result.variances[Metric.SERVICE_TIME],
    }
    row.update(_mean_columns("E[W]", result.mean_wait))
    row.update(_variance_columns("V(W)", result.variance_wait))
    row.update(_mean_columns("E[Nq]", result.mean_queue_length))
    row.update(_variance_columns("V(Nq)", result.variance_queue_length))
    row.update({
        "analytic_E[W]": result.analytic.mean_wait,
        "analytic_V(W)": result.analytic.variance_wait,
        "analytic_E[Nq]": result.analytic.mean_queue_length,
        "analytic_V(Nq)": result.analytic.variance_queue_length,
        "converged": result.converged,
        "elapsed_time": result.elapsed_time,
        "policy": result.schedule_type.value,
    })
    return row


def write_csv_file(result: MeasurementResult, path: str = DEFAULT_OUTPUT_FILE):
    """Append the measurement to the csv file, writing the header only for a new file."""
    df = pd.DataFrame([result_to_row(result)])
    file_exists = os.path.exists(path)
    df.to_csv(path, mode="a" if file_exists else "w", header=not file_exists, index=False)
