"""
Sample accumulators for simulation output.
 - Sample: independent observations of a random variable (e.g. waiting time of each client).
 - TimeWeightedSample: state changes of a stochastic process (e.g. queue length), seen as a
   right-continuous step function. Its estimators weight every level by the time it is held.
"""
import numpy as np


# --------------------------------------------------------------------
# RANDOM VARIABLE SAMPLE
# --------------------------------------------------------------------
class Sample:
    def __init__(self):
        self.values: list[float] = []

    def append(self, value: float):
        self.values.append(value)

    def __len__(self) -> int:
        return len(self.values)

    def mean(self) -> float:
        """Sample mean, 0 when empty."""
        if not self.values:
            return 0.0
        return float(np.mean(self.values))

    def variance(self) -> float:
        """Unbiased sample variance, 0 with fewer than two values."""
        if len(self.values) < 2:
            return 0.0
        return float(np.var(self.values, ddof=1))


# --------------------------------------------------------------------
# STOCHASTIC PROCESS SAMPLE
# --------------------------------------------------------------------
class TimeWeightedSample:
    def __init__(self):
        self.times: list[float] = []
        self.levels: list[int] = []

    def append(self, time: float, level: int):
        self.times.append(time)
        self.levels.append(level)

    def __len__(self) -> int:
        return len(self.levels)

    def _areas(self) -> tuple[float, float, float]:
        """Return (area under level, area under level^2, elapsed time)."""
        times = np.asarray(self.times, dtype=float)
        levels = np.asarray(self.levels[:-1], dtype=float)
        time_deltas = np.diff(times)
        elapsed = times[-1] - times[0]
        return float(np.sum(levels * time_deltas)), float(np.sum(levels ** 2 * time_deltas)), float(elapsed)

    def mean(self) -> float:
        if len(self.levels) < 2:
            return 0.0
        area, _, elapsed = self._areas()
        if elapsed <= 0:
            return 0.0
        return area / elapsed

    def variance(self) -> float:
        if len(self.levels) < 2:
            return 0.0
        area, squared_area, elapsed = self._areas()
        if elapsed <= 0:
            return 0.0
        mean = area / elapsed
        return squared_area / elapsed - mean ** 2
