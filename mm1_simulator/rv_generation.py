from itertools import cycle
import numpy as np


class ExponentialTimeGenerator:
    """Seeded source of exponentially distributed durations."""

    def __init__(self, seed: int):
        self.rng = np.random.default_rng(seed)

    def next_duration(self, rate: float) -> float:
        """Generate one exponential sample using the inverse transform method.

        Args:
            rate (float): Rate parameter of the exponential distribution.

        Returns:
            float: Sample of Exp(rate), always finite.
        """
        if rate <= 0:
            raise ValueError("Rate must be a positive value.")

        # Smallest positive float as lower bound so ln(0) never happens
        u = self.rng.uniform(np.finfo(float).tiny, 1.0)
        return float(-np.log(u) / rate)


# ===================================================
# DURATION SOURCES
# ===================================================

class RandomDurationSource:
    """Exponential interarrival and service times (M/M/1)."""

    def __init__(self, arrival_rate: float, service_rate: float, seed: int):
        if arrival_rate <= 0 or service_rate <= 0:
            raise ValueError("Arrival and service rates must be positive values.")
        self.arrival_rate = arrival_rate
        self.service_rate = service_rate
        self.generator = ExponentialTimeGenerator(seed)

    def next_interarrival_time(self) -> float:
        return self.generator.next_duration(self.arrival_rate)

    def next_service_time(self) -> float:
        return self.generator.next_duration(self.service_rate)


class FixedScheduleDurationSource:
    """Deterministic durations repeated forever, used to check the engine by hand."""

    def __init__(self, interarrival_times: list[float], service_times: list[float]):
        if not interarrival_times or not service_times:
            raise ValueError("Fixed schedules must contain at least one duration.")

        if any(t <= 0 for t in interarrival_times) or any(t <= 0 for t in service_times):
            raise ValueError("All scheduled durations must be positive values.")

        self.interarrival_times = list(interarrival_times)
        self.service_times = list(service_times)
        self._interarrivals = cycle(self.interarrival_times)
        self._services = cycle(self.service_times)

    def next_interarrival_time(self) -> float:
        return next(self._interarrivals)

    def next_service_time(self) -> float:
        return next(self._services)

    @classmethod
    def correctness_check(cls) -> "FixedScheduleDurationSource":
        """Reference cycle of 9 time units with 4 clients, each served in 2 units.

        Arrivals happen at 6, 7, 8, 9 (then every 9 units), so one cycle gives
        waiting times {0, 1, 2, 3} under FCFS and {0, 5, 0, 1} under LCFS, and a
        queue length of 0, 1 and 2 for 4, 4 and 1 time units respectively.
        """
        return cls(interarrival_times=[6.0, 1.0, 1.0, 1.0], service_times=[2.0])
