"""
Algorithm to detect the end of the transient phase of a single server queue.
 - After each event, measure the utilization observed so far: busy time / elapsed time.
 - Compare it with the target utilization rho using the relative difference |U - rho| / rho.
 - If the relative difference stays below a tolerance P for W consecutive events:
        then the transient is over and the number of processed events is its length.
 - Otherwise more events have to be processed.
"""

TRANSIENT_WINDOW = 500       # Consecutive events W
TRANSIENT_TOLERANCE = 0.01   # Relative tolerance P


# --------------------------------------------------------------------
# TRANSIENT DETECTION
# --------------------------------------------------------------------
class UtilizationTransientDetection:
    def __init__(self, target_utilization: float, window_size: int = TRANSIENT_WINDOW,
                 tolerance: float = TRANSIENT_TOLERANCE):
        if target_utilization <= 0:
            raise ValueError("Target utilization must be a positive value.")
        self.target_utilization = target_utilization
        self.window_size = window_size
        self.tolerance = tolerance
        self.events_count = 0
        self.consecutive_stable_events = 0
        self.last_utilization: float = 0.0

    def add_value(self, busy_time: float, elapsed_time: float):
        """Register the state of the server after one event."""
        self.events_count += 1
        if elapsed_time <= 0:
            self.consecutive_stable_events = 0
            return

        self.last_utilization = busy_time / elapsed_time
        relative_difference = abs(self.last_utilization - self.target_utilization) / self.target_utilization
        if relative_difference < self.tolerance:
            self.consecutive_stable_events += 1
        else:
            self.consecutive_stable_events = 0

    def is_transient_over(self) -> bool:
        return self.consecutive_stable_events >= self.window_size

    def get_transient_length(self):
        """Number of events in the transient phase, None while it is not over."""
        if self.is_transient_over():
            return self.events_count
        return None
