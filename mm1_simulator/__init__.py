from .confidence_interval import ConfidenceInterval, t_student_interval, chi_square_interval
from .queue_system import QueueSimulator, ScheduleType, Metric
from .simulator import run_measurement, QueueMode, MeasurementResult
