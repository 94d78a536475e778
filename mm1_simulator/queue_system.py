from enum import Enum
from typing import Optional

from .rv_generation import RandomDurationSource, FixedScheduleDurationSource
from .sample_accumulators import Sample, TimeWeightedSample
from .transient_detection import UtilizationTransientDetection

SERVICE_RATE = 1.0

# ===================================================
# EVENT DEFINITION
# ===================================================

class EventType(Enum):
    ARRIVAL = "ARRIVAL"
    END_OF_SERVICE = "END_OF_SERVICE"


class ScheduleType(Enum):
    FCFS = "FCFS"
    LCFS = "LCFS"


class Event:

    def __init__(self, time: float, type: EventType, client_id: int):
        self.time = time
        self.type = type
        self.client_id = client_id

    def __repr__(self) -> str:
        return f"Event(time={self.time}, type={self.type}, client_id={self.client_id})"


# ===================================================
# CLIENT STRUCTURE
# ===================================================

class ClientPhase(Enum):
    WAITING = "WAITING"
    SERVICE = "SERVICE"


class Client:
    """Client with its service demand, phase timestamps and the color of the round that admitted it."""

    def __init__(self, id: int, service_duration: float, color: int):
        self.id = id
        self.service_duration = service_duration
        self.color = color
        self.phase_start: dict[ClientPhase, float] = {}
        self.phase_end: dict[ClientPhase, float] = {}

    def register_start(self, phase: ClientPhase, time: float):
        self.phase_start[phase] = time

    def register_end(self, phase: ClientPhase, time: float):
        self.phase_end[phase] = time

    def phase_time(self, phase: ClientPhase) -> float:
        if phase not in self.phase_start or phase not in self.phase_end:
            raise RuntimeError(f"Phase {phase.value} of client {self.id} must be started and ended "
                               f"before computing its duration")
        return self.phase_end[phase] - self.phase_start[phase]

    def waiting_time(self) -> float:
        return self.phase_time(ClientPhase.WAITING)

    def service_time(self) -> float:
        return self.phase_time(ClientPhase.SERVICE)

    def total_time_in_system(self) -> float:
        return self.waiting_time() + self.service_time()


# ===================================================
# ROUND SAMPLES
# ===================================================

class Metric(Enum):
    WAIT_TIME = "W"
    SERVICE_TIME = "X"
    SOJOURN_TIME = "T"
    OCCUPANCY = "N"
    QUEUE_LENGTH = "Nq"


class RoundSamples:
    """Samples collected during one simulation round."""

    def __init__(self, round_id: int):
        self.round_id = round_id
        self.departures = 0
        self.wait_time = Sample()
        self.service_time = Sample()
        self.sojourn_time = Sample()
        self.occupancy = TimeWeightedSample()
        self.queue_length = TimeWeightedSample()

    def get(self, metric: Metric):
        if metric == Metric.WAIT_TIME:
            return self.wait_time
        elif metric == Metric.SERVICE_TIME:
            return self.service_time
        elif metric == Metric.SOJOURN_TIME:
            return self.sojourn_time
        elif metric == Metric.OCCUPANCY:
            return self.occupancy
        elif metric == Metric.QUEUE_LENGTH:
            return self.queue_length
        raise ValueError(f"Unsupported metric: {metric}")

    def register_client(self, client: Client):
        waiting_time = client.waiting_time()
        service_time = client.service_time()
        self.wait_time.append(waiting_time)
        self.service_time.append(service_time)
        self.sojourn_time.append(waiting_time + service_time)
        self.departures += 1

    def register_state(self, time: float, system_size: int, queue_size: int):
        self.occupancy.append(time, system_size)
        self.queue_length.append(time, queue_size)


# ===================================================
# QUEUE MANAGEMENT
# ===================================================

class QueueSystem:

    def __init__(self, schedule_type: ScheduleType = ScheduleType.FCFS):
        self.schedule_type = schedule_type
        self.waiting_queue: list[Client] = []
        self.client_in_service: Optional[Client] = None

        # State counters
        self.queue_size = 0
        self.system_size = 0

    def is_server_available(self) -> bool:
        return self.client_in_service is None

    def is_idle(self) -> bool:
        return self.client_in_service is None and not self.waiting_queue

    def allocate_server(self, client: Client):
        self.client_in_service = client
        self.system_size += 1

    def release_server(self) -> Optional[Client]:
        client = self.client_in_service
        if client is not None:
            self.client_in_service = None
            self.system_size -= 1
        return client

    def add_client_to_queue(self, client: Client):
        # New clients always enter at the tail of the line
        self.waiting_queue.append(client)
        self.queue_size += 1
        self.system_size += 1

    def remove_client_from_queue(self) -> Client:
        if not self.waiting_queue:
            raise RuntimeError("The waiting queue is empty!")

        if self.schedule_type == ScheduleType.FCFS:
            client = self.waiting_queue.pop(0)
        elif self.schedule_type == ScheduleType.LCFS:
            client = self.waiting_queue.pop()
        else:
            raise ValueError(f"Unsupported schedule type: {self.schedule_type}")

        self.queue_size -= 1
        self.system_size -= 1
        return client


# ===================================================
# FUTURE EVENT SET
# ===================================================

class FutureEventSet:
    """Calendar holding at most one pending event per type, so the next event is found by linear scan."""

    def __init__(self):
        self.events: list[Event] = []

    def schedule(self, event: Event):
        if any(pending.type == event.type for pending in self.events):
            raise RuntimeError(f"An event of type {event.type} is already scheduled")
        self.events.append(event)

    def get_next_event(self) -> Event:
        if not self.events:
            raise RuntimeError("The future event set is empty!")

        # Arrivals go first when two events are due at the same time
        next_index = 0
        for index, event in enumerate(self.events):
            next_event = self.events[next_index]
            if (event.time, event.type != EventType.ARRIVAL) < (next_event.time, next_event.type != EventType.ARRIVAL):
                next_index = index
        return self.events.pop(next_index)

    def peek(self) -> Optional[Event]:
        if not self.events:
            return None
        return min(self.events, key=lambda e: (e.time, e.type != EventType.ARRIVAL))

    def is_empty(self) -> bool:
        return not self.events

    def size(self) -> int:
        return len(self.events)


# ===================================================
# EVENT HANDLERS
# ===================================================

class EventHandler:

    @staticmethod
    def handle_arrival(event: Event, simulator: "QueueSimulator"):
        queue_system = simulator.queue_system

        # Schedule next arrival (single arrival process, increment client id by 1)
        inter_arrival_time = simulator.duration_source.next_interarrival_time()
        simulator.fes.schedule(Event(time=event.time + inter_arrival_time,
                                     type=EventType.ARRIVAL, client_id=event.client_id + 1))

        client = Client(id=event.client_id,
                        service_duration=simulator.duration_source.next_service_time(),
                        color=simulator.round_id)
        client.register_start(ClientPhase.WAITING, event.time)

        if queue_system.is_idle():
            # Nobody waiting and nobody in service: zero waiting time
            client.register_end(ClientPhase.WAITING, event.time)
            EventHandler._start_service(client, event.time, simulator)
        else:
            queue_system.add_client_to_queue(client)

        simulator.register_current_state_values()

    @staticmethod
    def handle_end_of_service(event: Event, simulator: "QueueSimulator"):
        queue_system = simulator.queue_system
        client = queue_system.release_server()

        if client is not None:
            client.register_end(ClientPhase.SERVICE, event.time)
            # Clients admitted in a previous round are not measured
            if simulator.round_samples is not None and client.color == simulator.round_id:
                simulator.round_samples.register_client(client)

            if queue_system.waiting_queue:
                next_client = queue_system.remove_client_from_queue()
                next_client.register_end(ClientPhase.WAITING, event.time)
                EventHandler._start_service(next_client, event.time, simulator)

        simulator.register_current_state_values()

    @staticmethod
    def _start_service(client: Client, time: float, simulator: "QueueSimulator"):
        client.register_start(ClientPhase.SERVICE, time)
        simulator.queue_system.allocate_server(client)
        simulator.fes.schedule(Event(time=time + client.service_duration,
                                     type=EventType.END_OF_SERVICE, client_id=client.id))


# ===================================================
# SIMULATION ENGINE
# ===================================================

class QueueSimulator:

    def __init__(self, rho: float, schedule_type: ScheduleType = ScheduleType.FCFS, seed: int = 0,
                 duration_source=None):
        self.rho = rho
        self.schedule_type = schedule_type
        self.duration_source = duration_source or RandomDurationSource(rho, SERVICE_RATE, seed)
        self.queue_system = QueueSystem(schedule_type)
        self.fes = FutureEventSet()

        self.current_time = 0.0
        self.busy_time = 0.0
        self.events_count = 0

        # Round 0 is the transient phase, its clients are never measured
        self.round_id = 0
        self.round_samples: Optional[RoundSamples] = None

        first_arrival_time = self.duration_source.next_interarrival_time()
        self.fes.schedule(Event(time=first_arrival_time, type=EventType.ARRIVAL, client_id=1))

    @classmethod
    def check_correctness(cls, schedule_type: ScheduleType = ScheduleType.FCFS) -> "QueueSimulator":
        """Engine driven by the deterministic reference cycle (busy 8 time units out of 9)."""
        return cls(rho=8 / 9, schedule_type=schedule_type,
                   duration_source=FixedScheduleDurationSource.correctness_check())

    @property
    def occupancy(self) -> int:
        return self.queue_system.system_size

    @property
    def queue_length(self) -> int:
        return self.queue_system.queue_size

    def register_current_state_values(self):
        if self.round_samples is not None:
            self.round_samples.register_state(self.current_time, self.queue_system.system_size,
                                              self.queue_system.queue_size)

    def step(self) -> Event:
        """Process the next event of the calendar and return it."""
        event = self.fes.get_next_event()
        if not self.queue_system.is_server_available():
            self.busy_time += event.time - self.current_time
        self.current_time = event.time
        self.events_count += 1

        if event.type == EventType.ARRIVAL:
            EventHandler.handle_arrival(event, self)
        elif event.type == EventType.END_OF_SERVICE:
            EventHandler.handle_end_of_service(event, self)
        else:
            raise ValueError(f"Unsupported event type: {event.type}")
        return event

    def run_one_round(self, client_count: int) -> RoundSamples:
        """Simulate until client_count clients admitted in this round have left the system."""
        if client_count < 1:
            raise ValueError("Number of clients per round must be a positive integer.")

        self.round_id += 1
        self.round_samples = RoundSamples(self.round_id)
        self.register_current_state_values()

        while self.round_samples.departures < client_count:
            self.step()

        # The caller owns the samples from now on
        samples, self.round_samples = self.round_samples, None
        return samples

    def transient_phase(self, fixed_length: Optional[int] = None, max_events: Optional[int] = None) -> int:
        """Discard the initial bias of the simulation and return the number of events consumed."""
        if fixed_length is not None:
            if fixed_length < 0:
                raise ValueError("Transient phase length must be a non-negative integer.")
            for _ in range(fixed_length):
                self.step()
            return fixed_length

        detector = UtilizationTransientDetection(self.rho)
        start_time = self.current_time
        start_busy_time = self.busy_time
        while not detector.is_transient_over():
            if max_events is not None and detector.events_count >= max_events:
                raise RuntimeError(f"Transient phase not over after {max_events} events "
                                   f"(observed utilization {detector.last_utilization:.5f}, rho {self.rho})")
            self.step()
            detector.add_value(self.busy_time - start_busy_time, self.current_time - start_time)
        return detector.get_transient_length()
