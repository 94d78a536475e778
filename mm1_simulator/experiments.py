"""
M/M/1 experiments: utilization levels and round sizes to measure.

Each configuration is run for both FCFS and LCFS and every measurement is appended to the csv file.
"""
from .queue_system import ScheduleType
from .simulator import simulator, CHECK_CORRECTNESS_RHO
from .statistics_output import write_csv_file, DEFAULT_OUTPUT_FILE

SEED = 9999
ROUNDS_COUNT = 3200
OUTPUT_FILE = DEFAULT_OUTPUT_FILE
POLICIES = [ScheduleType.FCFS, ScheduleType.LCFS]

# Correctness check of the engine against hand-computed values
CHECK_CORRECTNESS = {
    "name": "Correctness check",
    "rhos": [CHECK_CORRECTNESS_RHO],
    "round_sizes": [400],
    # None keeps the one-cycle warm-up of the reference schedule
    "transient_phases": [None],
    "rounds_count": 30,
}

# Small utilizations, to check the behaviour of the simulator at very low load
SMALL_RHOS = {
    "name": "Small utilizations",
    "rhos": [0.1, 0.01, 0.001, 0.0001],
    "round_sizes": [20_000],
    "transient_phases": [10_000],
    "rounds_count": ROUNDS_COUNT,
}

# Utilizations of interest for every pair of transient phase length and round size
MAIN_RHOS = {
    "name": "Main utilizations",
    "rhos": [0.2, 0.4, 0.6, 0.8, 0.9],
    "round_sizes": [1_000, 5_000, 10_000, 15_000, 20_000],
    "transient_phases": [1_000, 5_000, 10_000, 15_000, 20_000],
    "rounds_count": ROUNDS_COUNT,
}

EXPERIMENTS = [CHECK_CORRECTNESS, SMALL_RHOS, MAIN_RHOS]


def print_progress(round_index: int, rounds_count: int):
    end = "\n" if round_index == rounds_count else "\r"
    print(f"  Round {round_index}/{rounds_count}", end=end)


def run_experiment(config: dict, seed: int = SEED, output_file: str = OUTPUT_FILE):
    print("\n" + "=" * 80)
    print(config["name"].upper())
    print("=" * 80)

    for transient_phase in config["transient_phases"]:
        for round_size in config["round_sizes"]:
            for rho in config["rhos"]:
                for policy in POLICIES:
                    result = simulator(rho, round_size, config["rounds_count"], schedule_type=policy, seed=seed,
                                       transient_phase=transient_phase, progress_callback=print_progress)
                    write_csv_file(result, output_file)
                    print(f"rho = {rho}; Elapsed time = {result.elapsed_time:.5f}s\n")


def main():
    for config in EXPERIMENTS:
        run_experiment(config)


if __name__ == "__main__":
    main()
