import pandas as pd

from mm1_simulator.queue_system import ScheduleType
from mm1_simulator.simulator import run_measurement, QueueMode, CHECK_CORRECTNESS_RHO
from mm1_simulator.statistics_output import write_csv_file, result_to_row


def check_result(schedule_type=ScheduleType.FCFS):
    return run_measurement(CHECK_CORRECTNESS_RHO, round_size=40, rounds_count=3, schedule_type=schedule_type,
                           queue_mode=QueueMode.CHECK_CORRECTNESS, seed=0, transient_phase=8)


def test_row_contains_estimates_and_intervals():
    row = result_to_row(check_result())
    for column in ["rho", "round_size", "transient_phase", "E[N]", "E[T]", "E[X]", "V(N)",
                   "E[W]", "E[W]_CI_TS_L", "E[W]_CI_TS_P", "V(W)_CI_C2_U", "E[Nq]_CI_TS_C",
                   "V(Nq)_CI_TS_U", "V(Nq)_CI_C2_L", "policy"]:
        assert column in row
    assert row["policy"] == "FCFS"
    assert row["transient_phase"] == 8


def test_csv_is_appended_with_single_header(tmp_path):
    path = tmp_path / "output.csv"
    write_csv_file(check_result(ScheduleType.FCFS), str(path))
    write_csv_file(check_result(ScheduleType.LCFS), str(path))

    df = pd.read_csv(path)
    assert len(df) == 2
    assert list(df["policy"]) == ["FCFS", "LCFS"]
    assert df["E[W]"].tolist() == [1.5, 1.5]
