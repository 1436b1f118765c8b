import pytest

from kernel_sim.errors import InvalidQuantum, SchedulerStalled
from kernel_sim.models import ProcessState
from kernel_sim.registry import ProcessRegistry
from kernel_sim.scheduler import RoundRobinScheduler, simulate


def _registry():
    return ProcessRegistry.from_pairs([(1, 5), (2, 3), (3, 6)])


def _states(snapshot):
    return {v.pid: (v.state, v.progress) for v in snapshot.processes}


def _expected_steps(pairs, quantum):
    # One step per quantum-sized visit of every process.
    return sum(-(-work // quantum) for _, work in pairs)


def test_single_process_two_steps():
    result = simulate(ProcessRegistry.from_pairs([(1, 3)]), quantum=2)
    assert result.steps == 2
    assert _states(result.snapshots[0]) == {1: (ProcessState.RUNNING, 2)}
    assert _states(result.snapshots[1]) == {1: (ProcessState.TERMINATED, 3)}


def test_short_process_finishes_first():
    reg = ProcessRegistry.from_pairs([(1, 4), (2, 2)])
    result = simulate(reg, quantum=2)

    assert result.steps == 3
    assert _states(result.snapshots[0]) == {
        1: (ProcessState.RUNNING, 2),
        2: (ProcessState.READY, 0),
    }
    assert _states(result.snapshots[1]) == {
        1: (ProcessState.READY, 2),
        2: (ProcessState.TERMINATED, 2),
    }
    assert _states(result.snapshots[2]) == {
        1: (ProcessState.TERMINATED, 4),
        2: (ProcessState.TERMINATED, 2),
    }
    assert reg.is_all_terminated()


def test_callback_sees_running_before_requeue():
    seen = []
    reg = ProcessRegistry.from_pairs([(1, 3), (2, 1)])
    simulate(reg, on_snapshot=lambda snap: seen.append((snap.step, snap.running_pid)))
    assert seen == [(1, 1), (2, None), (3, None)]
    assert reg.get(1).progress == 3


def test_no_snapshot_after_all_terminated():
    calls = []
    result = simulate(_registry(), on_snapshot=calls.append)
    assert len(calls) == result.steps == 8
    assert calls[-1].step == 8


def test_visits_follow_fifo_round_robin():
    result = simulate(_registry(), quantum=2)
    assert [s.pid for s in result.timeline] == [1, 2, 3, 1, 2, 3, 1, 3]


def test_initial_queue_uses_creation_order():
    result = simulate(ProcessRegistry.from_pairs([(9, 2), (4, 2)]), quantum=2)
    assert [s.pid for s in result.timeline] == [9, 4]
    assert [v.pid for v in result.snapshots[0].processes] == [4, 9]


@pytest.mark.parametrize("quantum", [1, 2, 3, 7])
def test_step_count_is_sum_of_visits(quantum):
    reg = _registry()
    result = simulate(reg, quantum=quantum)
    assert result.steps == _expected_steps(reg.pairs(), quantum)


def test_step_counts_for_known_quanta():
    pairs = _registry().pairs()
    assert _expected_steps(pairs, 1) == simulate(_registry(), quantum=1).steps == 14
    assert _expected_steps(pairs, 2) == simulate(_registry(), quantum=2).steps == 8
    assert _expected_steps(pairs, 6) == simulate(_registry(), quantum=6).steps == 3


def test_one_process_scheduled_per_step():
    result = simulate(_registry(), quantum=2)
    for snap, slice_ in zip(result.snapshots, result.timeline):
        assert slice_.step == snap.step
        running = [v for v in snap.processes if v.state is ProcessState.RUNNING]
        assert len(running) <= 1
        if running:
            assert running[0].pid == slice_.pid
        else:
            assert snap.state_of(slice_.pid) is ProcessState.TERMINATED
        others = [v for v in snap.processes if v.pid != slice_.pid]
        assert all(v.state in (ProcessState.READY, ProcessState.TERMINATED) for v in others)


def test_progress_monotonic_and_bounded():
    reg = ProcessRegistry.from_pairs([(1, 7), (2, 1), (3, 4), (4, 9)])
    totals = {pcb.pid: pcb.total_work for pcb in reg}
    result = simulate(reg, quantum=3)

    last = {pid: 0 for pid in totals}
    for snap in result.snapshots:
        for view in snap.processes:
            assert last[view.pid] <= view.progress <= totals[view.pid]
            if view.progress == totals[view.pid]:
                assert view.state is ProcessState.TERMINATED
            last[view.pid] = view.progress


def test_fairness_between_visits():
    result = simulate(ProcessRegistry.from_pairs([(1, 6), (2, 2), (3, 5), (4, 3)]), quantum=2)
    order = [s.pid for s in result.timeline]
    for i, pid in enumerate(order):
        if pid not in order[i + 1 :]:
            continue
        j = order.index(pid, i + 1)
        between = order[i + 1 : j]
        assert len(between) == len(set(between))


def test_quantum_larger_than_work_runs_once():
    result = simulate(ProcessRegistry.from_pairs([(1, 3), (2, 1)]), quantum=10)
    assert result.steps == 2
    assert [(s.start, s.end) for s in result.timeline] == [(0, 3), (3, 4)]


def test_empty_queue_still_reports_the_step():
    reg = ProcessRegistry.from_pairs([(1, 3)])
    sched = RoundRobinScheduler(reg, quantum=2)
    sched.ready.clear()

    snap = sched.step()

    assert snap.step == 1
    assert _states(snap) == {1: (ProcessState.READY, 0)}
    assert sched.result.timeline == []


def test_max_steps_bounds_a_stalled_run():
    seen = []
    reg = ProcessRegistry.from_pairs([(1, 3)])
    sched = RoundRobinScheduler(reg, on_snapshot=seen.append)
    sched.ready.clear()

    with pytest.raises(SchedulerStalled):
        sched.run(max_steps=3)
    assert [s.step for s in seen] == [1, 2, 3]


def test_empty_registry_finishes_immediately():
    result = simulate(ProcessRegistry())
    assert result.steps == 0
    assert result.snapshots == []


@pytest.mark.parametrize("quantum", [0, -1, True, 1.5])
def test_rejects_bad_quantum(quantum):
    with pytest.raises(InvalidQuantum):
        RoundRobinScheduler(ProcessRegistry.from_pairs([(1, 1)]), quantum=quantum)


def test_runs_are_independent_and_repeatable():
    pairs = [(1, 5), (2, 3)]
    first = simulate(ProcessRegistry.from_pairs(pairs))
    second = simulate(ProcessRegistry.from_pairs(pairs))
    assert first.snapshots == second.snapshots
