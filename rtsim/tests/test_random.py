"""Test properties of schedules of randomly generated task systems.

The rate-monotonic simulation is compared with a textbook response time
analysis, and the earliest-deadline-first simulation with the utilization
test; both tests are exact for synchronous periodic tasks with implicit
deadlines.

"""

import math
from fractions import Fraction
from typing import List

import numpy as np
import pytest
from rtsim.sim.policy import Policy, create_schedule
from rtsim.system.generate_random import (DEADLINE_TYPES, PERIODS,
                                          generate_system, uunifast)
from rtsim.system.task import Task
from rtsim.util.math import lcm, liu_layland_bound, utilization


def rta(tsks: List[Task]):
    """A traditional implementation of response time analysis (RTA).

    Returns the worst-case response time of the last task, where the tasks
    are listed in decreasing order of priority, or None if the response time
    exceeds the deadline of the last task.

    """
    assert tsks

    def rbf(t):
        return sum(math.ceil(Fraction(t, tsk.period)) * tsk.wcet
                   for tsk in tsks)

    t_ = 1
    while t_ <= tsks[-1].deadline:
        v = rbf(t_)
        if v == t_:
            return t_
        t_ = v
    return None


def rm_schedulable(tsks: List[Task]) -> bool:
    tsks = sorted(tsks, key=lambda tsk: tsk.period)
    return all(rta(tsks[:i]) is not None for i in range(1, len(tsks) + 1))


def check_schedule(tsks: List[Task], s):
    """Check the invariants every schedule must satisfy."""
    assert s.lcm == lcm([tsk.period for tsk in tsks])
    for prev, cur in zip(s.instances, s.instances[1:]):
        assert prev.start < cur.start
        assert prev.end <= cur.start
    assert all(0 <= inst.start < inst.end <= s.lcm for inst in s)
    assert s.tasks <= set(tsks)
    if s.is_feasible:
        for tsk in tsks:
            assert s.execution_time(tsk) == \
                tsk.wcet * Fraction(s.lcm, tsk.period)
        # every instance runs before the deadline of its job
        for inst in s:
            assert inst.end <= inst.task.absolute_deadline(inst.start)
    else:
        assert s.missed_task in tsks
        last = s.last_instance()
        assert last is None or last.end <= s.miss_time


@pytest.fixture
def seed():
    return 42


def test_uunifast(seed: int):
    rng = np.random.default_rng(seed)
    for n in range(1, 10):
        us = uunifast(rng, n, 0.8)
        assert len(us) == n
        assert all(u >= 0 for u in us)
        assert sum(us) == pytest.approx(0.8)


@pytest.mark.parametrize("deadline_type", DEADLINE_TYPES)
def test_generate_system(seed: int, deadline_type: str):
    rng = np.random.default_rng(seed)
    for _ in range(100):
        tsks = generate_system(rng, 5, 0.7, deadline_type)
        assert [tsk.name for tsk in tsks] == ['T1', 'T2', 'T3', 'T4', 'T5']
        for tsk in tsks:
            assert tsk.period in PERIODS
            assert 1 <= tsk.wcet <= tsk.deadline <= tsk.period
            if deadline_type == 'implicit':
                assert tsk.deadline == tsk.period


@pytest.mark.parametrize("num_systems, n", [(200, 2), (200, 3), (100, 5)])
def test_liu_layland(seed: int, num_systems: int, n: int):
    rng = np.random.default_rng(seed)
    for _ in range(num_systems):
        tsks = generate_system(rng, n, liu_layland_bound(n))
        if utilization(tsks) > liu_layland_bound(n):
            continue
        s = create_schedule(tsks, Policy.RATE_MONOTONIC)
        assert s.is_feasible, str(tsks)
        check_schedule(tsks, s)


@pytest.mark.parametrize("num_systems, n, sum_util", [(300, 2, 0.9),
                                                      (300, 3, 0.95),
                                                      (100, 6, 1.0)])
def test_rm_matches_rta(seed: int, num_systems: int, n: int, sum_util):
    rng = np.random.default_rng(seed)
    for _ in range(num_systems):
        tsks = generate_system(rng, n, sum_util)
        s = create_schedule(tsks, Policy.RATE_MONOTONIC)
        assert s.is_feasible == rm_schedulable(tsks), str(tsks)
        check_schedule(tsks, s)


@pytest.mark.parametrize("num_systems, n, sum_util", [(300, 2, 1.0),
                                                      (100, 5, 1.0)])
def test_edf_matches_utilization(seed: int, num_systems: int, n: int,
                                 sum_util):
    rng = np.random.default_rng(seed)
    for _ in range(num_systems):
        tsks = generate_system(rng, n, sum_util)
        s = create_schedule(tsks, Policy.EARLIEST_DEADLINE_FIRST)
        assert s.is_feasible == (utilization(tsks) <= 1), str(tsks)
        check_schedule(tsks, s)


@pytest.mark.parametrize("policy", list(Policy))
@pytest.mark.parametrize("deadline_type", DEADLINE_TYPES)
def test_invariants(seed: int, policy: Policy, deadline_type: str):
    rng = np.random.default_rng(seed)
    for _ in range(100):
        tsks = generate_system(rng, 4, 0.9, deadline_type)
        s = create_schedule(tsks, policy)
        check_schedule(tsks, s)

        compressed = s.compress()
        assert compressed.compress() == compressed
        assert compressed.is_feasible == s.is_feasible
        assert len(compressed) <= len(s)
        for tsk in tsks:
            assert compressed.execution_time(tsk) == s.execution_time(tsk)


def test_edf_dominates(seed: int):
    rng = np.random.default_rng(seed)
    for _ in range(200):
        tsks = generate_system(rng, 4, 0.95, 'constrained')
        for policy in [Policy.RATE_MONOTONIC, Policy.DEADLINE_MONOTONIC]:
            if create_schedule(tsks, policy).is_feasible:
                s = create_schedule(tsks, Policy.EARLIEST_DEADLINE_FIRST)
                assert s.is_feasible, str(tsks)
