"""Test construction and time arithmetic of tasks and task instances.

"""

from fractions import Fraction

import pytest
from rtsim.system.task import Task, TaskInstance


def test_defaults():
    tsk = Task('A', 2, 10)
    assert tsk.deadline == 10
    assert tsk.utilization == Fraction(1, 5)


def test_bad_inputs():
    with pytest.raises(AssertionError):
        Task('A', 0, 10)  # zero wcet

    with pytest.raises(AssertionError):
        Task('A', 1, -10)  # negative period

    with pytest.raises(AssertionError):
        Task('A', 1, 10, 0)  # zero deadline

    with pytest.raises(AssertionError):
        Task('A', 1.5, 10)  # inexact data

    with pytest.raises(AssertionError):
        Task('A', True, 10)  # bool is not a time value

    with pytest.raises(AssertionError):
        Task('A', 1, 10, False)  # bool deadline

    with pytest.raises(AssertionError):
        Task('', 1, 10)  # no name


def test_deadline_beyond_period():
    tsk = Task('A', 1, 4, 6)
    assert tsk.deadline == 6
    assert tsk.absolute_deadline(5) == 10


def test_equality():
    assert Task('A', 1, 4) == Task('A', 1, 4, 4)
    assert hash(Task('A', 1, 4)) == hash(Task('A', 1, 4, 4))
    assert Task('A', 1, 4) != Task('B', 1, 4)
    assert Task('A', 1, 4) != Task('A', 2, 4)
    assert Task('A', 1, 4) != Task('A', 1, 4, 3)
    assert len({Task('A', 1, 4), Task('A', 1, 4), Task('B', 1, 4)}) == 2


@pytest.mark.parametrize("t, start, release, deadline", [
    (0, 0, 4, 3),
    (3, 0, 4, 3),
    (4, 4, 8, 7),
    (Fraction(9, 2), 4, 8, 7),
    (11, 8, 12, 11),
])
def test_time_arithmetic(t, start, release, deadline):
    tsk = Task('A', 1, 4, 3)
    assert tsk.period_start(t) == start
    assert tsk.next_release(t) == release
    assert tsk.absolute_deadline(t) == deadline


def test_fractional_period():
    tsk = Task('A', Fraction(1, 4), Fraction(3, 2))
    assert tsk.is_released_at(3)
    assert not tsk.is_released_at(1)
    assert tsk.next_release(Fraction(3, 2)) == 3


def test_task_instance():
    tsk = Task('A', 2, 4)
    inst = TaskInstance(tsk, 1, 3)
    assert inst.duration == 2
    assert TaskInstance(tsk, 0, 1) < inst
    assert inst == TaskInstance(Task('A', 2, 4), 1, 3)
    assert str(inst) == 'A: [1, 3)'

    with pytest.raises(AssertionError):
        TaskInstance(tsk, 2, 2)  # empty interval

    with pytest.raises(AssertionError):
        TaskInstance(tsk, -1, 1)  # negative time
