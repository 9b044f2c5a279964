"""Dynamic-priority scheduling.

A dynamic-priority policy computes the priority of a task as a function of
the current time.

Earliest deadline first ranks a job by its absolute deadline; the priority
is evaluated when the job is released, which suffices because the absolute
deadline of a job does not change.

Round robin cycles through the tasks in a fixed order, one time slice each.
At time t, the task with index round(t / slice_length) mod n owns the
processor; all other tasks have equal, lower priority. The priority is
re-evaluated at every step, and a step never exceeds one slice.

"""

import math
from fractions import Fraction
from typing import Iterable

from rtsim.sim.engine import STEP, simulate
from rtsim.system.schedule import Schedule
from rtsim.system.task import Task, is_exact_time


def earliest_deadline_first(tsks: Iterable[Task]) -> Schedule:
    """Schedule the tasks using earliest-deadline-first priorities.

    >>> s = earliest_deadline_first([Task('A', 2, 2), Task('B', 2, 3)])
    >>> s.is_feasible, s.missed_task.name, s.miss_time
    (False, 'B', 3)
    """
    return simulate(tsks, lambda tsk, time: -tsk.absolute_deadline(time))


def round_robin(tsks: Iterable[Task], slice_length=1) -> Schedule:
    """Schedule the tasks using round robin with the given time slice.

    Args:
        tsks: nonempty iterable of tasks; the order of iteration is the
              order of the rotation

        slice_length: length of one time slice, a positive rational

    >>> s = round_robin([Task('A', 1, 3), Task('B', 1, 3), Task('C', 1, 3)])
    >>> ''.join(inst.task.name for inst in s)
    'ABC'
    """
    assert is_exact_time(slice_length) and slice_length > 0
    tsks = list(dict.fromkeys(tsks))
    index = {tsk: i for i, tsk in enumerate(tsks)}

    def priority(tsk: Task, time) -> int:
        # round half up
        turn = math.floor(Fraction(time) / slice_length + Fraction(1, 2))
        return 1 if index[tsk] == turn % len(tsks) else 0

    return simulate(tsks, priority, refresh=True,
                    step=min(STEP, slice_length))
