"""Static-priority scheduling.

A static-priority policy assigns every task one priority before the
simulation starts and never changes it:

    rate monotonic:      the shorter the period, the higher the priority
    deadline monotonic:  the shorter the relative deadline, the higher the
                         priority

Jobs of tasks with equal priority are served in release order.

"""

from typing import Callable, Iterable

from rtsim.sim.engine import simulate
from rtsim.system.schedule import Schedule
from rtsim.system.task import Task


def schedule(tsks: Iterable[Task], key: Callable[[Task], object]) -> Schedule:
    """Simulate a task system under a static-priority policy.

    Args:
        tsks: nonempty iterable of tasks

        key: maps a task to its static priority; a higher value is a higher
             priority

    Returns: the schedule over one hyperperiod, truncated at the first
        deadline miss.

    """
    tsks = list(tsks)
    priorities = {tsk: key(tsk) for tsk in tsks}
    return simulate(tsks, lambda tsk, time: priorities[tsk])


def rate_monotonic(tsks: Iterable[Task]) -> Schedule:
    """Schedule the tasks using rate-monotonic priorities.

    >>> s = rate_monotonic([Task('A', 2, 4), Task('B', 2, 6)])
    >>> s.is_feasible, s.lcm
    (True, 12)
    >>> s.task_at(0).name, s.task_at(2).name, s.task_at(4).name
    ('A', 'B', 'A')
    """
    return schedule(tsks, lambda tsk: -tsk.period)


def deadline_monotonic(tsks: Iterable[Task]) -> Schedule:
    """Schedule the tasks using deadline-monotonic priorities.

    >>> s = deadline_monotonic([Task('A', 1, 4), Task('B', 1, 6, 2)])
    >>> s.task_at(0).name
    'B'
    """
    return schedule(tsks, lambda tsk: -tsk.deadline)
