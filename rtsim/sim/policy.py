"""Select a scheduling policy by name.

>>> from rtsim.system.task import Task
>>> create_schedule([Task('A', 1, 2)], 'edf').is_feasible
True
"""

import enum
from typing import Iterable, Union

from rtsim.sim import dynamic, static
from rtsim.system.schedule import Schedule
from rtsim.system.task import Task

# time slice used when round robin is selected through this module
DEFAULT_SLICE_LENGTH = 1


class Policy(enum.Enum):
    RATE_MONOTONIC = 'rm'
    DEADLINE_MONOTONIC = 'dm'
    EARLIEST_DEADLINE_FIRST = 'edf'
    ROUND_ROBIN = 'rr'


POLICIES = {
    Policy.RATE_MONOTONIC: static.rate_monotonic,
    Policy.DEADLINE_MONOTONIC: static.deadline_monotonic,
    Policy.EARLIEST_DEADLINE_FIRST: dynamic.earliest_deadline_first,
    Policy.ROUND_ROBIN:
    lambda tsks: dynamic.round_robin(tsks, DEFAULT_SLICE_LENGTH),
}


def create_schedule(tsks: Iterable[Task],
                    policy: Union[Policy, str]) -> Schedule:
    """Schedule a task system with the given policy.

    Args:
        tsks: nonempty iterable of tasks

        policy: a Policy or its short name ('rm', 'dm', 'edf' or 'rr')

    Returns: the schedule over one hyperperiod, truncated at the first
        deadline miss.

    """
    assert policy in POLICIES or policy in [p.value for p in Policy], \
        f'unknown policy {policy!r}'
    f = POLICIES[Policy(policy)]
    return f(tsks)
