"""The result of simulating a task system on a single processor.

A schedule is an execution trace over one hyperperiod: a sequence of task
instances sorted by start time such that no two instances overlap. A
schedule is either feasible, or it identifies the task that missed its
deadline and ends at the moment the miss was detected.

Schedules are never mutated after construction; compress() returns a new
schedule.

"""

import bisect
from typing import FrozenSet, Iterable, Iterator, Optional, Tuple

from rtsim.system.task import Task, TaskInstance


class Schedule:
    """Execution trace of a task system over one hyperperiod.

    Attributes:
        instances: the task instances, sorted by start time
        lcm: the hyperperiod of the scheduled task system
        missed_task: the task that missed its deadline; None if the schedule
                     is feasible
        miss_time: the time at which the deadline miss was detected; None if
                   the schedule is feasible

    >>> a = Task('A', 1, 2)
    >>> s = Schedule([TaskInstance(a, 2, 3), TaskInstance(a, 0, 1)], lcm=4)
    >>> s.instances
    (TaskInstance('A', 0, 1), TaskInstance('A', 2, 3))
    >>> s.is_feasible
    True
    """

    def __init__(self,
                 instances: Iterable[TaskInstance],
                 lcm,
                 missed_task: Optional[Task] = None,
                 miss_time=None) -> None:
        instances = tuple(sorted(instances, key=lambda inst: inst.start))
        assert lcm > 0
        assert all(prev.end <= cur.start
                   for prev, cur in zip(instances, instances[1:])), \
            'task instances overlap'
        assert (missed_task is None) == (miss_time is None)
        self.instances: Tuple[TaskInstance, ...] = instances
        self.lcm = lcm
        self.missed_task = missed_task
        self.miss_time = miss_time
        self._starts = [inst.start for inst in instances]

    @property
    def is_feasible(self) -> bool:
        return self.missed_task is None

    @property
    def tasks(self) -> FrozenSet[Task]:
        """The tasks that own at least one instance of the schedule."""
        return frozenset(inst.task for inst in self.instances)

    def instance_at(self, time) -> Optional[TaskInstance]:
        """Return the instance that runs at the given time, i.e., the
        instance with start <= time < end, or None if the processor is idle.
        """
        i = bisect.bisect_right(self._starts, time) - 1
        if i >= 0 and time < self.instances[i].end:
            return self.instances[i]
        return None

    def task_at(self, time) -> Optional[Task]:
        """Return the task that runs at the given time, or None."""
        inst = self.instance_at(time)
        return inst.task if inst is not None else None

    def next_instance_at(self, time) -> Optional[TaskInstance]:
        """Return the first instance that starts at or after the given time,
        or None if there is no such instance.
        """
        i = bisect.bisect_left(self._starts, time)
        if i < len(self.instances):
            return self.instances[i]
        return None

    def last_instance(self) -> Optional[TaskInstance]:
        return self.instances[-1] if self.instances else None

    def missed_instance(self) -> Optional[TaskInstance]:
        """Return the last instance of the task that missed its deadline.

        Returns None if the schedule is feasible or the task never ran.
        """
        if self.missed_task is None:
            return None
        for inst in reversed(self.instances):
            if inst.task == self.missed_task:
                return inst
        return None

    def execution_time(self, task: Task):
        """Total processor time received by the given task."""
        return sum(inst.duration for inst in self.instances
                   if inst.task == task)

    def compress(self) -> 'Schedule':
        """Merge adjacent instances of the same task into one instance.

        Two instances are adjacent if the first ends when the second starts.
        The result covers the same time per task and has the same verdict.

        >>> a, b = Task('A', 2, 4), Task('B', 1, 4)
        >>> s = Schedule([TaskInstance(a, 0, 1), TaskInstance(a, 1, 2),
        ...               TaskInstance(b, 2, 3)], lcm=4)
        >>> s.compress().instances
        (TaskInstance('A', 0, 2), TaskInstance('B', 2, 3))
        """
        merged = []
        for inst in self.instances:
            if merged and merged[-1].task == inst.task and \
               merged[-1].end == inst.start:
                merged[-1] = TaskInstance(inst.task, merged[-1].start,
                                          inst.end)
            else:
                merged.append(inst)
        return Schedule(merged, self.lcm, self.missed_task, self.miss_time)

    def __len__(self) -> int:
        return len(self.instances)

    def __iter__(self) -> Iterator[TaskInstance]:
        return iter(self.instances)

    def __eq__(self, other):
        if not isinstance(other, Schedule):
            return NotImplemented
        return (self.instances == other.instances and self.lcm == other.lcm
                and self.missed_task == other.missed_task
                and self.miss_time == other.miss_time)

    __hash__ = None

    def __repr__(self):
        verdict = 'feasible' if self.is_feasible else \
            f'missed={self.missed_task.name!r} at {self.miss_time}'
        return (f'{self.__class__.__name__}({len(self.instances)} instances, '
                f'lcm={self.lcm}, {verdict})')

    def __str__(self):
        lines = [str(inst) for inst in self.instances]
        if not self.is_feasible:
            lines.append(f'deadline miss: {self.missed_task.name} '
                         f'at {self.miss_time}')
        return '\n'.join(lines)
