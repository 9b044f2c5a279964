"""Simulate a periodic task system on a single processor.

All policies share one event-driven loop; they differ only in the priority
function that ranks ready jobs. A priority function maps (task, time) to a
number, and a higher number runs first:

    rate monotonic            -period
    deadline monotonic        -deadline
    earliest deadline first   -(absolute deadline at time)
    round robin               1 for the task owning the current slice, else 0

Every task releases a job at time 0 and then once per period. Time advances
in steps of at most `step` units that never cross a release, so every
release is observed. The run ends at the hyperperiod (exclusive) or at the
first deadline miss, whichever comes first:

    RUNNING --(time == lcm, nothing pending)--> COMPLETE        feasible
    RUNNING --(job past its deadline)---------> DEADLINE_MISS   infeasible

Priorities are kept on the jobs of a run, never on the tasks, so the same
tasks may be simulated by independent runs.

"""

import heapq
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from rtsim.system.schedule import Schedule
from rtsim.system.task import Task, TaskInstance
from rtsim.util.math import lcm

logger = logging.getLogger(__name__)

# maximum length of one execution step
STEP = 1

PriorityFunction = Callable[[Task, object], object]


@dataclass(order=True)
class _Job:
    # heap key: higher priority first, then earlier release
    key: tuple
    task: Task = field(compare=False)
    seq: int = field(compare=False)
    deadline: object = field(compare=False)
    remaining: object = field(compare=False)

    def execute(self, budget):
        """Run the job for at most budget time units and return the time it
        actually ran.
        """
        executed = min(budget, self.remaining)
        self.remaining -= executed
        return executed


class Simulation:
    """One scheduling run of a task system.

    Args:
        tsks: nonempty iterable of tasks; duplicates are dropped and the
              order of first occurrence is kept

        priority: priority function of the policy

        refresh: if True, the priorities of all ready jobs are re-evaluated
                 before every step; otherwise a job keeps the priority
                 evaluated at its release

        step: maximum length of one execution step

    >>> a, b = Task('A', 1, 2), Task('B', 1, 4)
    >>> s = Simulation([a, b], lambda tsk, t: -tsk.period).run()
    >>> [str(inst) for inst in s]
    ['A: [0, 1)', 'B: [1, 2)', 'A: [2, 3)']
    >>> s.is_feasible
    True
    """

    def __init__(self,
                 tsks: Iterable[Task],
                 priority: PriorityFunction,
                 refresh: bool = False,
                 step=STEP) -> None:
        self.tsks: List[Task] = list(dict.fromkeys(tsks))
        assert self.tsks, 'cannot schedule an empty task system'
        assert step > 0
        self.priority = priority
        self.refresh = refresh
        self.step = step
        self.lcm = lcm([tsk.period for tsk in self.tsks])

    def run(self) -> Schedule:
        """Simulate the task system from time 0.

        Every call starts from a fresh state, so repeated calls return equal
        schedules.
        """
        self._now = 0
        self._seq = 0
        self._ready: List[_Job] = []
        self._trace: List[TaskInstance] = []
        missed = self._release()
        while missed is None and self._now < self.lcm:
            if self.refresh:
                self._refresh()

            if not self._ready:
                # idle until the next release
                nxt = self._next_release()
                if nxt >= self.lcm:
                    break
                logger.debug('idle from %s to %s', self._now, nxt)
                self._now = nxt
                missed = self._release()
                continue

            job = self._ready[0]
            start = self._now
            self._now += job.execute(min(self.step,
                                         self._next_release() - start))
            self._trace.append(TaskInstance(job.task, start, self._now))
            logger.debug('%s runs in [%s, %s)', job.task.name, start,
                         self._now)

            if job.remaining == 0:
                heapq.heappop(self._ready)
                if self._now > job.deadline:
                    missed = job.task
                    break

            missed = self._overdue()
            if missed is None and self._now < self.lcm:
                missed = self._release()

        if missed is None and self._ready:
            # work left at the end of the hyperperiod
            missed = self._ready[0].task

        if missed is not None:
            logger.info('%s missed its deadline at %s', missed.name,
                        self._now)
            return Schedule(self._trace, self.lcm, missed, self._now)
        logger.info('%d tasks are feasible over hyperperiod %s',
                    len(self.tsks), self.lcm)
        return Schedule(self._trace, self.lcm)

    def _release(self) -> Optional[Task]:
        """Release a job of every task whose period starts now.

        Returns the first released task whose previous job is still pending,
        if any.
        """
        for tsk in self.tsks:
            if not tsk.is_released_at(self._now):
                continue
            if any(job.task == tsk for job in self._ready):
                return tsk
            job = _Job(key=self._key(tsk, self._seq),
                       task=tsk,
                       seq=self._seq,
                       deadline=self._now + tsk.deadline,
                       remaining=tsk.wcet)
            self._seq += 1
            heapq.heappush(self._ready, job)
            logger.debug('%s released at %s', tsk.name, self._now)
        return None

    def _refresh(self) -> None:
        for job in self._ready:
            job.key = self._key(job.task, job.seq)
        heapq.heapify(self._ready)

    def _key(self, tsk: Task, seq: int) -> tuple:
        return (-self.priority(tsk, self._now), seq)

    def _next_release(self):
        return min(tsk.next_release(self._now) for tsk in self.tsks)

    def _overdue(self) -> Optional[Task]:
        """Return the pending task with the earliest deadline that is not
        after the current time, if any.
        """
        late = [job for job in self._ready if job.deadline <= self._now]
        if not late:
            return None
        return min(late, key=lambda job: (job.deadline, job.seq)).task


def simulate(tsks: Iterable[Task],
             priority: PriorityFunction,
             refresh: bool = False,
             step=STEP) -> Schedule:
    """Simulate a task system under the given priority function.

    Args:
        tsks: nonempty iterable of tasks

        priority: maps (task, time) to a priority; higher runs first

        refresh: re-evaluate priorities before every step

        step: maximum length of one execution step

    Returns: the schedule over one hyperperiod, truncated at the first
        deadline miss.

    >>> simulate([Task('A', 2, 2), Task('B', 1, 2)], lambda tsk, t: 0)
    Schedule(2 instances, lcm=2, missed='B' at 2)
    """
    return Simulation(tsks, priority, refresh, step).run()
