import numbers
from fractions import Fraction
from typing import Optional


def is_exact_time(x) -> bool:
    """Return True if x is a python integer or fraction, excluding bool."""
    return isinstance(x, numbers.Rational) and not isinstance(x, bool)


class Task:
    """This class implements a periodic hard real-time task.

    Attributes:
        name: unique identifier of the task
        wcet: execution time of every job of the task
        period: duration between successive job releases
        deadline: maximum duration between the release of a job and its
                  completion (relative deadline)

    We assume that wcet, period, and deadline are positive rationals (python
    integers or fractions) so that simulated time stays exact. By default,
    deadline is equal to period. A deadline larger than the period is
    allowed, but a job that is still pending at the next release of its task
    is always reported as a deadline miss.

    Tasks carry no scheduling priority; priorities are owned by a single
    simulation run.

    """

    def __init__(self, name: str, wcet, period,
                 deadline: Optional[numbers.Rational] = None) -> None:
        """Constructs a periodic task.

        Examples
        --------

        >>> Task('A', 1, 4)
        Task('A', 1, 4, 4)

        >>> Task(name='B', wcet=Fraction(1, 2), period=3, deadline=2)
        Task('B', Fraction(1, 2), 3, 2)
        """
        if deadline is None:  # implicit deadline
            deadline = period
        assert isinstance(name, str) and name, 'task name must be nonempty'
        assert is_exact_time(wcet) and wcet > 0
        assert is_exact_time(period) and period > 0
        assert is_exact_time(deadline) and deadline > 0
        self.name = name
        self.wcet = wcet
        self.period = period
        self.deadline = deadline

    @property
    def utilization(self) -> Fraction:
        """The utilization of the task.

        >>> Task('A', 1, 2).utilization
        Fraction(1, 2)
        """
        return Fraction(self.wcet) / Fraction(self.period)

    def period_start(self, t):
        """Start of the period of the task that contains time t.

        >>> Task('A', 1, 4).period_start(6)
        4
        """
        return t - t % self.period

    def next_release(self, t):
        """First release of the task strictly after time t.

        >>> Task('A', 1, 4).next_release(4)
        8
        """
        return self.period_start(t) + self.period

    def absolute_deadline(self, t):
        """Absolute deadline of the job released in the period containing
        time t.

        >>> Task('A', 1, 4, 3).absolute_deadline(5)
        7
        """
        return self.period_start(t) + self.deadline

    def is_released_at(self, t) -> bool:
        return t % self.period == 0

    def _key(self):
        return (self.name, self.period, self.deadline, self.wcet)

    def __eq__(self, other):
        if not isinstance(other, Task):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        """repr(self)"""
        return (f'{self.__class__.__name__}({self.name!r}, {self.wcet!r}, '
                f'{self.period!r}, {self.deadline!r})')

    def __str__(self):
        """str(self)"""
        return (f'{self.name} (wcet: {self.wcet}, period: {self.period}, '
                f'deadline: {self.deadline})')


class TaskInstance:
    """One contiguous execution interval of a task on the processor.

    A job of a task is split into several instances when it is preempted, so
    a task may own more than one instance per period. Instances are ordered
    by start time.

    >>> TaskInstance(Task('A', 1, 4), 0, 1)
    TaskInstance('A', 0, 1)
    """

    def __init__(self, task: Task, start, end) -> None:
        assert 0 <= start < end, f'invalid interval [{start}, {end})'
        self.task = task
        self.start = start
        self.end = end

    @property
    def duration(self):
        return self.end - self.start

    def __lt__(self, other):
        return self.start < other.start

    def __eq__(self, other):
        if not isinstance(other, TaskInstance):
            return NotImplemented
        return ((self.task, self.start, self.end) ==
                (other.task, other.start, other.end))

    def __hash__(self):
        return hash((self.task, self.start, self.end))

    def __repr__(self):
        return (f'{self.__class__.__name__}({self.task.name!r}, '
                f'{self.start!r}, {self.end!r})')

    def __str__(self):
        return f'{self.task.name}: [{self.start}, {self.end})'
