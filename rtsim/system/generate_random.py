import math
from typing import List, Sequence

import numpy as np
from rtsim.system.task import Task

DEADLINE_TYPES = ['implicit', 'constrained']

# candidate periods; every subset has a hyperperiod of at most 120, which
# keeps the simulation of a random system short
PERIODS = [2, 3, 4, 5, 6, 8, 10, 12, 15, 20, 24, 30, 40, 60, 120]


def uunifast(rng: np.random.Generator, n: int, sum_util) -> List[float]:
    """Generate n utilizations that sum to sum_util using the UUniFast
    algorithm of Bini and Buttazzo.

    Args:
        rng: a random number generator from numpy like np.random.default_rng()

        n: number of tasks in the system

        sum_util: total utilization of the system

    >>> us = uunifast(np.random.default_rng(seed=42), 4, 0.75)
    >>> len(us), round(sum(us), 9)
    (4, 0.75)
    """
    assert n >= 1 and sum_util >= 0
    us = []
    rest = sum_util
    for i in range(1, n):
        nxt = rest * rng.uniform()**(1.0 / (n - i))
        us.append(rest - nxt)
        rest = nxt
    us.append(rest)
    return us


def generate_system(rng: np.random.Generator,
                    n: int,
                    sum_util,
                    deadline_type: str = 'implicit',
                    periods: Sequence[int] = PERIODS) -> List[Task]:
    """Generate a random system of periodic tasks.

    Args:
        rng: a random number generator from numpy like np.random.default_rng()

        n: number of tasks in the system

        sum_util: target total utilization of the system. utilizations are
                  generated with UUniFast. Since we require all parameters to
                  be integral, the wcets are rounded down (but are at least
                  one and at most the period); thus the total utilization may
                  deviate from sum_util.

        deadline_type: if the type is 'implicit', then each deadline is equal
                       to its respective period; if the type is
                       'constrained', then each deadline is picked from a
                       discrete uniform distribution from wcet to period.

        periods: candidate periods. periods are picked uniformly from this
                 list; the hyperperiod of the system is at most the lcm of
                 the candidates.

    Returns:
        A random system of periodic tasks named T1, ..., Tn.

    """
    assert deadline_type in DEADLINE_TYPES
    assert n >= 1 and periods
    ps = [int(p) for p in rng.choice(periods, size=n)]
    us = uunifast(rng, n, sum_util)
    wcets = [min(p, max(1, math.floor(p * u))) for p, u in zip(ps, us)]
    if deadline_type == 'implicit':
        deadlines = ps
    else:
        deadlines = rng.integers(low=wcets,
                                 high=[p + 1 for p in ps],
                                 size=n).tolist()
    return [
        Task(name=f'T{i + 1}', wcet=w, period=p, deadline=d)
        for i, (w, p, d) in enumerate(zip(wcets, ps, deadlines))
    ]
