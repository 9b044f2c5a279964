"""This module provides miscellaneous numeric utilities.

All functions work on python integers and fractions, so the hyperperiod and
utilizations of a system are computed exactly.
"""

import functools
from fractions import Fraction


def gcd(a, b):
    """Compute the greatest common divisor of two nonnegative integers or
    fractions using the Euclidean algorithm.

    >>> gcd(12, 18)
    6

    >>> gcd(Fraction(1, 2), Fraction(1, 3))
    Fraction(1, 6)
    """
    assert a >= 0 and b >= 0
    while b:
        a, b = b, a % b
    return a


def lcm(v):
    """Compute the lcm of a nonempty vector of positive integers or
    fractions.

    >>> lcm([4, 6])
    12

    >>> lcm([3, 5, 6])
    30

    >>> lcm([Fraction(1, 2), Fraction(1, 3)])
    Fraction(1, 1)
    """
    assert v, 'the lcm of an empty vector is undefined'
    assert all(x > 0 for x in v)
    return functools.reduce(lambda x, y: x * (y // gcd(x, y)), v)


def utilization(tsks) -> Fraction:
    """Compute the total utilization of a list of tasks.

    >>> from rtsim.system.task import Task
    >>> utilization([Task('A', 2, 4), Task('B', 2, 6)])
    Fraction(5, 6)
    """
    return sum((tsk.utilization for tsk in tsks), Fraction(0))


def liu_layland_bound(n: int) -> float:
    """Utilization bound of Liu and Layland for rate-monotonic scheduling of
    n tasks with implicit deadlines.

    >>> liu_layland_bound(1)
    1.0
    """
    assert n >= 1
    return n * (2**(1 / n) - 1)
