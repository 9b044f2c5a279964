"""Run the experiments for comparing the scheduling policies on randomly
generated task systems.

"""

import pathlib
from typing import List, Optional

import matplotlib.pyplot as plt
import numpy as np
import scipy.stats
from attr import dataclass

from rtsim.sim.policy import Policy, create_schedule
from rtsim.system.generate_random import generate_system


@dataclass
class Trial:
    feasible: bool = False
    num_dispatches: int = 0


def run_trial(tsks, policy: Policy) -> Trial:
    """Simulate one task system and record the verdict and the number of
    dispatches, i.e., the number of instances after merging adjacent
    instances of the same task.
    """
    s = create_schedule(tsks, policy)
    return Trial(feasible=s.is_feasible, num_dispatches=len(s.compress()))


def acceptance_ratios(rng: np.random.Generator, n: int, utils: List[float],
                      num_systems: int, policies: List[Policy],
                      deadline_type: str, data_fn: Optional[str]):
    """Measure the fraction of random task systems that each policy
    schedules without a deadline miss.

    Args:

        rng: a random number generator from numpy like np.random.default_rng()

        n: number of tasks in each system

        utils: target total utilizations; num_systems systems are generated
               for each of them

        num_systems: number of randomly generated systems per utilization

        policies: the policies being compared. every policy is run on the
                  same systems.

        deadline_type: 'implicit' or 'constrained'

        data_fn: filename of npz file that will store the acceptance ratios.
                 if the name is None, then the data is not stored.

    Returns: a numpy array with one row per policy and one column per
        utilization.

    """
    data = np.zeros((len(policies), len(utils)))
    for j, sum_util in enumerate(utils):
        for _ in range(num_systems):
            tsks = generate_system(rng, n, sum_util, deadline_type)
            for i, policy in enumerate(policies):
                data[i, j] += run_trial(tsks, policy).feasible
    data /= num_systems
    if data_fn:
        np.savez(data_fn,
                 data=data,
                 utils=np.array(utils),
                 policies=np.array([p.value for p in policies]))
    return data


def count_dispatches(rng: np.random.Generator, n: int, sum_util,
                     num_systems: int, policy1: Policy, policy2: Policy,
                     data_fn: Optional[str]):
    """Count the dispatches of two policies on systems that both policies
    schedule without a deadline miss.

    Args:

        rng: a random number generator from numpy like np.random.default_rng()

        n: number of tasks in each system

        sum_util: target total utilization of each system

        num_systems: number of feasible systems to collect

        policy1, policy2: the two policies being compared

        data_fn: filename of npz file that will store the measurements. if
                 the name is None, then the data is not stored.

    Returns: (data1, data2): two numpy arrays containing the number of
        dispatches of each policy.

    """
    data1 = np.zeros(num_systems)
    data2 = np.zeros(num_systems)
    i = 0
    while i < num_systems:
        tsks = generate_system(rng, n, sum_util)
        trial1 = run_trial(tsks, policy1)
        trial2 = run_trial(tsks, policy2)
        if not (trial1.feasible and trial2.feasible):
            continue
        data1[i] = trial1.num_dispatches
        data2[i] = trial2.num_dispatches
        i += 1
    if data_fn:
        np.savez(data_fn,
                 data1=data1,
                 data2=data2,
                 policy1=policy1.value,
                 policy2=policy2.value)
    return data1, data2


def load(data_fn):
    """Load dispatch counts from npz file.

    Args:
        data_fn: the filename

    Returns: (policy1, policy2, data1, data2)
    """
    npzfile = np.load(data_fn)
    policy1 = Policy(str(npzfile['policy1']))
    policy2 = Policy(str(npzfile['policy2']))
    data1 = npzfile['data1']
    data2 = npzfile['data2']
    return policy1, policy2, data1, data2


plt.rc('xtick', labelsize=10)
plt.rc('ytick', labelsize=10)
plt.style.use('tableau-colorblind10')


def acceptance_plot(utils: List[float], data: np.ndarray,
                    policies: List[Policy], image_fn: Optional[str]):
    """Draw one acceptance-ratio curve per policy.

    Args:

        utils: target total utilizations (x-axis)

        data: acceptance ratios, one row per policy

        policies: the policies, in the order of the rows of data

        image_fn: filename of pdf file that stores the plot. if name is None,
                  then the plot is simply displayed.

    """
    for row, policy in zip(data, policies):
        plt.plot(utils,
                 row,
                 marker='o',
                 label=policy.name.replace('_', ' ').lower())
    plt.xlabel('total utilization', fontsize=15)
    plt.ylabel('acceptance ratio', fontsize=15)
    plt.ylim(-0.05, 1.05)
    plt.legend(loc='lower left', prop={'size': 12})
    plt.tight_layout()
    if image_fn:
        plt.savefig(f"{image_fn}.pdf", format="pdf")
    else:
        plt.show()
    plt.clf()


def two_histograms(data1: np.ndarray, label1: str, data2: np.ndarray,
                   label2: str, xlabel: str, ylabel: str,
                   image_fn: Optional[str]):
    """Draw histograms of the measurements for the two policies.

    Args:

        data1, label1: data and label for 1st histogram.

        data2, label2: data and label for 2nd histogram.

        xlabel: label for x-axis.

        ylabel: label for y-axis

        image_fn: filename of pdf file that stores the histograms. if name is
                  None, then the image is simply displayed.

    """
    a = min(0, np.amin(data1), np.amin(data2))
    b = max(np.amax(data1), np.amax(data2)) + 1
    bins = np.arange(start=a, stop=b, step=1)
    plt.hist(data1, bins, label=label1, alpha=0.5, density=True)
    plt.hist(data2, bins, label=label2, alpha=0.5, density=True)
    plt.xlabel(xlabel, fontsize=15)
    plt.ylabel(ylabel, fontsize=15)
    plt.legend(loc='upper right', prop={'size': 12})
    plt.tight_layout()
    if image_fn:
        plt.savefig(f"{image_fn}.pdf", format="pdf")
    else:
        plt.show()
    plt.clf()


def analyze(data1: np.ndarray,
            label1: str,
            data2: np.ndarray,
            label2: str,
            dir_name: pathlib.Path,
            show_stats: bool = False):
    """Analyze the dispatch counts of two policies.

    Args:

        data1, label1: data and label for 1st policy.

        data2, label2: data and label for 2nd policy.

        dir_name: name of directory where the histogram file is stored.

        show_stats: show descriptive statistics of the data; False by
                    default.

    """
    if show_stats:
        for data, label in [(data1, label1), (data2, label2)]:
            print(f'statistics for number of dispatches of {label}')
            print('-' * 80)
            print()
            print(scipy.stats.describe(data))
            print()
    two_histograms(data1,
                   label1,
                   data2,
                   label2,
                   xlabel='number of dispatches',
                   ylabel='normalized frequencies',
                   image_fn=dir_name / 'two')


def exp_1():
    """Compare the acceptance ratios of all policies for systems with
    implicit deadlines.

    """
    # name the directory in which you want to store the data and images.
    dir = pathlib.Path('exp1')
    dir.mkdir(exist_ok=True)

    rng = np.random.default_rng(seed=1234)
    utils = [0.5, 0.6, 0.7, 0.8, 0.85, 0.9, 0.95, 1.0]
    policies = list(Policy)
    data = acceptance_ratios(rng,
                             n=5,
                             utils=utils,
                             num_systems=1000,
                             policies=policies,
                             deadline_type='implicit',
                             data_fn=(dir / 'data.npz'))
    acceptance_plot(utils, data, policies, image_fn=dir / 'acceptance')


def exp_2():
    """Compare the acceptance ratios of all policies for systems with
    constrained deadlines.

    """
    dir = pathlib.Path('exp2')
    dir.mkdir(exist_ok=True)

    rng = np.random.default_rng(seed=1234)
    utils = [0.3, 0.4, 0.5, 0.6, 0.7, 0.8, 0.9]
    policies = list(Policy)
    data = acceptance_ratios(rng,
                             n=5,
                             utils=utils,
                             num_systems=1000,
                             policies=policies,
                             deadline_type='constrained',
                             data_fn=(dir / 'data.npz'))
    acceptance_plot(utils, data, policies, image_fn=dir / 'acceptance')


def exp_3():
    """Compare the number of dispatches of rate monotonic and earliest
    deadline first on systems that both schedule.

    """
    dir = pathlib.Path('exp3')
    dir.mkdir(exist_ok=True)

    rng = np.random.default_rng(seed=1234)
    data1, data2 = count_dispatches(rng,
                                    n=5,
                                    sum_util=0.7,
                                    num_systems=1000,
                                    policy1=Policy.RATE_MONOTONIC,
                                    policy2=Policy.EARLIEST_DEADLINE_FIRST,
                                    data_fn=(dir / 'data.npz'))

    analyze(data1=data1,
            label1='rate monotonic',
            data2=data2,
            label2='earliest deadline first',
            dir_name=dir,
            show_stats=True)


if __name__ == "__main__":
    exp_1()
