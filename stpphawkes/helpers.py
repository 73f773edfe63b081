"""Small numeric helpers shared by the Hawkes process samplers."""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

__all__ = [
    "sort_indexes",
    "reorder",
    "insert_simulated_times",
    "insert_simulated_times_and_index",
    "insert_simulated_spatial_points",
    "beta_tk",
    "big_beta_tk",
    "find_minimum_relevant_time",
    "find_minimum_relevant_times",
    "normal_cdf",
    "make_rng",
]


def sort_indexes(values: Sequence[float]) -> list[int]:
    """Return the indices that put ``values`` in ascending order."""
    return sorted(range(len(values)), key=values.__getitem__)


def reorder(index: Sequence[int], *args: Sequence) -> tuple[list, ...]:
    """Permute every sequence in ``args`` so that item ``i`` becomes ``seq[index[i]]``."""
    for seq in args:
        if len(seq) != len(index):
            raise ValueError("every sequence must have the same length as the index")
    return tuple([seq[i] for i in index] for seq in args)


def insert_simulated_times(t: Sequence[float], z_curr: Sequence[float]) -> list[float]:
    """Merge observed and simulated times into one sorted list."""
    return sorted([*t, *z_curr])


def insert_simulated_times_and_index(
    z_curr: Sequence[float], times: Sequence[float]
) -> tuple[list[float], list[int]]:
    """Append ``z_curr`` to ``times`` and sort.

    Returns the sorted times and the permutation that sorted the concatenation,
    so that companion coordinates can be reordered the same way.
    """
    combined = [*times, *z_curr]
    index = sort_indexes(combined)
    (ordered,) = reorder(index, combined)
    return ordered, index


def insert_simulated_spatial_points(
    values: Sequence[float], simulated: Sequence[float], index: Sequence[int]
) -> list[float]:
    """Append simulated coordinates and reorder them with a time-sorting index."""
    (ordered,) = reorder(index, [*values, *simulated])
    return ordered


def beta_tk(t: float, beta: float) -> float:
    """Exponential triggering density ``beta * exp(-beta * t)``, zero for t < 0 or beta <= 0."""
    if t >= 0 and beta > 0:
        return beta * math.exp(-beta * t)
    return 0.0


def big_beta_tk(t: float, beta: float) -> float:
    """Cumulative triggering function ``1 - exp(-beta * t)``."""
    return 1.0 - math.exp(-beta * t)


def find_minimum_relevant_time(t: Sequence[float], epsilon: float) -> int:
    """Return the last index whose time is below ``epsilon``, or -1 if there is none.

    Times before that index no longer contribute to exponential sums.
    """
    for i in reversed(range(len(t))):
        if t[i] < epsilon:
            return i
    return -1


def find_minimum_relevant_times(t: Sequence[float], epsilon: float) -> list[int]:
    """For every time, the first earlier index still within ``epsilon`` of it."""
    if not t:
        return []
    min_is = [0]
    for i in range(1, len(t)):
        minimum_time = t[i] - epsilon
        if minimum_time < 0:
            min_is.append(0)
            continue
        start = min_is[-1]
        found = next((j for j in range(start, i) if t[j] > minimum_time), i)
        min_is.append(found if found != i else 0)
    return min_is


def normal_cdf(value: float) -> float:
    """Standard normal cumulative distribution function."""
    return 0.5 * math.erfc(-value / math.sqrt(2.0))


def make_rng(seed: int | np.random.Generator | None = None) -> np.random.Generator:
    """Build a random generator; ``None`` or -1 draws fresh entropy."""
    if isinstance(seed, np.random.Generator):
        return seed
    if seed is None or seed == -1:
        return np.random.default_rng()
    return np.random.default_rng(seed)