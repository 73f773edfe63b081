import math
import random

import numpy as np
import pytest

from stpphawkes.helpers import (
    beta_tk,
    big_beta_tk,
    find_minimum_relevant_time,
    find_minimum_relevant_times,
    insert_simulated_spatial_points,
    insert_simulated_times,
    insert_simulated_times_and_index,
    make_rng,
    normal_cdf,
    reorder,
    sort_indexes,
)


def test_sort_indexes():
    assert sort_indexes([5, 10, 6, 9, 7, 8]) == [0, 2, 4, 5, 3, 1]


def test_variadic_reorder():
    x = [5, 10, 6, 9, 7, 8]
    y = [11, 16, 12, 15, 13, 14]
    index = sort_indexes(x)
    new_x, new_y = reorder(index, x, y)
    assert new_x == [5, 6, 7, 8, 9, 10]
    assert new_y == [11, 12, 13, 14, 15, 16]


def test_variadic_reorder_vs_single_reorder():
    x = [5, 10, 6, 9, 7, 8]
    idx = sort_indexes(x)
    (single,) = reorder(idx, x)
    (again,) = reorder(idx, list(x))
    assert single == [5, 6, 7, 8, 9, 10]
    assert again == single


def test_reorder_large_shuffled_consistent():
    n = 5000
    t = list(range(n))
    random.Random(1).shuffle(t)
    indices = sort_indexes(t)
    x = [v - 4 for v in range(n)]
    y = [v + 1000 for v in range(n)]
    rx, ry = reorder(indices, x, y)
    (sx,) = reorder(indices, x)
    (sy,) = reorder(indices, y)
    assert rx == sx
    assert ry == sy
    (st,) = reorder(indices, t)
    assert st == list(range(n))


def test_reorder_length_mismatch():
    with pytest.raises(ValueError):
        reorder([0, 1], [1, 2, 3])


def test_insert_simulated_times_and_index_matches_sort():
    t = [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11]
    simulated = [1.1, 1.2, 3.1, 4.5, 6.7]
    t1, idx = insert_simulated_times_and_index(simulated, t)
    t2 = insert_simulated_times(t, simulated)
    assert t1 == t2
    assert t1 == sorted(t + simulated)
    assert sorted(idx) == list(range(len(t) + len(simulated)))


def test_insert_simulated_spatial_points():
    t = [0, 3, 6, 7, 8, 11, 12]
    t_sim = [1, 2, 5, 13]
    times, idx = insert_simulated_times_and_index(t_sim, t)
    assert times == [0, 1, 2, 3, 5, 6, 7, 8, 11, 12, 13]
    x = [1, 2, 3, 4, 5, 6, 7]
    x_sim = [8, 9, 10, 11]
    y = [-1, -2, -3, -4, -5, -6, -7]
    y_sim = [-8, -9, -10, -11]
    assert insert_simulated_spatial_points(x, x_sim, idx) == [1, 8, 9, 2, 10, 3, 4, 5, 6, 7, 11]
    assert insert_simulated_spatial_points(y, y_sim, idx) == [-1, -8, -9, -2, -10, -3, -4, -5, -6, -7, -11]


def test_beta_tk():
    assert beta_tk(-1.0, 1.0) == 0.0
    assert beta_tk(1.0, 0.0) == 0.0
    assert beta_tk(0.0, 2.0) == 2.0
    assert beta_tk(1.0, 1.0) == pytest.approx(math.exp(-1.0))


def test_big_beta_tk():
    assert big_beta_tk(0.0, 3.0) == 0.0
    assert big_beta_tk(1.0, 1.0) == pytest.approx(1 - math.exp(-1.0))


def test_find_minimum_relevant_time():
    assert find_minimum_relevant_time([0, 1, 2, 3], 2.5) == 2
    assert find_minimum_relevant_time([0, 1, 2, 3], -1.0) == -1
    assert find_minimum_relevant_time([], 1.0) == -1


def test_find_minimum_relevant_times():
    assert find_minimum_relevant_times([0, 1, 2, 3, 4], 1.5) == [0, 0, 1, 2, 3]
    assert find_minimum_relevant_times([], 1.0) == []


def test_normal_cdf():
    assert normal_cdf(0.0) == pytest.approx(0.5)
    assert normal_cdf(1.959963984540054) == pytest.approx(0.975)
    assert normal_cdf(-1.0) + normal_cdf(1.0) == pytest.approx(1.0)


def test_make_rng_reproducible():
    a = make_rng(42).uniform(size=5)
    b = make_rng(42).uniform(size=5)
    assert np.array_equal(a, b)
    gen = np.random.default_rng(3)
    assert make_rng(gen) is gen