import math

import numpy as np
import pytest

from stpphawkes import spatio_temporal as st
from stpphawkes.likelihood import stpp_likelihood


def test_accumulate_empty_is_zero():
    assert st.sample_a_accumulate([], 10.0, 1.0) == 0.0


def test_accumulate_old_events_count_fully():
    t = [0.0, 1.0, 2.0]
    assert st.sample_a_accumulate(t, 1000.0, 1.0) == pytest.approx(len(t))


def test_accumulate_bounded_by_count():
    t = [0.5, 3.0, 7.5, 9.9]
    value = st.sample_a_accumulate(t, 10.0, 0.7)
    assert 0 < value < len(t)


def test_gamma_k_integrates_to_one():
    grid = np.linspace(-10, 10, 801)
    step = grid[1] - grid[0]
    gx, gy = np.meshgrid(grid, grid)
    total = float(st.gamma_k(gx, gy, 1.5).sum()) * step * step
    assert total == pytest.approx(1.0, rel=1e-3)


def test_b_posterior_below_a_is_minus_infinity():
    assert st.b_posterior([1.0, 2.0], 5.0, 0.5, 0.4, [0.1], [1.0, 1.0]) == -math.inf


def test_b_posterior_extra_gap_increment():
    t = [0.5, 1.0, 2.5, 4.0]
    b = 1.3
    base = st.b_posterior(t, 5.0, 0.4, b, [0.2, 0.3], [2.0, 1.0])
    more = st.b_posterior(t, 5.0, 0.4, b, [0.2, 0.3, 0.7], [2.0, 1.0])
    assert more - base == pytest.approx(math.log(b) - b * 0.7)


def test_sig_posterior_matches_kernel_log():
    sig = 0.8
    base = st.sig_posterior(sig, [], [], [2.0, 3.0])
    one = st.sig_posterior(sig, [0.4], [-0.9], [2.0, 3.0])
    assert one - base == pytest.approx(math.log(float(st.gamma_k(0.4, -0.9, sig))))


def test_sample_mu_reproducible_and_positive():
    first = st.sample_mu(10.0, 5, [1.0, 1.0], rng=7)
    second = st.sample_mu(10.0, 5, [1.0, 1.0], rng=7)
    assert first == second
    assert first > 0


def test_sample_a_positive_and_reproducible():
    t = [0.5, 1.0, 2.0, 3.5]
    first = st.sample_a(t, [0.5, 1.0], 5.0, 0.3, 1.0, [1.0, 1.0], rng=3)
    assert first == st.sample_a(t, [0.5, 1.0], 5.0, 0.3, 1.0, [1.0, 1.0], rng=3)
    assert first > 0


@pytest.mark.parametrize("seed", range(10))
def test_sample_b_stays_above_a(seed):
    t = [0.2, 0.9, 1.4, 3.0, 4.1]
    a = 0.5
    b = st.sample_b(t, [0.7, 0.5, 1.1], 5.0, a, 1.2, 0.5, [1.0, 1.0], rng=seed)
    assert b >= a


@pytest.mark.parametrize("seed", range(10))
def test_sample_sig_nonnegative(seed):
    value = st.sample_sig([0.1, -0.3, 0.2], [0.4, 0.0, -0.2], 0.5, 0.3, [2.0, 1.0], rng=seed)
    assert value >= 0


def test_sample_sig_gibbs_concentrates_near_true_variance():
    gen = np.random.default_rng(11)
    zx = gen.normal(0.0, math.sqrt(2.0), 5000)
    zy = gen.normal(0.0, math.sqrt(2.0), 5000)
    value = st.sample_sig_gibbs(zx, zy, 1.0, [1.0, 1.0], rng=5)
    assert value == pytest.approx(2.0, rel=0.1)


def test_sample_y_structure():
    gen = np.random.default_rng(2)
    t = np.sort(gen.uniform(0, 10, 30))
    x = gen.normal(size=30)
    y = gen.normal(size=30)
    parents = st.sample_y(t, x, y, 0.5, 0.4, 1.0, 0.5, 4.0, rng=9)
    assert len(parents) == len(t)
    assert parents[0] == 0
    assert all(0 <= p <= i for i, p in enumerate(parents))


def test_sample_y_without_background_uses_only_parent():
    parents = st.sample_y([0.0, 0.5], [0.0, 0.1], [0.0, 0.1], 0.0, 0.4, 1.0, 0.5, 1.0, rng=1)
    assert parents == [0, 1]


def test_sample_y_empty():
    assert st.sample_y([], [], [], 1.0, 0.4, 1.0, 0.5, 1.0, rng=1) == []


def test_missing_data_log_lik_matches_full_likelihood():
    gen = np.random.default_rng(4)
    t = np.sort(gen.uniform(0, 10, 20))
    x = gen.uniform(0, 2, 20)
    y = gen.uniform(0, 2, 20)
    expected = stpp_likelihood(x, y, t, 4.0, 0.8, 0.3, 1.2, 0.4, 10.0)
    got = st.missing_data_log_lik(x, y, t, 0.8, 0.3, 1.2, 0.4, 10.0, 4.0)
    assert got == pytest.approx(expected)