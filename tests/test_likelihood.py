import math

import numpy as np
import pytest

from stpphawkes.likelihood import (
    gamma_i,
    gamma_k,
    stpp_likelihood,
    stpp_likelihood_nonunif,
    temporal_likelihood,
)

TIMES = [0.3, 1.1, 1.7, 2.9, 4.2]
XS = [0.1, 0.4, 0.35, 0.8, 0.6]
YS = [0.2, 0.1, 0.5, 0.7, 0.3]


def test_gamma_k_peak_value():
    assert gamma_k(0.0, 0.0, 1.0) == pytest.approx(1.0 / (2.0 * math.pi))


def test_gamma_k_is_symmetric():
    assert gamma_k(0.3, -0.7, 0.5) == pytest.approx(gamma_k(-0.3, 0.7, 0.5))
    assert gamma_k(0.3, 0.7, 0.5) == pytest.approx(gamma_k(0.7, 0.3, 0.5))


def test_gamma_k_integrates_to_one():
    grid = np.linspace(-10, 10, 801)
    step = grid[1] - grid[0]
    gx, gy = np.meshgrid(grid, grid)
    total = gamma_k(gx, gy, 0.8).sum() * step * step
    assert total == pytest.approx(1.0, rel=1e-3)


def test_gamma_i_matches_gamma_k_when_isotropic():
    assert gamma_i(0.4, -0.2, 0.0, 0.0, 0.6, 0.6) == pytest.approx(gamma_k(0.4, -0.2, 0.6))


def test_temporal_likelihood_empty_is_minus_compensator():
    mu, t_max = 2.0, 3.0
    assert temporal_likelihood([], mu, 0.5, 1.0, t_max) == pytest.approx(-mu * t_max)


def test_temporal_likelihood_independent_of_order():
    forward = temporal_likelihood(TIMES, 0.8, 0.4, 1.3, 5.0)
    backward = temporal_likelihood(list(reversed(TIMES)), 0.8, 0.4, 1.3, 5.0)
    assert forward == pytest.approx(backward)


def test_temporal_likelihood_excitation_raises_clustered_likelihood():
    clustered = [1.0, 1.01, 1.02, 1.03]
    without = temporal_likelihood(clustered, 0.5, 0.0, 2.0, 2.0)
    with_excitation = temporal_likelihood(clustered, 0.5, 0.8, 2.0, 2.0)
    assert with_excitation > without


def test_stpp_likelihood_without_triggering_ignores_locations():
    first = stpp_likelihood(XS, YS, TIMES, 2.0, 1.0, 0.0, 1.0, 0.1, 5.0)
    second = stpp_likelihood(YS, XS, TIMES, 2.0, 1.0, 0.0, 1.0, 0.1, 5.0)
    assert first == pytest.approx(second)


def test_stpp_likelihood_without_triggering_relates_to_temporal():
    area = 2.5
    spatial = stpp_likelihood(XS, YS, TIMES, area, 1.2, 0.0, 1.0, 0.1, 5.0)
    temporal = temporal_likelihood(TIMES, 1.2, 0.0, 1.0, 5.0)
    assert spatial == pytest.approx(temporal - len(TIMES) * math.log(area))


def test_stpp_likelihood_nearby_offspring_more_likely():
    t = [0.0, 0.1]
    near = stpp_likelihood([0.0, 0.01], [0.0, 0.01], t, 1.0, 0.5, 0.5, 2.0, 0.01, 1.0)
    far = stpp_likelihood([0.0, 0.9], [0.0, 0.9], t, 1.0, 0.5, 0.5, 2.0, 0.01, 1.0)
    assert near > far


def test_stpp_likelihood_nonunif_clamps_zero_background():
    mu, t_max = 2.0, 5.0
    value = stpp_likelihood_nonunif([1e6], [1e6], [1.0], mu, 0.0, 1.0, 0.1, 0.0, 0.0, 1.0, 1.0, t_max)
    assert value == pytest.approx(math.log(1e-200) - mu * t_max)


def test_stpp_likelihood_nonunif_prefers_points_near_centre():
    centred = stpp_likelihood_nonunif([0.0], [0.0], [1.0], 1.0, 0.0, 1.0, 0.1, 0.0, 0.0, 1.0, 1.0, 2.0)
    off = stpp_likelihood_nonunif([2.0], [2.0], [1.0], 1.0, 0.0, 1.0, 0.1, 0.0, 0.0, 1.0, 1.0, 2.0)
    assert centred > off