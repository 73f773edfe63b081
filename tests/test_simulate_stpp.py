import math

import numpy as np
import pytest

from stpphawkes.polygon import inout
from stpphawkes.simulate_stpp import (
    SimulatedEvents,
    simulate_hawkes_nonunif_stpp_c,
    simulate_hawkes_stpp,
    simulate_hawkes_stpp_c,
    simulate_hawkes_stpp_nonunif,
)

SQUARE = np.array([[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]])
PARAMS = {"mu": 20.0, "a": 0.5, "b": 1.0, "sig": 0.01}
NONUNIF = {**PARAMS, "mux": 0.5, "muy": 0.5, "sigx": 0.1, "sigy": 0.1}


def _in_window(t, lo, hi):
    t = np.asarray(t)
    return bool(np.all(t >= lo) and np.all(t <= hi) and np.all(np.diff(t) >= 0))


@pytest.mark.parametrize("seed", [1, 2, 3])
def test_uniform_events_sorted_and_in_window(seed):
    ev = simulate_hawkes_stpp(PARAMS, SQUARE, [0.0, 10.0], rng=seed)
    assert len(ev.x) == len(ev.y) == len(ev.t) == len(ev.z) == len(ev)
    assert _in_window(ev.t, 0.0, 10.0)
    assert np.all(ev.z >= 0)
    assert np.all(ev.z == np.round(ev.z))


def test_same_seed_same_result():
    first = simulate_hawkes_stpp(PARAMS, SQUARE, [0.0, 10.0], rng=np.random.default_rng(7))
    second = simulate_hawkes_stpp(PARAMS, SQUARE, [0.0, 10.0], rng=np.random.default_rng(7))
    np.testing.assert_array_equal(first.as_array(True), second.as_array(True))


def test_default_range_matches_nan():
    a = simulate_hawkes_stpp(PARAMS, SQUARE, [0.0, 10.0], d=None, rng=5)
    b = simulate_hawkes_stpp(PARAMS, SQUARE, [0.0, 10.0], d=math.nan, rng=5)
    np.testing.assert_array_equal(a.as_array(True), b.as_array(True))


def test_no_offspring_gives_empty_result():
    params = {**PARAMS, "a": 0.0}
    ev = simulate_hawkes_stpp(params, SQUARE, [0.0, 10.0], rng=3)
    assert len(ev) == 0
    assert ev.as_array().shape == (0, 3)


def test_no_offspring_c_version_empty():
    out = simulate_hawkes_stpp_c(20.0, 0.0, 1.0, 0.01, SQUARE, [0.0, 10.0], None, False, rng=3)
    assert out.shape == (0, 3)


@pytest.mark.parametrize(
    "params, message",
    [
        ({**PARAMS, "mu": -1.0}, "mu needs"),
        ({**PARAMS, "a": -0.1}, "a needs"),
        ({**PARAMS, "a": 2.0, "b": 1.0}, "UNSTABLE"),
    ],
)
def test_invalid_parameters(params, message):
    with pytest.raises(ValueError, match=message):
        simulate_hawkes_stpp(params, SQUARE, [0.0, 10.0], rng=1)


def test_c_version_rejects_unstable():
    with pytest.raises(ValueError, match="UNSTABLE"):
        simulate_hawkes_stpp_c(1.0, 1.0, 1.0, 0.01, SQUARE, [0.0, 10.0], None, False, rng=1)


def test_c_version_clipped_inside_polygon():
    out = simulate_hawkes_stpp_c(40.0, 0.5, 1.0, 0.01, SQUARE, [0.0, 10.0], None, True, rng=11)
    assert out.shape[1] == 3
    assert _in_window(out[:, 2], 0.0, 10.0)
    assert inout(out[:, 0], out[:, 1], SQUARE, True).all()


def test_c_version_unclipped_in_window():
    out = simulate_hawkes_stpp_c(40.0, 0.5, 1.0, 0.01, SQUARE, [0.0, 10.0], None, False, rng=12)
    assert out.shape[1] == 3
    assert out.shape[0] > 0
    assert out[:, 2].min() >= 0.0
    assert out[:, 2].max() <= 10.0
    assert np.all(np.diff(out[:, 2]) >= 0)


def test_history_events_before_window_not_returned():
    history = np.array([[0.5, 0.5, 1.0], [0.4, 0.6, 2.0], [0.3, 0.3, 6.0]])
    ev = simulate_hawkes_stpp(PARAMS, SQUARE, [5.0, 10.0], history=history, rng=4)
    times = ev.t.tolist()
    assert 1.0 not in times
    assert 2.0 not in times
    assert all(5.0 <= value <= 10.0 for value in times)
    assert times == sorted(times)


def test_history_accepts_simulated_events():
    hist = SimulatedEvents(
        x=np.array([0.5]), y=np.array([0.5]), t=np.array([1.0]), z=np.array([0.0])
    )
    ev = simulate_hawkes_stpp(PARAMS, SQUARE, [2.0, 8.0], history=hist, rng=9)
    times = ev.t.tolist()
    assert len(ev.x) == len(times)
    assert 1.0 not in times
    assert all(2.0 <= value <= 8.0 for value in times)
    assert times == sorted(times)


def test_nonunif_events_in_window():
    ev = simulate_hawkes_stpp_nonunif(NONUNIF, SQUARE, [0.0, 10.0], rng=21)
    assert len(ev.x) == len(ev.t)
    assert _in_window(ev.t, 0.0, 10.0)


def test_nonunif_rejects_negative_spread():
    with pytest.raises(ValueError, match="sigx needs"):
        simulate_hawkes_stpp_nonunif({**NONUNIF, "sigx": -1.0}, SQUARE, [0.0, 10.0], rng=1)
    with pytest.raises(ValueError, match="sigy needs"):
        simulate_hawkes_nonunif_stpp_c(
            10.0, 0.5, 1.0, 0.01, 0.5, 0.5, 0.1, -0.1, SQUARE, [0.0, 10.0], None, False, rng=1
        )


def test_nonunif_c_clipped_inside_polygon():
    out = simulate_hawkes_nonunif_stpp_c(
        40.0, 0.5, 1.0, 0.01, 0.5, 0.5, 0.1, 0.1, SQUARE, [0.0, 10.0], None, True, rng=31
    )
    assert _in_window(out[:, 2], 0.0, 10.0)
    assert inout(out[:, 0], out[:, 1], SQUARE, True).all()


def test_as_array_columns():
    ev = SimulatedEvents(
        x=np.array([1.0, 2.0]), y=np.array([3.0, 4.0]), t=np.array([5.0, 6.0]), z=np.array([0.0, 1.0])
    )
    np.testing.assert_array_equal(ev.as_array(), [[1.0, 3.0, 5.0], [2.0, 4.0, 6.0]])
    assert ev.as_array(with_generation=True).shape == (2, 4)