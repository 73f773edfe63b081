"""Simulation of spatio-temporal Hawkes processes by generations of offspring."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from statistics import NormalDist

import numpy as np

from .helpers import make_rng
from .poisson import homog_stpp, nonunif_stpp
from .polygon import inout

__all__ = [
    "SimulatedEvents",
    "simulate_hawkes_stpp",
    "simulate_hawkes_stpp_c",
    "simulate_hawkes_stpp_nonunif",
    "simulate_hawkes_nonunif_stpp_c",
]

_OFFSPRING_FRACTION = 0.01


@dataclass
class SimulatedEvents:
    """Simulated events with their generation: 0 for background, k for k-th offspring."""

    x: np.ndarray = field(default_factory=lambda: np.empty(0))
    y: np.ndarray = field(default_factory=lambda: np.empty(0))
    t: np.ndarray = field(default_factory=lambda: np.empty(0))
    z: np.ndarray = field(default_factory=lambda: np.empty(0))

    def __len__(self) -> int:
        return int(np.asarray(self.t).size)

    def as_array(self, with_generation: bool = False) -> np.ndarray:
        """Columns x, y, t (and z when asked) as one matrix."""
        cols = [self.x, self.y, self.t]
        if with_generation:
            cols.append(self.z)
        return np.column_stack([np.asarray(c, dtype=float) for c in cols]).reshape(
            len(self), len(cols)
        )


def _history_matrix(history) -> np.ndarray:
    """Turn a history of events into an (m, 3) matrix of x, y, t."""
    if history is None:
        return np.empty((0, 3))
    if isinstance(history, SimulatedEvents):
        return history.as_array()
    if isinstance(history, Mapping):
        if not history:
            return np.empty((0, 3))
        return np.column_stack(
            [np.asarray(history[k], dtype=float) for k in ("x", "y", "t")]
        )
    arr = np.asarray(history, dtype=float)
    if arr.size == 0:
        return np.empty((0, 3))
    if arr.ndim != 2 or arr.shape[1] < 3:
        raise ValueError("history must have x, y and t columns")
    return arr[:, :3]


def _validate(mu: float, a: float, b: float) -> None:
    if mu < 0:
        raise ValueError("mu needs to be greater than 0")
    if a < 0:
        raise ValueError("a needs to be greater than 0")
    if b < 0:
        raise ValueError("b needs to be greater than 0")
    if a >= b:
        raise ValueError("b needs to be greater than a: UNSTABLE")


def _validate_spread(sigx: float, sigy: float) -> None:
    if sigx < 0:
        raise ValueError("sigx needs to be greater than 0")
    if sigy < 0:
        raise ValueError("sigy needs to be greater than 0")


def _default_range(sd: float, d) -> float:
    if d is None or (isinstance(d, float) and math.isnan(d)):
        return NormalDist(0.0, sd).inv_cdf(0.95)
    return float(d)


def _background_window(t_region, b: float, has_history: bool) -> tuple[float, float]:
    """Time window for background events, extended to soften edge effects."""
    t0, t1 = float(t_region[0]), float(t_region[1])
    if has_history:
        return t0, t1
    time_ext = -b * math.log(_OFFSPRING_FRACTION)
    if t1 <= 2 * time_ext:
        return t0, 2 * time_ext
    return t0 - time_ext, t1


def _fractions(poly, rng_dist: float) -> tuple[float, float]:
    p = np.asarray(poly, dtype=float)
    xw = p[:, 0].max() - p[:, 0].min()
    yw = p[:, 1].max() - p[:, 1].min()
    return rng_dist / xw, rng_dist / yw


def _with_history(background: np.ndarray, history: np.ndarray, t_start: float) -> np.ndarray:
    """Prepend history events up to the last one before the window start."""
    if history.shape[0] == 0:
        return background
    earlier = np.flatnonzero(history[:, 2] < t_start)
    if earlier.size == 0:
        return background
    return np.vstack([history[: earlier[-1] + 1], background])


def _generations(background, a, b, sd, t_end, gen) -> np.ndarray:
    """Grow offspring generation by generation; returns stacked rows x, y, t, z.

    Generation growth stops once no offspring fall at or before ``t_end``.
    The final accepted generation is not part of the result.
    """
    catalog = [np.column_stack([background, np.zeros(background.shape[0])])]
    while True:
        parents = catalog[-1]
        counts = gen.poisson(a, parents.shape[0])
        total = int(counts.sum())
        if total == 0:
            break
        rep = np.repeat(parents, counts, axis=0)
        t = rep[:, 2] + gen.exponential(1.0 / b, total)
        x = rep[:, 0] + gen.normal(0.0, sd, total)
        y = rep[:, 1] + gen.normal(0.0, sd, total)
        order = np.argsort(t, kind="stable")
        child = np.column_stack(
            [x[order], y[order], t[order], np.full(total, float(len(catalog)))]
        )
        if not (child[:, 2] <= t_end).any():
            break
        catalog.append(child)
    if len(catalog) == 1:
        return np.empty((0, 4))
    return np.vstack(catalog[:-1])


def _finish(out: np.ndarray, t_region, poly=None) -> np.ndarray:
    """Keep events inside the polygon (if given) and time window, sorted by time."""
    if out.shape[0] == 0:
        return out
    if poly is not None:
        out = out[inout(out[:, 0], out[:, 1], poly, True)]
    t0, t1 = float(t_region[0]), float(t_region[1])
    out = out[(out[:, 2] >= t0) & (out[:, 2] <= t1)]
    return out[np.argsort(out[:, 2], kind="stable")]


def _to_events(rows: np.ndarray) -> SimulatedEvents:
    if rows.shape[0] == 0:
        return SimulatedEvents()
    return SimulatedEvents(
        x=rows[:, 0].copy(), y=rows[:, 1].copy(), t=rows[:, 2].copy(), z=rows[:, 3].copy()
    )


def _run(make_background, a, b, sd, poly, t_region, history, rng_dist, gen) -> np.ndarray:
    hist = _history_matrix(history)
    window = _background_window(t_region, b, hist.shape[0] > 0)
    xfrac, yfrac = _fractions(poly, rng_dist)
    background = make_background(window, xfrac, yfrac)
    background = _with_history(background, hist, float(t_region[0]))
    return _generations(background, a, b, sd, float(t_region[1]), gen)


def simulate_hawkes_stpp(params, poly, t_region, d=None, history=None, rng=None) -> SimulatedEvents:
    """Simulate a spatio-temporal Hawkes process with uniform background.

    ``params`` holds ``mu``, ``a``, ``b`` and ``sig`` (the kernel variance).
    Background events are drawn on the polygon's box enlarged by ``d``; by
    default ``d`` is the 95% normal quantile of the kernel spread.
    """
    gen = make_rng(rng)
    mu, a, b = float(params["mu"]), float(params["a"]), float(params["b"])
    sd = math.sqrt(float(params["sig"]))
    rng_dist = _default_range(sd, d)
    _validate(mu, a, b)

    def background(window, xfrac, yfrac):
        return homog_stpp(mu, poly, window, xfrac, yfrac, rng=gen)

    out = _run(background, a, b, sd, poly, t_region, history, rng_dist, gen)
    return _to_events(_finish(out, t_region))


def simulate_hawkes_stpp_c(mu, a, b, sig, poly, t_region, history=None, sp_clip=False, rng=None) -> np.ndarray:
    """Simulate a uniform-background process; returns an (n, 3) array of x, y, t.

    With ``sp_clip`` events outside the polygon are dropped.
    """
    gen = make_rng(rng)
    sd = math.sqrt(sig)
    _validate(mu, a, b)
    rng_dist = NormalDist(0.0, sd).inv_cdf(0.95)

    def background(window, xfrac, yfrac):
        return homog_stpp(mu, poly, window, xfrac, yfrac, rng=gen)

    out = _run(background, a, b, sd, poly, t_region, history, rng_dist, gen)
    if out.shape[0] == 0:
        return np.empty((0, 3))
    return _finish(out, t_region, poly if sp_clip else None)[:, :3]


def simulate_hawkes_stpp_nonunif(params, poly, t_region, d=None, history=None, rng=None) -> SimulatedEvents:
    """Simulate a spatio-temporal Hawkes process with Gaussian background.

    ``params`` holds ``mu``, ``a``, ``b``, ``sig``, ``mux``, ``muy``, ``sigx``
    and ``sigy``; the ``sig*`` values are variances.
    """
    gen = make_rng(rng)
    mu, a, b = float(params["mu"]), float(params["a"]), float(params["b"])
    mux, muy = float(params["mux"]), float(params["muy"])
    sigx, sigy = float(params["sigx"]), float(params["sigy"])
    sd = math.sqrt(float(params["sig"]))
    rng_dist = _default_range(sd, d)
    _validate(mu, a, b)
    _validate_spread(sigx, sigy)

    def background(window, xfrac, yfrac):
        return nonunif_stpp(mu, mux, muy, sigx, sigy, poly, window, xfrac, yfrac, rng=gen)

    out = _run(background, a, b, sd, poly, t_region, history, rng_dist, gen)
    return _to_events(_finish(out, t_region))


def simulate_hawkes_nonunif_stpp_c(
    mu, a, b, sig, mux, muy, sigx, sigy, poly, t_region, history=None, sp_clip=False, rng=None
) -> np.ndarray:
    """Simulate a Gaussian-background process; returns an (n, 3) array of x, y, t."""
    gen = make_rng(rng)
    sd = math.sqrt(sig)
    _validate(mu, a, b)
    _validate_spread(sigx, sigy)
    rng_dist = NormalDist(0.0, sd).inv_cdf(0.95)

    def background(window, xfrac, yfrac):
        return nonunif_stpp(mu, mux, muy, sigx, sigy, poly, window, xfrac, yfrac, rng=gen)

    out = _run(background, a, b, sd, poly, t_region, history, rng_dist, gen)
    if out.shape[0] == 0:
        return np.empty((0, 3))
    return _finish(out, t_region, poly if sp_clip else None)[:, :3]