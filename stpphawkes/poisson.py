"""Background Poisson processes in space and time."""

from __future__ import annotations

import numpy as np

from .helpers import make_rng
from .polygon import larger_region

__all__ = ["homog_stpp", "nonunif_stpp"]


def _time_window(t_region) -> tuple[float, float]:
    region = np.sort(np.asarray(t_region, dtype=float))
    if region.shape != (2,):
        raise ValueError("t_region must hold exactly two values")
    return float(region[0]), float(region[1])


def homog_stpp(mu, poly, t_region, xfrac, yfrac, rng=None) -> np.ndarray:
    """Homogeneous Poisson events on an enlarged box around ``poly``.

    Returns an (n, 3) array of x, y and t, sorted by time; the number of
    events is Poisson with mean ``mu`` times the length of the time window.
    """
    gen = make_rng(rng)
    lr = larger_region(poly, xfrac, yfrac)
    t0, t1 = _time_window(t_region)
    npts = gen.poisson(mu * (t1 - t0))
    x = gen.uniform(lr[0, 0], lr[1, 0], npts)
    y = gen.uniform(lr[0, 1], lr[1, 1], npts)
    times = np.sort(gen.uniform(t0, t1, npts))
    return np.column_stack([x, y, times])


def nonunif_stpp(mu, mux, muy, sigx, sigy, poly, t_region, xfrac, yfrac, rng=None) -> np.ndarray:
    """Poisson events with Gaussian locations centred on ``(mux, muy)``.

    ``sigx`` and ``sigy`` are variances. Returns an (n, 3) array of x, y and t
    sorted by time.
    """
    gen = make_rng(rng)
    t0, t1 = _time_window(t_region)
    npts = gen.poisson(mu * (t1 - t0))
    x = gen.normal(mux, np.sqrt(sigx), npts)
    y = gen.normal(muy, np.sqrt(sigy), npts)
    times = np.sort(gen.uniform(t0, t1, npts))
    return np.column_stack([x, y, times])