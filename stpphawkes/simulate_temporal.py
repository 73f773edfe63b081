"""Simulation of temporal Hawkes processes with exponential decay."""

from __future__ import annotations

import math

import numpy as np

from .helpers import make_rng

__all__ = ["intensity_temporal", "simulate_temporal"]


def intensity_temporal(mu, alpha, beta, times, evalpt) -> float:
    """Conditional intensity at ``evalpt`` given the event history ``times``."""
    history = np.asarray(times, dtype=float)
    past = history[history <= evalpt]
    return float(mu + alpha * np.exp(-beta * (evalpt - past)).sum())


def _open_unit(gen: np.random.Generator) -> float:
    """Uniform draw on (0, 1], safe to take the logarithm of."""
    return 1.0 - gen.random()


def simulate_temporal(mu, alpha, beta, tt, times=(), rng=None) -> np.ndarray:
    """Simulate arrival times on the window ``tt`` by Ogata thinning.

    ``alpha`` is the branching ratio and must not exceed ``beta``. Events in
    ``times`` at or before the window start are used as history.
    """
    if alpha > beta:
        raise ValueError("Unstable. You must have alpha < beta")
    alpha *= beta
    gen = make_rng(rng)

    t_start, t_max = float(tt[0]), float(tt[1])
    history = np.asarray(times, dtype=float)
    arrivals: list[float] = []

    if history.size == 0 or history.min() > t_start:
        s = -math.log(_open_unit(gen)) / mu
        if s > t_max:
            return np.empty(0)
        last = s
        dlambda = alpha
        arrivals.append(s)
    else:
        idx = int(np.flatnonzero(history <= t_start)[-1])
        s = last = float(history[idx])
        dlambda = alpha
        for prev, cur in zip(history[:idx], history[1 : idx + 1]):
            dlambda = alpha + dlambda * math.exp(-beta * (cur - prev))

    while s < t_max:
        lambda_star = mu + dlambda * math.exp(-beta * (s - last))
        s -= math.log(_open_unit(gen)) / lambda_star
        if s > t_max:
            break
        decayed = dlambda * math.exp(-beta * (s - last))
        if gen.random() <= (mu + decayed) / lambda_star:
            dlambda = alpha + decayed
            last = s
            arrivals.append(s)

    out = np.asarray(arrivals, dtype=float)
    inside = np.flatnonzero(out >= t_start)
    return out[inside[0]:] if inside.size else out