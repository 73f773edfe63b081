"""Samplers for the mark distributions of marked temporal Hawkes processes."""

from __future__ import annotations

import math
from collections import Counter

import numpy as np

from .helpers import find_minimum_relevant_time, make_rng

__all__ = [
    "beta_posterior",
    "count_marks",
    "sample_p",
    "sample_beta",
    "sample_wscale",
]


def _log_dgamma(x: float, shape: float, rate: float) -> float:
    """Log density of a gamma distribution with the given shape and rate."""
    return (shape - 1) * math.log(x) - rate * x - math.lgamma(shape) + shape * math.log(rate)


def beta_posterior(t, z, numtriggered, t_max, alpha_curr, beta, beta_a, beta_b) -> float:
    """Log posterior of the decay rate with a gamma(``beta_a``, rate ``beta_b``) prior.

    ``z`` holds the time gaps between offspring and their parents.
    """
    if not alpha_curr < beta or beta <= 0:
        return -math.inf
    times = np.asarray(t, dtype=float)
    n = times.size
    if alpha_curr > 0:
        epsilon = t_max + (-36 - math.log(alpha_curr)) / beta
        start = max(find_minimum_relevant_time(times.tolist(), epsilon), 0)
    else:
        start = 0

    loglik = float(np.exp(beta * (times[start:] - t_max)).sum())
    loglik -= n
    loglik *= alpha_curr

    gaps = np.asarray(z, dtype=float)
    loglik += math.log(beta) * gaps.size - beta * float(gaps.sum())
    return loglik + _log_dgamma(beta, beta_a, beta_b)


def count_marks(marks, kk) -> list[int]:
    """Counts of each mark label, ordered by label; labels 1..kk always appear."""
    counts = Counter({label: 0 for label in range(1, kk + 1)})
    counts.update(marks)
    return [counts[label] for label in sorted(counts)]


def sample_p(marks, p_param, rng=None) -> np.ndarray:
    """Dirichlet draw of the mark probabilities given observed marks."""
    gen = make_rng(rng)
    counts = count_marks(marks, len(p_param))
    if len(counts) != len(p_param):
        raise ValueError("marks must be labelled 1..K where K is the number of prior parameters")
    concentration = np.asarray(counts, dtype=float) + np.asarray(p_param, dtype=float)
    return gen.dirichlet(concentration)


def sample_beta(alpha_curr, beta_curr, t_max, sig_beta, t, z, numtriggered, beta_a, beta_b, rng=None) -> float:
    """Run 100 random-walk Metropolis steps on the decay rate, rejecting non-positive proposals."""
    gen = make_rng(rng)
    bottom = beta_posterior(t, z, numtriggered, t_max, alpha_curr, beta_curr, beta_a, beta_b)
    for _ in range(100):
        beta_prop = beta_curr + gen.normal(0.0, sig_beta)
        if beta_prop > 0:
            top = beta_posterior(t, z, numtriggered, t_max, alpha_curr, beta_prop, beta_a, beta_b)
            with np.errstate(over="ignore", invalid="ignore"):
                ratio = float(np.exp(top - bottom))
            if gen.random() < ratio:
                beta_curr = float(beta_prop)
                bottom = top
    return beta_curr


def sample_wscale(marks, wscale_param, wshape, rng=None) -> float:
    """Inverse-gamma draw of the Weibull scale for marks with known shape ``wshape``."""
    gen = make_rng(rng)
    values = np.asarray(marks, dtype=float)
    shape = wscale_param[0] + values.size
    rate = wscale_param[1] + float(np.power(values, wshape).sum())
    return float(1.0 / gen.gamma(shape, 1.0 / rate))