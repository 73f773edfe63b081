"""Building blocks of MCMC samplers for temporal Hawkes processes."""

from __future__ import annotations

import math

import numpy as np

from .helpers import find_minimum_relevant_time, find_minimum_relevant_times, make_rng
from .simulate_temporal import simulate_temporal

__all__ = [
    "temporal_log_likelihood",
    "beta_posterior",
    "sample_mu",
    "sample_y",
    "sample_alpha",
    "sample_beta",
    "simulate_missing_times",
    "calculate_num_triggered",
]

_TAIL_EPSILON = 1e-15


def _accept(gen: np.random.Generator, log_ratio: float) -> bool:
    """Metropolis acceptance of a proposal with the given log ratio."""
    return bool(gen.random() < math.exp(log_ratio)) if log_ratio < 0 else log_ratio >= 0


def temporal_log_likelihood(t, mu, alpha, beta, t_max) -> float:
    """Log-likelihood of sorted event times, skipping negligible old contributions."""
    times = np.asarray(t, dtype=float)
    n = times.size
    if n == 0:
        raise ValueError("at least one event time is required")

    horizon = 36.0 / beta
    min_is = [0]
    for i in range(1, n):
        minimum_time = times[i] - horizon
        if minimum_time < 0:
            min_is.append(0)
            continue
        j = min_is[-1]
        while j < i and times[j] <= minimum_time:
            j += 1
        min_is.append(j)

    alpha_beta = alpha * beta
    part1 = math.log(mu)
    for i in range(1, n):
        temp = np.exp(-beta * (times[i] - times[min_is[i] : i])).sum()
        part1 += math.log(alpha_beta * temp + mu)

    part2 = mu * t_max

    cutoff = math.log(_TAIL_EPSILON) / beta + t_max
    min_i = find_minimum_relevant_time(times.tolist(), cutoff)
    recent = times[min_i + 1 :]
    part3 = alpha * float((1.0 - np.exp(-beta * (t_max - recent))).sum())
    part3 += max(min_i, 0) * alpha

    return part1 - part2 - part3


def beta_posterior(t, t_max, alpha, beta, beta_param, z) -> float:
    """Log posterior of the decay rate ``beta`` with a gamma prior."""
    if not alpha < beta or beta <= 0:
        return -math.inf
    times = np.asarray(t, dtype=float)
    n = times.size
    if alpha > 0:
        epsilon = t_max + (-36.0 - math.log(alpha)) / beta
        start = max(find_minimum_relevant_time(times.tolist(), epsilon), 0)
    else:
        start = 0

    loglik = float(np.exp(beta * (times[start:] - t_max)).sum())
    loglik -= n
    loglik *= alpha

    gaps = np.asarray(z, dtype=float)
    loglik += gaps.size * math.log(beta) - beta * float(gaps.sum())
    loglik += (beta_param[0] - 1) * math.log(beta) - beta * beta_param[1]
    return loglik


def sample_mu(t_max, numbackground, mu_param, rng=None) -> float:
    """Gibbs draw of the background rate from its gamma posterior."""
    gen = make_rng(rng)
    return float(gen.gamma(mu_param[0] + numbackground, 1.0 / (mu_param[1] + t_max)))


def sample_y(alpha_curr, beta_curr, mu_curr, t, rng=None) -> list[int]:
    """Draw a parent for every event: 0 for background, j + 1 for event j."""
    gen = make_rng(rng)
    times = [float(v) for v in t]
    n = len(times)
    if n == 0:
        return []
    alpha_beta = alpha_curr * beta_curr
    epsilon = 30.0 / beta_curr + math.log(alpha_beta) / beta_curr
    min_is = find_minimum_relevant_times(times, epsilon)
    arr = np.asarray(times)

    parents = [0]
    for i in range(1, n):
        probs = np.zeros(i + 1)
        probs[0] = mu_curr
        lo = min_is[i]
        probs[lo + 1 : i + 1] = alpha_beta * np.exp(-beta_curr * (arr[i] - arr[lo:i]))
        parents.append(int(gen.choice(i + 1, p=probs / probs.sum())))
    return parents


def sample_alpha(t, sum_numtriggered, t_max, beta_curr, alpha_a, alpha_b, rng=None) -> float:
    """Gamma draw of the branching ratio, constrained below 1 and below ``beta_curr``."""
    if beta_curr <= 0:
        raise ValueError("beta must be positive to sample alpha")
    gen = make_rng(rng)
    times = np.asarray(t, dtype=float)
    exponential_sum = float((1.0 - np.exp(-beta_curr * (t_max - times))).sum())
    shape = sum_numtriggered + alpha_a
    scale = 1.0 / (exponential_sum + alpha_b)
    while True:
        alpha = float(gen.gamma(shape, scale))
        if alpha < 1 and alpha < beta_curr:
            return alpha


def sample_beta(alpha_curr, beta_curr, t_max, sig_beta, t, beta_param, z, rng=None) -> float:
    """Run 100 random-walk Metropolis steps on the decay rate."""
    gen = make_rng(rng)
    bottom = beta_posterior(t, t_max, alpha_curr, beta_curr, beta_param, z)
    for _ in range(100):
        beta_prop = beta_curr + gen.normal(0.0, sig_beta)
        top = beta_posterior(t, t_max, alpha_curr, beta_prop, beta_param, z)
        if _accept(gen, top - bottom):
            beta_curr = float(beta_prop)
            bottom = top
    return beta_curr


def simulate_missing_times(times, t_missing, mu_curr, alpha_curr, beta_curr, rng=None) -> list[np.ndarray]:
    """Simulate events for every missing-data interval (one row per interval)."""
    gen = make_rng(rng)
    intervals = np.atleast_2d(np.asarray(t_missing, dtype=float))
    return [
        simulate_temporal(mu_curr, alpha_curr, beta_curr, row, times, rng=gen)
        for row in intervals
    ]


def calculate_num_triggered(t, y_curr) -> tuple[int, list[int], list[float]]:
    """Count background events and offspring per event from a branching structure.

    Returns the number of background events, the number of offspring of each
    event, and the time gap between every offspring and its parent.
    """
    times = [float(v) for v in t]
    numtriggered = [0] * len(times)
    gaps: list[float] = []
    numbackground = 0
    for time, parent in zip(times, y_curr):
        if parent > 0:
            numtriggered[parent - 1] += 1
            gaps.append(time - times[parent - 1])
        else:
            numbackground += 1
    return numbackground, numtriggered, gaps