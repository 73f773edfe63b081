"""Building blocks of MCMC samplers for spatio-temporal Hawkes processes.

The background is uniform over an observation window of a given area and the
triggering kernel is exponential in time and isotropic Gaussian in space.
"""

from __future__ import annotations

import math

import numpy as np

from .helpers import make_rng, normal_cdf

__all__ = [
    "gamma_k",
    "sample_mu",
    "sample_a_accumulate",
    "sample_a",
    "sample_b",
    "sample_y",
    "b_posterior",
    "sig_posterior",
    "sample_sig",
    "sample_sig_gibbs",
    "missing_data_log_lik",
]


def _ratio(log_ratio: float, factor: float = 1.0) -> float:
    """``exp(log_ratio) * factor`` without raising on overflow."""
    with np.errstate(over="ignore", invalid="ignore"):
        return float(np.exp(log_ratio)) * factor


def _draw_parent(gen: np.random.Generator, probs: np.ndarray) -> int:
    total = probs.sum()
    if not total > 0:
        raise ValueError("parent probabilities must not all be zero")
    return int(gen.choice(probs.size, p=probs / total))


def gamma_k(x, y, sig):
    """Isotropic Gaussian spatial kernel with variance ``sig``."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    one_over_two_sig = 0.5 / sig
    value = one_over_two_sig / math.pi * np.exp(-(xs * xs + ys * ys) * one_over_two_sig)
    return float(value) if value.ndim == 0 else value


def sample_mu(t_max, numbackground, mu_param, rng=None) -> float:
    """Gibbs draw of the background rate from its gamma posterior."""
    gen = make_rng(rng)
    return float(gen.gamma(mu_param[0] + numbackground, 1.0 / (mu_param[1] + t_max)))


def sample_a_accumulate(t, t_max, b_curr) -> float:
    """Sum of ``1 - exp(-b * (t_max - t_i))`` over all event times."""
    times = np.asarray(t, dtype=float)
    return float(times.size - np.exp(-b_curr * (t_max - times)).sum())


def sample_a(t, z_t, t_max, a_curr, b_curr, a_param, rng=None) -> float:
    """Gibbs draw of the branching ratio from its gamma posterior."""
    gen = make_rng(rng)
    ba = sample_a_accumulate(t, t_max, b_curr)
    return float(gen.gamma(a_param[0] + len(z_t), 1.0 / (a_param[1] + ba)))


def b_posterior(t, t_max, a, b, z_t, b_param) -> float:
    """Log posterior of the temporal decay ``b`` given offspring time gaps ``z_t``."""
    if b < a:
        return -math.inf
    times = np.asarray(t, dtype=float)
    gaps = np.asarray(z_t, dtype=float)
    loglik = -a * (times.size - float(np.exp(-b * (t_max - times)).sum()))
    loglik += gaps.size * math.log(b) - b * float(gaps.sum())
    loglik += (b_param[0] - 1) * math.log(b) - b * b_param[1]
    return loglik


def sample_b(t, z_t, t_max, a_curr, b_curr, sig_b, b_params, rng=None) -> float:
    """One Metropolis step on ``b`` with a normal proposal truncated below ``a_curr``."""
    gen = make_rng(rng)
    bottom = b_posterior(t, t_max, a_curr, b_curr, z_t, b_params)
    b_prop = b_curr + gen.normal(0.0, sig_b)
    while b_prop < a_curr:
        b_prop = b_curr + gen.normal(0.0, sig_b)
    top = b_posterior(t, t_max, a_curr, b_prop, z_t, b_params)
    correction = (1 - normal_cdf(a_curr - b_curr / sig_b)) / (1 - normal_cdf(a_curr - b_prop / sig_b))
    if gen.random() < _ratio(top - bottom, correction):
        return float(b_prop)
    return b_curr


def sample_y(t, x, y, mu_curr, a_curr, b_curr, sig_curr, area, rng=None) -> list[int]:
    """Draw a parent for every event: 0 for background, j + 1 for event j."""
    gen = make_rng(rng)
    times = np.asarray(t, dtype=float)
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    n = times.size
    if n == 0:
        return []
    scale_factor = a_curr * b_curr / (2 * math.pi * sig_curr)
    one_over_two_sig = 1.0 / (2 * sig_curr)
    background = mu_curr / area

    parents = [0]
    for i in range(1, n):
        dist2 = (xs[i] - xs[:i]) ** 2 + (ys[i] - ys[:i]) ** 2
        probs = np.empty(i + 1)
        probs[0] = background
        probs[1:] = scale_factor * np.exp(-b_curr * (times[i] - times[:i]) - one_over_two_sig * dist2)
        parents.append(_draw_parent(gen, probs))
    return parents


def sig_posterior(sig, z_x, z_y, sig_param) -> float:
    """Log posterior of the kernel variance with an inverse-gamma prior."""
    zx = np.asarray(z_x, dtype=float)
    zy = np.asarray(z_y, dtype=float)
    loglik = -float((zx * zx + zy * zy).sum()) / (2 * sig)
    loglik += zx.size * math.log(1 / (2 * math.pi * sig))
    loglik += (-sig_param[0] - 1) * math.log(sig) - sig / sig_param[1]
    return loglik


def sample_sig(z_x, z_y, sig_curr, sig_sig, sig_param, rng=None) -> float:
    """One Metropolis step on the kernel variance with a positive normal proposal."""
    gen = make_rng(rng)
    bottom = sig_posterior(sig_curr, z_x, z_y, sig_param)
    sig_prop = sig_curr + gen.normal(0.0, sig_sig)
    while sig_prop < 0:
        sig_prop = sig_curr + gen.normal(0.0, sig_sig)
    top = sig_posterior(sig_prop, z_x, z_y, sig_param)
    correction = (1 - normal_cdf(-sig_curr / sig_sig)) / (1 - normal_cdf(-sig_prop / sig_sig))
    if gen.random() < _ratio(top - bottom, correction):
        return float(sig_prop)
    return sig_curr


def sample_sig_gibbs(z_x, z_y, sig_curr, sig_param, rng=None) -> float:
    """Gibbs draw of the kernel variance from its inverse-gamma posterior."""
    gen = make_rng(rng)
    zx = np.asarray(z_x, dtype=float)
    zy = np.asarray(z_y, dtype=float)
    sumsq = float((zx * zx + zy * zy).sum())
    draw = gen.gamma(sig_param[0] + zx.size, 1.0 / (sig_param[1] + sumsq / 2.0))
    return float(1.0 / draw)


def missing_data_log_lik(x, y, t, mu, a, b, sig, t_max, area) -> float:
    """Log-likelihood of sorted events with a uniform background over ``area``."""
    times = np.asarray(t, dtype=float)
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    mu_str = mu / area
    scale_factor = a * b / (2 * sig * math.pi)
    one_over_two_sig = 1.0 / (2 * sig)

    part1 = math.log(mu_str)
    for i in range(1, times.size):
        dist2 = (xs[i] - xs[:i]) ** 2 + (ys[i] - ys[:i]) ** 2
        temp = float(np.exp(-b * (times[i] - times[:i]) - one_over_two_sig * dist2).sum())
        part1 += math.log(mu_str + scale_factor * temp)

    part2 = mu * t_max
    part3 = a * float((1.0 - np.exp(-b * (t_max - times))).sum())
    return part1 - part2 - part3