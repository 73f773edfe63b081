"""MCMC building blocks for spatio-temporal Hawkes processes with Gaussian background.

Background events are spread as an axis-aligned Gaussian centred on
``(mux, muy)`` with variances ``sigx`` and ``sigy``. Offspring follow an
exponential kernel in time and an isotropic Gaussian kernel in space.
"""

from __future__ import annotations

import math

import numpy as np

from . import spatio_temporal as _common
from .helpers import make_rng

__all__ = [
    "sample_mu",
    "sample_a_accumulate",
    "sample_a",
    "sample_b",
    "sample_muxy",
    "sample_sigxy",
    "sample_y",
    "b_posterior",
    "sig_posterior",
    "sample_sig",
    "missing_data_log_lik",
]


def sample_mu(t_max, numbackground, mu_param, rng=None) -> float:
    """Gibbs draw of the background rate from its gamma posterior."""
    return _common.sample_mu(t_max, numbackground, mu_param, rng)


def sample_a_accumulate(t, t_max, b_curr) -> float:
    """Sum of ``1 - exp(-b * (t_max - t_i))`` over all event times."""
    return _common.sample_a_accumulate(t, t_max, b_curr)


def sample_a(t, z_t, t_max, a_curr, b_curr, a_param, rng=None) -> float:
    """Gibbs draw of the branching ratio from its gamma posterior."""
    return _common.sample_a(t, z_t, t_max, a_curr, b_curr, a_param, rng)


def b_posterior(t, t_max, a, b, z_t, b_param) -> float:
    """Log posterior of the temporal decay ``b`` given offspring time gaps ``z_t``."""
    return _common.b_posterior(t, t_max, a, b, z_t, b_param)


def sample_b(t, z_t, t_max, a_curr, b_curr, sig_b, b_params, rng=None) -> float:
    """One Metropolis step on ``b`` with a normal proposal truncated below ``a_curr``."""
    return _common.sample_b(t, z_t, t_max, a_curr, b_curr, sig_b, b_params, rng)


def sig_posterior(sig, z_x, z_y, sig_param) -> float:
    """Log posterior of the kernel variance with an inverse-gamma prior."""
    return _common.sig_posterior(sig, z_x, z_y, sig_param)


def sample_sig(z_x, z_y, sig_curr, sig_sig, sig_param, rng=None) -> float:
    """One Metropolis step on the kernel variance with a positive normal proposal."""
    return _common.sample_sig(z_x, z_y, sig_curr, sig_sig, sig_param, rng)


def _parents_slice(xpa, nparents: int) -> np.ndarray:
    values = np.asarray(xpa, dtype=float)
    if nparents < 0 or nparents > values.size:
        raise ValueError("nparents must lie between 0 and the number of coordinates")
    return values[:nparents]


def sample_muxy(xpa, nparents, sigx, mux_params, rng=None) -> float:
    """Gibbs draw of a background centre coordinate (``mux`` or ``muy``).

    ``mux_params`` holds the normal prior mean and variance; only the first
    ``nparents`` coordinates of ``xpa`` are used.
    """
    gen = make_rng(rng)
    parents = _parents_slice(xpa, nparents)
    var = 1.0 / (1.0 / mux_params[1] + nparents / sigx)
    mean = var * (mux_params[0] / mux_params[1] + float(parents.sum()) / sigx)
    return float(gen.normal(mean, math.sqrt(var)))


def sample_sigxy(xpa, nparents, mux, sigx_params, rng=None) -> float:
    """Inverse-gamma draw of a background variance (``sigx`` or ``sigy``).

    ``sigx_params`` holds the shape and rate of the gamma distribution of the
    precision.
    """
    gen = make_rng(rng)
    parents = _parents_slice(xpa, nparents)
    sumsq = float(((parents - mux) ** 2).sum())
    draw = gen.gamma(sigx_params[0] + nparents / 2.0, 1.0 / (sigx_params[1] + sumsq / 2.0))
    return float(1.0 / draw)


def sample_y(
    t, x, y, mu_curr, a_curr, b_curr, sig_curr, mux_curr, muy_curr, sigx_curr, sigy_curr, rng=None
) -> list[int]:
    """Draw a parent for every event: 0 for background, j + 1 for event j."""
    gen = make_rng(rng)
    times = np.asarray(t, dtype=float)
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    n = times.size
    if n == 0:
        return []

    scale_factor_i = 1.0 / (2 * math.sqrt(sigx_curr * sigy_curr) * math.pi)
    one_over_two_sigx = 1.0 / (2 * sigx_curr)
    one_over_two_sigy = 1.0 / (2 * sigy_curr)
    scale_factor = a_curr * b_curr / (2 * math.pi * sig_curr)
    one_over_two_sig = 1.0 / (2 * sig_curr)

    parents = [0]
    for i in range(1, n):
        probs = np.empty(i + 1)
        quad = (
            one_over_two_sigx * (xs[i] - mux_curr) ** 2
            + one_over_two_sigy * (ys[i] - muy_curr) ** 2
        )
        probs[0] = mu_curr * scale_factor_i * math.exp(-quad)
        dist2 = (xs[i] - xs[:i]) ** 2 + (ys[i] - ys[:i]) ** 2
        probs[1:] = scale_factor * np.exp(-b_curr * (times[i] - times[:i]) - one_over_two_sig * dist2)
        total = probs.sum()
        if not total > 0:
            raise ValueError("parent probabilities must not all be zero")
        parents.append(int(gen.choice(i + 1, p=probs / total)))
    return parents


def missing_data_log_lik(x, y, t, mu, a, b, sig, mux, muy, sigx, sigy, t_max) -> float:
    """Log-likelihood of time-sorted events with a Gaussian background."""
    times = np.asarray(t, dtype=float)
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    if times.size == 0:
        raise ValueError("at least one event is required")

    mu_str = mu / (2 * math.sqrt(sigx * sigy) * math.pi)
    one_over_two_sigx = 1.0 / (2 * sigx)
    one_over_two_sigy = 1.0 / (2 * sigy)
    scale_factor = a * b / (2 * sig * math.pi)
    one_over_two_sig = 1.0 / (2 * sig)

    def background_quad(i: int) -> float:
        return one_over_two_sigx * (xs[i] - mux) ** 2 + one_over_two_sigy * (ys[i] - muy) ** 2

    part1 = math.log(mu_str) - background_quad(0)
    for i in range(1, times.size):
        temp0 = math.exp(-background_quad(i))
        dist2 = (xs[i] - xs[:i]) ** 2 + (ys[i] - ys[:i]) ** 2
        temp = float(np.exp(-b * (times[i] - times[:i]) - one_over_two_sig * dist2).sum())
        part1 += math.log(mu_str * temp0 + scale_factor * temp)

    part2 = mu * t_max
    part3 = a * float((1.0 - np.exp(-b * (t_max - times))).sum())
    return part1 - part2 - part3