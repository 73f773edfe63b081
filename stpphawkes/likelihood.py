"""Log-likelihoods of temporal and spatio-temporal Hawkes processes."""

from __future__ import annotations

import math

import numpy as np

__all__ = [
    "gamma_k",
    "gamma_i",
    "temporal_likelihood",
    "stpp_likelihood",
    "stpp_likelihood_nonunif",
]

_TINY_BACKGROUND = 1e-200


def gamma_k(x, y, sig):
    """Isotropic Gaussian triggering kernel with variance ``sig``."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    return 1.0 / (2.0 * math.pi * sig) * np.exp(-(x * x + y * y) / (2.0 * sig))


def gamma_i(x, y, mux, muy, sigx, sigy):
    """Axis-aligned Gaussian background density centred on ``(mux, muy)``."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    sigxy = math.sqrt(sigx * sigy)
    quad = (x - mux) ** 2 / sigx + (y - muy) ** 2 / sigy
    return 1.0 / (2.0 * math.pi * sigxy) * np.exp(-quad / 2.0)


def _triggering(t: np.ndarray, beta: float) -> np.ndarray:
    """Matrix of ``beta * exp(-beta * (t_i - t_j))`` for every earlier event j."""
    dt = t[:, None] - t[None, :]
    earlier = dt > 0
    if beta <= 0:
        return np.zeros_like(dt)
    return np.where(earlier, beta * np.exp(-beta * np.where(earlier, dt, 0.0)), 0.0)


def _sum_log(values: np.ndarray) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.log(values).sum())


def _compensator(t: np.ndarray, beta: float, t_max: float) -> float:
    return float((1.0 - np.exp(-beta * (t_max - t))).sum())


def temporal_likelihood(t, mu, alpha, beta, t_max) -> float:
    """Log-likelihood of event times under an exponential Hawkes process."""
    times = np.asarray(t, dtype=float)
    intensity = mu + alpha * _triggering(times, beta).sum(axis=1)
    return _sum_log(intensity) - mu * t_max - alpha * _compensator(times, beta, t_max)


def stpp_likelihood(x, y, t, area, mu, a, b, sig, t_max) -> float:
    """Log-likelihood of a spatio-temporal Hawkes process with uniform background.

    ``area`` is the area of the observation window.
    """
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    times = np.asarray(t, dtype=float)
    spatial = gamma_k(xs[:, None] - xs[None, :], ys[:, None] - ys[None, :], sig)
    excitation = (_triggering(times, b) * spatial).sum(axis=1)
    intensity = mu / area + a * excitation
    return _sum_log(intensity) - mu * t_max - a * _compensator(times, b, t_max)


def stpp_likelihood_nonunif(x, y, t, mu, a, b, sig, mux, muy, sigx, sigy, t_max) -> float:
    """Log-likelihood of a spatio-temporal Hawkes process with Gaussian background."""
    xs = np.asarray(x, dtype=float)
    ys = np.asarray(y, dtype=float)
    times = np.asarray(t, dtype=float)
    background = mu * gamma_i(xs, ys, mux, muy, sigx, sigy)
    background = np.where(background == 0, _TINY_BACKGROUND, background)
    spatial = gamma_k(xs[:, None] - xs[None, :], ys[:, None] - ys[None, :], sig)
    excitation = (_triggering(times, b) * spatial).sum(axis=1)
    intensity = background + a * excitation
    return _sum_log(intensity) - mu * t_max - a * _compensator(times, b, t_max)