"""MCMC estimation of temporal Hawkes processes with categorical or Weibull marks."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from .helpers import insert_simulated_times, make_rng
from .marks import sample_beta as sample_mark_beta
from .marks import sample_p, sample_wscale
from .simulate_temporal import simulate_temporal
from .temporal_common import (
    calculate_num_triggered,
    sample_alpha,
    sample_mu,
    sample_y,
    simulate_missing_times,
    temporal_log_likelihood,
)

__all__ = [
    "MarkSamples",
    "initialize_marks",
    "sample_mark",
    "sample_z",
    "cat_mark_mcmc",
    "cat_mark_mcmc_missing_data",
    "weibull_mark_mcmc",
]


@dataclass
class MarkSamples:
    """Posterior draws kept after burn-in.

    ``p`` holds one row of mark probabilities per draw, ``z`` the number of
    imputed events per draw and ``wscale`` the Weibull scale per draw; each is
    ``None`` when the sampler does not estimate it. ``imputed_marks`` holds the
    marks drawn for the imputed events of the last iteration.
    """

    mu: np.ndarray
    alpha: np.ndarray
    beta: np.ndarray
    p: np.ndarray | None = None
    z: np.ndarray | None = None
    wscale: np.ndarray | None = None
    imputed_marks: list[int] | None = None

    def __len__(self) -> int:
        return int(self.mu.size)


class _Progress:
    """Percentage counter written to standard error."""

    def __init__(self, total: int, enabled: bool) -> None:
        self.total = total
        self.enabled = enabled
        self.step = max(total // 100, 1)
        self.done = 0

    def __enter__(self) -> _Progress:
        return self

    def increment(self) -> None:
        self.done += 1
        if self.enabled and (self.done % self.step == 0 or self.done == self.total):
            print(f"\r{100 * self.done // self.total}%", end="", file=sys.stderr, flush=True)

    def __exit__(self, *exc) -> None:
        if self.enabled:
            print(file=sys.stderr)


def _check_iterations(n_mcmc: int, n_burn: int) -> None:
    if not 0 <= n_burn < n_mcmc:
        raise ValueError("n_burn must be at least 0 and smaller than n_mcmc")


def _accept(gen: np.random.Generator, log_ratio: float) -> bool:
    u = gen.random()
    with np.errstate(over="ignore", invalid="ignore"):
        ratio = float(np.exp(log_ratio))
    return u < ratio


def _multinomial(z_curr: Sequence[float], p_curr: Sequence[float], gen: np.random.Generator) -> np.ndarray:
    probs = np.asarray(p_curr, dtype=float)
    if probs.ndim != 1 or probs.size == 0:
        raise ValueError("p_curr must be a non-empty vector of probabilities")
    total = probs.sum()
    if not total > 0:
        raise ValueError("mark probabilities must not all be zero")
    return gen.multinomial(len(z_curr), probs / total)


def initialize_marks(z_curr, p_curr, rng=None) -> list[int]:
    """Multinomial counts of marks among the imputed events ``z_curr``."""
    gen = make_rng(rng)
    return [int(c) for c in _multinomial(z_curr, p_curr, gen)]


def sample_mark(z_curr, p_curr, rng=None) -> list[int]:
    """Draw a mark (0-based label) for each imputed event, in random order."""
    gen = make_rng(rng)
    counts = _multinomial(z_curr, p_curr, gen)
    marks = np.repeat(np.arange(counts.size), counts)
    gen.shuffle(marks)
    return [int(m) for m in marks]


def sample_z(t, z_currs, t_mis, t_max, mu_curr, alpha_curr, beta_curr, rng=None) -> list[np.ndarray]:
    """Redraw the imputed events of every missing interval by Metropolis-Hastings.

    Intervals are visited in order; each accepted proposal is used when the
    following intervals are updated.
    """
    gen = make_rng(rng)
    times = np.asarray(t, dtype=float)
    intervals = np.atleast_2d(np.asarray(t_mis, dtype=float))
    current = [np.asarray(z, dtype=float) for z in z_currs]
    if len(current) != intervals.shape[0]:
        raise ValueError("z_currs must hold one set of events per missing interval")

    simulate = alpha_curr * beta_curr < beta_curr
    for k, (start, end) in enumerate(intervals):
        if simulate:
            z_prop = simulate_temporal(mu_curr, alpha_curr, beta_curr, (start, end), times, rng=gen)
        else:
            z_prop = current[k]

        before = np.flatnonzero(times <= start)
        idx = int(before[-1]) if before.size else 0
        head = times[: idx + 1]

        t_prop = np.sort(np.concatenate([times, *current[:k], *current[k + 1 :], z_prop]))
        t_curr = np.sort(np.concatenate([times, *current]))
        t_prop_sub = np.sort(np.concatenate([head, *current[:k], z_prop]))
        t_curr_sub = np.sort(np.concatenate([head, *current[: k + 1]]))

        top = temporal_log_likelihood(t_prop, mu_curr, alpha_curr, beta_curr, t_max) + temporal_log_likelihood(
            t_curr_sub, mu_curr, alpha_curr, beta_curr, float(end)
        )
        bottom = temporal_log_likelihood(t_curr, mu_curr, alpha_curr, beta_curr, t_max) + temporal_log_likelihood(
            t_prop_sub, mu_curr, alpha_curr, beta_curr, float(end)
        )
        if _accept(gen, top - bottom):
            current[k] = np.array(z_prop, dtype=float)
    return current


def _hawkes_step(times, state, t_max, mu_params, alpha_param, beta_param, sig_beta, gen):
    """One Gibbs sweep over the branching structure, ``mu``, ``alpha`` and ``beta``."""
    mu_curr, alpha_curr, beta_curr = state
    y_curr = sample_y(alpha_curr, beta_curr, mu_curr, times, rng=gen)
    numbackground, numtriggered, gaps = calculate_num_triggered(times, y_curr)
    return y_curr, numbackground, numtriggered, gaps


def cat_mark_mcmc(
    t,
    t_max,
    marks,
    mu_init,
    alpha_init,
    beta_init,
    mu_params,
    alpha_param,
    beta_param,
    p_param,
    sig_beta,
    n_mcmc=10_000,
    n_burn=5_000,
    show_progress=True,
    rng=None,
) -> MarkSamples:
    """Posterior sampling for a temporal Hawkes process with categorical marks.

    Marks are labelled 1..K where K is the length of ``p_param``, the
    Dirichlet prior of the mark probabilities.
    """
    _check_iterations(n_mcmc, n_burn)
    gen = make_rng(rng)
    times = [float(v) for v in t]
    alpha_a, alpha_b = alpha_param[0], alpha_param[1]
    beta_a, beta_b = beta_param[0], beta_param[1]
    mu_curr, alpha_curr, beta_curr = float(mu_init), float(alpha_init), float(beta_init)

    draws = np.empty((n_mcmc, 3))
    p_draws = np.empty((n_mcmc, len(p_param)))
    with _Progress(n_mcmc, show_progress) as progress:
        for it in range(n_mcmc):
            y_curr = sample_y(alpha_curr, beta_curr, mu_curr, times, rng=gen)
            numbackground, numtriggered, gaps = calculate_num_triggered(times, y_curr)
            p_curr = sample_p(marks, p_param, rng=gen)
            mu_curr = sample_mu(t_max, numbackground, mu_params, rng=gen)
            alpha_curr = sample_alpha(times, len(gaps), t_max, beta_curr, alpha_a, alpha_b, rng=gen)
            beta_curr = sample_mark_beta(
                alpha_curr, beta_curr, t_max, sig_beta, times, gaps, numtriggered, beta_a, beta_b, rng=gen
            )
            draws[it] = (mu_curr, alpha_curr, beta_curr)
            p_draws[it] = p_curr
            progress.increment()

    kept = draws[n_burn:]
    return MarkSamples(
        mu=kept[:, 0].copy(),
        alpha=kept[:, 1].copy(),
        beta=kept[:, 2].copy(),
        p=p_draws[n_burn:].copy(),
    )


def cat_mark_mcmc_missing_data(
    t,
    t_missing,
    t_max,
    marks,
    mu_init,
    alpha_init,
    beta_init,
    p_init,
    mu_params,
    alpha_params,
    beta_params,
    p_params,
    sig_beta,
    n_mcmc=10_000,
    n_burn=5_000,
    show_progress=True,
    rng=None,
) -> MarkSamples:
    """Posterior sampling with categorical marks and events missing in ``t_missing``.

    ``t_missing`` has one row ``(start, end)`` per gap; events in the gaps are
    imputed and redrawn every iteration.
    """
    _check_iterations(n_mcmc, n_burn)
    gen = make_rng(rng)
    times = [float(v) for v in t]
    intervals = np.atleast_2d(np.asarray(t_missing, dtype=float))
    if intervals.ndim != 2 or intervals.shape[1] != 2:
        raise ValueError("t_missing must have one (start, end) row per gap")
    alpha_a, alpha_b = alpha_params[0], alpha_params[1]
    beta_a, beta_b = beta_params[0], beta_params[1]
    mu_curr, alpha_curr, beta_curr = float(mu_init), float(alpha_init), float(beta_init)
    p_curr = np.asarray(p_init, dtype=float)

    z_currs = simulate_missing_times(times, intervals, mu_curr, alpha_curr, beta_curr, rng=gen)
    z_curr = np.concatenate(z_currs) if z_currs else np.empty(0)
    mark_curr = initialize_marks(z_curr, p_curr, rng=gen)

    draws = np.empty((n_mcmc, 4))
    p_draws = np.empty((n_mcmc, len(p_params)))
    with _Progress(n_mcmc, show_progress) as progress:
        for it in range(n_mcmc):
            t_tmp = insert_simulated_times(times, z_curr.tolist())
            y_curr = sample_y(alpha_curr, beta_curr, mu_curr, t_tmp, rng=gen)
            numbackground, numtriggered, gaps = calculate_num_triggered(t_tmp, y_curr)
            mark_curr = sample_mark(z_curr, p_curr, rng=gen)
            mu_curr = sample_mu(t_max, numbackground, mu_params, rng=gen)
            alpha_curr = sample_alpha(t_tmp, len(gaps), t_max, beta_curr, alpha_a, alpha_b, rng=gen)
            beta_curr = sample_mark_beta(
                alpha_curr, beta_curr, t_max, sig_beta, t_tmp, gaps, numtriggered, beta_a, beta_b, rng=gen
            )
            p_curr = sample_p(marks, p_params, rng=gen)
            z_currs = sample_z(times, z_currs, intervals, t_max, mu_curr, alpha_curr, beta_curr, rng=gen)
            z_curr = np.concatenate(z_currs) if z_currs else np.empty(0)

            draws[it] = (mu_curr, alpha_curr, beta_curr, z_curr.size)
            p_draws[it] = p_curr
            progress.increment()

    kept = draws[n_burn:]
    return MarkSamples(
        mu=kept[:, 0].copy(),
        alpha=kept[:, 1].copy(),
        beta=kept[:, 2].copy(),
        p=p_draws[n_burn:].copy(),
        z=kept[:, 3].copy(),
        imputed_marks=mark_curr,
    )


def weibull_mark_mcmc(
    t,
    t_max,
    marks,
    wshape,
    mu_init,
    alpha_init,
    beta_init,
    wscale_init,
    mu_params,
    alpha_param,
    beta_param,
    wscale_param,
    sig_beta,
    n_mcmc=10_000,
    n_burn=5_000,
    show_progress=True,
    rng=None,
) -> MarkSamples:
    """Posterior sampling for a temporal Hawkes process with Weibull marks of known shape.

    The Weibull scale is drawn afresh from its inverse-gamma posterior each
    iteration, so ``wscale_init`` does not influence the chain.
    """
    _check_iterations(n_mcmc, n_burn)
    gen = make_rng(rng)
    times = [float(v) for v in t]
    alpha_a, alpha_b = alpha_param[0], alpha_param[1]
    beta_a, beta_b = beta_param[0], beta_param[1]
    mu_curr, alpha_curr, beta_curr = float(mu_init), float(alpha_init), float(beta_init)

    draws = np.empty((n_mcmc, 4))
    with _Progress(n_mcmc, show_progress) as progress:
        for it in range(n_mcmc):
            y_curr = sample_y(alpha_curr, beta_curr, mu_curr, times, rng=gen)
            numbackground, numtriggered, gaps = calculate_num_triggered(times, y_curr)
            wscale_curr = sample_wscale(marks, wscale_param, wshape, rng=gen)
            mu_curr = sample_mu(t_max, numbackground, mu_params, rng=gen)
            alpha_curr = sample_alpha(times, len(gaps), t_max, beta_curr, alpha_a, alpha_b, rng=gen)
            beta_curr = sample_mark_beta(
                alpha_curr, beta_curr, t_max, sig_beta, times, gaps, numtriggered, beta_a, beta_b, rng=gen
            )
            draws[it] = (mu_curr, alpha_curr, beta_curr, wscale_curr)
            progress.increment()

    kept = draws[n_burn:]
    return MarkSamples(
        mu=kept[:, 0].copy(),
        alpha=kept[:, 1].copy(),
        beta=kept[:, 2].copy(),
        wscale=kept[:, 3].copy(),
    )