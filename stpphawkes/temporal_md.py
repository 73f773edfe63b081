"""Metropolis-within-Gibbs estimation of a temporal Hawkes process with a gap in the data."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field

import numpy as np

from .helpers import make_rng
from .likelihood import temporal_likelihood
from .simulate_temporal import simulate_temporal

__all__ = ["MissingDataSamples", "condint_mcmc_temporal_md"]

_PRIOR_RATE = 0.01


@dataclass
class MissingDataSamples:
    """Posterior draws after burn-in, with the imputed events of each kept iteration."""

    mu: np.ndarray
    alpha: np.ndarray
    beta: np.ndarray
    n_missing: np.ndarray
    z_samples: list[np.ndarray] = field(default_factory=list)

    def __len__(self) -> int:
        return int(self.mu.size)


def _log_lik(t: np.ndarray, mu: float, alpha: float, beta: float, t_max: float) -> float:
    if mu > 0 and alpha > 0 and beta > 0 and t.size > 0:
        return temporal_likelihood(t, mu, alpha, beta, t_max)
    return -math.inf


def _log_exp_density(x: float) -> float:
    if x < 0:
        return -math.inf
    return math.log(_PRIOR_RATE) - _PRIOR_RATE * x


def _log_prior(mu: float, alpha: float, beta: float) -> float:
    return _log_exp_density(mu) + _log_exp_density(alpha) + _log_exp_density(beta)


def _accept(gen: np.random.Generator, log_ratio: float) -> bool:
    u = gen.random()
    with np.errstate(over="ignore", invalid="ignore"):
        ratio = float(np.exp(log_ratio))
    return u < ratio


class _Chain:
    """State of one chain: the parameters and the imputed events in the gap."""

    def __init__(self, t, t_mis, t_max, mu, alpha, beta, sigmas, gen):
        self.t = np.asarray(t, dtype=float)
        self.t_mis = np.asarray(t_mis, dtype=float)
        self.t_max = t_max
        self.params = {"mu": mu, "alpha": alpha, "beta": beta}
        self.sigmas = sigmas
        self.gen = gen
        self.z = simulate_temporal(mu, alpha, beta, self.t_mis, self.t, rng=gen)

    def _log_post(self, times: np.ndarray, params: dict) -> float:
        return _log_prior(**params) + _log_lik(times, params["mu"], params["alpha"], params["beta"], self.t_max)

    def update(self, name: str) -> None:
        proposal = dict(self.params)
        proposal[name] = float(self.gen.normal(self.params[name], self.sigmas[name]))
        times = np.sort(np.concatenate([self.t, self.z]))
        top = self._log_post(times, proposal)
        bottom = self._log_post(times, self.params)
        if _accept(self.gen, top - bottom):
            self.params = proposal

    def update_missing(self) -> None:
        mu, alpha, beta = self.params["mu"], self.params["alpha"], self.params["beta"]
        if alpha * beta < beta:
            z_prop = simulate_temporal(mu, alpha, beta, self.t_mis, self.t, rng=self.gen)
        else:
            z_prop = self.z
        before = np.flatnonzero(self.t <= self.t_mis[0])
        idx = int(before[-1]) if before.size else 0
        head = self.t[: idx + 1]

        t_prop = np.sort(np.concatenate([self.t, z_prop]))
        t_curr = np.sort(np.concatenate([self.t, self.z]))
        t_prop_sub = np.sort(np.concatenate([head, z_prop]))
        t_curr_sub = np.sort(np.concatenate([head, self.z]))
        gap_end = float(self.t_mis[1])

        top = _log_lik(t_prop, mu, alpha, beta, self.t_max) + _log_lik(t_curr_sub, mu, alpha, beta, gap_end)
        bottom = _log_lik(t_curr, mu, alpha, beta, self.t_max) + _log_lik(t_prop_sub, mu, alpha, beta, gap_end)
        if _accept(self.gen, top - bottom):
            self.z = z_prop


def condint_mcmc_temporal_md(
    t,
    t_mis,
    t_max,
    mu_init,
    alpha_init,
    beta_init,
    sig_mu,
    sig_alpha,
    sig_beta,
    n_mcmc,
    n_burn,
    show_progress=False,
    print_mc=False,
    rng=None,
) -> MissingDataSamples:
    """Sample the posterior of ``mu``, ``alpha`` and ``beta`` while imputing events in ``t_mis``.

    Each parameter gets a random-walk Metropolis step with the given proposal
    standard deviation under exponential priors; the events in the gap are
    then redrawn by simulation and accepted by a Metropolis ratio. Draws from
    the first ``n_burn`` iterations are discarded; imputed events are kept for
    iterations after ``n_burn``.
    """
    if t_max < 0:
        raise ValueError("t_max must be larger than 0")
    if not 0 <= n_burn < n_mcmc:
        raise ValueError("n_burn must be at least 0 and smaller than n_mcmc")
    gap = np.asarray(t_mis, dtype=float)
    if gap.shape != (2,):
        raise ValueError("t_mis must hold the start and end of the gap")

    gen = make_rng(rng)
    sigmas = {"mu": sig_mu, "alpha": sig_alpha, "beta": sig_beta}
    chain = _Chain(t, gap, t_max, mu_init, alpha_init, beta_init, sigmas, gen)

    draws = np.empty((n_mcmc, 4))
    z_samples: list[np.ndarray] = []
    step = max(n_mcmc // 100, 1)
    for it in range(n_mcmc):
        for name in ("mu", "alpha", "beta"):
            chain.update(name)
        chain.update_missing()
        if print_mc:
            print(f"Number of Simulated Points:{chain.z.size}")
        p = chain.params
        draws[it] = (p["mu"], p["alpha"], p["beta"], chain.z.size)
        if it > n_burn:
            z_samples.append(chain.z.copy())
        if show_progress and ((it + 1) % step == 0 or it + 1 == n_mcmc):
            print(f"\r{100 * (it + 1) // n_mcmc}%", end="", file=sys.stderr, flush=True)
    if show_progress:
        print(file=sys.stderr)

    kept = draws[n_burn:]
    return MissingDataSamples(
        mu=kept[:, 0].copy(),
        alpha=kept[:, 1].copy(),
        beta=kept[:, 2].copy(),
        n_missing=kept[:, 3].copy(),
        z_samples=z_samples,
    )