# stpphawkes

Tools for temporal and spatio-temporal Hawkes processes with an exponential
temporal triggering kernel and a Gaussian spatial triggering kernel.

## What is in the package

- `stpphawkes.simulate_temporal`: `simulate_temporal` simulates arrival
  times on a time window by thinning, optionally continuing from a history
  of earlier events; `intensity_temporal` evaluates the conditional
  intensity at a point.
- `stpphawkes.simulate_stpp`: spatio-temporal simulation over a polygon,
  generation by generation of offspring, with a uniform background
  (`simulate_hawkes_stpp`, `simulate_hawkes_stpp_c`) or a Gaussian
  background (`simulate_hawkes_stpp_nonunif`,
  `simulate_hawkes_nonunif_stpp_c`). The first form of each returns a
  `SimulatedEvents` dataclass with arrays `x`, `y`, `t` and the generation
  `z` (0 for background events), and an `as_array()` method; the `_c` forms
  return an `(n, 3)` array of x, y, t and can clip events to the polygon
  with `sp_clip=True`.
- `stpphawkes.poisson`: homogeneous (`homog_stpp`) and Gaussian-located
  (`nonunif_stpp`) Poisson background catalogues, as `(n, 3)` arrays sorted
  by time.
- `stpphawkes.likelihood`: log-likelihoods `temporal_likelihood`,
  `stpp_likelihood` (uniform background over a window of given area) and
  `stpp_likelihood_nonunif`, plus the kernels `gamma_k` and `gamma_i`.
- Update steps for Bayesian estimation:
  - `stpphawkes.temporal_common`: `temporal_log_likelihood`,
    `beta_posterior`, Gibbs draws `sample_mu`, `sample_alpha`, parent
    (branching structure) draws `sample_y`, the Metropolis step
    `sample_beta`, `simulate_missing_times` and `calculate_num_triggered`.
  - `stpphawkes.spatio_temporal` and `stpphawkes.spatio_temporal_nonunif`:
    the corresponding steps for spatio-temporal models with uniform and
    Gaussian background, including the kernel variance (`sample_sig`,
    `sample_sig_gibbs`) and, for the Gaussian background, its centre and
    spread (`sample_muxy`, `sample_sigxy`).
  - `stpphawkes.marks`: categorical marks (`count_marks`, `sample_p`),
    a decay-rate step (`sample_beta`) and the Weibull scale
    (`sample_wscale`).
- Complete samplers:
  - `stpphawkes.temporal_md.condint_mcmc_temporal_md` estimates `mu`,
    `alpha` and `beta` while imputing events in one missing interval and
    returns a `MissingDataSamples` dataclass.
  - `stpphawkes.marks_mcmc.cat_mark_mcmc`, `cat_mark_mcmc_missing_data`
    and `weibull_mark_mcmc` handle categorical or Weibull marks (the first
    two also with several missing intervals) and return a `MarkSamples`
    dataclass.
- `stpphawkes.polygon`: bounding boxes (`bbox`, `sbox`, `larger_region`,
  `bboxx`, `buffer_region`), `point_in_polygon` (-1 inside, 0 on the
  boundary, 1 outside) and `inout`, a boolean mask of points inside a
  polygon.
- `stpphawkes.helpers`: sorting and merging helpers, the triggering
  functions `beta_tk` and `big_beta_tk`, `normal_cdf` and `make_rng`.

Every function that draws random numbers takes an `rng` argument: a
`numpy.random.Generator`, an integer seed, or `None` (or -1) for fresh
entropy. Pass a seeded generator to reproduce results. The samplers can
print a percentage counter to standard error (`show_progress`).

## Installation

```
pip install .
```

## Example

```python
import numpy as np
from stpphawkes.simulate_temporal import simulate_temporal
from stpphawkes.likelihood import temporal_likelihood

rng = np.random.default_rng(1)
times = simulate_temporal(0.5, 0.1, 0.5, [0.0, 10.0], [], rng)
print(temporal_likelihood(times, 0.5, 0.1, 0.5, 10.0))
```

Point-in-polygon:

```python
import numpy as np
from stpphawkes.polygon import inout

square = np.array([[0, 0], [1, 0], [1, 1], [0, 1]], dtype=float)
print(inout([0.5, 2.0], [0.5, 2.0], square, True))  # [ True False]
```

## What it does not do

The package is a library only: it has no command-line tool, does no
plotting and reads or writes no data files. Results come back as NumPy
arrays and dataclasses for you to store or summarise yourself.

## Running the tests

```
pip install .[test]
pytest
```