"""Simulation, likelihoods and MCMC samplers for temporal and spatio-temporal Hawkes processes."""

__version__ = "0.1.0"