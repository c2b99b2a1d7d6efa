"""Pytest configuration for turing-lab test suite."""

import numpy as np
import pytest

from turinglab.models.activator_substrate import ModelParameters


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def reference_params():
    """Coefficients used throughout the 3x3 uniform-field scenario."""
    return ModelParameters(
        d_a=0.005,
        d_b=0.2,
        rho_a=0.01,
        rho_b=0.02,
        mu_a=0.01,
        mu_b=0.02,
        k_a=0.25,
        sigma_a=0.0,
        sigma_b=0.0,
    )
