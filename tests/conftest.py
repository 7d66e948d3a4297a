"""Pytest configuration and shared fixtures."""

import random

import numpy as np
import pytest

from moneat.genotype.innovation       import InnovationRegistry
from moneat.genotype.network_genotype import NetworkGenotype
from moneat.run.config                import Config


@pytest.fixture
def default_config():
    """A Config holding the default value of every parameter."""
    return Config()


@pytest.fixture
def registry():
    """Registry of 2 inputs (0, 1), 1 output (2) and a bias (3)."""
    return InnovationRegistry(2, 1, True)


@pytest.fixture
def registry_no_bias():
    """Registry of 2 inputs (0, 1) and 2 outputs (2, 3)."""
    return InnovationRegistry(2, 2, False)


@pytest.fixture
def minimal_genotype(registry):
    """Fully connected minimal genome on 'registry' with weights in [-1, 1]."""
    random.seed(1)
    np.random.seed(1)
    return NetworkGenotype.create_minimal(registry, 0, 1.0)
