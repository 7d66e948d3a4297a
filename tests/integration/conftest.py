"""
Shared fixtures for integration tests.
"""

import pytest
import numpy as np

from moneat.run.config     import Config
from moneat.run.experiment import Experiment


XOR_INPUTS  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
XOR_OUTPUTS = [0.0, 1.0, 1.0, 0.0]


class XORExperiment(Experiment):
    """
    Two objectives, both minimized: the squared XOR error and the number of
    links of the network.
    """

    def _evaluate_phenotype(self, phenotype):
        error = 0.0
        for inputs, expected in zip(XOR_INPUTS, XOR_OUTPUTS):
            phenotype.reset()
            error += (phenotype.activate(inputs)[0] - expected) ** 2
        return [error, float(len(phenotype.links))]


@pytest.fixture(autouse=True)
def set_random_seeds():
    """Set random seeds for reproducibility."""
    import random

    np.random.seed(42)
    random.seed(42)

    yield

    np.random.seed(None)
    random.seed(None)


@pytest.fixture
def xor_experiment():
    """XOR experiment for registry-based networks (with bias)."""
    return XORExperiment(1, 2, 1)


@pytest.fixture
def xor_experiment_no_bias():
    """XOR experiment for Cantor-encoded networks."""
    return XORExperiment(2, 2, 1, bias=False)


@pytest.fixture
def small_config(tmp_path):
    """Small population and budget, exporting into a temporary directory."""
    config = Config()
    config.population_size = 12
    config.max_evaluations = 150
    config.output_dir      = str(tmp_path)
    return config
