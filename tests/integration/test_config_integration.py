"""
Integration tests for the configuration system.

These tests verify that values loaded from a configuration file reach the
algorithms' parameters and control their behavior.
"""

import pytest

from moneat.run.config     import Config
from moneat.run.neat       import NEAT, NNEAT
from moneat.run.parameters import Parameter
from moneat.sorting        import Hypervolume, NondominatedRanking


CONFIG_TEXT = """
[EXPERIMENT]
num_inputs  = 2
num_outputs = 1
bias        = true

[POPULATION]
population_size = 8
max_evaluations = 40

[VARIATION]
prb_add_link   = 0.2
prb_add_neuron = 0.1

[SELECTION]
replacement_rate = 0.25

[OUTPUT]
output_dir = {output_dir}
"""


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / 'run.ini'
    path.write_text(CONFIG_TEXT.format(output_dir=tmp_path / 'results'))
    return str(path)


class TestConfigIntegration:

    def test_parameters_from_file(self, config_file, xor_experiment):
        config    = Config(config_file)
        algorithm = NNEAT(xor_experiment, config, NondominatedRanking(Hypervolume()))
        algorithm.initialize()

        assert algorithm.get_as_int(Parameter.Population_Size) == 8
        assert algorithm.get(Parameter.Prb_Add_Link) == 0.2
        assert algorithm.get(Parameter.Replacement_Rate) == 0.25
        assert len(algorithm.population) == 8

    def test_replacement_rate_controls_offspring(self, config_file, xor_experiment):
        config    = Config(config_file)
        algorithm = NNEAT(xor_experiment, config, NondominatedRanking(Hypervolume()))
        algorithm.initialize()
        algorithm.epoch()

        assert algorithm.evaluations == 10

    def test_run_exports_into_output_dir(self, config_file, xor_experiment, tmp_path):
        config    = Config(config_file)
        algorithm = NEAT(xor_experiment, config, NondominatedRanking(Hypervolume()))
        algorithm.run()

        assert algorithm.evaluations >= 40
        assert (tmp_path / 'results' / f"{algorithm.uuid}.xml").exists()
