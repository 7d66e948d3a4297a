"""
Unit tests for Config class.
"""

import configparser
import pytest
import os
from moneat.run.config import Config


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture
def test_config_dir():
    """Return the directory containing test configuration files."""
    return os.path.join(os.path.dirname(__file__), 'test_configs')


# ============================================================================
# Test Config Initialization
# ============================================================================

class TestConfigInit:
    """Test Config initialization."""

    def test_init_without_file_uses_defaults(self):
        """Test that Config() without file holds every default value."""
        config = Config()

        assert config.population_size == 100
        assert config.max_evaluations == 10000
        assert config.bias is True
        assert config.output_dir == '.'

    def test_init_with_nonexistent_file_raises_error(self):
        """Test that Config with nonexistent file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Configuration file .* not found"):
            Config('nonexistent_file.ini')

    def test_init_with_minimal_config(self, test_config_dir):
        """Optional sections fall back to their defaults."""
        config = Config(os.path.join(test_config_dir, 'minimal.ini'))

        assert config.population_size == 50
        assert config.max_evaluations == 2000
        assert config.num_inputs == 2
        assert config.bias is True
        assert config.weight_mutation_range == 2.5
        assert config.speciation_coefficient == 0.5
        assert config.output_dir == '.'

    def test_missing_required_section(self, test_config_dir):
        with pytest.raises(configparser.NoSectionError):
            Config(os.path.join(test_config_dir, 'missing_population.ini'))


# ============================================================================
# Test Config Sections
# ============================================================================

class TestConfigSections:
    """Test parsing of every section of a complete file."""

    @pytest.fixture
    def config(self, test_config_dir):
        return Config(os.path.join(test_config_dir, 'full.ini'))

    def test_experiment(self, config):
        assert config.num_inputs == 3
        assert config.num_outputs == 2
        assert config.bias is False
        assert config.experiment_id == 7

    def test_variation(self, config):
        assert config.weight_mutation_range == 1.5
        assert config.prb_add_link == 0.2
        assert config.prb_remove_link == 0.01
        assert config.prb_gene_enabled_on_crossover == 0.05

    def test_selection(self, config):
        assert config.replacement_rate == 0.25
        assert config.selection_pressure == 0.6

    def test_speciation(self, config):
        assert config.maximum_stagnation == 30
        assert isinstance(config.maximum_stagnation, int)
        assert config.factor_c3_weight_difference == 0.5

    def test_output(self, config):
        assert config.output_dir == 'results'

    def test_none_value(self, tmp_path):
        path = tmp_path / 'none.ini'
        path.write_text("[EXPERIMENT]\nnum_inputs = 1\nnum_outputs = 1\n"
                        "[POPULATION]\npopulation_size = 10\nmax_evaluations = none\n")
        assert Config(str(path)).max_evaluations is None
