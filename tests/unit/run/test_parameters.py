"""
Unit tests for Parameter and Parameterized.

Tests cover the two-phase registration protocol, value lookup from the
Config, bounds checks of overrides and relative values.
"""

import pytest
from unittest.mock import Mock

from moneat.run.config     import Config
from moneat.run.parameters import Parameter, ParameterError, ParameterScope, Parameterized


# ============================================================================
# Test Fixtures
# ============================================================================

@pytest.fixture
def mock_config():
    config = Mock(spec=Config)
    config.population_size = 30
    config.prb_add_link    = 0.1
    return config


@pytest.fixture
def parameterized(mock_config):
    p = Parameterized(mock_config)
    p.register(Parameter.Population_Size)
    p.register(Parameter.Prb_Add_Link)
    p.register(Parameter.Replacement_Rate, 0.25)
    p.finalize_registration()
    return p


# ============================================================================
# Test: Parameter
# ============================================================================

class TestParameter:

    def test_members_carry_metadata(self):
        assert Parameter.Prb_Add_Link.short_id  == 'ALP'
        assert Parameter.Prb_Add_Link.scope     == ParameterScope.OPERATION
        assert Parameter.Prb_Add_Link.min_value == 0.001
        assert Parameter.Prb_Add_Link.max_value == 0.25

    def test_config_key(self):
        assert Parameter.Prb_Gene_Enabled_On_Crossover.config_key == 'prb_gene_enabled_on_crossover'

    def test_every_parameter_has_config_attribute(self):
        config = Config()
        for parameter in Parameter:
            assert hasattr(config, parameter.config_key), parameter.name

    def test_user_defined_parameters_unbounded(self):
        assert not Parameter.Population_Size.bounded
        assert Parameter.Selection_Pressure.bounded

    def test_from_relative(self):
        assert Parameter.Prb_Mutation.from_relative(0.0) == 0.1
        assert Parameter.Prb_Mutation.from_relative(1.0) == 0.9
        assert Parameter.Prb_Mutation.from_relative(0.5) == pytest.approx(0.5)

    def test_short_ids_unique(self):
        assert len({p.short_id for p in Parameter}) == len(Parameter)


# ============================================================================
# Test: Parameterized
# ============================================================================

class TestRegistration:

    def test_values_from_config(self, parameterized):
        assert parameterized.get(Parameter.Population_Size) == 30.0
        assert parameterized.get_as_int(Parameter.Population_Size) == 30
        assert parameterized.get(Parameter.Prb_Add_Link) == 0.1

    def test_explicit_value(self, parameterized):
        assert parameterized.get(Parameter.Replacement_Rate) == 0.25

    def test_default_when_config_lacks_attribute(self):
        p = Parameterized(object())
        p.register(Parameter.Selection_Pressure)
        p.finalize_registration()
        assert p.get(Parameter.Selection_Pressure) == 0.8

    def test_default_when_config_value_is_none(self, tmp_path):
        """A 'none' entry in the configuration file falls back to the default."""
        path = tmp_path / 'none.ini'
        path.write_text("[EXPERIMENT]\nnum_inputs = 2\nnum_outputs = 1\n"
                        "[POPULATION]\npopulation_size = 10\nmax_evaluations = none\n"
                        "[SELECTION]\nselection_pressure = none\n")
        config = Config(str(path))

        p = Parameterized(config)
        p.register(Parameter.Max_Evaluations)
        p.register(Parameter.Selection_Pressure)
        p.finalize_registration()

        assert p.get_as_int(Parameter.Max_Evaluations) == Parameter.Max_Evaluations.default
        assert p.get(Parameter.Selection_Pressure) == 0.8

    def test_query_before_finalization(self, mock_config):
        p = Parameterized(mock_config)
        p.register(Parameter.Population_Size)
        with pytest.raises(ParameterError):
            p.get(Parameter.Population_Size)

    def test_register_after_finalization(self, parameterized):
        with pytest.raises(ParameterError):
            parameterized.register(Parameter.Prb_Mutation)

    def test_unregistered_parameter(self, parameterized):
        with pytest.raises(ParameterError):
            parameterized.get(Parameter.Prb_Mutation)

    def test_registered_parameters_by_scope(self, parameterized):
        assert parameterized.registered_parameters() == [Parameter.Population_Size,
                                                         Parameter.Prb_Add_Link,
                                                         Parameter.Replacement_Rate]
        assert parameterized.registered_parameters(ParameterScope.GENERATION) == [Parameter.Replacement_Rate]


class TestOverrides:

    def test_set(self, parameterized):
        parameterized.set(Parameter.Prb_Add_Link, 0.2)
        assert parameterized.get(Parameter.Prb_Add_Link) == 0.2

    def test_set_outside_bounds(self, parameterized):
        with pytest.raises(ParameterError):
            parameterized.set(Parameter.Prb_Add_Link, 0.5)

    def test_user_defined_parameters_unchecked(self, parameterized):
        parameterized.set(Parameter.Population_Size, 5000)
        assert parameterized.get_as_int(Parameter.Population_Size) == 5000

    def test_set_unregistered(self, parameterized):
        with pytest.raises(ParameterError):
            parameterized.set(Parameter.Prb_Mutation, 0.5)

    def test_set_relative(self, parameterized):
        parameterized.set_relative(Parameter.Replacement_Rate, 1.0)
        assert parameterized.get(Parameter.Replacement_Rate) == 0.9

    def test_set_relative_out_of_range(self, parameterized):
        with pytest.raises(ParameterError):
            parameterized.set_relative(Parameter.Replacement_Rate, 1.5)

    def test_set_relative_user_defined(self, parameterized):
        with pytest.raises(ParameterError):
            parameterized.set_relative(Parameter.Population_Size, 0.5)
