"""
Unit tests for the speciators.

Genotypes are stood in for by fitness elements clustered on their fitness
vectors (squared Euclidean distance), which makes the expected species obvious.
"""

import pytest
import numpy as np

from moneat.genotype.fitness_element import FitnessElement
from moneat.pool.difference          import FitnessDifference
from moneat.pool.speciator           import NormDiffSpeciator, StanleySpeciator
from moneat.run.config               import Config
from moneat.run.parameters           import Parameter, Parameterized


# ============================================================================
# Test Fixtures
# ============================================================================

def make_parameters(population_size=4, speciation_coefficient=0.5, maximum_stagnation=15):
    parameterized = Parameterized(Config())
    parameterized.register(Parameter.Population_Size,        population_size)
    parameterized.register(Parameter.Speciation_Coefficient, speciation_coefficient)
    parameterized.register(Parameter.Maximum_Stagnation,     maximum_stagnation)
    parameterized.finalize_registration()
    return parameterized


def population(*vectors, first_id=0):
    result = []
    for index, vector in enumerate(vectors):
        e = FitnessElement(first_id + index)
        e.fitness = np.array(vector, dtype=float)
        result.append(e)
    return result


TWO_CLUSTERS = [[0.0, 0.0], [0.1, 0.0], [5.0, 5.0], [5.1, 5.0]]


# ============================================================================
# Test: StanleySpeciator
# ============================================================================

class TestStanleySpeciator:

    def test_fixed_threshold(self):
        speciator = StanleySpeciator(make_parameters(), FitnessDifference(), auto_threshold=False)
        species   = speciator.speciate(population(*TWO_CLUSTERS), [])

        assert [[m.id for m in s] for s in species] == [[0, 1], [2, 3]]
        assert [s.id for s in species] == [0, 1]
        assert speciator.current_threshold == 0.5
        assert speciator.target_num_species == -1

    def test_species_carry_over(self):
        speciator = StanleySpeciator(make_parameters(), FitnessDifference(), auto_threshold=False)
        pop       = population(*TWO_CLUSTERS)
        species   = speciator.speciate(pop, [])
        result    = speciator.speciate(pop, species)

        assert result is species
        assert [s.id for s in result] == [0, 1]
        assert speciator.next_species_id == 2

    def test_stagnating_species_removed(self):
        speciator = StanleySpeciator(make_parameters(), FitnessDifference(), auto_threshold=False)
        pop       = population(*TWO_CLUSTERS)
        species   = speciator.speciate(pop, [])

        species[0].generations_without_improvement = 16
        species = speciator.speciate(pop, species)

        assert sorted(s.id for s in species) == [1, 2]

    def test_auto_threshold_reaches_target(self):
        """Ten points one unit apart; five species need a threshold in [1, 4)."""
        parameters = make_parameters(population_size=10, speciation_coefficient=1.0)
        speciator  = StanleySpeciator(parameters, FitnessDifference())
        species    = speciator.speciate(population(*[[float(i)] for i in range(10)]), [])

        assert speciator.target_num_species == 5
        assert len(species) == 5
        assert 1.0 <= speciator.current_threshold < 4.0

    def test_threshold_search_returns_species_ids(self):
        speciator = StanleySpeciator(make_parameters(), FitnessDifference())
        speciator.speciate(population(*TWO_CLUSTERS), [])
        assert speciator.next_species_id == 2

    def test_minimum_target(self):
        speciator = StanleySpeciator(make_parameters(population_size=4, speciation_coefficient=0.0),
                                     FitnessDifference())
        speciator.speciate(population(*TWO_CLUSTERS), [])
        assert speciator.target_num_species == 2


# ============================================================================
# Test: NormDiffSpeciator
# ============================================================================

class TestNormDiffSpeciator:

    def test_clusters_on_normalized_differences(self):
        speciator = NormDiffSpeciator(make_parameters(), FitnessDifference())
        species   = speciator.speciate(population(*TWO_CLUSTERS), [])

        assert [[m.id for m in s] for s in species] == [[0, 1], [2, 3]]
        assert not speciator.auto_threshold

    def test_scale_invariant(self):
        speciator = NormDiffSpeciator(make_parameters(), FitnessDifference())
        scaled    = [[1000.0 * x for x in vector] for vector in TWO_CLUSTERS]
        assert len(speciator.speciate(population(*scaled), [])) == 2

    def test_species_of_vanished_representative_dropped(self):
        speciator = NormDiffSpeciator(make_parameters(), FitnessDifference())
        species   = speciator.speciate(population(*TWO_CLUSTERS), [])

        next_generation = population(*TWO_CLUSTERS, first_id=10)
        next_generation[2:] = species[1].members[:]
        species = speciator.speciate(next_generation, species)

        assert [s.id for s in species] == [1, 2]
        assert [m.id for m in species[0]] == [2, 3]
        assert [m.id for m in species[1]] == [10, 11]

    def test_identical_population_single_species(self):
        speciator = NormDiffSpeciator(make_parameters(), FitnessDifference())
        species   = speciator.speciate(population([1.0, 1.0], [1.0, 1.0], [1.0, 1.0]), [])
        assert len(species) == 1
