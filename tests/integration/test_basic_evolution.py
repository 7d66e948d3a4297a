"""
Integration tests for complete runs.

Every algorithm evolves networks on a two-objective XOR problem (error and
number of links) with a small population and budget, then exports its
solutions. The tests check the invariants of a run rather than solution
quality: the population size is maintained, the budget is spent, every
genotype is evaluated and the export file can be loaded again.

NOTE: These tests use a fixed random seed (42) for reproducibility.
"""

import pytest
import xml.etree.ElementTree as ET

from moneat.genotype.cantor_network   import CantorNetwork
from moneat.genotype.innovation       import InnovationRegistry
from moneat.genotype.network_genotype import NetworkGenotype
from moneat.run.cantor_emoa           import CantorEMOA
from moneat.run.neat                  import NEAT, NEATMODS, NEATPS, NNEAT
from moneat.sorting                   import (CombinedQProcedure, CrowdingDistance, Hypervolume,
                                              NondominatedRanking, R2Indicator, RieszSEnergy)


# ============================================================================
# Algorithms under test
# ============================================================================

REGISTRY_ALGORITHMS = {
    'NEAT':            lambda e, c: NEAT(e, c),
    'NEAT-NDR-HV':     lambda e, c: NEAT(e, c, NondominatedRanking(Hypervolume())),
    'NEAT-link-rem':   lambda e, c: NEAT(e, c, NondominatedRanking(Hypervolume()), link_removal=True),
    'NEAT-PS':         lambda e, c: NEATPS(e, c),
    'NEAT-MODS':       lambda e, c: NEATMODS(e, c),
    'nNEAT-HV':        lambda e, c: NNEAT(e, c, NondominatedRanking(Hypervolume())),
    'nNEAT-HV-iter':   lambda e, c: NNEAT(e, c, NondominatedRanking(Hypervolume(iterative=True))),
    'nNEAT-R2':        lambda e, c: NNEAT(e, c, NondominatedRanking(R2Indicator())),
    'nNEAT-CD':        lambda e, c: NNEAT(e, c, NondominatedRanking(CrowdingDistance())),
    'nNEAT-Combined':  lambda e, c: NNEAT(e, c, CombinedQProcedure(NondominatedRanking(Hypervolume()),
                                                                   RieszSEnergy())),
}


# ============================================================================
# Test Registry-based Algorithms
# ============================================================================

class TestRegistryAlgorithms:
    """Complete runs of the NEAT family."""

    @pytest.mark.parametrize("name", sorted(REGISTRY_ALGORITHMS))
    def test_run(self, name, xor_experiment, small_config):
        algorithm = REGISTRY_ALGORITHMS[name](xor_experiment, small_config)
        algorithm.run()

        assert algorithm.terminated
        assert algorithm.evaluations >= 150
        assert algorithm.generation > 0
        assert len(algorithm.population) == 12
        assert all(g.fitness is not None and len(g.fitness) == 2 for g in algorithm.population)
        assert len({g.id for g in algorithm.population}) == 12

    @pytest.mark.parametrize("name", ['NEAT-NDR-HV', 'NEAT-MODS', 'nNEAT-HV'])
    def test_export_can_be_loaded(self, name, xor_experiment, small_config, tmp_path):
        algorithm = REGISTRY_ALGORITHMS[name](xor_experiment, small_config)
        algorithm.run()

        root     = ET.parse(tmp_path / f"{algorithm.uuid}.xml").getroot()
        registry = InnovationRegistry.from_xml(root.find('InnovationRegistry'))
        loaded   = [NetworkGenotype.from_xml(element, registry)
                    for element in root.find('Solutions').findall('Genotype')]

        assert [g.id for g in loaded] == [g.id for g in algorithm.export_set]
        assert registry.next_innovation_id == algorithm.registry.next_innovation_id
        for genotype in loaded:
            assert genotype.experiment_id == 1
            assert genotype.fitness is not None
            for gene in genotype.links:
                registry.get_innovation(gene.innovation_id)
            assert genotype.to_phenotype().num_inputs == 2

    def test_export_set_contains_final_front(self, xor_experiment, small_config):
        algorithm = REGISTRY_ALGORITHMS['nNEAT-HV'](xor_experiment, small_config)
        algorithm.run()

        exported = {g.id for g in algorithm.export_set}
        assert {g.id for g in algorithm.known_pareto_front()} <= exported

    def test_genomes_grow(self, xor_experiment, small_config):
        algorithm = REGISTRY_ALGORITHMS['nNEAT-HV'](xor_experiment, small_config)
        algorithm.run()

        # Three links and no hidden neuron in the minimal genome
        assert len(algorithm.registry.innovations) > 3

    def test_runs_reproducible(self, xor_experiment, small_config):
        import random
        import numpy as np

        first = NNEAT(xor_experiment, small_config, NondominatedRanking(Hypervolume()))
        first.run()

        random.seed(42)
        np.random.seed(42)
        second = NNEAT(xor_experiment, small_config, NondominatedRanking(Hypervolume()))
        second.run()

        assert [list(g.fitness) for g in first.population] == [list(g.fitness) for g in second.population]


# ============================================================================
# Test CantorEMOA
# ============================================================================

class TestCantorEMOA:

    def test_run(self, xor_experiment_no_bias, small_config):
        algorithm = CantorEMOA(xor_experiment_no_bias, small_config, NondominatedRanking(Hypervolume()))
        algorithm.run()

        assert algorithm.evaluations >= 150
        assert len(algorithm.population) == 12
        assert all(isinstance(g, CantorNetwork) for g in algorithm.population)
        assert all(g.fitness is not None for g in algorithm.population)

    def test_export_can_be_loaded(self, xor_experiment_no_bias, small_config, tmp_path):
        algorithm = CantorEMOA(xor_experiment_no_bias, small_config, NondominatedRanking(R2Indicator()))
        algorithm.run()

        root   = ET.parse(tmp_path / f"{algorithm.uuid}.xml").getroot()
        loaded = [CantorNetwork.from_xml(element, 2, 1) for element in root.find('Solutions').findall('Genotype')]

        assert root.find('InnovationRegistry') is None
        assert [g.id for g in loaded] == [g.id for g in algorithm.export_set]
        for original, genotype in zip(algorithm.export_set, loaded):
            assert sorted(l.link_id for l in genotype.links) == sorted(l.link_id for l in original.links)
