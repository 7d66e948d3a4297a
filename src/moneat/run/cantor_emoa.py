"""
Cantor EMOA Module

This module implements a steady-state EMOA evolving CantorNetwork genomes,
whose link identities are derived from their endpoints instead of an
innovation registry.

Classes:
    CantorEMOA: The SMS-EMOA scheme on Cantor-pair encoded networks
"""

from loguru import logger

from moneat.genotype.cantor_network import CantorNetwork
from moneat.run.algorithm           import Algorithm
from moneat.run.config              import Config
from moneat.run.experiment          import Experiment
from moneat.run.parameters          import Parameter
from moneat.sorting.q_procedure     import QProcedure

class CantorEMOA(Algorithm[CantorNetwork]):
    """
    Steady-state EMOA on CantorNetwork genomes.

    Each epoch adds round(replacement_rate * population_size) children of
    rank-selected parents, sorts the population with the q-procedure and
    discards the worst genotypes beyond the population size. The networks have
    no bias neuron; the experiment's bias flag is ignored.
    """

    name = "CantorEMOA"

    def __init__(self, experiment: Experiment, config: Config, q_procedure: QProcedure):
        super().__init__(experiment, config, q_procedure)

        if experiment.bias:
            logger.warning("[{}] Cantor-encoded networks have no bias neuron; "
                           "the bias of experiment {} is ignored", self.name, experiment.id)

    def _register_parameters(self) -> None:
        for parameter in (Parameter.Population_Size,
                          Parameter.Max_Evaluations,
                          Parameter.Weight_Mutation_Range,
                          Parameter.Prb_Add_Link,
                          Parameter.Prb_Add_Neuron,
                          Parameter.Prb_Remove_Link,
                          Parameter.Prb_Modify_Weight,
                          Parameter.Replacement_Rate,
                          Parameter.Selection_Pressure,
                          Parameter.Prb_Mutation,
                          Parameter.Prb_Crossover,
                          Parameter.Prb_Cross_Gene_By_Choosing):
            self.register(parameter)

    def _initialize_population(self) -> None:
        weight_range = self.get(Parameter.Weight_Mutation_Range)

        for _ in range(self.get_as_int(Parameter.Population_Size)):
            genotype = CantorNetwork(self._new_genome_id(), self.experiment.num_inputs, self.experiment.num_outputs)
            genotype.create_base(weight_range)
            genotype.experiment_id = self.experiment.id
            genotype.generation    = 0
            self.population.append(genotype)

    def _epoch(self) -> None:
        self._steady_state_epoch()

    def _cross(self, a: CantorNetwork, b: CantorNetwork) -> CantorNetwork:
        return a.cross_with(b, self.get(Parameter.Prb_Cross_Gene_By_Choosing), self._new_genome_id())

    def _mutate(self, a: CantorNetwork) -> None:
        a.mutate(self.get(Parameter.Prb_Add_Link),
                 self.get(Parameter.Prb_Add_Neuron),
                 self.get(Parameter.Prb_Remove_Link),
                 self.get(Parameter.Prb_Modify_Weight),
                 self.get(Parameter.Weight_Mutation_Range))
