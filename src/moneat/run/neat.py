"""
NEAT Algorithms Module

This module implements NEAT and its multi-objective descendants, all evolving
NetworkGenotype populations against one shared innovation registry.

Classes:
    NEAT:     Speciated NEAT (Stanley, 2004) with a pluggable q-procedure
    NEATPS:   NEAT ranking by Pareto strength (van Willigen et al., 2013)
    NEATMODS: NEAT-MODS (Abramovich and Moshaiov, 2016)
    NNEAT:    nNEAT: the SMS-EMOA scheme on NEAT genomes (Kuenzel and Meyer-Nieberg, 2020)
"""

import math
import random
import xml.etree.ElementTree as ET

from loguru import logger

from moneat.genotype.innovation          import InnovationRegistry
from moneat.genotype.network_genotype    import NetworkGenotype
from moneat.pool.difference              import NetworkDifference
from moneat.pool.speciator               import NormDiffSpeciator, Speciator, StanleySpeciator
from moneat.pool.species                 import Species
from moneat.run.algorithm                import Algorithm
from moneat.run.config                   import Config
from moneat.run.experiment               import Experiment
from moneat.run.parameters               import Parameter
from moneat.sorting.crowding_distance    import CrowdingDistance
from moneat.sorting.nondominated_ranking import NondominatedRanking
from moneat.sorting.pareto_strength      import ParetoStrength
from moneat.sorting.q_procedure          import QProcedure
from moneat.sorting.single_objective     import SingleObjective

class NEAT(Algorithm[NetworkGenotype]):
    """
    NEAT (Stanley, 2004).

    Every epoch the population is clustered into species (by default on
    normalized compatibility distances). Each species receives a share of the
    offspring proportional to the summed q-values of its members; its
    representative survives, the other members are replaced by offspring
    of rank-selected parents, with occasional interspecies crossover.

    Public Attributes:
        registry:     The innovation registry shared by all genotypes of the run
        speciator:    Clusters the population into species
        species:      The current species
        link_removal: Whether mutation may remove links (Prb_Remove_Link)
    """

    name = "NEAT"

    def __init__(self,
                 experiment  : Experiment,
                 config      : Config,
                 q_procedure : QProcedure | None = None,
                 link_removal: bool = False):
        """
        Parameters:
            experiment:   The experiment evaluating the genotypes
            config:       Supplies parameter values and the output directory
            q_procedure:  Sorts the population (single objective by default)
            link_removal: Allow the remove-link mutation
        """
        super().__init__(experiment, config, q_procedure or SingleObjective())
        self.registry    : InnovationRegistry = InnovationRegistry(experiment.num_inputs,
                                                                   experiment.num_outputs,
                                                                   experiment.bias)
        self.speciator   : Speciator          = NormDiffSpeciator(self, NetworkDifference(self))
        self.species     : list[Species]      = []
        self.link_removal: bool               = link_removal

    def _register_parameters(self) -> None:
        for parameter in (Parameter.Population_Size,
                          Parameter.Max_Evaluations,
                          Parameter.Weight_Mutation_Range,
                          Parameter.Prb_Add_Link,
                          Parameter.Prb_Add_Neuron,
                          Parameter.Prb_Modify_Weight,
                          Parameter.Maximum_Stagnation,
                          Parameter.Speciation_Coefficient,
                          Parameter.Factor_C1_Excess,
                          Parameter.Factor_C2_Disjoint,
                          Parameter.Factor_C3_Weight_Difference,
                          Parameter.Prb_Crossover_Interspecies,
                          Parameter.Selection_Pressure,
                          Parameter.Prb_Mutation,
                          Parameter.Prb_Crossover,
                          Parameter.Prb_Cross_Gene_By_Choosing,
                          Parameter.Prb_Gene_Enabled_On_Crossover):
            self.register(parameter)

        if self.link_removal:
            self.register(Parameter.Prb_Remove_Link)

    def _initialize_population(self) -> None:
        weight_range = self.get(Parameter.Weight_Mutation_Range)

        for _ in range(self.get_as_int(Parameter.Population_Size)):
            genotype = NetworkGenotype.create_minimal(self.registry, self._new_genome_id(), weight_range)
            genotype.experiment_id = self.experiment.id
            genotype.generation    = 0
            self.population.append(genotype)

    def _speciate(self) -> None:
        self.species = self.speciator.speciate(self.population, self.species)

        for species in self.species:
            species.update_stagnation()

        logger.debug("[{}] Generation {}: {} species, threshold {:.4f}",
                     self.name, self.generation, len(self.species), self.speciator.current_threshold)

    def _epoch(self) -> None:
        self.update_export_set()
        self._speciate()

        # With one species per genotype no representative is kept, or evolution would stall
        keep_representatives = len(self.species) != len(self.population)
        self.determine_offspring_quotas()

        selection_pressure = self.get(Parameter.Selection_Pressure)
        prb_interspecies   = self.get(Parameter.Prb_Crossover_Interspecies)

        offspring = []
        for species in self.species:
            if keep_representatives:
                offspring.append(species.representative)

            while species.can_spawn():
                if len(self.species) > 1 and random.random() <= prb_interspecies:
                    other = random.choice(self.species)
                    offspring.append(self.variation(species.select_single_solution(selection_pressure),
                                                    other.select_single_solution(selection_pressure)))
                else:
                    offspring.append(self.variation(*species.select_parents(selection_pressure)))

        self.population = offspring
        self._evaluate()
        self._sort()

    def determine_offspring_quotas(self, free_slots: int | None = None) -> None:
        """
        Set 'amount_to_spawn' of every species.

        Each species receives floor(free_slots * q / total) offspring, where q is
        the sum of its members' q-values (stored as the species' q-value) and
        total is the sum over all species; the remaining slots go to randomly
        chosen species. If no species has a positive q-value the slots are
        shared equally.

        Parameters:
            free_slots: Offspring to distribute; by default the population size
                        minus one slot per surviving representative
        """
        if free_slots is None:
            free_slots = self.get_as_int(Parameter.Population_Size)
            if len(self.species) != len(self.population):
                free_slots -= len(self.species)

        for species in self.species:
            species.q_value = sum(member.q_value for member in species)

        total = sum(species.q_value for species in self.species)

        assigned = 0
        for species in self.species:
            if total > 0.0:
                species.amount_to_spawn = math.floor(free_slots * species.q_value / total)
            else:
                species.amount_to_spawn = free_slots // len(self.species)
            assigned += species.amount_to_spawn

        for _ in range(free_slots - assigned):
            random.choice(self.species).amount_to_spawn += 1

    def _cross(self, a: NetworkGenotype, b: NetworkGenotype) -> NetworkGenotype:
        return a.cross_with(b,
                            self.get(Parameter.Prb_Cross_Gene_By_Choosing),
                            self.get(Parameter.Prb_Gene_Enabled_On_Crossover),
                            self._new_genome_id())

    def _mutate(self, a: NetworkGenotype) -> None:
        a.mutate(self.get(Parameter.Prb_Add_Link),
                 self.get(Parameter.Prb_Add_Neuron),
                 self.get(Parameter.Prb_Modify_Weight),
                 self.get(Parameter.Weight_Mutation_Range),
                 self.get(Parameter.Prb_Remove_Link) if self.link_removal else 0.0)

    def _xml_elements_to_export(self) -> list[ET.Element]:
        return [self.registry.to_xml()]

class NEATPS(NEAT):
    """NEAT-PS: NEAT ranking fitness vectors by Pareto strength."""

    name = "NEAT-PS"

    def __init__(self, experiment: Experiment, config: Config, link_removal: bool = False):
        super().__init__(experiment, config, ParetoStrength(), link_removal)

class NEATMODS(NEAT):
    """
    NEAT-MODS.

    Ranks by non-dominated sorting refined by crowding distance and clusters
    with Stanley's speciation. Offspring are added to the parents; the merged
    population is sorted and clustered again, then survivors are taken
    round-robin from the best species: the first member of each, then the
    second, and so on.
    """

    name = "NEAT-MODS"

    def __init__(self, experiment: Experiment, config: Config, link_removal: bool = False):
        super().__init__(experiment, config, NondominatedRanking(CrowdingDistance()), link_removal)
        self.speciator = StanleySpeciator(self, NetworkDifference(self))

    def _epoch(self) -> None:
        self.update_export_set()
        self._speciate()

        self.determine_offspring_quotas(self.get_as_int(Parameter.Population_Size))

        selection_pressure = self.get(Parameter.Selection_Pressure)
        for species in self.species:
            while species.can_spawn():
                self.population.append(self.variation(*species.select_parents(selection_pressure)))

        self._evaluate()
        self._sort()

        self.species = self.speciator.speciate(self.population, self.species)
        self.select_survivors()

    def select_survivors(self) -> None:
        """
        Reduce the population to its size by round-robin selection over the species.

        With at least q = floor(population_size / objectives) species, only the
        species of the best ranked genotypes contribute: species are admitted in
        order of their best member until q species holding at least
        population_size genotypes are admitted.

        The population keeps the round-robin order: the best member of every
        admitted species first, then the second members, and so on.
        """
        population_size = self.get_as_int(Parameter.Population_Size)
        num_objectives  = len(self.population[0].fitness)
        q               = population_size // num_objectives

        if len(self.species) < q:
            surviving = list(self.species)
        else:
            species_of = {id(member): species for species in self.species for member in species}
            surviving  = []
            admitted   = 0

            for genotype in self.population:
                species = species_of[id(genotype)]
                if any(species is s for s in surviving):
                    continue

                surviving.append(species)
                admitted += len(species)
                if len(surviving) >= q and admitted >= population_size:
                    break

        survivors = []
        for line in range(max(len(species) for species in surviving)):
            for species in surviving:
                if len(species) > line:
                    survivors.append(species[line])
                    if len(survivors) == population_size:
                        break
            if len(survivors) == population_size:
                break

        self.population = survivors

class NNEAT(NEAT):
    """
    nNEAT: the SMS-EMOA scheme on NEAT genomes.

    No speciation: each epoch adds round(replacement_rate * population_size)
    children of rank-selected parents to the population, sorts it with the
    q-procedure and discards the worst genotypes beyond the population size.
    """

    name = "nNEAT"

    def __init__(self,
                 experiment  : Experiment,
                 config      : Config,
                 q_procedure : QProcedure,
                 link_removal: bool = False):
        super().__init__(experiment, config, q_procedure, link_removal)

    def _register_parameters(self) -> None:
        for parameter in (Parameter.Population_Size,
                          Parameter.Max_Evaluations,
                          Parameter.Weight_Mutation_Range,
                          Parameter.Prb_Add_Link,
                          Parameter.Prb_Add_Neuron,
                          Parameter.Prb_Modify_Weight,
                          Parameter.Replacement_Rate,
                          Parameter.Selection_Pressure,
                          Parameter.Prb_Mutation,
                          Parameter.Prb_Crossover,
                          Parameter.Prb_Cross_Gene_By_Choosing,
                          Parameter.Prb_Gene_Enabled_On_Crossover):
            self.register(parameter)

        if self.link_removal:
            self.register(Parameter.Prb_Remove_Link)

    def _epoch(self) -> None:
        self._steady_state_epoch()
