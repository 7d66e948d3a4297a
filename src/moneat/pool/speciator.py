"""
Speciator Module

This module implements the clustering of a population into species.

Classes:
    Speciator:         Abstract speciator (stagnation pruning, threshold search)
    StanleySpeciator:  First-match clustering on absolute differences
    NormDiffSpeciator: First-match clustering on min-max normalized differences
"""

import math
from abc import ABC, abstractmethod

from loguru import logger

from moneat.genotype.genotype import Genotype
from moneat.pool.difference   import DifferenceMetric
from moneat.pool.species      import Species
from moneat.run.parameters    import Parameter, Parameterized

class Speciator(ABC):
    """
    Sorts genotypes into species of similar genotypes.

    'speciate()' optionally removes species stagnating longer than
    Maximum_Stagnation generations and optionally clears the membership of the
    remaining species (their representatives stay). With 'auto_threshold' the
    difference threshold is then adapted until trial clusterings produce the
    target number of species max(2, floor(population_size / 2 * speciation_coefficient))
    within +-1, before the actual clustering. Species left without members are dropped.

    Public Attributes:
        parameterized:     Supplies population size, stagnation limit and speciation coefficient
        difference_metric: Measures the difference between two genotypes
        reset_mapping:     Clear species membership before clustering
        remove_stagnating: Drop stagnating species before clustering
        auto_threshold:    Search the threshold matching the target species count
        current_threshold: Difference up to which a genotype joins a species
        target_num_species: Target species count (-1 without auto threshold)
        next_species_id:   ID of the next species created
    """

    MAX_THRESHOLD_TRIES = 100

    def __init__(self,
                 parameterized    : Parameterized,
                 difference_metric: DifferenceMetric,
                 reset_mapping    : bool = True,
                 remove_stagnating: bool = True,
                 auto_threshold   : bool = True):
        self.parameterized     : Parameterized    = parameterized
        self.difference_metric : DifferenceMetric = difference_metric
        self.reset_mapping     : bool             = reset_mapping
        self.remove_stagnating : bool             = remove_stagnating
        self.auto_threshold    : bool             = auto_threshold

        self.next_species_id   : int   = 0
        self.target_num_species: int   = -1
        self.current_threshold : float = 0.5

    @abstractmethod
    def _speciate(self, population: list[Genotype], species: list[Species]) -> None:
        """Assign every genotype of 'population' to a species, extending 'species' in place."""
        pass

    def _new_species(self, representative: Genotype) -> Species:
        new_species = Species(self.next_species_id, representative)
        self.next_species_id += 1
        return new_species

    def speciate(self, population: list[Genotype], species: list[Species]) -> list[Species]:
        """
        Sort 'population' into species.

        Parameters:
            population: Genotypes to cluster
            species:    Species of the previous round (modified in place)

        Returns:
            The species after clustering (the same list object as 'species')
        """
        if species:
            if self.remove_stagnating:
                max_stagnation = self.parameterized.get(Parameter.Maximum_Stagnation)
                stagnating     = [s for s in species if s.generations_without_improvement > max_stagnation]
                for s in stagnating:
                    logger.debug("[Speciator] Species {} removed after {} generations without improvement",
                                 s.id, s.generations_without_improvement)
                species[:] = [s for s in species if s.generations_without_improvement <= max_stagnation]

            if self.reset_mapping:
                for s in species:
                    s.clear()

        if self.auto_threshold:
            population_size = self.parameterized.get_as_int(Parameter.Population_Size)
            coefficient     = self.parameterized.get(Parameter.Speciation_Coefficient)

            self.target_num_species = max(2, math.floor((population_size // 2) * coefficient))
            self.find_threshold(population, species, self.target_num_species)
        else:
            self.target_num_species = -1
            self.current_threshold  = self.parameterized.get(Parameter.Speciation_Coefficient)

        self._speciate(population, species)

        species[:] = [s for s in species if len(s) > 0]
        return species

    def find_threshold(self,
                       population : list[Genotype],
                       species    : list[Species],
                       num_species: int,
                       num_tries  : int = MAX_THRESHOLD_TRIES) -> None:
        """
        Adapt 'current_threshold' until clustering yields 'num_species' +-1 species:
        x0.9 while there are too few species, x1.1 while there are too many.
        Trials run on disposable copies of the species; species IDs handed out
        by the trials are taken back.
        """
        next_species_id = self.next_species_id

        for _ in range(num_tries):
            trial_species = [Species(-1, s.representative) for s in species]
            self._speciate(list(population), trial_species)
            self.next_species_id = next_species_id

            difference = len(trial_species) - num_species
            if difference < 0:
                self.current_threshold *= 0.9
            elif difference > 0:
                self.current_threshold *= 1.1

            if abs(difference) <= 1:
                break
        else:
            logger.warning("[Speciator] No threshold for {} species found after {} tries, using {:.4f}",
                           num_species, num_tries, self.current_threshold)

class StanleySpeciator(Speciator):
    """
    Speciation on absolute differences (Stanley, 2004).

    Each genotype joins the first species whose representative differs from it
    by at most the current threshold; otherwise it founds a new species. With a
    target species count, existing species are discarded when there are more
    of them than the target.
    """

    def _speciate(self, population: list[Genotype], species: list[Species]) -> None:
        if self.target_num_species != -1 and len(species) > self.target_num_species:
            species.clear()

        for genotype in population:
            for s in species:
                if self.difference_metric.difference(genotype, s.representative) <= self.current_threshold:
                    s.add(genotype)
                    break
            else:
                species.append(self._new_species(genotype))
                logger.debug("[Speciator] Species {} founded by genotype {}", species[-1].id, genotype.id)

class NormDiffSpeciator(Speciator):
    """
    Speciation on differences normalized to [0, 1].

    All pairwise differences within the population are min-max normalized;
    a genotype joins the first species whose representative lies within
    Speciation_Coefficient of it. Species whose representative is no longer
    part of the population are discarded. Stagnating species are removed and
    membership is reset every round; the threshold is not searched.
    """

    def __init__(self, parameterized: Parameterized, difference_metric: DifferenceMetric):
        super().__init__(parameterized, difference_metric, True, True, False)

    def _speciate(self, population: list[Genotype], species: list[Species]) -> None:
        index_of    = {genotype.id: index for index, genotype in enumerate(population)}
        differences = self._normalized_differences(population)
        threshold   = self.parameterized.get(Parameter.Speciation_Coefficient)

        species[:] = [s for s in species if s.representative.id in index_of]

        for i, genotype in enumerate(population):
            for s in species:
                if genotype is s.representative:
                    difference = 0.0
                else:
                    difference = differences[i][index_of[s.representative.id]]

                if difference <= threshold:
                    s.add(genotype)
                    break
            else:
                species.append(self._new_species(genotype))

    def _normalized_differences(self, population: list[Genotype]) -> list[list[float]]:
        n           = len(population)
        differences = [[0.0] * n for _ in range(n)]

        for i in range(n):
            for j in range(i + 1, n):
                differences[i][j] = differences[j][i] = self.difference_metric.difference(population[i], population[j])

        if n < 2:
            return differences

        pairs  = [differences[i][j] for i in range(n) for j in range(i + 1, n)]
        low    = min(pairs)
        spread = max(pairs) - low

        for i in range(n):
            for j in range(n):
                if i != j:
                    differences[i][j] = (differences[i][j] - low) / spread if spread > 0 else 0.0

        return differences
