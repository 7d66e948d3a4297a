"""
Species Module

This module implements the Species class: a cluster of similar genotypes that
compete for offspring mainly among themselves.

Classes:
    Species: A representative, its members and the spawn bookkeeping of a species
"""

import math
import random
from typing import Generic, TypeVar

from moneat.genotype.fitness_element import FitnessElement
from moneat.pool.selection           import select_rank_indices

G = TypeVar('G', bound=FitnessElement)

class Species(FitnessElement, Generic[G]):
    """
    A species of genotypes.

    Species are fitness elements themselves, so that q-procedures can rank
    them. A genotype belongs to exactly one species per speciation round; the
    membership is rebuilt every round, the representative carries over.

    Public Attributes:
        representative:                  Genotype other genotypes are compared with
        members:                         Member genotypes (ranked best first once sorted)
        generations_without_improvement: Generations since the best member last improved
        amount_to_spawn:                 Remaining offspring quota of the current epoch

    Public Methods:
        add(member):                     Add a member (the first one becomes the representative)
        clear():                         Remove all members, keep the representative
        select_single_solution(pressure): Pick one member uniformly from the top ranks
        select_parents(pressure):        Pick one or two members by rank
        can_spawn():                     Consume one unit of the offspring quota
    """

    def __init__(self, id: int, representative: G):
        """
        Parameters:
            id:             Species ID
            representative: First member and representative of the species
        """
        super().__init__(id)
        self.representative                 : G       = representative
        self.members                        : list[G] = [representative]
        self.generations_without_improvement: int     = 0
        self.amount_to_spawn                : int     = 0

        # Best fitness of the top member seen so far, for stagnation tracking
        self.best_fitness: list[float] | None = None

    def add(self, member: G) -> None:
        if not self.members:
            self.representative = member
        self.members.append(member)

    def clear(self) -> None:
        self.members.clear()

    def __len__(self):
        return len(self.members)

    def __getitem__(self, index: int) -> G:
        return self.members[index]

    def __iter__(self):
        return iter(self.members)

    def _num_reproducible(self, selection_pressure: float) -> int:
        return math.ceil((1.0 - selection_pressure) * len(self.members))

    def select_single_solution(self, selection_pressure: float) -> G:
        """Pick a member uniformly from the top ceil((1 - pressure) * size) members."""
        num_reproducible = self._num_reproducible(selection_pressure)
        if num_reproducible < 2:
            return self.members[0]
        return self.members[random.randrange(num_reproducible)]

    def select_parents(self, selection_pressure: float) -> tuple[G, G | None]:
        """
        Pick two members of the top ceil((1 - pressure) * size) members by linear
        rank selection. The second parent is None if too few members qualify or
        the same member was drawn twice.
        """
        num_reproducible = self._num_reproducible(selection_pressure)
        if num_reproducible < 2:
            return self.members[0], None

        first, second = select_rank_indices(0, num_reproducible - 1, 2, selection_pressure)
        if first == second:
            return self.members[first], None
        return self.members[first], self.members[second]

    def can_spawn(self) -> bool:
        """True while the offspring quota is not used up; every call consumes one unit."""
        result = self.amount_to_spawn > 0
        self.amount_to_spawn -= 1
        return result

    def update_stagnation(self) -> None:
        """
        Update 'generations_without_improvement' from the best member
        (members must be sorted best first).
        """
        if not self.members or self.members[0].fitness is None:
            return

        top = self.members[0].fitness
        if self.best_fitness is None or any(f < b for f, b in zip(top, self.best_fitness)):
            self.best_fitness                    = list(top)
            self.generations_without_improvement = 0
        else:
            self.generations_without_improvement += 1

    def __repr__(self):
        return (f"Species(id={self.id}, members={len(self.members)}, "
                f"representative={self.representative.id}, stagnation={self.generations_without_improvement})")
