"""
Fitness Element Module

This module implements the FitnessElement class, the common base of everything
a q-procedure can rank: genotypes and species.

Classes:
    FitnessElement: Object carrying a fitness vector, a rank and q-procedure attributes
"""

import numpy as np

class FitnessElement:
    """
    An object carrying a (multi-objective) fitness vector.

    Fitness vectors are minimized component-wise. Q-procedures annotate fitness
    elements with per-procedure scores stored in 'attributes', keyed by the
    procedure's unique attribute id, so that several procedures can score the
    same element during chained or combined sorting.

    Public Attributes:
        id:                         Identifier of the element
        fitness:                    Fitness vector (None until evaluated)
        rank:                       Position after the last sort (0 = best)
        q_value:                    Scalar quality in [0, 1] after the last sort (1 = best)
        age:                        Number of epochs survived
        generation:                 Generation the element was created in
        experiment_id:              Identifier of the experiment that created it
        dominated_after_evaluations: Evaluation count at which the element left the
                                     known Pareto front (-1 while non-dominated)
        attributes:                 Procedure attribute id => score

    Public Methods:
        get_attribute(key):         Score stored under 'key' (-1.0 if absent)
        set_attribute(key, value):  Store a score
        add_attribute(key, value):  Add to a stored score
        dominates(other):           Pareto dominance test against another element
    """

    def __init__(self, id: int):
        self.id                         : int                 = id
        self.fitness                    : np.ndarray | None   = None
        self.rank                       : int                 = -1
        self.q_value                    : float               = 0.0
        self.age                        : int                 = 0
        self.generation                 : int                 = -1
        self.experiment_id              : int                 = -1
        self.dominated_after_evaluations: int                 = -1
        self.attributes                 : dict[int, float]    = {}

    def get_attribute(self, key: int) -> float:
        return self.attributes.get(key, -1.0)

    def set_attribute(self, key: int, value: float) -> None:
        self.attributes[key] = value

    def add_attribute(self, key: int, value: float) -> None:
        self.attributes[key] = self.attributes.get(key, 0.0) + value

    def dominates(self, other: 'FitnessElement') -> bool:
        """
        Return True if this element Pareto-dominates 'other'.

        Raises:
            ValueError: If either fitness is unset or the vectors differ in length
        """
        if self.fitness is None or other.fitness is None:
            raise ValueError(f"Cannot test dominance of elements {self.id} and {other.id}: fitness not set")
        if len(self.fitness) != len(other.fitness):
            raise ValueError(f"Cannot test dominance of elements {self.id} and {other.id}: "
                             f"fitness lengths {len(self.fitness)} and {len(other.fitness)} differ")

        a = np.asarray(self.fitness)
        b = np.asarray(other.fitness)
        return bool(np.all(a <= b) and np.any(a < b))

