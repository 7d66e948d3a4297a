"""
Experiment Module

This module defines the abstract base class for the problems networks are
evolved for, with built-in support for CPU-based parallelization using joblib.

An experiment converts genotypes into phenotypes and assigns each of them a
fitness vector. Fitness vectors are minimized componentwise and must have the
same length for every genotype of a run.

Classes:
    Experiment: Abstract problem definition and evaluation driver
"""

from abc    import ABC, abstractmethod
from joblib import Parallel, delayed
from typing import Sequence

import numpy as np

from moneat.genotype.genotype import Genotype
from moneat.phenotype.network import NetworkPhenotype

class Experiment(ABC):
    """
    Abstract base class for implementing an experiment.

    Subclasses must implement:
    - _evaluate_phenotype(phenotype): Fitness vector of a single network

    Public Attributes:
        id:          Experiment ID, stored on every genotype of a run
        num_inputs:  Number of input neurons of the evolved networks
        num_outputs: Number of output neurons of the evolved networks
        bias:        Whether networks have a bias neuron
        n_jobs:      Parallel processes for fitness evaluation
        progress:    Fraction of the evaluation budget used so far (set by the algorithm)

    Public Methods:
        evaluate(population): Evaluate every genotype lacking a fitness vector

    Parallelization of fitness evaluation:
        n_jobs=1:  Serial evaluation (no parallelization)
        n_jobs>1:  Use specified number of parallel processes
        n_jobs=-1: Use all available CPU cores
    """

    # Whether a genotype keeps its fitness once evaluated (no re-evaluation of noisy problems)
    evaluate_each_solution_once: bool = True

    def __init__(self,
                 id         : int,
                 num_inputs : int,
                 num_outputs: int,
                 bias       : bool = True,
                 n_jobs     : int  = 1):
        """
        Parameters:
            id:          Experiment ID
            num_inputs:  Number of input neurons
            num_outputs: Number of output neurons
            bias:        Whether networks have a bias neuron
            n_jobs:      Number of parallel processes for fitness evaluation
        """
        self.id         : int   = id
        self.num_inputs : int   = num_inputs
        self.num_outputs: int   = num_outputs
        self.bias       : bool  = bias
        self.n_jobs     : int   = n_jobs
        self.progress   : float = 0.0

    @abstractmethod
    def _evaluate_phenotype(self, phenotype: NetworkPhenotype) -> Sequence[float]:
        """
        Evaluate a network and return its fitness vector.

        This method should test the network on the problem domain. Lower values
        are better in every objective. The method must not touch any state shared
        with the evolutionary loop, since it may run in a separate process.

        Parameters:
            phenotype: The network to evaluate

        Returns:
            The fitness vector of the network
        """
        pass

    def evaluate(self, population: Sequence[Genotype]) -> int:
        """
        Evaluate the genotypes of 'population' lacking a fitness vector.

        Returns only after every evaluation has finished.

        Parameters:
            population: Genotypes to evaluate

        Returns:
            Number of genotypes evaluated by this call
        """
        to_evaluate = [g for g in population if not self.evaluate_each_solution_once or g.fitness is None]
        phenotypes  = [g.to_phenotype() for g in to_evaluate]

        serialize = self.n_jobs == 1

        if serialize:
            fitness_all = [self._evaluate_phenotype(p) for p in phenotypes]
        else:
            fitness_all = Parallel(self.n_jobs)(delayed(self._evaluate_phenotype)(p) for p in phenotypes)

        for genotype, fitness in zip(to_evaluate, fitness_all):
            genotype.fitness = np.asarray(fitness, dtype=float)

        return len(to_evaluate)
