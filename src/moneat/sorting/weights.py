"""
Weight Vectors Module

This module generates the uniformly spread weight vectors of the R2 indicator.

Classes:
    WeightGenerator:    Abstract generator caching its weight vectors
    HammersleyWeights:  Uniform design by the Hammersley method
"""

from abc import ABC, abstractmethod

import numpy as np

class WeightGenerator(ABC):
    """
    Abstract weight vector generator.

    Generated vectors are cached per (number of vectors, number of objectives).
    """

    def __init__(self):
        self._cache: dict[tuple[int, int], np.ndarray] = {}

    def weight_vectors(self, num_vectors: int, num_objectives: int) -> np.ndarray:
        """
        Return 'num_vectors' weight vectors of dimension 'num_objectives'
        (one per row), generating them on first request.
        """
        key = (num_vectors, num_objectives)
        if key not in self._cache:
            self._cache[key] = self.generate(num_vectors, num_objectives)
        return self._cache[key]

    @abstractmethod
    def generate(self, num_vectors: int, num_objectives: int) -> np.ndarray:
        pass

class HammersleyWeights(WeightGenerator):
    """
    Hammersley uniform design (Berenguer and Coello Coello, 2015).

    A (K-1)-dimensional design is built whose first coordinate is
    (2(i+1) - 1) / 2N and whose further coordinates are the radical inverses of
    i+1 in the first K-2 primes; it is then mapped onto the unit simplex.
    """

    def generate(self, num_vectors: int, num_objectives: int) -> np.ndarray:
        if num_objectives < 2:
            return np.ones((num_vectors, max(num_objectives, 0)))

        primes  = first_primes(num_objectives - 2)
        designs = np.zeros((num_vectors, num_objectives - 1))

        for i in range(num_vectors):
            designs[i, 0] = (2.0 * (i + 1) - 1.0) / (2.0 * num_vectors)

            for j in range(1, num_objectives - 1):
                prime    = primes[j - 1]
                fraction = 1.0 / prime
                d        = i + 1
                while d > 0:
                    designs[i, j] += fraction * (d % prime)
                    d        //= prime
                    fraction /= prime

        weights = np.zeros((num_vectors, num_objectives))
        for n, design in enumerate(designs):
            for i in range(1, num_objectives + 1):
                if i == num_objectives:
                    weight = 1.0
                else:
                    weight = 1.0 - design[i - 1] ** (1.0 / (num_objectives - i))

                for j in range(1, i):
                    weight *= design[j - 1] ** (1.0 / (num_objectives - j))

                weights[n, i - 1] = weight

        return weights

def first_primes(k: int) -> list[int]:
    primes    = []
    candidate = 2
    while len(primes) < k:
        if all(candidate % p != 0 for p in primes if p * p <= candidate):
            primes.append(candidate)
        candidate += 1
    return primes
