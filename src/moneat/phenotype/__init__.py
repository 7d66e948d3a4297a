"""
Phenotype Package

This package provides the executable networks built from genotypes.

Exported:
    Neuron:           Neuron of a network phenotype
    Link:             Weighted link between two neurons
    NetworkPhenotype: (Possibly recurrent) neural network
"""

from moneat.phenotype.network import Neuron, Link, NetworkPhenotype

__all__ = [
    'Neuron',
    'Link',
    'NetworkPhenotype'
]
