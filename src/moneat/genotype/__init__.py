"""
Genotype Package

This package provides the heritable encodings evolved by the algorithms.

Exported:
    FitnessElement:     Base of everything a q-procedure can rank
    Genotype:           Abstract genotype
    NeuronType:         Neuron types
    NeuronInfo:         Neuron metadata
    Innovation:         Historical marking of a link
    InnovationRegistry: Issues innovation and neuron IDs
    LinkGene:           Gene of a NetworkGenotype
    NetworkGenotype:    NEAT network genome
    CantorLink:         Gene of a CantorNetwork
    CantorNetwork:      Registry-free network genome
    cantor / cantor_inverse: Cantor pairing
"""

# Order matters: the phenotype imports NeuronType from 'innovation'
from moneat.genotype.fitness_element  import FitnessElement
from moneat.genotype.innovation       import NeuronType, NeuronInfo, Innovation, InnovationRegistry
from moneat.genotype.link_gene        import LinkGene
from moneat.genotype.genotype         import Genotype
from moneat.genotype.network_genotype import NetworkGenotype
from moneat.genotype.cantor_network   import CantorLink, CantorNetwork, cantor, cantor_inverse

__all__ = [
    'FitnessElement',
    'Genotype',
    'NeuronType',
    'NeuronInfo',
    'Innovation',
    'InnovationRegistry',
    'LinkGene',
    'NetworkGenotype',
    'CantorLink',
    'CantorNetwork',
    'cantor',
    'cantor_inverse'
]
