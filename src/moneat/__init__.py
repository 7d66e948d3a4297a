"""
MO-NEAT - Multi-objective neuroevolution of augmenting topologies.

This package evolves variable-topology neural networks under several
competing objectives. Genomes are aligned through historical markings
(innovations), populations are clustered into species and ranked by pluggable
q-procedures (non-dominated ranking, hypervolume, R2 indicator, crowding
distance, Pareto strength, Riesz s-energy).

Main components:
- genotype: Genetic encodings (link genes, innovation registry, Cantor networks)
- phenotype: Executable networks built from genotypes
- sorting: Pareto dominance and q-procedures
- pool: Selection, species, difference metrics and speciators
- run: Configuration, parameters, experiments and algorithms
- activations: Activation functions for neural networks

Example:
    >>> from moneat import Config, Experiment, NNEAT, NondominatedRanking, Hypervolume
    >>> class MyExperiment(Experiment):
    ...     def _evaluate_phenotype(self, phenotype):
    ...         # Return the fitness vector (minimized)
    ...         pass
    >>> config    = Config("config.ini")
    >>> algorithm = NNEAT(MyExperiment(0, 2, 1), config, NondominatedRanking(Hypervolume()))
    >>> algorithm.run()
"""

__version__ = "0.1.0"

# Import main classes for convenient access; the genotype package goes first
from moneat.genotype.innovation       import InnovationRegistry
from moneat.genotype.network_genotype import NetworkGenotype
from moneat.genotype.cantor_network   import CantorNetwork
from moneat.phenotype.network         import NetworkPhenotype
from moneat.sorting                   import (NondominatedRanking, Hypervolume, R2Indicator, CrowdingDistance,
                                              ParetoStrength, RieszSEnergy, SingleObjective, CombinedQProcedure)
from moneat.run.config                import Config
from moneat.run.parameters            import Parameter, ParameterError
from moneat.run.experiment            import Experiment
from moneat.run.neat                  import NEAT, NEATPS, NEATMODS, NNEAT
from moneat.run.cantor_emoa           import CantorEMOA

__all__ = [
    "InnovationRegistry",
    "NetworkGenotype",
    "CantorNetwork",
    "NetworkPhenotype",
    "NondominatedRanking",
    "Hypervolume",
    "R2Indicator",
    "CrowdingDistance",
    "ParetoStrength",
    "RieszSEnergy",
    "SingleObjective",
    "CombinedQProcedure",
    "Config",
    "Parameter",
    "ParameterError",
    "Experiment",
    "NEAT",
    "NEATPS",
    "NEATMODS",
    "NNEAT",
    "CantorEMOA",
]
