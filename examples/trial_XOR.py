"""
Multi-objective XOR

This module evolves networks for the XOR problem under two objectives, both
minimized:
    f1: Σ(output - target)² over the four XOR cases
    f2: number of links of the network

The XOR Problem:
    Input (0, 0) → Output 0
    Input (0, 1) → Output 1
    Input (1, 0) → Output 1
    Input (1, 1) → Output 0

    A network needs at least one hidden neuron to solve it, so the two
    objectives conflict: every accurate network is larger than the minimal one.
    The run exports the trade-off front between error and size.

Usage:
    python examples/trial_XOR.py
    python examples/trial_XOR.py --algorithm neat-mods --n-jobs 4
    python examples/trial_XOR.py --algorithm nneat --q-procedure r2
"""

import argparse
from pathlib import Path

from loguru import logger

from moneat.run.cantor_emoa import CantorEMOA
from moneat.run.config      import Config
from moneat.run.experiment  import Experiment
from moneat.run.neat        import NEAT, NEATMODS, NEATPS, NNEAT
from moneat.sorting         import CrowdingDistance, Hypervolume, NondominatedRanking, R2Indicator

class Experiment_XOR(Experiment):
    """Error and size of a network on the XOR problem."""

    xor_inputs  = [[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]]
    xor_outputs = [0.0, 1.0, 1.0, 0.0]

    def _evaluate_phenotype(self, phenotype) -> list[float]:
        error = 0.0
        for inputs, expected in zip(self.xor_inputs, self.xor_outputs):
            phenotype.reset()
            output = phenotype.activate(inputs)[0]
            error += (output - expected) ** 2

        return [error, float(len(phenotype.links))]

Q_PROCEDURES = {
    'hv': lambda: NondominatedRanking(Hypervolume()),
    'r2': lambda: NondominatedRanking(R2Indicator()),
    'cd': lambda: NondominatedRanking(CrowdingDistance()),
}

def create_algorithm(name: str, experiment: Experiment, config: Config, q_procedure):
    if name == 'neat':
        return NEAT(experiment, config, q_procedure)
    if name == 'neat-ps':
        return NEATPS(experiment, config)
    if name == 'neat-mods':
        return NEATMODS(experiment, config)
    if name == 'nneat':
        return NNEAT(experiment, config, q_procedure)
    return CantorEMOA(experiment, config, q_procedure)

def report(algorithm) -> None:
    """Log the known Pareto front, smallest networks first."""
    front = sorted(algorithm.known_pareto_front(), key=lambda genotype: genotype.fitness[1])

    logger.info("Known Pareto front ({} solutions):", len(front))
    for genotype in front:
        logger.info("  genotype {:5d}: error={:.4f} links={:.0f}",
                    genotype.id, genotype.fitness[0], genotype.fitness[1])

def main():
    parser = argparse.ArgumentParser(description='Multi-objective XOR')
    parser.add_argument('--algorithm', choices=['neat', 'neat-ps', 'neat-mods', 'nneat', 'cantor'],
                        default='nneat', help='Algorithm to run')
    parser.add_argument('--q-procedure', choices=sorted(Q_PROCEDURES), default='hv',
                        help='Q-procedure sorting the population')
    parser.add_argument('--config', default=str(Path(__file__).parent / 'config_xor.ini'),
                        help='Configuration file')
    parser.add_argument('--n-jobs', type=int, default=1,
                        help='Number of parallel evaluation jobs')
    args = parser.parse_args()

    config     = Config(args.config)
    bias       = config.bias and args.algorithm != 'cantor'
    experiment = Experiment_XOR(config.experiment_id, config.num_inputs, config.num_outputs, bias, args.n_jobs)

    algorithm = create_algorithm(args.algorithm, experiment, config, Q_PROCEDURES[args.q_procedure]())
    algorithm.run()
    report(algorithm)

if __name__ == '__main__':
    main()
