"""
Evolutionary Algorithm Module

This module defines the abstract base class of all evolutionary multi-objective
algorithms (EMOAs): the run loop, variation of parents into offspring, the
evaluation budget, the export set and the XML export.

Classes:
    Algorithm: Abstract EMOA
"""

import math
import os
import random
import uuid
import xml.etree.ElementTree as ET
from abc    import ABC, abstractmethod
from typing import Callable, Generic, TypeVar

import numpy as np
from loguru import logger

from moneat.genotype.genotype    import Genotype
from moneat.pool.selection       import select_rank_indices
from moneat.run.config           import Config
from moneat.run.experiment       import Experiment
from moneat.run.parameters       import Parameter, Parameterized
from moneat.sorting.pareto       import nondominated_subset
from moneat.sorting.q_procedure  import QProcedure

G = TypeVar('G', bound=Genotype)

Listener = Callable[['Algorithm'], None]

class Algorithm(Parameterized, ABC, Generic[G]):
    """
    Abstract base class for implementing an EMOA.

    The life cycle is: 'initialize()' registers the parameters, creates,
    evaluates and sorts the initial population; 'epoch()' performs one
    generation; 'run()' initializes (if necessary), performs epochs until the
    evaluation budget is spent and exports the result. A run can be performed
    only once per instance.

    Subclasses must implement:
    - _register_parameters(): Register the parameters the algorithm uses
    - _initialize_population(): Create the initial population
    - _epoch(): One generation (offspring, evaluation, survivor selection)
    - _cross(a, b): Recombine two parents
    - _mutate(a): Mutate a genotype in place

    Subclasses can override:
    - _terminate(): Custom termination logic (default: evaluation budget)
    - _sort_population(): Custom sorting (default: the q-procedure)
    - _xml_elements_to_export(): Representation-specific export data
    - _report_progress(), _final_report(): Progress reporting

    Events (lists of callables receiving the algorithm):
        on_population_initialized, on_evaluation_finished, on_sorted,
        on_epoch_finished, on_termination

    Public Attributes:
        experiment:     Evaluates the genotypes
        q_procedure:    Sorts the population
        uuid:           Unique ID of the instance, names the export file
        population:     The current genotypes, best first after sorting
        evaluations:    Number of evaluations performed
        generation:     Number of epochs performed
        next_genome_id: ID of the next genotype created

    Public Methods:
        initialize():              Prepare the algorithm and the initial population
        epoch():                   Perform one generation
        run():                     Perform a complete run
        variation(a, b):           Create offspring from one or two parents
        update_export_set():       Record the currently non-dominated genotypes
        export():                  Write the export set to '<output_dir>/<uuid>.xml'
        population_quality(qp):    Set value of the known Pareto front
        mean_fitness(precision):   Mean fitness vector of the population
    """

    name: str = "Algorithm"

    def __init__(self, experiment: Experiment, config: Config, q_procedure: QProcedure):
        """
        Parameters:
            experiment:  The experiment evaluating the genotypes
            config:      Supplies parameter values and the output directory
            q_procedure: The q-procedure sorting the population
        """
        super().__init__(config)
        self.experiment    : Experiment  = experiment
        self.q_procedure   : QProcedure  = q_procedure
        self.uuid          : str         = str(uuid.uuid4())

        self.population    : list[G]     = []
        self.evaluations   : int         = 0
        self.generation    : int         = 0
        self.next_genome_id: int         = 0

        self.initialized   : bool        = False
        self.terminated    : bool        = False
        self._has_run      : bool        = False

        # Genotypes non-dominated for at least one generation, by ID
        self._export_set       : dict[int, G] = {}
        self._non_dominated_yet: list[G]      = []

        self.on_population_initialized: list[Listener] = []
        self.on_evaluation_finished   : list[Listener] = []
        self.on_sorted                : list[Listener] = []
        self.on_epoch_finished        : list[Listener] = []
        self.on_termination           : list[Listener] = []

    def _fire(self, listeners: list[Listener]) -> None:
        for listener in listeners:
            listener(self)

    def _new_genome_id(self) -> int:
        genome_id = self.next_genome_id
        self.next_genome_id += 1
        return genome_id

    # ==========================================================================
    # Abstract steps
    # ==========================================================================

    @abstractmethod
    def _register_parameters(self) -> None:
        pass

    @abstractmethod
    def _initialize_population(self) -> None:
        pass

    @abstractmethod
    def _epoch(self) -> None:
        pass

    @abstractmethod
    def _cross(self, a: G, b: G) -> G:
        pass

    @abstractmethod
    def _mutate(self, a: G) -> None:
        """Mutate 'a' in place."""
        pass

    def _xml_elements_to_export(self) -> list[ET.Element]:
        return []

    # ==========================================================================
    # Run loop
    # ==========================================================================

    def initialize(self) -> None:
        """
        Register the parameters, then create, evaluate and sort the initial population.
        Does nothing if the algorithm is initialized already.
        """
        if self.initialized:
            return

        self._register_parameters()
        self.finalize_registration()

        self.on_evaluation_finished.append(self._update_experiment_progress)
        self.initialized = True

        logger.info("[{}] Initializing population of {} ({}), experiment {}",
                    self.name, self.get_as_int(Parameter.Population_Size), self.q_procedure, self.experiment.id)

        self._initialize_population()
        self._fire(self.on_population_initialized)

        self._evaluate()
        self._sort()
        self._report_progress()

    def epoch(self) -> None:
        """Perform one generation."""
        if not self.initialized:
            raise RuntimeError(f"{self.name}: 'initialize()' must be called before 'epoch()'")

        self._epoch()

        for genotype in self.population:
            genotype.age += 1

        self.generation += 1
        self._fire(self.on_epoch_finished)
        self._report_progress()

    def run(self) -> None:
        """
        Evolve until the evaluation budget is spent, then export the genotypes
        that were non-dominated for at least one generation.
        """
        if self._has_run:
            raise RuntimeError(f"{self.name}: an instance can be run only once")
        self._has_run = True

        self.initialize()

        while not self._check_termination():
            self.epoch()

        self.update_export_set()
        self.export()
        self._final_report()

    def _evaluate(self) -> None:
        self.evaluations += self.experiment.evaluate(self.population)
        self._fire(self.on_evaluation_finished)

    def _sort(self) -> None:
        self._sort_population()
        self._fire(self.on_sorted)

    def _sort_population(self) -> None:
        self.q_procedure.sort(self.population)

    def _terminate(self) -> bool:
        return self.evaluations >= self.get_as_int(Parameter.Max_Evaluations)

    def _check_termination(self) -> bool:
        self.terminated = self._terminate()
        if self.terminated:
            logger.info("[{}] Terminated after {} generations and {} evaluations",
                        self.name, self.generation, self.evaluations)
            self._fire(self.on_termination)
        return self.terminated

    def _update_experiment_progress(self, algorithm: 'Algorithm') -> None:
        self.experiment.progress = self.evaluations / self.get(Parameter.Max_Evaluations)

    # ==========================================================================
    # Variation
    # ==========================================================================

    def variation(self, a: G, b: G | None = None) -> G:
        """
        Create a child of one or two parents.

        Crossover (only with two parents) and mutation happen with their
        configured probabilities; without a second parent the crossover
        probability is added to the mutation probability. At least one operator
        is always applied, so the child is never an exact copy. Without
        crossover the child is a copy of the better ranked parent.

        Parameters:
            a: First parent
            b: Second parent, or None

        Returns:
            The child
        """
        prb_mutation  = self.get(Parameter.Prb_Mutation)
        prb_crossover = self.get(Parameter.Prb_Crossover)

        crossover = False
        if b is None:
            prb_mutation = min(prb_mutation + prb_crossover, 1.0)
        else:
            crossover = random.random() <= prb_crossover

        mutation = random.random() <= prb_mutation

        if not (crossover or mutation):
            if b is not None and random.random() < 0.5:
                crossover = True
            else:
                mutation = True

        if crossover:
            child = self._cross(a, b)
        elif b is not None and b.rank < a.rank:
            child = b.copy(self._new_genome_id())
        else:
            child = a.copy(self._new_genome_id())

        if mutation or child.requires_mutation:
            self._mutate(child)

        child.experiment_id = self.experiment.id
        child.generation    = self.generation
        return child

    # ==========================================================================
    # Export
    # ==========================================================================

    def known_pareto_front(self) -> list[G]:
        return nondominated_subset(self.population)

    def update_export_set(self) -> None:
        """
        Add the currently non-dominated genotypes to the export set.

        Genotypes that were non-dominated before and are now dominated by a
        member of the known Pareto front get the current evaluation count as
        'dominated_after_evaluations'.
        """
        front = sorted(self.known_pareto_front(), key=lambda genotype: genotype.id)
        if not front:
            logger.warning("[{}] Known Pareto front is empty in generation {}", self.name, self.generation)
            return

        for genotype in self._non_dominated_yet:
            for member in front:
                if member.id != genotype.id and member.dominates(genotype):
                    genotype.dominated_after_evaluations = self.evaluations
                    break

        self._non_dominated_yet = [g for g in self._non_dominated_yet if g.dominated_after_evaluations == -1]

        for member in front:
            if member not in self._non_dominated_yet:
                self._non_dominated_yet.append(member)
            self._export_set.setdefault(member.id, member)

    @property
    def export_set(self) -> list[G]:
        """Genotypes non-dominated for at least one generation, by ascending ID."""
        return [self._export_set[genotype_id] for genotype_id in sorted(self._export_set)]

    def export(self) -> str:
        """
        Write the export set and the representation-specific data to
        '<output_dir>/<uuid>.xml'.

        Returns:
            Path of the written file
        """
        xml_iteration = ET.Element('Iteration')
        xml_solutions = ET.SubElement(xml_iteration, 'Solutions')

        for genotype in self.export_set:
            xml_solutions.append(genotype.to_xml_with_meta_information())

        for element in self._xml_elements_to_export():
            xml_iteration.append(element)

        output_dir = getattr(self._config, 'output_dir', None) or '.'
        os.makedirs(output_dir, exist_ok=True)
        path = os.path.join(output_dir, f"{self.uuid}.xml")

        tree = ET.ElementTree(xml_iteration)
        ET.indent(tree)
        tree.write(path, encoding='utf-8', xml_declaration=True)

        logger.info("[{}] Exported {} solutions to '{}'", self.name, len(self._export_set), path)
        return path

    # ==========================================================================
    # Statistics
    # ==========================================================================

    def population_quality(self, q_procedure: QProcedure | None = None) -> float:
        """
        Quality of the known Pareto front.

        Parameters:
            q_procedure: Q-procedure measuring the quality; the sorting q-procedure if None
        """
        return (q_procedure or self.q_procedure).compute_set_value(self.known_pareto_front())

    def mean_fitness(self, precision: int = 3) -> list[float]:
        """Mean fitness vector of the population, rounded to 'precision' decimal places."""
        matrix = np.array([genotype.fitness for genotype in self.population], dtype=float)
        return [round(float(value), precision) for value in matrix.mean(axis=0)]

    def _report_progress(self) -> None:
        """
        Report progress after each generation.

        This default implementation logs the generation, the evaluations and
        the mean fitness of the population.
        """
        logger.info("[{}] Generation {} evaluations {} population {} mean fitness {}",
                    self.name, self.generation, self.evaluations, len(self.population), self.mean_fitness())

    def _final_report(self) -> None:
        front = self.known_pareto_front()
        logger.info("[{}] Run {} finished: {} generations, {} evaluations, {} non-dominated solutions, "
                    "{} solutions exported",
                    self.name, self.uuid, self.generation, self.evaluations, len(front), len(self._export_set))

    # ==========================================================================
    # Steady-state epoch
    # ==========================================================================

    def _steady_state_epoch(self) -> None:
        """
        One epoch of the SMS-EMOA scheme: round(replacement_rate * population_size)
        children (at least one) of rank-selected parents join the population,
        which is evaluated and sorted; the worst genotypes beyond the population
        size are discarded.
        """
        self.update_export_set()

        population_size    = self.get_as_int(Parameter.Population_Size)
        num_offspring      = max(1, math.floor(self.get(Parameter.Replacement_Rate) * population_size + 0.5))
        selection_pressure = self.get(Parameter.Selection_Pressure)

        for _ in range(num_offspring):
            first, second = select_rank_indices(0, min(population_size, len(self.population)) - 1, 2,
                                                selection_pressure)
            self.population.append(self.variation(self.population[first], self.population[second]))

        self._evaluate()
        self._sort()

        del self.population[population_size:]
