"""
Genotype Module

This module implements the abstract Genotype class, the heritable encoding
every evolutionary algorithm operates on.

Classes:
    Genotype: Abstract base of all genotypes (variation operators, phenotype, XML)
"""

import xml.etree.ElementTree as ET
from abc import ABC, abstractmethod

import numpy as np

from moneat.genotype.fitness_element import FitnessElement

class Genotype(FitnessElement, ABC):
    """
    Abstract genotype.

    Genotypes are mutated in place; crossover and copy return new instances.

    Public Attributes:
        requires_mutation: True if the genotype was produced by a crossover in which
                           one parent contributed nothing to the common genes; the
                           algorithm then mutates it to avoid an exact clone

    Public Methods:
        mutate(...):                   Mutate in place
        cross_with(other, ...):        Offspring of this genotype and 'other'
        copy(new_id):                  Copy under a new ID
        to_phenotype():                The executable phenotype
        genome_size():                 Number of genes
        structure_information():       Numeric structure summary (see 'structure_labels()')
        structure_labels():            Labels of the structure summary
        to_xml_with_meta_information(): Genome, fitness and bookkeeping as XML
    """

    def __init__(self, id: int):
        super().__init__(id)
        self.requires_mutation: bool = False

    @abstractmethod
    def mutate(self, *args) -> None:
        pass

    @abstractmethod
    def cross_with(self, other: 'Genotype', *args) -> 'Genotype':
        pass

    @abstractmethod
    def copy(self, new_id: int) -> 'Genotype':
        pass

    @abstractmethod
    def to_phenotype(self):
        pass

    @abstractmethod
    def genome_size(self) -> int:
        pass

    @abstractmethod
    def structure_information(self) -> list[float]:
        pass

    @abstractmethod
    def structure_labels(self) -> list[str]:
        pass

    @abstractmethod
    def to_xml(self) -> ET.Element:
        """The 'Genome' element."""
        pass

    def fitness_to_xml(self) -> ET.Element:
        """
        The 'Fitness' element: one attribute 'F1', 'F2', ... per objective.

        Raises:
            ValueError: If the genotype has not been evaluated
        """
        if self.fitness is None:
            raise ValueError(f"Genotype {self.id} has no fitness: export to XML not possible")

        return ET.Element('Fitness', {f"F{index + 1}": str(round(float(value), 4))
                                      for index, value in enumerate(self.fitness)})

    def fitness_as_string(self) -> str:
        if self.fitness is None:
            raise ValueError(f"Genotype {self.id} has no fitness: export to string not possible")
        return "(" + ", ".join(str(round(float(value), 2)) for value in self.fitness) + ")"

    def to_xml_with_meta_information(self) -> ET.Element:
        element = ET.Element('Genotype',
                             ID              = str(self.id),
                             DominatedAfterT = str(self.dominated_after_evaluations),
                             ExperimentID    = str(self.experiment_id),
                             Generation      = str(self.generation))
        element.append(self.to_xml())
        element.append(self.fitness_to_xml())
        return element

    def _load_meta_information(self, element: ET.Element) -> None:
        """Restore bookkeeping and fitness written by 'to_xml_with_meta_information()'."""
        self.dominated_after_evaluations = int(element.get('DominatedAfterT', -1))
        self.experiment_id               = int(element.get('ExperimentID', -1))
        self.generation                  = int(element.get('Generation', -1))

        xml_fitness = element.find('Fitness')
        if xml_fitness is not None:
            fitness = [0.0] * len(xml_fitness.attrib)
            for key, value in xml_fitness.attrib.items():
                fitness[int(key[1:]) - 1] = float(value)
            self.fitness = np.array(fitness)

