"""
Cantor Network Module

This module implements a simplified network encoding that needs no innovation
registry: a link is identified by the Cantor pairing of its endpoints, and a
hidden neuron created by splitting a link takes the ID of that link. Identical
structural mutations in different lineages therefore produce identical IDs.

Functions:
    cantor:         Cantor pairing of two non-negative integers
    cantor_inverse: Inverse of the Cantor pairing

Classes:
    CantorLink:    A weighted link identified by the Cantor pair of its endpoints
    CantorNetwork: Genome made of CantorLinks, without bias and without disabled genes
"""

import math
import random
import xml.etree.ElementTree as ET

from moneat.genotype.genotype   import Genotype
from moneat.genotype.innovation import NeuronType
from moneat.phenotype.network   import NetworkPhenotype

def cantor(x: int, y: int) -> int:
    return (x + y) * (x + y + 1) // 2 + y

def cantor_inverse(z: int) -> tuple[int, int]:
    w = (math.isqrt(8 * z + 1) - 1) // 2
    t = (w * w + w) // 2
    y = z - t
    return w - y, y

class CantorLink:
    """
    A link of a CantorNetwork.

    Public Attributes:
        source:  ID of the source neuron
        target:  ID of the target neuron
        weight:  Weight of the link
        link_id: cantor(source, target)
    """

    def __init__(self, source: int, target: int, weight: float = 1.0):
        self.source : int   = source
        self.target : int   = target
        self.weight : float = weight
        self.link_id: int   = cantor(source, target)

    def copy(self) -> 'CantorLink':
        return CantorLink(self.source, self.target, self.weight)

    def to_xml(self) -> ET.Element:
        return ET.Element('Gene', ID=str(self.link_id), Weight=str(round(self.weight, 4)))

    @classmethod
    def from_xml(cls, element: ET.Element) -> 'CantorLink':
        source, target = cantor_inverse(int(element.get('ID')))
        return cls(source, target, float(element.get('Weight')))

    def __eq__(self, other):
        return isinstance(other, CantorLink) and self.link_id == other.link_id

    def __hash__(self):
        return hash(self.link_id)

    def __repr__(self):
        return f"CantorLink({self.source:02d}=>{self.target:02d}, id={self.link_id}, weight={self.weight:+.4f})"

class CantorNetwork(Genotype):
    """
    A network genome whose link IDs are Cantor pairs of their endpoints.

    Neuron IDs: inputs [0, num_inputs), outputs [num_inputs, num_inputs + num_outputs),
    hidden neurons take the ID of the link they split. The encoding has no bias
    neuron and no disabled genes: splitting a link removes it.

    Public Methods:
        create_base(weight_range):   Link every input to every output
        add_link / split_link / remove_link / perturb_weights: Mutation operators
        mutate(...):                 All of the above, in place
        cross_with(other, ...):      Union crossover keyed by link ID
    """

    def __init__(self, id: int, num_inputs: int, num_outputs: int, links: list[CantorLink] | None = None):
        super().__init__(id)
        self.num_inputs : int              = num_inputs
        self.num_outputs: int              = num_outputs
        self.links      : list[CantorLink] = sorted(links or [], key=lambda link: link.link_id)

    def create_base(self, weight_range: float) -> None:
        for i in range(self.num_inputs):
            for j in range(self.num_outputs):
                self.links.append(CantorLink(i, self.num_inputs + j, (random.random() - 0.5) * 2.0 * weight_range))
        self.links.sort(key=lambda link: link.link_id)

    def neuron_type(self, neuron_id: int) -> NeuronType:
        if neuron_id < self.num_inputs:
            return NeuronType.INPUT
        if neuron_id < self.num_inputs + self.num_outputs:
            return NeuronType.OUTPUT
        return NeuronType.HIDDEN

    def add_link(self, weight_range: float) -> bool:
        """Link two neurons of the network that are not linked yet; the target must not be an input."""
        sources = set()
        targets = set()
        for link in self.links:
            sources.update((link.source, link.target))
            targets.update(n for n in (link.source, link.target) if n >= self.num_inputs)

        existing  = {link.link_id for link in self.links}
        available = [(s, t) for s in sorted(sources) for t in sorted(targets) if cantor(s, t) not in existing]

        if not available:
            return False

        source, target = random.choice(available)
        self.links.append(CantorLink(source, target, (random.random() - 0.5) * 2.0 * weight_range))
        return True

    def split_link(self) -> bool:
        """
        Replace a link by a new neuron and two links through it. Self-loops and
        links whose id would name an input or output neuron are not split.
        """
        existing  = {link.link_id for link in self.links}
        available = [link for link in self.links
                     if link.source != link.target
                     and link.link_id >= self.num_inputs + self.num_outputs
                     and cantor(link.source, link.link_id) not in existing
                     and cantor(link.link_id, link.target) not in existing]
        if not available:
            return False

        selected = random.choice(available)
        neuron   = selected.link_id

        self.links.remove(selected)
        self.links.append(CantorLink(selected.source, neuron, random.random()))
        self.links.append(CantorLink(neuron, selected.target, 1.0))
        return True

    def remove_link(self) -> bool:
        """
        Remove a self-loop, or a link whose source keeps another outgoing and
        whose target keeps another incoming link (self-loops not counted).
        """
        available = []
        for link in self.links:
            if link.source == link.target:
                available.append(link)
                continue

            others = [other for other in self.links if other is not link and other.source != other.target]
            if (any(other.source == link.source for other in others) and
                    any(other.target == link.target for other in others)):
                available.append(link)

        if not available:
            return False

        self.links.remove(random.choice(available))
        return True

    def perturb_weights(self, prb_modify_weight: float, weight_range: float) -> None:
        for link in self.links:
            if random.random() <= prb_modify_weight:
                link.weight += (random.random() - 0.5) * 2.0 * weight_range

    def mutate(self,
               prb_add_link     : float,
               prb_add_neuron   : float,
               prb_remove_link  : float,
               prb_modify_weight: float,
               weight_range     : float) -> None:
        added_link   = random.random() <= prb_add_link    and self.add_link(weight_range)
        added_neuron = random.random() <= prb_add_neuron  and self.split_link()
        removed_link = random.random() <= prb_remove_link and self.remove_link()

        self.perturb_weights(prb_modify_weight, weight_range)

        if added_link or added_neuron or removed_link:
            self.links.sort(key=lambda link: link.link_id)

        self.requires_mutation = False

    def cross_with(self, other: 'CantorNetwork', prb_cross_gene_by_choosing: float, new_id: int) -> 'CantorNetwork':
        """
        Crossover over the union of both parents' links.

        A common link takes the weight of one parent (probability
        'prb_cross_gene_by_choosing') or the mean of both. A link present in one
        parent only is inherited from the parent with the higher q-value, or
        from either parent if their q-values are equal.
        """
        genes: dict[int, list] = {}
        for link in self.links:
            genes[link.link_id] = [link, link.weight, None]
        for link in other.links:
            if link.link_id in genes:
                genes[link.link_id][2] = link.weight
            else:
                genes[link.link_id] = [link, None, link.weight]

        take_first  = self.q_value >= other.q_value
        take_second = other.q_value >= self.q_value

        offspring = []
        for link, weight1, weight2 in genes.values():
            if weight1 is not None and weight2 is not None:
                if random.random() <= prb_cross_gene_by_choosing:
                    weight = weight1 if random.random() <= 0.5 else weight2
                else:
                    weight = (weight1 + weight2) / 2.0
            elif weight1 is not None and take_first:
                weight = weight1
            elif weight2 is not None and take_second:
                weight = weight2
            else:
                continue

            offspring.append(CantorLink(link.source, link.target, weight))

        return CantorNetwork(new_id, self.num_inputs, self.num_outputs, offspring)

    def copy(self, new_id: int) -> 'CantorNetwork':
        return CantorNetwork(new_id, self.num_inputs, self.num_outputs, [link.copy() for link in self.links])

    def genome_size(self) -> int:
        return len(self.links)

    def structure_information(self) -> list[float]:
        neurons = {n for link in self.links for n in (link.source, link.target)}
        return [float(len(neurons)), float(len(self.links))]

    def structure_labels(self) -> list[str]:
        return ["Neurons", "Links"]

    def to_phenotype(self) -> NetworkPhenotype:
        """Build the network; self-loops are time-delayed."""
        neuron_types = {n: self.neuron_type(n) for n in range(self.num_inputs + self.num_outputs)}
        links = []
        for link in self.links:
            neuron_types.setdefault(link.source, self.neuron_type(link.source))
            neuron_types.setdefault(link.target, self.neuron_type(link.target))
            links.append((link.source, link.target, link.weight, link.source == link.target))

        return NetworkPhenotype.from_links(self.id, neuron_types, links)

    def to_xml(self) -> ET.Element:
        genome = ET.Element('Genome', ID=str(self.id))
        for link in self.links:
            genome.append(link.to_xml())
        return genome

    @classmethod
    def from_xml(cls, element: ET.Element, num_inputs: int, num_outputs: int) -> 'CantorNetwork':
        """Load a network from a 'Genotype' element or a bare 'Genome' element."""
        genome  = element.find('Genome') if element.tag == 'Genotype' else element
        network = cls(int(element.get('ID', -1)), num_inputs, num_outputs,
                      [CantorLink.from_xml(xml_gene) for xml_gene in genome.findall('Gene')])
        if element.tag == 'Genotype':
            network._load_meta_information(element)
        return network

    def __str__(self):
        return f"CantorNetwork(id={self.id}, links={[link.link_id for link in self.links]})"
