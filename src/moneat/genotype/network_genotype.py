"""
Network Genotype Module

This module implements the NEAT network genome: an ordered list of link genes,
keyed by innovation ID, whose endpoints are looked up in the InnovationRegistry.

Classes:
    NetworkGenotype: Genome of a variable-topology network with NEAT mutation and crossover
"""

import random
import xml.etree.ElementTree as ET

from loguru import logger

from moneat.genotype.genotype   import Genotype
from moneat.genotype.innovation import InnovationRegistry, NeuronType
from moneat.genotype.link_gene  import LinkGene
from moneat.phenotype.network   import NetworkPhenotype
from moneat.pool.selection      import equal_distribution, select_indices

class NetworkGenotype(Genotype):
    """
    The genome of a NEAT network.

    Invariants:
        - 'links' is sorted ascending by innovation ID
        - no two genes share an innovation ID
        - disabled genes are kept; only the remove-link mutation deletes genes

    Public Attributes:
        registry:                  Innovation registry shared by the whole run
        links:                     Link genes, sorted by innovation ID
        no_link_anchors_remaining: True once add-link found every possible link present
                                   (reset whenever a neuron is added)

    Public Methods:
        create_minimal(registry, id, weight_range): Random fully-connected genome without hidden neurons
        mutate(...):                                Structural and weight mutation, in place
        cross_with(other, ...):                     NEAT crossover
        copy(new_id):                               Deep copy under a new ID
        to_phenotype():                             The NetworkPhenotype
        to_xml() / from_xml(element, registry):     XML persistence
    """

    def __init__(self,
                 id               : int,
                 registry         : InnovationRegistry,
                 links            : list[LinkGene] | None = None,
                 requires_mutation: bool = False):
        """
        Parameters:
            id:                Genotype ID
            registry:          Innovation registry of the run
            links:             Genes of the genome (sorted on construction)
            requires_mutation: See Genotype
        """
        super().__init__(id)
        self.registry                 : InnovationRegistry = registry
        self.links                    : list[LinkGene]     = sorted(links or [], key=lambda gene: gene.innovation_id)
        self.no_link_anchors_remaining: bool               = False
        self.requires_mutation                             = requires_mutation

    @classmethod
    def create_minimal(cls, registry: InnovationRegistry, id: int, weight_range: float) -> 'NetworkGenotype':
        """
        Create a genome linking every input (and the bias) to every output,
        with weights drawn uniformly from [-weight_range, weight_range].
        """
        num_inputs, num_outputs = registry.num_inputs, registry.num_outputs
        links = []

        for i in range(num_inputs):
            for j in range(num_outputs):
                innovation = registry.query_or_create(i, num_inputs + j)
                links.append(LinkGene(innovation.innovation_id, weight_range * ((random.random() - 0.5) * 2.0)))

        if registry.bias:
            for j in range(num_outputs):
                innovation = registry.query_or_create(registry.bias_neuron, num_inputs + j)
                links.append(LinkGene(innovation.innovation_id, weight_range * ((random.random() - 0.5) * 2.0)))

        return cls(id, registry, links)

    # ==========================================================================
    # Structural mutation
    # ==========================================================================

    def add_link(self, weight_range: float) -> bool:
        """
        Add a link between two neurons of the network that are not linked yet.
        The target must be a hidden or output neuron.

        Returns:
            True if a link was added
        """
        if self.no_link_anchors_remaining:
            return False

        neurons        = set()
        existing_pairs = set()
        for gene in self.links:
            if not gene.enabled:
                continue
            innovation = self.registry.get_innovation(gene.innovation_id)
            neurons.add(innovation.from_neuron)
            neurons.add(innovation.to_neuron)
            existing_pairs.add((innovation.from_neuron, innovation.to_neuron))

        neurons = sorted(neurons)
        targets = [n for n in neurons if self.registry.neuron_type(n) in (NeuronType.HIDDEN, NeuronType.OUTPUT)]
        pairs   = [(s, t) for s in neurons for t in targets if (s, t) not in existing_pairs]

        if not pairs:
            logger.debug("[Genotype] Genotype {}: no link anchors remaining", self.id)
            self.no_link_anchors_remaining = True
            return False

        from_neuron, to_neuron = random.choice(pairs)
        innovation = self.registry.query_or_create(from_neuron, to_neuron)
        gene       = LinkGene(innovation.innovation_id, weight_range * ((random.random() - 0.5) * 2.0))

        # A disabled gene for this link may exist already
        if gene in self.links:
            return False

        self.links.append(gene)
        return True

    def add_neuron(self) -> bool:
        """
        Split an enabled link with a new neuron. The split link is disabled
        and replaced by a link into the new neuron (weight 1) and a link out of
        it (the old weight). Self-loops and links from the bias are never split.

        Returns:
            True if a neuron was added
        """
        candidates = []
        for gene in self.links:
            if not gene.enabled:
                continue
            innovation = self.registry.get_innovation(gene.innovation_id)
            if (innovation.from_neuron != innovation.to_neuron and
                    self.registry.neuron_type(innovation.from_neuron) != NeuronType.BIAS):
                candidates.append((gene, innovation))

        if not candidates:
            return False

        gene, innovation = random.choice(candidates)
        _, link_in, link_out = self.registry.split(innovation)

        # A re-enabled link may have been split in this genome before
        present = {g.innovation_id for g in self.links}
        if link_in.innovation_id in present or link_out.innovation_id in present:
            return False

        self.links.append(LinkGene(link_in.innovation_id,  1.0))
        self.links.append(LinkGene(link_out.innovation_id, gene.weight))
        gene.enabled = False

        self.no_link_anchors_remaining = False
        return True

    def remove_link(self) -> bool:
        """
        Delete a link. Eligible are self-loops, and links whose source keeps
        another outgoing and whose target keeps another incoming non-self-loop link.

        Returns:
            True if a link was removed
        """
        endpoints = [(gene, self.registry.get_innovation(gene.innovation_id)) for gene in self.links]

        candidates = []
        for gene, innovation in endpoints:
            if innovation.from_neuron == innovation.to_neuron:
                candidates.append(gene)
                continue

            others = [other for g, other in endpoints if g is not gene and other.from_neuron != other.to_neuron]
            source_kept = any(other.from_neuron == innovation.from_neuron for other in others)
            target_kept = any(other.to_neuron   == innovation.to_neuron   for other in others)
            if source_kept and target_kept:
                candidates.append(gene)

        if not candidates:
            return False

        self.links.remove(random.choice(candidates))
        self.no_link_anchors_remaining = False
        return True

    def perturb_weights(self, force: bool, prb_modify_weight: float, weight_range: float) -> None:
        """
        Shift the weights of round(len(links) * prb_modify_weight) randomly chosen
        genes (at least one if 'force') by a value from [-weight_range, weight_range].
        """
        if not self.links:
            return

        amount = int(round(len(self.links) * prb_modify_weight))
        if force and amount == 0:
            amount = 1

        for index in select_indices(equal_distribution(len(self.links)), amount):
            self.links[index].weight += (random.random() - 0.5) * 2.0 * weight_range

    def mutate(self,
               prb_add_link     : float,
               prb_add_neuron   : float,
               prb_modify_weight: float,
               weight_range     : float,
               prb_remove_link  : float = 0.0) -> None:
        """
        Mutate the genome in place.

        Structural operators are attempted in turn (add link, add neuron,
        remove link), each with its own probability. The weights are perturbed
        afterwards; if no structural operator succeeded at least one weight is
        shifted, so that every call changes the genome.

        Parameters:
            prb_add_link:      Probability of attempting to add a link
            prb_add_neuron:    Probability of attempting to add a neuron
            prb_modify_weight: Fraction of genes whose weight is perturbed
            weight_range:      Range of new weights and of weight shifts
            prb_remove_link:   Probability of attempting to remove a link
        """
        added_link    = random.random() <= prb_add_link    and self.add_link(weight_range)
        added_neuron  = random.random() <= prb_add_neuron  and self.add_neuron()
        removed_link  = random.random() <= prb_remove_link and self.remove_link()

        changed = added_link or added_neuron or removed_link
        self.perturb_weights(not changed, prb_modify_weight, weight_range)

        if changed:
            self.links.sort(key=lambda gene: gene.innovation_id)

        self.requires_mutation = False

    # ==========================================================================
    # Crossover
    # ==========================================================================

    def _dominant_parent_is_self(self, other: 'NetworkGenotype') -> bool:
        """Decide which parent passes on its disjoint and excess genes."""
        if self.q_value != other.q_value:
            return self.q_value > other.q_value
        if len(self.links) != len(other.links):
            return len(self.links) < len(other.links)
        return random.random() < 0.5

    def cross_with(self,
                   other                        : 'NetworkGenotype',
                   prb_cross_gene_by_choosing   : float,
                   prb_gene_enabled_on_crossover: float,
                   new_id                       : int) -> 'NetworkGenotype':
        """
        NEAT crossover of this genotype ("mum") with 'other' ("dad").

        The genomes are aligned by innovation ID. Disjoint and excess genes are
        inherited from the dominant parent only (higher q-value, then fewer genes,
        then chance). A common gene takes the weight of one parent (probability
        'prb_cross_gene_by_choosing') or the mean of both; its enabled state comes
        from the dominant parent, re-enabled with probability
        'prb_gene_enabled_on_crossover' if exactly one parent disabled it.

        Parameters:
            other:                         The second parent
            prb_cross_gene_by_choosing:    Probability of choosing over averaging common weights
            prb_gene_enabled_on_crossover: Probability of re-enabling a gene disabled in one parent
            new_id:                        ID of the offspring

        Returns:
            The offspring; 'requires_mutation' is set if one parent contributed
            to none of the common genes
        """
        from_mum = self._dominant_parent_is_self(other)
        mum, dad = self.links, other.links

        offspring      = []
        taken_from_mum = 0
        taken_from_dad = 0
        i_mum, i_dad   = 0, 0

        while i_mum < len(mum) or i_dad < len(dad):
            gene = None

            # Excess or disjoint gene of dad
            if i_mum == len(mum) or (i_dad < len(dad) and dad[i_dad].innovation_id < mum[i_mum].innovation_id):
                if not from_mum:
                    gene = dad[i_dad].copy()
                i_dad += 1

            # Excess or disjoint gene of mum
            elif i_dad == len(dad) or mum[i_mum].innovation_id < dad[i_dad].innovation_id:
                if from_mum:
                    gene = mum[i_mum].copy()
                i_mum += 1

            # Common gene
            else:
                gene_mum, gene_dad = mum[i_mum], dad[i_dad]
                gene = LinkGene(gene_mum.innovation_id, gene_mum.weight)

                if gene_mum.weight != gene_dad.weight:
                    if random.random() <= prb_cross_gene_by_choosing:
                        if random.random() <= 0.5:
                            taken_from_mum += 1
                        else:
                            taken_from_dad += 1
                            gene.weight     = gene_dad.weight
                    else:
                        taken_from_mum += 1
                        taken_from_dad += 1
                        gene.weight     = (gene_mum.weight + gene_dad.weight) / 2.0

                gene.enabled = gene_mum.enabled if from_mum else gene_dad.enabled
                if gene_mum.enabled != gene_dad.enabled and random.random() <= prb_gene_enabled_on_crossover:
                    gene.enabled = True

                i_mum += 1
                i_dad += 1

            if gene is not None:
                offspring.append(gene)

        return NetworkGenotype(new_id, self.registry, offspring,
                               requires_mutation=(taken_from_mum == 0 or taken_from_dad == 0))

    def copy(self, new_id: int) -> 'NetworkGenotype':
        return NetworkGenotype(new_id, self.registry, [gene.copy() for gene in self.links])

    # ==========================================================================
    # Structure & phenotype
    # ==========================================================================

    def genome_size(self) -> int:
        return len(self.links)

    def enabled_endpoints(self) -> list[tuple[LinkGene, int, int]]:
        """(gene, from neuron, to neuron) of every enabled gene."""
        result = []
        for gene in self.links:
            if gene.enabled:
                innovation = self.registry.get_innovation(gene.innovation_id)
                result.append((gene, innovation.from_neuron, innovation.to_neuron))
        return result

    def structure_information(self) -> list[float]:
        neurons   = set()
        recurrent = 0
        for _, from_neuron, to_neuron in self.enabled_endpoints():
            neurons.add(from_neuron)
            neurons.add(to_neuron)
            if self.registry.is_recurrent(from_neuron, to_neuron):
                recurrent += 1
        return [float(len(neurons)), float(len(self.links)), float(recurrent)]

    def structure_labels(self) -> list[str]:
        return ["Neurons", "Links", "Links (Rec.)"]

    def to_phenotype(self) -> NetworkPhenotype:
        """
        Build the network of the enabled genes.

        All input and output neurons (and the bias) are part of the network, even
        when no enabled gene touches them, so that input and output vectors keep
        their length. Recurrent links are time-delayed.
        """
        registry     = self.registry
        neuron_types = {n: registry.neuron_type(n) for n in range(registry.num_inputs + registry.num_outputs)}
        if registry.bias:
            neuron_types[registry.bias_neuron] = NeuronType.BIAS

        links = []
        for gene, from_neuron, to_neuron in self.enabled_endpoints():
            neuron_types.setdefault(from_neuron, registry.neuron_type(from_neuron))
            neuron_types.setdefault(to_neuron,   registry.neuron_type(to_neuron))
            links.append((from_neuron, to_neuron, gene.weight, registry.is_recurrent(from_neuron, to_neuron)))

        return NetworkPhenotype.from_links(self.id, neuron_types, links)

    # ==========================================================================
    # XML
    # ==========================================================================

    def to_xml(self) -> ET.Element:
        genome = ET.Element('Genome', ID=str(self.id))
        for gene in self.links:
            genome.append(gene.to_xml())
        return genome

    @classmethod
    def from_xml(cls, element: ET.Element, registry: InnovationRegistry) -> 'NetworkGenotype':
        """
        Load a genotype from a 'Genotype' element (as written by
        'to_xml_with_meta_information()') or from a bare 'Genome' element.
        The registry must be the one the genotype was created with.
        """
        if element.tag == 'Genotype':
            genome   = element.find('Genome')
            genotype = cls(int(element.get('ID')), registry,
                           [LinkGene.from_xml(xml_gene) for xml_gene in genome.findall('Gene')])
            genotype._load_meta_information(element)
            return genotype

        return cls(int(element.get('ID', -1)), registry,
                   [LinkGene.from_xml(xml_gene) for xml_gene in element.findall('Gene')])

    def __str__(self):
        return f"NetworkGenotype(id={self.id}, genes=[{' '.join(str(gene) for gene in self.links)}])"
