"""
Link Gene Module

This module implements the LinkGene class, the unit of heritable
information of a NetworkGenotype.

Classes:
    LinkGene: Gene encoding a weighted link, identified by its innovation ID
"""

import xml.etree.ElementTree as ET

class LinkGene:
    """
    A gene describing a weighted link between two neurons.

    The endpoints of the link are not stored in the gene: they are recorded
    once, in the InnovationRegistry, under the gene's innovation ID. Identity
    and ordering of genes are defined solely by the innovation ID.

    Disabled genes are never deleted from a genome; they keep the genome
    alignable with genomes in which the link is still active.

    Public Attributes:
        innovation_id: Innovation ID of the link
        weight:        Weight of the link
        enabled:       Whether this link is active in the network
    """

    def __init__(self, innovation_id: int, weight: float, enabled: bool = True):
        self.innovation_id: int   = innovation_id
        self.weight       : float = weight
        self.enabled      : bool  = enabled

    def copy(self) -> 'LinkGene':
        return LinkGene(self.innovation_id, self.weight, self.enabled)

    def to_xml(self) -> ET.Element:
        return ET.Element('Gene',
                          Innovation = str(self.innovation_id),
                          Weight     = str(round(self.weight, 4)),
                          Enabled    = str(self.enabled))

    @classmethod
    def from_xml(cls, element: ET.Element) -> 'LinkGene':
        return cls(int(element.get('Innovation')),
                   float(element.get('Weight')),
                   element.get('Enabled', 'True') == 'True')

    def __eq__(self, other):
        return isinstance(other, LinkGene) and self.innovation_id == other.innovation_id

    def __hash__(self):
        return hash(self.innovation_id)

    def __repr__(self):
        return f"LinkGene(innovation_id={self.innovation_id:03d}, weight={self.weight:+.6f}, enabled={self.enabled})"

    def __str__(self):
        return f"[{self.innovation_id:03d},{'E' if self.enabled else 'D'},{self.weight:+.02f}]"
