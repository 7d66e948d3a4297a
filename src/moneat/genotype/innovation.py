"""
Innovation Registry Module

This module implements the historical marking of structural mutations.
Every link between two neurons ever created during a run is given an
innovation ID; every link that is split is given the ID of the neuron
that split it. Genomes from different lineages can then be aligned
gene-by-gene by innovation ID.

Classes:
    NeuronType:         Enumeration for neuron types (INPUT, BIAS, HIDDEN, OUTPUT)
    NeuronInfo:         Metadata about a neuron (type, horizontal position)
    Innovation:         A link between two neurons, and the neuron splitting it
    InnovationRegistry: Single source of truth for innovation and neuron IDs
"""

import xml.etree.ElementTree as ET
from enum import IntEnum

from loguru import logger

class NeuronType(IntEnum):
    """
    Neurons come in four types. The integer order is the order
    neurons are activated in (inputs first, outputs last).
    """
    INPUT  = 0
    BIAS   = 1
    HIDDEN = 2
    OUTPUT = 3

class NeuronInfo:
    """
    Metadata about a neuron.

    'split_x' is the neuron's horizontal position within the network:
    inputs and bias sit at 0, outputs at 1, and a hidden neuron sits midway
    between the endpoints of the link it split. A link is recurrent when its
    source's 'split_x' is not smaller than its target's.
    """

    def __init__(self, id: int, neuron_type: NeuronType, split_x: float):
        self.id         : int        = id
        self.neuron_type: NeuronType = neuron_type
        self.split_x    : float      = split_x

    def to_xml(self) -> ET.Element:
        return ET.Element('NeuronInfo', ID=str(self.id), Type=self.neuron_type.name, X=str(self.split_x))

    @classmethod
    def from_xml(cls, element: ET.Element) -> 'NeuronInfo':
        return cls(int(element.get('ID')), NeuronType[element.get('Type')], float(element.get('X')))

    def __repr__(self):
        return f"NeuronInfo(id={self.id}, type={self.neuron_type.name}, split_x={self.split_x:.3f})"

class Innovation:
    """
    A historical structural event.

    Public Attributes:
        innovation_id: Unique ID of the link between 'from_neuron' and 'to_neuron'
        from_neuron:   ID of the link's source neuron
        to_neuron:     ID of the link's target neuron
        split_neuron:  ID of the neuron that split this link (-1 if never split)
        depth:         Number of splits separating this link from the minimal network
                       (1 for the initial links, -1 for links added by mutation)
    """

    def __init__(self,
                 innovation_id: int,
                 from_neuron  : int,
                 to_neuron    : int,
                 split_neuron : int = -1,
                 depth        : int = -1):
        self.innovation_id: int = innovation_id
        self.from_neuron  : int = from_neuron
        self.to_neuron    : int = to_neuron
        self.split_neuron : int = split_neuron
        self.depth        : int = depth

    def to_xml(self) -> ET.Element:
        return ET.Element('Innovation',
                          ID              = str(self.innovation_id),
                          NeuronFrom      = str(self.from_neuron),
                          NeuronTo        = str(self.to_neuron),
                          NeuronSplitting = str(self.split_neuron),
                          Depth           = str(self.depth))

    @classmethod
    def from_xml(cls, element: ET.Element) -> 'Innovation':
        return cls(int(element.get('ID')),
                   int(element.get('NeuronFrom')),
                   int(element.get('NeuronTo')),
                   int(element.get('NeuronSplitting', -1)),
                   int(element.get('Depth', -1)))

    def __repr__(self):
        return (f"Innovation(id={self.innovation_id:03d}, {self.from_neuron:02d}=>{self.to_neuron:02d}, "
                f"split={self.split_neuron}, depth={self.depth})")

class InnovationRegistry:
    """
    Assigns and remembers innovation IDs and neuron IDs for one run.

    There is at most one Innovation per (from, to) neuron pair. Asking for a
    pair twice returns the same Innovation; a new pair always gets an ID larger
    than all previously issued ones. IDs are never reused, even if no genome
    carries the structure any more.

    Neuron numbering convention:
        - Input neurons:  [0, num_inputs)
        - Output neurons: [num_inputs, num_inputs + num_outputs)
        - Bias neuron:    num_inputs + num_outputs (if enabled)
        - Hidden neurons: above all of the above

    Public Properties:
        next_innovation_id: ID the next new innovation will receive
        next_neuron_id:     ID the next new neuron will receive
        innovations:        All innovations, in creation order
        neurons:            Neuron ID => NeuronInfo

    Public Methods:
        query_or_create(from_neuron, to_neuron): Innovation of a link, created if new
        split(innovation):                       Neuron and innovations created by splitting a link
        get_innovation(innovation_id):           Innovation with the given ID
        neuron_type(neuron_id):                  Type of a neuron
        is_recurrent(from_neuron, to_neuron):    Whether a link points backwards
        to_xml() / from_xml(element):            XML persistence
    """

    def __init__(self, num_inputs: int, num_outputs: int, bias: bool):
        """
        Create the registry and the innovations of the minimal network:
        every input (and the bias) linked to every output.

        Parameters:
            num_inputs:  Number of input neurons
            num_outputs: Number of output neurons
            bias:        Whether a bias neuron exists
        """
        self.num_inputs : int  = num_inputs
        self.num_outputs: int  = num_outputs
        self.bias       : bool = bias

        self._next_innovation_id: int                              = 0
        self._next_neuron_id    : int                              = num_inputs + num_outputs
        self._innovations       : list[Innovation]                 = []
        self._by_id             : dict[int, Innovation]            = {}
        self._by_pair           : dict[tuple[int, int], Innovation] = {}
        self._neurons           : dict[int, NeuronInfo]            = {}

        for i in range(num_inputs):
            self._neurons[i] = NeuronInfo(i, NeuronType.INPUT, 0.0)
        for o in range(num_outputs):
            self._neurons[num_inputs + o] = NeuronInfo(num_inputs + o, NeuronType.OUTPUT, 1.0)

        for i in range(num_inputs):
            for o in range(num_outputs):
                self.query_or_create(i, num_inputs + o).depth = 1

        if bias:
            bias_id = self._allocate_neuron_id()
            self._neurons[bias_id] = NeuronInfo(bias_id, NeuronType.BIAS, 0.0)
            for o in range(num_outputs):
                self.query_or_create(bias_id, num_inputs + o).depth = 1

    @property
    def next_innovation_id(self) -> int:
        return self._next_innovation_id

    @property
    def next_neuron_id(self) -> int:
        return self._next_neuron_id

    @property
    def innovations(self) -> list[Innovation]:
        return self._innovations

    @property
    def neurons(self) -> dict[int, NeuronInfo]:
        return self._neurons

    @property
    def bias_neuron(self) -> int | None:
        return self.num_inputs + self.num_outputs if self.bias else None

    def _allocate_neuron_id(self) -> int:
        neuron_id = self._next_neuron_id
        self._next_neuron_id += 1
        return neuron_id

    def query_or_create(self, from_neuron: int, to_neuron: int) -> Innovation:
        """
        Get the innovation for a link, identified by its endpoints.
        Returns the existing innovation if this link was created before,
        otherwise creates one with a fresh innovation ID.

        Neurons not known yet are registered as hidden neurons.

        Parameters:
            from_neuron: Neuron ID of the 'from' end of the link
            to_neuron:   Neuron ID of the 'to' end of the link

        Returns:
            The innovation describing the link
        """
        key = (from_neuron, to_neuron)
        if key in self._by_pair:
            return self._by_pair[key]

        innovation = Innovation(self._next_innovation_id, from_neuron, to_neuron)
        self._next_innovation_id += 1

        self._innovations.append(innovation)
        self._by_id[innovation.innovation_id] = innovation
        self._by_pair[key] = innovation

        for neuron_id in key:
            if neuron_id not in self._neurons:
                self._neurons[neuron_id] = NeuronInfo(neuron_id, NeuronType.HIDDEN, -1.0)

        return innovation

    def split(self, innovation: Innovation) -> tuple[int, Innovation, Innovation]:
        """
        Get the neuron and the two link innovations resulting from splitting a link.
        If this link has been split before (in any genome), returns the same
        neuron and innovations; otherwise a new neuron is created.

        Parameters:
            innovation: Innovation of the link being split

        Returns:
            3-tuple: (split_neuron_id, innovation_in, innovation_out)
            'innovation_in'  is the link from the original source to the new neuron
            'innovation_out' is the link from the new neuron to the original target
        """
        if innovation.split_neuron == -1:
            innovation.split_neuron = self._allocate_neuron_id()
            logger.debug("[Innovation] Link {} ({} => {}) split by new neuron {}",
                         innovation.innovation_id, innovation.from_neuron,
                         innovation.to_neuron, innovation.split_neuron)

        neuron_id = innovation.split_neuron
        link_in   = self.query_or_create(innovation.from_neuron, neuron_id)
        link_out  = self.query_or_create(neuron_id, innovation.to_neuron)

        # Horizontal position: midway between the endpoints of the split link
        self._neurons[neuron_id].split_x = (self._neurons[innovation.from_neuron].split_x +
                                            self._neurons[innovation.to_neuron].split_x) / 2.0

        link_in.depth  = innovation.depth + 1
        link_out.depth = innovation.depth + 1

        return neuron_id, link_in, link_out

    def get_innovation(self, innovation_id: int) -> Innovation:
        return self._by_id[innovation_id]

    def neuron_type(self, neuron_id: int) -> NeuronType:
        return self._neurons[neuron_id].neuron_type

    def is_recurrent(self, from_neuron: int, to_neuron: int) -> bool:
        return self._neurons[from_neuron].split_x >= self._neurons[to_neuron].split_x

    def to_xml(self) -> ET.Element:
        root = ET.Element('InnovationRegistry',
                          Inputs  = str(self.num_inputs),
                          Outputs = str(self.num_outputs),
                          Bias    = str(self.bias))

        xml_innovations = ET.SubElement(root, 'Innovations')
        for innovation in self._innovations:
            xml_innovations.append(innovation.to_xml())

        xml_neurons = ET.SubElement(root, 'Neurons')
        for neuron_id in sorted(self._neurons):
            xml_neurons.append(self._neurons[neuron_id].to_xml())

        return root

    @classmethod
    def from_xml(cls, element: ET.Element) -> 'InnovationRegistry':
        """
        Restore a registry saved with 'to_xml()'.

        Counters continue above the largest innovation and neuron IDs found.
        """
        registry = cls.__new__(cls)
        registry.num_inputs  = int(element.get('Inputs', 0))
        registry.num_outputs = int(element.get('Outputs', 0))
        registry.bias        = element.get('Bias', 'False') == 'True'

        registry._innovations = []
        registry._by_id       = {}
        registry._by_pair     = {}
        registry._neurons     = {}

        for xml_innovation in element.find('Innovations').findall('Innovation'):
            innovation = Innovation.from_xml(xml_innovation)
            registry._innovations.append(innovation)
            registry._by_id[innovation.innovation_id] = innovation
            registry._by_pair[(innovation.from_neuron, innovation.to_neuron)] = innovation

        for xml_neuron in element.find('Neurons').findall('NeuronInfo'):
            neuron = NeuronInfo.from_xml(xml_neuron)
            registry._neurons[neuron.id] = neuron

        registry._next_innovation_id = max(registry._by_id, default=-1) + 1
        registry._next_neuron_id     = max(registry._neurons, default=-1) + 1

        return registry
