"""
Network Phenotype Module

This module implements the executable neural network expressed by a genotype.
Networks may contain recurrent links; they are activated with Stanley's
update procedure, which keeps propagating activation until every output
neuron has fired at least once.

Classes:
    Link:             A weighted link between two neurons
    Neuron:           A neuron keeping its activation history
    NetworkPhenotype: A (possibly recurrent) neural network
"""

import xml.etree.ElementTree as ET
from typing import Callable

from loguru import logger

from moneat.activations        import elliot_sigmoid_activation
from moneat.genotype.innovation import NeuronType

class Link:
    """
    A weighted link between two neurons.

    A time-delayed link transmits the source neuron's activation from
    the previous update step rather than the current one; recurrent links
    are time-delayed.
    """

    def __init__(self, weight: float, source: 'Neuron', target: 'Neuron', time_delay: bool = False):
        self.weight    : float    = weight
        self.source    : 'Neuron' = source
        self.target    : 'Neuron' = target
        self.time_delay: bool     = time_delay

    def to_xml(self) -> ET.Element:
        return ET.Element('Link',
                          From      = str(self.source.id),
                          To        = str(self.target.id),
                          Weight    = str(self.weight),
                          TimeDelay = str(self.time_delay))

    def __repr__(self):
        return f"Link({self.source.id:02d}=>{self.target.id:02d}, weight={self.weight:+.4f}, time_delay={self.time_delay})"

class Neuron:
    """
    A neuron of a NetworkPhenotype.

    Public Attributes:
        id:                Neuron ID (as issued by the InnovationRegistry)
        neuron_type:       Neuron type
        incoming:          Links ending at this neuron
        outgoing:          Links starting at this neuron
        activation:        Output at the current step
        last_activation:   Output at the previous step
        activation_count:  How often the neuron has been activated
        active_flag:       Whether an active signal reached the neuron in the current step
    """

    def __init__(self, id: int, neuron_type: NeuronType):
        self.id              : int        = id
        self.neuron_type     : NeuronType = neuron_type
        self.incoming        : list[Link] = []
        self.outgoing        : list[Link] = []
        self.active_sum      : float      = 0.0
        self.activation      : float      = 0.0
        self.last_activation : float      = 0.0
        self.activation_count: int        = 0
        self.active_flag     : bool       = False

        # The bias neuron permanently emits 1.0
        if neuron_type == NeuronType.BIAS:
            self.activation       = 1.0
            self.last_activation  = 1.0
            self.activation_count = 1

    @property
    def is_source(self) -> bool:
        """Input and bias neurons receive their value from outside the network."""
        return self.neuron_type in (NeuronType.INPUT, NeuronType.BIAS)

    def active_out(self) -> float:
        """Current output, or 0 if the neuron has never been activated."""
        return self.activation if self.activation_count > 0 else 0.0

    def active_out_time_delay(self) -> float:
        """Output at the previous step, or 0 if the neuron has not been activated twice."""
        return self.last_activation if self.activation_count > 1 else 0.0

    def set_input_value(self, value: float) -> None:
        self.last_activation   = self.activation
        self.activation        = value
        self.activation_count += 1

    def reset(self) -> None:
        self.active_sum  = 0.0
        self.active_flag = False
        if self.neuron_type != NeuronType.BIAS:
            self.activation       = 0.0
            self.last_activation  = 0.0
            self.activation_count = 0

    def to_xml(self) -> ET.Element:
        return ET.Element('Neuron', ID=str(self.id), Type=self.neuron_type.name)

    def __repr__(self):
        return f"Neuron(id={self.id}, type={self.neuron_type.name}, activation={self.activation:.4f})"

class NetworkPhenotype:
    """
    A (possibly recurrent) neural network built from a genotype.

    The network keeps state between calls to 'activate()': recurrent links
    feed back the previous step's activations. Call 'reset()' to clear it.

    Public Attributes:
        id:      ID of the genotype the network was built from
        neurons: Neurons sorted by type (inputs first, outputs last), then ID

    Public Methods:
        activate(inputs): Propagate an input vector and return the output vector
        outputs_off():    Whether some output neuron has never fired
        reset():          Clear all activations
        to_xml():         XML description of the network
    """

    # Number of update steps after which a network whose outputs never
    # fire (outputs disconnected from inputs) gives up
    MAX_UPDATE_STEPS = 30

    def __init__(self,
                 id        : int,
                 neurons   : list[Neuron],
                 activation: Callable[[float], float] = elliot_sigmoid_activation):
        """
        Parameters:
            id:         ID of the genotype the network was built from
            neurons:    Neurons with their links already attached
            activation: Activation function applied by hidden and output neurons
        """
        self.id         : int                       = id
        self.neurons    : list[Neuron]              = sorted(neurons, key=lambda n: (n.neuron_type, n.id))
        self._activation: Callable[[float], float]  = activation

        self._inputs : list[Neuron] = [n for n in self.neurons if n.neuron_type == NeuronType.INPUT]
        self._outputs: list[Neuron] = [n for n in self.neurons if n.neuron_type == NeuronType.OUTPUT]

    @classmethod
    def from_links(cls,
                   id          : int,
                   neuron_types: dict[int, NeuronType],
                   links       : list[tuple[int, int, float, bool]]) -> 'NetworkPhenotype':
        """
        Build a network from a list of links.

        Parameters:
            id:           ID of the network
            neuron_types: Neuron ID => type, for every neuron touched by a link
            links:        (source ID, target ID, weight, time_delay) tuples

        Returns:
            The network
        """
        neurons = {neuron_id: Neuron(neuron_id, neuron_type) for neuron_id, neuron_type in neuron_types.items()}

        for source_id, target_id, weight, time_delay in links:
            link = Link(weight, neurons[source_id], neurons[target_id], time_delay)
            neurons[source_id].outgoing.append(link)
            neurons[target_id].incoming.append(link)

        return cls(id, list(neurons.values()))

    @property
    def links(self) -> list[Link]:
        return [link for neuron in self.neurons for link in neuron.outgoing]

    @property
    def num_inputs(self) -> int:
        return len(self._inputs)

    @property
    def num_outputs(self) -> int:
        return len(self._outputs)

    def activate(self, inputs) -> list[float]:
        """
        Propagate an input vector through the network.

        Parameters:
            inputs: Input values, one per input neuron

        Returns:
            Output values, one per output neuron, in ID order
        """
        if len(inputs) < len(self._inputs):
            raise ValueError(f"Network {self.id} expects {len(self._inputs)} inputs, got {len(inputs)}")

        for neuron, value in zip(self._inputs, inputs):
            neuron.set_input_value(float(value))

        # At least one step; more while some output has never fired
        steps = 0
        while steps == 0 or self.outputs_off():
            steps += 1

            # Sum the incoming activation of every non-source neuron
            for neuron in self.neurons:
                if neuron.is_source:
                    continue
                neuron.active_sum  = 0.0
                neuron.active_flag = False
                for link in neuron.incoming:
                    if link.time_delay:
                        neuron.active_sum += link.weight * link.source.active_out_time_delay()
                    else:
                        if link.source.active_flag or link.source.is_source:
                            neuron.active_flag = True
                        neuron.active_sum += link.weight * link.source.active_out()

            # Activate every neuron reached by an active signal
            for neuron in self.neurons:
                if not neuron.is_source and neuron.active_flag:
                    neuron.last_activation   = neuron.activation
                    neuron.activation        = float(self._activation(neuron.active_sum))
                    neuron.activation_count += 1

            if steps >= self.MAX_UPDATE_STEPS and self.outputs_off():
                logger.debug("[Network] Network {} gave up after {} steps: outputs disconnected from inputs",
                             self.id, steps)
                break

        return [neuron.activation for neuron in self._outputs]

    def outputs_off(self) -> bool:
        """True if some output neuron has never been activated."""
        return any(neuron.activation_count == 0 for neuron in self._outputs)

    def reset(self) -> None:
        for neuron in self.neurons:
            neuron.reset()

    def to_xml(self) -> ET.Element:
        root = ET.Element('ANN', ID=str(self.id))

        xml_neurons = ET.SubElement(root, 'Neurons')
        for neuron in self.neurons:
            xml_neurons.append(neuron.to_xml())

        links     = self.links
        xml_links = ET.SubElement(root, 'Links', Count=str(len(links)))
        for link in links:
            xml_links.append(link.to_xml())

        return root

    def __str__(self):
        return (f"NetworkPhenotype(id={self.id}, neurons={len(self.neurons)}, "
                f"links={len(self.links)}, inputs={self.num_inputs}, outputs={self.num_outputs})")
