"""
Activations Package

This package provides the activation functions of network phenotypes.
All functions map onto the range (0, 1).

Exported:
    activations: Dictionary mapping activation function names to functions
    Individual activation functions: sigmoid_activation, elliot_sigmoid_activation,
                                     tanh_activation
"""

from moneat.activations.basic_activations import (
    activations,
    sigmoid_activation,
    elliot_sigmoid_activation,
    tanh_activation
)

__all__ = [
    'activations',
    'sigmoid_activation',
    'elliot_sigmoid_activation',
    'tanh_activation'
]
