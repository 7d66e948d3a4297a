import numpy as np

# Steepness used by Stanley for the modified sigmoid
STEEPNESS = 4.9

def sigmoid_activation(z, p=STEEPNESS):
    Z = np.clip(p * z, -100, 100)   # to prevent under/overflow when calculating exp
    return 1.0 / (1.0 + np.exp(-Z))

def elliot_sigmoid_activation(z, p=STEEPNESS):
    # Cheap sigmoid approximation without exp, range (0, 1)
    pz = p * z
    return 0.5 * (pz / (1.0 + np.abs(pz)) + 1.0)

def tanh_activation(z, p=STEEPNESS):
    # tanh rescaled to the range (0, 1)
    return 0.5 * (np.tanh(0.5 * p * z) + 1.0)

activations = {
    "sigmoid"       : sigmoid_activation,
    "elliot_sigmoid": elliot_sigmoid_activation,
    "tanh"          : tanh_activation
    }
