"""
Neural network building blocks for scalargrad.

This module provides neurons, layers and multi-layer perceptrons whose forward
pass is built entirely from Value operations, so loss.backward() reaches every
weight and bias.
"""

import numpy as np
from scalargrad.engine import Value


class Module:
    """
    Base class for all neural network modules.

    Provides common functionality for managing parameters and gradients.
    """

    def zero_grad(self):
        """
        Reset all gradients to zero.

        Call this before each backward pass to avoid accumulating gradients
        from multiple backward passes.
        """
        for p in self.parameters():
            p.grad = 0.0

    def parameters(self):
        """
        Return a list of all trainable parameters (weights and biases).

        Override this in subclasses to return actual parameters.
        """
        return []


class Neuron(Module):
    """
    A single tanh neuron: out = tanh(sum(w_i * x_i) + b)

    Weights and bias are leaf Values drawn uniformly from (-1, 1).

    Args:
        nin: Number of inputs
        rng: numpy Generator, integer seed, or None for a fresh generator

    Example:
        >>> n = Neuron(3, rng=0)
        >>> y = n([1.0, 2.0, 3.0])  # Value in (-1, 1)
    """

    def __init__(self, nin, rng=None):
        rng = np.random.default_rng(rng)
        self.w = [Value(rng.uniform(-1, 1), name="w") for _ in range(nin)]
        self.b = Value(rng.uniform(-1, 1), name="b")

    def __call__(self, x):
        """
        Forward pass: weighted sum of inputs plus bias, squashed by tanh.

        Args:
            x: Sequence of nin Values (or numbers)

        Returns:
            Output Value; its graph reaches every weight, the bias and the inputs
        """
        if len(x) != len(self.w):
            raise ValueError(f"Neuron expects {len(self.w)} inputs, got {len(x)}")

        act = self.b
        for wi, xi in zip(self.w, x):
            act = act + wi * xi
        return act.tanh()

    def parameters(self):
        """Return weights followed by the bias."""
        return self.w + [self.b]

    def __repr__(self):
        return f"TanhNeuron({len(self.w)})"


class Layer(Module):
    """
    A fully-connected layer of independent neurons sharing the same inputs.

    Args:
        nin: Number of inputs to every neuron
        nout: Number of neurons (outputs)
        rng: numpy Generator, integer seed, or None
    """

    def __init__(self, nin, nout, rng=None):
        rng = np.random.default_rng(rng)
        self.neurons = [Neuron(nin, rng=rng) for _ in range(nout)]

    def __call__(self, x):
        """Map the same inputs through every neuron, returning nout Values."""
        return [n(x) for n in self.neurons]

    def parameters(self):
        """Return all neuron parameters, in neuron order."""
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self):
        return f"Layer of [{', '.join(str(n) for n in self.neurons)}]"


class MLP(Module):
    """
    Multi-Layer Perceptron: a sequence of fully-connected tanh layers.

    Args:
        nin: Number of input features
        nouts: List of output sizes for each layer
               Example: [4, 4, 1] creates 3 layers: input→4→4→1
        rng: numpy Generator, integer seed, or None. One generator is shared
             by every neuron, so a fixed seed reproduces the whole model.

    Example:
        >>> mlp = MLP(3, [4, 4, 1], rng=42)
        >>> y = mlp([2.0, 3.0, -1.0])  # Forward pass, single Value
        >>> loss = (y - 1.0) ** 2
        >>> mlp.zero_grad()  # Reset gradients
        >>> loss.backward()  # Compute gradients
        >>> # Update parameters (SGD)
        >>> for p in mlp.parameters():
        ...     p.data -= learning_rate * p.grad
    """

    def __init__(self, nin, nouts, rng=None):
        rng = np.random.default_rng(rng)
        # Build layer sizes: [input_size, hidden1, hidden2, ..., output_size]
        sz = [nin] + list(nouts)
        self.layers = [Layer(sz[i], sz[i + 1], rng=rng) for i in range(len(nouts))]

    def __call__(self, x):
        """
        Forward pass: pass input through all layers sequentially.

        Args:
            x: Sequence of nin numbers or Values; numbers are wrapped as leaf Values

        Returns:
            The output Value when the last layer has size 1, otherwise a list of Values
        """
        x = [xi if isinstance(xi, Value) else Value(xi) for xi in x]
        for layer in self.layers:
            x = layer(x)
        return x[0] if len(x) == 1 else x

    def parameters(self):
        """Return all trainable parameters from all layers, in layer order."""
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self):
        return f"MLP of [{', '.join(str(layer) for layer in self.layers)}]"
