import enum
import logging
import numbers

import numpy as np

logger = logging.getLogger(__name__)


class Op(enum.Enum):
    """Tag naming the local-gradient rule a Value was produced by."""

    LEAF = ''
    ADD = '+'
    MUL = '*'
    POW = '**'
    TANH = 'tanh'
    EXP = 'exp'


class Value:
    """
    Wraps a scalar and tracks operations for automatic differentiation.

    The Value class is the core of the autograd engine. It stores data and its gradient,
    and builds a computational graph by recording the operands and the operation that
    produced each derived Value.

    Values compare by identity only: two distinct Values holding the same data are
    different nodes of the graph.

    Example:
        >>> x = Value(2.0)
        >>> y = Value(3.0)
        >>> z = x * y + x
        >>> z.backward()  # Compute gradients
        >>> print(x.grad)  # dz/dx = y + 1 = 4.0
    """

    def __init__(self, data, _children=(), _op=Op.LEAF, name=""):
        """
        Initialize a Value object.

        Args:
            data: The numerical data (a real scalar)
            _children: Tuple of operand Values, in evaluation order (internal use for autograd)
            _op: Op tag of the operation that created this Value (internal)
            name: Optional name for debugging and visualization
        """
        # float() rejects lists and arrays; only scalars are supported
        self.data = float(data)
        self.grad = 0.0
        self.name = name

        # Internal variables for building the computational graph
        self._prev = tuple(_children)  # Operands, in evaluation order
        self._op = _op                 # Selects the rule in _BACKWARD_RULES
        self._exponent = None          # Constant exponent, only set for Op.POW

    @property
    def data(self):
        return self._data

    @data.setter
    def data(self, value):
        # float64 keeps inf/nan propagation uniform (0.0 ** -1 is inf, not an exception)
        self._data = np.float64(value)

    @property
    def grad(self):
        return self._grad

    @grad.setter
    def grad(self, value):
        self._grad = np.float64(value)

    def __add__(self, other):
        """
        Addition: supports Value + Value and Value + scalar.

        Example:
            >>> a = Value(1.0)
            >>> b = Value(2.5)
            >>> c = a + b  # c.data = 3.5
        """
        other = other if isinstance(other, Value) else Value(other)
        return Value(self.data + other.data, (self, other), Op.ADD)

    def __mul__(self, other):
        """
        Multiplication: supports Value * Value and Value * scalar.

        Example:
            >>> a = Value(3.0)
            >>> b = Value(4.0)
            >>> c = a * b  # c.data = 12.0
        """
        other = other if isinstance(other, Value) else Value(other)
        return Value(self.data * other.data, (self, other), Op.MUL)

    def __pow__(self, other):
        """
        Power operation: raises Value to a constant scalar power.

        Non-integer powers of a negative base produce nan, and negative powers
        of zero produce inf; neither raises.

        Example:
            >>> x = Value(3.0)
            >>> y = x ** 2  # y.data = 9.0
        """
        assert isinstance(other, numbers.Real), "Only supporting constant real powers"

        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            out = Value(self.data ** other, (self,), Op.POW)
        out._exponent = other
        return out

    def tanh(self):
        """
        Hyperbolic tangent: (e^(2x) - 1) / (e^(2x) + 1)

        Squashes input to range (-1, 1). Used as the neuron activation in nn.

        Example:
            >>> x = Value(0.0)
            >>> y = x.tanh()  # y.data = 0.0
        """
        return Value(np.tanh(self.data), (self,), Op.TANH)

    def exp(self):
        """
        Exponential: e^x

        Example:
            >>> x = Value(1.0)
            >>> y = x.exp()  # y.data ≈ 2.7183
        """
        with np.errstate(over='ignore'):
            return Value(np.exp(self.data), (self,), Op.EXP)

    def _backward(self):
        """Add this node's contribution into the grads of its operands."""
        _BACKWARD_RULES[self._op](self)

    def backward(self):
        """
        Perform backpropagation from this Value. See backward().

        Example:
            >>> x = Value(2.0)
            >>> y = x * 3 + 1
            >>> y.backward()
            >>> print(x.grad)  # dy/dx = 3.0
        """
        backward(self)

    # Reverse and derived operations (use the basic operations defined above)

    def __neg__(self):
        """Negation: -x = -1 * x"""
        return self * -1

    def __radd__(self, other):
        """Right addition: other + self (when other is not a Value)"""
        return Value(other) + self

    def __sub__(self, other):
        """Subtraction: a - b = a + (-b)"""
        other = other if isinstance(other, Value) else Value(other)
        return self + (-other)

    def __rsub__(self, other):
        """Right subtraction: other - self"""
        return Value(other) + (-self)

    def __rmul__(self, other):
        """Right multiplication: other * self (when other is not a Value)"""
        return Value(other) * self

    def __truediv__(self, other):
        """Division: a / b = a * b^(-1)"""
        other = other if isinstance(other, Value) else Value(other)
        return self * other**-1

    def __rtruediv__(self, other):
        """Right division: other / self"""
        return Value(other) * self**-1

    def __repr__(self):
        """Return a readable string representation of the Value."""
        name_str = f"'{self.name}' " if self.name else ""
        op_str = f" from {op_label(self)}" if self._op is not Op.LEAF else ""
        return f"Value({name_str}data={self.data}, grad={self.grad}{op_str})"


def op_label(v):
    """Short label of the operation that produced v ('' for leaves)."""
    if v._op is Op.POW:
        return f"**{v._exponent:g}"
    return v._op.value


# Local gradient rules. Each one reads out.grad (already complete when called)
# and adds into the grads of out's operands; it never overwrites them.

def _leaf_backward(out):
    pass


def _add_backward(out):
    """d(a+b)/da = 1, d(a+b)/db = 1"""
    a, b = out._prev
    a.grad += out.grad
    b.grad += out.grad


def _mul_backward(out):
    """d(a*b)/da = b, d(a*b)/db = a"""
    a, b = out._prev
    a.grad += b.data * out.grad
    b.grad += a.data * out.grad


def _pow_backward(out):
    """d(x^k)/dx = k * x^(k-1)"""
    (a,) = out._prev
    k = out._exponent
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        a.grad += (k * a.data ** (k - 1)) * out.grad


def _tanh_backward(out):
    """d(tanh(x))/dx = 1 - tanh(x)^2, reusing the forward output"""
    (a,) = out._prev
    a.grad += (1 - out.data ** 2) * out.grad


def _exp_backward(out):
    """d(e^x)/dx = e^x"""
    (a,) = out._prev
    a.grad += out.data * out.grad


_BACKWARD_RULES = {
    Op.LEAF: _leaf_backward,
    Op.ADD: _add_backward,
    Op.MUL: _mul_backward,
    Op.POW: _pow_backward,
    Op.TANH: _tanh_backward,
    Op.EXP: _exp_backward,
}


def topological_order(root):
    """
    Order every Value reachable from root so each node comes after all of its operands.

    Depth-first post-order over _prev, deduplicated by node identity. An explicit
    stack stands in for recursion so long chains (e.g. a loss summed over many
    examples) stay within Python's recursion limit.

    Args:
        root: The Value to start from

    Returns:
        list: Values, leaves first and root last
    """
    topo = []
    visited = set()
    stack = [(root, False)]
    while stack:
        v, expanded = stack.pop()
        if expanded:
            topo.append(v)
            continue
        if v in visited:
            continue
        visited.add(v)
        stack.append((v, True))
        # Reversed so operands are visited in evaluation order
        for child in reversed(v._prev):
            if child not in visited:
                stack.append((child, False))
    return topo


def backward(root):
    """
    Perform backpropagation: compute gradients for all Values in the graph of root.

    This implements reverse-mode automatic differentiation. It traverses the
    computational graph in reverse topological order and applies the chain rule,
    so every reachable Value ends up holding d(root)/d(value) in .grad.

    Gradients accumulate: call zero_grad() (or reset .grad) on shared Values
    before backpropagating from a different root.
    """
    topo = topological_order(root)
    logger.debug("backward through %d nodes", len(topo))

    # dL/dL = 1
    root.grad = 1.0

    for v in reversed(topo):
        v._backward()
