"""
Scalargrad: a reverse-mode autograd engine over scalar values.

This package provides automatic differentiation for building and training
small neural networks from scratch.
"""

from scalargrad.engine import Value, backward, topological_order
from scalargrad import nn
from scalargrad.utils import draw_dot

__version__ = "0.1.0"
__all__ = ["Value", "backward", "topological_order", "nn", "draw_dot"]
