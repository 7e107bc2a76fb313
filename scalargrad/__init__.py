"""
scalargrad: reverse-mode automatic differentiation over scalar values.

Arithmetic on ``Value`` handles builds a computation graph owned by a
``Graph`` arena; ``Value.backward()`` propagates gradients through it.
"""

from scalargrad.engine import Graph, Value
from scalargrad.exceptions import (
    AutogradError,
    DivisionByZero,
    GraphMismatch,
    MalformedGraph,
    UnsupportedOperation,
)
from scalargrad.node import Node, Op
from scalargrad.utils import build_tree, draw_dot, print_tree, render_tree

__version__ = "0.1.0"
__all__ = [
    "Graph",
    "Value",
    "Node",
    "Op",
    "AutogradError",
    "DivisionByZero",
    "GraphMismatch",
    "MalformedGraph",
    "UnsupportedOperation",
    "build_tree",
    "draw_dot",
    "print_tree",
    "render_tree",
]
