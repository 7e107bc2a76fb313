"""
The node record stored in a computation graph.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import numpy as np

from scalargrad.config import DTYPE


class Op(Enum):
    """Tags how a node's value was derived and which derivative rule applies."""

    NONE = ""
    ADD = "+"
    MULTIPLY = "*"
    DIVIDE = "/"
    POWER = "powi"
    TANH = "tanh"


@dataclass
class Node:
    """
    A scalar value with its gradient accumulator and provenance.

    ``value`` and the topology fields are fixed when the node is created.
    ``grad`` is the only field written afterwards, and only through
    ``Graph.accumulate`` / ``Graph.seed`` / ``Graph.zero_grad``.

    Attributes:
        value: Forward value, computed when the node is built
        grad: Gradient of the backward-pass root with respect to this node
        op: Operation that produced the node (``Op.NONE`` for leaves)
        left: Arena index of the left operand, if it is a node
        right: Arena index of the right operand, if it is a node
        exponent: Integer exponent for ``Op.POWER``
        constant: Plain-number operand of a binary op whose other side is a node
        name: Optional label for debugging and visualization
    """

    value: np.float32
    grad: np.float32 = DTYPE(0.0)
    op: Op = Op.NONE
    left: Optional[int] = None
    right: Optional[int] = None
    exponent: Optional[int] = None
    constant: Optional[np.float32] = None
    name: str = ""

    @property
    def is_leaf(self):
        return self.op is Op.NONE

    @property
    def parents(self):
        """Arena indices of the operand nodes, left then right."""
        return tuple(i for i in (self.left, self.right) if i is not None)

    def op_label(self):
        if self.op is Op.POWER:
            return f"powi({self.exponent})"
        return self.op.value

    def label(self):
        """Text form used by the tree renderer, e.g. ``Val(3; Δ1)<- +``."""
        text = f"Val({_fmt(self.value)}; Δ{_fmt(self.grad)})"
        if not self.is_leaf:
            text += f"<- {self.op_label()}"
        return text


def _fmt(x):
    # shortest repr that round-trips the float32, without a trailing ".0"
    return np.format_float_positional(x, trim="-")
