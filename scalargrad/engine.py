import logging
from numbers import Integral, Real

import numpy as np

from scalargrad import backward as _backward
from scalargrad.config import DTYPE, GRADIENT_SEED
from scalargrad.exceptions import DivisionByZero, GraphMismatch
from scalargrad.node import Node, Op

logger = logging.getLogger(__name__)


class Graph:
    """
    Arena that owns every node of one computation graph.

    Nodes are stored by value in ``self.nodes`` and referred to by their
    integer index. An operation can only name nodes that already exist as
    its operands, so every parent index is strictly smaller than the index
    of the node that names it and the graph can never contain a cycle.

    Builder operations accept ``Value`` handles belonging to this graph or
    plain numbers. A plain number is a detached constant: it is stored on
    the new node for the derivative rule, but it is not a parent and never
    receives gradient.

    Example:
        >>> g = Graph()
        >>> x = g.value(2.0, name="x")
        >>> y = g.multiply(x, 3.0)
        >>> g.backward(y)
        >>> print(x.grad)  # dy/dx = 3.0
    """

    def __init__(self):
        self.nodes = []

    def __len__(self):
        return len(self.nodes)

    def __repr__(self):
        return f"Graph(nodes={len(self.nodes)})"

    # Construction

    def value(self, data, name=""):
        """Wrap a plain number into a new leaf node with gradient 0."""
        if not isinstance(data, Real):
            raise TypeError(f"leaf data must be a real number, got {type(data).__name__}")
        return self._append(Node(value=DTYPE(data), name=name))

    def add(self, a, b):
        """Sum of two operands: value = a + b."""
        (left, lval), (right, rval), constant = self._binary_operands(a, b)
        return self._append(Node(value=DTYPE(lval + rval), op=Op.ADD,
                                 left=left, right=right, constant=constant))

    def multiply(self, a, b):
        """Product of two operands: value = a * b."""
        (left, lval), (right, rval), constant = self._binary_operands(a, b)
        return self._append(Node(value=DTYPE(lval * rval), op=Op.MULTIPLY,
                                 left=left, right=right, constant=constant))

    def divide(self, a, b):
        """
        Quotient of two operands: value = a / b.

        Raises:
            DivisionByZero: If the divisor's value is zero. Gradients through
                a non-finite quotient are meaningless, so the graph refuses
                to build the node at all.
        """
        (left, lval), (right, rval), constant = self._binary_operands(a, b)
        if rval == 0:
            raise DivisionByZero(f"cannot divide {lval} by zero")
        return self._append(Node(value=DTYPE(lval / rval), op=Op.DIVIDE,
                                 left=left, right=right, constant=constant))

    def power(self, a, n):
        """
        Integer power: value = a ** n.

        Args:
            a: A Value of this graph (the base)
            n: Integer exponent, may be zero or negative

        Raises:
            TypeError: If ``n`` is not an integer
            DivisionByZero: If ``a`` is zero and ``n`` is negative
        """
        if isinstance(n, bool) or not isinstance(n, Integral):
            raise TypeError(f"only integer powers are supported, got {n!r}")
        n = int(n)
        left = self._node_operand(a)
        base = self.nodes[left].value
        if base == 0 and n < 0:
            raise DivisionByZero(f"cannot raise zero to negative power {n}")
        return self._append(Node(value=DTYPE(base ** n), op=Op.POWER,
                                 left=left, exponent=n))

    def tanh(self, a):
        """Hyperbolic tangent: value = tanh(a)."""
        left = self._node_operand(a)
        return self._append(Node(value=DTYPE(np.tanh(self.nodes[left].value)),
                                 op=Op.TANH, left=left))

    # Gradients

    def accumulate(self, index, amount):
        """Add ``amount`` to the gradient of node ``index``."""
        node = self.nodes[index]
        node.grad = DTYPE(node.grad + amount)

    def seed(self, index, seed=GRADIENT_SEED):
        """Set the gradient of the backward-pass root."""
        self.nodes[index].grad = DTYPE(seed)

    def zero_grad(self):
        """
        Reset every gradient to zero.

        Call this between backward passes: a second pass without it adds its
        contributions on top of the first one's.
        """
        for node in self.nodes:
            node.grad = DTYPE(0.0)

    def backward(self, root):
        """
        Seed ``root`` with gradient 1.0 and propagate it to every ancestor.

        Returns:
            The arena indices in the order their derivative rules ran.
        """
        index = self._node_operand(root)
        self.seed(index)
        return _backward.run(self, index)

    # Internals

    def _append(self, node):
        self.nodes.append(node)
        index = len(self.nodes) - 1
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("node %d: %s", index, node.label())
        return Value(self, index)

    def _node_operand(self, x):
        if not isinstance(x, Value):
            raise TypeError(f"expected a Value, got {type(x).__name__}")
        if x.graph is not self:
            raise GraphMismatch(f"{x!r} belongs to a different graph")
        return x.index

    def _binary_operands(self, a, b):
        """Resolve both operands to ``(index, value)`` pairs plus the constant."""
        if not isinstance(a, Value) and not isinstance(b, Value):
            raise TypeError("at least one operand must be a Value")
        constant = None
        resolved = []
        for x in (a, b):
            if isinstance(x, Value):
                index = self._node_operand(x)
                resolved.append((index, self.nodes[index].value))
            elif isinstance(x, Real):
                constant = DTYPE(x)
                resolved.append((None, constant))
            else:
                raise TypeError(f"unsupported operand type {type(x).__name__}")
        return resolved[0], resolved[1], constant


class Value:
    """
    Handle to one node of a ``Graph``.

    Supports the usual arithmetic operators so expressions read naturally;
    each operator calls the matching builder operation on the owning graph.
    Subtraction and negation are built from addition and multiplication
    by -1.

    Example:
        >>> g = Graph()
        >>> x1, w1 = g.value(2.0), g.value(-3.0)
        >>> o = (x1 * w1 + 6.8813735870195432).tanh()
        >>> o.backward()
        >>> print(x1.grad)
    """

    __slots__ = ("graph", "index")

    def __init__(self, graph, index):
        self.graph = graph
        self.index = index

    @property
    def node(self):
        return self.graph.nodes[self.index]

    @property
    def data(self):
        return self.node.value

    @property
    def grad(self):
        return self.node.grad

    @property
    def op(self):
        return self.node.op

    @property
    def name(self):
        return self.node.name

    @property
    def parents(self):
        """Operand handles, left then right."""
        return tuple(Value(self.graph, i) for i in self.node.parents)

    def __eq__(self, other):
        return isinstance(other, Value) and other.graph is self.graph and other.index == self.index

    def __hash__(self):
        return hash((id(self.graph), self.index))

    def __add__(self, other):
        return self.graph.add(self, other)

    def __radd__(self, other):
        return self.graph.add(other, self)

    def __mul__(self, other):
        return self.graph.multiply(self, other)

    def __rmul__(self, other):
        return self.graph.multiply(other, self)

    def __truediv__(self, other):
        return self.graph.divide(self, other)

    def __rtruediv__(self, other):
        return self.graph.divide(other, self)

    def __pow__(self, n):
        return self.graph.power(self, n)

    def __neg__(self):
        return self * -1.0

    def __sub__(self, other):
        return self + (-other)

    def __rsub__(self, other):
        return other + (-self)

    def tanh(self):
        return self.graph.tanh(self)

    def backward(self):
        """Run the backward pass with this value as the root."""
        return self.graph.backward(self)

    def __repr__(self):
        name_str = f"'{self.name}' " if self.name else ""
        op_str = f" from {self.node.op_label()}" if not self.node.is_leaf else ""
        return f"Value({name_str}data={self.data}, grad={self.grad}{op_str})"
