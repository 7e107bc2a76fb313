"""
Reverse-mode gradient propagation.

The backward pass visits every node reachable from the root exactly once,
in an order where a node only runs after all of its consumers have run.
Each visit applies the node's local derivative rule, adding contributions
into the gradients of its operands.
"""

import logging
from collections import deque

from scalargrad.config import DTYPE
from scalargrad.exceptions import MalformedGraph, UnsupportedOperation
from scalargrad.node import Op

logger = logging.getLogger(__name__)


def _binary_values(graph, node):
    """Operand values of a binary node, reading the constant for a missing side."""
    if node.left is None and node.right is None:
        raise MalformedGraph(f"{node.op.name} node has no operands")
    if (node.left is None or node.right is None) and node.constant is None:
        raise MalformedGraph(f"{node.op.name} node is missing an operand")
    left = graph.nodes[node.left].value if node.left is not None else node.constant
    right = graph.nodes[node.right].value if node.right is not None else node.constant
    return left, right


def _push(graph, index, amount):
    # constants have no index and receive nothing
    if index is not None:
        graph.accumulate(index, amount)


def _add_rule(graph, node):
    _binary_values(graph, node)
    _push(graph, node.left, node.grad)
    _push(graph, node.right, node.grad)


def _multiply_rule(graph, node):
    left, right = _binary_values(graph, node)
    _push(graph, node.left, node.grad * right)
    _push(graph, node.right, node.grad * left)


def _divide_rule(graph, node):
    left, right = _binary_values(graph, node)
    _push(graph, node.left, node.grad * (DTYPE(1.0) / right))
    _push(graph, node.right, node.grad * (-(left / right) / right))


def _unary_operand(node):
    """Index of the single operand of a POWER or TANH node."""
    if node.left is None:
        raise MalformedGraph(f"{node.op.name} node has no operand")
    if node.right is not None or node.constant is not None:
        raise MalformedGraph(f"{node.op.name} node has a second operand")
    return node.left


def _power_rule(graph, node):
    left = _unary_operand(node)
    if node.exponent is None:
        raise MalformedGraph("POWER node has no exponent")
    n = node.exponent
    if n == 0:
        # d(x^0)/dx is 0 everywhere; avoids 0 * inf at x = 0
        local = DTYPE(0.0)
    else:
        local = DTYPE(n * graph.nodes[left].value ** (n - 1))
    graph.accumulate(left, node.grad * local)


def _tanh_rule(graph, node):
    left = _unary_operand(node)
    graph.accumulate(left, node.grad * (DTYPE(1.0) - node.value * node.value))


_RULES = {
    Op.ADD: _add_rule,
    Op.MULTIPLY: _multiply_rule,
    Op.DIVIDE: _divide_rule,
    Op.POWER: _power_rule,
    Op.TANH: _tanh_rule,
}


def apply_rule(graph, index):
    """
    Push the gradient of node ``index`` into its operands.

    Leaves have no operands and are left untouched.

    Raises:
        MalformedGraph: If the node lacks an operand its operation needs
        UnsupportedOperation: If the node's operation has no derivative rule
    """
    node = graph.nodes[index]
    if node.op is Op.NONE:
        if node.parents:
            raise MalformedGraph(f"leaf node {index} has parents {node.parents}")
        return
    try:
        rule = _RULES[node.op]
    except KeyError:
        raise UnsupportedOperation(f"no derivative rule for {node.op!r}") from None
    rule(graph, node)


def topological_order(graph, root):
    """
    Order the nodes reachable from ``root`` so every node follows all its consumers.

    Counts, for each reachable node, how many reachable nodes use it as an
    operand, then releases a node once all those consumers have been
    emitted. Ties are broken left operand first.

    Args:
        graph: The Graph holding the nodes
        root: Arena index of the output node

    Returns:
        list: Arena indices, starting with ``root``
    """
    consumers = {root: 0}
    stack = [root]
    while stack:
        index = stack.pop()
        for parent in graph.nodes[index].parents:
            if parent not in consumers:
                consumers[parent] = 0
                stack.append(parent)
            consumers[parent] += 1

    order = []
    ready = deque([root])
    while ready:
        index = ready.popleft()
        order.append(index)
        for parent in graph.nodes[index].parents:
            consumers[parent] -= 1
            if consumers[parent] == 0:
                ready.append(parent)

    if len(order) != len(consumers):
        raise MalformedGraph(f"graph reachable from node {root} contains a cycle")
    return order


def run(graph, root):
    """
    Execute the backward pass from a root whose gradient is already seeded.

    Gradients are added, never assigned. Running twice without
    ``Graph.zero_grad()`` in between compounds the contributions of both
    passes; this is logged as a warning but not prevented.

    Returns:
        list: Arena indices in the order their rules were applied
    """
    order = topological_order(graph, root)
    stale = [i for i in order[1:] if graph.nodes[i].grad != 0]
    if stale:
        logger.warning(
            "backward pass from node %d starts with %d non-zero gradients; "
            "contributions will compound (call zero_grad() first)", root, len(stale)
        )
    logger.debug("backward pass from node %d over %d nodes", root, len(order))
    for index in order:
        apply_rule(graph, index)
    return order
