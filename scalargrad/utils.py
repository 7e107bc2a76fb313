"""
Visualization utilities for scalargrad computation graphs.

Two renderers are provided: a rich console tree (``build_tree``,
``render_tree``, ``print_tree``) and a Graphviz diagram (``draw_dot``).
Both only rely on two things per node: its text label and its operands,
exposed as ``children``.
"""

import io

from graphviz import Digraph
from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from scalargrad.config import TREE_WIDTH


def children(v):
    """
    Operands of ``v`` in left-then-right order.

    In the rendered tree the operands of a node appear below it, so they are
    its children for display purposes even though they are its parents in
    the computation graph.
    """
    return v.parents


def trace(root):
    """
    Collect every node reachable from ``root`` and the edges between them.

    Args:
        root: A Value, typically the output of a computation

    Returns:
        tuple: (nodes, edges) where:
            - nodes: set of Values in the graph
            - edges: set of (operand, result) tuples
    """
    nodes, edges = set(), set()
    stack = [root]
    while stack:
        v = stack.pop()
        if v in nodes:
            continue
        nodes.add(v)
        for child in children(v):
            edges.add((child, v))
            stack.append(child)
    return nodes, edges


def _build(root):
    tree = Tree(Text(root.node.label()))
    depth = 0
    stack = [(root, tree, 0)]
    while stack:
        v, branch, level = stack.pop()
        depth = max(depth, level)
        for child in children(v):
            stack.append((child, branch.add(Text(child.node.label())), level + 1))
    return tree, depth


def build_tree(root):
    """
    Build a ``rich.tree.Tree`` for the graph below ``root``.

    Each branch is labelled with ``Node.label()`` and has the node's
    ``children`` as sub-branches. A node used by several consumers appears
    again under each of them. Built with an explicit stack so that long
    chains do not hit the recursion limit.
    """
    return _build(root)[0]


def render_tree(root, width=TREE_WIDTH):
    """
    Render the graph below ``root`` as plain text.

    The console is widened past ``width`` when the tree's guides alone
    would not leave room for the labels.

    Example:
        >>> print(render_tree(o))
        Val(0.70710677; Δ1)<- tanh
        └── Val(0.8813734; Δ0.5)<- +
            ├── ...
    """
    tree, depth = _build(root)
    console = Console(file=io.StringIO(), width=max(width, 4 * depth + 80),
                      color_system=None)
    console.print(tree)
    return "\n".join(line.rstrip() for line in console.file.getvalue().splitlines())


def print_tree(root, console=None):
    """Print the tree for ``root`` through ``console`` (a stdout Console by default)."""
    (console or Console()).print(build_tree(root))


def draw_dot(root, format='svg', rankdir='LR'):
    """
    Visualize the computation graph below ``root`` as a Graphviz digraph.

    Each Value becomes a record node showing its name, data and gradient.
    Each non-leaf additionally gets a small operation node feeding into it.

    Args:
        root: A Value to visualize from
        format: Output format ('svg', 'png', 'pdf', etc.)
        rankdir: Graph direction - 'LR' (left-right) or 'TB' (top-bottom)

    Returns:
        Digraph: Can be rendered with ``.render(path)`` or shown in Jupyter

    Note:
        Rendering to a file needs the Graphviz system binaries
        (apt install graphviz / brew install graphviz).
    """
    if rankdir not in ('LR', 'TB'):
        raise ValueError("rankdir must be 'LR' (left-right) or 'TB' (top-bottom)")

    nodes, edges = trace(root)
    dot = Digraph(format=format, graph_attr={'rankdir': rankdir})

    for n in sorted(nodes, key=lambda v: v.index):
        uid = str(n.index)
        label = f'{{ {n.name} | data {n.data:.4f} | grad {n.grad:.4f} }}'
        dot.node(name=uid, label=label, shape='record')
        if not n.node.is_leaf:
            dot.node(name=uid + n.op.name, label=n.node.op_label())
            dot.edge(uid + n.op.name, uid)

    for n1, n2 in sorted(edges, key=lambda e: (e[1].index, e[0].index)):
        dot.edge(str(n1.index), str(n2.index) + n2.op.name)

    return dot
