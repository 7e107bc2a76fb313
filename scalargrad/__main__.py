"""
Demonstration: build two small expressions, backpropagate, print the trees.

    python -m scalargrad [--power N] [--dot PATH] [-v]
"""

import argparse
import logging
import sys

from rich.logging import RichHandler

from scalargrad import config
from scalargrad.engine import Graph
from scalargrad.utils import draw_dot, print_tree

logger = logging.getLogger("scalargrad")


def chained_expression(graph):
    """tanh(0.01 * (((a + b) + 2) * 10)) with a = 2, b = 1."""
    a = graph.value(2.0, name="a")
    b = graph.value(1.0, name="b")
    c = a + b
    d = c + 2.0
    e = graph.value(10.0, name="e")
    f = d * e
    g = 0.01 * f
    return g.tanh()


def neuron(graph, power=1):
    """
    A single tanh neuron with two inputs.

    Returns:
        tuple: (output, inputs) where inputs maps names to leaf Values
    """
    inputs = {
        "x1": graph.value(2.0, name="x1"),
        "x2": graph.value(0.0, name="x2"),
        "w1": graph.value(-3.0, name="w1"),
        "w2": graph.value(1.0, name="w2"),
        "b": graph.value(6.8813735870195432, name="b"),
    }
    n = inputs["x1"] * inputs["w1"] + inputs["x2"] * inputs["w2"] + inputs["b"]
    if power != 1:
        n = n ** power
    return n.tanh(), inputs


def main(argv=None):
    parser = argparse.ArgumentParser(prog="scalargrad", description=__doc__.splitlines()[1])
    parser.add_argument("--power", type=int, default=1,
                        help="raise the neuron pre-activation to this integer power")
    parser.add_argument("--dot", metavar="PATH",
                        help="also render the neuron graph with graphviz to PATH")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else config.log_level(),
                        format=config.LOG_FORMAT,
                        handlers=[RichHandler(show_path=False)])

    graph = Graph()
    h = chained_expression(graph)
    h.backward()
    print_tree(h)
    print()

    graph = Graph()
    o, inputs = neuron(graph, power=args.power)
    o.backward()
    print_tree(o)
    print()
    for name, leaf in inputs.items():
        print(f"{name}.grad = {leaf.grad}")

    if args.dot:
        path = draw_dot(o).render(args.dot, cleanup=True)
        logger.info("wrote %s", path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
