"""
Finite-difference checks for the analytic gradients.
"""

import logging
from dataclasses import dataclass

import numpy as np

from scalargrad.config import GRADCHECK_ATOL, GRADCHECK_EPSILON, GRADCHECK_RTOL
from scalargrad.engine import Graph

logger = logging.getLogger(__name__)


def central_difference(f, *vals, arg=0, epsilon=GRADCHECK_EPSILON):
    r"""
    Approximate the derivative of ``f`` with respect to one argument.

    Uses $f'(x) \approx (f(x + \epsilon) - f(x - \epsilon)) / 2\epsilon$.

    Args:
        f: Function from n plain numbers to one number
        *vals: The n input values
        arg: Position of the argument to differentiate
        epsilon: Step size
    """
    vals_plus = list(vals)
    vals_plus[arg] = vals_plus[arg] + epsilon
    vals_minus = list(vals)
    vals_minus[arg] = vals_minus[arg] - epsilon
    return (f(*vals_plus) - f(*vals_minus)) / (2 * epsilon)


@dataclass
class GradientMismatch:
    arg: int
    analytic: float
    numeric: float


def check_gradients(build, *inputs, epsilon=GRADCHECK_EPSILON,
                    atol=GRADCHECK_ATOL, rtol=GRADCHECK_RTOL):
    """
    Compare backward-pass gradients with central differences.

    Args:
        build: Callable ``build(graph, *leaves) -> Value`` constructing the
            expression on the given graph from one leaf per input
        *inputs: Plain numbers at which to evaluate
        epsilon: Finite-difference step
        atol, rtol: Tolerances passed to ``numpy.isclose``

    Returns:
        list: A ``GradientMismatch`` per input that disagrees (empty if all agree)
    """
    def forward(*vals):
        graph = Graph()
        return float(build(graph, *(graph.value(v) for v in vals)).data)

    graph = Graph()
    leaves = [graph.value(v) for v in inputs]
    build(graph, *leaves).backward()

    mismatches = []
    for i, leaf in enumerate(leaves):
        analytic = float(leaf.grad)
        numeric = float(central_difference(forward, *inputs, arg=i, epsilon=epsilon))
        if not np.isclose(analytic, numeric, atol=atol, rtol=rtol):
            logger.debug("arg %d: analytic %g vs numeric %g", i, analytic, numeric)
            mismatches.append(GradientMismatch(i, analytic, numeric))
    return mismatches
