import numpy as np
import pytest

from scalargrad.gradcheck import GradientMismatch, central_difference, check_gradients

EXPRESSIONS = {
    "add": lambda g, a, b: a + b,
    "multiply": lambda g, a, b: a * b,
    "divide": lambda g, a, b: a / b,
    "subtract": lambda g, a, b: a - b,
    "cube": lambda g, a, b: a ** 3 + b,
    "inverse_square": lambda g, a, b: a ** -2 * b,
    "tanh": lambda g, a, b: (a - b).tanh(),
    "neuron": lambda g, a, b: (a * 0.7 + b * -1.2 + 0.3).tanh(),
    "constant_divide": lambda g, a, b: 3.0 / a + b / 2.0,
    "shared": lambda g, a, b: (a * b + a / b) * a,
}


@pytest.mark.parametrize("name", sorted(EXPRESSIONS))
def test_analytic_matches_numeric(name):
    rng = np.random.default_rng(0)
    for a, b in rng.uniform(0.5, 2.0, size=(5, 2)):
        assert check_gradients(EXPRESSIONS[name], float(a), float(b)) == []


def test_central_difference():
    def f(x, y):
        return x * y ** 2

    assert central_difference(f, 2.0, 3.0, arg=0, epsilon=1e-6) == pytest.approx(9.0)
    assert central_difference(f, 2.0, 3.0, arg=1, epsilon=1e-6) == pytest.approx(12.0)


def test_mismatch_is_reported():
    # piecewise, with a jump in slope at zero
    def relu_like(g, a):
        return a * a if float(a.data) > 0 else a * 0.0

    mismatches = check_gradients(relu_like, 0.0, epsilon=0.5)
    assert mismatches == [GradientMismatch(0, 0.0, 0.25)]
