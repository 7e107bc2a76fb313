import numpy as np
import pytest

from scalargrad import config
from scalargrad.__main__ import chained_expression, main, neuron
from scalargrad.engine import Graph


def test_chained_expression():
    g = Graph()
    h = chained_expression(g)
    assert h.data == pytest.approx(0.46211716, abs=1e-6)
    h.backward()
    a = g.nodes[0]
    # dh/da = (1 - h^2) * 0.01 * 10
    assert a.grad == pytest.approx((1 - h.data ** 2) * 0.1, abs=1e-6)


def test_neuron_power():
    g = Graph()
    o, inputs = neuron(g, power=2)
    o.backward()
    # n = 0.8813735, o = tanh(n^2)
    n = 0.8813735
    expected = (1 - np.tanh(n * n) ** 2) * 2 * n * -3.0
    assert inputs["x1"].grad == pytest.approx(expected, abs=1e-4)


def test_main_prints_trees_and_gradients(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "<- tanh" in out
    grads = dict(line.split(".grad = ") for line in out.splitlines() if ".grad = " in line)
    assert float(grads["x1"]) == pytest.approx(-1.5, abs=1e-4)
    assert float(grads["w1"]) == pytest.approx(1.0, abs=1e-4)
    assert float(grads["b"]) == pytest.approx(0.5, abs=1e-4)


def test_main_with_power(capsys):
    assert main(["--power", "2"]) == 0
    assert "<- powi(2)" in capsys.readouterr().out


def test_log_level_from_environment(monkeypatch):
    monkeypatch.setenv("SCALARGRAD_LOG_LEVEL", "debug")
    assert config.log_level() == "DEBUG"
    monkeypatch.delenv("SCALARGRAD_LOG_LEVEL")
    assert config.log_level() == "WARNING"


def test_unknown_log_level_falls_back(monkeypatch, capsys):
    monkeypatch.setenv("SCALARGRAD_LOG_LEVEL", "foo")
    assert config.log_level() == "WARNING"
    assert main([]) == 0
    assert ".grad = " in capsys.readouterr().out
