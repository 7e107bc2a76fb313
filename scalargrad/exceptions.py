"""
Exceptions raised by the scalargrad engine.

Every failure is surfaced to the caller of the builder operation or the
backward pass that triggered it. After a failed backward pass the gradients
in the graph are left in an undefined state and should not be trusted.
"""


class AutogradError(Exception):
    """Base class for all scalargrad errors."""


class MalformedGraph(AutogradError, ValueError):
    """A derivative rule was applied to a node missing a required operand."""


class UnsupportedOperation(AutogradError, NotImplementedError):
    """A node carries an operation tag with no derivative rule."""


class GraphMismatch(AutogradError, ValueError):
    """Operands of a single operation belong to different graphs."""


class DivisionByZero(AutogradError, ZeroDivisionError):
    """A forward computation would divide by zero."""
