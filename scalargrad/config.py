"""
Engine-wide settings.
"""

import logging
import os

import numpy as np

# datatype of values and gradients
DTYPE = np.float32

# gradient written into the root right before the backward pass
GRADIENT_SEED = 1.0

# central-difference step and tolerances used by scalargrad.gradcheck
GRADCHECK_EPSILON = 1e-2
GRADCHECK_ATOL = 1e-3
GRADCHECK_RTOL = 1e-2

# console width used by utils.render_tree
TREE_WIDTH = 120

# RichHandler prints level and time itself
LOG_FORMAT = "%(message)s"
DEFAULT_LOG_LEVEL = "WARNING"


def log_level():
    """
    Level name from ``SCALARGRAD_LOG_LEVEL``, or ``DEFAULT_LOG_LEVEL`` if unset or unknown.
    """
    name = os.environ.get("SCALARGRAD_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(name), int):
        return DEFAULT_LOG_LEVEL
    return name
