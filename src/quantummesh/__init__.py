"""
quantummesh: dense state-vector quantum circuit simulator.

Applies gate sequences to a 2^n amplitude vector with bit-masked kernels,
scheduled over index partitions by a pluggable execution strategy, and
reports the resulting measurement distribution.
"""

__version__ = "0.1.0"

# Package-level imports for convenience
from . import config
from . import utils

__all__ = ["config", "utils", "__version__"]
