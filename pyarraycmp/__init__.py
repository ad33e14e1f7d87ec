"""pyarraycmp: configurable comparison of flat sequences.

This package answers two questions about a pair of ordered sequences of
scalar values: are they equivalent under a configurable notion of equality,
and if not, at which positions do they differ?
"""

from .core.comparator import Comparator, OutputMode
from .core.errors import ArgumentError, ArraycmpError, ConfigError

__version__ = "3.0.3"
__license__ = "MIT"

__all__ = [
    "Comparator",
    "OutputMode",
    "ArgumentError",
    "ArraycmpError",
    "ConfigError",
    "__version__",
    "__license__",
]
