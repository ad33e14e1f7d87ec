"""
Exceptions raised by pyarraycmp.
"""

from typing import List


class ArraycmpError(Exception):
    """Base class for all pyarraycmp errors."""


class ArgumentError(ArraycmpError, TypeError):
    """Raised when a comparison is invoked with malformed arguments.

    Every violated rule is collected before raising, so the caller sees all
    of the problems with a call at once rather than the first one only.

    Attributes:
        errors (List[str]): One message per violated rule.
    """

    def __init__(self, errors: List[str]) -> None:
        self.errors = list(errors)
        super().__init__("\n".join(self.errors))


class ConfigError(ArraycmpError):
    """Raised when configuration cannot be interpreted or persisted."""
