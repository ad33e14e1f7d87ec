"""The comparison engine for pyarraycmp.

A `Comparator` holds a small set of options and exposes every comparison
operation over them:

1.  A simple comparison, which joins the selected elements of each sequence
    into one string and reports whether the two strings are identical.
2.  A full comparison, which checks each position individually and returns
    either the list of differing positions or their count.
3.  A permutation check, which runs the simple comparison over sorted copies
    of both sequences.

Whitespace collapsing and case folding apply to every comparison. Skipped
positions apply to the simple and full comparisons but never to the
permutation check, since sorting destroys positional alignment.

A comparator reads its options at the start of each call and provides no
internal locking. Share an instance between threads only if calls and
option changes are serialized by the caller.
"""

import enum
import logging
import re
from collections.abc import Sequence
from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING

from .errors import ArgumentError

if TYPE_CHECKING:
    from .config import Config

# Initialize a logger for this module.
logger = logging.getLogger(__name__)

DEFAULT_SEPARATOR = "\x07"

_WHITESPACE_RUN = re.compile(r"\s+")


class OutputMode(enum.Enum):
    """Result shape produced by a full comparison."""

    LIST = "list"
    COUNT = "count"


FullResult = Union[List[int], int]


class Comparator:
    """Compares two flat sequences of scalar values.

    Every option is an attribute and may be changed between calls.

    Attributes:
        separator (str): Token placed between elements when a sequence is
            joined for the simple comparison. It should never occur inside
            the data: an element containing it can make two different
            sequences join to the same string.
        whitespace_significant (bool): When False, every run of whitespace
            is collapsed to a single space before comparing.
        case_significant (bool): When False, values are lower-cased before
            comparing.
        default_full (bool): When True, `compare` performs a full comparison
            instead of a simple one.
        skip (Dict[int, Any]): Positions to leave out of positional
            comparisons. A position is skipped only if its value is truthy.
            Keys may be given as ints or digit strings and are stored as
            ints.
    """

    def __init__(
        self,
        separator: str = DEFAULT_SEPARATOR,
        whitespace_significant: bool = True,
        case_significant: bool = True,
        default_full: bool = False,
        skip: Optional[Dict[int, Any]] = None,
    ) -> None:
        self.separator = separator
        self.whitespace_significant = whitespace_significant
        self.case_significant = case_significant
        self.default_full = default_full
        self.skip = skip

    @property
    def skip(self) -> Dict[int, Any]:
        return self._skip

    @skip.setter
    def skip(self, value: Optional[Dict[Any, Any]]) -> None:
        self._skip = _skip_table(value)

    @classmethod
    def from_config(cls, config: "Config") -> "Comparator":
        """Creates a comparator from a loaded configuration.

        Args:
            config (Config): The configuration to read options from.

        Returns:
            Comparator: A comparator using the configured options.

        Raises:
            ConfigError: If an option has the wrong type.
        """
        return cls(
            separator=config.get_str("separator", DEFAULT_SEPARATOR),
            whitespace_significant=config.get_bool("whitespace_significant", True),
            case_significant=config.get_bool("case_significant", True),
            default_full=config.get_bool("default_full", False),
            skip=config.skip_positions(),
        )

    def reset_skip(self) -> None:
        """Stops skipping any positions."""
        self.skip = {}

    def validate_arguments(self, *args: Any) -> None:
        """Checks that exactly two sequences were supplied.

        Args:
            *args: The candidate sequences.

        Raises:
            ArgumentError: Listing every rule the arguments violate.
        """
        errors = []
        if len(args) != 2:
            errors.append("Must compare two sequences.")
        for number, arg in enumerate(args[:2], start=1):
            if arg is None:
                errors.append(f"Argument {number} is missing")
            elif not _is_sequence(arg):
                errors.append(f"Argument {number} is not a sequence")
        if errors:
            raise ArgumentError(errors)

    def compare_lengths(self, a: Sequence, b: Sequence) -> bool:
        """Returns True if both sequences have the same number of elements."""
        self.validate_arguments(a, b)
        return len(a) == len(b)

    lengths_equal = compare_lengths

    def lengths_differ(self, a: Sequence, b: Sequence) -> bool:
        """Returns True if the sequences have different numbers of elements."""
        return not self.compare_lengths(a, b)

    def compare(
        self, a: Sequence, b: Sequence, mode: Union[OutputMode, str] = OutputMode.LIST
    ) -> Union[bool, FullResult]:
        """Compares two sequences using the default comparison.

        Args:
            a (Sequence): The first sequence.
            b (Sequence): The second sequence.
            mode (OutputMode): Result shape for a full comparison. Ignored
                when `default_full` is False.

        Returns:
            The result of `full_compare` if `default_full` is set, otherwise
            the result of `simple_compare`.
        """
        if self.default_full:
            return self.full_compare(a, b, mode=mode)
        return self.simple_compare(a, b)

    def simple_compare(self, a: Sequence, b: Sequence, ignore_skip: bool = False) -> bool:
        """Reports whether two sequences are the same.

        Both sequences are reduced to a single string by joining the
        elements at the compared positions with `separator`, and the two
        strings are normalized and tested for equality.

        Args:
            a (Sequence): The first sequence.
            b (Sequence): The second sequence.
            ignore_skip (bool): Compare every position, even those listed in
                `skip`.

        Returns:
            bool: True if the sequences are the same, False otherwise.
        """
        self.validate_arguments(a, b)

        if not self.compare_lengths(a, b):
            logger.debug(f"Simple compare: lengths differ ({len(a)} vs {len(b)}).")
            return False

        positions = range(len(a))
        if not ignore_skip and self.skip:
            positions = [i for i in positions if not self._is_skipped(i)]

        joined_a = self.separator.join(_render(a[i]) for i in positions)
        joined_b = self.separator.join(_render(b[i]) for i in positions)

        return self._normalize(joined_a) == self._normalize(joined_b)

    def full_compare(
        self, a: Sequence, b: Sequence, mode: Union[OutputMode, str] = OutputMode.LIST
    ) -> FullResult:
        """Finds the positions at which two sequences differ.

        If the sequences have different lengths no element is compared.
        Instead the positions present in the longer sequence only are
        reported in LIST mode, and the difference in lengths in COUNT mode.

        Args:
            a (Sequence): The first sequence.
            b (Sequence): The second sequence.
            mode (OutputMode): Whether to return the positions or their count.

        Returns:
            Union[List[int], int]: The ascending list of differing positions,
            or the number of them.

        Raises:
            ArgumentError: If the sequences or the mode are invalid.
        """
        self.validate_arguments(a, b)
        mode = _coerce_mode(mode)

        if self.lengths_differ(a, b):
            logger.debug(f"Full compare: lengths differ ({len(a)} vs {len(b)}).")
            return _different_len_result(a, b, mode)

        diffs = []
        for position, (value_a, value_b) in enumerate(zip(a, b)):
            if self._is_skipped(position):
                continue
            if value_a is None or value_b is None:
                # Both absent counts as equal.
                if (value_a is None) != (value_b is None):
                    diffs.append(position)
                continue
            if self._normalize(str(value_a)) != self._normalize(str(value_b)):
                diffs.append(position)

        logger.debug(f"Full compare: {len(diffs)} differing position(s).")
        return diffs if mode is OutputMode.LIST else len(diffs)

    def full_compare_list(self, a: Sequence, b: Sequence) -> List[int]:
        """Returns the ascending list of positions at which the sequences differ."""
        return self.full_compare(a, b, mode=OutputMode.LIST)

    def full_compare_count(self, a: Sequence, b: Sequence) -> int:
        """Returns the number of positions at which the sequences differ."""
        return self.full_compare(a, b, mode=OutputMode.COUNT)

    def permutation_check(self, a: Sequence, b: Sequence) -> bool:
        """Reports whether one sequence is a reordering of the other.

        The check sorts both sequences by the string form of their raw
        values and runs a simple comparison over every position, so it tests
        multiset equality. `skip` is ignored.

        Returns:
            bool: True if both sequences hold the same elements.
        """
        self.validate_arguments(a, b)
        sorted_a = sorted(a, key=_render)
        sorted_b = sorted(b, key=_render)
        return self.simple_compare(sorted_a, sorted_b, ignore_skip=True)

    perm = permutation_check

    def _is_skipped(self, position: int) -> bool:
        return position in self.skip and bool(self.skip[position])

    def _normalize(self, text: str) -> str:
        if not self.whitespace_significant:
            text = _WHITESPACE_RUN.sub(" ", text)
        if not self.case_significant:
            text = text.lower()
        return text

    def __repr__(self) -> str:
        return (
            f"Comparator(separator={self.separator!r}, "
            f"whitespace_significant={self.whitespace_significant}, "
            f"case_significant={self.case_significant}, "
            f"default_full={self.default_full}, skip={self.skip})"
        )


def _is_sequence(value: Any) -> bool:
    # Text is a scalar here, not a sequence of characters.
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _render(value: Any) -> str:
    return "" if value is None else str(value)


def _skip_table(skip: Optional[Dict[Any, Any]]) -> Dict[int, Any]:
    """Copies a skip table, converting digit-string keys to positions.

    Raises:
        ArgumentError: If a key is not a non-negative integer.
    """
    table = {}
    errors = []
    for key, flag in (skip or {}).items():
        try:
            position = int(key)
        except (TypeError, ValueError):
            position = -1
        if isinstance(key, bool) or position < 0:
            errors.append(f"Invalid skip position: {key!r}")
            continue
        table[position] = flag
    if errors:
        raise ArgumentError(errors)
    return table


def _coerce_mode(mode: Union[OutputMode, str]) -> OutputMode:
    try:
        return OutputMode(mode)
    except ValueError:
        raise ArgumentError([f"Unknown output mode: {mode!r}"]) from None


def _different_len_result(a: Sequence, b: Sequence, mode: OutputMode) -> FullResult:
    """Builds a full comparison result for sequences of different lengths.

    Returns the positions beyond the end of the shorter sequence, or how
    many of them there are.
    """
    shorter, longer = sorted((len(a), len(b)))
    if mode is OutputMode.LIST:
        return list(range(shorter, longer))
    return longer - shorter
