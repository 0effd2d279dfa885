"""
================================================================================
Capability Assertions
================================================================================

Fluent, soft assertion objects for the value kinds a response can yield:
strings, integers, decimals, floats, booleans, lists, maps, byte sequences
and arbitrary objects.

Every check evaluates a predicate and, when it is false, records an
``AssertionFailure`` into the owning ``SoftAssertions`` instead of raising.
All methods return ``self`` so checks can be chained:

    softly.assert_that_string(name).is_not_empty().starts_with("ch_")

================================================================================
"""

from __future__ import annotations

import math
import re
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence, Union

from .failure_report import AssertionFailure


Number = Union[int, float, Decimal]


class ObjectAssert:
    """
    Base soft assertion over an arbitrary value.

    Args:
        softly: Aggregator receiving failures (anything with ``record()``)
        actual: The value under test
        description: Optional text prefixed to failure messages
        enabled: Inert assertions (value could not be obtained) skip checks
    """

    def __init__(
        self,
        softly: Any,
        actual: Any,
        description: Optional[str] = None,
        enabled: bool = True,
    ) -> None:
        self._softly = softly
        self.actual = actual
        self._description = description
        self._enabled = enabled

    def described_as(self, description: str) -> "ObjectAssert":
        """Set a description shown in front of every failure message."""
        self._description = description
        return self

    as_ = described_as

    def _check(self, passed: bool, message: str) -> "ObjectAssert":
        if self._enabled and not passed:
            if self._description:
                message = f"[{self._description}] {message}"
            self._softly.record(AssertionFailure(message))
        return self

    def _guard(self, predicate: Callable[[], bool], message: str) -> "ObjectAssert":
        """Evaluate a predicate that may not apply to the actual value's type."""
        if not self._enabled:
            return self
        try:
            passed = bool(predicate())
        except (TypeError, ValueError, AttributeError) as e:
            return self._check(False, f"{message} ({type(e).__name__}: {e})")
        return self._check(passed, message)

    def is_equal_to(self, expected: Any) -> "ObjectAssert":
        return self._check(
            self.actual == expected,
            f"Expected {self.actual!r} to equal {expected!r}",
        )

    def is_not_equal_to(self, other: Any) -> "ObjectAssert":
        return self._check(
            self.actual != other,
            f"Expected {self.actual!r} to not equal {other!r}",
        )

    def is_none(self) -> "ObjectAssert":
        return self._check(self.actual is None, f"Expected None, got {self.actual!r}")

    def is_not_none(self) -> "ObjectAssert":
        return self._check(self.actual is not None, "Expected a value, got None")

    def is_instance_of(self, expected_type: type) -> "ObjectAssert":
        return self._check(
            isinstance(self.actual, expected_type),
            f"Expected instance of {expected_type.__name__}, "
            f"got {type(self.actual).__name__}",
        )

    def is_in(self, values: Iterable[Any]) -> "ObjectAssert":
        values = list(values)
        return self._check(
            self.actual in values,
            f"Expected {self.actual!r} to be in {values!r}",
        )

    def is_not_in(self, values: Iterable[Any]) -> "ObjectAssert":
        values = list(values)
        return self._check(
            self.actual not in values,
            f"Expected {self.actual!r} to not be in {values!r}",
        )

    def satisfies(
        self,
        predicate: Callable[[Any], bool],
        description: str = "given condition",
    ) -> "ObjectAssert":
        return self._guard(
            lambda: predicate(self.actual),
            f"Expected {self.actual!r} to satisfy {description}",
        )


class StringAssert(ObjectAssert):
    """Soft assertions for ``str`` values."""

    def _text(self) -> str:
        return "" if self.actual is None else self.actual

    def is_empty(self) -> "StringAssert":
        return self._check(self.actual == "", f"Expected empty string, got {self.actual!r}")

    def is_not_empty(self) -> "StringAssert":
        return self._check(bool(self.actual), "Expected non-empty string")

    def is_blank(self) -> "StringAssert":
        return self._check(
            self.actual is None or not self.actual.strip(),
            f"Expected blank string, got {self.actual!r}",
        )

    def is_not_blank(self) -> "StringAssert":
        return self._check(
            self.actual is not None and bool(self.actual.strip()),
            f"Expected non-blank string, got {self.actual!r}",
        )

    def has_length(self, expected: int) -> "StringAssert":
        actual_len = len(self._text())
        return self._check(
            actual_len == expected,
            f"Expected length {expected}, got {actual_len}",
        )

    def contains(self, *values: str) -> "StringAssert":
        missing = [v for v in values if v not in self._text()]
        return self._check(
            self.actual is not None and not missing,
            f"Expected {self.actual!r} to contain {missing or list(values)!r}",
        )

    def does_not_contain(self, *values: str) -> "StringAssert":
        found = [v for v in values if v in self._text()]
        return self._check(not found, f"Expected {self.actual!r} to not contain {found!r}")

    def contains_ignoring_case(self, value: str) -> "StringAssert":
        return self._check(
            value.lower() in self._text().lower(),
            f"Expected {self.actual!r} to contain {value!r} (ignoring case)",
        )

    def starts_with(self, prefix: str) -> "StringAssert":
        return self._check(
            self.actual is not None and self.actual.startswith(prefix),
            f"Expected {self.actual!r} to start with {prefix!r}",
        )

    def ends_with(self, suffix: str) -> "StringAssert":
        return self._check(
            self.actual is not None and self.actual.endswith(suffix),
            f"Expected {self.actual!r} to end with {suffix!r}",
        )

    def matches(self, pattern: str) -> "StringAssert":
        if self.actual is None:
            return self._check(False, f"Expected None to match pattern {pattern!r}")
        try:
            passed = re.search(pattern, self.actual) is not None
        except re.error as e:
            return self._check(False, f"Invalid regex pattern {pattern!r}: {e}")
        return self._check(passed, f"Expected {self.actual!r} to match pattern {pattern!r}")

    def is_equal_to_ignoring_case(self, expected: str) -> "StringAssert":
        return self._check(
            self.actual is not None and self.actual.lower() == expected.lower(),
            f"Expected {self.actual!r} to equal {expected!r} (ignoring case)",
        )


class NumberAssert(ObjectAssert):
    """Soft assertions for numeric values."""

    def is_greater_than(self, other: Number) -> "NumberAssert":
        return self._guard(
            lambda: self.actual > other,
            f"Expected {self.actual!r} to be greater than {other!r}",
        )

    def is_greater_than_or_equal_to(self, other: Number) -> "NumberAssert":
        return self._guard(
            lambda: self.actual >= other,
            f"Expected {self.actual!r} to be >= {other!r}",
        )

    def is_less_than(self, other: Number) -> "NumberAssert":
        return self._guard(
            lambda: self.actual < other,
            f"Expected {self.actual!r} to be less than {other!r}",
        )

    def is_less_than_or_equal_to(self, other: Number) -> "NumberAssert":
        return self._guard(
            lambda: self.actual <= other,
            f"Expected {self.actual!r} to be <= {other!r}",
        )

    def is_between(self, start: Number, end: Number) -> "NumberAssert":
        """Inclusive range check."""
        return self._guard(
            lambda: start <= self.actual <= end,
            f"Expected {self.actual!r} to be between {start!r} and {end!r}",
        )

    def is_zero(self) -> "NumberAssert":
        return self._guard(lambda: self.actual == 0, f"Expected {self.actual!r} to be zero")

    def is_positive(self) -> "NumberAssert":
        return self._guard(lambda: self.actual > 0, f"Expected {self.actual!r} to be positive")

    def is_negative(self) -> "NumberAssert":
        return self._guard(lambda: self.actual < 0, f"Expected {self.actual!r} to be negative")

    def is_close_to(self, expected: Number, offset: Number) -> "NumberAssert":
        return self._guard(
            lambda: abs(self.actual - expected) <= offset,
            f"Expected {self.actual!r} to be close to {expected!r} within {offset!r}",
        )


class IntegerAssert(NumberAssert):
    pass


class DecimalAssert(NumberAssert):
    pass


class FloatAssert(NumberAssert):

    def is_nan(self) -> "FloatAssert":
        return self._guard(lambda: math.isnan(self.actual), f"Expected {self.actual!r} to be NaN")


class BooleanAssert(ObjectAssert):

    def is_true(self) -> "BooleanAssert":
        return self._check(self.actual is True, f"Expected True, got {self.actual!r}")

    def is_false(self) -> "BooleanAssert":
        return self._check(self.actual is False, f"Expected False, got {self.actual!r}")


class _SizedAssert(ObjectAssert):
    """Shared size checks for lists, maps and byte sequences."""

    def _size(self) -> Optional[int]:
        try:
            return len(self.actual)
        except TypeError:
            return None

    def is_empty(self):
        return self._check(self._size() == 0, f"Expected empty value, got {self.actual!r}")

    def is_not_empty(self):
        return self._check(bool(self._size()), f"Expected non-empty value, got {self.actual!r}")

    def has_size(self, expected: int):
        actual_size = self._size()
        return self._check(
            actual_size == expected,
            f"Expected size {expected}, got {actual_size}",
        )


class ListAssert(_SizedAssert):
    """Soft assertions for sequences."""

    def _items(self) -> List[Any]:
        return list(self.actual) if self.actual is not None else []

    def contains(self, *values: Any) -> "ListAssert":
        missing = [v for v in values if v not in self._items()]
        return self._check(
            self.actual is not None and not missing,
            f"Expected {self.actual!r} to contain {missing!r}",
        )

    def does_not_contain(self, *values: Any) -> "ListAssert":
        found = [v for v in values if v in self._items()]
        return self._check(not found, f"Expected {self.actual!r} to not contain {found!r}")

    def contains_only(self, *values: Any) -> "ListAssert":
        """Every element is one of ``values`` and every value is present."""
        items = self._items()
        unexpected = [item for item in items if item not in values]
        missing = [v for v in values if v not in items]
        return self._check(
            self.actual is not None and not unexpected and not missing,
            f"Expected {self.actual!r} to contain only {list(values)!r} "
            f"(missing: {missing!r}, unexpected: {unexpected!r})",
        )

    def contains_exactly(self, *values: Any) -> "ListAssert":
        return self._check(
            self._items() == list(values) and self.actual is not None,
            f"Expected {self.actual!r} to contain exactly {list(values)!r}",
        )

    def all_satisfy(
        self,
        predicate: Callable[[Any], bool],
        description: str = "given condition",
    ) -> "ListAssert":
        return self._guard(
            lambda: self.actual is not None and all(predicate(item) for item in self.actual),
            f"Expected all elements of {self.actual!r} to satisfy {description}",
        )


class MapAssert(_SizedAssert):
    """Soft assertions for mappings (JSON objects, header maps)."""

    def _mapping(self) -> Mapping[Any, Any]:
        return self.actual if isinstance(self.actual, Mapping) else {}

    def contains_key(self, key: Any) -> "MapAssert":
        return self._check(
            key in self._mapping(),
            f"Expected {self.actual!r} to contain key {key!r}",
        )

    def contains_keys(self, *keys: Any) -> "MapAssert":
        missing = [k for k in keys if k not in self._mapping()]
        return self._check(not missing, f"Expected {self.actual!r} to contain keys {missing!r}")

    def does_not_contain_key(self, key: Any) -> "MapAssert":
        return self._check(
            key not in self._mapping(),
            f"Expected {self.actual!r} to not contain key {key!r}",
        )

    def contains_entry(self, key: Any, value: Any) -> "MapAssert":
        mapping = self._mapping()
        return self._check(
            key in mapping and mapping[key] == value,
            f"Expected {self.actual!r} to contain entry {key!r}: {value!r}",
        )


class BytesAssert(_SizedAssert):
    """Soft assertions for raw byte payloads."""

    def starts_with(self, prefix: bytes) -> "BytesAssert":
        return self._check(
            self.actual is not None and bytes(self.actual).startswith(prefix),
            f"Expected bytes to start with {prefix!r}",
        )

    def contains(self, sequence: Union[bytes, Sequence[int]]) -> "BytesAssert":
        sequence = bytes(sequence)
        return self._check(
            self.actual is not None and sequence in bytes(self.actual),
            f"Expected bytes to contain {sequence!r}",
        )


__all__ = [
    "ObjectAssert",
    "StringAssert",
    "NumberAssert",
    "IntegerAssert",
    "DecimalAssert",
    "FloatAssert",
    "BooleanAssert",
    "ListAssert",
    "MapAssert",
    "BytesAssert",
]
