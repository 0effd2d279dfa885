"""
================================================================================
JSON Assertions
================================================================================

JSONPath-driven soft assertions over a JSON response body.

Key Features:
    - JSONPath queries (jsonpath-ng extended syntax, filters supported)
    - Typed value extraction (string, integer, decimal, boolean, lists)
    - Whole-document comparison, lenient or strict
    - JSON Schema validation (Draft 7, format checking enabled)

Missing paths and unconvertible values are recorded as failures; the
assertion returned for them is inert so the lookup is reported once.

================================================================================
"""

from __future__ import annotations

import json
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, List, Optional, Tuple, Union

import jsonschema
from jsonpath_ng.ext import parse as jsonpath_parse
from jsonschema import Draft7Validator

from .extractor import ExtractorSlot
from .value_assert import (
    BooleanAssert,
    DecimalAssert,
    IntegerAssert,
    ListAssert,
    ObjectAssert,
    StringAssert,
)


# JSONPath features which make a path return a list (wildcards, deep scan,
# filters, unions and slices)
INDEFINITE_PATH_PATTERN = re.compile(r"\*|\.\.|\?\(|\[[^\]]*[,:][^\]]*\]")

JsonDocument = Union[str, dict, list]


def _is_indefinite(path: str) -> bool:
    return INDEFINITE_PATH_PATTERN.search(path) is not None


def _load(document: JsonDocument) -> Any:
    return json.loads(document) if isinstance(document, (str, bytes)) else document


def _to_json_string(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)


def _json_matches(expected: Any, actual: Any, strict: bool) -> bool:
    """
    Compare two decoded JSON values.

    Lenient mode allows extra object members in ``actual`` and ignores array
    order; strict mode requires exact equality.
    """
    if isinstance(expected, bool) or isinstance(actual, bool):
        return type(expected) is type(actual) and expected == actual

    if isinstance(expected, dict):
        if not isinstance(actual, dict):
            return False
        if strict and set(expected) != set(actual):
            return False
        return all(
            key in actual and _json_matches(value, actual[key], strict)
            for key, value in expected.items()
        )

    if isinstance(expected, list):
        if not isinstance(actual, list) or len(expected) != len(actual):
            return False
        if strict:
            return all(_json_matches(e, a, strict) for e, a in zip(expected, actual))
        unmatched = list(actual)
        for item in expected:
            for index, candidate in enumerate(unmatched):
                if _json_matches(item, candidate, strict):
                    del unmatched[index]
                    break
            else:
                return False
        return True

    return expected == actual


def _convert(value: Any, target: type) -> Any:
    """Convert a decoded JSON value to ``target``; raises ValueError/TypeError."""
    if value is None or target is object or isinstance(value, target) and not (
        isinstance(value, bool) and target is not bool
    ):
        return value
    if target is str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return _to_json_string(value)
    if target is int:
        if isinstance(value, bool):
            raise TypeError("boolean is not an integer")
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"{value!r} is not an integer")
            return int(value)
        return int(value)
    if target is Decimal:
        if isinstance(value, bool):
            raise TypeError("boolean is not a number")
        try:
            return Decimal(str(value))
        except InvalidOperation as e:
            raise ValueError(f"{value!r} is not a decimal") from e
    if target is bool:
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise TypeError(f"{value!r} is not a boolean")
    return target(value)


class JsonContentAssert(ObjectAssert):
    """Assertions on a whole JSON document."""

    def __init__(self, softly: Any, json_body: JsonDocument, enabled: bool = True) -> None:
        super().__init__(softly, json_body, enabled=enabled)
        self._document: Any = None
        if enabled:
            try:
                self._document = _load(json_body)
            except ValueError as e:
                self._check(False, f"Value is not valid JSON: {e}")
                self._enabled = False

    def is_equal_to_json(self, expected: JsonDocument) -> "JsonContentAssert":
        """Lenient comparison: extra members and array order are ignored."""
        return self._guard(
            lambda: _json_matches(_load(expected), self._document, strict=False),
            f"Expected JSON {self.actual!r} to leniently equal {_to_json_string(expected)!r}",
        )

    def is_strictly_equal_to_json(self, expected: JsonDocument) -> "JsonContentAssert":
        return self._guard(
            lambda: _json_matches(_load(expected), self._document, strict=True),
            f"Expected JSON {self.actual!r} to strictly equal {_to_json_string(expected)!r}",
        )

    def is_not_equal_to_json(self, expected: JsonDocument) -> "JsonContentAssert":
        return self._guard(
            lambda: not _json_matches(_load(expected), self._document, strict=False),
            f"Expected JSON {self.actual!r} to not equal {_to_json_string(expected)!r}",
        )

    def has_json_path(self, path: str) -> "JsonContentAssert":
        return self._guard(
            lambda: bool(jsonpath_parse(path).find(self._document)),
            f"Expected JSON path '{path}' to be present",
        )

    def does_not_have_json_path(self, path: str) -> "JsonContentAssert":
        return self._guard(
            lambda: not jsonpath_parse(path).find(self._document),
            f"Expected JSON path '{path}' to be absent",
        )

    def has_json_path_value(self, path: str, expected: Any) -> "JsonContentAssert":
        def matches() -> bool:
            values = [match.value for match in jsonpath_parse(path).find(self._document)]
            if len(values) == 1 and not _is_indefinite(path):
                return values[0] == expected
            return values == expected

        return self._guard(matches, f"Expected JSON path '{path}' to have value {expected!r}")


class JsonAssert:
    """
    JSONPath assertions bound to one JSON body.

    Example:
        body.json_path_as_string("$.results.channel_id").starts_with("ch_")
        body.json_path_as_list_of("$.items[*].id", int).has_size(3)
    """

    def __init__(self, softly: Any, json_body: str, slot: ExtractorSlot) -> None:
        self._softly = softly
        self._slot = slot
        self._raw = json_body
        self._valid = True
        try:
            self.actual = json.loads(json_body)
        except ValueError as e:
            self.actual = None
            self._valid = False
            softly.fail(f"Response body is not valid JSON: {e}")

    # ============================================================
    # Path evaluation
    # ============================================================

    def _find(self, path: str) -> Optional[List[Any]]:
        """Return matched values, or None if the path could not be evaluated."""
        if not self._valid:
            return None
        try:
            return [match.value for match in jsonpath_parse(path).find(self.actual)]
        except Exception as e:
            self._softly.fail(f"Invalid JSON path '{path}': {e}")
            return None

    def _read(self, path: str) -> Tuple[bool, Any]:
        values = self._find(path)
        if values is None:
            return False, None
        if not values:
            self._softly.fail(f"JSON path '{path}' not found in {self._raw!r}")
            return False, None
        if len(values) == 1 and not _is_indefinite(path):
            return True, values[0]
        return True, values

    def _read_as(self, path: str, target: type) -> Tuple[bool, Any]:
        found, value = self._read(path)
        if not found:
            return False, None
        try:
            return True, self._slot.capture(_convert(value, target))
        except (TypeError, ValueError) as e:
            self._softly.fail(
                f"Cannot read JSON path '{path}' as {target.__name__}: {value!r} ({e})"
            )
            return False, None

    # ============================================================
    # Typed accessors
    # ============================================================

    def json_path_as_string(self, path: str) -> StringAssert:
        found, value = self._read_as(path, str)
        return StringAssert(self._softly, value, description=f"JSON path '{path}'", enabled=found)

    def json_path_present(self, path: str) -> BooleanAssert:
        values = self._find(path)
        return BooleanAssert(
            self._softly,
            bool(values),
            description=f"JSON path '{path}' is present",
            enabled=values is not None,
        )

    def json_path_as_integer(self, path: str) -> IntegerAssert:
        found, value = self._read_as(path, int)
        return IntegerAssert(self._softly, value, description=f"JSON path '{path}'", enabled=found)

    def json_path_as_decimal(self, path: str) -> DecimalAssert:
        found, value = self._read_as(path, Decimal)
        return DecimalAssert(self._softly, value, description=f"JSON path '{path}'", enabled=found)

    def json_path_as_boolean(self, path: str) -> BooleanAssert:
        found, value = self._read_as(path, bool)
        return BooleanAssert(self._softly, value, description=f"JSON path '{path}'", enabled=found)

    def json_path_as(self, path: str, target: type) -> ObjectAssert:
        """Read any JSON value converted to ``target``; use for None and type checks."""
        found, value = self._read_as(path, target)
        return ObjectAssert(self._softly, value, description=f"JSON path '{path}'", enabled=found)

    def json_path_as_object(self, path: str) -> ObjectAssert:
        return self.json_path_as(path, object)

    def json_path_as_list_of(self, path: str, target: type = object) -> ListAssert:
        found, value = self._read(path)
        items: Optional[List[Any]] = None
        if found:
            raw_items = value if isinstance(value, list) else [value]
            try:
                items = self._slot.capture([_convert(item, target) for item in raw_items])
            except (TypeError, ValueError) as e:
                self._softly.fail(
                    f"Cannot read JSON path '{path}' as list of {target.__name__}: {e}"
                )
                found = False
        return ListAssert(self._softly, items, description=f"JSON path '{path}'", enabled=found)

    # ============================================================
    # Documents
    # ============================================================

    def body(self) -> JsonContentAssert:
        """Assert on the complete JSON body."""
        return JsonContentAssert(self._softly, self._slot.capture(self._raw), enabled=self._valid)

    def json_path_as_json(
        self,
        path: str,
        *assertions: Callable[["JsonAssert"], Any],
    ) -> JsonContentAssert:
        """
        Select a sub-document and assert on it separately.

        Nested consumers receive a ``JsonAssert`` over the selected fragment,
        sharing this chain's aggregator and extractor slot.
        """
        found, value = self._read(path)
        if not found:
            return JsonContentAssert(self._softly, None, enabled=False)
        fragment = self._slot.capture(json.dumps(value))
        for assertion in assertions:
            self._softly.check(assertion, self._softly.assert_json_path(fragment, self._slot))
        return self._softly.assert_json_body(fragment)

    def validate_schema(self, json_schema: Union[str, dict]) -> "JsonAssert":
        """Validate the whole body against a JSON Schema, one failure per violation."""
        if not self._valid:
            return self
        try:
            schema = _load(json_schema)
            Draft7Validator.check_schema(schema)
            validator = Draft7Validator(schema, format_checker=jsonschema.FormatChecker())
            errors = list(validator.iter_errors(self._slot.capture(self.actual)))
        except jsonschema.exceptions.SchemaError as e:
            self._softly.fail(f"[JSON Schema] Invalid schema: {e.message}")
            return self
        except ValueError as e:
            self._softly.fail(f"[JSON Schema] Invalid schema: {e}")
            return self

        for error in errors:
            location = ".".join(str(part) for part in error.absolute_path) or "<root>"
            self._softly.fail(f"[JSON Schema] {location}: {error.message}")
        return self

    def extract(self) -> "JsonAssert":
        self._slot.arm()
        return self


__all__ = [
    "JsonAssert",
    "JsonContentAssert",
]
