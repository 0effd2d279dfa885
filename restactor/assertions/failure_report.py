"""
================================================================================
Aggregate Failure Report
================================================================================

Renders the failures collected by ``SoftAssertions`` into one indexed,
tree-connected report:

    Checks (2 failures)
    |---1: Expected status code to equal 200, got 404
    `---2: Expected body to contain 'id'

The connector glyphs are resolved once per process. Set the
``RESTACTOR_UNICODE`` environment variable to any non-empty value to switch
from the ASCII set to box-drawing characters.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence


UNICODE_FLAG_ENV = "RESTACTOR_UNICODE"

EOL = "\n"
STACK_TRACE_SPACES = "   "
LAST_LINE_STACK_TRACE_PREFIX = " "
DEFAULT_HEADING = "Multiple Failures"


class FailureOrigin(str, Enum):
    """Where a recorded failure came from."""
    ASSERTION_LIBRARY = "assertion-library"
    AGGREGATE = "aggregate"


class AssertionFailure(AssertionError):
    """
    A single failed predicate.

    Instances are recorded by ``SoftAssertions`` and only ever surface to the
    caller inside an ``AggregateAssertionFailure``.

    Attributes:
        message: Failure description (may be empty)
        origin: Whether the failure came from an individual assertion or from
            a nested aggregate
        kind: Name of the failure type, used when the message is empty
    """

    def __init__(
        self,
        message: str = "",
        origin: FailureOrigin = FailureOrigin.ASSERTION_LIBRARY,
        kind: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.origin = origin
        self.kind = kind or type(self).__name__

    @classmethod
    def from_error(cls, error: AssertionError) -> "AssertionFailure":
        """Convert an ``AssertionError`` raised by user code into a record."""
        if isinstance(error, AssertionFailure):
            return error
        origin = (
            FailureOrigin.AGGREGATE
            if isinstance(error, AggregateAssertionFailure)
            else FailureOrigin.ASSERTION_LIBRARY
        )
        failure = cls(str(error), origin=origin, kind=type(error).__name__)
        failure.__cause__ = error
        return failure


@dataclass(frozen=True)
class GlyphSet:
    """Connector prefixes used to draw the failure tree."""
    item_prefix: str
    last_item_prefix: str
    continuation_prefix: str

    @classmethod
    def from_flag(cls, flag: Optional[str]) -> "GlyphSet":
        return UNICODE_GLYPHS if flag else ASCII_GLYPHS


ASCII_GLYPHS = GlyphSet("|---%d: ", "`---%d: ", "|")
UNICODE_GLYPHS = GlyphSet("├───%d: ", "└───%d: ", "│")

# resolved once at import
ACTIVE_GLYPHS = GlyphSet.from_flag(os.environ.get(UNICODE_FLAG_ENV))


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _pluralize(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


def _null_safe_message(failure: BaseException) -> str:
    message = getattr(failure, "message", None)
    if message is None:
        message = str(failure)
    if _is_blank(message):
        kind = getattr(failure, "kind", None) or type(failure).__name__
        return f"<no message> in {kind}"
    return message


class FailureReportFormatter:
    """Formats an ordered failure sequence into a single report string."""

    def __init__(self, glyphs: GlyphSet = ACTIVE_GLYPHS) -> None:
        self.glyphs = glyphs

    def format(
        self,
        failures: Sequence[BaseException],
        heading: Optional[str] = None,
    ) -> str:
        count = len(failures)
        title = DEFAULT_HEADING if _is_blank(heading) else heading.strip()
        parts = [
            f"{title} ({count} {_pluralize(count, 'failure', 'failures')})",
        ]

        for index, failure in enumerate(failures, start=1):
            if index == count:
                message_prefix = self.glyphs.last_item_prefix % index
                stack_trace_prefix = LAST_LINE_STACK_TRACE_PREFIX + STACK_TRACE_SPACES
            else:
                message_prefix = self.glyphs.item_prefix % index
                stack_trace_prefix = self.glyphs.continuation_prefix + STACK_TRACE_SPACES

            lines = [
                STACK_TRACE_SPACES + line if line.startswith("at") else line
                for line in _null_safe_message(failure).strip().split(EOL)
            ]
            parts.append(EOL + message_prefix)
            parts.append((EOL + stack_trace_prefix).join(lines).strip())

        return "".join(parts)


class AggregateAssertionFailure(AssertionError):
    """
    Raised once per assertion chain when one or more failures were recorded.

    ``str()`` returns the formatted report with every failure in recording
    order.
    """

    def __init__(
        self,
        heading: Optional[str],
        failures: Sequence[AssertionFailure],
        formatter: Optional[FailureReportFormatter] = None,
    ) -> None:
        self.heading = heading
        self.failures: List[AssertionFailure] = list(failures)
        self._formatter = formatter or FailureReportFormatter()
        super().__init__(self.report)

    @property
    def report(self) -> str:
        return self._formatter.format(self.failures, self.heading)

    def __str__(self) -> str:
        return self.report


__all__ = [
    "ACTIVE_GLYPHS",
    "ASCII_GLYPHS",
    "UNICODE_GLYPHS",
    "UNICODE_FLAG_ENV",
    "AggregateAssertionFailure",
    "AssertionFailure",
    "FailureOrigin",
    "FailureReportFormatter",
    "GlyphSet",
]
