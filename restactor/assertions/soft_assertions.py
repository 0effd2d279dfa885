"""
================================================================================
Soft Assertions
================================================================================

Collects assertion failures without stopping execution and raises a single
``AggregateAssertionFailure`` from ``assert_all()``.

Key Features:
    - One entry point per value kind, each returning a capability assertion
    - Failures kept in evaluation order, never discarded
    - AssertionErrors raised inside consumer callbacks are recorded, not lost
    - One-shot finalization with loguru logging and an Allure attachment

Example:
    softly = SoftAssertions(heading="User payload")
    softly.assert_that_string(user["name"]).is_not_empty()
    softly.assert_that_integer(user["age"]).is_positive()
    softly.assert_all()

================================================================================
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

import allure
from loguru import logger

from ..exceptions import AssertionsFinalizedError
from .extractor import ExtractorSlot
from .failure_report import (
    AggregateAssertionFailure,
    AssertionFailure,
    FailureReportFormatter,
)
from .header_assert import HeaderAssert
from .html_assert import HtmlAssert
from .json_assert import JsonAssert, JsonContentAssert
from .value_assert import (
    BooleanAssert,
    BytesAssert,
    DecimalAssert,
    FloatAssert,
    IntegerAssert,
    ListAssert,
    MapAssert,
    ObjectAssert,
    StringAssert,
)
from .xml_assert import XmlAssert


T = TypeVar("T")


class SoftAssertions:
    """
    Aggregator for soft assertions.

    Args:
        heading: Optional report heading used instead of "Multiple Failures"
        formatter: Report formatter (uses the process-wide glyph set if None)
    """

    def __init__(
        self,
        heading: Optional[str] = None,
        formatter: Optional[FailureReportFormatter] = None,
    ) -> None:
        self.heading = heading
        self._formatter = formatter or FailureReportFormatter()
        self._failures: List[AssertionFailure] = []
        self._finalized = False

    # ============================================================
    # Recording
    # ============================================================

    def _ensure_open(self) -> None:
        if self._finalized:
            raise AssertionsFinalizedError(
                "assert_all() was already called for these soft assertions"
            )

    def record(self, failure: AssertionFailure) -> None:
        self._ensure_open()
        self._failures.append(failure)
        logger.debug(f"❌ Soft assertion failed: {failure.message or failure.kind}")

    def fail(self, message: str) -> None:
        self.record(AssertionFailure(message))

    def record_error(self, error: AssertionError) -> None:
        self.record(AssertionFailure.from_error(error))

    def check(self, consumer: Callable[[T], Any], target: T) -> None:
        """Run a consumer callback, recording any AssertionError it raises."""
        self._ensure_open()
        try:
            consumer(target)
        except AssertionError as e:
            self.record_error(e)

    # ============================================================
    # Entry points
    # ============================================================

    def assert_that(self, actual: Any) -> ObjectAssert:
        return ObjectAssert(self, actual)

    def assert_that_string(self, actual: Optional[str]) -> StringAssert:
        return StringAssert(self, actual)

    def assert_that_integer(self, actual: Optional[int]) -> IntegerAssert:
        return IntegerAssert(self, actual)

    def assert_that_decimal(self, actual: Optional[Decimal]) -> DecimalAssert:
        return DecimalAssert(self, actual)

    def assert_that_float(self, actual: Optional[float]) -> FloatAssert:
        return FloatAssert(self, actual)

    def assert_that_boolean(self, actual: Optional[bool]) -> BooleanAssert:
        return BooleanAssert(self, actual)

    def assert_that_list(self, actual: Optional[Sequence[Any]]) -> ListAssert:
        return ListAssert(self, actual)

    def assert_that_map(self, actual: Optional[Mapping[Any, Any]]) -> MapAssert:
        return MapAssert(self, actual)

    def assert_that_bytes(self, actual: Optional[bytes]) -> BytesAssert:
        return BytesAssert(self, actual)

    def assert_headers(self, headers: Dict[str, str], slot: ExtractorSlot) -> HeaderAssert:
        return HeaderAssert(self, headers, slot)

    def assert_json_path(self, json_body: str, slot: ExtractorSlot) -> JsonAssert:
        return JsonAssert(self, json_body, slot)

    def assert_json_body(self, json_body: str) -> JsonContentAssert:
        return JsonContentAssert(self, json_body)

    def assert_xml(self, xml_body: str, slot: ExtractorSlot) -> XmlAssert:
        return XmlAssert(self, xml_body, slot)

    def assert_html(self, html_body: str, slot: ExtractorSlot) -> HtmlAssert:
        return HtmlAssert(self, html_body, slot)

    # ============================================================
    # Results
    # ============================================================

    def errors_collected(self) -> List[AssertionFailure]:
        return list(self._failures)

    def errors_count(self) -> int:
        return len(self._failures)

    def has_errors(self) -> bool:
        return self.errors_count() > 0

    def assert_all(self) -> None:
        """
        Finalize the assertions.

        Raises:
            AggregateAssertionFailure: If any failure was recorded
            AssertionsFinalizedError: If called more than once
        """
        self._ensure_open()
        self._finalized = True

        if not self._failures:
            return

        error = AggregateAssertionFailure(self.heading, self._failures, self._formatter)
        logger.warning(f"Soft assertions failed:\n{error.report}")
        allure.attach(
            error.report,
            name="Soft Assertion Failures",
            attachment_type=allure.attachment_type.TEXT,
        )
        raise error


__all__ = [
    "SoftAssertions",
]
