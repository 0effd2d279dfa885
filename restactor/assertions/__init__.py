"""
================================================================================
Response Assertions
================================================================================

Soft assertion layer used by the REST client.

Modules:
    - extractor: single-assignment value capture
    - failure_report: aggregate failure record and report formatting
    - soft_assertions: failure aggregator and assertion entry points
    - value_assert: capability assertions for plain values
    - header_assert / json_assert / xml_assert / html_assert: body-kind assertors
    - response_asserter: fluent facade over one HTTP response

Author: Automation Team
License: MIT
================================================================================
"""

from .extractor import ExtractorSlot, ValueExtractor
from .failure_report import (
    ACTIVE_GLYPHS,
    ASCII_GLYPHS,
    UNICODE_GLYPHS,
    AggregateAssertionFailure,
    AssertionFailure,
    FailureOrigin,
    FailureReportFormatter,
    GlyphSet,
)
from .header_assert import HeaderAssert
from .html_assert import HtmlAssert, RawStringProcessor
from .json_assert import JsonAssert, JsonContentAssert
from .response_asserter import ResponseAsserter, ResponseMatchers
from .soft_assertions import SoftAssertions
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
from .xml_assert import NodesAssert, XmlAssert

__all__ = [
    "ACTIVE_GLYPHS",
    "ASCII_GLYPHS",
    "UNICODE_GLYPHS",
    "AggregateAssertionFailure",
    "AssertionFailure",
    "BooleanAssert",
    "BytesAssert",
    "DecimalAssert",
    "ExtractorSlot",
    "FailureOrigin",
    "FailureReportFormatter",
    "FloatAssert",
    "GlyphSet",
    "HeaderAssert",
    "HtmlAssert",
    "IntegerAssert",
    "JsonAssert",
    "JsonContentAssert",
    "ListAssert",
    "MapAssert",
    "NodesAssert",
    "ObjectAssert",
    "RawStringProcessor",
    "ResponseAsserter",
    "ResponseMatchers",
    "SoftAssertions",
    "StringAssert",
    "ValueExtractor",
    "XmlAssert",
]
