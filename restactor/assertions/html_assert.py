"""
================================================================================
HTML Assertions
================================================================================

CSS-selector driven soft assertions over an HTML body, backed by
BeautifulSoup. The text of the first element matching a selector can be
asserted as a string or parsed as a number (US format: grouping commas are
ignored and the leading numeric part is used, so "1,250 items" reads 1250).

Example:
    html.css_selector_as_long("span.total").is_greater_than(0)
    html.css_selector_as_raw("#price").transform(lambda s: s.lstrip("$")).as_double()

================================================================================
"""

from __future__ import annotations

import re
from typing import Any, Callable, Optional, Tuple

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from .extractor import ExtractorSlot
from .value_assert import FloatAssert, IntegerAssert, StringAssert


US_NUMBER_PATTERN = re.compile(r"^[-+]?(\d[\d,]*)?(\.\d+)?")


def parse_us_number(value: str) -> float:
    """
    Parse the leading number of ``value`` in US notation.

    Raises:
        ValueError: If the text does not start with a number
    """
    match = US_NUMBER_PATTERN.match(value.strip())
    text = match.group(0).replace(",", "") if match else ""
    if text in ("", "+", "-"):
        raise ValueError(f"Unparseable number: {value!r}")
    return float(text)


class HtmlAssert:
    """HTML body assertions."""

    def __init__(self, softly: Any, html_body: str, slot: ExtractorSlot) -> None:
        self._softly = softly
        self._slot = slot
        self.actual = BeautifulSoup(html_body, "lxml")

    def _select_text(self, css: str) -> Tuple[bool, Optional[str]]:
        try:
            element = self.actual.select_one(css)
        except SelectorSyntaxError as e:
            self._softly.fail(f"Invalid CSS selector '{css}': {e}")
            return False, None
        if element is None:
            self._softly.fail(f"CSS selector '{css}' did not match any element")
            return False, None
        # whitespace normalized the way browsers render text
        return True, " ".join(element.get_text().split())

    def css_selector_as_raw(self, css: str) -> "RawStringProcessor":
        """Select text to transform before asserting on it."""
        found, text = self._select_text(css)
        return RawStringProcessor(self, text, css, enabled=found)

    def css_selector_as_string(self, css: str) -> StringAssert:
        return self.css_selector_as_raw(css).as_string()

    def css_selector_as_long(self, css: str) -> IntegerAssert:
        return self.css_selector_as_raw(css).as_long()

    def css_selector_as_double(self, css: str) -> FloatAssert:
        return self.css_selector_as_raw(css).as_double()

    def extract(self) -> "HtmlAssert":
        self._slot.arm()
        return self


class RawStringProcessor:
    """Selected text, optionally transformed, then asserted in a chosen type."""

    def __init__(self, html: HtmlAssert, raw_value: Optional[str], css: str, enabled: bool = True) -> None:
        self._html = html
        self._raw_value = raw_value
        self._css = css
        self._enabled = enabled

    def transform(self, transformation: Callable[[str], str]) -> "RawStringProcessor":
        if self._enabled:
            self._raw_value = transformation(self._raw_value)
        return self

    def _description(self) -> str:
        return f"CSS selector '{self._css}'"

    def _number(self) -> Tuple[bool, Optional[float]]:
        if not self._enabled:
            return False, None
        try:
            return True, parse_us_number(self._raw_value)
        except ValueError as e:
            self._html._softly.fail(f"[{self._description()}] Parsing failed: {e}")
            return False, None

    def as_string(self) -> StringAssert:
        value = self._html._slot.capture(self._raw_value) if self._enabled else None
        return StringAssert(
            self._html._softly, value, description=self._description(), enabled=self._enabled
        )

    def as_long(self) -> IntegerAssert:
        parsed, number = self._number()
        value = self._html._slot.capture(int(number)) if parsed else None
        return IntegerAssert(
            self._html._softly, value, description=self._description(), enabled=parsed
        )

    def as_double(self) -> FloatAssert:
        parsed, number = self._number()
        value = self._html._slot.capture(number) if parsed else None
        return FloatAssert(
            self._html._softly, value, description=self._description(), enabled=parsed
        )


__all__ = [
    "HtmlAssert",
    "RawStringProcessor",
    "parse_us_number",
]
