"""
================================================================================
Response Asserter
================================================================================

Fluent facade over one ``httpx.Response``. Every check records into a single
``SoftAssertions`` instance; ``assert_all()`` raises one aggregate failure
listing everything that went wrong.

Body checks dispatch to a content-specific assertor:

    body_as_string  -> StringAssert
    body_as_json    -> JsonAssert
    body_as_xml     -> XmlAssert
    body_as_html    -> HtmlAssert
    body_as_bytes   -> BytesAssert
    body_as(decode) -> ObjectAssert over decode(bytes)

Calling ``extract()`` arms the shared extractor slot: the next evaluated value
becomes the return value of ``RestRequestBuilder.expect()``.

Usage:
    >>> channel_id = client.post("/api/v1/channels").with_json_body(payload).expect(
    ...     lambda response: response.match()
    ...     .status_code(201)
    ...     .body_as_json(lambda body: body.extract().json_path_as_string("$.id"))
    ... )

================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

import httpx

from ..exceptions import RequestExecutionError
from .extractor import ExtractorSlot
from .header_assert import HeaderAssert
from .html_assert import HtmlAssert
from .json_assert import JsonAssert
from .soft_assertions import SoftAssertions
from .value_assert import BytesAssert, IntegerAssert, ObjectAssert, StringAssert
from .xml_assert import XmlAssert


T = TypeVar("T")


class ResponseAsserter:
    """
    Soft assertions for a single HTTP response.

    Args:
        response: Response to verify
        slot: Extractor slot shared with the request that produced the response
    """

    def __init__(self, response: httpx.Response, slot: ExtractorSlot) -> None:
        self.response = response
        self._slot = slot
        self._softly = SoftAssertions()

    # ============================================================
    # Status
    # ============================================================

    def accepted(self) -> "ResponseAsserter":
        """Status code is in [200, 300): received, understood and accepted."""
        IntegerAssert(self._softly, self.response.status_code, description="Status code").satisfies(
            lambda code: 200 <= code < 300, "accepted range [200, 300)"
        )
        return self

    def status_code(
        self,
        expected: Union[int, Callable[[IntegerAssert], Any]],
    ) -> "ResponseAsserter":
        """Status code equals ``expected``, or satisfies a custom assertion consumer."""
        status = IntegerAssert(self._softly, self.response.status_code, description="Status code")
        if callable(expected):
            self._softly.check(expected, status)
        else:
            status.is_equal_to(expected)
        return self

    # ============================================================
    # Headers
    # ============================================================

    def _headers_map(self) -> Dict[str, str]:
        headers: Dict[str, List[str]] = {}
        encoding = self.response.headers.encoding
        for raw_name, raw_value in self.response.headers.raw:
            name = raw_name.decode(encoding)
            existing = next((key for key in headers if key.lower() == name.lower()), name)
            headers.setdefault(existing, []).append(raw_value.decode(encoding))
        return {name: ", ".join(values) for name, values in headers.items()}

    def headers(self, *assertions: Callable[[HeaderAssert], Any]) -> "ResponseAsserter":
        headers = self._headers_map()
        for assertion in assertions:
            self._softly.check(assertion, self._softly.assert_headers(headers, self._slot))
        return self

    # ============================================================
    # Body
    # ============================================================

    def _body_bytes(self) -> bytes:
        try:
            return self.response.read()
        except (httpx.StreamError, httpx.HTTPError) as e:
            raise RequestExecutionError(f"Failed to retrieve response body: {e}") from e

    def _body_text(self) -> str:
        self._body_bytes()
        return self.response.text

    def _structured_body(self, kind: str) -> Optional[str]:
        body = self._body_text()
        if not body.strip():
            self._softly.fail(f"Expected a {kind} response body, got an empty body")
            return None
        return self._slot.capture(body)

    def no_body(self) -> "ResponseAsserter":
        BytesAssert(self._softly, self._body_bytes(), description="Response body").is_empty()
        return self

    def body_is(self, expected: str) -> "ResponseAsserter":
        return self.body_as_string(lambda body: body.is_equal_to(expected))

    def body_as_string(self, *assertions: Callable[[StringAssert], Any]) -> "ResponseAsserter":
        body = self._slot.capture(self._body_text())
        for assertion in assertions:
            self._softly.check(
                assertion, StringAssert(self._softly, body, description="Response body")
            )
        return self

    def body_as_json(self, *assertions: Callable[[JsonAssert], Any]) -> "ResponseAsserter":
        body = self._structured_body("JSON")
        if body is not None:
            for assertion in assertions:
                self._softly.check(assertion, self._softly.assert_json_path(body, self._slot))
        return self

    def body_as_xml(self, *assertions: Callable[[XmlAssert], Any]) -> "ResponseAsserter":
        body = self._structured_body("XML")
        if body is not None:
            for assertion in assertions:
                self._softly.check(assertion, self._softly.assert_xml(body, self._slot))
        return self

    def body_as_html(self, *assertions: Callable[[HtmlAssert], Any]) -> "ResponseAsserter":
        body = self._structured_body("HTML")
        if body is not None:
            for assertion in assertions:
                self._softly.check(assertion, self._softly.assert_html(body, self._slot))
        return self

    def body_as_bytes(self, *assertions: Callable[[BytesAssert], Any]) -> "ResponseAsserter":
        body = self._slot.capture(self._body_bytes())
        for assertion in assertions:
            self._softly.check(
                assertion, BytesAssert(self._softly, body, description="Response body")
            )
        return self

    def body_as(
        self,
        decoder: Callable[[bytes], T],
        *assertions: Callable[[ObjectAssert], Any],
    ) -> "ResponseAsserter":
        """Decode the raw body with ``decoder`` and assert on the decoded object."""
        body = self._slot.capture(decoder(self._body_bytes()))
        for assertion in assertions:
            self._softly.check(
                assertion, ObjectAssert(self._softly, body, description="Decoded body")
            )
        return self

    # ============================================================
    # Extraction and results
    # ============================================================

    def extract(self) -> "ResponseAsserter":
        self._slot.arm()
        return self

    def with_error_heading(self, heading: str) -> "ResponseAsserter":
        self._softly.heading = heading
        return self

    def get_assertions(self) -> SoftAssertions:
        return self._softly

    def has_errors(self) -> bool:
        return self._softly.has_errors()

    def errors_count(self) -> int:
        return self._softly.errors_count()

    def assert_all(self) -> None:
        self._softly.assert_all()


class ResponseMatchers:
    """Entry point handed to ``expect()`` checkers."""

    def __init__(self, response: httpx.Response, slot: ExtractorSlot) -> None:
        self.response = response
        self._slot = slot

    def match(self) -> ResponseAsserter:
        return ResponseAsserter(self.response, self._slot)


__all__ = [
    "ResponseAsserter",
    "ResponseMatchers",
]
