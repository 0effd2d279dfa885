"""
================================================================================
Request Builders
================================================================================

Per-verb fluent builders. A builder accumulates headers, query parameters and
an optional body, then either executes the call and returns the raw response
or executes it and runs a response assertion chain.

Content-Type handling for body verbs:
    - ``with_header("Content-Type", ...)`` is deferred until execution
    - the content type given to ``with_body`` always wins (a WARNING is logged
      when it differs from the header value)
    - a non-empty body without any content type logs a WARNING
GET and HEAD apply every header, Content-Type included, immediately.

Usage:
    >>> response = client.get("/api/v1/users/{}", 42).with_header("Accept", "application/json").execute()
    >>> user_name = client.get("/api/v1/users/{}", 42).expect(
    ...     lambda response: response.match().accepted().body_as_json(
    ...         lambda body: body.extract().json_path_as_string("$.name")
    ...     )
    ... )

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Callable, List, Mapping, Optional, Tuple, TypeVar, Union

import httpx
from loguru import logger

from ..assertions.extractor import ExtractorSlot
from ..assertions.response_asserter import ResponseAsserter, ResponseMatchers
from ..exceptions import RequestExecutionError

if TYPE_CHECKING:
    from .rest_client import RestClient


CONTENT_TYPE = "Content-Type"
JSON_CONTENT_TYPE = "application/json"

MISSING_CONTENT_TYPE_MESSAGE = (
    "'Content-Type' value is not specified for the request with non-empty body!"
)
OVERRIDE_CONTENT_TYPE_MESSAGE = "'Content-Type' body value '{}' overrides header value '{}'!"

HeaderValue = Union[str, Callable[[], str]]
Body = Union[str, bytes]

B = TypeVar("B", bound="RestRequestBuilder")


def _resolve(value: HeaderValue) -> str:
    return value() if callable(value) else value


class RestRequestBuilder:
    """
    Shared behavior of all verb builders.

    Args:
        client: Client which owns the connection pool and configuration
        url: Complete request URL
    """

    method = ""

    def __init__(self, client: "RestClient", url: str) -> None:
        self._client = client
        self.url = url
        self._headers: List[Tuple[str, str]] = []
        self._params: List[Tuple[str, str]] = []
        # Content-Type given via with_header, applied at build time
        self.header_content_type: Optional[str] = None
        # Content-Type given via the body call
        self.body_content_type: Optional[str] = None

    # ============================================================
    # Headers and query parameters
    # ============================================================

    def with_header(self: B, name: str, value: HeaderValue) -> B:
        """Add a header; ``value`` may be a zero-argument supplier."""
        resolved = _resolve(value)
        if name.lower() == CONTENT_TYPE.lower():
            if self.body_content_type is not None:
                logger.warning(
                    OVERRIDE_CONTENT_TYPE_MESSAGE.format(self.body_content_type, resolved)
                )
            else:
                self.header_content_type = resolved
        else:
            self._headers.append((name, resolved))
        return self

    def with_headers(self: B, headers: Mapping[str, HeaderValue]) -> B:
        for name, value in headers.items():
            self.with_header(name, value)
        return self

    def with_query_param(self: B, name: str, value: Any) -> B:
        self._params.append((name, str(value)))
        return self

    def with_query_params(self: B, params: Mapping[str, Any]) -> B:
        for name, value in params.items():
            self.with_query_param(name, value)
        return self

    # ============================================================
    # Request construction
    # ============================================================

    def _content(self) -> Optional[bytes]:
        return None

    def _request_headers(self) -> httpx.Headers:
        headers = httpx.Headers(self._headers)
        if self.header_content_type is not None and CONTENT_TYPE not in headers:
            headers[CONTENT_TYPE] = self.header_content_type
        return headers

    def build_request(self) -> httpx.Request:
        headers = self._request_headers()
        self._client.apply_default_headers(headers)
        return self._client.http.build_request(
            self.method,
            self.url,
            params=self._params or None,
            headers=headers,
            content=self._content(),
        )

    # ============================================================
    # Execution
    # ============================================================

    def _send(self, request: httpx.Request) -> httpx.Response:
        http = self._client.http
        response = http.send(request, follow_redirects=False)
        hops = 0
        while self._client.follow_redirects and response.next_request is not None:
            next_request = response.next_request
            if (
                next_request.url.scheme != response.request.url.scheme
                and not self._client.follow_ssl_redirects
            ):
                logger.debug(
                    f"Not following protocol redirect {response.request.url} -> {next_request.url}"
                )
                break
            hops += 1
            if hops > self._client.max_redirects:
                response.close()
                raise RequestExecutionError(
                    f"Exceeded maximum of {self._client.max_redirects} redirects for {self.url}"
                )
            response.close()
            response = http.send(next_request, follow_redirects=False)
        return response

    def execute(self) -> httpx.Response:
        """
        Send the request without checking the response.

        Raises:
            RequestExecutionError: On any transport-level failure
        """
        try:
            return self._send(self.build_request())
        except httpx.RequestError as e:
            raise RequestExecutionError(
                f"Failed to perform REST call {self.method} {self.url}: {e}"
            ) from e

    def expect(self, checkers: Callable[[ResponseMatchers], ResponseAsserter]) -> Optional[Any]:
        """
        Send the request and verify the response.

        ``checkers`` builds an assertion chain from the response matchers. All
        collected failures are raised together once the chain is complete.

        Returns:
            The extracted value, or None if nothing was extracted

        Raises:
            AggregateAssertionFailure: If any assertion failed
            RequestExecutionError: On any transport-level failure
        """
        slot = ExtractorSlot()
        response = self.execute()
        checkers(ResponseMatchers(response, slot)).assert_all()
        return slot.value


class GetRequestBuilder(RestRequestBuilder):
    """GET request builder."""

    method = "GET"

    def with_header(self, name: str, value: HeaderValue) -> "GetRequestBuilder":
        self._headers.append((name, _resolve(value)))
        return self


class HeadRequestBuilder(GetRequestBuilder):
    """HEAD request builder."""

    method = "HEAD"


class BodyRequestBuilder(RestRequestBuilder):
    """Base for verbs which always send a body, empty by default."""

    def __init__(self, client: "RestClient", url: str) -> None:
        super().__init__(client, url)
        self._body = b""

    def with_body(self: B, content: Body, content_type: Optional[str] = None) -> B:
        """
        Set the request body.

        Args:
            content: Body as text (encoded as UTF-8) or raw bytes
            content_type: Body media type, falls back to a Content-Type header
        """
        if content is None:
            raise ValueError("Body content can't be None")
        self._body = content.encode("utf-8") if isinstance(content, str) else bytes(content)

        if content_type is None:
            content_type = self.header_content_type
            if content_type is None:
                logger.warning(MISSING_CONTENT_TYPE_MESSAGE)
        elif self.header_content_type is not None and content_type != self.header_content_type:
            logger.warning(
                OVERRIDE_CONTENT_TYPE_MESSAGE.format(content_type, self.header_content_type)
            )
        self.body_content_type = content_type
        return self

    def with_json_body(self: B, payload: Any) -> B:
        return self.with_body(json.dumps(payload, ensure_ascii=False), JSON_CONTENT_TYPE)

    def _content(self) -> bytes:
        return self._body

    def _request_headers(self) -> httpx.Headers:
        headers = httpx.Headers(self._headers)
        content_type = self.body_content_type or self.header_content_type
        if content_type is not None:
            headers[CONTENT_TYPE] = content_type
        if not self._body:
            headers["Content-Length"] = "0"
        return headers


class PostRequestBuilder(BodyRequestBuilder):
    """POST request builder."""

    method = "POST"


class PutRequestBuilder(BodyRequestBuilder):
    """PUT request builder."""

    method = "PUT"


class PatchRequestBuilder(BodyRequestBuilder):
    """PATCH request builder."""

    method = "PATCH"


class DeleteRequestBuilder(BodyRequestBuilder):
    """DELETE request builder."""

    method = "DELETE"


__all__ = [
    "BodyRequestBuilder",
    "DeleteRequestBuilder",
    "GetRequestBuilder",
    "HeadRequestBuilder",
    "PatchRequestBuilder",
    "PostRequestBuilder",
    "PutRequestBuilder",
    "RestRequestBuilder",
    "MISSING_CONTENT_TYPE_MESSAGE",
]
