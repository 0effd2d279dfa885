"""
================================================================================
HTTP Exchange Reporting
================================================================================

Logs every request/response pair with loguru and attaches it to the Allure
report:
    - Request URL with query parameters
    - Request headers (sensitive values masked)
    - Request body (sensitive JSON fields masked)
    - cURL command for reproduction
    - Response status
    - Response body (truncated if too long)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional

import allure
import httpx
from allure_commons.types import AttachmentType
from loguru import logger


# Maximum response length to include in Allure reports
MAX_RESPONSE_LENGTH = 3000

MASK = "***MASKED***"

SENSITIVE_HEADERS = {
    "authorization",
    "proxy-authorization",
    "x-api-key",
    "x-app-auth",
    "cookie",
    "set-cookie",
}

SENSITIVE_BODY_TOKENS = (
    "password",
    "secret",
    "token",
    "api_key",
    "authorization",
    "session",
)


def redact_headers(headers: Mapping[str, Any]) -> Dict[str, Any]:
    """Mask sensitive header values before logging."""
    return {
        key: MASK if key.lower() in SENSITIVE_HEADERS else value
        for key, value in headers.items()
    }


def redact_body(payload: Any) -> Any:
    """Recursively mask sensitive fields of a decoded JSON body."""
    if isinstance(payload, dict):
        redacted = {}
        for key, value in payload.items():
            if any(token in str(key).lower() for token in SENSITIVE_BODY_TOKENS):
                redacted[key] = MASK
            else:
                redacted[key] = redact_body(value)
        return redacted
    if isinstance(payload, list):
        return [redact_body(item) for item in payload]
    return payload


def request_body_text(request: httpx.Request) -> Optional[str]:
    """Printable request body with JSON secrets masked, None if empty."""
    try:
        content = request.content
    except httpx.RequestNotRead:
        return "<streamed body>"
    if not content:
        return None

    text = content.decode("utf-8", errors="replace")
    try:
        return json.dumps(redact_body(json.loads(text)), ensure_ascii=False)
    except ValueError:
        return text


def response_body_text(response: httpx.Response) -> str:
    """Pretty-printed response body, truncated to MAX_RESPONSE_LENGTH."""
    try:
        content = json.dumps(response.json(), ensure_ascii=False, indent=2)
    except ValueError:
        content = response.text or "<empty>"

    if len(content) > MAX_RESPONSE_LENGTH:
        content = (
            f"{content[:MAX_RESPONSE_LENGTH]}\n\n"
            f"... [Truncated, full length: {len(content)} chars] ..."
        )
    return content


def build_curl(
    method: str,
    url: str,
    headers: Mapping[str, str],
    body: Optional[str],
) -> str:
    """
    Build a copy-paste ready cURL command.

    Expects already redacted headers and body.
    """
    parts = [f"curl -X {method}"]
    for key, value in headers.items():
        parts.append(f"-H '{key}: {value}'")
    if body:
        escaped = body.replace("'", "'\\''")
        parts.append(f"-d '{escaped}'")
    parts.append(f"'{url}'")
    return " \\\n  ".join(parts)


def log_exchange(response: httpx.Response) -> None:
    """Log one HTTP exchange to loguru and the Allure report."""
    request = response.request
    url = str(request.url)
    safe_headers = redact_headers(dict(request.headers.items()))
    body = request_body_text(request)

    status_emoji = "✅" if response.status_code < 400 else "❌"
    logger.debug(f"{status_emoji} {request.method} {url} -> {response.status_code}")

    with allure.step(f"{status_emoji} {request.method} {request.url.path} → {response.status_code}"):
        allure.attach(url, name="🔗 Request URL", attachment_type=AttachmentType.TEXT)

        if safe_headers:
            allure.attach(
                json.dumps(safe_headers, ensure_ascii=False, indent=2),
                name="📤 Request Headers",
                attachment_type=AttachmentType.JSON,
            )

        if body:
            allure.attach(body, name="📤 Request Body", attachment_type=AttachmentType.TEXT)

        allure.attach(
            build_curl(request.method, url, safe_headers, body),
            name="🔧 cURL Command",
            attachment_type=AttachmentType.TEXT,
        )

        allure.attach(
            f"{status_emoji} {response.status_code}",
            name="📥 Response Status",
            attachment_type=AttachmentType.TEXT,
        )

        allure.attach(
            json.dumps(redact_headers(dict(response.headers.items())), ensure_ascii=False, indent=2),
            name="📥 Response Headers",
            attachment_type=AttachmentType.JSON,
        )

        allure.attach(
            response_body_text(response),
            name="📥 Response Body",
            attachment_type=AttachmentType.TEXT,
        )


__all__ = [
    "MAX_RESPONSE_LENGTH",
    "build_curl",
    "log_exchange",
    "redact_body",
    "redact_headers",
    "request_body_text",
    "response_body_text",
]
