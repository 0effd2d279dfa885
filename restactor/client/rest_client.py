"""
================================================================================
REST Client
================================================================================

Entry point of the library: a configured httpx client handing out per-verb
request builders.

Features:
    - Fluent builder with connect/read/write timeouts
    - Default headers (static values or suppliers) applied when absent
    - Basic, NTLM and Kerberos authentication
    - Client-side rate limiting at the transport level
    - Independent toggles for redirects and protocol (http <-> https) redirects
    - loguru + Allure reporting of every exchange, with cURL reproduction

Usage:
    >>> client = (
    ...     RestClient.builder()
    ...     .with_base_url("http://localhost:8080")
    ...     .with_basic_auth("User", "Password")
    ...     .with_rate_limit(10)
    ...     .build()
    ... )
    >>> with client:
    ...     client.get("/api/v1/users/{}", 42).expect(lambda response: response.match().accepted())

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import httpx
from loguru import logger

from ..auth.basic import basic_authorization
from ..auth.kerberos import KerberosAuthenticator
from ..auth.ntlm import NTLMAuth
from ..common.config_loader import ConfigLoader
from ..exceptions import ConfigurationError
from .rate_limit import RateLimitedTransport, RateLimiter
from .reporting import log_exchange
from .request_builders import (
    DeleteRequestBuilder,
    GetRequestBuilder,
    HeadRequestBuilder,
    PatchRequestBuilder,
    PostRequestBuilder,
    PutRequestBuilder,
)
from .urls import complete_url, format_path


# Default connect/read/write timeout in seconds
DEFAULT_TIMEOUT = 10.0

DEFAULT_MAX_REDIRECTS = 20

AUTHORIZATION = "Authorization"

HeaderValue = Union[str, Callable[[], str]]


class RestClient:
    """
    Configured REST client. Create one with ``RestClient.builder()`` or
    ``RestClient.from_config()``.
    """

    def __init__(self, builder: "RestClientBuilder") -> None:
        self.base_url = builder.base_url
        self.follow_redirects = builder.follow_redirects_enabled
        self.follow_ssl_redirects = builder.follow_ssl_redirects_enabled
        self.max_redirects = DEFAULT_MAX_REDIRECTS
        self.logging_enabled = builder.logging_enabled
        self._default_headers: List[Tuple[str, HeaderValue]] = list(builder.default_headers)

        transport = builder.transport or httpx.HTTPTransport(
            verify=builder.verify_ssl,
            retries=1 if builder.retry_on_failure else 0,
        )
        if builder.rate_limit is not None:
            transport = RateLimitedTransport(transport, RateLimiter(builder.rate_limit))

        event_hooks: Dict[str, List[Callable[..., Any]]] = {
            "request": [],
            "response": [],
        }
        if self.logging_enabled:
            event_hooks["response"].append(self._log_response)

        self.http = httpx.Client(
            transport=transport,
            timeout=builder.timeout(),
            auth=builder.auth,
            event_hooks=event_hooks,
            follow_redirects=False,
        )
        # configured defaults replace httpx's built-in Accept / User-Agent
        for name, _ in self._default_headers:
            if name in self.http.headers:
                del self.http.headers[name]
        logger.debug(f"REST client created for base URL '{self.base_url}'")

    @staticmethod
    def builder() -> "RestClientBuilder":
        return RestClientBuilder()

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None) -> "RestClient":
        """
        Build a client from the ``client`` and ``auth`` configuration sections.

        Keys:
            client.base_url, client.connect_timeout, client.read_timeout,
            client.write_timeout, client.rate_limit, client.follow_redirects,
            client.follow_ssl_redirects, client.retry_on_connection_failure,
            client.skip_ssl_checks, client.logging, client.default_headers,
            auth.type (basic | ntlm | kerberos), auth.user, auth.secret,
            auth.domain, auth.kerberos (options mapping)
        """
        if config is None:
            config = ConfigLoader()

        builder = cls.builder()
        base_url = config.get("client.base_url")
        if base_url:
            builder.with_base_url(base_url)

        builder.with_connect_timeout(float(config.get("client.connect_timeout", DEFAULT_TIMEOUT)))
        builder.with_read_timeout(float(config.get("client.read_timeout", DEFAULT_TIMEOUT)))
        builder.with_write_timeout(float(config.get("client.write_timeout", DEFAULT_TIMEOUT)))

        rate_limit = config.get("client.rate_limit")
        if rate_limit is not None:
            builder.with_rate_limit(float(rate_limit))

        builder.follow_redirects(config.get("client.follow_redirects", True))
        builder.follow_ssl_redirects(config.get("client.follow_ssl_redirects", True))
        builder.retry_on_connection_failure(
            config.get("client.retry_on_connection_failure", True)
        )
        if config.get("client.skip_ssl_checks", False):
            builder.skip_ssl_checks()
        if not config.get("client.logging", True):
            builder.disable_logging()

        default_headers = config.get("client.default_headers") or {}
        builder.with_default_headers(default_headers)

        auth_type = config.get("auth.type")
        if auth_type:
            auth_type = str(auth_type).lower()
            if auth_type == "basic":
                builder.with_basic_auth(config.get("auth.user"), config.get("auth.secret"))
            elif auth_type == "ntlm":
                builder.with_ntlm_auth(
                    config.get("auth.user"),
                    config.get("auth.secret"),
                    config.get("auth.domain", ""),
                )
            elif auth_type == "kerberos":
                builder.with_kerberos_auth(config.get_section("auth").get("kerberos") or {})
            else:
                raise ConfigurationError(f"Unsupported auth type: {auth_type}")

        return builder.build()

    # ============================================================
    # Event hooks
    # ============================================================

    def apply_default_headers(self, headers: httpx.Headers) -> None:
        """
        Add the default headers missing from ``headers``.

        Called once per logical call, so redirect follow-ups only carry what
        httpx keeps on ``next_request``.
        """
        for name, value in self._default_headers:
            if name not in headers:
                headers[name] = value() if callable(value) else value

    def _log_response(self, response: httpx.Response) -> None:
        response.read()
        log_exchange(response)

    # ============================================================
    # Verbs
    # ============================================================

    def _url(self, path: str, params: Tuple[Any, ...]) -> str:
        return complete_url(self.base_url, format_path(path, *params))

    def get(self, path: str, *params: Any) -> GetRequestBuilder:
        return GetRequestBuilder(self, self._url(path, params))

    def head(self, path: str, *params: Any) -> HeadRequestBuilder:
        return HeadRequestBuilder(self, self._url(path, params))

    def post(self, path: str, *params: Any) -> PostRequestBuilder:
        return PostRequestBuilder(self, self._url(path, params))

    def put(self, path: str, *params: Any) -> PutRequestBuilder:
        return PutRequestBuilder(self, self._url(path, params))

    def patch(self, path: str, *params: Any) -> PatchRequestBuilder:
        return PatchRequestBuilder(self, self._url(path, params))

    def delete(self, path: str, *params: Any) -> DeleteRequestBuilder:
        return DeleteRequestBuilder(self, self._url(path, params))

    # ============================================================
    # Lifecycle
    # ============================================================

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> "RestClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class RestClientBuilder:
    """Fluent configuration of a ``RestClient``."""

    def __init__(self) -> None:
        self.base_url = ""
        self.host_name: Optional[str] = None
        self.connect_timeout: Optional[float] = DEFAULT_TIMEOUT
        self.read_timeout: Optional[float] = DEFAULT_TIMEOUT
        self.write_timeout: Optional[float] = DEFAULT_TIMEOUT
        self.rate_limit: Optional[float] = None
        self.default_headers: List[Tuple[str, HeaderValue]] = []
        self.auth: Optional[httpx.Auth] = None
        self.follow_redirects_enabled = True
        self.follow_ssl_redirects_enabled = True
        self.retry_on_failure = True
        self.verify_ssl = True
        self.logging_enabled = True
        self.transport: Optional[httpx.BaseTransport] = None

    def build(self) -> RestClient:
        return RestClient(self)

    def timeout(self) -> httpx.Timeout:
        return httpx.Timeout(
            DEFAULT_TIMEOUT,
            connect=self.connect_timeout,
            read=self.read_timeout,
            write=self.write_timeout,
        )

    # ============================================================
    # Connection
    # ============================================================

    def with_base_url(self, base_url: str) -> "RestClientBuilder":
        """
        Set the URL prepended to every relative request path.

        Raises:
            ConfigurationError: If the URL is not an absolute http(s) URL
        """
        if not base_url:
            raise ConfigurationError("Base URL can't be empty!")
        try:
            url = httpx.URL(base_url)
        except (httpx.InvalidURL, TypeError) as e:
            raise ConfigurationError(f"Invalid base URL '{base_url}': {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ConfigurationError(f"Invalid base URL '{base_url}': absolute http(s) URL expected")

        self.base_url = base_url
        self.host_name = url.host
        return self

    @staticmethod
    def _timeout_value(seconds: float, name: str) -> Optional[float]:
        if seconds is None or seconds < 0:
            raise ConfigurationError(f"{name} timeout must be >= 0, got {seconds!r}")
        # 0 means no timeout
        return float(seconds) or None

    def with_connect_timeout(self, seconds: float) -> "RestClientBuilder":
        self.connect_timeout = self._timeout_value(seconds, "Connect")
        return self

    def with_read_timeout(self, seconds: float) -> "RestClientBuilder":
        self.read_timeout = self._timeout_value(seconds, "Read")
        return self

    def with_write_timeout(self, seconds: float) -> "RestClientBuilder":
        self.write_timeout = self._timeout_value(seconds, "Write")
        return self

    def with_rate_limit(self, permits_per_second: float) -> "RestClientBuilder":
        """Limit the client to ``permits_per_second`` network requests."""
        if permits_per_second is None or permits_per_second <= 0:
            raise ConfigurationError("Rate limit must be a positive value!")
        self.rate_limit = permits_per_second
        return self

    def with_transport(self, transport: httpx.BaseTransport) -> "RestClientBuilder":
        """Use a custom inner transport (e.g. ``httpx.MockTransport``)."""
        self.transport = transport
        return self

    def follow_ssl_redirects(self, enabled: bool = True) -> "RestClientBuilder":
        """Follow redirects from https to http and from http to https."""
        self.follow_ssl_redirects_enabled = enabled
        return self

    def follow_redirects(self, enabled: bool = True) -> "RestClientBuilder":
        self.follow_redirects_enabled = enabled
        return self

    def retry_on_connection_failure(self, enabled: bool = True) -> "RestClientBuilder":
        self.retry_on_failure = enabled
        return self

    def skip_ssl_checks(self) -> "RestClientBuilder":
        """Accept any server certificate. Test environments only."""
        logger.warning("SSL certificate checks are disabled")
        self.verify_ssl = False
        return self

    def disable_logging(self) -> "RestClientBuilder":
        self.logging_enabled = False
        return self

    # ============================================================
    # Headers and authentication
    # ============================================================

    def with_default_header(self, name: str, value: HeaderValue) -> "RestClientBuilder":
        """
        Add a header to every request which does not already carry it.

        ``value`` may be a zero-argument supplier, evaluated per request.
        """
        self.default_headers.append((name, value))
        return self

    def with_default_headers(self, headers: Mapping[str, HeaderValue]) -> "RestClientBuilder":
        for name, value in headers.items():
            self.with_default_header(name, value)
        return self

    def with_basic_auth(self, user: str, secret: str) -> "RestClientBuilder":
        return self.with_default_header(AUTHORIZATION, basic_authorization(user, secret))

    def with_ntlm_auth(self, user: str, secret: str, domain: str = "") -> "RestClientBuilder":
        self.auth = NTLMAuth(user, secret, domain)
        return self

    def with_kerberos_auth(self, options: Optional[Mapping[str, str]] = None) -> "RestClientBuilder":
        """
        Send a Kerberos ``Negotiate`` token for the base URL host.

        Raises:
            ConfigurationError: If no base URL was set before
        """
        if not self.host_name:
            raise ConfigurationError("Base URL must be defined for Kerberos authentication!")
        authenticator = KerberosAuthenticator(options)
        host_name = self.host_name
        return self.with_default_header(
            AUTHORIZATION,
            lambda: authenticator.build_authorization_header(host_name),
        )


__all__ = [
    "DEFAULT_TIMEOUT",
    "RestClient",
    "RestClientBuilder",
]
