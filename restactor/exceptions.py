"""
================================================================================
Exceptions
================================================================================

Error taxonomy shared by the client, authentication and assertion layers.

    RestActorError
    ├── ConfigurationError        invalid client options (raised at build time)
    ├── RequestExecutionError     transport I/O failure for a single request
    ├── AuthenticationError       NTLM / Kerberos handshake failures
    ├── AlreadyExtractedError     second write into a ValueExtractor
    └── AssertionsFinalizedError  soft assertions used after assert_all()

Assertion failures derive from ``AssertionError`` so pytest reports them as
test failures rather than errors; see ``restactor.assertions``.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations


class RestActorError(Exception):
    """Base exception for restactor errors."""
    pass


class ConfigurationError(RestActorError):
    """Raised when configuration loading or client options are invalid."""
    pass


class RequestExecutionError(RestActorError):
    """Raised when the transport fails to perform a request."""
    pass


class AuthenticationError(RestActorError):
    """Raised when an authentication handshake cannot be completed."""
    pass


class AlreadyExtractedError(RestActorError):
    """Raised when a value extractor already holds a value."""
    pass


class AssertionsFinalizedError(RestActorError):
    """Raised when soft assertions are used after assert_all() was called."""
    pass


__all__ = [
    "RestActorError",
    "ConfigurationError",
    "RequestExecutionError",
    "AuthenticationError",
    "AlreadyExtractedError",
    "AssertionsFinalizedError",
]
