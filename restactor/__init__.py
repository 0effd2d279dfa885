"""
================================================================================
restactor
================================================================================

Fluent REST API test client: per-verb request builders, soft response
assertions (status, headers, JSON / XML / HTML / bytes bodies) and value
extraction for chaining data between requests.

Usage:
    >>> from restactor import RestClient
    >>> client = RestClient.builder().with_base_url("http://localhost:8080").build()
    >>> user_id = client.post("/api/users").with_json_body({"name": "x"}).expect(
    ...     lambda response: response.match()
    ...     .status_code(201)
    ...     .body_as_json(lambda body: body.extract().json_path_as_string("$.id"))
    ... )

Author: Automation Team
License: MIT
================================================================================
"""

from .assertions import AggregateAssertionFailure, SoftAssertions
from .client import RestClient, RestClientBuilder
from .common import ConfigLoader
from .exceptions import (
    AlreadyExtractedError,
    AssertionsFinalizedError,
    AuthenticationError,
    ConfigurationError,
    RequestExecutionError,
    RestActorError,
)

__version__ = "1.0.0"

__all__ = [
    "AggregateAssertionFailure",
    "AlreadyExtractedError",
    "AssertionsFinalizedError",
    "AuthenticationError",
    "ConfigLoader",
    "ConfigurationError",
    "RequestExecutionError",
    "RestActorError",
    "RestClient",
    "RestClientBuilder",
    "SoftAssertions",
]
