"""
================================================================================
REST Client
================================================================================

Modules:
    - rest_client: client and its fluent builder
    - request_builders: per-verb request builders
    - rate_limit: transport-level rate limiting
    - reporting: loguru / Allure exchange logging
    - urls: request URL construction

Author: Automation Team
License: MIT
================================================================================
"""

from .rate_limit import RateLimitedTransport, RateLimiter
from .request_builders import (
    DeleteRequestBuilder,
    GetRequestBuilder,
    HeadRequestBuilder,
    PatchRequestBuilder,
    PostRequestBuilder,
    PutRequestBuilder,
    RestRequestBuilder,
)
from .rest_client import RestClient, RestClientBuilder

__all__ = [
    "DeleteRequestBuilder",
    "GetRequestBuilder",
    "HeadRequestBuilder",
    "PatchRequestBuilder",
    "PostRequestBuilder",
    "PutRequestBuilder",
    "RateLimitedTransport",
    "RateLimiter",
    "RestClient",
    "RestClientBuilder",
    "RestRequestBuilder",
]
