"""
================================================================================
Test Suite Configuration
================================================================================

Registers the project markers and provides shared fixtures:
    - log_records: loguru records emitted during a test
    - client_factory: RestClient wired to an httpx.MockTransport handler
    - fresh_config: ConfigLoader singleton reset around a test

================================================================================
"""

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
from loguru import logger

from restactor.client.rest_client import RestClient, RestClientBuilder
from restactor.common.config_loader import ConfigLoader


TEST_BASE_URL = "http://api.test"


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for release"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "unit: Unit tests without network access"
    )
    config.addinivalue_line(
        "markers", "assertions: Soft assertion and report formatting tests"
    )
    config.addinivalue_line(
        "markers", "client: Request builder and client configuration tests"
    )
    config.addinivalue_line(
        "markers", "auth: Tests related to authentication"
    )


def pytest_collection_modifyitems(config, items):
    """Tag every unit test with the 'unit' marker."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)


@pytest.fixture
def log_records() -> List[Dict[str, Any]]:
    """Capture loguru records as dicts with 'level' and 'message'."""
    records: List[Dict[str, Any]] = []

    def sink(message) -> None:
        record = message.record
        records.append({"level": record["level"].name, "message": record["message"]})

    handler_id = logger.add(sink, level="DEBUG")
    yield records
    logger.remove(handler_id)


@pytest.fixture
def client_factory():
    """
    Build clients whose requests are answered by a handler function.

    Usage:
        client = client_factory(lambda request: httpx.Response(200, json={}))
    """
    clients: List[RestClient] = []

    def factory(
        handler: Callable[[httpx.Request], httpx.Response],
        base_url: str = TEST_BASE_URL,
        configure: Optional[Callable[[RestClientBuilder], Any]] = None,
    ) -> RestClient:
        builder = RestClient.builder().with_base_url(base_url).with_transport(
            httpx.MockTransport(handler)
        )
        if configure is not None:
            configure(builder)
        client = builder.build()
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


@pytest.fixture
def fresh_config():
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()
