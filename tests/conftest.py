"""
Shared fixtures for VulnLens tests.

This module provides reusable pytest fixtures: repository listings, mock
sources and classifiers, and a factory for httpx clients backed by
`httpx.MockTransport` so adapters can be exercised without network access.
"""

from unittest.mock import MagicMock

import httpx
import pytest

from adapters.github import MockRepositorySource
from core.classifier import MockClassifier
from core.models import FileKind, Finding, RepositoryFile, Severity
from core.session import Session
from ui.progress_display import NoOpProgressDisplay


@pytest.fixture
def blob_factory():
    """Factory for blob entries whose content_ref is "ref:<path>"."""

    def _factory(path: str) -> RepositoryFile:
        return RepositoryFile(path, FileKind.BLOB, f"ref:{path}")

    return _factory


@pytest.fixture
def sample_listing(blob_factory):
    """The listing used by the end-to-end scan examples."""
    return [
        blob_factory("a.js"),
        RepositoryFile("src", FileKind.TREE, "ref:src"),
        blob_factory("b.php"),
    ]


@pytest.fixture
def xss_finding():
    return Finding(
        category="XSS",
        severity=Severity.HIGH,
        line_number=3,
        description="User input echoed without escaping",
        evidence_snippet="echo $_GET['q'];",
        remediation="echo htmlspecialchars($_GET['q']);",
    )


@pytest.fixture
def mock_source(sample_listing):
    return MockRepositorySource(
        sample_listing,
        {"ref:a.js": "console.log(1)", "ref:b.php": "<?php echo $_GET['q']; ?>"},
    )


@pytest.fixture
def mock_classifier(xss_finding):
    return MockClassifier({"b.php": [xss_finding]})


@pytest.fixture
def session():
    return Session(provider_token="gh-token", access_token="sb-token", user_id="user-1")


@pytest.fixture
def mock_client_factory():
    """
    Factory for httpx.AsyncClient instances served by a handler function.

    The returned client records every request in `client.requests`.
    """

    def _factory(handler):
        requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(_record))
        client.requests = requests
        return client

    return _factory


@pytest.fixture
def progress_display():
    """Progress display for testing."""
    return NoOpProgressDisplay()


@pytest.fixture
def tracking_progress_display():
    """Progress display that records calls as (method_name, *args) tuples."""
    mock = MagicMock()
    mock.calls = []

    def on_start(description, total):
        mock.calls.append(("start", description, total))

    def on_update(*, completed=None, current=None):
        mock.calls.append(("update", completed, current))

    def on_complete(description, completed):
        mock.calls.append(("complete", description, completed))

    mock.on_start = on_start
    mock.on_update = on_update
    mock.on_complete = on_complete
    mock.__enter__ = MagicMock(return_value=mock)
    mock.__exit__ = MagicMock(return_value=None)

    return mock
