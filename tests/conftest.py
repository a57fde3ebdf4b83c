"""
Test Configuration
==================

Pytest configuration with fixtures for unit and integration tests.
Provides test settings, mock renderers and an app wired to them.
"""

import os

# Must be set before pagesnap.config.logging is imported
os.environ["PAGESNAP_ENVIRONMENT"] = "testing"
os.environ.setdefault("PAGESNAP_LOG_LEVEL", "DEBUG")

from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from pagesnap.api.main import create_app, get_dispatcher
from pagesnap.config.settings import Settings
from pagesnap.core.dispatch import RequestDispatcher
from pagesnap.core.rendering.page_renderer import PageRenderer

from tests.utils.mocks import MockBrowserLauncher, MockPageRenderer


@pytest.fixture
def test_settings() -> Settings:
    """Test settings without settle delay."""
    return Settings(
        environment="testing",
        debug=True,
        browser_endpoint=None,
        html_settle_delay=0.0,
        strict_mode_selection=False,
        log_level="DEBUG",
    )


@pytest.fixture
def mock_renderer() -> MockPageRenderer:
    """Renderer fake returning PNG/PDF signature bytes."""
    return MockPageRenderer()


@pytest.fixture
def dispatcher(mock_renderer: MockPageRenderer, test_settings: Settings) -> RequestDispatcher:
    """Dispatcher wired to the renderer fake."""
    return RequestDispatcher(mock_renderer, test_settings)  # type: ignore[arg-type]


@pytest.fixture
def mock_launcher() -> MockBrowserLauncher:
    """Launcher fake handing out mock Playwright objects."""
    return MockBrowserLauncher()


@pytest.fixture
def page_renderer(mock_launcher: MockBrowserLauncher, test_settings: Settings) -> PageRenderer:
    """Real page renderer over mock Playwright objects."""
    return PageRenderer(mock_launcher, test_settings)  # type: ignore[arg-type]


@pytest.fixture
def app(test_settings: Settings, dispatcher: RequestDispatcher) -> FastAPI:
    """FastAPI app with the dispatcher dependency overridden."""
    application = create_app(test_settings)
    application.dependency_overrides[get_dispatcher] = lambda: dispatcher
    return application


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """FastAPI test client; lifespan is not entered so no browser starts."""
    yield TestClient(app)


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on file paths."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
