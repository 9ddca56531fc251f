"""Shared fixtures for integration tests.

Only the external services (document store and Llama Stack) are mocked,
everything else runs with real configuration loaded from YAML files.
"""

from pathlib import Path
from typing import Any, Generator

import pytest
from pytest_mock import MockerFixture

from configuration import AppConfig, configuration
from models.config import DocumentSource

CONFIGURATION_DIR = Path(__file__).parent.parent / "configuration"
PROJECT_DIR = Path(__file__).parent.parent.parent

# content of the documents served by the mocked document store
DOCUMENTS = {
    "financial-doc-1": (
        "1. Find a niche\nPick products with 65% margins.\n\n"
        "Launch plan, step by step:\nStep 1: Find a supplier\nStep 2: Build the store"
    ),
    "financial-doc-2": "",
    "health-doc": "Morning Routine:\nWalk 20 minutes.",
}


@pytest.fixture(autouse=True)
def reset_configuration_state() -> Generator:
    """Run every test with configuration and document cache not loaded."""
    # pylint: disable=protected-access
    configuration._configuration = None
    configuration._document_cache = None
    yield
    configuration._configuration = None
    configuration._document_cache = None


def _load(config_path: Path) -> AppConfig:
    assert config_path.exists(), f"Config file not found: {config_path}"
    configuration.load_configuration(str(config_path))
    return configuration


@pytest.fixture(name="test_config")
def test_config_fixture() -> AppConfig:
    """Load configuration prepared for tests."""
    return _load(CONFIGURATION_DIR / "life-coach.yaml")


@pytest.fixture(name="current_config")
def current_config_fixture() -> AppConfig:
    """Load configuration shipped in the project root."""
    return _load(PROJECT_DIR / "life-coach.yaml")


@pytest.fixture(name="mock_document_store")
def mock_document_store_fixture(mocker: MockerFixture) -> Any:
    """Serve documents from DOCUMENTS instead of the document store."""

    async def fetch(source: DocumentSource) -> str:
        return DOCUMENTS.get(source.document_id or "", "")

    return mocker.patch(
        "documents.fetcher.DocumentFetcher.fetch",
        new=mocker.AsyncMock(side_effect=fetch),
    )


@pytest.fixture(name="mock_llama_stack_client")
def mock_llama_stack_client_fixture(mocker: MockerFixture) -> Any:
    """Replace Llama Stack client used by the coaching endpoint."""
    mock_client = mocker.AsyncMock()
    mock_response = mocker.Mock()
    mock_response.completion_message.content = "1. Find a niche"
    mock_client.inference.chat_completion.return_value = mock_response
    mock_holder = mocker.patch("app.endpoints.coach.AsyncLlamaStackClientHolder")
    mock_holder.return_value.get_client.return_value = mock_client
    return mock_client
