from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from intact_http.core.dependency_container import DependencyContainer
from intact_http.core.transaction import Transaction
from intact_http.settings import Settings

from tests.helpers.factories import make_transaction

HTTP_ENV_VARS = [
    "HTTP_CONNECT_TIMEOUT",
    "HTTP_READ_TIMEOUT",
    "HTTP_WRITE_TIMEOUT",
    "HTTP_BODY_LOG_LEVEL",
    "HTTP_MAX_BODY_LOG_BYTES",
    "PIPELINE_FILEPATH",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_http_environment(monkeypatch):
    """AUTOUSE: Removes HTTP and pipeline settings that a local .env file may have loaded."""
    for env_var in HTTP_ENV_VARS:
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def mock_settings() -> MagicMock:
    """Provides a mock Settings instance."""
    settings = MagicMock(spec=Settings)
    settings.get_connect_timeout.return_value = 30.0
    settings.get_read_timeout.return_value = 30.0
    settings.get_write_timeout.return_value = 30.0
    settings.get_body_log_level.return_value = "BODY"
    settings.get_max_body_log_bytes.return_value = 10240
    settings.get_pipeline_filepath.return_value = None
    return settings


@pytest.fixture
def mock_http_client() -> AsyncMock:
    """Provides a mock httpx.AsyncClient instance."""
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def container(mock_settings, mock_http_client) -> DependencyContainer:
    return DependencyContainer(settings=mock_settings, http_client=mock_http_client)


@pytest.fixture
def items_transaction() -> Transaction:
    """A transaction carrying {"items":[1,2,3]} as an unbuffered stream."""
    return make_transaction()
