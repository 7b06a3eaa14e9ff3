"""E2E test configuration and fixtures.

These fixtures run the assembled application with:
- Test mode enabled (APP_TESTING_TEST_MODE=true), upstreams served from fixtures
- API key authentication configured
- A temporary cache directory
"""

import os
import tempfile
from typing import Dict, Generator, Optional

import pytest
from fastapi.testclient import TestClient

from douyin_api.testing.fixtures import DEMO_SHARE_URL

E2E_API_KEY = "e2e-test-api-key"


@pytest.fixture(scope="module")
def temp_cache_dir() -> Generator[str, None, None]:
    """Create a temporary directory for the cache."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture(scope="module")
def e2e_env(temp_cache_dir: str) -> Generator[None, None, None]:
    """Set up environment variables for E2E testing."""
    original_env: Dict[str, Optional[str]] = {}
    env_vars = {
        "APP_TESTING_TEST_MODE": "true",
        "APP_SECURITY_API_KEYS": f'["{E2E_API_KEY}"]',
        "APP_LOGGING_LEVEL": "WARNING",
        "APP_CACHE_CACHE_DIR": temp_cache_dir,
        "APP_CACHE_SWEEP_INTERVAL": "0",
    }

    for key, value in env_vars.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


@pytest.fixture(scope="module")
def e2e_client(e2e_env: None) -> Generator[TestClient, None, None]:
    """Create a test client for the full application in test mode."""
    # Import after environment is set
    from douyin_api.main import create_app

    app = create_app()

    with TestClient(app) as client:
        yield client


@pytest.fixture
def api_key() -> str:
    return E2E_API_KEY


@pytest.fixture
def auth_headers() -> dict:
    """Authentication headers for API requests."""
    return {"X-API-Key": E2E_API_KEY}


@pytest.fixture
def demo_share_url() -> str:
    """Share link the canned upstreams resolve to the demo video."""
    return DEMO_SHARE_URL
