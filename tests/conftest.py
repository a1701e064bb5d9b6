"""
Pytest configuration and shared fixtures
"""
import os

# Settings are cached on first use, so the environment must be set before
# anything imports the application.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["MEDIA_HOST_CLOUD_NAME"] = "demo"
os.environ["DEBUG"] = "false"

import pytest
from fastapi.testclient import TestClient

from vidvault.main import app
from vidvault.security import create_access_token


def pytest_configure(config):
    """Register pytest markers"""
    config.addinivalue_line(
        "markers", "slow: tests that allocate large files"
    )


@pytest.fixture
def client():
    """Test client; the lifespan opens a fresh in-memory database per test"""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def access_token():
    return create_access_token("user_123")


@pytest.fixture
def auth_headers(access_token):
    return {"Authorization": f"Bearer {access_token}"}
