import pytest
from fastapi.testclient import TestClient

from fakes import TEST_MODEL, FakeClient
from shoe_dryer.config import Settings
from shoe_dryer.main import app, get_genai_client, get_settings


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def client(fake_client):
    # No context manager: lifespan (and its API key check) stays out of route tests.
    app.dependency_overrides[get_genai_client] = lambda: fake_client
    app.dependency_overrides[get_settings] = lambda: Settings(api_key="test-key", model_name=TEST_MODEL, max_file_size_mb=1)
    yield TestClient(app)
    app.dependency_overrides.clear()
