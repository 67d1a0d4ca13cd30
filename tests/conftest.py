import pytest
from fastapi.testclient import TestClient

from storefront.config import Settings
from storefront.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path}/storefront-test.db",
        jwt_secret="test-secret",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def signup(client):
    def _signup(email="a@x.com", password="p", name="A"):
        response = client.post("/signup", json={"name": name, "email": email, "password": password})
        assert response.status_code == 200
        return response.json()["token"]
    return _signup
