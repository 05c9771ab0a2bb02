import pytest
from fastapi.testclient import TestClient

from main import create_app
from tests.stubs import StubFetcher, make_settings


@pytest.fixture
def stub_fetcher():
    return StubFetcher()


@pytest.fixture
def make_client():
    def _make(fetcher=None, **overrides):
        app = create_app(settings=make_settings(**overrides), fetcher=fetcher or StubFetcher())
        return TestClient(app, raise_server_exceptions=False)

    return _make


@pytest.fixture
def client(make_client, stub_fetcher):
    return make_client(stub_fetcher)
