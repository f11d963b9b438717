import pytest
from fastapi.testclient import TestClient

from api import create_app
from library import Library


@pytest.fixture
def lib():
    # Fresh seeded store for every test so mutations never leak between tests
    return Library(seed=True)


@pytest.fixture
def client(lib):
    with TestClient(create_app(lib)) as test_client:
        yield test_client
