import pytest
import requests


@pytest.fixture
def config():
    return {"type": "copilot", "directLineSecret": "S", "pollInterval": 0}


@pytest.fixture
def connection_error():
    return requests.exceptions.ConnectionError("boom")
