import random

import pytest

from compilerviz.app import create_app
from compilerviz.session import SessionStore

SAMPLE = """int main() {
    int a = 5;
    return 0;
}
"""


@pytest.fixture
def app(tmp_path):
    app = create_app({
        "TESTING": True,
        "SESSION_ROOT": str(tmp_path / "sessions"),
        "DURATION_SEED": 1234,
    })
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(tmp_path):
    return SessionStore(str(tmp_path / "store"), rng=random.Random(7))


@pytest.fixture
def session(store):
    return store.create(SAMPLE)


@pytest.fixture
def source():
    return SAMPLE
