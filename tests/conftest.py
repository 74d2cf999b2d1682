import pytest

from core.config import Settings
from web.app import create_app


@pytest.fixture
def app():
    return create_app(Settings(_env_file=None, question_seed=7, log_level="WARNING"))


@pytest.fixture
def client(app):
    return app.test_client()
