import pytest

from solplan import create_app
from solplan.config import Settings
from solplan.models.projection.stats import default_normal_source


@pytest.fixture
def normal():
    return default_normal_source(seed=20240316)


@pytest.fixture
def app():
    app = create_app(Settings(default_simulations=50, max_simulations=200, log_level="WARNING"))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
