import pytest

from hatchplan import create_app, db
from hatchplan.config import Config
from hatchplan.services.species import SpeciesTable


class ConfigForTests(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SPECIES_FILE = None
    SCHEDULER_ENABLED = False


ADMIN = {
    "email": "hen@example.com",
    "password": "correct-horse",
    "first_name": "Henny",
    "last_name": "Penny",
}


@pytest.fixture
def app():
    app = create_app(ConfigForTests)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def app_context(app):
    with app.app_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def logged_in_client(client):
    """Client logged in as the first (admin) user."""
    client.post("/auth/register", data=ADMIN)
    client.post("/auth/login", data={"email": ADMIN["email"], "password": ADMIN["password"]})
    return client


@pytest.fixture
def species_table():
    return SpeciesTable()
