import pytest

from chama_ledger import create_app
from chama_ledger.extensions import db
from chama_ledger.services.membership_service import create_member
from config import TestConfig

PASSWORD = 'secret123'


class FixtureTestConfig(TestConfig):
    DATA_SOURCE = 'fixture'


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def fixture_app():
    app = create_app(FixtureTestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin(app):
    member = create_member(name='Orpah Achieng', email='admin@example.com', role='admin', password=PASSWORD)
    db.session.commit()
    return member


@pytest.fixture
def member(app, admin):
    member = create_member(name='Timothy Ongeche', email='timothy@example.com', password=PASSWORD)
    db.session.commit()
    return member


def login(client, email, password=PASSWORD):
    return client.post('/login', json={'email': email, 'password': password})


@pytest.fixture
def admin_client(client, admin):
    response = login(client, admin.email)
    assert response.status_code == 200
    return client


@pytest.fixture
def member_client(client, member):
    response = login(client, member.email)
    assert response.status_code == 200
    return client
