import pytest

from backoffice import create_app, db, object_storage
from backoffice.config import TestingConfig

ADMIN_EMAIL = TestingConfig.ADMIN_EMAIL
ADMIN_PASSWORD = TestingConfig.ADMIN_PASSWORD


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=''):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError('No JSON body')
        return self._payload


class FakeStorageSession:
    """Stands in for requests.Session and records every upload"""

    def __init__(self):
        self.uploads = []
        self.fail_with = None

    def post(self, url, headers=None, data=None, timeout=None):
        self.uploads.append({'url': url, 'headers': headers, 'data': data})
        if self.fail_with is not None:
            return self.fail_with
        return FakeResponse(200, {'Key': url.rsplit('/object/', 1)[-1]})


@pytest.fixture
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    response = client.post('/auth/login', json={'email': ADMIN_EMAIL, 'password': ADMIN_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def fake_storage(app, monkeypatch):
    session = FakeStorageSession()
    monkeypatch.setattr(object_storage, 'session', session)
    return session
