import pytest

from config import TestingConfig
from taskflow import create_app, db

PASSWORD = 'secret123'


@pytest.fixture
def app():
    """Fresh app backed by an in-memory database."""
    app = create_app(TestingConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def make_client(app):
    """Factory: register a user and return a logged-in test client."""
    def _make_client(username):
        client = app.test_client()
        resp = client.post('/auth/register', json={
            'username': username,
            'email': f'{username}@example.com',
            'password': PASSWORD,
            'password2': PASSWORD
        })
        assert resp.status_code == 201, resp.get_json()
        resp = client.post('/auth/login', json={'username': username, 'password': PASSWORD})
        assert resp.status_code == 200, resp.get_json()
        return client
    return _make_client


@pytest.fixture
def client(make_client):
    """Logged-in client for alice."""
    return make_client('alice')


@pytest.fixture
def other_client(make_client):
    """Logged-in client for bob, who shares nothing with alice."""
    return make_client('bob')


@pytest.fixture
def project(client):
    """Alice's personal project, created at registration."""
    return client.get('/api/projects').get_json()[0]


@pytest.fixture
def board(client, project):
    """Alice's main board with its four default columns."""
    detail = client.get(f"/api/projects/{project['id']}").get_json()
    return client.get(f"/api/boards/{detail['boards'][0]['id']}").get_json()


@pytest.fixture
def columns(board):
    return board['columns']


@pytest.fixture
def make_task(client, board):
    """Factory: create a task in a column of alice's board."""
    def _make_task(column, title, **fields):
        payload = {'board_id': board['id'], 'column_id': column['id'], 'title': title}
        payload.update(fields)
        resp = client.post('/api/tasks', json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _make_task
