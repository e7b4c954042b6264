import pytest

from bidtracker.app import create_app
from bidtracker.models import db
from bidtracker.services.storage import AttachmentStorage


@pytest.fixture
def app(tmp_path):
    app = create_app('testing')
    app.extensions['attachment_storage'] = AttachmentStorage(upload_folder=str(tmp_path / 'uploads'))
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
    app.extensions['bid_board'].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    response = client.post('/api/auth/signup', json={
        'email': 'estimator@example.com',
        'password': 'secret123',
        'confirm_password': 'secret123',
        'display_name': 'Pat Estimator',
    })
    assert response.status_code == 201
    return client


@pytest.fixture
def make_job(auth_client):
    def _make_job(**fields):
        payload = {'project_name': 'Warehouse', 'client_name': 'Acme'}
        payload.update(fields)
        response = auth_client.post('/api/jobs', json=payload)
        assert response.status_code == 201, response.get_json()
        return response.get_json()['job']
    return _make_job
