from unittest.mock import MagicMock

import pytest

from bidtracker.services.backends import SupabaseStore, LocalStore
from bidtracker.services.data_service import DataService, friendly_auth_error


def response(data):
    result = MagicMock()
    result.data = data
    return result


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def supabase_client():
    return MagicMock()


@pytest.fixture
def remote(supabase_client):
    return SupabaseStore(supabase_client)


def job_payload(**fields):
    payload = {'project_name': 'Warehouse', 'client_name': 'Acme', 'status': 'In Progress'}
    payload.update(fields)
    return payload


class TestFromConfig:

    def test_local_mode(self):
        service = DataService.from_config({'STORAGE_BACKEND': 'local'})
        assert service.backend_name == 'local'
        assert service.offline is False

    def test_auto_without_credentials_uses_local(self):
        service = DataService.from_config({'STORAGE_BACKEND': 'auto'})
        assert service.remote is None
        assert service.backend_name == 'local'

    def test_remote_requires_credentials(self):
        with pytest.raises(ValueError):
            DataService.from_config({'STORAGE_BACKEND': 'remote'})

    def test_unknown_mode(self):
        with pytest.raises(ValueError):
            DataService.from_config({'STORAGE_BACKEND': 'ftp'})


class TestRemoteBackend:

    def test_get_jobs_normalizes_documents(self, remote, supabase_client):
        query = supabase_client.table.return_value.select.return_value.order.return_value
        query.execute.return_value = response([
            {'id': 1, 'projectName': 'Clinic', 'clientName': 'Health Co', 'bidAmount': '2,000'},
        ])
        service = DataService(mode='remote', remote=remote)

        success, _, jobs = service.get_jobs()

        assert success
        supabase_client.table.assert_called_with('jobs')
        supabase_client.table.return_value.select.return_value.order.assert_called_with('created_at', desc=True)
        assert jobs[0]['id'] == '1'
        assert jobs[0]['project_name'] == 'Clinic'
        assert jobs[0]['bid_amount'] == 2000.0

    def test_update_of_missing_document(self, remote, supabase_client):
        update = supabase_client.table.return_value.update.return_value.eq.return_value
        update.execute.return_value = response([])
        service = DataService(mode='remote', remote=remote)

        assert service.update_job('missing', {'status': 'Won'}) == (False, 'Job not found', None)

    def test_remote_mode_does_not_fall_back(self, ctx, remote, supabase_client):
        supabase_client.table.side_effect = ConnectionError('network down')
        service = DataService(mode='remote', remote=remote)

        success, message, _ = service.get_jobs()

        assert not success
        assert 'network down' in message
        assert service.backend_name == 'remote'

    def test_auto_mode_switches_to_local(self, ctx, remote, supabase_client):
        supabase_client.table.side_effect = ConnectionError('network down')
        service = DataService(mode='auto', remote=remote)

        success, _, job = service.add_job(job_payload())

        assert success
        assert service.offline
        assert service.backend_name == 'local'
        assert LocalStore().get('jobs', job['id'])['project_name'] == 'Warehouse'

    def test_sign_in_rejection_is_not_retried_locally(self, ctx, remote, supabase_client):
        supabase_client.auth.sign_in_with_password.side_effect = Exception('Invalid login credentials')
        service = DataService(mode='auto', remote=remote)

        success, message, _ = service.sign_in('Someone@Example.com', 'wrong-password')

        assert not success
        assert message == 'Invalid email or password.'
        assert not service.offline
        supabase_client.auth.sign_in_with_password.assert_called_with(
            {'email': 'someone@example.com', 'password': 'wrong-password'})

    def test_sign_up_passes_display_name(self, remote, supabase_client):
        user = MagicMock(id='uid-1', email='new@example.com', user_metadata={'display_name': 'New'})
        supabase_client.auth.sign_up.return_value = MagicMock(user=user)
        service = DataService(mode='remote', remote=remote)

        success, _, identity = service.sign_up('new@example.com', 'secret123', display_name='New')

        assert success
        assert identity == {'uid': 'uid-1', 'email': 'new@example.com', 'display_name': 'New'}
        payload = supabase_client.auth.sign_up.call_args[0][0]
        assert payload['options'] == {'data': {'display_name': 'New'}}


class TestLocalBackend:

    def test_job_lifecycle(self, ctx):
        service = DataService(mode='local')

        success, message, job = service.add_job(job_payload(bid_amount=100.0), created_by='7')
        assert (success, message) == (True, 'Job created successfully')
        assert job['created_by'] == '7'
        assert job['attachments'] == []

        success, _, updated = service.update_job(job['id'], {'status': 'Won'})
        assert success
        assert updated['status'] == 'Won'
        assert updated['project_name'] == 'Warehouse'

        assert service.delete_job(job['id']) == (True, 'Job deleted successfully', None)
        assert service.delete_job(job['id']) == (False, 'Job not found', None)

    def test_estimators_ordered_by_name(self, ctx):
        service = DataService(mode='local')
        service.add_estimator({'name': 'Zoe'})
        service.add_estimator({'name': 'Adam'})

        _, _, estimators = service.get_estimators()

        assert [e['name'] for e in estimators] == ['Adam', 'Zoe']

    def test_sign_up_and_sign_in(self, ctx):
        service = DataService(mode='local')

        assert service.sign_up('pat@example.com', 'secret123', confirm_password='different')[1] == 'Passwords do not match.'
        assert service.sign_up('pat@example.com', 'abc')[1] == 'Password must be at least 6 characters.'

        success, message, identity = service.sign_up('Pat@Example.com', 'secret123', display_name='Pat')
        assert (success, message) == (True, 'Account created successfully')
        assert identity['email'] == 'pat@example.com'

        assert service.sign_up('pat@example.com', 'secret123')[1] == 'This email is already registered.'
        assert service.sign_in('pat@example.com', 'nope')[1] == 'Invalid email or password.'
        assert service.sign_in('pat@example.com', '')[1] == 'Please fill in all fields.'
        assert service.sign_in('pat@example.com', 'secret123')[0] is True


class TestSubscriptions:

    def test_subscribers_receive_full_snapshot(self, ctx):
        service = DataService(mode='local')
        snapshots = []
        service.subscribe_jobs(lambda records, error: snapshots.append((records, error)))

        service.add_job(job_payload(project_name='One'))
        service.add_job(job_payload(project_name='Two'))

        assert len(snapshots) == 2
        assert {job['project_name'] for job in snapshots[-1][0]} == {'One', 'Two'}
        assert snapshots[-1][1] is None

    def test_unsubscribe_and_cleanup(self, ctx):
        service = DataService(mode='local')
        calls = []
        unsubscribe = service.subscribe_estimators(lambda records, error: calls.append(records))
        service.subscribe_jobs(lambda records, error: calls.append(records))

        unsubscribe()
        service.add_estimator({'name': 'Dana'})
        assert calls == []

        service.cleanup()
        service.add_job(job_payload())
        assert calls == []

    def test_failing_subscriber_does_not_break_others(self, ctx):
        service = DataService(mode='local')
        received = []

        def broken(records, error):
            raise RuntimeError('boom')

        service.subscribe_jobs(broken)
        service.subscribe_jobs(lambda records, error: received.append(records))

        success, _, _ = service.add_job(job_payload())

        assert success
        assert len(received) == 1

    def test_failed_mutation_does_not_notify(self, ctx):
        service = DataService(mode='local')
        calls = []
        service.subscribe_jobs(lambda records, error: calls.append(records))

        service.update_job('missing', {'status': 'Won'})

        assert calls == []


def test_friendly_auth_error():
    assert friendly_auth_error(Exception('User already registered')) == 'This email is already registered.'
    assert friendly_auth_error(Exception('socket closed')) == 'An unexpected error occurred. Please try again.'
