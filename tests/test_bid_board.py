from datetime import date
from unittest.mock import MagicMock

import pytest

from bidtracker.services.bid_board import BidBoard
from bidtracker.services.data_service import DataService
from bidtracker.services.filters import FilterCriteria

TODAY = date(2025, 3, 10)


@pytest.fixture
def service(app):
    with app.app_context():
        yield DataService(mode='local')


@pytest.fixture
def board(service):
    board = BidBoard(service, max_age_seconds=60)
    board.load()
    yield board
    board.close()


def failing_service():
    service = MagicMock()
    service.get_jobs.return_value = (False, 'Failed to load jobs: timeout', None)
    service.get_estimators.return_value = (False, 'Failed to load estimators: timeout', None)
    service.backend_name = 'remote'
    service.offline = False
    return service


def test_load_failure_shows_sample_data():
    board = BidBoard(failing_service())

    assert board.load() is False
    assert board.using_sample_data
    assert board.last_error == 'Failed to load jobs: timeout'
    assert len(board.jobs) == 5
    assert [e['name'] for e in board.estimators] == ['John Smith', 'Sarah Johnson', 'Mike Davis']
    info = board.snapshot_info()
    assert info['using_sample_data'] is True
    assert info['job_count'] == 5


def test_sample_jobs_resolve_sample_estimators():
    board = BidBoard(failing_service())
    board.load()
    names = {job['project_name']: job['estimator_display'] for job in board.view()}
    assert names['Riverside Warehouse'] == 'Mike Davis'


def test_stale_board_reloads():
    service = failing_service()
    board = BidBoard(service, max_age_seconds=0)
    board.ensure_loaded()
    board.ensure_loaded()
    assert service.get_jobs.call_count == 2

    service = failing_service()
    board = BidBoard(service, max_age_seconds=600)
    board.ensure_loaded()
    board.ensure_loaded()
    assert service.get_jobs.call_count == 1


def test_saving_resolves_estimator_by_name(board):
    _, _, estimator = board.save_estimator({'name': 'Dana Reyes'})

    success, _, job = board.save_job({
        'project_name': 'Clinic',
        'client_name': 'Health Co',
        'estimator': 'dana reyes',
    })

    assert success
    assert job['estimator_id'] == estimator['id']
    assert job['estimator_name'] == 'Dana Reyes'
    assert job['estimator_display'] == 'Dana Reyes'


def test_snapshots_keep_board_current(board):
    board.save_job({'project_name': 'Clinic', 'client_name': 'Health Co'})
    assert [job['project_name'] for job in board.jobs] == ['Clinic']

    job_id = board.jobs[0]['id']
    board.save_job({'status': 'Won'}, job_id=job_id)
    assert board.find_job(job_id)['status'] == 'Won'

    board.delete_job(job_id)
    assert board.jobs == []


def test_validation_errors_are_joined(board):
    success, message, job = board.save_job({'project_name': '', 'client_name': ''})
    assert not success
    assert message == 'Project name is required; Client name is required'
    assert job is None


def test_unknown_ids(board):
    assert board.save_job({'status': 'Won'}, job_id='nope') == (False, 'Job not found', None)
    assert board.delete_job('nope') == (False, 'Job not found', None)
    assert board.delete_estimator('nope') == (False, 'Estimator not found', None)
    assert board.set_attachments('nope', []) == (False, 'Job not found', None)


def test_deleting_estimator_keeps_job_name(board):
    _, _, estimator = board.save_estimator({'name': 'Dana Reyes'})
    _, _, job = board.save_job({'project_name': 'Clinic', 'client_name': 'Health Co',
                                'estimator_id': estimator['id']})

    board.delete_estimator(estimator['id'])

    assert board.estimator_name(board.find_job(job['id'])) == 'Dana Reyes'


def test_views_and_stats(board):
    board.save_job({'project_name': 'Late', 'client_name': 'A', 'deadline': '2025-03-01', 'bid_amount': 100})
    board.save_job({'project_name': 'Soon', 'client_name': 'B', 'deadline': '2025-03-12', 'status': 'Won',
                    'bid_amount': 300})

    overdue = board.view(FilterCriteria(overdue_only=True), TODAY)
    assert [job['project_name'] for job in overdue] == ['Late']
    assert overdue[0]['is_overdue'] is True
    assert overdue[0]['days_until_deadline'] == -9

    stats = board.stats(None, TODAY)
    assert stats['total_jobs'] == 2
    assert stats['won_bid_value'] == 300.0
    assert stats['estimator_count'] == 0

    charts = board.charts(FilterCriteria(status='Won'), TODAY)
    assert charts['by_month'] == [{'month': '2025-03', 'jobs': 1, 'bid_value': 300.0}]


def test_snapshot_error_marks_board_stale(board):
    board._on_jobs_snapshot(None, 'Failed to load jobs: boom')
    assert board.last_error == 'Failed to load jobs: boom'
    assert board.is_stale()
