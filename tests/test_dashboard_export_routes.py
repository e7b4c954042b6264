import csv
import io

from bidtracker.services.date_utils import server_today


def test_stats(auth_client, make_job):
    make_job(status='Won', bid_amount=1000)
    make_job(status='Lost', bid_amount=500)
    make_job(status='Submitted')

    response = auth_client.get('/api/dashboard/stats')

    assert response.status_code == 200
    body = response.get_json()
    assert body['stats']['total_jobs'] == 3
    assert body['stats']['win_rate'] == 50.0
    assert body['as_of'] == server_today().isoformat()
    assert body['source']['backend'] == 'local'
    assert body['source']['using_sample_data'] is False


def test_stats_follow_filters(auth_client, make_job):
    make_job(status='Won', company='Main')
    make_job(status='Won', company='Residential')

    body = auth_client.get('/api/dashboard/stats?company=main').get_json()

    assert body['stats']['total_jobs'] == 1


def test_charts(auth_client, make_job):
    make_job(status='Won')

    body = auth_client.get('/api/dashboard/charts').get_json()

    by_status = {item['status']: item['count'] for item in body['by_status']}
    assert by_status['Won'] == 1
    assert by_status['Lost'] == 0
    assert body['by_estimator'][0]['estimator'] == 'Unassigned'


def test_statuses(auth_client, app):
    body = auth_client.get('/api/dashboard/statuses').get_json()
    assert body['statuses'] == app.config['JOB_STATUSES']


def test_refresh(auth_client):
    response = auth_client.post('/api/dashboard/refresh')
    assert response.status_code == 200
    assert response.get_json()['success'] is True


def test_csv_export(auth_client, make_job):
    make_job(project_name='Clinic', bid_amount=1200)
    make_job(project_name='Garage', status='Lost')

    response = auth_client.get('/api/export/csv?status=Lost')

    assert response.status_code == 200
    assert response.mimetype == 'text/csv'
    assert 'attachment; filename="bids-' in response.headers['Content-Disposition']
    rows = list(csv.reader(io.StringIO(response.get_data(as_text=True))))
    assert rows[0][:2] == ['Company', 'Project Name']
    assert len(rows) == 2
    assert rows[1][1] == 'Garage'


def test_pdf_export(auth_client, make_job):
    make_job()

    response = auth_client.get('/api/export/pdf')

    assert response.status_code == 200
    assert response.mimetype == 'application/pdf'
    assert response.data.startswith(b'%PDF')


def test_export_requires_login(client):
    assert client.get('/api/export/csv').status_code == 401
