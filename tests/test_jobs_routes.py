import io
import os


def test_create_and_get_job(auth_client, make_job):
    job = make_job(project_name='Clinic Expansion', bidAmount='$45,000', deadline='2030-01-15')

    assert job['project_name'] == 'Clinic Expansion'
    assert job['bid_amount'] == 45000.0
    assert job['status'] == 'In Progress'
    assert job['is_overdue'] is False

    response = auth_client.get(f"/api/jobs/{job['id']}")
    assert response.status_code == 200
    assert response.get_json()['deadline'] == '2030-01-15'


def test_create_job_stamps_creator(auth_client, make_job):
    me = auth_client.get('/api/auth/me').get_json()['user']
    assert make_job()['created_by'] == me['uid']


def test_create_job_validation(auth_client):
    response = auth_client.post('/api/jobs', json={'project_name': 'Clinic', 'deadline': 'someday'})

    assert response.status_code == 400
    body = response.get_json()
    assert 'Client name is required' in body['errors']
    assert 'Deadline must be a valid date (YYYY-MM-DD)' in body['errors']


def test_create_job_without_body(auth_client):
    assert auth_client.post('/api/jobs', json={}).status_code == 400


def test_list_jobs_with_filters(auth_client, make_job):
    make_job(project_name='Harbor Warehouse', status='Submitted', bid_amount=500)
    make_job(project_name='Hillside Home', status='Won', bid_amount=900)
    make_job(project_name='Harbor Pier', status='Lost')

    response = auth_client.get('/api/jobs?search=harbor&sort=bid_amount&order=desc')

    assert response.status_code == 200
    body = response.get_json()
    assert body['count'] == 2
    assert body['total'] == 3
    assert [job['project_name'] for job in body['jobs']] == ['Harbor Warehouse', 'Harbor Pier']
    assert body['filters']['search'] == 'harbor'
    assert body['using_sample_data'] is False


def test_list_jobs_rejects_bad_filter(auth_client):
    response = auth_client.get('/api/jobs?deadline_from=not-a-date')
    assert response.status_code == 400


def test_update_job(auth_client, make_job):
    job = make_job()

    response = auth_client.put(f"/api/jobs/{job['id']}", json={'status': 'Submitted', 'bid_amount': '1,250'})

    assert response.status_code == 200
    updated = response.get_json()['job']
    assert updated['status'] == 'Submitted'
    assert updated['bid_amount'] == 1250.0
    assert updated['project_name'] == 'Warehouse'


def test_update_job_validation_and_missing(auth_client, make_job):
    job = make_job()
    assert auth_client.put(f"/api/jobs/{job['id']}", json={'bid_amount': -1}).status_code == 400
    assert auth_client.put('/api/jobs/missing', json={'status': 'Won'}).status_code == 404


def test_delete_job(auth_client, make_job):
    job = make_job()

    response = auth_client.delete(f"/api/jobs/{job['id']}")

    assert response.status_code == 200
    assert auth_client.get(f"/api/jobs/{job['id']}").status_code == 404
    assert auth_client.delete(f"/api/jobs/{job['id']}").status_code == 404


def test_attachments(app, auth_client, make_job):
    job = make_job()

    response = auth_client.post(
        f"/api/jobs/{job['id']}/attachments",
        data={'file': (io.BytesIO(b'plan contents'), 'site plan.pdf')},
        content_type='multipart/form-data',
    )

    assert response.status_code == 201
    attachments = response.get_json()['job']['attachments']
    assert len(attachments) == 1
    url = attachments[0]['url']
    assert attachments[0]['name'] == 'site plan.pdf'
    assert url.startswith('/uploads/jobs/')

    storage = app.extensions['attachment_storage']
    path = storage.local_path(url[len('/uploads/'):])
    assert os.path.exists(path)

    download = auth_client.get(url)
    assert download.status_code == 200
    assert download.data == b'plan contents'
    download.close()

    assert auth_client.delete(f"/api/jobs/{job['id']}/attachments", json={'url': '/uploads/other'}).status_code == 404

    response = auth_client.delete(f"/api/jobs/{job['id']}/attachments", json={'url': url})
    assert response.status_code == 200
    assert response.get_json()['job']['attachments'] == []
    assert not os.path.exists(path)


def test_attachment_requires_file(auth_client, make_job):
    job = make_job()
    response = auth_client.post(f"/api/jobs/{job['id']}/attachments", data={},
                                content_type='multipart/form-data')
    assert response.status_code == 400


def test_non_finite_bid_amount_is_rejected(auth_client, make_job):
    for amount in ('inf', 'NaN'):
        response = auth_client.post('/api/jobs', json={
            'project_name': 'Clinic', 'client_name': 'Acme', 'bid_amount': amount,
        })
        assert response.status_code == 400
        assert response.get_json()['errors'] == ['Bid amount must be a number']

    make_job(bid_amount=250)
    stats = auth_client.get('/api/dashboard/stats')
    assert b'Infinity' not in stats.data
    assert stats.get_json()['stats']['total_bid_value'] == 250.0


def test_due_within_days_out_of_range(auth_client, make_job):
    make_job(deadline='2030-01-15')

    assert auth_client.get('/api/jobs?due_within_days=100000000').status_code == 400
    assert auth_client.get('/api/dashboard/stats?due_within_days=100000000').status_code == 400
    assert auth_client.get('/api/export/csv?due_within_days=100000000').status_code == 400
    assert auth_client.get('/api/jobs?due_within_days=3650').status_code == 200


def test_non_object_json_body(auth_client, make_job):
    job = make_job()

    assert auth_client.post('/api/jobs', json=[1, 2]).get_json()['error'] == 'No data provided'
    assert auth_client.put(f"/api/jobs/{job['id']}", json=['status']).status_code == 400
    assert auth_client.post('/api/estimators', json='Dana').status_code == 400
    assert auth_client.delete(f"/api/jobs/{job['id']}/attachments", json=[job['id']]).status_code == 404
    assert auth_client.post('/api/auth/signin', json=[1, 2]).status_code == 400
