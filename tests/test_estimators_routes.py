def test_estimator_crud(auth_client):
    response = auth_client.post('/api/estimators', json={'name': 'Dana Reyes', 'email': 'dana@example.com'})
    assert response.status_code == 201
    estimator = response.get_json()['estimator']

    auth_client.post('/api/estimators', json={'name': 'Adam Cole'})
    listing = auth_client.get('/api/estimators').get_json()
    assert listing['count'] == 2
    assert [e['name'] for e in listing['estimators']] == ['Adam Cole', 'Dana Reyes']

    response = auth_client.put(f"/api/estimators/{estimator['id']}", json={'phone': '555-0100'})
    assert response.status_code == 200
    assert response.get_json()['estimator']['phone'] == '555-0100'
    assert auth_client.get(f"/api/estimators/{estimator['id']}").get_json()['name'] == 'Dana Reyes'

    assert auth_client.delete(f"/api/estimators/{estimator['id']}").status_code == 200
    assert auth_client.get(f"/api/estimators/{estimator['id']}").status_code == 404


def test_estimator_validation(auth_client):
    response = auth_client.post('/api/estimators', json={'name': 'Dana', 'email': 'not-an-email'})
    assert response.status_code == 400
    assert response.get_json()['errors'] == ['Please enter a valid email address']

    assert auth_client.put('/api/estimators/missing', json={'name': 'X'}).status_code == 404
    assert auth_client.delete('/api/estimators/missing').status_code == 404


def test_jobs_show_current_estimator_name(auth_client, make_job):
    estimator = auth_client.post('/api/estimators', json={'name': 'Dana Reyes'}).get_json()['estimator']
    job = make_job(estimator_id=estimator['id'])

    auth_client.put(f"/api/estimators/{estimator['id']}", json={'name': 'Dana Reyes-Cole'})

    assert auth_client.get(f"/api/jobs/{job['id']}").get_json()['estimator_display'] == 'Dana Reyes-Cole'

    auth_client.delete(f"/api/estimators/{estimator['id']}")

    # The job keeps the name it was saved with
    assert auth_client.get(f"/api/jobs/{job['id']}").get_json()['estimator_display'] == 'Dana Reyes'
