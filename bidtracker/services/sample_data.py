# bidtracker/services/sample_data.py
# Shown when the backend cannot be reached so the dashboard is never empty

from datetime import timedelta
from bidtracker.services.date_utils import server_today
from bidtracker.services.records import normalize_job, normalize_estimator

SAMPLE_ESTIMATORS = [
    {'id': '1', 'name': 'John Smith', 'email': 'john.smith@example.com', 'specialty': 'Commercial'},
    {'id': '2', 'name': 'Sarah Johnson', 'email': 'sarah.johnson@example.com', 'specialty': 'Residential'},
    {'id': '3', 'name': 'Mike Davis', 'email': 'mike.davis@example.com', 'specialty': 'Industrial'},
]

# Deadlines are offsets in days from today
SAMPLE_JOBS = [
    {'id': 'sample-1', 'company': 'Main', 'project_name': 'Downtown Office Renovation',
     'client_name': 'Acme Properties', 'location': 'Los Angeles, CA', 'estimator_id': '1',
     'deadline': 5, 'status': 'In Progress', 'bid_amount': 245000.0,
     'description': 'Interior build-out of floors 3-5.'},
    {'id': 'sample-2', 'company': 'Main', 'project_name': 'Riverside Warehouse',
     'client_name': 'Harbor Logistics', 'location': 'Riverside, CA', 'estimator_id': '3',
     'deadline': -3, 'follow_up_date': 2, 'status': 'Submitted', 'bid_amount': 780000.0,
     'description': 'Tilt-up warehouse with loading docks.'},
    {'id': 'sample-3', 'company': 'Residential', 'project_name': 'Hillside Custom Home',
     'client_name': 'Garcia Family', 'location': 'Pasadena, CA', 'estimator_id': '2',
     'deadline': -10, 'status': 'Won', 'bid_amount': 1150000.0},
    {'id': 'sample-4', 'company': 'Main', 'project_name': 'School Gym Retrofit',
     'client_name': 'Unified School District', 'location': 'Long Beach, CA', 'estimator_id': '1',
     'deadline': -20, 'status': 'Lost', 'bid_amount': 390000.0},
    {'id': 'sample-5', 'company': 'Residential', 'project_name': 'Condo Roof Replacement',
     'client_name': 'Seaview HOA', 'location': 'Santa Monica, CA', 'estimator_id': '2',
     'deadline': -1, 'status': 'In Progress', 'bid_amount': None},
]


def sample_estimators():
    return [normalize_estimator(estimator) for estimator in SAMPLE_ESTIMATORS]


def sample_jobs(today=None):
    today = today or server_today()
    names = {estimator['id']: estimator['name'] for estimator in SAMPLE_ESTIMATORS}
    jobs = []
    for index, template in enumerate(SAMPLE_JOBS):
        job = dict(template)
        job['estimator_name'] = names.get(job['estimator_id'])
        job['deadline'] = today + timedelta(days=template['deadline'])
        if template.get('follow_up_date') is not None:
            job['follow_up_date'] = today + timedelta(days=template['follow_up_date'])
        job['created_at'] = (today - timedelta(days=30 - index)).isoformat()
        jobs.append(normalize_job(job))
    # Newest first, like the backend
    jobs.reverse()
    return jobs
