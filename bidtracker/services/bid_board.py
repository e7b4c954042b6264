# bidtracker/services/bid_board.py
"""
In-memory job and estimator board.

The board keeps the last snapshot of both collections, replaces them
wholesale whenever the data service publishes a new snapshot, and derives the
filtered views and statistics the dashboard shows. When a collection cannot be
loaded the sample dataset is shown in its place.
"""
import time
import logging
import threading

from flask import current_app

from bidtracker.services import filters, stats
from bidtracker.services.date_utils import server_today
from bidtracker.services.records import clean_job_data, clean_estimator_data
from bidtracker.services.sample_data import sample_jobs, sample_estimators

logger = logging.getLogger(__name__)


class BidBoard:

    def __init__(self, service, max_age_seconds=30, statuses=None):
        self.service = service
        self.max_age_seconds = max_age_seconds
        self.statuses = list(statuses) if statuses else None
        self.jobs = []
        self.estimators = []
        self.loaded_at = None
        self.last_error = None
        self._sample = {'jobs': False, 'estimators': False}
        self._lock = threading.RLock()
        self._unsubscribes = [
            service.subscribe_jobs(self._on_jobs_snapshot),
            service.subscribe_estimators(self._on_estimators_snapshot),
        ]

    @property
    def using_sample_data(self):
        return self._sample['jobs'] or self._sample['estimators']

    # Loading
    def load(self):
        """Load estimators then jobs; returns False if either fell back to sample data."""
        with self._lock:
            estimators_ok = self._load_estimators()
            jobs_ok = self._load_jobs()
            self.loaded_at = time.monotonic()
            return estimators_ok and jobs_ok

    def _load_estimators(self):
        success, message, records = self.service.get_estimators()
        if success:
            self.estimators = records
            self._sample['estimators'] = False
            return True
        logger.warning(f"Estimator load failed, showing sample estimators: {message}")
        self.last_error = message
        self.estimators = sample_estimators()
        self._sample['estimators'] = True
        return False

    def _load_jobs(self):
        success, message, records = self.service.get_jobs()
        if success:
            self.jobs = records
            self._sample['jobs'] = False
            return True
        logger.warning(f"Job load failed, showing sample jobs: {message}")
        self.last_error = message
        self.jobs = sample_jobs()
        self._sample['jobs'] = True
        return False

    def is_stale(self):
        if self.loaded_at is None:
            return True
        return time.monotonic() - self.loaded_at >= self.max_age_seconds

    def ensure_loaded(self):
        with self._lock:
            if self.is_stale():
                self.load()

    def _on_jobs_snapshot(self, records, error):
        with self._lock:
            if error:
                logger.warning(f"Job snapshot failed: {error}")
                self.last_error = error
                self.loaded_at = None
                return
            self.jobs = records
            self._sample['jobs'] = False

    def _on_estimators_snapshot(self, records, error):
        with self._lock:
            if error:
                logger.warning(f"Estimator snapshot failed: {error}")
                self.last_error = error
                self.loaded_at = None
                return
            self.estimators = records
            self._sample['estimators'] = False

    def close(self):
        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes = []

    # Lookups
    def find_job(self, job_id):
        with self._lock:
            return next((job for job in self.jobs if job['id'] == str(job_id)), None)

    def find_estimator(self, estimator_id):
        with self._lock:
            return next((e for e in self.estimators if e['id'] == str(estimator_id)), None)

    def find_estimator_by_name(self, name):
        if not name:
            return None
        name = name.strip().lower()
        with self._lock:
            return next((e for e in self.estimators if (e.get('name') or '').lower() == name), None)

    def estimator_name(self, job):
        """Current estimator name for a job, falling back to what the job stored."""
        estimator = self.find_estimator(job['estimator_id']) if job.get('estimator_id') else None
        if estimator:
            return estimator['name']
        return job.get('estimator_name') or job.get('estimator_id')

    def _resolve_estimator(self, cleaned):
        """Fill in estimator id and name from whichever one was submitted."""
        if 'estimator_id' not in cleaned and 'estimator_name' not in cleaned:
            return
        ref_id = cleaned.get('estimator_id')
        ref_name = cleaned.get('estimator_name')
        estimator = None
        if ref_id:
            estimator = self.find_estimator(ref_id) or self.find_estimator_by_name(ref_id)
        elif ref_name:
            estimator = self.find_estimator_by_name(ref_name)

        if estimator:
            cleaned['estimator_id'] = estimator['id']
            cleaned['estimator_name'] = estimator['name']
        else:
            cleaned['estimator_id'] = ref_id
            cleaned['estimator_name'] = ref_name

    # Mutations
    def save_job(self, data, job_id=None, created_by=None):
        """Create or update a job. Returns (success, message, job)."""
        cleaned, errors = clean_job_data(data, partial=job_id is not None)
        if errors:
            return False, '; '.join(errors), None

        with self._lock:
            self._resolve_estimator(cleaned)
            if job_id is not None:
                if self.find_job(job_id) is None:
                    return False, 'Job not found', None
                result = self.service.update_job(str(job_id), cleaned)
            else:
                result = self.service.add_job(cleaned, created_by=created_by)

        success, message, job = result
        if success:
            job = self.present(job)
        return success, message, job

    def delete_job(self, job_id):
        with self._lock:
            if self.find_job(job_id) is None:
                return False, 'Job not found', None
            return self.service.delete_job(str(job_id))

    def set_attachments(self, job_id, attachments):
        with self._lock:
            if self.find_job(job_id) is None:
                return False, 'Job not found', None
            success, message, job = self.service.update_job(str(job_id), {'attachments': attachments})
        return success, message, self.present(job) if success else None

    def save_estimator(self, data, estimator_id=None):
        """Create or update an estimator. Returns (success, message, estimator)."""
        cleaned, errors = clean_estimator_data(data, partial=estimator_id is not None)
        if errors:
            return False, '; '.join(errors), None

        with self._lock:
            if estimator_id is not None:
                if self.find_estimator(estimator_id) is None:
                    return False, 'Estimator not found', None
                return self.service.update_estimator(str(estimator_id), cleaned)
            return self.service.add_estimator(cleaned)

    def delete_estimator(self, estimator_id):
        # Jobs keep their stored estimator_name; nothing is reassigned
        with self._lock:
            if self.find_estimator(estimator_id) is None:
                return False, 'Estimator not found', None
            return self.service.delete_estimator(str(estimator_id))

    # Views
    def present(self, job, today=None):
        """Copy of a job with display-only fields added."""
        today = today or server_today()
        view = dict(job)
        view['estimator_display'] = self.estimator_name(job)
        view['is_overdue'] = filters.is_overdue(job, today)
        view['days_until_deadline'] = filters.days_until_deadline(job, today)
        return view

    def view(self, criteria=None, today=None):
        today = today or server_today()
        with self._lock:
            jobs = [self.present(job, today) for job in self.jobs]
        return filters.apply_criteria(jobs, criteria, today)

    def stats(self, criteria=None, today=None):
        today = today or server_today()
        jobs = self.view(criteria, today)
        with self._lock:
            estimator_count = len(self.estimators)
        return stats.summarize(jobs, today, estimator_count=estimator_count)

    def charts(self, criteria=None, today=None):
        today = today or server_today()
        return stats.chart_data(self.view(criteria, today), self.statuses)

    def snapshot_info(self):
        return {
            'backend': self.service.backend_name,
            'offline': self.service.offline,
            'using_sample_data': self.using_sample_data,
            'last_error': self.last_error,
            'job_count': len(self.jobs),
            'estimator_count': len(self.estimators),
        }


def get_board():
    """The board attached to the current Flask app, loaded if stale"""
    board = current_app.extensions['bid_board']
    board.ensure_loaded()
    return board
