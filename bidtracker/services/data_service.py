# bidtracker/services/data_service.py
# Data service layer: jobs, estimators and auth against the remote store with local fallback

import uuid
import logging
from typing import Callable, Dict, List, Optional, Tuple

from bidtracker.services.backends import SupabaseStore, LocalStore
from bidtracker.services.date_utils import utc_now_iso
from bidtracker.services.records import normalize_job, normalize_estimator

logger = logging.getLogger(__name__)

JOBS = 'jobs'
ESTIMATORS = 'estimators'

MIN_PASSWORD_LENGTH = 6

# Remote auth error text -> message shown to the user
AUTH_ERROR_MESSAGES = [
    ('invalid login credentials', 'Invalid email or password.'),
    ('account is disabled', 'Account is disabled.'),
    ('already registered', 'This email is already registered.'),
    ('password should be', 'Password is too weak.'),
    ('weak password', 'Password is too weak.'),
    ('unable to validate email', 'Invalid email address.'),
    ('invalid format', 'Invalid email address.'),
]

Result = Tuple[bool, str, Optional[object]]


def friendly_auth_error(error) -> str:
    text = str(error).lower()
    for fragment, message in AUTH_ERROR_MESSAGES:
        if fragment in text:
            return message
    return 'An unexpected error occurred. Please try again.'


class DataService:
    """
    Backend collaborator for the bid board.

    Every operation returns ``(success, message, data)``; backend exceptions are
    logged and turned into a failed result. Subscribers receive the full
    collection after each successful change.
    """

    def __init__(self, mode='auto', remote=None, local=None):
        self.mode = mode
        self.remote = remote
        self.local = local or LocalStore()
        self.use_remote = remote is not None and mode != 'local'
        self._subscribers: Dict[str, List[Callable]] = {JOBS: [], ESTIMATORS: []}

    @classmethod
    def from_config(cls, config):
        """Build the service for a Flask config mapping"""
        mode = (config.get('STORAGE_BACKEND') or 'auto').lower()
        if mode not in ('auto', 'remote', 'local'):
            raise ValueError(f"STORAGE_BACKEND must be 'auto', 'remote' or 'local', got '{mode}'")

        remote = None
        if mode != 'local':
            url = config.get('SUPABASE_URL')
            key = config.get('SUPABASE_KEY')
            if not url or not key:
                if mode == 'remote':
                    raise ValueError("SUPABASE_URL and SUPABASE_KEY are required when STORAGE_BACKEND is 'remote'")
                logger.warning("Supabase credentials not configured - using local storage fallback")
            else:
                try:
                    remote = SupabaseStore.from_credentials(url, key)
                    logger.info("Supabase backend initialized")
                except Exception as e:
                    if mode == 'remote':
                        raise
                    logger.error(f"Failed to initialize Supabase backend: {e} - using local storage fallback")

        return cls(mode=mode, remote=remote)

    @property
    def backend_name(self):
        return 'remote' if self.use_remote else 'local'

    @property
    def offline(self):
        """True when a remote backend exists but calls are being served locally"""
        return self.remote is not None and not self.use_remote

    def _call(self, operation, *args):
        """Run a store operation, switching to local storage if the remote fails in auto mode"""
        if self.use_remote:
            try:
                return getattr(self.remote, operation)(*args)
            except LookupError:
                raise
            except Exception as e:
                if self.mode != 'auto':
                    raise
                logger.warning(f"Remote backend failed during {operation}: {e} - switching to local storage")
                self.use_remote = False
        return getattr(self.local, operation)(*args)

    # Subscriptions
    def subscribe(self, collection, callback) -> Callable[[], None]:
        """Register ``callback(records, error)``; returns the unsubscribe function."""
        subscribers = self._subscribers[collection]
        subscribers.append(callback)

        def unsubscribe():
            if callback in subscribers:
                subscribers.remove(callback)

        return unsubscribe

    def subscribe_jobs(self, callback):
        return self.subscribe(JOBS, callback)

    def subscribe_estimators(self, callback):
        return self.subscribe(ESTIMATORS, callback)

    def cleanup(self):
        for subscribers in self._subscribers.values():
            subscribers.clear()

    def _notify(self, collection):
        subscribers = list(self._subscribers[collection])
        if not subscribers:
            return
        loader = self.get_jobs if collection == JOBS else self.get_estimators
        success, message, records = loader()
        for callback in subscribers:
            try:
                if success:
                    callback(records, None)
                else:
                    callback(None, message)
            except Exception:
                logger.exception(f"Subscriber for {collection} failed")

    # Jobs
    def get_jobs(self) -> Result:
        try:
            rows = self._call('list', JOBS, 'created_at', True)
            jobs = [normalize_job(row) for row in rows]
            return True, f"Loaded {len(jobs)} jobs", jobs
        except Exception as e:
            logger.error(f"Error loading jobs: {e}")
            return False, f"Failed to load jobs: {e}", None

    def add_job(self, data, created_by=None) -> Result:
        now = utc_now_iso()
        row = dict(data)
        row['id'] = row.get('id') or uuid.uuid4().hex
        row.setdefault('attachments', [])
        row['created_at'] = now
        row['updated_at'] = now
        row['created_by'] = created_by
        try:
            saved = self._call('insert', JOBS, row)
        except Exception as e:
            logger.error(f"Error creating job: {e}")
            return False, f"Failed to create job: {e}", None
        logger.info(f"Created job {row['id']} ({row.get('project_name')})")
        self._notify(JOBS)
        return True, "Job created successfully", normalize_job(saved)

    def update_job(self, job_id, data) -> Result:
        row = dict(data)
        row.pop('id', None)
        row['updated_at'] = utc_now_iso()
        try:
            saved = self._call('update', JOBS, job_id, row)
        except LookupError:
            return False, "Job not found", None
        except Exception as e:
            logger.error(f"Error updating job {job_id}: {e}")
            return False, f"Failed to update job: {e}", None
        self._notify(JOBS)
        return True, "Job updated successfully", normalize_job(saved)

    def delete_job(self, job_id) -> Result:
        try:
            self._call('delete', JOBS, job_id)
        except LookupError:
            return False, "Job not found", None
        except Exception as e:
            logger.error(f"Error deleting job {job_id}: {e}")
            return False, f"Failed to delete job: {e}", None
        logger.info(f"Deleted job {job_id}")
        self._notify(JOBS)
        return True, "Job deleted successfully", None

    # Estimators
    def get_estimators(self) -> Result:
        try:
            rows = self._call('list', ESTIMATORS, 'name', False)
            estimators = [normalize_estimator(row) for row in rows]
            return True, f"Loaded {len(estimators)} estimators", estimators
        except Exception as e:
            logger.error(f"Error loading estimators: {e}")
            return False, f"Failed to load estimators: {e}", None

    def add_estimator(self, data) -> Result:
        row = dict(data)
        row['id'] = row.get('id') or uuid.uuid4().hex
        row['created_at'] = utc_now_iso()
        try:
            saved = self._call('insert', ESTIMATORS, row)
        except Exception as e:
            logger.error(f"Error creating estimator: {e}")
            return False, f"Failed to create estimator: {e}", None
        self._notify(ESTIMATORS)
        return True, "Estimator created successfully", normalize_estimator(saved)

    def update_estimator(self, estimator_id, data) -> Result:
        row = dict(data)
        row.pop('id', None)
        try:
            saved = self._call('update', ESTIMATORS, estimator_id, row)
        except LookupError:
            return False, "Estimator not found", None
        except Exception as e:
            logger.error(f"Error updating estimator {estimator_id}: {e}")
            return False, f"Failed to update estimator: {e}", None
        self._notify(ESTIMATORS)
        return True, "Estimator updated successfully", normalize_estimator(saved)

    def delete_estimator(self, estimator_id) -> Result:
        try:
            self._call('delete', ESTIMATORS, estimator_id)
        except LookupError:
            return False, "Estimator not found", None
        except Exception as e:
            logger.error(f"Error deleting estimator {estimator_id}: {e}")
            return False, f"Failed to delete estimator: {e}", None
        self._notify(ESTIMATORS)
        return True, "Estimator deleted successfully", None

    # Authentication
    def _auth_backend(self):
        return self.remote if self.use_remote else self.local

    def sign_in(self, email, password) -> Result:
        email = (email or '').strip().lower()
        if not email or not password:
            return False, 'Please fill in all fields.', None
        try:
            identity = self._auth_backend().sign_in(email, password)
        except Exception as e:
            logger.warning(f"Sign in failed for '{email}': {e}")
            return False, friendly_auth_error(e), None
        logger.info(f"User '{email}' signed in")
        return True, 'Signed in successfully', identity

    def sign_up(self, email, password, display_name=None, confirm_password=None) -> Result:
        email = (email or '').strip().lower()
        if not email or not password:
            return False, 'Please fill in all fields.', None
        if confirm_password is not None and password != confirm_password:
            return False, 'Passwords do not match.', None
        if len(password) < MIN_PASSWORD_LENGTH:
            return False, f'Password must be at least {MIN_PASSWORD_LENGTH} characters.', None
        try:
            identity = self._auth_backend().sign_up(email, password, display_name)
        except Exception as e:
            logger.warning(f"Sign up failed for '{email}': {e}")
            return False, friendly_auth_error(e), None
        logger.info(f"User '{email}' signed up")
        return True, 'Account created successfully', identity

    def sign_out(self) -> Result:
        try:
            self._auth_backend().sign_out()
        except Exception as e:
            logger.error(f"Sign out failed: {e}")
            return False, f"Failed to sign out: {e}", None
        return True, 'Signed out successfully', None
