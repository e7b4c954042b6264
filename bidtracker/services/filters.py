# bidtracker/services/filters.py
"""
Filter predicates and sorting for the job list.

Jobs are canonical record dicts (see ``records``) decorated with
``estimator_display`` by the board. Dates are compared against ``today``
which callers pass in so views stay consistent within one request.
"""
import logging
from datetime import timedelta

from bidtracker.services.date_utils import safe_parse_date, parse_job_date
from bidtracker.services.records import parse_amount

logger = logging.getLogger(__name__)

CLOSED_STATUSES = {'won', 'lost', 'cancelled'}

SEARCH_FIELDS = ('project_name', 'client_name', 'location', 'description',
                 'company', 'estimator_display', 'estimator_name')

TEXT_SORT_FIELDS = {
    'project_name': 'project_name',
    'client_name': 'client_name',
    'location': 'location',
    'status': 'status',
    'company': 'company',
    'estimator': 'estimator_display',
}
DATE_SORT_FIELDS = ('deadline', 'follow_up_date')
TIMESTAMP_SORT_FIELDS = ('created_at', 'updated_at')
DEFAULT_SORT = 'created_at'

TRUE_VALUES = ('1', 'true', 'yes', 'on')

# Upper bound on due_within_days (ten years)
MAX_DUE_WITHIN_DAYS = 3650


def is_open(job):
    return (job.get('status') or '').strip().lower() not in CLOSED_STATUSES


def is_overdue(job, today):
    deadline = safe_parse_date(job.get('deadline'))
    return bool(deadline and deadline < today and is_open(job))


def days_until_deadline(job, today):
    deadline = safe_parse_date(job.get('deadline'))
    if not deadline:
        return None
    return (deadline - today).days


class FilterCriteria:
    """Filter and sort options for the job list"""

    def __init__(self, search=None, status=None, estimator=None, company=None,
                 deadline_from=None, deadline_to=None, overdue_only=False,
                 due_within_days=None, sort=None, order=None):
        self.search = (search or '').strip().lower() or None
        self.status = (status or '').strip() or None
        self.estimator = (estimator or '').strip() or None
        self.company = (company or '').strip() or None
        self.deadline_from = deadline_from
        self.deadline_to = deadline_to
        self.overdue_only = overdue_only
        self.due_within_days = due_within_days
        self.sort = sort if sort in sortable_fields() else DEFAULT_SORT
        if order in ('asc', 'desc'):
            self.order = order
        else:
            # Newest first by default, everything else ascending
            self.order = 'desc' if self.sort in TIMESTAMP_SORT_FIELDS else 'asc'

    @classmethod
    def from_args(cls, args):
        """
        Build criteria from request query arguments.

        Raises:
            ValueError: for malformed dates or day counts
        """
        due_within = args.get('due_within_days')
        if due_within not in (None, ''):
            try:
                due_within = int(due_within)
            except ValueError:
                raise ValueError("due_within_days must be a whole number")
            if due_within < 0:
                raise ValueError("due_within_days cannot be negative")
            if due_within > MAX_DUE_WITHIN_DAYS:
                raise ValueError(f"due_within_days cannot be more than {MAX_DUE_WITHIN_DAYS}")
        else:
            due_within = None

        return cls(
            search=args.get('search'),
            status=args.get('status'),
            estimator=args.get('estimator'),
            company=args.get('company'),
            deadline_from=parse_job_date(args.get('deadline_from')),
            deadline_to=parse_job_date(args.get('deadline_to')),
            overdue_only=str(args.get('overdue', '')).lower() in TRUE_VALUES,
            due_within_days=due_within,
            sort=args.get('sort'),
            order=(args.get('order') or '').lower() or None,
        )

    def is_empty(self):
        return not any([self.search, self.status, self.estimator, self.company,
                        self.deadline_from, self.deadline_to, self.overdue_only,
                        self.due_within_days is not None])

    def to_dict(self):
        return {
            'search': self.search,
            'status': self.status,
            'estimator': self.estimator,
            'company': self.company,
            'deadline_from': self.deadline_from.isoformat() if self.deadline_from else None,
            'deadline_to': self.deadline_to.isoformat() if self.deadline_to else None,
            'overdue_only': self.overdue_only,
            'due_within_days': self.due_within_days,
            'sort': self.sort,
            'order': self.order,
        }


def sortable_fields():
    return set(TEXT_SORT_FIELDS) | set(DATE_SORT_FIELDS) | set(TIMESTAMP_SORT_FIELDS) | {'bid_amount'}


def matches_search(job, term):
    if not term:
        return True
    return any(term in (job.get(field) or '').lower() for field in SEARCH_FIELDS)


def matches_status(job, status):
    if not status or status.lower() == 'all':
        return True
    return (job.get('status') or '').lower() == status.lower()


def matches_estimator(job, estimator):
    if not estimator:
        return True
    estimator = estimator.lower()
    candidates = (job.get('estimator_id'), job.get('estimator_name'), job.get('estimator_display'))
    return any(value and str(value).lower() == estimator for value in candidates)


def matches_company(job, company):
    if not company:
        return True
    return (job.get('company') or '').lower() == company.lower()


def matches_deadline_range(job, start, end):
    if not start and not end:
        return True
    deadline = safe_parse_date(job.get('deadline'))
    if not deadline:
        return False
    if start and deadline < start:
        return False
    if end and deadline > end:
        return False
    return True


def is_due_within(job, days, today):
    deadline = safe_parse_date(job.get('deadline'))
    if not deadline or not is_open(job):
        return False
    return today <= deadline <= today + timedelta(days=days)


def filter_jobs(jobs, criteria, today):
    """Apply every predicate in ``criteria``; order is preserved."""
    if criteria is None or criteria.is_empty():
        return list(jobs)

    result = []
    for job in jobs:
        if not matches_search(job, criteria.search):
            continue
        if not matches_status(job, criteria.status):
            continue
        if not matches_estimator(job, criteria.estimator):
            continue
        if not matches_company(job, criteria.company):
            continue
        if not matches_deadline_range(job, criteria.deadline_from, criteria.deadline_to):
            continue
        if criteria.overdue_only and not is_overdue(job, today):
            continue
        if criteria.due_within_days is not None and not is_due_within(job, criteria.due_within_days, today):
            continue
        result.append(job)
    return result


def _sort_value(job, field):
    if field in TEXT_SORT_FIELDS:
        value = job.get(TEXT_SORT_FIELDS[field])
        return value.lower() if value else None
    if field in DATE_SORT_FIELDS:
        return safe_parse_date(job.get(field))
    if field == 'bid_amount':
        try:
            return parse_amount(job.get('bid_amount'))
        except ValueError:
            return None
    return job.get(field) or None


def sort_jobs(jobs, field=DEFAULT_SORT, order='asc'):
    """Sort by ``field``; jobs missing the value always go last."""
    if field not in sortable_fields():
        field = DEFAULT_SORT
    present = []
    missing = []
    for job in jobs:
        value = _sort_value(job, field)
        if value is None:
            missing.append(job)
        else:
            present.append((value, job))
    present.sort(key=lambda pair: pair[0], reverse=(order == 'desc'))
    return [job for _, job in present] + missing


def apply_criteria(jobs, criteria, today):
    filtered = filter_jobs(jobs, criteria, today)
    if criteria is None:
        return sort_jobs(filtered, DEFAULT_SORT, 'desc')
    return sort_jobs(filtered, criteria.sort, criteria.order)
