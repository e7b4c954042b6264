# bidtracker/services/stats.py
# Summary numbers and chart series for the dashboard

from collections import OrderedDict
from datetime import timedelta

from bidtracker.config import DEFAULT_JOB_STATUSES
from bidtracker.services.date_utils import safe_parse_date
from bidtracker.services.filters import is_open, is_overdue

UNASSIGNED = 'Unassigned'
DUE_SOON_DAYS = 7


def _status(job):
    return (job.get('status') or '').strip().lower()


def _amount(job):
    amount = job.get('bid_amount')
    return float(amount) if isinstance(amount, (int, float)) else 0.0


def _estimator_label(job):
    return job.get('estimator_display') or job.get('estimator_name') or UNASSIGNED


def summarize(jobs, today, estimator_count=None):
    """
    Aggregate statistics for a list of jobs.

    ``overdue_jobs`` and ``due_this_week`` only count open jobs (not Won,
    Lost or Cancelled). ``win_rate`` is won / (won + lost) as a percentage.
    """
    won = [job for job in jobs if _status(job) == 'won']
    lost = [job for job in jobs if _status(job) == 'lost']
    week_end = today + timedelta(days=DUE_SOON_DAYS)

    due_this_week = 0
    follow_ups_due = 0
    for job in jobs:
        if not is_open(job):
            continue
        deadline = safe_parse_date(job.get('deadline'))
        if deadline and today <= deadline <= week_end:
            due_this_week += 1
        follow_up = safe_parse_date(job.get('follow_up_date'))
        if follow_up and follow_up <= today:
            follow_ups_due += 1

    decided = len(won) + len(lost)
    win_rate = round(len(won) * 100.0 / decided, 1) if decided else 0.0

    summary = {
        'total_jobs': len(jobs),
        'in_progress_jobs': sum(1 for job in jobs if _status(job) == 'in progress'),
        'submitted_jobs': sum(1 for job in jobs if _status(job) == 'submitted'),
        'won_jobs': len(won),
        'lost_jobs': len(lost),
        'overdue_jobs': sum(1 for job in jobs if is_overdue(job, today)),
        'due_this_week': due_this_week,
        'follow_ups_due': follow_ups_due,
        'total_bid_value': round(sum(_amount(job) for job in jobs), 2),
        'won_bid_value': round(sum(_amount(job) for job in won), 2),
        'win_rate': win_rate,
    }
    if estimator_count is not None:
        summary['estimator_count'] = estimator_count
    return summary


def jobs_by_status(jobs, known_statuses=None):
    """Counts per status, known statuses first (including zeros) then any others."""
    known_statuses = known_statuses or DEFAULT_JOB_STATUSES
    counts = OrderedDict((status, 0) for status in known_statuses)
    lookup = {status.lower(): status for status in known_statuses}
    for job in jobs:
        raw = (job.get('status') or '').strip()
        label = lookup.get(raw.lower(), raw or 'Unknown')
        counts[label] = counts.get(label, 0) + 1
    return [{'status': status, 'count': count} for status, count in counts.items()]


def jobs_by_estimator(jobs):
    groups = {}
    for job in jobs:
        label = _estimator_label(job)
        group = groups.setdefault(label, {'estimator': label, 'jobs': 0, 'bid_value': 0.0, 'won': 0})
        group['jobs'] += 1
        group['bid_value'] += _amount(job)
        if _status(job) == 'won':
            group['won'] += 1
    for group in groups.values():
        group['bid_value'] = round(group['bid_value'], 2)
    return sorted(groups.values(), key=lambda group: (-group['jobs'], group['estimator'].lower()))


def jobs_by_month(jobs):
    """Jobs and bid value per deadline month (YYYY-MM); jobs without a deadline are skipped."""
    months = {}
    for job in jobs:
        deadline = safe_parse_date(job.get('deadline'))
        if not deadline:
            continue
        key = deadline.strftime('%Y-%m')
        month = months.setdefault(key, {'month': key, 'jobs': 0, 'bid_value': 0.0})
        month['jobs'] += 1
        month['bid_value'] += _amount(job)
    for month in months.values():
        month['bid_value'] = round(month['bid_value'], 2)
    return [months[key] for key in sorted(months)]


def chart_data(jobs, known_statuses=None):
    return {
        'by_status': jobs_by_status(jobs, known_statuses),
        'by_estimator': jobs_by_estimator(jobs),
        'by_month': jobs_by_month(jobs),
    }
