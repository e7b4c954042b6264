# bidtracker/services/records.py
"""
Canonical job and estimator records.

Records travel through the app as plain dicts with snake_case keys. Older
documents in the remote store were written with camelCase keys
(``projectName``, ``clientName``, ``createdAt`` ...) so everything coming back
from a backend goes through ``normalize_job``/``normalize_estimator`` first.
"""
import re
import math
import logging
from bidtracker.services.date_utils import parse_job_date, safe_parse_date

logger = logging.getLogger(__name__)

DEFAULT_STATUS = 'In Progress'

EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'

JOB_KEY_ALIASES = {
    'projectName': 'project_name',
    'clientName': 'client_name',
    'estimatorId': 'estimator_id',
    'estimatorName': 'estimator_name',
    'followUpDate': 'follow_up_date',
    'followUp': 'follow_up_date',
    'bidAmount': 'bid_amount',
    'amount': 'bid_amount',
    'createdAt': 'created_at',
    'updatedAt': 'updated_at',
    'createdBy': 'created_by',
    'companyTag': 'company',
}

JOB_TEXT_FIELDS = ('company', 'project_name', 'client_name', 'location',
                   'estimator_id', 'estimator_name', 'status', 'description')

JOB_FIELDS = JOB_TEXT_FIELDS + ('deadline', 'follow_up_date', 'bid_amount')

ESTIMATOR_FIELDS = ('name', 'email', 'phone', 'specialty')


def _rename_keys(raw, aliases):
    data = {}
    for key, value in (raw or {}).items():
        data[aliases.get(key, key)] = value
    # A bare "estimator" may hold either an id or a name
    if 'estimator' in data:
        ref = data.pop('estimator')
        if ref and not data.get('estimator_id') and not data.get('estimator_name'):
            data['estimator_id'] = str(ref)
    return data


def _clean_text(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_amount(value):
    """Parse a bid amount such as 1200, "1,200.50" or "$1,200". Empty means no amount."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("Bid amount must be a number")
    if isinstance(value, (int, float)):
        try:
            amount = float(value)
        except OverflowError:
            raise ValueError("Bid amount must be a number")
    else:
        text = str(value).strip().replace('$', '').replace(',', '')
        if not text:
            return None
        amount = float(text)
    # "inf" and "nan" parse as floats but are not amounts
    if not math.isfinite(amount):
        raise ValueError("Bid amount must be a number")
    return amount


def _date_string(value):
    parsed = safe_parse_date(value)
    if parsed:
        return parsed.isoformat()
    return value or None


def normalize_job(raw):
    """Map a backend document onto the canonical job record."""
    data = _rename_keys(raw, JOB_KEY_ALIASES)

    job = {'id': str(data['id']) if data.get('id') is not None else None}
    for field in JOB_TEXT_FIELDS:
        job[field] = _clean_text(data.get(field))
    job['status'] = job['status'] or DEFAULT_STATUS
    job['deadline'] = _date_string(data.get('deadline'))
    job['follow_up_date'] = _date_string(data.get('follow_up_date'))
    try:
        job['bid_amount'] = parse_amount(data.get('bid_amount'))
    except ValueError:
        logger.warning(f"Ignoring unparseable bid amount on job {job['id']}: {data.get('bid_amount')!r}")
        job['bid_amount'] = None
    job['attachments'] = list(data.get('attachments') or [])
    job['created_by'] = data.get('created_by')
    job['created_at'] = _timestamp_string(data.get('created_at'))
    job['updated_at'] = _timestamp_string(data.get('updated_at'))
    return job


def normalize_estimator(raw):
    data = dict(raw or {})
    if 'createdAt' in data:
        data['created_at'] = data.pop('createdAt')
    estimator = {'id': str(data['id']) if data.get('id') is not None else None}
    for field in ESTIMATOR_FIELDS:
        estimator[field] = _clean_text(data.get(field))
    estimator['created_at'] = _timestamp_string(data.get('created_at'))
    return estimator


def _timestamp_string(value):
    if value is None:
        return None
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def clean_job_data(data, partial=False):
    """
    Validate job input from a form or API call.

    Args:
        data (dict): submitted fields, snake_case or camelCase
        partial (bool): only validate the fields present (updates)

    Returns:
        tuple: (cleaned dict, list of error messages)
    """
    data = _rename_keys(data, JOB_KEY_ALIASES)
    cleaned = {}
    errors = []

    for field in JOB_TEXT_FIELDS:
        if field in data or not partial:
            cleaned[field] = _clean_text(data.get(field))

    for field, label in (('project_name', 'Project name'), ('client_name', 'Client name')):
        if field in cleaned and not cleaned[field]:
            errors.append(f"{label} is required")

    if 'status' in cleaned and not cleaned['status']:
        if partial:
            errors.append("Status cannot be empty")
        else:
            cleaned['status'] = DEFAULT_STATUS

    for field, label in (('deadline', 'Deadline'), ('follow_up_date', 'Follow-up date')):
        if field in data or not partial:
            try:
                parsed = parse_job_date(data.get(field))
                cleaned[field] = parsed.isoformat() if parsed else None
            except ValueError:
                errors.append(f"{label} must be a valid date (YYYY-MM-DD)")

    if 'bid_amount' in data or not partial:
        try:
            amount = parse_amount(data.get('bid_amount'))
            if amount is not None and amount < 0:
                errors.append("Bid amount cannot be negative")
            cleaned['bid_amount'] = amount
        except ValueError:
            errors.append("Bid amount must be a number")

    return cleaned, errors


def clean_estimator_data(data, partial=False):
    """Validate estimator input; returns (cleaned dict, list of error messages)."""
    data = data or {}
    cleaned = {}
    errors = []

    for field in ESTIMATOR_FIELDS:
        if field in data or not partial:
            cleaned[field] = _clean_text(data.get(field))

    if 'name' in cleaned and not cleaned['name']:
        errors.append("Estimator name is required")

    email = cleaned.get('email')
    if email and not re.match(EMAIL_PATTERN, email):
        errors.append("Please enter a valid email address")

    return cleaned, errors
