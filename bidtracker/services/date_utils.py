# bidtracker/services/date_utils.py
import pytz
import logging
from datetime import datetime, date

logger = logging.getLogger(__name__)

# Configure server timezone; the app factory overrides it from TIMEZONE
SERVER_TIMEZONE = pytz.timezone('America/Los_Angeles')


def set_server_timezone(name):
    """Switch the timezone used to decide what "today" is."""
    global SERVER_TIMEZONE
    try:
        SERVER_TIMEZONE = pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.error(f"Unknown timezone '{name}', keeping {SERVER_TIMEZONE}")
    return SERVER_TIMEZONE


def server_today():
    """Current date in the server timezone"""
    return datetime.now(SERVER_TIMEZONE).date()


def format_date_for_response(date_obj):
    """
    Format a date object for consistent API responses.
    Deadlines are calendar dates, so only the YYYY-MM-DD part is kept to
    prevent timezone conversion issues.

    Args:
        date_obj (date or datetime): The date to format

    Returns:
        str: Formatted date string in ISO format
    """
    if not date_obj:
        return None

    if isinstance(date_obj, datetime):
        if date_obj.tzinfo is None:
            date_obj = SERVER_TIMEZONE.localize(date_obj)
        return date_obj.date().isoformat()
    elif isinstance(date_obj, date):
        return date_obj.isoformat()

    return str(date_obj)


def parse_job_date(date_str):
    """
    Parse a deadline or follow-up date, returning a date object
    without time component.

    Args:
        date_str (str): Date string to parse

    Returns:
        date: Parsed date object (without time)

    Raises:
        ValueError: when the value is not a recognizable date
    """
    if not date_str:
        return None

    if isinstance(date_str, datetime):
        return date_str.date()
    if isinstance(date_str, date):
        return date_str

    date_str = str(date_str).strip()

    try:
        # Case 1: ISO format with timezone
        if 'T' in date_str and (date_str.endswith('Z') or '+' in date_str or '-' in date_str.split('T')[1]):
            dt = datetime.fromisoformat(date_str.replace('Z', '+00:00'))
            return dt.astimezone(SERVER_TIMEZONE).date()

        # Case 2: ISO format without timezone (2023-05-21T10:00:00)
        elif 'T' in date_str:
            date_part = date_str.split('T')[0]
            year, month, day = map(int, date_part.split('-'))
            return date(year, month, day)

        # Case 3: Simple date format (2023-05-21)
        elif date_str.count('-') == 2:
            year, month, day = map(int, date_str.split('-'))
            return date(year, month, day)

        # Case 4: US style entry (05/21/2023)
        elif date_str.count('/') == 2:
            return datetime.strptime(date_str, '%m/%d/%Y').date()

        else:
            return datetime.fromisoformat(date_str).date()

    except (TypeError, ValueError) as e:
        logger.warning(f"Error parsing job date '{date_str}': {str(e)}")
        raise ValueError(f"Invalid date format: {date_str}")


def safe_parse_date(value):
    """parse_job_date that returns None instead of raising"""
    try:
        return parse_job_date(value)
    except ValueError:
        return None


def format_datetime_for_response(dt):
    """
    Format a timestamp for API responses.
    Naive datetimes are stored in UTC.
    """
    if not dt:
        return None
    if isinstance(dt, str):
        return dt

    if dt.tzinfo is None:
        dt = pytz.utc.localize(dt)

    return dt.isoformat()


def utc_now_iso():
    return datetime.now(pytz.utc).isoformat()
