import re
from datetime import date

DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def parse_date(value):
    """Calendar date for a ``YYYY-MM-DD`` string, or None if it is not one."""
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not DATE_PATTERN.match(value):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def parse_ground_id(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdigit():
        parsed = int(value.strip())
        return parsed if parsed > 0 else None
    return None
