import re
from datetime import datetime, time


def validate_phone_number(phone: str) -> bool:
    """Validate phone number format (international or local)."""
    if not phone:
        return True  # Allow empty/null

    # Basic phone validation - accepts various formats
    phone_pattern = r'^[\+]?[0-9][\d\-\s\(\)\.]{6,18}$'
    return bool(re.match(phone_pattern, phone.strip()))


def validate_email_format(email: str) -> bool:
    """Validate email format."""
    if not email:
        return True  # Allow empty/null

    email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return bool(re.match(email_pattern, email))


def parse_hhmm(value: str) -> time:
    """Parse a 24-hour ``HH:MM`` wall-clock string."""
    if not isinstance(value, str) or not re.match(r'^\d{2}:\d{2}$', value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
