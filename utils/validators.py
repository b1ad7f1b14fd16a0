"""
Input validation helper functions.
Validators for planner request payloads. Each returns a tuple so routes can
answer with the error message directly.
"""

import re
from datetime import date, datetime


def validate_date(value, field_name: str = 'data') -> tuple:
    """
    Validate a YYYY-MM-DD date.

    Args:
        value: Date string (or date object)
        field_name: Name used in the error message

    Returns:
        Tuple of (is_valid, date or None, error_message)
    """
    if isinstance(value, date):
        return True, value, ''
    if not value or not isinstance(value, str):
        return False, None, f'Il campo {field_name} è obbligatorio'

    try:
        return True, datetime.strptime(value.strip(), '%Y-%m-%d').date(), ''
    except ValueError:
        return False, None, f'Formato {field_name} non valido (AAAA-MM-GG)'


def validate_optional_date(value, field_name: str = 'data') -> tuple:
    """Like validate_date, but an empty value is valid and yields None."""
    if value in (None, ''):
        return True, None, ''
    return validate_date(value, field_name)


def validate_hhmm(value, field_name: str = 'orario') -> tuple:
    """
    Validate a HH:MM time of day ("24:00" allowed as end of day).

    Returns:
        Tuple of (is_valid, normalized "HH:MM" or None, error_message)
    """
    if not value or not isinstance(value, str):
        return False, None, f'Il campo {field_name} è obbligatorio'

    match = re.match(r'^(\d{1,2}):(\d{2})$', value.strip())
    if not match:
        return False, None, f'Formato {field_name} non valido (HH:MM)'

    hours, minutes = int(match.group(1)), int(match.group(2))
    if (hours, minutes) != (24, 0) and (hours > 23 or minutes > 59):
        return False, None, f'Formato {field_name} non valido (HH:MM)'

    return True, f'{hours:02d}:{minutes:02d}', ''


def validate_positive_integer(value, field_name: str) -> tuple:
    """
    Validate a required positive integer (IDs, counts).

    Returns:
        Tuple of (is_valid, int or None, error_message)
    """
    if value is None or value == '' or isinstance(value, bool):
        return False, None, f'Il campo {field_name} è obbligatorio'

    try:
        number = int(value)
    except (ValueError, TypeError):
        return False, None, f'Il campo {field_name} deve essere un numero intero'

    if number <= 0:
        return False, None, f'Il campo {field_name} deve essere positivo'

    return True, number, ''


def validate_optional_id(value, field_name: str) -> tuple:
    """Optional positive integer: None, '' and 'NONE' mean "not selected"."""
    if value in (None, '', 'NONE'):
        return True, None, ''
    return validate_positive_integer(value, field_name)


def validate_integer_list(values, field_name: str, allow_empty: bool = True) -> tuple:
    """
    Validate a list of positive integers.

    Returns:
        Tuple of (is_valid, list of int, error_message)
    """
    if values in (None, ''):
        values = []
    if not isinstance(values, list):
        return False, None, f'Il campo {field_name} deve essere una lista'
    if not values and not allow_empty:
        return False, None, f'Il campo {field_name} è obbligatorio'

    result = []
    for value in values:
        valid, number, err = validate_optional_id(value, field_name)
        if not valid:
            return False, None, err
        if number is not None:
            result.append(number)

    return True, result, ''


def validate_minutes(value, field_name: str, default: int) -> tuple:
    """
    Validate a whole number of minutes (bounds are checked by the planner).

    Returns:
        Tuple of (is_valid, int or None, error_message)
    """
    if value is None or value == '':
        return True, default, ''
    if isinstance(value, bool):
        return False, None, f'Il campo {field_name} deve essere un numero intero'

    try:
        number = int(value)
    except (ValueError, TypeError):
        return False, None, f'Il campo {field_name} deve essere un numero intero'

    if isinstance(value, float) and value != number:
        return False, None, f'Il campo {field_name} deve essere un numero intero'

    return True, number, ''


def sanitize_input(text: str, max_length: int = None) -> str:
    """
    Sanitize text input by trimming and limiting length.

    Args:
        text: Text to sanitize
        max_length: Maximum length (optional)

    Returns:
        Sanitized text
    """
    if not text:
        return ''

    # Strip whitespace
    sanitized = str(text).strip()

    # Limit length if specified
    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
