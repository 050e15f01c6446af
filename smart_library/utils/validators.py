import re
from datetime import datetime

GENDERS = ('Male', 'Female', 'Other')


def validate_email(email):
    """Validate email format"""
    pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
    return re.match(pattern, email or '') is not None


def validate_password(password):
    """Passwords need at least 6 characters"""
    if not password or len(password) < 6:
        return False, "Password must be at least 6 characters"

    return True, "Password is valid"


def validate_mobile(mobile):
    """Mobile numbers are exactly 10 digits"""
    if not mobile or not re.fullmatch(r'\d{10}', str(mobile)):
        return False, "Mobile number must be 10 digits"

    return True, "Mobile number is valid"


def validate_date(value, field='date'):
    """
    Parse a YYYY-MM-DD string.

    Returns (date, None) on success or (None, message) on failure.
    """
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date(), None
    except (TypeError, ValueError):
        return None, f"Invalid {field}. Use YYYY-MM-DD"


def validate_gender(gender):
    if gender not in GENDERS:
        return False, "Invalid gender"

    return True, "Gender is valid"


def validate_required_fields(data, required_fields):
    """Validate that all required fields are present"""
    missing_fields = [field for field in required_fields if field not in data or data[field] in (None, '')]

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, "All required fields present"


def validate_positive_amount(value, field='amount'):
    """Returns (float, None) for a positive number or (None, message)"""
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None, f"Invalid {field}"

    if amount <= 0:
        return None, f"Invalid {field}"

    return amount, None


def validate_signup(data):
    """
    Validate a signup payload field by field.

    Returns a list of {field, message} dicts, empty when the payload is valid.
    """
    errors = []

    if not (data.get('name') or '').strip():
        errors.append({'field': 'name', 'message': 'Name is required'})

    if not validate_email(data.get('email')):
        errors.append({'field': 'email', 'message': 'Valid email is required'})

    is_valid, message = validate_mobile(data.get('mobile'))
    if not is_valid:
        errors.append({'field': 'mobile', 'message': message})

    is_valid, message = validate_password(data.get('password'))
    if not is_valid:
        errors.append({'field': 'password', 'message': message})

    dob, message = validate_date(data.get('dob'), 'date of birth')
    if dob is None:
        errors.append({'field': 'dob', 'message': 'Valid date of birth is required'})

    is_valid, message = validate_gender(data.get('gender'))
    if not is_valid:
        errors.append({'field': 'gender', 'message': message})

    return errors
