import secrets
import string
import time

_ALPHANUMERIC = string.ascii_uppercase + string.digits
_BASE36 = string.digits + string.ascii_uppercase


def generate_referral_code(length=8):
    """Random uppercase alphanumeric referral code"""
    return ''.join(secrets.choice(_ALPHANUMERIC) for _ in range(length))


def generate_random_token():
    return secrets.token_hex(32)


def to_base36(number):
    if number == 0:
        return '0'
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return ''.join(reversed(digits))


def generate_ticket_number():
    """Support ticket number like TKT-LXK3J2A1-4QZ8"""
    timestamp = to_base36(int(time.time() * 1000))
    suffix = ''.join(secrets.choice(_ALPHANUMERIC) for _ in range(4))
    return f'TKT-{timestamp}-{suffix}'


def generate_transaction_id(prefix='TXN'):
    timestamp = int(time.time() * 1000)
    suffix = ''.join(secrets.choice(_ALPHANUMERIC) for _ in range(9))
    return f'{prefix}{timestamp}{suffix}'


def parse_bool(value):
    """Interpret JSON booleans and form/query strings alike"""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in ('1', 'true', 'yes', 'on')


def request_ip(request):
    forwarded = request.headers.get('X-Forwarded-For')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr
