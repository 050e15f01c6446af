from datetime import date

from smart_library.utils.helpers import generate_ticket_number, generate_transaction_id, parse_bool, to_base36
from smart_library.utils.validators import (
    validate_date,
    validate_email,
    validate_mobile,
    validate_password,
    validate_positive_amount,
    validate_required_fields,
    validate_signup
)


class TestValidateEmail:
    def test_valid_email(self):
        assert validate_email('test@example.com') is True
        assert validate_email('user.name@domain.co.in') is True

    def test_invalid_email(self):
        assert validate_email('invalid-email') is False
        assert validate_email('user@domain') is False
        assert validate_email('') is False
        assert validate_email(None) is False


class TestValidatePassword:
    def test_six_characters_is_enough(self):
        is_valid, message = validate_password('abc123')
        assert is_valid is True

    def test_password_too_short(self):
        is_valid, message = validate_password('abc')
        assert is_valid is False
        assert 'at least 6 characters' in message


class TestValidateMobile:
    def test_ten_digits(self):
        assert validate_mobile('9876543210')[0] is True

    def test_rejects_other_lengths_and_letters(self):
        assert validate_mobile('98765')[0] is False
        assert validate_mobile('98765432100')[0] is False
        assert validate_mobile('98765abcde')[0] is False


class TestValidateFields:
    def test_missing_and_empty_fields(self):
        is_valid, message = validate_required_fields({'a': 1, 'b': ''}, ['a', 'b', 'c'])
        assert is_valid is False
        assert message == 'Missing required fields: b, c'

    def test_date(self):
        assert validate_date('2026-03-01') == (date(2026, 3, 1), None)
        value, message = validate_date('01/03/2026', 'start date')
        assert value is None
        assert message == 'Invalid start date. Use YYYY-MM-DD'

    def test_positive_amount(self):
        assert validate_positive_amount('12.5') == (12.5, None)
        assert validate_positive_amount(0)[0] is None
        assert validate_positive_amount('abc')[0] is None

    def test_signup_valid(self):
        errors = validate_signup({
            'name': 'A', 'email': 'a@b.com', 'mobile': '9876543210', 'password': 'secret1',
            'dob': '2000-01-01', 'gender': 'Other'
        })
        assert errors == []


class TestHelpers:
    def test_transaction_id_format(self):
        transaction_id = generate_transaction_id()
        assert transaction_id.startswith('TXN')
        assert transaction_id[3:16].isdigit()
        assert len(transaction_id) == 3 + 13 + 9

    def test_ticket_number_format(self):
        prefix, timestamp, suffix = generate_ticket_number().split('-')
        assert prefix == 'TKT'
        assert len(suffix) == 4

    def test_base36(self):
        assert to_base36(0) == '0'
        assert to_base36(35) == 'Z'
        assert to_base36(36) == '10'

    def test_parse_bool(self):
        assert parse_bool(True) is True
        assert parse_bool('true') is True
        assert parse_bool('1') is True
        assert parse_bool('false') is False
        assert parse_bool(None) is False
