from datetime import datetime
from flask import Blueprint, request, current_app
from loguru import logger
from smart_library import db
from smart_library.models.user import User, Admin, Gender, PasswordResetToken
from smart_library.services.wallet import credit_wallet
from smart_library.utils.decorators import user_required, get_current_user
from smart_library.utils.helpers import generate_referral_code, generate_random_token
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.tokens import generate_token
from smart_library.utils.validators import (
    validate_signup, validate_password, validate_required_fields, validate_date
)

auth_bp = Blueprint('auth', __name__)


def _unique_referral_code():
    code = generate_referral_code()
    while User.query.filter_by(referral_code=code).first():
        code = generate_referral_code()
    return code


@auth_bp.route('/signup', methods=['POST'])
def signup():
    """
    Member registration endpoint
    ---
    Request body:
    {
        "name": "string",
        "email": "string",
        "mobile": "10 digits",
        "password": "string (min 6)",
        "dob": "YYYY-MM-DD",
        "gender": "Male|Female|Other",
        "referred_by": "referral code (optional)"
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        errors = validate_signup(data)
        if errors:
            return error_response('Validation failed', 400, errors)

        email = data['email'].lower().strip()
        mobile = str(data['mobile']).strip()

        if User.query.filter((User.email == email) | (User.mobile == mobile)).first():
            return error_response('User with this email or mobile already exists', 400)

        referrer = None
        referred_by = (data.get('referred_by') or '').strip().upper() or None
        if referred_by:
            referrer = User.query.filter_by(referral_code=referred_by).first()

        dob, _ = validate_date(data['dob'])
        user = User(
            name=data['name'].strip(),
            email=email,
            mobile=mobile,
            dob=dob,
            gender=Gender(data['gender']),
            referral_code=_unique_referral_code(),
            referred_by=referred_by if referrer else None,
            wallet_balance=0.0
        )
        user.set_password(data['password'])
        db.session.add(user)
        db.session.flush()

        if referrer:
            bonus = current_app.config['REFERRAL_BONUS']
            credit_wallet(referrer, bonus, 'referral', description=f'Referral bonus for inviting {user.name}',
                          reference_id=user.id)
            credit_wallet(user, bonus, 'referral', description='Signup bonus for using a referral code',
                          reference_id=referrer.id)

        db.session.commit()
        logger.info('User {} registered (referred: {})', user.id, bool(referrer))

        token = generate_token(user.id, 'user')
        return success_response({'token': token, 'user': user.to_dict()}, 'User registered successfully', 201)

    except Exception:
        db.session.rollback()
        logger.exception('Signup error')
        return error_response('Error registering user', 500)


@auth_bp.route('/login', methods=['POST'])
def login():
    """
    Member login with email or mobile
    ---
    Request body:
    {
        "identifier": "email or mobile",
        "password": "string"
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['identifier', 'password'])
        if not is_valid:
            return error_response(message, 400)

        identifier = str(data['identifier']).strip()
        user = User.query.filter(
            (User.email == identifier.lower()) | (User.mobile == identifier)
        ).first()

        if not user:
            return error_response('Invalid credentials', 401)

        if user.is_blocked:
            return error_response('Your account has been blocked. Please contact support.', 403)

        if not user.check_password(data['password']):
            return error_response('Invalid credentials', 401)

        user.last_login = datetime.utcnow()
        db.session.commit()

        token = generate_token(user.id, 'user')
        return success_response({'token': token, 'user': user.to_dict()}, 'Login successful')

    except Exception:
        db.session.rollback()
        logger.exception('Login error')
        return error_response('Error logging in', 500)


@auth_bp.route('/admin/login', methods=['POST'])
def admin_login():
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['email', 'password'])
        if not is_valid:
            return error_response(message, 400)

        admin = Admin.query.filter_by(email=data['email'].lower().strip()).first()
        if not admin:
            return error_response('Invalid credentials', 401)

        if not admin.is_active:
            return error_response('Your account has been deactivated', 403)

        if not admin.check_password(data['password']):
            return error_response('Invalid credentials', 401)

        admin.last_login = datetime.utcnow()
        db.session.commit()

        token = generate_token(admin.id, 'admin')
        return success_response({'token': token, 'admin': admin.to_dict()}, 'Admin login successful')

    except Exception:
        db.session.rollback()
        logger.exception('Admin login error')
        return error_response('Error logging in', 500)


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    """
    Issue a one hour password reset token.
    The token is returned directly since no mail transport is configured.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = (data.get('email') or '').lower().strip()

        user = User.query.filter_by(email=email).first()
        if not user:
            return error_response('No user found with this email', 404)

        reset = PasswordResetToken(
            user_id=user.id,
            token=generate_random_token(),
            expires_at=datetime.utcnow() + current_app.config['PASSWORD_RESET_EXPIRES']
        )
        db.session.add(reset)
        db.session.commit()

        return success_response({'resetToken': reset.token}, 'Password reset token generated')

    except Exception:
        db.session.rollback()
        logger.exception('Forgot password error')
        return error_response('Error sending reset link', 500)


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['token', 'newPassword'])
        if not is_valid:
            return error_response(message, 400)

        is_valid, message = validate_password(data['newPassword'])
        if not is_valid:
            return error_response(message, 400)

        reset = PasswordResetToken.query.filter_by(token=data['token']).first()
        if not reset or reset.is_expired():
            return error_response('Invalid or expired reset token', 400)

        reset.user.set_password(data['newPassword'])
        db.session.delete(reset)
        db.session.commit()

        return success_response(None, 'Password reset successful')

    except Exception:
        db.session.rollback()
        logger.exception('Reset password error')
        return error_response('Error resetting password', 500)


@auth_bp.route('/change-password', methods=['POST'])
@user_required
def change_password():
    try:
        data = request.get_json(silent=True) or {}
        user = get_current_user()

        is_valid, message = validate_required_fields(data, ['currentPassword', 'newPassword'])
        if not is_valid:
            return error_response(message, 400)

        if not user.check_password(data['currentPassword']):
            return error_response('Current password is incorrect', 400)

        is_valid, message = validate_password(data['newPassword'])
        if not is_valid:
            return error_response(message, 400)

        user.set_password(data['newPassword'])
        db.session.commit()

        return success_response(None, 'Password changed successfully')

    except Exception:
        db.session.rollback()
        logger.exception('Change password error')
        return error_response('Error changing password', 500)
