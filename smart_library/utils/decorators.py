from functools import wraps
from flask import g
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from smart_library import db
from smart_library.models.user import User, Admin, AdminRole
from smart_library.utils.responses import error_response

USER_TOKEN_TYPES = ('user', 'impersonation')


def user_required(fn):
    """Decorator to require a member token (or an admin impersonating one)"""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        claims = get_jwt()

        if claims.get('type') not in USER_TOKEN_TYPES:
            return error_response('Not authorized as a member', 403)

        user = db.session.get(User, int(get_jwt_identity()))
        if not user:
            return error_response('User not found', 401)

        if user.is_blocked:
            return error_response('Your account has been blocked', 403)

        g.current_user = user
        g.impersonated_by = claims.get('admin_id') if claims.get('type') == 'impersonation' else None
        return fn(*args, **kwargs)
    return wrapper


def role_required(*roles):
    """Decorator to check the admin has one of the given roles (any role when none given)"""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            claims = get_jwt()

            if claims.get('type') != 'admin':
                return error_response('Not authorized as admin', 403)

            admin = db.session.get(Admin, int(get_jwt_identity()))
            if not admin:
                return error_response('Admin not found', 401)

            if not admin.is_active:
                return error_response('Admin account is inactive', 403)

            if roles and admin.role not in roles:
                return error_response('Insufficient permissions', 403)

            g.current_admin = admin
            return fn(*args, **kwargs)
        return wrapper
    return decorator


def admin_required(fn):
    """Decorator to require any active admin"""
    return role_required()(fn)


def super_admin_required(fn):
    return role_required(AdminRole.SUPER_ADMIN)(fn)


def get_current_user():
    """Get current authenticated member"""
    return g.current_user


def get_current_admin():
    return g.current_admin
