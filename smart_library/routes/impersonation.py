from datetime import datetime
from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt, get_jwt_identity
from loguru import logger
from smart_library import db
from smart_library.models.audit import ImpersonationSession
from smart_library.models.user import User
from smart_library.services.audit import log_admin_action
from smart_library.utils.decorators import admin_required, get_current_admin
from smart_library.utils.helpers import request_ip
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.tokens import generate_impersonation_token

impersonation_bp = Blueprint('impersonation', __name__)


def _bearer_token():
    header = request.headers.get('Authorization', '')
    return header[7:] if header.startswith('Bearer ') else header


@impersonation_bp.route('/impersonate/<int:user_id>', methods=['POST'])
@jwt_required()
@admin_required
def impersonate(user_id):
    """
    Start acting as a member
    ---
    Returns a two-hour `impersonation` token accepted by every member
    endpoint, and the id of the recorded session.
    """
    try:
        admin = get_current_admin()
        user = db.session.get(User, user_id)
        if not user:
            return error_response('User not found', 404)
        if user.is_blocked:
            return error_response('Cannot impersonate blocked user', 400)

        token = generate_impersonation_token(user.id, admin.id)
        session = ImpersonationSession(
            admin_id=admin.id,
            user_id=user.id,
            session_token=token,
            ip_address=request_ip(request)
        )
        db.session.add(session)
        db.session.flush()

        log_admin_action(admin.id, 'login_as_user', target_user_id=user.id,
                         details={'session_id': session.id, 'user_name': user.name, 'user_email': user.email,
                                  'session_started': session.started_at.isoformat()})
        db.session.commit()

        return success_response({
            'impersonation_token': token,
            'session_id': session.id,
            'user': {'id': user.id, 'name': user.name, 'email': user.email},
            'admin_info': {'admin_id': admin.id, 'admin_name': admin.name},
            'expires_in': '2 hours'
        }, 'Impersonation session started')

    except Exception:
        db.session.rollback()
        logger.exception('Error starting impersonation of user {}', user_id)
        return error_response('Error starting impersonation', 500)


@impersonation_bp.route('/exit-impersonation/<int:session_id>', methods=['POST'])
@jwt_required()
@admin_required
def exit_impersonation(session_id):
    admin = get_current_admin()
    session = ImpersonationSession.query.filter_by(id=session_id, admin_id=admin.id, is_active=True).first()
    if not session:
        return error_response('Session not found or already ended', 404)

    session.is_active = False
    session.ended_at = datetime.utcnow()
    log_admin_action(admin.id, 'login_as_user', target_user_id=session.user_id,
                     details={'action': 'session_ended', 'session_id': session.id,
                              'duration_minutes': session.duration_minutes})
    db.session.commit()

    return success_response({'duration_minutes': session.duration_minutes}, 'Impersonation session ended')


@impersonation_bp.route('/active-sessions', methods=['GET'])
@jwt_required()
@admin_required
def active_sessions():
    sessions = ImpersonationSession.query.filter_by(is_active=True) \
        .order_by(ImpersonationSession.started_at.desc()).all()
    return success_response({'sessions': [session.to_dict() for session in sessions]})


@impersonation_bp.route('/session-history', methods=['GET'])
@jwt_required()
@admin_required
def session_history():
    """
    Past and current sessions
    ---
    Query parameters:
    - user_id, admin_id: filters
    - limit: default 50
    """
    query = ImpersonationSession.query
    if request.args.get('user_id', type=int):
        query = query.filter_by(user_id=request.args.get('user_id', type=int))
    if request.args.get('admin_id', type=int):
        query = query.filter_by(admin_id=request.args.get('admin_id', type=int))

    limit = min(max(request.args.get('limit', 50, type=int), 1), 500)
    sessions = query.order_by(ImpersonationSession.started_at.desc(), ImpersonationSession.id.desc()) \
        .limit(limit).all()
    return success_response({'sessions': [session.to_dict() for session in sessions]})


@impersonation_bp.route('/log-action', methods=['POST'])
@jwt_required()
@admin_required
def log_action():
    """Record something done while acting as a member: {"session_id", "action_type", "action_details"}"""
    admin = get_current_admin()
    data = request.get_json(silent=True) or {}

    session = db.session.get(ImpersonationSession, data.get('session_id')) if data.get('session_id') else None
    if not session or session.admin_id != admin.id:
        return error_response('Session not found', 404)
    if not data.get('action_type'):
        return error_response('action_type is required', 400)

    log_admin_action(admin.id, 'impersonation_action', target_user_id=session.user_id,
                     details={'session_id': session.id, 'action': data['action_type'],
                              'details': data.get('action_details')})
    db.session.commit()
    return success_response(None, 'Action logged')


@impersonation_bp.route('/verify-impersonation', methods=['GET'])
@jwt_required()
def verify_impersonation():
    claims = get_jwt()
    if claims.get('type') != 'impersonation':
        return error_response('Not an impersonation token', 403)

    session = ImpersonationSession.query.filter_by(session_token=_bearer_token(), is_active=True).first()
    if not session:
        return error_response('Session expired or ended', 403)

    return success_response({
        'is_impersonating': True,
        'user_id': int(get_jwt_identity()),
        'admin_id': claims.get('admin_id'),
        'session_id': session.id,
        'started_at': session.started_at.isoformat()
    })
