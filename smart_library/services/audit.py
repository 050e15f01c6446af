from flask import has_request_context, request
from loguru import logger
from smart_library import db
from smart_library.models.audit import AdminActionLog
from smart_library.utils.helpers import request_ip


def log_admin_action(admin_id, action_type, target_user_id=None, target_booking_id=None, details=None):
    """Record an admin action in the audit log. The caller commits."""
    entry = AdminActionLog(
        admin_id=admin_id,
        action_type=action_type,
        target_user_id=target_user_id,
        target_booking_id=target_booking_id,
        action_details=details or {}
    )
    if has_request_context():
        entry.ip_address = request_ip(request)
        entry.user_agent = (request.headers.get('User-Agent') or '')[:255]

    db.session.add(entry)
    logger.info('Admin {} performed {} (user={}, booking={})',
                admin_id, action_type, target_user_id, target_booking_id)
    return entry
