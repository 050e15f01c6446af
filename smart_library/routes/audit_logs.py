import csv
import io
import time
from datetime import datetime, time as day_time, timedelta
from flask import Blueprint, Response, request
from flask_jwt_extended import jwt_required
from sqlalchemy import func, and_
from smart_library import db
from smart_library.models.audit import AdminActionLog
from smart_library.models.user import User, Admin
from smart_library.utils.decorators import admin_required
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_date

audit_logs_bp = Blueprint('audit_logs', __name__)

CSV_HEADER = ['ID', 'Action Type', 'Admin Name', 'User Name', 'Booking ID', 'IP Address', 'Timestamp']


def _date_conditions(args):
    """Inclusive start_date/end_date (YYYY-MM-DD) conditions on created_at"""
    conditions = []
    if args.get('start_date'):
        start, message = validate_date(args['start_date'], 'start_date')
        if start is None:
            return None, message
        conditions.append(AdminActionLog.created_at >= datetime.combine(start, day_time.min))
    if args.get('end_date'):
        end, message = validate_date(args['end_date'], 'end_date')
        if end is None:
            return None, message
        conditions.append(AdminActionLog.created_at < datetime.combine(end + timedelta(days=1), day_time.min))
    return conditions, None


def _filtered_logs(args):
    conditions, message = _date_conditions(args)
    if conditions is None:
        return None, message

    query = AdminActionLog.query.filter(*conditions)
    if args.get('admin_id', type=int):
        query = query.filter(AdminActionLog.admin_id == args.get('admin_id', type=int))
    if args.get('user_id', type=int):
        query = query.filter(AdminActionLog.target_user_id == args.get('user_id', type=int))
    if args.get('action_type'):
        query = query.filter(AdminActionLog.action_type == args['action_type'])
    return query, None


@audit_logs_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_logs():
    """
    Audit log entries, newest first
    ---
    Query parameters:
    - admin_id, user_id, action_type: filters
    - start_date, end_date: YYYY-MM-DD, inclusive
    - limit (default 100), offset (default 0)
    """
    query, message = _filtered_logs(request.args)
    if query is None:
        return error_response(message, 400)

    limit = min(max(request.args.get('limit', 100, type=int), 1), 1000)
    offset = max(request.args.get('offset', 0, type=int), 0)

    total = query.count()
    logs = query.order_by(AdminActionLog.created_at.desc(), AdminActionLog.id.desc()) \
        .limit(limit).offset(offset).all()

    return success_response({
        'logs': [log.to_dict() for log in logs],
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'has_more': offset + limit < total
        }
    })


@audit_logs_bp.route('/stats', methods=['GET'])
@jwt_required()
@admin_required
def get_stats():
    """Action distribution, admin activity, last 30 days of activity and most affected members"""
    conditions, message = _date_conditions(request.args)
    if conditions is None:
        return error_response(message, 400)

    actions = db.session.query(AdminActionLog.action_type, func.count(AdminActionLog.id)) \
        .filter(*conditions) \
        .group_by(AdminActionLog.action_type) \
        .order_by(func.count(AdminActionLog.id).desc()).all()

    admins = db.session.query(Admin.id, Admin.name, Admin.email, func.count(AdminActionLog.id)) \
        .outerjoin(AdminActionLog, and_(AdminActionLog.admin_id == Admin.id, *conditions)) \
        .group_by(Admin.id, Admin.name, Admin.email) \
        .order_by(func.count(AdminActionLog.id).desc()).all()

    day = func.date(AdminActionLog.created_at)
    daily = db.session.query(day, func.count(AdminActionLog.id)) \
        .filter(*conditions) \
        .group_by(day).order_by(day.desc()).limit(30).all()

    users = db.session.query(User.id, User.name, User.email, func.count(AdminActionLog.id)) \
        .join(AdminActionLog, AdminActionLog.target_user_id == User.id) \
        .filter(*conditions) \
        .group_by(User.id, User.name, User.email) \
        .order_by(func.count(AdminActionLog.id).desc()).limit(10).all()

    return success_response({
        'action_distribution': [{'action_type': a, 'count': c} for a, c in actions],
        'admin_activity': [{'id': i, 'name': n, 'email': e, 'action_count': c} for i, n, e, c in admins],
        'daily_activity': [{'date': str(d), 'count': c} for d, c in daily],
        'most_affected_users': [{'id': i, 'name': n, 'email': e, 'action_count': c} for i, n, e, c in users]
    })


@audit_logs_bp.route('/<int:log_id>', methods=['GET'])
@jwt_required()
@admin_required
def get_log(log_id):
    log = db.session.get(AdminActionLog, log_id)
    if not log:
        return error_response('Log not found', 404)
    return success_response({'log': log.to_dict()})


@audit_logs_bp.route('/export/csv', methods=['GET'])
@jwt_required()
@admin_required
def export_csv():
    query, message = _filtered_logs(request.args)
    if query is None:
        return error_response(message, 400)

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(CSV_HEADER)
    for log in query.order_by(AdminActionLog.created_at.desc(), AdminActionLog.id.desc()).all():
        writer.writerow([
            log.id,
            log.action_type,
            log.admin.name,
            log.target_user.name if log.target_user else 'N/A',
            log.target_booking_id or 'N/A',
            log.ip_address or 'N/A',
            log.created_at.isoformat()
        ])

    filename = f'audit-logs-{int(time.time() * 1000)}.csv'
    return Response(
        buffer.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )
