from flask import Blueprint
from flask_jwt_extended import jwt_required
from smart_library import db
from smart_library.models.notification import AdminNotification
from smart_library.utils.decorators import admin_required
from smart_library.utils.responses import success_response, error_response

admin_notifications_bp = Blueprint('admin_notifications', __name__)


@admin_notifications_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_admin_notifications():
    notifications = AdminNotification.query \
        .order_by(AdminNotification.created_at.desc(), AdminNotification.id.desc()).limit(100).all()
    return success_response({'notifications': [n.to_dict() for n in notifications]})


@admin_notifications_bp.route('/unread-count', methods=['GET'])
@jwt_required()
@admin_required
def get_unread_count():
    count = AdminNotification.query.filter_by(is_read=False).count()
    return success_response({'count': count})


@admin_notifications_bp.route('/<int:notification_id>/read', methods=['PUT'])
@jwt_required()
@admin_required
def mark_read(notification_id):
    notification = db.session.get(AdminNotification, notification_id)
    if not notification:
        return error_response('Notification not found', 404)

    notification.is_read = True
    db.session.commit()
    return success_response(None, 'Notification marked as read')


@admin_notifications_bp.route('/mark-all-read', methods=['PUT'])
@jwt_required()
@admin_required
def mark_all_read():
    updated = AdminNotification.query.filter_by(is_read=False).update({'is_read': True})
    db.session.commit()
    return success_response({'updated': updated}, 'All notifications marked as read')


@admin_notifications_bp.route('/<int:notification_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_notification(notification_id):
    notification = db.session.get(AdminNotification, notification_id)
    if not notification:
        return error_response('Notification not found', 404)

    db.session.delete(notification)
    db.session.commit()
    return success_response(None, 'Notification deleted')
