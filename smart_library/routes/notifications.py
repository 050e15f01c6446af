from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from smart_library import db
from smart_library.models.notification import Notification, NotificationType, NotificationPriority
from smart_library.models.user import User
from smart_library.services.notifications import send_notification, broadcast_notification
from smart_library.utils.decorators import admin_required
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields

notifications_bp = Blueprint('notifications', __name__)


@notifications_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def send():
    """
    Send a notification to one member or to everyone
    ---
    Request body:
    {
        "title": "string",
        "message": "string",
        "type": "general|booking|payment|offer|reminder|...",
        "priority": "low|medium|high",
        "user_id": int (omit when send_to_all),
        "send_to_all": bool
    }
    """
    data = request.get_json(silent=True) or {}

    is_valid, message = validate_required_fields(data, ['title', 'message'])
    if not is_valid:
        return error_response(message, 400)

    notification_type = data.get('type') or 'general'
    priority = data.get('priority') or 'medium'
    try:
        NotificationType(notification_type)
        NotificationPriority(priority)
    except ValueError:
        return error_response('Invalid notification type or priority', 400)

    if parse_bool(data.get('send_to_all')):
        notification = broadcast_notification(data['title'], data['message'], notification_type, priority)
    else:
        if not data.get('user_id') or not db.session.get(User, data['user_id']):
            return error_response('A valid user_id is required unless send_to_all is set', 400)
        notification = send_notification(data['user_id'], data['title'], data['message'], notification_type,
                                         priority)

    if notification is None:
        return error_response('Error sending notification', 500)

    return success_response({'id': notification.id}, 'Notification sent successfully', 201)


@notifications_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_all():
    notifications = Notification.query.order_by(Notification.created_at.desc(), Notification.id.desc()) \
        .limit(100).all()
    data = []
    for notification in notifications:
        item = notification.to_dict()
        item['user_name'] = notification.user.name if notification.user else None
        data.append(item)
    return success_response({'notifications': data})
