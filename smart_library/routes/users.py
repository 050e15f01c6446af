from flask import Blueprint, request
from loguru import logger
from smart_library import db
from smart_library.models.notification import Notification
from smart_library.models.user import Gender
from smart_library.utils.decorators import user_required, get_current_user
from smart_library.utils.errors import APIError
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.uploads import save_upload
from smart_library.utils.validators import validate_date, validate_gender

users_bp = Blueprint('users', __name__)


@users_bp.route('/profile', methods=['GET'])
@user_required
def get_profile():
    return success_response({'user': get_current_user().to_dict()})


@users_bp.route('/profile', methods=['PUT'])
@user_required
def update_profile():
    """
    Update name, date of birth and gender.
    Accepts JSON or multipart form data with an optional `profile_image` file.
    """
    try:
        user = get_current_user()
        data = request.get_json(silent=True) if request.is_json else request.form
        data = data or {}

        if data.get('name'):
            user.name = data['name'].strip()

        if data.get('dob'):
            dob, message = validate_date(data['dob'], 'date of birth')
            if dob is None:
                return error_response(message, 400)
            user.dob = dob

        if data.get('gender'):
            is_valid, message = validate_gender(data['gender'])
            if not is_valid:
                return error_response(message, 400)
            user.gender = Gender(data['gender'])

        image = request.files.get('profile_image')
        if image and image.filename:
            user.profile_image = save_upload(image, 'profiles', prefix='profile')

        db.session.commit()
        return success_response({'user': user.to_dict()}, 'Profile updated successfully')

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error updating profile')
        return error_response('Error updating profile', 500)


@users_bp.route('/notifications', methods=['GET'])
@user_required
def get_notifications():
    """Own and broadcast notifications, newest first"""
    user = get_current_user()
    notifications = Notification.query.filter(
        (Notification.user_id == user.id) | (Notification.send_to_all.is_(True))
    ).order_by(Notification.created_at.desc(), Notification.id.desc()).limit(50).all()

    return success_response({'notifications': [n.to_dict() for n in notifications]})


@users_bp.route('/notifications/<int:notification_id>/read', methods=['PUT'])
@user_required
def mark_notification_read(notification_id):
    user = get_current_user()
    notification = Notification.query.filter_by(id=notification_id, user_id=user.id).first()
    if not notification:
        return error_response('Notification not found', 404)

    notification.is_read = True
    db.session.commit()
    return success_response(None, 'Notification marked as read')
