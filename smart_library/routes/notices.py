from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.content import Notice
from smart_library.services.notifications import broadcast_notification
from smart_library.utils.decorators import admin_required
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields

notices_bp = Blueprint('notices', __name__)


@notices_bp.route('/', methods=['GET'])
def get_notices():
    """Ten newest active notices"""
    notices = Notice.query.filter_by(is_active=True) \
        .order_by(Notice.created_at.desc(), Notice.id.desc()).limit(10).all()
    return success_response({'notices': [notice.to_dict() for notice in notices]})


@notices_bp.route('/admin', methods=['GET'])
@notices_bp.route('/admin/all', methods=['GET'])
@jwt_required()
@admin_required
def get_all_notices():
    notices = Notice.query.order_by(Notice.created_at.desc(), Notice.id.desc()).all()
    return success_response({'notices': [notice.to_dict() for notice in notices]})


@notices_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_notice():
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['title', 'content'])
        if not is_valid:
            return error_response(message, 400)

        notice = Notice(
            title=data['title'].strip(),
            content=data['content'],
            is_active=parse_bool(data.get('is_active', True))
        )
        db.session.add(notice)
        db.session.commit()

        if notice.is_active:
            broadcast_notification(f'Notice: {notice.title}', notice.content, type='general')

        return success_response({'id': notice.id}, 'Notice created successfully', 201)

    except Exception:
        db.session.rollback()
        logger.exception('Error creating notice')
        return error_response('Error creating notice', 500)


@notices_bp.route('/<int:notice_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_notice(notice_id):
    notice = db.session.get(Notice, notice_id)
    if not notice:
        return error_response('Notice not found', 404)

    data = request.get_json(silent=True) or {}
    if 'title' in data:
        notice.title = data['title']
    if 'content' in data:
        notice.content = data['content']
    if 'is_active' in data:
        notice.is_active = parse_bool(data['is_active'])

    db.session.commit()
    return success_response(None, 'Notice updated successfully')


@notices_bp.route('/<int:notice_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_notice(notice_id):
    notice = db.session.get(Notice, notice_id)
    if not notice:
        return error_response('Notice not found', 404)

    db.session.delete(notice)
    db.session.commit()
    return success_response(None, 'Notice deleted successfully')
