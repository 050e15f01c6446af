from datetime import date
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from sqlalchemy import or_
from smart_library import db
from smart_library.models.content import Banner
from smart_library.utils.decorators import admin_required
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields, validate_date

banners_bp = Blueprint('banners', __name__)

TEXT_FIELDS = ('title', 'description', 'image_url', 'link_url')


def _apply_banner_fields(banner, data):
    for field in TEXT_FIELDS:
        if field in data:
            setattr(banner, field, data[field])
    if 'display_order' in data:
        banner.display_order = int(data['display_order'] or 0)
    if 'is_active' in data:
        banner.is_active = parse_bool(data['is_active'])
    for field in ('start_date', 'end_date'):
        if field in data:
            if not data[field]:
                setattr(banner, field, None)
                continue
            value, message = validate_date(data[field], field)
            if value is None:
                return message
            setattr(banner, field, value)
    return None


@banners_bp.route('/', methods=['GET'])
def get_banners():
    """Active banners whose date window includes today"""
    today = date.today()
    banners = Banner.query.filter(
        Banner.is_active.is_(True),
        or_(Banner.start_date.is_(None), Banner.start_date <= today),
        or_(Banner.end_date.is_(None), Banner.end_date >= today)
    ).order_by(Banner.display_order.asc(), Banner.created_at.desc()).all()
    return success_response({'banners': [banner.to_dict() for banner in banners]})


@banners_bp.route('/admin/all', methods=['GET'])
@jwt_required()
@admin_required
def get_all_banners():
    banners = Banner.query.order_by(Banner.display_order.asc(), Banner.created_at.desc()).all()
    return success_response({'banners': [banner.to_dict() for banner in banners]})


@banners_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_banner():
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['title', 'image_url'])
        if not is_valid:
            return error_response('Title and image URL are required', 400)

        banner = Banner(is_active=True, display_order=0)
        message = _apply_banner_fields(banner, data)
        if message:
            return error_response(message, 400)

        db.session.add(banner)
        db.session.commit()
        return success_response({'id': banner.id}, 'Banner created successfully', 201)

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error creating banner')
        return error_response('Error creating banner', 500)


@banners_bp.route('/<int:banner_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_banner(banner_id):
    """Partial update: only supplied fields change"""
    try:
        banner = db.session.get(Banner, banner_id)
        if not banner:
            return error_response('Banner not found', 404)

        message = _apply_banner_fields(banner, request.get_json(silent=True) or {})
        if message:
            db.session.rollback()
            return error_response(message, 400)

        db.session.commit()
        return success_response(None, 'Banner updated successfully')

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error updating banner')
        return error_response('Error updating banner', 500)


@banners_bp.route('/<int:banner_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_banner(banner_id):
    banner = db.session.get(Banner, banner_id)
    if not banner:
        return error_response('Banner not found', 404)

    db.session.delete(banner)
    db.session.commit()
    return success_response(None, 'Banner deleted successfully')
