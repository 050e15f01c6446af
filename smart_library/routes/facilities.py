from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.content import Facility
from smart_library.utils.decorators import admin_required
from smart_library.utils.errors import APIError
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.uploads import save_upload, delete_upload

facilities_bp = Blueprint('facilities', __name__)


def _form_data():
    """Facilities accept JSON or multipart with an optional facility_image file"""
    if request.is_json:
        return request.get_json(silent=True) or {}
    return request.form


@facilities_bp.route('/', methods=['GET'])
def get_facilities():
    facilities = Facility.query.filter_by(is_active=True).order_by(Facility.name.asc()).all()
    return success_response({'facilities': [facility.to_dict() for facility in facilities]})


@facilities_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_facility():
    try:
        data = _form_data()
        if not (data.get('name') or '').strip():
            return error_response('Facility name is required', 400)

        facility = Facility(
            name=data['name'].strip(),
            description=data.get('description'),
            icon=data.get('icon'),
            is_active=parse_bool(data.get('is_active', True))
        )
        image = request.files.get('facility_image')
        if image and image.filename:
            facility.image = save_upload(image, 'facilities', prefix='facility')

        db.session.add(facility)
        db.session.commit()
        return success_response({'id': facility.id}, 'Facility created successfully', 201)

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error creating facility')
        return error_response('Error creating facility', 500)


@facilities_bp.route('/<int:facility_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_facility(facility_id):
    try:
        facility = db.session.get(Facility, facility_id)
        if not facility:
            return error_response('Facility not found', 404)

        data = _form_data()
        for field in ('name', 'description', 'icon'):
            if field in data:
                setattr(facility, field, data[field])
        if 'is_active' in data:
            facility.is_active = parse_bool(data['is_active'])

        image = request.files.get('facility_image')
        if image and image.filename:
            old_image = facility.image
            facility.image = save_upload(image, 'facilities', prefix='facility')
            delete_upload(old_image)

        db.session.commit()
        return success_response(None, 'Facility updated successfully')

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error updating facility')
        return error_response('Error updating facility', 500)


@facilities_bp.route('/<int:facility_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_facility(facility_id):
    facility = db.session.get(Facility, facility_id)
    if not facility:
        return error_response('Facility not found', 404)

    image = facility.image
    db.session.delete(facility)
    db.session.commit()
    delete_upload(image)
    return success_response(None, 'Facility deleted successfully')
