from datetime import date
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.promotion import Offer, DiscountType
from smart_library.services.notifications import broadcast_notification
from smart_library.utils.decorators import admin_required
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields, validate_date

offers_bp = Blueprint('offers', __name__)


def _apply_offer_fields(offer, data):
    if 'title' in data:
        offer.title = data['title'].strip()
    if 'description' in data:
        offer.description = data['description']
    if 'discount_type' in data:
        try:
            offer.discount_type = DiscountType(data['discount_type'])
        except ValueError:
            return 'Discount type must be flat or percentage'
    if 'discount_value' in data:
        offer.discount_value = float(data['discount_value'])
    if 'code' in data:
        offer.code = str(data['code']).strip().upper() or None
    if 'min_amount' in data:
        offer.min_amount = float(data['min_amount'] or 0)
    if 'max_discount' in data:
        value = data['max_discount']
        offer.max_discount = float(value) if value not in (None, '') else None
    for field in ('valid_from', 'valid_until'):
        if field in data:
            value, message = validate_date(data[field], field)
            if value is None:
                return message
            setattr(offer, field, value)
    if 'is_active' in data:
        offer.is_active = parse_bool(data['is_active'])
    return None


@offers_bp.route('/', methods=['GET'])
def get_offers():
    """Offers running today"""
    today = date.today()
    offers = Offer.query.filter(
        Offer.is_active.is_(True),
        Offer.valid_from <= today,
        Offer.valid_until >= today
    ).order_by(Offer.created_at.desc()).all()
    return success_response({'offers': [offer.to_dict() for offer in offers]})


@offers_bp.route('/code/<code>', methods=['GET'])
def get_offer_by_code(code):
    offer = Offer.query.filter_by(code=code.strip().upper()).first()
    if not offer or not offer.is_current():
        return error_response('Invalid or expired offer code', 404)
    return success_response({'offer': offer.to_dict()})


@offers_bp.route('/admin/all', methods=['GET'])
@jwt_required()
@admin_required
def get_all_offers():
    offers = Offer.query.order_by(Offer.created_at.desc(), Offer.id.desc()).all()
    return success_response({'offers': [offer.to_dict() for offer in offers]})


@offers_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_offer():
    """
    Create an offer and announce it to members
    ---
    Request body:
    {
        "title": "string",
        "description": "string",
        "discount_type": "flat|percentage",
        "discount_value": float,
        "code": "string (optional)",
        "min_amount": float (optional),
        "max_discount": float (optional),
        "valid_from": "YYYY-MM-DD",
        "valid_until": "YYYY-MM-DD"
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        required_fields = ['title', 'discount_type', 'discount_value', 'valid_from', 'valid_until']
        is_valid, message = validate_required_fields(data, required_fields)
        if not is_valid:
            return error_response(message, 400)

        code = str(data.get('code') or '').strip().upper()
        if code and Offer.query.filter_by(code=code).first():
            return error_response('Offer code already exists', 400)

        offer = Offer(is_active=True, min_amount=0.0)
        message = _apply_offer_fields(offer, data)
        if message:
            return error_response(message, 400)

        db.session.add(offer)
        db.session.commit()

        broadcast_notification('New Offer Available!', f'{offer.title}: {offer.description or ""}'.strip(),
                               type='offer')

        return success_response({'id': offer.id}, 'Offer created successfully', 201)

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error creating offer')
        return error_response('Error creating offer', 500)


@offers_bp.route('/<int:offer_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_offer(offer_id):
    try:
        offer = db.session.get(Offer, offer_id)
        if not offer:
            return error_response('Offer not found', 404)

        data = request.get_json(silent=True) or {}
        code = str(data.get('code') or '').strip().upper()
        if code and Offer.query.filter(Offer.code == code, Offer.id != offer.id).first():
            return error_response('Offer code already exists', 400)

        message = _apply_offer_fields(offer, data)
        if message:
            db.session.rollback()
            return error_response(message, 400)

        db.session.commit()
        return success_response(None, 'Offer updated successfully')

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error updating offer')
        return error_response('Error updating offer', 500)


@offers_bp.route('/<int:offer_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_offer(offer_id):
    offer = db.session.get(Offer, offer_id)
    if not offer:
        return error_response('Offer not found', 404)

    db.session.delete(offer)
    db.session.commit()
    return success_response(None, 'Offer deleted successfully')
