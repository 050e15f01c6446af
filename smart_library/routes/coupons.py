from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.booking import Booking
from smart_library.models.promotion import Coupon, DiscountType
from smart_library.utils.decorators import user_required, admin_required
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields, validate_date

coupons_bp = Blueprint('coupons', __name__)


def _apply_coupon_fields(coupon, data):
    """Copy supplied fields onto a coupon; returns an error message or None"""
    if 'code' in data:
        coupon.code = str(data['code']).strip().upper()
    if 'description' in data:
        coupon.description = data['description']
    if 'discount_type' in data:
        try:
            coupon.discount_type = DiscountType(data['discount_type'])
        except ValueError:
            return 'Discount type must be flat or percentage'
    if 'discount_value' in data:
        coupon.discount_value = float(data['discount_value'])
        if coupon.discount_value <= 0:
            return 'Discount value must be positive'
    if 'min_purchase_amount' in data:
        coupon.min_purchase_amount = float(data['min_purchase_amount'] or 0)
    if 'max_discount_amount' in data:
        value = data['max_discount_amount']
        coupon.max_discount_amount = float(value) if value not in (None, '') else None
    if 'usage_limit' in data:
        value = data['usage_limit']
        coupon.usage_limit = int(value) if value not in (None, '') else None
    for field in ('valid_from', 'valid_until'):
        if field in data:
            value, message = validate_date(data[field], field)
            if value is None:
                return message
            setattr(coupon, field, value)
    if 'is_active' in data:
        coupon.is_active = parse_bool(data['is_active'])

    if coupon.discount_type == DiscountType.PERCENTAGE and float(coupon.discount_value) > 100:
        return 'Percentage discount cannot exceed 100'
    if coupon.valid_from and coupon.valid_until and coupon.valid_from > coupon.valid_until:
        return 'valid_until must be on or after valid_from'
    return None


@coupons_bp.route('/validate', methods=['POST'])
@user_required
def validate_coupon():
    """
    Check a coupon against a purchase amount
    ---
    Request body:
    {
        "code": "string",
        "amount": float
    }
    """
    data = request.get_json(silent=True) or {}

    is_valid, message = validate_required_fields(data, ['code', 'amount'])
    if not is_valid:
        return error_response(message, 400)

    try:
        amount = float(data['amount'])
    except (TypeError, ValueError):
        return error_response('Invalid amount', 400)

    coupon = Coupon.query.filter_by(code=str(data['code']).strip().upper()).first()
    if not coupon:
        return error_response('Invalid or expired coupon code', 400)

    is_valid, message = coupon.is_valid(amount)
    if not is_valid:
        return error_response(message, 400)

    return success_response({
        'coupon': {
            'id': coupon.id,
            'code': coupon.code,
            'discount_type': coupon.discount_type.value,
            'discount_value': float(coupon.discount_value),
            'discount_amount': coupon.calculate_discount(amount)
        }
    })


@coupons_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_coupon():
    """
    Create a coupon
    ---
    Request body:
    {
        "code": "string",
        "description": "string",
        "discount_type": "flat|percentage",
        "discount_value": float,
        "min_purchase_amount": float (optional),
        "max_discount_amount": float (optional),
        "usage_limit": int (optional, null for unlimited),
        "valid_from": "YYYY-MM-DD",
        "valid_until": "YYYY-MM-DD"
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        required_fields = ['code', 'discount_type', 'discount_value', 'valid_from', 'valid_until']
        is_valid, message = validate_required_fields(data, required_fields)
        if not is_valid:
            return error_response(message, 400)

        if Coupon.query.filter_by(code=str(data['code']).strip().upper()).first():
            return error_response('Coupon code already exists', 400)

        coupon = Coupon(used_count=0, is_active=True, min_purchase_amount=0.0)
        message = _apply_coupon_fields(coupon, data)
        if message:
            return error_response(message, 400)

        db.session.add(coupon)
        db.session.commit()

        return success_response({'id': coupon.id}, 'Coupon created successfully', 201)

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error creating coupon')
        return error_response('Error creating coupon', 500)


@coupons_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_coupons():
    coupons = Coupon.query.order_by(Coupon.created_at.desc(), Coupon.id.desc()).all()
    return success_response({'coupons': [coupon.to_dict() for coupon in coupons]})


@coupons_bp.route('/<int:coupon_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_coupon(coupon_id):
    try:
        coupon = db.session.get(Coupon, coupon_id)
        if not coupon:
            return error_response('Coupon not found', 404)

        data = request.get_json(silent=True) or {}
        if 'code' in data:
            code = str(data['code']).strip().upper()
            if Coupon.query.filter(Coupon.code == code, Coupon.id != coupon.id).first():
                return error_response('Coupon code already exists', 400)

        message = _apply_coupon_fields(coupon, data)
        if message:
            db.session.rollback()
            return error_response(message, 400)

        db.session.commit()
        return success_response(None, 'Coupon updated successfully')

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error updating coupon')
        return error_response('Error updating coupon', 500)


@coupons_bp.route('/<int:coupon_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_coupon(coupon_id):
    coupon = db.session.get(Coupon, coupon_id)
    if not coupon:
        return error_response('Coupon not found', 404)

    if coupon.used_count or Booking.query.filter_by(coupon_id=coupon.id).first():
        coupon.is_active = False
        db.session.commit()
        return success_response(None, 'Coupon has been used and was deactivated')

    db.session.delete(coupon)
    db.session.commit()
    return success_response(None, 'Coupon deleted successfully')
