from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.plan import Plan
from smart_library.services.notifications import broadcast_notification
from smart_library.utils.decorators import admin_required
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields

plans_bp = Blueprint('plans', __name__)

UPDATABLE_FIELDS = ('name', 'description', 'price', 'duration_days', 'plan_type', 'shift_type',
                    'shift_start_time', 'shift_end_time')


@plans_bp.route('/', methods=['GET'])
def get_plans():
    """Active plans, cheapest first"""
    plans = Plan.query.filter_by(is_active=True).order_by(Plan.price.asc()).all()
    return success_response({'plans': [plan.to_dict() for plan in plans]})


@plans_bp.route('/<int:plan_id>', methods=['GET'])
def get_plan(plan_id):
    plan = db.session.get(Plan, plan_id)
    if not plan:
        return error_response('Plan not found', 404)
    return success_response({'plan': plan.to_dict()})


@plans_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_plan():
    """
    Create a plan and tell every member about it
    ---
    Request body:
    {
        "name": "string",
        "description": "string",
        "price": float,
        "duration_days": int,
        "plan_type": "full_day|half_day",
        "shift_type": "all_day|morning|evening|night",
        "shift_start_time": "HH:MM",
        "shift_end_time": "HH:MM"
    }
    """
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['name', 'price', 'duration_days'])
        if not is_valid:
            return error_response(message, 400)

        price = float(data['price'])
        duration_days = int(data['duration_days'])
        if price < 0 or duration_days <= 0:
            return error_response('Price must be non-negative and duration positive', 400)

        plan = Plan(
            name=data['name'].strip(),
            description=data.get('description'),
            price=price,
            duration_days=duration_days,
            plan_type=data.get('plan_type') or 'full_day',
            shift_type=data.get('shift_type') or 'all_day',
            shift_start_time=data.get('shift_start_time'),
            shift_end_time=data.get('shift_end_time'),
            is_active=parse_bool(data.get('is_active', True))
        )
        db.session.add(plan)
        db.session.commit()
        logger.info('Plan {} created', plan.id)

        broadcast_notification(
            'New Plan Available!',
            f'Check out our new plan: {plan.name} - ₹{price:g} for {duration_days} days',
            type='offer'
        )

        return success_response({'id': plan.id}, 'Plan created successfully', 201)

    except ValueError:
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error creating plan')
        return error_response('Error creating plan', 500)


@plans_bp.route('/<int:plan_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_plan(plan_id):
    try:
        plan = db.session.get(Plan, plan_id)
        if not plan:
            return error_response('Plan not found', 404)

        data = request.get_json(silent=True) or {}
        for field in UPDATABLE_FIELDS:
            if field in data:
                setattr(plan, field, data[field])
        if 'price' in data:
            plan.price = float(data['price'])
        if 'duration_days' in data:
            plan.duration_days = int(data['duration_days'])
        if 'is_active' in data:
            plan.is_active = parse_bool(data['is_active'])

        db.session.commit()
        return success_response(None, 'Plan updated successfully')

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error updating plan')
        return error_response('Error updating plan', 500)


@plans_bp.route('/<int:plan_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_plan(plan_id):
    """Delete a plan; plans with bookings are deactivated instead"""
    plan = db.session.get(Plan, plan_id)
    if not plan:
        return error_response('Plan not found', 404)

    if plan.bookings.first():
        plan.is_active = False
        db.session.commit()
        return success_response(None, 'Plan has bookings and was deactivated')

    db.session.delete(plan)
    db.session.commit()
    return success_response(None, 'Plan deleted successfully')
