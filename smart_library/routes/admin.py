from datetime import date, datetime, time, timedelta
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from sqlalchemy import func, or_, extract
from smart_library import db
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.finance import Expense
from smart_library.models.payment import Payment, PaymentStatus
from smart_library.models.user import User
from smart_library.services.audit import log_admin_action
from smart_library.utils.decorators import admin_required, super_admin_required, get_current_admin
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response

admin_bp = Blueprint('admin', __name__)

EXPIRY_BUCKETS = (('0_3', 0, 3), ('4_7', 4, 7), ('8_15', 8, 15))

COLLECTED_STATUSES = (PaymentStatus.COMPLETED, PaymentStatus.PARTIAL_REFUND)


def _month_bounds(today, months_back):
    """First day of the month `months_back` months before `today`'s month"""
    year, month = today.year, today.month - months_back
    while month <= 0:
        month += 12
        year -= 1
    return date(year, month, 1)


def _sum_payments(start, end):
    total = db.session.query(func.coalesce(func.sum(Payment.amount - Payment.refund_amount), 0)) \
        .filter(Payment.status.in_(COLLECTED_STATUSES),
                Payment.created_at >= datetime.combine(start, time.min),
                Payment.created_at < datetime.combine(end, time.min)) \
        .scalar()
    return round(float(total or 0), 2)


def _sum_expenses(start, end):
    total = db.session.query(func.coalesce(func.sum(Expense.amount), 0)) \
        .filter(Expense.expense_date >= start, Expense.expense_date < end) \
        .scalar()
    return round(float(total or 0), 2)


@admin_bp.route('/dashboard', methods=['GET'])
@jwt_required()
@admin_required
def dashboard():
    """
    Dashboard figures
    ---
    Returns member counts, expiring memberships grouped by days left,
    today's purchases, last month's collection, today's birthdays and
    expense totals.
    """
    today = date.today()
    tomorrow = today + timedelta(days=1)

    active_user_ids = db.session.query(Booking.user_id).filter(
        Booking.status == BookingStatus.ACTIVE, Booking.end_date >= today
    ).distinct()
    total_members = User.query.count()
    active_members = active_user_ids.count()

    expiring = {}
    for key, low, high in EXPIRY_BUCKETS:
        expiring[key] = Booking.query.filter(
            Booking.status == BookingStatus.ACTIVE,
            Booking.end_date >= today + timedelta(days=low),
            Booking.end_date <= today + timedelta(days=high)
        ).count()

    todays_purchases = Booking.query.filter(Booking.booking_date == today,
                                            Booking.status != BookingStatus.CANCELLED).count()

    this_month = _month_bounds(today, 0)
    last_month = _month_bounds(today, 1)
    three_months_ago = _month_bounds(today, 3)

    birthdays = User.query.filter(
        extract('month', User.dob) == today.month,
        extract('day', User.dob) == today.day
    ).all()

    return success_response({
        'total_members': total_members,
        'active_members': active_members,
        'inactive_members': total_members - active_members,
        'expiring': expiring,
        'todays_purchases': todays_purchases,
        'todays_collection': _sum_payments(today, tomorrow),
        'last_month_collection': _sum_payments(last_month, this_month),
        'todays_birthdays': [{'id': u.id, 'name': u.name, 'mobile': u.mobile} for u in birthdays],
        'todays_expense': _sum_expenses(today, tomorrow),
        'last_three_months_expense': _sum_expenses(three_months_ago, this_month)
    })


@admin_bp.route('/members', methods=['GET'])
@jwt_required()
@admin_required
def get_members():
    """
    Members with their latest booking end date
    ---
    Query parameters:
    - search: matches name, email or mobile
    """
    query = User.query
    search = (request.args.get('search') or '').strip()
    if search:
        pattern = f'%{search}%'
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern), User.mobile.ilike(pattern)))

    members = []
    for user in query.order_by(User.created_at.desc(), User.id.desc()).all():
        latest = user.bookings.filter(Booking.status != BookingStatus.CANCELLED) \
            .order_by(Booking.end_date.desc()).first()
        item = user.to_dict()
        item['last_booking_end'] = latest.end_date.isoformat() if latest else None
        item['has_active_booking'] = bool(latest and latest.occupies_seat())
        members.append(item)

    return success_response({'members': members})


@admin_bp.route('/members/<int:user_id>/block', methods=['PUT'])
@jwt_required()
@super_admin_required
def block_member(user_id):
    """Block or unblock a member: {"is_blocked": bool}"""
    user = db.session.get(User, user_id)
    if not user:
        return error_response('User not found', 404)

    data = request.get_json(silent=True) or {}
    if 'is_blocked' not in data:
        return error_response('is_blocked is required', 400)

    user.is_blocked = parse_bool(data['is_blocked'])
    log_admin_action(get_current_admin().id, 'user_blocked' if user.is_blocked else 'user_unblocked',
                     target_user_id=user.id)
    db.session.commit()

    state = 'blocked' if user.is_blocked else 'unblocked'
    return success_response({'user': user.to_dict()}, f'User {state} successfully')
