from datetime import date
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.booking import AdvanceBooking, AdvanceBookingStatus, AdvancePaymentStatus
from smart_library.models.plan import Plan
from smart_library.models.seat import Seat
from smart_library.services.notifications import send_notification, send_admin_notification
from smart_library.utils.decorators import user_required, admin_required, get_current_user
from smart_library.utils.pricing import calculate_end_date
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields, validate_date

advance_bookings_bp = Blueprint('advance_bookings', __name__)

HOLDING_STATUSES = (AdvanceBookingStatus.SCHEDULED, AdvanceBookingStatus.ACTIVE)


def _overlapping(seat_id, start_date, end_date, exclude_id=None):
    query = AdvanceBooking.query.filter(
        AdvanceBooking.seat_id == seat_id,
        AdvanceBooking.booking_status.in_(HOLDING_STATUSES),
        AdvanceBooking.start_date <= end_date,
        AdvanceBooking.end_date >= start_date
    )
    if exclude_id is not None:
        query = query.filter(AdvanceBooking.id != exclude_id)
    return query.first()


@advance_bookings_bp.route('/my-bookings', methods=['GET'])
@user_required
def get_my_advance_bookings():
    user = get_current_user()
    bookings = AdvanceBooking.query.filter_by(user_id=user.id) \
        .order_by(AdvanceBooking.start_date.desc()).all()
    return success_response({'bookings': [booking.to_dict() for booking in bookings]})


@advance_bookings_bp.route('/', methods=['POST'])
@user_required
def create_advance_booking():
    """
    Reserve a seat for a future start date
    ---
    Request body:
    {
        "seat_id": int,
        "plan_id": int,
        "start_date": "YYYY-MM-DD",
        "notes": "string (optional)"
    }
    """
    try:
        user = get_current_user()
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['seat_id', 'plan_id', 'start_date'])
        if not is_valid:
            return error_response(message, 400)

        start_date, message = validate_date(data['start_date'], 'start date')
        if start_date is None:
            return error_response(message, 400)
        if start_date <= date.today():
            return error_response('Advance bookings must start in the future', 400)

        plan = Plan.query.filter_by(id=data['plan_id'], is_active=True).first()
        if not plan:
            return error_response('Plan not found or inactive', 404)

        seat = db.session.get(Seat, data['seat_id'])
        if not seat:
            return error_response('Seat not found', 404)

        end_date = calculate_end_date(start_date, plan.duration_days)
        if _overlapping(seat.id, start_date, end_date):
            return error_response('Seat is already booked for the selected dates', 409)

        booking = AdvanceBooking(
            user_id=user.id,
            seat_id=seat.id,
            plan_id=plan.id,
            booking_date=date.today(),
            start_date=start_date,
            end_date=end_date,
            amount=plan.price,
            notes=data.get('notes')
        )
        db.session.add(booking)
        db.session.commit()

        send_admin_notification(
            'New Advance Booking',
            f'{user.name} booked Seat {seat.seat_number} ({plan.name}) from {start_date.isoformat()}',
            type='booking', related_id=booking.id
        )

        return success_response({'id': booking.id, 'booking': booking.to_dict()},
                                'Advance booking created successfully', 201)

    except Exception:
        db.session.rollback()
        logger.exception('Error creating advance booking')
        return error_response('Error creating advance booking', 500)


@advance_bookings_bp.route('/<int:booking_id>/cancel', methods=['PUT'])
@user_required
def cancel_advance_booking(booking_id):
    user = get_current_user()
    booking = AdvanceBooking.query.filter_by(id=booking_id, user_id=user.id).first()
    if not booking:
        return error_response('Advance booking not found', 404)

    if booking.booking_status != AdvanceBookingStatus.SCHEDULED:
        return error_response('Only scheduled bookings can be cancelled', 400)

    booking.booking_status = AdvanceBookingStatus.CANCELLED
    db.session.commit()
    return success_response(None, 'Advance booking cancelled successfully')


@advance_bookings_bp.route('/admin/all', methods=['GET'])
@jwt_required()
@admin_required
def get_all_advance_bookings():
    bookings = AdvanceBooking.query.order_by(AdvanceBooking.start_date.asc()).all()
    return success_response({'bookings': [booking.to_dict(include_user=True) for booking in bookings]})


@advance_bookings_bp.route('/admin/<int:booking_id>/status', methods=['PUT'])
@jwt_required()
@admin_required
def update_advance_booking_status(booking_id):
    """
    Update booking and/or payment status
    ---
    Request body:
    {
        "booking_status": "scheduled|active|completed|cancelled" (optional),
        "payment_status": "pending|paid|refunded" (optional)
    }
    """
    booking = db.session.get(AdvanceBooking, booking_id)
    if not booking:
        return error_response('Advance booking not found', 404)

    data = request.get_json(silent=True) or {}
    try:
        if data.get('booking_status'):
            booking.booking_status = AdvanceBookingStatus(data['booking_status'])
        if data.get('payment_status'):
            booking.payment_status = AdvancePaymentStatus(data['payment_status'])
    except ValueError:
        db.session.rollback()
        return error_response('Invalid status', 400)

    db.session.commit()

    send_notification(
        booking.user_id, 'Advance Booking Updated',
        f'Your advance booking for Seat {booking.seat.seat_number} is now {booking.booking_status.value}.',
        type='booking'
    )
    return success_response(None, 'Advance booking updated successfully')


@advance_bookings_bp.route('/admin/<int:booking_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_advance_booking(booking_id):
    booking = db.session.get(AdvanceBooking, booking_id)
    if not booking:
        return error_response('Advance booking not found', 404)

    db.session.delete(booking)
    db.session.commit()
    return success_response(None, 'Advance booking deleted successfully')
