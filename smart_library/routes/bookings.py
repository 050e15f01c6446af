from datetime import date
from flask import Blueprint, request, current_app
from loguru import logger
from smart_library import db
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.finance import GatewaySettings
from smart_library.models.plan import Plan
from smart_library.models.promotion import Coupon
from smart_library.models.seat import Seat, SeatStatus
from smart_library.services.bookings import seat_is_free
from smart_library.services.notifications import send_notification, send_admin_notification
from smart_library.utils.decorators import user_required, get_current_user
from smart_library.utils.pricing import calculate_end_date, calculate_checkout_totals
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields, validate_date

bookings_bp = Blueprint('bookings', __name__)


@bookings_bp.route('/', methods=['GET'])
@user_required
def get_bookings():
    """Own bookings with plan, seat and payment/refund state"""
    user = get_current_user()
    bookings = Booking.query.filter_by(user_id=user.id).order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    return success_response({'bookings': [booking.to_dict() for booking in bookings]})


@bookings_bp.route('/', methods=['POST'])
@user_required
def create_booking():
    """
    Reserve a seat under a plan; payment confirms it
    ---
    Request body:
    {
        "plan_id": int,
        "seat_id": int,
        "start_date": "YYYY-MM-DD (optional, defaults to today)",
        "coupon_code": "string (optional)"
    }

    Amounts are computed here: GST on the plan price, minus any coupon
    discount on the plan price.
    """
    try:
        user = get_current_user()
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['plan_id', 'seat_id'])
        if not is_valid:
            return error_response(message, 400)

        start_date = date.today()
        if data.get('start_date'):
            start_date, message = validate_date(data['start_date'], 'start date')
            if start_date is None:
                return error_response(message, 400)
        if start_date < date.today():
            return error_response('Start date cannot be in the past', 400)

        plan = Plan.query.filter_by(id=data['plan_id'], is_active=True).first()
        if not plan:
            return error_response('Plan not found or inactive', 404)

        seat = db.session.get(Seat, data['seat_id'])
        if not seat:
            return error_response('Seat not found', 404)

        if not seat_is_free(seat):
            return error_response('Seat is already booked', 409)

        coupon = None
        discount = 0.0
        if data.get('coupon_code'):
            coupon = Coupon.query.filter_by(code=str(data['coupon_code']).strip().upper()).first()
            if not coupon:
                return error_response('Invalid or expired coupon code', 400)
            is_valid, message = coupon.is_valid(plan.price)
            if not is_valid:
                return error_response(message, 400)
            discount = coupon.calculate_discount(plan.price)

        gst_percentage = GatewaySettings.gst_percentage_or_default(current_app.config['DEFAULT_GST_PERCENTAGE'])
        totals = calculate_checkout_totals(plan.price, discount, gst_percentage)

        booking = Booking(
            user_id=user.id,
            plan_id=plan.id,
            seat_id=seat.id,
            coupon_id=coupon.id if coupon else None,
            booking_date=date.today(),
            start_date=start_date,
            end_date=calculate_end_date(start_date, plan.duration_days),
            status=BookingStatus.PENDING,
            **totals
        )
        db.session.add(booking)
        seat.seat_status = SeatStatus.RESERVED
        db.session.commit()
        logger.info('Booking {} created for user {} on seat {}', booking.id, user.id, seat.seat_number)

        send_notification(
            user.id, 'Booking Created',
            f'Your booking for {plan.name} - Seat {seat.seat_number} has been created. Complete payment to confirm.',
            type='booking'
        )
        send_admin_notification(
            'New Seat Booking',
            f"{user.name} ({user.email}) booked {plan.name} - Seat {seat.seat_number} for ₹{totals['final_amount']:.2f}",
            type='booking', related_id=booking.id
        )

        return success_response({
            'id': booking.id,
            'booking_id': booking.id,
            'amount': totals['final_amount'],
            'booking': booking.to_dict()
        }, 'Booking created successfully', 201)

    except Exception:
        db.session.rollback()
        logger.exception('Booking error')
        return error_response('Error creating booking', 500)
