from datetime import date, datetime, time, timedelta
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from sqlalchemy import func
from smart_library import db
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.payment import Payment, PaymentStatus
from smart_library.models.seat import Seat, SeatStatus
from smart_library.models.user import User
from smart_library.utils.decorators import admin_required
from smart_library.utils.responses import success_response, error_response

reports_bp = Blueprint('reports', __name__)

PERIODS = ('today', 'week', 'month', 'year', 'all')
TREND_DAYS = 7


def period_start(period, today=None):
    """First day covered by a report period; None for `all`"""
    today = today or date.today()
    if period == 'today':
        return today
    if period == 'week':
        return today - timedelta(days=7)
    if period == 'month':
        return today - timedelta(days=30)
    if period == 'year':
        return today - timedelta(days=365)
    return None


def _revenue(start=None, end=None):
    query = db.session.query(func.coalesce(func.sum(Payment.amount - Payment.refund_amount), 0)) \
        .filter(Payment.status.in_([PaymentStatus.COMPLETED, PaymentStatus.PARTIAL_REFUND]))
    if start is not None:
        query = query.filter(Payment.created_at >= datetime.combine(start, time.min))
    if end is not None:
        query = query.filter(Payment.created_at < datetime.combine(end, time.min))
    return round(float(query.scalar() or 0), 2)


@reports_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_reports():
    """
    Summary report
    ---
    Query parameters:
    - period: today|week|month|year|all (default month)
    """
    period = request.args.get('period', 'month')
    if period not in PERIODS:
        return error_response(f'Invalid period. Use one of: {", ".join(PERIODS)}', 400)

    today = date.today()
    start = period_start(period, today)

    users = User.query
    bookings = Booking.query
    if start is not None:
        users = users.filter(User.created_at >= datetime.combine(start, time.min))
        bookings = bookings.filter(Booking.booking_date >= start)

    active_members = db.session.query(Booking.user_id).filter(
        Booking.status == BookingStatus.ACTIVE, Booking.end_date >= today
    ).distinct().count()

    seats = {'total': Seat.query.count()}
    for status in SeatStatus:
        seats[status.value] = Seat.query.filter_by(seat_status=status).count()

    booking_trend = []
    revenue_trend = []
    for offset in range(TREND_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        booking_trend.append({
            'date': day.isoformat(),
            'count': Booking.query.filter(Booking.booking_date == day).count()
        })
        revenue_trend.append({
            'date': day.isoformat(),
            'amount': _revenue(day, day + timedelta(days=1))
        })

    return success_response({
        'period': period,
        'new_users': users.count(),
        'total_bookings': bookings.count(),
        'cancelled_bookings': bookings.filter(Booking.status == BookingStatus.CANCELLED).count(),
        'revenue': _revenue(start),
        'active_members': active_members,
        'seats': seats,
        'booking_trend': booking_trend,
        'revenue_trend': revenue_trend
    })
