from datetime import timedelta
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.booking import Booking, BookingStatus, BookingModification
from smart_library.models.seat import Seat, SeatStatus
from smart_library.models.user import User
from smart_library.models.wallet import WalletTransaction
from smart_library.services.audit import log_admin_action
from smart_library.services.bookings import seat_is_free, release_seat
from smart_library.services.notifications import send_notification
from smart_library.services.refunds import auto_refund, cancel_booking
from smart_library.services.wallet import credit_wallet, debit_wallet
from smart_library.utils.decorators import admin_required, get_current_admin
from smart_library.utils.errors import APIError, ConflictError, NotFoundError
from smart_library.utils.helpers import parse_bool
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_positive_amount

user_control_bp = Blueprint('user_control', __name__)


def _get_user(user_id):
    user = db.session.get(User, user_id)
    if not user:
        raise NotFoundError('User not found')
    return user


def _get_booking(user_id, booking_id):
    booking = Booking.query.filter_by(id=booking_id, user_id=user_id).first()
    if not booking:
        raise NotFoundError('Booking not found')
    return booking


def _record_modification(booking, admin, modification_type, old_value, new_value, reason):
    db.session.add(BookingModification(
        booking_id=booking.id,
        admin_id=admin.id,
        modification_type=modification_type,
        old_value=old_value,
        new_value=new_value,
        reason=reason
    ))


@user_control_bp.route('/<int:user_id>/wallet', methods=['GET'])
@jwt_required()
@admin_required
def get_wallet(user_id):
    user = _get_user(user_id)
    transactions = WalletTransaction.query.filter_by(user_id=user.id) \
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc()).limit(50).all()

    return success_response({
        'user': {
            'id': user.id,
            'name': user.name,
            'email': user.email,
            'wallet_balance': float(user.wallet_balance or 0)
        },
        'transactions': [transaction.to_dict() for transaction in transactions]
    })


def _adjust_wallet(user_id, direction):
    admin = get_current_admin()
    user = _get_user(user_id)
    data = request.get_json(silent=True) or {}

    amount, message = validate_positive_amount(data.get('amount'))
    if amount is None:
        return error_response(message, 400)

    reason = data.get('reason')
    if direction == 'credit':
        transaction = credit_wallet(user, amount, 'admin_credit',
                                    description=reason or f'Admin credited ₹{amount:.2f} to wallet')
    else:
        transaction = debit_wallet(user, amount, 'admin_debit',
                                   description=reason or f'Admin debited ₹{amount:.2f} from wallet')

    log_admin_action(admin.id, f'wallet_{direction}', target_user_id=user.id,
                     details={'amount': amount, 'reason': reason,
                              'balance_after': float(transaction.balance_after)})
    db.session.commit()

    if direction == 'credit':
        title, verb = 'Wallet Credited', 'credited to'
    else:
        title, verb = 'Wallet Debited', 'debited from'
    send_notification(
        user.id, title,
        f'₹{amount:.2f} has been {verb} your wallet. {reason or ""}'.strip(),
        type='payment'
    )

    return success_response({
        'new_balance': float(transaction.balance_after),
        'transaction': transaction.to_dict()
    }, f'Wallet {direction}ed successfully')


@user_control_bp.route('/<int:user_id>/wallet/credit', methods=['POST'])
@jwt_required()
@admin_required
def credit(user_id):
    """Add money to a member's wallet: {"amount": number, "reason": "string"}"""
    return _adjust_wallet(user_id, 'credit')


@user_control_bp.route('/<int:user_id>/wallet/debit', methods=['POST'])
@jwt_required()
@admin_required
def debit(user_id):
    """Take money from a member's wallet; rejected when the balance does not cover it"""
    return _adjust_wallet(user_id, 'debit')


@user_control_bp.route('/<int:user_id>/bookings', methods=['GET'])
@jwt_required()
@admin_required
def get_bookings(user_id):
    user = _get_user(user_id)
    bookings = user.bookings.order_by(Booking.created_at.desc(), Booking.id.desc()).all()
    return success_response({'bookings': [booking.to_dict() for booking in bookings]})


@user_control_bp.route('/<int:user_id>/bookings/<int:booking_id>/extend', methods=['POST'])
@jwt_required()
@admin_required
def extend_booking(user_id, booking_id):
    """
    Push a booking's end date out
    ---
    Request body:
    {
        "extend_days": int,
        "reason": "string (optional)"
    }
    """
    admin = get_current_admin()
    booking = _get_booking(user_id, booking_id)
    data = request.get_json(silent=True) or {}

    try:
        extend_days = int(data.get('extend_days'))
    except (TypeError, ValueError):
        extend_days = 0
    if extend_days <= 0:
        return error_response('Invalid extension days', 400)

    if booking.status == BookingStatus.CANCELLED:
        return error_response('Cannot extend a cancelled booking', 400)

    old_end_date = booking.end_date
    booking.end_date = old_end_date + timedelta(days=extend_days)
    reason = data.get('reason')

    _record_modification(booking, admin, 'extend',
                         {'end_date': old_end_date.isoformat()},
                         {'end_date': booking.end_date.isoformat(), 'extended_days': extend_days},
                         reason or f'Extended by {extend_days} days')
    log_admin_action(admin.id, 'booking_extend', target_user_id=user_id, target_booking_id=booking.id,
                     details={'extend_days': extend_days, 'old_end_date': old_end_date.isoformat(),
                              'new_end_date': booking.end_date.isoformat()})
    db.session.commit()

    send_notification(
        user_id, 'Booking Extended',
        f'Your booking has been extended by {extend_days} days. '
        f'New end date: {booking.end_date.strftime("%d/%m/%Y")}',
        type='booking'
    )

    return success_response({
        'new_end_date': booking.end_date.isoformat(),
        'extended_days': extend_days
    }, 'Booking extended successfully')


@user_control_bp.route('/<int:user_id>/bookings/<int:booking_id>/change-seat', methods=['POST'])
@jwt_required()
@admin_required
def change_seat(user_id, booking_id):
    """Move a booking to another free seat: {"new_seat_id": int, "reason": "string"}"""
    admin = get_current_admin()
    booking = _get_booking(user_id, booking_id)
    data = request.get_json(silent=True) or {}

    new_seat = db.session.get(Seat, data.get('new_seat_id')) if data.get('new_seat_id') else None
    if not new_seat:
        return error_response('New seat not found', 404)

    if new_seat.id == booking.seat_id:
        return error_response('Booking is already on this seat', 400)

    if not seat_is_free(new_seat, exclude_booking_id=booking.id):
        raise ConflictError('New seat is already occupied')

    old_seat = booking.seat
    reason = data.get('reason')

    booking.seat = new_seat
    db.session.flush()
    release_seat(old_seat, exclude_booking_id=booking.id)
    if booking.status in (BookingStatus.ACTIVE, BookingStatus.PENDING):
        new_seat.seat_status = SeatStatus.OCCUPIED if booking.status == BookingStatus.ACTIVE \
            else SeatStatus.RESERVED

    _record_modification(booking, admin, 'seat_change',
                         {'seat_id': old_seat.id, 'seat_number': old_seat.seat_number},
                         {'seat_id': new_seat.id, 'seat_number': new_seat.seat_number},
                         reason or 'Seat changed by admin')
    log_admin_action(admin.id, 'seat_change', target_user_id=user_id, target_booking_id=booking.id,
                     details={'old_seat': old_seat.seat_number, 'new_seat': new_seat.seat_number,
                              'reason': reason})
    db.session.commit()

    message = f'Your seat has been changed from {old_seat.seat_number} to {new_seat.seat_number}.'
    if reason:
        message += f' Reason: {reason}'
    send_notification(user_id, 'Seat Changed', message, type='booking')

    return success_response({
        'old_seat': old_seat.seat_number,
        'new_seat': new_seat.seat_number
    }, 'Seat changed successfully')


@user_control_bp.route('/<int:user_id>/bookings/<int:booking_id>/cancel', methods=['POST'])
@jwt_required()
@admin_required
def cancel(user_id, booking_id):
    """
    Cancel a member's booking
    ---
    Request body:
    {
        "reason": "string (optional)",
        "process_refund": bool
    }

    With `process_refund` the booking's payment is refunded to the wallet
    by the notice-period tiers; a booking that is not eligible is still
    cancelled and the response says why nothing was refunded.
    """
    try:
        admin = get_current_admin()
        booking = _get_booking(user_id, booking_id)
        data = request.get_json(silent=True) or {}
        reason = data.get('reason')
        old_status = booking.status

        cancel_booking(booking)
        _record_modification(booking, admin, 'cancel',
                             {'status': old_status.value}, {'status': BookingStatus.CANCELLED.value},
                             reason or 'Cancelled by admin')
        log_admin_action(admin.id, 'booking_cancel', target_user_id=user_id, target_booking_id=booking.id,
                         details={'reason': reason, 'seat_number': booking.seat.seat_number})

        refund = None
        refund_message = None
        if parse_bool(data.get('process_refund')):
            try:
                refund = auto_refund(booking, admin.id)
            except APIError as e:
                refund_message = e.message

        db.session.commit()

        message = f'Your booking for seat {booking.seat.seat_number} has been cancelled by admin.'
        if reason:
            message += f' Reason: {reason}'
        if refund:
            message += f' ₹{float(refund.refund_amount):.2f} has been credited to your wallet.'
        send_notification(user_id, 'Booking Cancelled', message, type='booking', priority='high')

        return success_response({
            'refund': refund.to_dict() if refund else None,
            'refund_message': refund_message
        }, 'Booking cancelled successfully')

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error cancelling booking {}', booking_id)
        return error_response('Error cancelling booking', 500)
