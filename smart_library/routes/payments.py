from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.payment import Payment, PaymentStatus
from smart_library.models.seat import SeatStatus
from smart_library.services.bookings import seat_is_free
from smart_library.services.notifications import send_notification, send_admin_notification
from smart_library.services.refunds import process_refund
from smart_library.services.wallet import debit_wallet
from smart_library.utils.decorators import user_required, admin_required, get_current_user, get_current_admin
from smart_library.utils.errors import APIError, ConflictError
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields

payments_bp = Blueprint('payments', __name__)

AMOUNT_TOLERANCE = 0.01


@payments_bp.route('/process', methods=['POST'])
@user_required
def process_payment():
    """
    Pay for a pending booking
    ---
    Request body:
    {
        "booking_id": int,
        "amount": float,
        "payment_gateway": "wallet|upi|card|...",
        "payment_response": {"transaction_id": "string", ...}
    }

    Wallet payments debit the member's wallet and are rejected when the
    balance does not cover the booking.
    """
    try:
        user = get_current_user()
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['booking_id', 'amount', 'payment_gateway'])
        if not is_valid:
            return error_response(message, 400)

        booking = db.session.get(Booking, data['booking_id'])
        if not booking:
            return error_response('Booking not found', 404)

        if booking.user_id != user.id:
            return error_response('You do not have permission to pay for this booking', 403)

        if booking.status != BookingStatus.PENDING or \
                booking.payments.filter_by(status=PaymentStatus.COMPLETED).first():
            return error_response('Booking is already paid or no longer payable', 400)

        amount = round(float(data['amount']), 2)
        if abs(amount - float(booking.final_amount)) > AMOUNT_TOLERANCE:
            return error_response(f'Payment amount must be ₹{float(booking.final_amount):.2f}', 400)

        if not seat_is_free(booking.seat, exclude_booking_id=booking.id):
            raise ConflictError(f'Seat {booking.seat.seat_number} was taken by another member. '
                                f'Please choose a different seat')

        gateway = str(data['payment_gateway']).strip().lower()
        gateway_response = data.get('payment_response') or {}

        payment = Payment(
            booking_id=booking.id,
            user_id=user.id,
            amount=amount,
            payment_gateway=gateway,
            transaction_id=gateway_response.get('transaction_id'),
            gateway_response=gateway_response,
            status=PaymentStatus.COMPLETED
        )
        db.session.add(payment)
        db.session.flush()

        if gateway == 'wallet':
            debit_wallet(user, amount, 'booking',
                         description=f'Payment for booking #{booking.id} - {booking.plan.name}',
                         reference_id=booking.id)

        booking.status = BookingStatus.ACTIVE
        booking.seat.seat_status = SeatStatus.OCCUPIED
        if booking.coupon:
            booking.coupon.used_count = (booking.coupon.used_count or 0) + 1

        db.session.commit()
        logger.info('Payment {} completed for booking {} via {}', payment.id, booking.id, gateway)

        send_notification(
            user.id, 'Payment Successful',
            f'Payment of ₹{amount:.2f} received for {booking.plan.name} - Seat {booking.seat.seat_number}. '
            f'Your booking is now active!',
            type='payment'
        )
        send_admin_notification(
            'Payment Received',
            f'{user.name} paid ₹{amount:.2f} via {gateway} for booking #{booking.id}',
            type='payment', related_id=payment.id
        )

        return success_response({'payment_id': payment.id}, 'Payment processed successfully')

    except APIError:
        raise
    except ValueError:
        db.session.rollback()
        return error_response('Invalid amount', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Payment processing error')
        return error_response('Error processing payment', 500)


@payments_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_payments():
    """Latest 100 payments with member details"""
    payments = Payment.query.order_by(Payment.created_at.desc(), Payment.id.desc()).limit(100).all()
    return success_response({'payments': [payment.to_dict(include_user=True) for payment in payments]})


@payments_bp.route('/<int:payment_id>/refund', methods=['POST'])
@jwt_required()
@admin_required
def refund_payment(payment_id):
    """
    Refund a payment back to its original method
    ---
    Request body:
    {
        "refund_amount": float (optional, defaults to the remaining amount),
        "refund_reason": "string"
    }
    """
    try:
        admin = get_current_admin()
        payment = db.session.get(Payment, payment_id)
        if not payment:
            return error_response('Payment not found', 404)

        data = request.get_json(silent=True) or {}
        amount = data.get('refund_amount') or payment.refundable_amount

        refund = process_refund(payment, amount, refund_method='original',
                                refund_reason=data.get('refund_reason'), admin_id=admin.id)
        db.session.commit()

        send_notification(
            payment.user_id, 'Refund Processed',
            f'A refund of ₹{float(refund.refund_amount):.2f} for booking #{payment.booking_id} is being '
            f'returned to your original payment method.',
            type='payment'
        )

        return success_response({'refund_id': refund.id}, 'Refund processed successfully')

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Refund error')
        return error_response('Error processing refund', 500)
