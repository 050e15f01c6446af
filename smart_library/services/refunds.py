"""
Refund engine shared by the admin refund screens, member refund requests
and booking cancellation. Functions stage changes; callers commit.
"""
from datetime import datetime
from loguru import logger
from smart_library import db
from smart_library.models.booking import BookingStatus
from smart_library.models.payment import (PaymentStatus, PaymentRefundStatus, Refund, RefundType, RefundMethod,
                                          RefundStatus)
from smart_library.services.audit import log_admin_action
from smart_library.services.bookings import release_seat
from smart_library.services.wallet import credit_wallet
from smart_library.utils.errors import APIError, NotFoundError
from smart_library.utils.pricing import calculate_expected_refund

REFUNDABLE_PAYMENT_STATUSES = (PaymentStatus.COMPLETED, PaymentStatus.PARTIAL_REFUND)


def process_refund(payment, refund_amount, refund_method='wallet', refund_reason=None, admin_id=None,
                   refund_type=None, notes=None):
    """
    Refund part or all of a payment.

    Wallet refunds credit the member immediately and complete; refunds to the
    original payment method stay `processing` until settled outside the system.
    """
    if payment.refund_status == PaymentRefundStatus.FULL or payment.status == PaymentStatus.REFUNDED:
        raise APIError('Payment already fully refunded')

    if payment.status not in REFUNDABLE_PAYMENT_STATUSES:
        raise APIError('Only completed payments can be refunded')

    try:
        refund_amount = round(float(refund_amount), 2)
    except (TypeError, ValueError):
        raise APIError('Invalid refund amount')

    if refund_amount <= 0:
        raise APIError('Refund amount must be greater than 0')

    refundable = payment.refundable_amount
    if refund_amount > refundable:
        raise APIError(f'Refund amount cannot exceed ₹{refundable:.2f}')

    method = RefundMethod(refund_method)
    if refund_type is None:
        refund_type = 'full' if refund_amount >= float(payment.amount) else 'partial'

    refund = Refund(
        payment_id=payment.id,
        booking_id=payment.booking_id,
        user_id=payment.user_id,
        refund_amount=refund_amount,
        refund_type=RefundType(refund_type),
        refund_method=method,
        refund_reason=refund_reason,
        status=RefundStatus.PROCESSING,
        processed_by=admin_id,
        notes=notes
    )
    db.session.add(refund)
    db.session.flush()

    if method == RefundMethod.WALLET:
        credit_wallet(payment.user, refund_amount, 'refund',
                      description=f'Refund for booking #{payment.booking_id}', reference_id=refund.id)
        refund.status = RefundStatus.COMPLETED
        refund.completed_at = datetime.utcnow()

    payment.refund_amount = round(float(payment.refund_amount or 0) + refund_amount, 2)
    payment.refund_reason = refund_reason
    payment.refunded_at = datetime.utcnow()
    payment.refunded_by = admin_id
    if payment.refundable_amount <= 0:
        payment.status = PaymentStatus.REFUNDED
        payment.refund_status = PaymentRefundStatus.FULL
    else:
        payment.status = PaymentStatus.PARTIAL_REFUND
        payment.refund_status = PaymentRefundStatus.PARTIAL

    if admin_id is not None:
        log_admin_action(admin_id, 'refund_processed', target_user_id=payment.user_id,
                         target_booking_id=payment.booking_id,
                         details={'refund_id': refund.id, 'payment_id': payment.id, 'amount': refund_amount,
                                  'method': method.value, 'reason': refund_reason})

    logger.info('Refund {} of {} staged for payment {} via {}', refund.id, refund_amount, payment.id, method.value)
    return refund


def refundable_payment(booking):
    payment = booking.payments.filter_by(status=PaymentStatus.COMPLETED).first() or \
        booking.payments.filter_by(status=PaymentStatus.PARTIAL_REFUND).first()
    if not payment:
        raise NotFoundError('No completed payment found for this booking')
    return payment


def auto_refund(booking, admin_id, now=None):
    """
    Refund a cancelled booking according to how far away its start date is,
    crediting the member's wallet.
    """
    payment = refundable_payment(booking)
    expected = calculate_expected_refund(payment.amount, booking.start_date, now)
    amount = min(expected['amount'], payment.refundable_amount)
    if amount <= 0:
        raise APIError('Booking is not eligible for a refund (less than 3 days to start date)')

    return process_refund(
        payment,
        amount,
        refund_method='wallet',
        refund_reason=f"Booking cancellation ({expected['percentage']}% refund)",
        admin_id=admin_id,
        refund_type='full' if expected['percentage'] == 100 else 'partial'
    )


def cancel_booking(booking):
    """Cancel a booking and free its seat"""
    if booking.status == BookingStatus.CANCELLED:
        raise APIError('Booking is already cancelled')
    booking.status = BookingStatus.CANCELLED
    release_seat(booking.seat, exclude_booking_id=booking.id)
