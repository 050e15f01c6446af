from flask import Blueprint, request
from loguru import logger
from smart_library import db
from smart_library.models.booking import Booking
from smart_library.models.payment import (RefundRequest, RefundRequestStatus, RefundRequestType, RefundMethod,
                                          PaymentRefundStatus, PaymentStatus)
from smart_library.services.notifications import send_notification, send_admin_notification
from smart_library.utils.decorators import user_required, get_current_user
from smart_library.utils.pricing import calculate_expected_refund
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields

refund_requests_bp = Blueprint('refund_requests', __name__)


def expected_refund_amount(request_type, payment_amount, start_date, now=None):
    """Cancellations follow the notice-period tiers; other requests ask for the full amount"""
    if request_type == RefundRequestType.CANCELLATION:
        return calculate_expected_refund(payment_amount, start_date, now)['amount']
    return round(float(payment_amount), 2)


@refund_requests_bp.route('/', methods=['POST'])
@user_required
def create_request():
    """
    Ask for a refund on one of your bookings
    ---
    Request body:
    {
        "booking_id": int,
        "request_type": "cancellation|service_issue|other",
        "reason": "string",
        "description": "string (optional)",
        "refund_method": "wallet|original (default wallet)"
    }
    """
    try:
        user = get_current_user()
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['booking_id', 'request_type', 'reason'])
        if not is_valid:
            return error_response('Booking ID, request type, and reason are required', 400)

        try:
            request_type = RefundRequestType(data['request_type'])
            refund_method = RefundMethod(data.get('refund_method') or 'wallet')
        except ValueError:
            return error_response('Invalid request type or refund method', 400)

        booking = Booking.query.filter_by(id=data['booking_id'], user_id=user.id).first()
        if not booking:
            return error_response('Booking not found or does not belong to you', 404)

        payment = booking.settled_payment
        if not payment or float(payment.amount) <= 0:
            return error_response('No payment amount found for this booking', 400)

        if payment.refund_status == PaymentRefundStatus.FULL or payment.status == PaymentStatus.REFUNDED:
            return error_response('This booking has already been fully refunded', 400)

        open_request = RefundRequest.query.filter(
            RefundRequest.booking_id == booking.id,
            RefundRequest.user_id == user.id,
            RefundRequest.status.in_(RefundRequest.OPEN_STATUSES)
        ).first()
        if open_request:
            return error_response('You already have a pending refund request for this booking', 400)

        expected_amount = expected_refund_amount(request_type, payment.amount, booking.start_date)

        refund_request = RefundRequest(
            user_id=user.id,
            booking_id=booking.id,
            payment_id=payment.id,
            request_type=request_type,
            reason=data['reason'],
            description=data.get('description') or '',
            expected_amount=expected_amount,
            refund_method=refund_method
        )
        db.session.add(refund_request)
        db.session.commit()
        logger.info('Refund request {} created by user {} for booking {}', refund_request.id, user.id, booking.id)

        send_notification(
            user.id, 'Refund Request Submitted',
            f'Your refund request for Booking #{booking.id} has been submitted. '
            f'Expected refund: ₹{expected_amount:.2f}',
            type='refund_request'
        )
        send_admin_notification(
            'New Refund Request',
            f'{user.name} requested a refund for booking #{booking.id}',
            type='refund_request', related_id=refund_request.id
        )

        return success_response({
            'request_id': refund_request.id,
            'expected_amount': expected_amount,
            'status': refund_request.status.value
        }, 'Refund request submitted successfully', 201)

    except Exception:
        db.session.rollback()
        logger.exception('Error creating refund request')
        return error_response('Failed to submit refund request', 500)


@refund_requests_bp.route('/', methods=['GET'])
@user_required
def get_requests():
    user = get_current_user()
    query = RefundRequest.query.filter_by(user_id=user.id)
    if request.args.get('status'):
        try:
            query = query.filter_by(status=RefundRequestStatus(request.args['status']))
        except ValueError:
            return error_response('Invalid status', 400)

    requests = query.order_by(RefundRequest.created_at.desc(), RefundRequest.id.desc()).all()
    return success_response({'requests': [r.to_dict() for r in requests]})


@refund_requests_bp.route('/<int:request_id>', methods=['GET'])
@user_required
def get_request(request_id):
    user = get_current_user()
    refund_request = RefundRequest.query.filter_by(id=request_id, user_id=user.id).first()
    if not refund_request:
        return error_response('Refund request not found', 404)

    data = refund_request.to_dict()
    if refund_request.refund:
        data['refund_status'] = refund_request.refund.status.value
        data['refund_completed_at'] = refund_request.refund.completed_at.isoformat() \
            if refund_request.refund.completed_at else None
    return success_response({'request': data})


@refund_requests_bp.route('/<int:request_id>', methods=['DELETE'])
@user_required
def cancel_request(request_id):
    """Withdraw a request that nobody has looked at yet"""
    user = get_current_user()
    refund_request = RefundRequest.query.filter_by(id=request_id, user_id=user.id).first()
    if not refund_request:
        return error_response('Refund request not found', 404)

    if refund_request.status != RefundRequestStatus.PENDING:
        return error_response('Only pending requests can be cancelled', 400)

    db.session.delete(refund_request)
    db.session.commit()
    return success_response(None, 'Refund request cancelled successfully')
