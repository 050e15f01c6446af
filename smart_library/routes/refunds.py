from datetime import datetime
from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from sqlalchemy import func
from smart_library import db
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.payment import (Payment, Refund, RefundStatus, RefundRequest, RefundRequestStatus,
                                          RefundMethod)
from smart_library.services.notifications import send_notification
from smart_library.services.refunds import process_refund, auto_refund, cancel_booking
from smart_library.utils.decorators import admin_required, get_current_admin
from smart_library.utils.errors import APIError
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields

refunds_bp = Blueprint('refunds', __name__)

REVIEW_STATUSES = ('approved', 'rejected', 'under_review')


def _status_counts(model, column, enum_cls):
    counts = dict(db.session.query(column, func.count(model.id)).group_by(column).all())
    return {status.value: counts.get(status, 0) for status in enum_cls}


# User refund requests

@refunds_bp.route('/user-requests', methods=['GET'])
@jwt_required()
@admin_required
def get_user_requests():
    query = RefundRequest.query
    if request.args.get('status'):
        try:
            query = query.filter_by(status=RefundRequestStatus(request.args['status']))
        except ValueError:
            return error_response('Invalid status', 400)

    requests = query.order_by(RefundRequest.created_at.desc(), RefundRequest.id.desc()).all()
    return success_response({'requests': [r.to_dict() for r in requests]})


@refunds_bp.route('/user-requests/stats', methods=['GET'])
@jwt_required()
@admin_required
def get_user_request_stats():
    stats = _status_counts(RefundRequest, RefundRequest.status, RefundRequestStatus)
    stats['total_requests'] = sum(stats.values())
    total_expected = db.session.query(func.coalesce(func.sum(RefundRequest.expected_amount), 0)).scalar()
    stats['total_expected_amount'] = round(float(total_expected or 0), 2)
    return success_response({'stats': stats})


@refunds_bp.route('/user-requests/<int:request_id>/review', methods=['PUT'])
@jwt_required()
@admin_required
def review_user_request(request_id):
    """
    Review a member's refund request
    ---
    Request body:
    {
        "status": "approved|rejected|under_review",
        "admin_notes": "string (optional)"
    }

    Approval refunds `expected_amount` through the request's refund method
    and completes the request.
    """
    try:
        admin = get_current_admin()
        refund_request = db.session.get(RefundRequest, request_id)
        if not refund_request:
            return error_response('Refund request not found', 404)

        data = request.get_json(silent=True) or {}
        status = data.get('status')
        if status not in REVIEW_STATUSES:
            return error_response(f'Invalid status. Use one of: {", ".join(REVIEW_STATUSES)}', 400)

        if refund_request.status not in RefundRequest.OPEN_STATUSES:
            return error_response(f'Request has already been {refund_request.status.value}', 400)

        refund_request.status = RefundRequestStatus(status)
        refund_request.admin_notes = data.get('admin_notes')
        refund_request.reviewed_by = admin.id
        refund_request.reviewed_at = datetime.utcnow()

        if status == 'approved':
            payment = refund_request.payment
            amount = min(float(refund_request.expected_amount), payment.refundable_amount)
            if amount <= 0:
                raise APIError('Nothing left to refund for this request; reject it instead')

            refund = process_refund(
                payment,
                amount,
                refund_method=refund_request.refund_method.value,
                refund_reason=refund_request.reason,
                admin_id=admin.id,
                notes=refund_request.admin_notes
            )
            refund_request.refund_id = refund.id
            refund_request.status = RefundRequestStatus.COMPLETED
            db.session.commit()

            if refund.refund_method == RefundMethod.WALLET:
                detail = f'₹{amount:.2f} has been credited to your wallet.'
            else:
                detail = f'₹{amount:.2f} will be returned to your original payment method.'
            send_notification(
                refund_request.user_id, 'Refund Request Approved',
                f'Your refund request for Booking #{refund_request.booking_id} has been approved. {detail}',
                type='refund_approved', priority='high'
            )
        else:
            db.session.commit()
            if status == 'rejected':
                send_notification(
                    refund_request.user_id, 'Refund Request Rejected',
                    f'Your refund request for Booking #{refund_request.booking_id} has been rejected. '
                    f'{refund_request.admin_notes or ""}'.strip(),
                    type='refund_rejected'
                )

        return success_response({'request': refund_request.to_dict()}, f'Refund request {status} successfully')

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error reviewing refund request {}', request_id)
        return error_response('Error reviewing refund request', 500)


# Refunds

@refunds_bp.route('/', methods=['GET'])
@jwt_required()
@admin_required
def get_refunds():
    """Refunds, newest first. Optional `status` and `user_id` filters."""
    query = Refund.query
    if request.args.get('status'):
        try:
            query = query.filter_by(status=RefundStatus(request.args['status']))
        except ValueError:
            return error_response('Invalid status', 400)
    if request.args.get('user_id', type=int):
        query = query.filter_by(user_id=request.args.get('user_id', type=int))

    refunds = query.order_by(Refund.refund_date.desc(), Refund.id.desc()).all()
    return success_response({'refunds': [refund.to_dict() for refund in refunds]})


@refunds_bp.route('/<int:refund_id>', methods=['GET'])
@jwt_required()
@admin_required
def get_refund(refund_id):
    refund = db.session.get(Refund, refund_id)
    if not refund:
        return error_response('Refund not found', 404)
    return success_response({'refund': refund.to_dict()})


@refunds_bp.route('/process', methods=['POST'])
@jwt_required()
@admin_required
def process():
    """
    Refund a payment
    ---
    Request body:
    {
        "payment_id": int,
        "refund_amount": number,
        "refund_type": "full|partial",
        "refund_method": "wallet|original",
        "refund_reason": "string",
        "notes": "string (optional)"
    }
    """
    try:
        admin = get_current_admin()
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['payment_id', 'refund_amount', 'refund_reason'])
        if not is_valid:
            return error_response(message, 400)

        refund_type = data.get('refund_type')
        if refund_type is not None and refund_type not in ('full', 'partial'):
            return error_response('Invalid refund type', 400)
        refund_method = data.get('refund_method') or 'wallet'
        if refund_method not in ('wallet', 'original'):
            return error_response('Invalid refund method', 400)

        payment = db.session.get(Payment, data['payment_id'])
        if not payment:
            return error_response('Payment not found', 404)

        refund = process_refund(
            payment,
            data['refund_amount'],
            refund_method=refund_method,
            refund_reason=data['refund_reason'],
            admin_id=admin.id,
            refund_type=refund_type,
            notes=data.get('notes')
        )
        db.session.commit()

        send_notification(
            payment.user_id, 'Refund Processed',
            f'A refund of ₹{float(refund.refund_amount):.2f} for booking #{payment.booking_id} has been '
            f'{"credited to your wallet" if refund.refund_method == RefundMethod.WALLET else "initiated"}.',
            type='payment', priority='high'
        )

        return success_response({'refund': refund.to_dict()}, 'Refund processed successfully', 201)

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error processing refund')
        return error_response('Error processing refund', 500)


@refunds_bp.route('/auto-refund/<int:booking_id>', methods=['POST'])
@jwt_required()
@admin_required
def auto_refund_booking(booking_id):
    """Cancel a booking and refund it to the wallet by how far off its start date is"""
    try:
        admin = get_current_admin()
        booking = db.session.get(Booking, booking_id)
        if not booking:
            return error_response('Booking not found', 404)

        refund = auto_refund(booking, admin.id)
        if booking.status != BookingStatus.CANCELLED:
            cancel_booking(booking)
        db.session.commit()

        send_notification(
            booking.user_id, 'Booking Cancelled',
            f'Booking #{booking.id} was cancelled and ₹{float(refund.refund_amount):.2f} has been credited '
            f'to your wallet.',
            type='booking', priority='high'
        )

        return success_response({'refund': refund.to_dict()}, 'Auto-refund processed successfully')

    except APIError:
        raise
    except Exception:
        db.session.rollback()
        logger.exception('Error processing auto-refund for booking {}', booking_id)
        return error_response('Error processing auto-refund', 500)


@refunds_bp.route('/stats/summary', methods=['GET'])
@jwt_required()
@admin_required
def get_refund_stats():
    stats = _status_counts(Refund, Refund.status, RefundStatus)
    stats['total_refunds'] = sum(stats.values())
    stats['total_amount'] = round(float(
        db.session.query(func.coalesce(func.sum(Refund.refund_amount), 0)).scalar() or 0), 2)
    stats['completed_amount'] = round(float(
        db.session.query(func.coalesce(func.sum(Refund.refund_amount), 0))
        .filter(Refund.status == RefundStatus.COMPLETED).scalar() or 0), 2)
    return success_response({'stats': stats})
