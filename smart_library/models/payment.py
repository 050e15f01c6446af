from datetime import datetime
from smart_library import db
from enum import Enum


class PaymentStatus(Enum):
    """Payment status enumeration"""
    PENDING = 'pending'
    COMPLETED = 'completed'
    FAILED = 'failed'
    REFUNDED = 'refunded'
    PARTIAL_REFUND = 'partial_refund'


class PaymentRefundStatus(Enum):
    NONE = 'none'
    PARTIAL = 'partial'
    FULL = 'full'


class RefundType(Enum):
    FULL = 'full'
    PARTIAL = 'partial'


class RefundMethod(Enum):
    WALLET = 'wallet'
    ORIGINAL = 'original'


class RefundStatus(Enum):
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    FAILED = 'failed'


class RefundRequestType(Enum):
    CANCELLATION = 'cancellation'
    SERVICE_ISSUE = 'service_issue'
    OTHER = 'other'


class RefundRequestStatus(Enum):
    PENDING = 'pending'
    UNDER_REVIEW = 'under_review'
    APPROVED = 'approved'
    REJECTED = 'rejected'
    COMPLETED = 'completed'


class Payment(db.Model):
    """Payment made against a booking"""
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_gateway = db.Column(db.String(50), nullable=False)
    transaction_id = db.Column(db.String(100), index=True)
    gateway_response = db.Column(db.JSON)
    status = db.Column(db.Enum(PaymentStatus), nullable=False, default=PaymentStatus.PENDING)

    # Refund tracking
    refund_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0.0)
    refund_status = db.Column(db.Enum(PaymentRefundStatus), nullable=False, default=PaymentRefundStatus.NONE)
    refund_reason = db.Column(db.Text)
    refunded_at = db.Column(db.DateTime)
    refunded_by = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    booking = db.relationship('Booking', back_populates='payments')
    user = db.relationship('User')
    refunds = db.relationship('Refund', back_populates='payment', lazy='dynamic')

    @property
    def refundable_amount(self):
        return round(float(self.amount) - float(self.refund_amount or 0), 2)

    def to_dict(self, include_user=False):
        data = {
            'id': self.id,
            'booking_id': self.booking_id,
            'user_id': self.user_id,
            'amount': float(self.amount),
            'payment_gateway': self.payment_gateway,
            'transaction_id': self.transaction_id,
            'status': self.status.value,
            'refund_amount': float(self.refund_amount or 0),
            'refund_status': self.refund_status.value,
            'refund_reason': self.refund_reason,
            'refunded_at': self.refunded_at.isoformat() if self.refunded_at else None,
            'created_at': self.created_at.isoformat()
        }
        if include_user:
            data['user_name'] = self.user.name
            data['user_email'] = self.user.email
        return data

    def __repr__(self):
        return f'<Payment {self.id} {self.status.value}>'


class Refund(db.Model):
    """Money returned against a payment"""
    __tablename__ = 'refunds'

    id = db.Column(db.Integer, primary_key=True)
    payment_id = db.Column(db.Integer, db.ForeignKey('payments.id'), nullable=False, index=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    refund_amount = db.Column(db.Numeric(10, 2), nullable=False)
    refund_type = db.Column(db.Enum(RefundType), nullable=False)
    refund_method = db.Column(db.Enum(RefundMethod), nullable=False, default=RefundMethod.WALLET)
    refund_reason = db.Column(db.Text)
    status = db.Column(db.Enum(RefundStatus), nullable=False, default=RefundStatus.PENDING)
    processed_by = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=True)
    notes = db.Column(db.Text)
    refund_date = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    completed_at = db.Column(db.DateTime)

    payment = db.relationship('Payment', back_populates='refunds')
    booking = db.relationship('Booking')
    user = db.relationship('User')
    admin = db.relationship('Admin')

    def to_dict(self, include_relationships=True):
        data = {
            'id': self.id,
            'payment_id': self.payment_id,
            'booking_id': self.booking_id,
            'user_id': self.user_id,
            'refund_amount': float(self.refund_amount),
            'refund_type': self.refund_type.value,
            'refund_method': self.refund_method.value,
            'refund_reason': self.refund_reason,
            'status': self.status.value,
            'processed_by': self.processed_by,
            'notes': self.notes,
            'refund_date': self.refund_date.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None
        }
        if include_relationships:
            data['user_name'] = self.user.name
            data['user_email'] = self.user.email
            data['original_amount'] = float(self.payment.amount)
            data['transaction_id'] = self.payment.transaction_id
            data['processed_by_name'] = self.admin.name if self.admin else None
        return data

    def __repr__(self):
        return f'<Refund {self.id} {self.refund_amount}>'


class RefundRequest(db.Model):
    """Refund asked for by a member, awaiting admin review"""
    __tablename__ = 'user_refund_requests'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False, index=True)
    payment_id = db.Column(db.Integer, db.ForeignKey('payments.id'), nullable=False)
    request_type = db.Column(db.Enum(RefundRequestType), nullable=False)
    reason = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text)
    expected_amount = db.Column(db.Numeric(10, 2), nullable=False)
    refund_method = db.Column(db.Enum(RefundMethod), nullable=False, default=RefundMethod.WALLET)
    status = db.Column(db.Enum(RefundRequestStatus), nullable=False, default=RefundRequestStatus.PENDING)
    admin_notes = db.Column(db.Text)
    reviewed_by = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=True)
    reviewed_at = db.Column(db.DateTime)
    refund_id = db.Column(db.Integer, db.ForeignKey('refunds.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship('User')
    booking = db.relationship('Booking')
    payment = db.relationship('Payment')
    reviewer = db.relationship('Admin')
    refund = db.relationship('Refund')

    OPEN_STATUSES = (RefundRequestStatus.PENDING, RefundRequestStatus.UNDER_REVIEW)

    def to_dict(self, include_relationships=True):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'booking_id': self.booking_id,
            'payment_id': self.payment_id,
            'request_type': self.request_type.value,
            'reason': self.reason,
            'description': self.description,
            'expected_amount': float(self.expected_amount),
            'refund_method': self.refund_method.value,
            'status': self.status.value,
            'admin_notes': self.admin_notes,
            'reviewed_by': self.reviewed_by,
            'reviewed_at': self.reviewed_at.isoformat() if self.reviewed_at else None,
            'refund_id': self.refund_id,
            'created_at': self.created_at.isoformat()
        }
        if include_relationships:
            data['user_name'] = self.user.name
            data['user_email'] = self.user.email
            data['plan_name'] = self.booking.plan.name
            data['seat_number'] = self.booking.seat.seat_number
            data['start_date'] = self.booking.start_date.isoformat()
            data['end_date'] = self.booking.end_date.isoformat()
            data['payment_amount'] = float(self.payment.amount)
            data['reviewed_by_name'] = self.reviewer.name if self.reviewer else None
        return data

    def __repr__(self):
        return f'<RefundRequest {self.id} {self.status.value}>'
