from datetime import datetime, date
from smart_library import db
from enum import Enum


class BookingStatus(Enum):
    """Booking status enumeration"""
    PENDING = 'pending'
    ACTIVE = 'active'
    EXPIRED = 'expired'
    CANCELLED = 'cancelled'


class AdvanceBookingStatus(Enum):
    SCHEDULED = 'scheduled'
    ACTIVE = 'active'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


class AdvancePaymentStatus(Enum):
    PENDING = 'pending'
    PAID = 'paid'
    REFUNDED = 'refunded'


class Booking(db.Model):
    """Seat booking under a plan"""
    __tablename__ = 'bookings'

    id = db.Column(db.Integer, primary_key=True)

    # Foreign keys
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    plan_id = db.Column(db.Integer, db.ForeignKey('plans.id'), nullable=False)
    seat_id = db.Column(db.Integer, db.ForeignKey('seats.id'), nullable=False, index=True)
    coupon_id = db.Column(db.Integer, db.ForeignKey('coupons.id'), nullable=True)

    # Dates
    booking_date = db.Column(db.Date, nullable=False, default=date.today)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)

    # Pricing
    total_amount = db.Column(db.Numeric(10, 2), nullable=False)
    gst_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0.0)
    discount_amount = db.Column(db.Numeric(10, 2), nullable=False, default=0.0)
    final_amount = db.Column(db.Numeric(10, 2), nullable=False)

    status = db.Column(db.Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    user = db.relationship('User', back_populates='bookings')
    plan = db.relationship('Plan', back_populates='bookings')
    seat = db.relationship('Seat', back_populates='bookings')
    coupon = db.relationship('Coupon')
    payments = db.relationship('Payment', back_populates='booking', lazy='dynamic')

    @property
    def settled_payment(self):
        """The completed (or since refunded) payment for this booking, if any"""
        from smart_library.models.payment import Payment, PaymentStatus
        return self.payments.filter(Payment.status.in_([
            PaymentStatus.COMPLETED, PaymentStatus.REFUNDED, PaymentStatus.PARTIAL_REFUND
        ])).order_by(Payment.created_at.desc()).first()

    def occupies_seat(self, on_date=None):
        """Whether this booking currently holds its seat"""
        on_date = on_date or date.today()
        return self.status == BookingStatus.ACTIVE and self.end_date >= on_date

    def to_dict(self, include_relationships=True):
        """Convert booking to dictionary"""
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'plan_id': self.plan_id,
            'seat_id': self.seat_id,
            'booking_date': self.booking_date.isoformat(),
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'total_amount': float(self.total_amount),
            'gst_amount': float(self.gst_amount),
            'discount_amount': float(self.discount_amount),
            'final_amount': float(self.final_amount),
            'status': self.status.value,
            'created_at': self.created_at.isoformat()
        }

        if include_relationships:
            data['plan_name'] = self.plan.name
            data['seat_number'] = self.seat.seat_number
            payment = self.settled_payment
            data['payment_id'] = payment.id if payment else None
            data['payment_status'] = payment.status.value if payment else None
            data['refund_status'] = payment.refund_status.value if payment else None
            data['refund_amount'] = float(payment.refund_amount) if payment else 0.0

        return data

    def __repr__(self):
        return f'<Booking {self.id} seat={self.seat_id}>'


class AdvanceBooking(db.Model):
    """Seat reserved ahead for a future date range"""
    __tablename__ = 'advance_bookings'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    seat_id = db.Column(db.Integer, db.ForeignKey('seats.id'), nullable=False)
    plan_id = db.Column(db.Integer, db.ForeignKey('plans.id'), nullable=False)
    booking_date = db.Column(db.Date, nullable=False, default=date.today)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    payment_status = db.Column(db.Enum(AdvancePaymentStatus), nullable=False,
                               default=AdvancePaymentStatus.PENDING)
    booking_status = db.Column(db.Enum(AdvanceBookingStatus), nullable=False,
                               default=AdvanceBookingStatus.SCHEDULED)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = db.relationship('User')
    seat = db.relationship('Seat')
    plan = db.relationship('Plan')

    def to_dict(self, include_user=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'seat_id': self.seat_id,
            'plan_id': self.plan_id,
            'seat_number': self.seat.seat_number,
            'plan_name': self.plan.name,
            'duration_days': self.plan.duration_days,
            'booking_date': self.booking_date.isoformat(),
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'amount': float(self.amount),
            'payment_status': self.payment_status.value,
            'booking_status': self.booking_status.value,
            'notes': self.notes,
            'created_at': self.created_at.isoformat()
        }
        if include_user:
            data['user_name'] = self.user.name
            data['user_email'] = self.user.email
            data['user_mobile'] = self.user.mobile
        return data

    def __repr__(self):
        return f'<AdvanceBooking {self.id}>'


class BookingModification(db.Model):
    """History of admin changes to a booking"""
    __tablename__ = 'booking_modifications'

    id = db.Column(db.Integer, primary_key=True)
    booking_id = db.Column(db.Integer, db.ForeignKey('bookings.id'), nullable=False, index=True)
    admin_id = db.Column(db.Integer, db.ForeignKey('admins.id'), nullable=False)
    modification_type = db.Column(db.String(50), nullable=False)
    old_value = db.Column(db.JSON)
    new_value = db.Column(db.JSON)
    reason = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    booking = db.relationship('Booking', backref=db.backref('modifications', lazy='dynamic'))
    admin = db.relationship('Admin')

    def to_dict(self):
        return {
            'id': self.id,
            'booking_id': self.booking_id,
            'admin_id': self.admin_id,
            'modification_type': self.modification_type,
            'old_value': self.old_value,
            'new_value': self.new_value,
            'reason': self.reason,
            'created_at': self.created_at.isoformat()
        }
