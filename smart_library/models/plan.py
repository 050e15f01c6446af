from datetime import datetime
from smart_library import db


class Plan(db.Model):
    """Membership plan a seat is booked under"""
    __tablename__ = 'plans'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    duration_days = db.Column(db.Integer, nullable=False)
    plan_type = db.Column(db.String(50), nullable=False, default='full_day')
    shift_type = db.Column(db.String(50), nullable=False, default='all_day')
    shift_start_time = db.Column(db.String(10))
    shift_end_time = db.Column(db.String(10))
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    bookings = db.relationship('Booking', back_populates='plan', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'price': float(self.price),
            'duration_days': self.duration_days,
            'plan_type': self.plan_type,
            'shift_type': self.shift_type,
            'shift_start_time': self.shift_start_time,
            'shift_end_time': self.shift_end_time,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<Plan {self.name}>'
