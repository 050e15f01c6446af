from datetime import datetime
from smart_library import db
from enum import Enum
import re


class SeatStatus(Enum):
    """Seat status enumeration"""
    AVAILABLE = 'available'
    RESERVED = 'reserved'
    OCCUPIED = 'occupied'
    MAINTENANCE = 'maintenance'


class Seat(db.Model):
    """Physical study seat"""
    __tablename__ = 'seats'

    id = db.Column(db.Integer, primary_key=True)
    seat_number = db.Column(db.String(10), unique=True, nullable=False, index=True)
    floor = db.Column(db.Integer, nullable=False, default=1)
    section = db.Column(db.String(50))
    seat_status = db.Column(db.Enum(SeatStatus), nullable=False, default=SeatStatus.AVAILABLE)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    bookings = db.relationship('Booking', back_populates='seat', lazy='dynamic')

    @property
    def sort_key(self):
        """Numeric part of the seat number, so S2 sorts before S10"""
        match = re.search(r'\d+', self.seat_number)
        return (int(match.group()) if match else 0, self.seat_number)

    def to_dict(self):
        return {
            'id': self.id,
            'seat_number': self.seat_number,
            'floor': self.floor,
            'section': self.section,
            'seat_status': self.seat_status.value,
            'created_at': self.created_at.isoformat()
        }

    def __repr__(self):
        return f'<Seat {self.seat_number}>'
