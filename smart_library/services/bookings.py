from datetime import date
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.seat import SeatStatus


def active_booking_for_seat(seat_id, on_date=None, exclude_booking_id=None):
    """The active, unexpired booking holding a seat, if any"""
    on_date = on_date or date.today()
    query = Booking.query.filter(
        Booking.seat_id == seat_id,
        Booking.status == BookingStatus.ACTIVE,
        Booking.end_date >= on_date
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)
    return query.first()


def seat_is_free(seat, exclude_booking_id=None):
    """A seat can be booked when nothing holds it and it is not under maintenance"""
    if seat.seat_status == SeatStatus.MAINTENANCE:
        return False
    return active_booking_for_seat(seat.id, exclude_booking_id=exclude_booking_id) is None


def release_seat(seat, exclude_booking_id=None):
    """Mark a seat available again unless another booking still holds it"""
    if seat.seat_status == SeatStatus.MAINTENANCE:
        return
    if not active_booking_for_seat(seat.id, exclude_booking_id=exclude_booking_id):
        seat.seat_status = SeatStatus.AVAILABLE
