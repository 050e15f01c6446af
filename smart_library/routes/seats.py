from flask import Blueprint, request
from flask_jwt_extended import jwt_required
from loguru import logger
from smart_library import db
from smart_library.models.booking import Booking
from smart_library.models.seat import Seat, SeatStatus
from smart_library.services.bookings import active_booking_for_seat
from smart_library.utils.decorators import admin_required
from smart_library.utils.responses import success_response, error_response
from smart_library.utils.validators import validate_required_fields, validate_date

seats_bp = Blueprint('seats', __name__)


@seats_bp.route('/', methods=['GET'])
def get_seats():
    """
    List seats in seat-number order
    ---
    Query parameters:
    - date: only seats with a booking starting on this date (YYYY-MM-DD)

    A seat held by an active, unexpired booking is reported as occupied.
    """
    query = Seat.query
    if request.args.get('date'):
        on_date, message = validate_date(request.args['date'])
        if on_date is None:
            return error_response(message, 400)
        query = query.join(Booking).filter(Booking.booking_date == on_date).distinct()

    seats = sorted(query.all(), key=lambda seat: seat.sort_key)
    data = []
    for seat in seats:
        item = seat.to_dict()
        if active_booking_for_seat(seat.id):
            item['seat_status'] = SeatStatus.OCCUPIED.value
        data.append(item)

    return success_response({'seats': data})


@seats_bp.route('/', methods=['POST'])
@jwt_required()
@admin_required
def create_seat():
    try:
        data = request.get_json(silent=True) or {}

        is_valid, message = validate_required_fields(data, ['seat_number'])
        if not is_valid:
            return error_response(message, 400)

        seat_number = str(data['seat_number']).strip().upper()
        if Seat.query.filter_by(seat_number=seat_number).first():
            return error_response('Seat number already exists', 400)

        seat = Seat(
            seat_number=seat_number,
            floor=int(data.get('floor') or 1),
            section=data.get('section')
        )
        db.session.add(seat)
        db.session.commit()

        return success_response({'id': seat.id}, 'Seat created successfully', 201)

    except ValueError:
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error creating seat')
        return error_response('Error creating seat', 500)


@seats_bp.route('/<int:seat_id>', methods=['PUT'])
@jwt_required()
@admin_required
def update_seat(seat_id):
    try:
        seat = db.session.get(Seat, seat_id)
        if not seat:
            return error_response('Seat not found', 404)

        data = request.get_json(silent=True) or {}
        if 'seat_status' in data:
            try:
                seat.seat_status = SeatStatus(data['seat_status'])
            except ValueError:
                return error_response('Invalid seat status', 400)
        if 'floor' in data:
            seat.floor = int(data['floor'])
        if 'section' in data:
            seat.section = data['section']

        db.session.commit()
        return success_response(None, 'Seat updated successfully')

    except ValueError:
        db.session.rollback()
        return error_response('Invalid data type provided', 400)
    except Exception:
        db.session.rollback()
        logger.exception('Error updating seat')
        return error_response('Error updating seat', 500)


@seats_bp.route('/<int:seat_id>', methods=['DELETE'])
@jwt_required()
@admin_required
def delete_seat(seat_id):
    seat = db.session.get(Seat, seat_id)
    if not seat:
        return error_response('Seat not found', 404)

    if seat.bookings.first():
        return error_response('Seat has bookings and cannot be deleted. Mark it as maintenance instead', 400)

    db.session.delete(seat)
    db.session.commit()
    return success_response(None, 'Seat deleted successfully')
