"""
Starter data for a fresh library: membership plans, a floor of seats and
a super admin to log in with.
"""
from loguru import logger
from smart_library import db
from smart_library.models.plan import Plan
from smart_library.models.seat import Seat
from smart_library.models.user import Admin, AdminRole

DEFAULT_PLANS = [
    {'name': 'Monthly Full Day', 'description': 'Unlimited access all day for 30 days',
     'price': 1500, 'duration_days': 30, 'plan_type': 'full_day', 'shift_type': 'all_day'},
    {'name': 'Monthly Morning', 'description': 'Morning shift for 30 days',
     'price': 900, 'duration_days': 30, 'plan_type': 'half_day', 'shift_type': 'morning',
     'shift_start_time': '06:00', 'shift_end_time': '14:00'},
    {'name': 'Monthly Evening', 'description': 'Evening shift for 30 days',
     'price': 900, 'duration_days': 30, 'plan_type': 'half_day', 'shift_type': 'evening',
     'shift_start_time': '14:00', 'shift_end_time': '22:00'},
    {'name': 'Quarterly Full Day', 'description': 'Unlimited access all day for 90 days',
     'price': 4000, 'duration_days': 90, 'plan_type': 'full_day', 'shift_type': 'all_day'},
]

DEFAULT_SEAT_COUNT = 50
DEFAULT_ADMIN_EMAIL = 'admin@smartlibrary.com'
DEFAULT_ADMIN_PASSWORD = 'admin123'


def seed_plans():
    created = 0
    for data in DEFAULT_PLANS:
        if Plan.query.filter_by(name=data['name']).first():
            continue
        db.session.add(Plan(**data))
        created += 1
    return created


def seed_seats(count=DEFAULT_SEAT_COUNT):
    """Seats S1..S<count>, twenty-five to a floor"""
    created = 0
    for number in range(1, count + 1):
        seat_number = f'S{number}'
        if Seat.query.filter_by(seat_number=seat_number).first():
            continue
        floor = (number - 1) // 25 + 1
        db.session.add(Seat(seat_number=seat_number, floor=floor, section='A' if number % 2 else 'B'))
        created += 1
    return created


def seed_admin(email=DEFAULT_ADMIN_EMAIL, password=DEFAULT_ADMIN_PASSWORD):
    if Admin.query.filter_by(email=email).first():
        return 0
    admin = Admin(name='Super Admin', email=email, role=AdminRole.SUPER_ADMIN)
    admin.set_password(password)
    db.session.add(admin)
    return 1


def seed_all(seat_count=DEFAULT_SEAT_COUNT):
    """Insert whatever default data is missing and return how much was added"""
    counts = {
        'plans': seed_plans(),
        'seats': seed_seats(seat_count),
        'admins': seed_admin()
    }
    db.session.commit()
    logger.info('Seeded {}', counts)
    return counts
