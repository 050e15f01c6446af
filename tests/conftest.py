import pytest
from datetime import date, timedelta

from smart_library import create_app, db
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.payment import Payment, PaymentStatus
from smart_library.models.plan import Plan
from smart_library.models.promotion import Coupon, DiscountType
from smart_library.models.seat import Seat, SeatStatus
from smart_library.models.user import User, Admin, AdminRole, Gender
from smart_library.utils.tokens import generate_token


@pytest.fixture(scope='function')
def app(tmp_path):
    app = create_app('testing')
    app.config.update({
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
    })

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()


@pytest.fixture(scope='function')
def runner(app):
    return app.test_cli_runner()


def make_user(name='Test Member', email='member@test.com', mobile='9876543210', wallet_balance=0.0,
              referral_code='MEMBER01', password='secret123'):
    user = User(
        name=name,
        email=email,
        mobile=mobile,
        dob=date(2000, 1, 15),
        gender=Gender.FEMALE,
        referral_code=referral_code,
        wallet_balance=wallet_balance
    )
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return user


def make_admin(email='admin@test.com', role=AdminRole.ADMIN, password='admin123'):
    admin = Admin(name='Test Admin', email=email, role=role)
    admin.set_password(password)
    db.session.add(admin)
    db.session.commit()
    return admin


def make_booking(user, plan, seat, start_date=None, status=BookingStatus.ACTIVE, paid=True):
    start_date = start_date or date.today()
    booking = Booking(
        user_id=user.id,
        plan_id=plan.id,
        seat_id=seat.id,
        start_date=start_date,
        end_date=start_date + timedelta(days=plan.duration_days),
        total_amount=1000.0,
        gst_amount=180.0,
        discount_amount=0.0,
        final_amount=1180.0,
        status=status
    )
    db.session.add(booking)
    db.session.flush()
    if paid:
        db.session.add(Payment(
            booking_id=booking.id,
            user_id=user.id,
            amount=1180.0,
            payment_gateway='wallet',
            transaction_id='TXN1',
            status=PaymentStatus.COMPLETED
        ))
    if status == BookingStatus.ACTIVE:
        seat.seat_status = SeatStatus.OCCUPIED
    elif status == BookingStatus.PENDING:
        seat.seat_status = SeatStatus.RESERVED
    db.session.commit()
    return booking


@pytest.fixture
def user(app):
    return make_user(wallet_balance=2000.0)


@pytest.fixture
def other_user(app):
    return make_user(name='Other Member', email='other@test.com', mobile='9123456780', referral_code='OTHER001')


@pytest.fixture
def admin(app):
    return make_admin()


@pytest.fixture
def super_admin(app):
    return make_admin(email='root@test.com', role=AdminRole.SUPER_ADMIN)


@pytest.fixture
def user_token(app, user):
    return generate_token(user.id, 'user')


@pytest.fixture
def admin_token(app, admin):
    return generate_token(admin.id, 'admin')


@pytest.fixture
def super_admin_token(app, super_admin):
    return generate_token(super_admin.id, 'admin')


@pytest.fixture
def user_headers(user_token):
    return {'Authorization': f'Bearer {user_token}'}


@pytest.fixture
def admin_headers(admin_token):
    return {'Authorization': f'Bearer {admin_token}'}


@pytest.fixture
def super_admin_headers(super_admin_token):
    return {'Authorization': f'Bearer {super_admin_token}'}


@pytest.fixture
def plan(app):
    plan = Plan(name='Monthly Full Day', price=1000.0, duration_days=30)
    db.session.add(plan)
    db.session.commit()
    return plan


@pytest.fixture
def seat(app):
    seat = Seat(seat_number='S1', floor=1, section='A')
    db.session.add(seat)
    db.session.commit()
    return seat


@pytest.fixture
def second_seat(app):
    seat = Seat(seat_number='S2', floor=1, section='B')
    db.session.add(seat)
    db.session.commit()
    return seat


@pytest.fixture
def booking(app, user, plan, seat):
    """Active, paid booking starting ten days from today"""
    return make_booking(user, plan, seat, start_date=date.today() + timedelta(days=10))


@pytest.fixture
def pending_booking(app, user, plan, seat):
    return make_booking(user, plan, seat, status=BookingStatus.PENDING, paid=False)


@pytest.fixture
def coupon(app):
    coupon = Coupon(
        code='SAVE10',
        description='10% off',
        discount_type=DiscountType.PERCENTAGE,
        discount_value=10,
        max_discount_amount=50,
        valid_from=date.today() - timedelta(days=1),
        valid_until=date.today() + timedelta(days=30)
    )
    db.session.add(coupon)
    db.session.commit()
    return coupon
