from datetime import date, timedelta

from smart_library import db
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.payment import Payment, PaymentStatus
from smart_library.models.promotion import Coupon
from smart_library.models.seat import SeatStatus
from smart_library.models.user import User
from smart_library.utils.tokens import generate_token

from conftest import make_user


class TestPlansAndSeats:
    def test_plans_are_public(self, client, plan):
        response = client.get('/api/plans')

        assert response.status_code == 200
        plans = response.get_json()['data']['plans']
        assert plans[0]['name'] == 'Monthly Full Day'
        assert plans[0]['plan_type'] == 'full_day'
        assert plans[0]['shift_type'] == 'all_day'

    def test_create_plan_requires_admin(self, client, user_headers):
        response = client.post('/api/plans', headers=user_headers,
                               json={'name': 'Weekly', 'price': 300, 'duration_days': 7})

        assert response.status_code == 403

    def test_seats_held_by_active_booking_report_occupied(self, client, booking, second_seat):
        response = client.get('/api/seats')

        seats = {seat['seat_number']: seat for seat in response.get_json()['data']['seats']}
        assert seats['S1']['seat_status'] == 'occupied'
        assert seats['S2']['seat_status'] == 'available'

    def test_seat_with_bookings_cannot_be_deleted(self, client, admin_headers, booking, seat):
        response = client.delete(f'/api/seats/{seat.id}', headers=admin_headers)

        assert response.status_code == 400


class TestCreateBooking:
    def test_create_booking_computes_gst(self, client, user_headers, plan, seat):
        response = client.post('/api/bookings', headers=user_headers, json={'plan_id': plan.id, 'seat_id': seat.id})

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['amount'] == 1180.0
        assert data['booking']['gst_amount'] == 180.0
        assert data['booking']['status'] == 'pending'
        assert data['booking']['end_date'] == (date.today() + timedelta(days=30)).isoformat()
        db.session.refresh(seat)
        assert seat.seat_status == SeatStatus.RESERVED

    def test_create_booking_with_coupon(self, client, user_headers, plan, seat, coupon):
        response = client.post('/api/bookings', headers=user_headers,
                               json={'plan_id': plan.id, 'seat_id': seat.id, 'coupon_code': 'save10'})

        assert response.status_code == 201
        booking = response.get_json()['data']['booking']
        assert booking['discount_amount'] == 50.0
        assert booking['final_amount'] == 1130.0

    def test_create_booking_seat_taken(self, client, booking, plan, seat, other_user):
        headers = {'Authorization': f'Bearer {generate_token(other_user.id)}'}

        response = client.post('/api/bookings', headers=headers, json={'plan_id': plan.id, 'seat_id': seat.id})

        assert response.status_code == 409

    def test_create_booking_in_the_past(self, client, user_headers, plan, seat):
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        response = client.post('/api/bookings', headers=user_headers,
                               json={'plan_id': plan.id, 'seat_id': seat.id, 'start_date': yesterday})

        assert response.status_code == 400

    def test_create_booking_missing_fields(self, client, user_headers, plan):
        response = client.post('/api/bookings', headers=user_headers, json={'plan_id': plan.id})

        assert response.status_code == 400
        assert 'seat_id' in response.get_json()['message']

    def test_list_own_bookings(self, client, user_headers, booking):
        response = client.get('/api/bookings', headers=user_headers)

        bookings = response.get_json()['data']['bookings']
        assert len(bookings) == 1
        assert bookings[0]['payment_status'] == 'completed'
        assert bookings[0]['seat_number'] == 'S1'


class TestPayments:
    def test_wallet_payment_activates_booking(self, client, user, user_headers, pending_booking, seat):
        response = client.post('/api/payments/process', headers=user_headers, json={
            'booking_id': pending_booking.id,
            'amount': 1180.0,
            'payment_gateway': 'wallet',
            'payment_response': {'transaction_id': 'TXN123'}
        })

        assert response.status_code == 200
        booking = db.session.get(Booking, pending_booking.id)
        assert booking.status == BookingStatus.ACTIVE
        assert booking.seat.seat_status == SeatStatus.OCCUPIED
        db.session.refresh(user)
        assert float(user.wallet_balance) == 820.0
        payment = Payment.query.filter_by(booking_id=booking.id).first()
        assert payment.transaction_id == 'TXN123'

    def test_wallet_payment_insufficient_balance(self, client, user, user_headers, pending_booking):
        user.wallet_balance = 100
        db.session.commit()

        response = client.post('/api/payments/process', headers=user_headers, json={
            'booking_id': pending_booking.id,
            'amount': 1180.0,
            'payment_gateway': 'wallet'
        })

        assert response.status_code == 400
        assert 'Insufficient wallet balance' in response.get_json()['message']
        assert db.session.get(Booking, pending_booking.id).status == BookingStatus.PENDING
        assert Payment.query.count() == 0

    def test_payment_amount_must_match(self, client, user_headers, pending_booking):
        response = client.post('/api/payments/process', headers=user_headers, json={
            'booking_id': pending_booking.id,
            'amount': 10,
            'payment_gateway': 'razorpay'
        })

        assert response.status_code == 400

    def test_cannot_pay_twice(self, client, user_headers, booking):
        response = client.post('/api/payments/process', headers=user_headers, json={
            'booking_id': booking.id,
            'amount': 1180.0,
            'payment_gateway': 'razorpay'
        })

        assert response.status_code == 400

    def test_second_member_cannot_pay_for_taken_seat(self, client, user_headers, plan, seat):
        rival = make_user(name='Rival Member', email='rival@test.com', mobile='9000000001',
                          wallet_balance=2000, referral_code='RIVAL001')
        rival_headers = {'Authorization': f'Bearer {generate_token(rival.id)}'}
        booking_ids = []
        for headers in (user_headers, rival_headers):
            response = client.post('/api/bookings', headers=headers, json={'plan_id': plan.id, 'seat_id': seat.id})
            assert response.status_code == 201
            booking_ids.append(response.get_json()['data']['booking_id'])

        responses = [
            client.post('/api/payments/process', headers=headers, json={
                'booking_id': booking_id,
                'amount': 1180.0,
                'payment_gateway': 'wallet'
            })
            for headers, booking_id in zip((user_headers, rival_headers), booking_ids)
        ]

        assert [r.status_code for r in responses] == [200, 409]
        assert Booking.query.filter_by(seat_id=seat.id, status=BookingStatus.ACTIVE).count() == 1
        assert db.session.get(Booking, booking_ids[1]).status == BookingStatus.PENDING
        assert float(db.session.get(User, rival.id).wallet_balance) == 2000.0
        assert Payment.query.count() == 1

    def test_coupon_usage_counted_on_payment(self, client, user_headers, plan, seat, coupon):
        created = client.post('/api/bookings', headers=user_headers,
                              json={'plan_id': plan.id, 'seat_id': seat.id, 'coupon_code': 'SAVE10'}).get_json()

        client.post('/api/payments/process', headers=user_headers, json={
            'booking_id': created['data']['booking_id'],
            'amount': created['data']['amount'],
            'payment_gateway': 'razorpay'
        })

        assert db.session.get(Coupon, coupon.id).used_count == 1

    def test_admin_refund_to_original_method(self, client, admin_headers, booking):
        payment = booking.payments.first()

        response = client.post(f'/api/payments/{payment.id}/refund', headers=admin_headers,
                               json={'refund_amount': 180, 'refund_reason': 'Goodwill'})

        assert response.status_code == 200
        payment = db.session.get(Payment, payment.id)
        assert payment.status == PaymentStatus.PARTIAL_REFUND
        assert payment.refundable_amount == 1000.0
