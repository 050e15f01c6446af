from datetime import timedelta

from smart_library import db
from smart_library.models.audit import AdminActionLog
from smart_library.models.booking import Booking, BookingModification, BookingStatus
from smart_library.models.seat import Seat, SeatStatus
from smart_library.models.user import User

from conftest import make_booking


class TestWalletControl:
    def test_view_member_wallet(self, client, admin_headers, user):
        response = client.get(f'/api/admin/user-control/{user.id}/wallet', headers=admin_headers)

        data = response.get_json()['data']
        assert data['user']['wallet_balance'] == 2000.0
        assert data['transactions'] == []

    def test_credit_wallet_is_audited(self, client, admin, admin_headers, user):
        response = client.post(f'/api/admin/user-control/{user.id}/wallet/credit', headers=admin_headers,
                               json={'amount': 150, 'reason': 'Compensation'})

        assert response.status_code == 200
        assert response.get_json()['message'] == 'Wallet credited successfully'
        assert response.get_json()['data']['new_balance'] == 2150.0
        log = AdminActionLog.query.filter_by(action_type='wallet_credit').one()
        assert log.admin_id == admin.id
        assert log.target_user_id == user.id

    def test_debit_wallet(self, client, admin_headers, user):
        response = client.post(f'/api/admin/user-control/{user.id}/wallet/debit', headers=admin_headers,
                               json={'amount': 500})

        assert response.status_code == 200
        assert response.get_json()['message'] == 'Wallet debited successfully'
        assert float(db.session.get(User, user.id).wallet_balance) == 1500.0

    def test_debit_beyond_balance(self, client, admin_headers, user):
        response = client.post(f'/api/admin/user-control/{user.id}/wallet/debit', headers=admin_headers,
                               json={'amount': 5000})

        assert response.status_code == 400
        assert AdminActionLog.query.count() == 0

    def test_unknown_member(self, client, admin_headers):
        response = client.get('/api/admin/user-control/999/wallet', headers=admin_headers)

        assert response.status_code == 404


class TestBookingControl:
    def test_extend_booking(self, client, admin_headers, user, booking):
        old_end = booking.end_date

        response = client.post(f'/api/admin/user-control/{user.id}/bookings/{booking.id}/extend',
                               headers=admin_headers, json={'extend_days': 7, 'reason': 'Goodwill'})

        assert response.status_code == 200
        assert response.get_json()['data']['new_end_date'] == (old_end + timedelta(days=7)).isoformat()
        modification = BookingModification.query.one()
        assert modification.modification_type == 'extend'
        assert AdminActionLog.query.filter_by(action_type='booking_extend').count() == 1

    def test_extend_rejects_non_positive_days(self, client, admin_headers, user, booking):
        response = client.post(f'/api/admin/user-control/{user.id}/bookings/{booking.id}/extend',
                               headers=admin_headers, json={'extend_days': 0})

        assert response.status_code == 400

    def test_booking_must_belong_to_member(self, client, admin_headers, other_user, booking):
        response = client.post(f'/api/admin/user-control/{other_user.id}/bookings/{booking.id}/extend',
                               headers=admin_headers, json={'extend_days': 3})

        assert response.status_code == 404

    def test_change_seat(self, client, admin_headers, user, booking, seat, second_seat):
        response = client.post(f'/api/admin/user-control/{user.id}/bookings/{booking.id}/change-seat',
                               headers=admin_headers, json={'new_seat_id': second_seat.id})

        assert response.status_code == 200
        assert response.get_json()['data'] == {'old_seat': 'S1', 'new_seat': 'S2'}
        assert db.session.get(Seat, seat.id).seat_status == SeatStatus.AVAILABLE
        assert db.session.get(Seat, second_seat.id).seat_status == SeatStatus.OCCUPIED
        assert db.session.get(Booking, booking.id).seat_id == second_seat.id

    def test_change_to_occupied_seat_conflicts(self, client, admin_headers, user, other_user, plan, booking,
                                               second_seat):
        make_booking(other_user, plan, second_seat)

        response = client.post(f'/api/admin/user-control/{user.id}/bookings/{booking.id}/change-seat',
                               headers=admin_headers, json={'new_seat_id': second_seat.id})

        assert response.status_code == 409

    def test_cancel_with_refund(self, client, admin_headers, user, booking, seat):
        response = client.post(f'/api/admin/user-control/{user.id}/bookings/{booking.id}/cancel',
                               headers=admin_headers, json={'reason': 'Left town', 'process_refund': True})

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['refund']['refund_amount'] == 1180.0
        assert data['refund_message'] is None
        assert db.session.get(Booking, booking.id).status == BookingStatus.CANCELLED
        assert db.session.get(Seat, seat.id).seat_status == SeatStatus.AVAILABLE
        assert float(db.session.get(User, user.id).wallet_balance) == 3180.0

    def test_cancel_ineligible_booking_still_cancels(self, client, admin_headers, user, plan, second_seat):
        from datetime import date
        booking = make_booking(user, plan, second_seat, start_date=date.today())

        response = client.post(f'/api/admin/user-control/{user.id}/bookings/{booking.id}/cancel',
                               headers=admin_headers, json={'process_refund': True})

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['refund'] is None
        assert 'not eligible' in data['refund_message']
        assert db.session.get(Booking, booking.id).status == BookingStatus.CANCELLED

    def test_cancel_twice(self, client, admin_headers, user, booking):
        url = f'/api/admin/user-control/{user.id}/bookings/{booking.id}/cancel'
        client.post(url, headers=admin_headers, json={})

        response = client.post(url, headers=admin_headers, json={})

        assert response.status_code == 400
