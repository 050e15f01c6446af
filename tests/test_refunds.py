from datetime import date, timedelta

from smart_library import db
from smart_library.models.audit import AdminActionLog
from smart_library.models.booking import Booking, BookingStatus
from smart_library.models.notification import Notification, NotificationType, NotificationPriority
from smart_library.models.payment import Payment, PaymentStatus, Refund, RefundRequest, RefundRequestStatus
from smart_library.models.seat import SeatStatus
from smart_library.models.user import User

from conftest import make_booking


def _request_refund(client, headers, booking, request_type='cancellation'):
    return client.post('/api/user-refund-requests', headers=headers, json={
        'booking_id': booking.id,
        'request_type': request_type,
        'reason': 'Moving to another city'
    })


class TestMemberRefundRequests:
    def test_cancellation_seven_days_out_expects_full_refund(self, client, user_headers, booking):
        response = _request_refund(client, user_headers, booking)

        assert response.status_code == 201
        data = response.get_json()['data']
        assert data['expected_amount'] == 1180.0
        assert data['status'] == 'pending'
        assert Notification.query.filter_by(type=NotificationType.REFUND_REQUEST).count() == 1

    def test_cancellation_five_days_out_expects_half(self, client, user, user_headers, plan, second_seat):
        booking = make_booking(user, plan, second_seat, start_date=date.today() + timedelta(days=5))

        response = _request_refund(client, user_headers, booking)

        assert response.get_json()['data']['expected_amount'] == 590.0

    def test_service_issue_expects_full_amount(self, client, user, user_headers, plan, second_seat):
        booking = make_booking(user, plan, second_seat, start_date=date.today())

        response = _request_refund(client, user_headers, booking, request_type='service_issue')

        assert response.get_json()['data']['expected_amount'] == 1180.0

    def test_one_open_request_per_booking(self, client, user_headers, booking):
        _request_refund(client, user_headers, booking)

        response = _request_refund(client, user_headers, booking)

        assert response.status_code == 400

    def test_other_members_booking_not_found(self, client, booking, other_user):
        from smart_library.utils.tokens import generate_token
        headers = {'Authorization': f'Bearer {generate_token(other_user.id)}'}

        response = _request_refund(client, headers, booking)

        assert response.status_code == 404

    def test_unpaid_booking_rejected(self, client, user_headers, pending_booking):
        response = _request_refund(client, user_headers, pending_booking)

        assert response.status_code == 400

    def test_cancel_pending_request(self, client, user_headers, booking):
        request_id = _request_refund(client, user_headers, booking).get_json()['data']['request_id']

        response = client.delete(f'/api/user-refund-requests/{request_id}', headers=user_headers)

        assert response.status_code == 200
        assert db.session.get(RefundRequest, request_id) is None


class TestReviewRefundRequests:
    def test_approve_credits_wallet_and_completes(self, client, user, user_headers, admin_headers, booking):
        request_id = _request_refund(client, user_headers, booking).get_json()['data']['request_id']

        response = client.put(f'/api/admin/refunds/user-requests/{request_id}/review', headers=admin_headers,
                              json={'status': 'approved', 'admin_notes': 'OK'})

        assert response.status_code == 200
        refund_request = db.session.get(RefundRequest, request_id)
        assert refund_request.status == RefundRequestStatus.COMPLETED
        assert refund_request.refund_id is not None
        assert float(db.session.get(User, user.id).wallet_balance) == 3180.0
        payment = db.session.get(Payment, refund_request.payment_id)
        assert payment.status == PaymentStatus.REFUNDED
        assert Notification.query.filter_by(type=NotificationType.REFUND_APPROVED,
                                            priority=NotificationPriority.HIGH).count() == 1
        assert AdminActionLog.query.filter_by(action_type='refund_processed').count() == 1

    def test_reject_notifies_member(self, client, user_headers, admin_headers, booking):
        request_id = _request_refund(client, user_headers, booking).get_json()['data']['request_id']

        response = client.put(f'/api/admin/refunds/user-requests/{request_id}/review', headers=admin_headers,
                              json={'status': 'rejected', 'admin_notes': 'Outside policy'})

        assert response.status_code == 200
        assert db.session.get(RefundRequest, request_id).status == RefundRequestStatus.REJECTED
        assert Notification.query.filter_by(type=NotificationType.REFUND_REJECTED).count() == 1
        assert Refund.query.count() == 0

    def test_finalised_request_cannot_be_reviewed_again(self, client, user_headers, admin_headers, booking):
        request_id = _request_refund(client, user_headers, booking).get_json()['data']['request_id']
        url = f'/api/admin/refunds/user-requests/{request_id}/review'
        client.put(url, headers=admin_headers, json={'status': 'rejected'})

        response = client.put(url, headers=admin_headers, json={'status': 'approved'})

        assert response.status_code == 400

    def test_invalid_review_status(self, client, user_headers, admin_headers, booking):
        request_id = _request_refund(client, user_headers, booking).get_json()['data']['request_id']

        response = client.put(f'/api/admin/refunds/user-requests/{request_id}/review', headers=admin_headers,
                              json={'status': 'completed'})

        assert response.status_code == 400

    def test_request_stats(self, client, user_headers, admin_headers, booking):
        _request_refund(client, user_headers, booking)

        response = client.get('/api/admin/refunds/user-requests/stats', headers=admin_headers)

        stats = response.get_json()['data']['stats']
        assert stats['pending'] == 1
        assert stats['total_requests'] == 1
        assert stats['total_expected_amount'] == 1180.0


class TestAdminRefunds:
    def test_manual_partial_refund(self, client, admin_headers, booking):
        payment = booking.payments.first()

        response = client.post('/api/admin/refunds/process', headers=admin_headers, json={
            'payment_id': payment.id,
            'refund_amount': 200,
            'refund_reason': 'Broken chair'
        })

        assert response.status_code == 201
        refund = response.get_json()['data']['refund']
        assert refund['refund_type'] == 'partial'
        assert refund['status'] == 'completed'

    def test_refund_cannot_exceed_refundable(self, client, admin_headers, booking):
        payment = booking.payments.first()

        response = client.post('/api/admin/refunds/process', headers=admin_headers, json={
            'payment_id': payment.id,
            'refund_amount': 5000,
            'refund_reason': 'Too much'
        })

        assert response.status_code == 400
        assert Refund.query.count() == 0

    def test_auto_refund_cancels_and_frees_seat(self, client, admin_headers, booking, seat):
        response = client.post(f'/api/admin/refunds/auto-refund/{booking.id}', headers=admin_headers)

        assert response.status_code == 200
        assert response.get_json()['data']['refund']['refund_amount'] == 1180.0
        booking = db.session.get(Booking, booking.id)
        assert booking.status == BookingStatus.CANCELLED
        assert booking.seat.seat_status == SeatStatus.AVAILABLE

    def test_auto_refund_too_close_to_start(self, client, user, admin_headers, plan, second_seat):
        booking = make_booking(user, plan, second_seat, start_date=date.today() + timedelta(days=1))

        response = client.post(f'/api/admin/refunds/auto-refund/{booking.id}', headers=admin_headers)

        assert response.status_code == 400
        assert db.session.get(Booking, booking.id).status == BookingStatus.ACTIVE

    def test_refund_stats(self, client, admin_headers, booking):
        client.post(f'/api/admin/refunds/auto-refund/{booking.id}', headers=admin_headers)

        response = client.get('/api/admin/refunds/stats/summary', headers=admin_headers)

        stats = response.get_json()['data']['stats']
        assert stats['total_refunds'] == 1
        assert stats['completed_amount'] == 1180.0
