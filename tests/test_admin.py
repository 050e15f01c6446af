from datetime import date, timedelta

from smart_library import db
from smart_library.models.audit import AdminActionLog
from smart_library.models.finance import Expense
from smart_library.models.user import User

from conftest import make_booking, make_user


class TestDashboard:
    def test_member_counts_and_collection(self, client, admin_headers, booking, other_user):
        response = client.get('/api/admin/dashboard', headers=admin_headers)

        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['total_members'] == 2
        assert data['active_members'] == 1
        assert data['inactive_members'] == 1
        assert data['todays_purchases'] == 1
        assert data['todays_collection'] == 1180.0

    def test_expiring_buckets(self, client, admin_headers, user, plan, seat):
        make_booking(user, plan, seat, start_date=date.today() - timedelta(days=28))

        data = client.get('/api/admin/dashboard', headers=admin_headers).get_json()['data']

        assert data['expiring'] == {'0_3': 1, '4_7': 0, '8_15': 0}

    def test_todays_birthdays(self, client, admin_headers, app):
        member = make_user(name='Birthday Member', email='bday@test.com', mobile='9999999999',
                           referral_code='BDAY0001')
        today = date.today()
        member.dob = date(1996, today.month, today.day)
        db.session.commit()

        data = client.get('/api/admin/dashboard', headers=admin_headers).get_json()['data']

        assert [b['name'] for b in data['todays_birthdays']] == ['Birthday Member']


class TestMembers:
    def test_search_members(self, client, admin_headers, user, other_user):
        response = client.get('/api/admin/members?search=other', headers=admin_headers)

        members = response.get_json()['data']['members']
        assert [m['email'] for m in members] == ['other@test.com']

    def test_member_booking_state(self, client, admin_headers, booking, user):
        members = client.get('/api/admin/members', headers=admin_headers).get_json()['data']['members']

        member = next(m for m in members if m['id'] == user.id)
        assert member['has_active_booking'] is True
        assert member['last_booking_end'] == booking.end_date.isoformat()

    def test_block_requires_super_admin(self, client, admin_headers, user):
        response = client.put(f'/api/admin/members/{user.id}/block', headers=admin_headers,
                              json={'is_blocked': True})

        assert response.status_code == 403

    def test_block_member(self, client, super_admin_headers, user):
        response = client.put(f'/api/admin/members/{user.id}/block', headers=super_admin_headers,
                              json={'is_blocked': True})

        assert response.status_code == 200
        assert db.session.get(User, user.id).is_blocked is True
        assert AdminActionLog.query.filter_by(action_type='user_blocked').count() == 1


class TestReports:
    def test_month_report(self, client, admin_headers, booking, second_seat):
        response = client.get('/api/admin/reports?period=month', headers=admin_headers)

        data = response.get_json()['data']
        assert data['total_bookings'] == 1
        assert data['revenue'] == 1180.0
        assert data['seats']['total'] == 2
        assert len(data['booking_trend']) == 7
        assert data['booking_trend'][-1] == {'date': date.today().isoformat(), 'count': 1}

    def test_invalid_period(self, client, admin_headers):
        response = client.get('/api/admin/reports?period=decade', headers=admin_headers)

        assert response.status_code == 400


class TestExpenses:
    def test_create_and_list(self, client, admin_headers):
        response = client.post('/api/admin/expenses', headers=admin_headers, json={
            'title': 'Electricity', 'amount': 2500, 'category': 'utilities'
        })
        assert response.status_code == 201

        response = client.get('/api/admin/expenses', headers=admin_headers)

        data = response.get_json()['data']
        assert data['total'] == 2500.0
        assert data['expenses'][0]['title'] == 'Electricity'

    def test_amount_must_be_positive(self, client, admin_headers):
        response = client.post('/api/admin/expenses', headers=admin_headers, json={'title': 'Oops', 'amount': 0})

        assert response.status_code == 400

    def test_todays_expense_on_dashboard(self, client, admin, admin_headers):
        db.session.add(Expense(title='Water', amount=300, created_by=admin.id))
        db.session.commit()

        data = client.get('/api/admin/dashboard', headers=admin_headers).get_json()['data']

        assert data['todays_expense'] == 300.0


class TestGatewaySettings:
    def test_defaults_before_saving(self, client, admin_headers):
        response = client.get('/api/admin/gateway-settings', headers=admin_headers)

        assert response.get_json()['data']['settings']['gst_percentage'] == 18.0

    def test_save_then_update(self, client, admin_headers):
        response = client.post('/api/admin/gateway-settings', headers=admin_headers,
                               json={'gateway_name': 'razorpay', 'gst_percentage': 12})
        assert response.status_code == 201

        response = client.post('/api/admin/gateway-settings', headers=admin_headers, json={'gst_percentage': 5})

        assert response.status_code == 200
        assert response.get_json()['data']['settings']['gst_percentage'] == 5.0

    def test_saved_gst_applies_to_new_bookings(self, client, admin_headers, user_headers, plan, seat):
        client.post('/api/admin/gateway-settings', headers=admin_headers, json={'gst_percentage': 12})

        response = client.post('/api/bookings', headers=user_headers, json={'plan_id': plan.id, 'seat_id': seat.id})

        assert response.get_json()['data']['amount'] == 1120.0

    def test_negative_value_rejected(self, client, admin_headers):
        response = client.post('/api/admin/gateway-settings', headers=admin_headers, json={'service_charge': -1})

        assert response.status_code == 400
